"""数据目录字典模型：标签、主题、业务领域、计量单位。"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from portal_api.models.base import Base, CreatedAtMixin, IdMixin


class Tag(Base, IdMixin, CreatedAtMixin):
    """数据集标签。"""

    __tablename__ = "tags"

    name: Mapped[str] = mapped_column(String(128), nullable=False)
    slug: Mapped[str] = mapped_column(String(128), nullable=False, index=True)


class Topic(Base, IdMixin, CreatedAtMixin):
    """数据集主题。"""

    __tablename__ = "topics"

    name: Mapped[str] = mapped_column(String(128), nullable=False)
    slug: Mapped[str] = mapped_column(String(128), nullable=False, index=True)


class BusinessField(Base, IdMixin, CreatedAtMixin):
    """业务领域。"""

    __tablename__ = "business_fields"

    name: Mapped[str] = mapped_column(String(128), nullable=False)
    slug: Mapped[str] = mapped_column(String(128), nullable=False, index=True)


class Unit(Base, IdMixin, CreatedAtMixin):
    """计量单位。"""

    __tablename__ = "units"

    name: Mapped[str] = mapped_column(String(128), nullable=False)
    # 单位符号，例如 kg、%。
    symbol: Mapped[str] = mapped_column(String(32), nullable=False)
