"""组织模型。"""

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from portal_api.models.base import Base, IdMixin, TimestampMixin
from portal_api.models.enums import OrganizationStatus


class Organization(Base, IdMixin, TimestampMixin):
    """数据发布组织。"""

    __tablename__ = "organizations"

    # 组织编码，全局唯一，统一大写存储。
    code: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    # 组织名称。
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    # 由名称派生的 URL 短标识。
    slug: Mapped[str] = mapped_column(String(256), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text)
    logo_url: Mapped[str | None] = mapped_column(String(512))
    phone_number: Mapped[str | None] = mapped_column(String(32))
    address: Mapped[str | None] = mapped_column(Text)
    website_url: Mapped[str | None] = mapped_column(String(512))
    email: Mapped[str | None] = mapped_column(String(256))
    # 数据集与地图集计数器，递减时截断到 0。
    total_datasets: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    public_datasets: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_mapsets: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    public_mapsets: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # 组织状态（active/inactive/suspended）。
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=OrganizationStatus.ACTIVE)
    created_by: Mapped[str | None] = mapped_column(String(36))
    updated_by: Mapped[str | None] = mapped_column(String(36))
