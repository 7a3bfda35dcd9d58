"""数据集聚合模型。"""

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from portal_api.models.base import Base, IdMixin, TimestampMixin
from portal_api.models.enums import DatasetStatus, ValidationStatus


class Dataset(Base, IdMixin, TimestampMixin):
    """数据集主体。

    单值关联（组织/单位/主题/业务领域）与多值标签均为逻辑关联，
    读取时通过左连接与链接表组装。
    """

    __tablename__ = "datasets"

    name: Mapped[str] = mapped_column(String(256), nullable=False)
    # 由名称派生，名称更新时重新计算，不保证唯一。
    slug: Mapped[str] = mapped_column(String(256), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text)
    # 数据覆盖周期，例如 2024 或 2020-2024。
    period: Mapped[str | None] = mapped_column(String(64))
    unit_id: Mapped[str | None] = mapped_column(String(36), index=True)
    business_field_id: Mapped[str | None] = mapped_column(String(36), index=True)
    image: Mapped[str | None] = mapped_column(String(512))
    topic_id: Mapped[str | None] = mapped_column(String(36), index=True)
    # 所属组织 ID，取自创建者令牌。
    organization_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    reference_id: Mapped[str | None] = mapped_column(String(64))
    # 数据分级与分类，自由文本。
    classification: Mapped[str] = mapped_column(String(64), nullable=False)
    category: Mapped[str] = mapped_column(String(64), nullable=False)
    data_fixed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # 校验状态（valid/invalid/pending）。
    validation_status: Mapped[str] = mapped_column(String(32), nullable=False, default=ValidationStatus.PENDING)
    # 扩展元数据，原样保存客户端提交的文本。
    metadatas: Mapped[str | None] = mapped_column(Text)
    created_by: Mapped[str] = mapped_column(String(36), nullable=False)
    updated_by: Mapped[str | None] = mapped_column(String(36))
    is_highlight: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # 生命周期状态（draft/published/archived），archived 即逻辑删除。
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=DatasetStatus.DRAFT, index=True)


class DatasetTagLink(Base):
    """数据集与标签的多对多链接。"""

    __tablename__ = "dataset_tag_link"

    dataset_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    tag_id: Mapped[str] = mapped_column(String(36), primary_key=True, index=True)
