"""数据内容模型：文件、出版物、可视化、数据行。"""

from datetime import datetime

from sqlalchemy import BigInteger, Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from portal_api.models.base import Base, IdMixin, SoftDeleteMixin, TimestampMixin
from portal_api.models.enums import FileStatus, PublicationStatus, StorageType, VisualizationStatus


class StoredFile(Base, IdMixin, TimestampMixin):
    """上传文件元数据，文件内容落在存储后端。"""

    __tablename__ = "files"

    # 存储后的文件名（随机化）。
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    # 客户端上传时的原始文件名。
    original_name: Mapped[str] = mapped_column(String(256), nullable=False)
    extension: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    size: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    mime_type: Mapped[str] = mapped_column(String(128), nullable=False)
    # 对外访问路径。
    path: Mapped[str] = mapped_column(String(512), nullable=False)
    # 存储后端内的对象键。
    storage_path: Mapped[str] = mapped_column(String(512), nullable=False)
    storage_type: Mapped[str] = mapped_column(String(32), nullable=False, default=StorageType.LOCAL)
    dataset_id: Mapped[str | None] = mapped_column(String(36), index=True)
    uploaded_by: Mapped[str] = mapped_column(String(36), nullable=False)
    # 文件状态，deleted 即逻辑删除。
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=FileStatus.READY)


class Publication(Base, IdMixin, TimestampMixin, SoftDeleteMixin):
    """基于数据集的出版物。"""

    __tablename__ = "publications"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    doi: Mapped[str | None] = mapped_column(String(128))
    publisher: Mapped[str | None] = mapped_column(String(256))
    published_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    dataset_id: Mapped[str | None] = mapped_column(String(36), index=True)
    organization_id: Mapped[str | None] = mapped_column(String(64), index=True)
    # 作者与标签均为 JSON 数组文本。
    authors: Mapped[str | None] = mapped_column(Text)
    tags: Mapped[str | None] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=PublicationStatus.DRAFT)
    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    view_count: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    download_count: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    created_by: Mapped[str] = mapped_column(String(36), nullable=False)
    updated_by: Mapped[str] = mapped_column(String(36), nullable=False)


class Visualization(Base, IdMixin, TimestampMixin, SoftDeleteMixin):
    """图表、地图等可视化配置。"""

    __tablename__ = "visualizations"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    # 图表类型（bar/line/pie/map/...）。
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    # 渲染配置 JSON 文本。
    config: Mapped[str] = mapped_column(Text, nullable=False)
    dataset_id: Mapped[str | None] = mapped_column(String(36), index=True)
    organization_id: Mapped[str | None] = mapped_column(String(64), index=True)
    topic_id: Mapped[str | None] = mapped_column(String(36), index=True)
    is_highlight: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=VisualizationStatus.DRAFT)
    created_by: Mapped[str] = mapped_column(String(36), nullable=False)
    updated_by: Mapped[str] = mapped_column(String(36), nullable=False)


class DataRow(Base, IdMixin, TimestampMixin, SoftDeleteMixin):
    """数据集中的一行明细数据。"""

    __tablename__ = "data_rows"

    dataset_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    # 行序号，从 0 开始。
    row_index: Mapped[int] = mapped_column(Integer, nullable=False)
    # 行内容 JSON 文本。
    data: Mapped[str] = mapped_column(Text, nullable=False)
    created_by: Mapped[str] = mapped_column(String(36), nullable=False)
