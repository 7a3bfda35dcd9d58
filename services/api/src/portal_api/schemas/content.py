"""数据内容结构：文件、出版物、可视化、数据行。"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from portal_api.schemas.common import BaseSchema

VisualizationTypeLiteral = Literal["bar", "line", "pie", "map", "table", "scatter", "area", "histogram"]


class FileData(BaseSchema):
    """上传文件元数据。"""

    id: str
    name: str
    original_name: str
    extension: str
    size: int
    mime_type: str
    path: str
    storage_path: str
    storage_type: str
    dataset_id: str | None = None
    uploaded_by: str
    status: str
    created_at: datetime
    updated_at: datetime


class FileStatusUpdateRequest(BaseModel):
    """更新文件状态请求体。"""

    status: Literal["uploading", "processing", "ready", "failed"] = Field(description="目标状态。")


class PublicationData(BaseSchema):
    """出版物详情。"""

    id: str
    title: str
    description: str | None = None
    content: str
    doi: str | None = None
    publisher: str | None = None
    published_date: datetime | None = None
    dataset_id: str | None = None
    organization_id: str | None = None
    authors: str | None = None
    tags: str | None = None
    status: str
    is_featured: bool
    view_count: int
    download_count: int
    created_by: str
    updated_by: str
    created_at: datetime
    updated_at: datetime


class PublicationRequest(BaseModel):
    """创建或更新出版物请求体。"""

    title: str = Field(min_length=3, max_length=200, description="标题。")
    description: str | None = Field(default=None, max_length=1000, description="摘要。")
    content: str = Field(min_length=1, description="正文内容。")
    doi: str | None = Field(default=None, max_length=128, description="DOI 编号。")
    publisher: str | None = Field(default=None, max_length=256, description="出版方。")
    published_date: datetime | None = Field(default=None, description="出版日期。")
    dataset_id: str | None = Field(default=None, max_length=36, description="关联数据集 ID。")
    organization_id: str | None = Field(default=None, max_length=64, description="关联组织 ID。")
    authors: list[str] = Field(default_factory=list, description="作者列表。")
    tags: list[str] = Field(default_factory=list, description="标签列表。")
    is_featured: bool = Field(default=False, description="是否精选。")


class PublicationStatusUpdateRequest(BaseModel):
    """更新出版物状态请求体。"""

    status: Literal["draft", "published", "archived"] = Field(description="目标状态。")


class VisualizationData(BaseSchema):
    """可视化详情。"""

    id: str
    title: str
    description: str | None = None
    type: str
    config: str
    dataset_id: str | None = None
    organization_id: str | None = None
    topic_id: str | None = None
    is_highlight: bool
    status: str
    created_by: str
    updated_by: str
    created_at: datetime
    updated_at: datetime


class VisualizationRequest(BaseModel):
    """创建或更新可视化请求体。"""

    title: str = Field(min_length=3, max_length=200, description="标题。")
    description: str | None = Field(default=None, max_length=1000, description="说明。")
    type: VisualizationTypeLiteral = Field(description="图表类型。")
    config: dict[str, Any] = Field(default_factory=dict, description="渲染配置。")
    dataset_id: str | None = Field(default=None, max_length=36, description="关联数据集 ID。")
    organization_id: str | None = Field(default=None, max_length=64, description="关联组织 ID。")
    topic_id: str | None = Field(default=None, max_length=36, description="关联主题 ID。")
    is_highlight: bool = Field(default=False, description="是否首页推荐。")


class VisualizationStatusUpdateRequest(BaseModel):
    """更新可视化状态请求体。"""

    status: Literal["draft", "published", "archived"] = Field(description="目标状态。")


class VisualizationStatsData(BaseSchema):
    """可视化数量统计。"""

    total: int
    by_status: dict[str, int]
    by_type: dict[str, int]
    highlighted: int


class DataRowData(BaseSchema):
    """数据行。"""

    id: str
    dataset_id: str
    row_index: int
    data: str
    created_by: str
    created_at: datetime
    updated_at: datetime


class DataRowCreateRequest(BaseModel):
    """新增数据行请求体。"""

    row_index: int = Field(ge=0, description="行序号。")
    data: dict[str, Any] = Field(description="行内容。")


class DataRowBulkCreateRequest(BaseModel):
    """批量新增数据行请求体。"""

    rows: list[DataRowCreateRequest] = Field(min_length=1, max_length=1000, description="数据行列表。")


class DataRowUpdateRequest(BaseModel):
    """更新数据行请求体。"""

    data: dict[str, Any] = Field(description="新的行内容。")


class DataRowStatsData(BaseSchema):
    """数据集行数统计。"""

    dataset_id: str
    total_rows: int
    max_row_index: int | None = None
