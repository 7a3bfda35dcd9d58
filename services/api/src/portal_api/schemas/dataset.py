"""数据集相关请求与响应结构。"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from portal_api.schemas.common import BaseSchema


class DatasetOrganizationData(BaseSchema):
    """数据集所属组织摘要。"""

    id: str
    code: str
    name: str
    slug: str


class DatasetUnitData(BaseSchema):
    """数据集计量单位摘要。"""

    id: str
    name: str
    symbol: str


class DatasetNamedData(BaseSchema):
    """主题、业务领域与标签摘要。"""

    id: str
    name: str
    slug: str


class DatasetData(BaseSchema):
    """数据集聚合详情。"""

    id: str
    name: str
    slug: str
    description: str | None = None
    period: str | None = None
    unit_id: str | None = None
    business_field_id: str | None = None
    image: str | None = None
    topic_id: str | None = None
    organization_id: str
    reference_id: str | None = None
    classification: str
    category: str
    data_fixed: bool
    validation_status: str
    metadatas: str | None = None
    created_by: str
    updated_by: str | None = None
    is_highlight: bool
    status: str
    created_at: datetime
    updated_at: datetime
    organization: DatasetOrganizationData | None = None
    unit: DatasetUnitData | None = None
    business_field: DatasetNamedData | None = None
    topic: DatasetNamedData | None = None
    tags: list[DatasetNamedData] = Field(default_factory=list)


class DatasetCreateRequest(BaseModel):
    """创建数据集请求体。"""

    name: str = Field(min_length=3, max_length=256, description="数据集名称。", examples=["Jumlah Penduduk 2024"])
    description: str | None = Field(default=None, description="数据集描述。")
    period: str | None = Field(default=None, max_length=64, description="数据覆盖周期。")
    unit_id: str | None = Field(default=None, max_length=36, description="计量单位 ID。")
    business_field_id: str | None = Field(default=None, max_length=36, description="业务领域 ID。")
    image: str | None = Field(default=None, max_length=512, description="封面图片地址。")
    topic_id: str | None = Field(default=None, max_length=36, description="主题 ID。")
    reference_id: str | None = Field(default=None, max_length=64, description="外部参考编号。")
    classification: str = Field(min_length=1, max_length=64, description="数据分级。")
    category: str = Field(min_length=1, max_length=64, description="数据分类。")
    data_fixed: bool = Field(default=False, description="数据是否已定稿。")
    validation_status: Literal["valid", "invalid", "pending"] | None = Field(default=None, description="校验状态。")
    metadatas: str | None = Field(default=None, description="扩展元数据文本。")
    is_highlight: bool = Field(default=False, description="是否首页推荐。")
    tag_ids: list[str] = Field(default_factory=list, description="标签 ID 列表。")


class DatasetUpdateRequest(BaseModel):
    """更新数据集请求体；tag_ids 省略时保留原标签。"""

    name: str = Field(min_length=3, max_length=256, description="数据集名称。")
    description: str | None = Field(default=None, description="数据集描述。")
    period: str | None = Field(default=None, max_length=64, description="数据覆盖周期。")
    unit_id: str | None = Field(default=None, max_length=36, description="计量单位 ID。")
    business_field_id: str | None = Field(default=None, max_length=36, description="业务领域 ID。")
    image: str | None = Field(default=None, max_length=512, description="封面图片地址。")
    topic_id: str | None = Field(default=None, max_length=36, description="主题 ID。")
    reference_id: str | None = Field(default=None, max_length=64, description="外部参考编号。")
    classification: str = Field(min_length=1, max_length=64, description="数据分级。")
    category: str = Field(min_length=1, max_length=64, description="数据分类。")
    data_fixed: bool = Field(default=False, description="数据是否已定稿。")
    validation_status: Literal["valid", "invalid", "pending"] = Field(default="pending", description="校验状态。")
    metadatas: str | None = Field(default=None, description="扩展元数据文本。")
    is_highlight: bool = Field(default=False, description="是否首页推荐。")
    tag_ids: list[str] | None = Field(default=None, description="新的完整标签 ID 列表。")


class DatasetStatusUpdateRequest(BaseModel):
    """更新数据集状态请求体。"""

    status: Literal["draft", "published", "archived"] = Field(description="目标状态。")
