"""数据目录字典结构：标签、主题、业务领域、计量单位。"""

from datetime import datetime

from pydantic import BaseModel, Field

from portal_api.schemas.common import BaseSchema


class NamedItemData(BaseSchema):
    """带短标识的字典项（标签/主题/业务领域）。"""

    id: str
    name: str
    slug: str
    created_at: datetime


class NamedItemRequest(BaseModel):
    """创建或更新字典项请求体，短标识由名称派生。"""

    name: str = Field(min_length=2, max_length=128, description="名称。", examples=["Kependudukan"])


class UnitData(BaseSchema):
    """计量单位。"""

    id: str
    name: str
    symbol: str
    created_at: datetime


class UnitRequest(BaseModel):
    """创建或更新计量单位请求体。"""

    name: str = Field(min_length=1, max_length=128, description="单位名称。", examples=["Kilogram"])
    symbol: str = Field(min_length=1, max_length=32, description="单位符号。", examples=["kg"])
