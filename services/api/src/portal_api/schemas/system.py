"""系统结构：配置项与外部集成。"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from portal_api.schemas.common import BaseSchema


class SettingData(BaseSchema):
    """配置项详情。"""

    id: str
    key: str
    value: str
    type: str
    category: str
    user_id: str | None = None
    is_public: bool
    created_at: datetime
    updated_at: datetime


class SettingCreateRequest(BaseModel):
    """创建配置项请求体。"""

    key: str = Field(min_length=1, max_length=100, description="配置键。", examples=["site.title"])
    value: str = Field(description="配置值文本。")
    type: Literal["string", "number", "boolean", "json"] = Field(description="取值类型。")
    category: Literal["system", "user", "organization"] = Field(description="归属范围。")
    user_id: str | None = Field(default=None, max_length=36, description="所属用户 ID，为空表示全局。")
    is_public: bool = Field(default=False, description="是否对匿名访问公开。")


class SettingUpdateRequest(BaseModel):
    """更新配置项请求体。"""

    value: str = Field(description="配置值文本。")
    type: Literal["string", "number", "boolean", "json"] = Field(description="取值类型。")
    is_public: bool = Field(default=False, description="是否对匿名访问公开。")


class IntegrationData(BaseSchema):
    """外部集成详情，不含访问凭据。"""

    id: str
    name: str
    type: str
    description: str | None = None
    config: str
    endpoint: str | None = None
    status: str
    last_sync_at: datetime | None = None
    organization_id: str | None = None
    created_by: str
    created_at: datetime
    updated_at: datetime


class IntegrationCreateRequest(BaseModel):
    """创建外部集成请求体。"""

    name: str = Field(min_length=3, max_length=100, description="集成名称。")
    type: Literal["api", "webhook", "database", "custom"] = Field(description="集成类型。")
    description: str | None = Field(default=None, max_length=500, description="说明。")
    config: str = Field(min_length=2, description="连接配置 JSON 文本。")
    endpoint: str | None = Field(default=None, max_length=512, description="目标地址。")
    api_key: str | None = Field(default=None, max_length=512, description="访问凭据。")
    organization_id: str | None = Field(default=None, max_length=64, description="所属组织 ID。")


class IntegrationUpdateRequest(BaseModel):
    """更新外部集成请求体，api_key 省略时保留原值。"""

    name: str = Field(min_length=3, max_length=100, description="集成名称。")
    description: str | None = Field(default=None, max_length=500, description="说明。")
    config: str = Field(min_length=2, description="连接配置 JSON 文本。")
    endpoint: str | None = Field(default=None, max_length=512, description="目标地址。")
    api_key: str | None = Field(default=None, max_length=512, description="新的访问凭据。")


class IntegrationStatusUpdateRequest(BaseModel):
    """更新外部集成状态请求体。"""

    status: Literal["active", "inactive", "error"] = Field(description="目标状态。")
