"""组织相关请求与响应结构。"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from portal_api.schemas.common import BaseSchema


class OrganizationData(BaseSchema):
    """组织详情。"""

    id: str
    code: str
    name: str
    slug: str
    description: str | None = None
    logo_url: str | None = None
    phone_number: str | None = None
    address: str | None = None
    website_url: str | None = None
    email: str | None = None
    total_datasets: int
    public_datasets: int
    total_mapsets: int
    public_mapsets: int
    status: str
    created_by: str | None = None
    updated_by: str | None = None
    created_at: datetime
    updated_at: datetime


class OrganizationCreateRequest(BaseModel):
    """创建组织请求体。"""

    code: str = Field(min_length=2, max_length=20, description="组织编码，保存时统一大写。", examples=["BPS"])
    name: str = Field(min_length=2, max_length=256, description="组织名称。")
    description: str | None = Field(default=None, description="组织简介。")
    logo_url: str | None = Field(default=None, max_length=512, description="标志图片地址。")
    phone_number: str | None = Field(default=None, max_length=32, description="联系电话。")
    address: str | None = Field(default=None, description="联系地址。")
    website_url: str | None = Field(default=None, max_length=512, description="官网地址。")
    email: str | None = Field(default=None, max_length=256, description="联系邮箱。")


class OrganizationUpdateRequest(BaseModel):
    """更新组织请求体，可选字段传空字符串即清空。"""

    name: str = Field(min_length=2, max_length=256, description="组织名称。")
    description: str | None = Field(default=None, description="组织简介。")
    logo_url: str | None = Field(default=None, max_length=512, description="标志图片地址。")
    phone_number: str | None = Field(default=None, max_length=32, description="联系电话。")
    address: str | None = Field(default=None, description="联系地址。")
    website_url: str | None = Field(default=None, max_length=512, description="官网地址。")
    email: str | None = Field(default=None, max_length=256, description="联系邮箱。")


class OrganizationStatusUpdateRequest(BaseModel):
    """更新组织状态请求体。"""

    status: Literal["active", "inactive", "suspended"] = Field(description="目标状态。")
