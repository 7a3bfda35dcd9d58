"""用户管理相关请求与响应结构。"""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field

from portal_api.schemas.common import BaseSchema


class UserData(BaseSchema):
    """用户资料，不含口令哈希。"""

    id: str
    organization_id: str
    role_id: str
    name: str
    username: str
    email: str
    employee_id: str | None = None
    position: str | None = None
    address: str | None = None
    phone: str | None = None
    thumbnail: str | None = None
    bio: str | None = None
    birth_date: date | None = None
    status: str
    last_login_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class UserUpdateRequest(BaseModel):
    """更新用户资料请求体。"""

    name: str = Field(min_length=2, max_length=128, description="新的展示名。", examples=["Alice Chen"])
    position: str | None = Field(default=None, max_length=128, description="职位。")
    address: str | None = Field(default=None, description="联系地址。")
    phone: str | None = Field(default=None, max_length=32, description="联系电话。")
    bio: str | None = Field(default=None, max_length=2000, description="个人简介。")
    thumbnail: str | None = Field(default=None, max_length=512, description="头像地址。")
    birth_date: date | None = Field(default=None, description="出生日期。")


class UserStatusUpdateRequest(BaseModel):
    """更新用户状态请求体。"""

    status: Literal["active", "inactive", "suspended"] = Field(description="目标状态。")
