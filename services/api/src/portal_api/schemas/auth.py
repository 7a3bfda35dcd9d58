"""认证相关请求与响应结构。"""

from pydantic import BaseModel, Field

from portal_api.schemas.common import ALPHANUMERIC_PATTERN, EMAIL_PATTERN, BaseSchema


class AuthLoginRequest(BaseModel):
    """登录请求体。"""

    email: str = Field(
        min_length=3,
        max_length=256,
        pattern=EMAIL_PATTERN,
        description="登录邮箱。",
        examples=["alice@example.com"],
    )
    password: str = Field(min_length=1, max_length=256, description="登录密码。", examples=["password123"])


class AuthRegisterRequest(BaseModel):
    """注册请求体。"""

    organization_id: str = Field(min_length=1, max_length=64, description="所属组织 ID。")
    role_id: str = Field(min_length=1, max_length=64, description="角色 ID。")
    name: str = Field(min_length=1, max_length=128, description="展示名。", examples=["Alice"])
    username: str = Field(
        min_length=3,
        max_length=64,
        pattern=ALPHANUMERIC_PATTERN,
        description="登录用户名，仅字母数字。",
        examples=["alice01"],
    )
    email: str = Field(min_length=3, max_length=256, pattern=EMAIL_PATTERN, description="登录邮箱。")
    password: str = Field(min_length=8, max_length=256, description="登录密码，至少 8 位。")
    employee_id: str | None = Field(default=None, max_length=64, description="工号。")
    position: str | None = Field(default=None, max_length=128, description="职位。")
    phone: str | None = Field(default=None, max_length=32, description="联系电话。")
    address: str | None = Field(default=None, description="联系地址。")


class AuthRefreshRequest(BaseModel):
    """刷新令牌请求体。"""

    refresh_token: str = Field(min_length=1, description="登录或上次刷新得到的刷新令牌。")


class AuthLogoutRequest(BaseModel):
    """登出请求体。"""

    refresh_token: str = Field(min_length=1, description="需要吊销的刷新令牌。")


class AuthUserData(BaseSchema):
    """认证响应中的用户摘要。"""

    id: str = Field(description="用户 ID。")
    organization_id: str = Field(description="所属组织 ID。")
    role_id: str = Field(description="角色 ID。")
    name: str = Field(description="展示名。")
    username: str = Field(description="用户名。")
    email: str = Field(description="登录邮箱。")
    thumbnail: str | None = Field(default=None, description="头像地址。")


class AuthTokenData(BaseSchema):
    """登录、注册与刷新的响应数据。"""

    user: AuthUserData = Field(description="当前用户摘要。")
    access_token: str = Field(description="访问令牌。")
    refresh_token: str = Field(description="刷新令牌。")
    expires_in: int = Field(description="访问令牌有效期（秒）。")
    token_type: str = Field(description="令牌类型，固定 Bearer。")
