"""全局通用结构。

用于定义统一响应包裹结构与公共校验规则，便于在线接口文档展示与联调。
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

# 宽松邮箱规则：本地部分与域名部分均非空且不含空白。
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+$"
# 用户名等标识仅允许字母与数字。
ALPHANUMERIC_PATTERN = r"^[A-Za-z0-9]+$"


class BaseSchema(BaseModel):
    """基础结构，开启对象映射能力。"""

    model_config = ConfigDict(from_attributes=True)


class PaginationMeta(BaseSchema):
    """分页元信息。"""

    page: int = Field(description="当前页码（从 1 开始）。")
    limit: int = Field(description="每页条数。")
    total: int = Field(description="总记录数。")
    total_pages: int = Field(description="总页数，ceil(total / limit)。")


class ErrorDetail(BaseSchema):
    """字段级错误。"""

    field: str = Field(description="出错字段名。")
    message: str = Field(description="字段错误说明。")


class ErrorResponse(BaseSchema):
    """统一错误响应。"""

    code: str = Field(description="机器可识别错误码。")
    message: str = Field(description="人类可读错误信息。")
    details: list[ErrorDetail] = Field(default_factory=list, description="字段级错误列表。")


T = TypeVar("T")


class SuccessResponse(BaseSchema, Generic[T]):
    """统一成功响应。"""

    code: str = Field(description="业务码，例如 OPERATION_SUCCESSFUL。")
    message: str = Field(description="人类可读结果说明。")
    data: T = Field(description="业务返回数据主体。")


class ListResponse(BaseSchema, Generic[T]):
    """统一列表响应。"""

    code: str = Field(description="业务码。")
    message: str = Field(description="人类可读结果说明。")
    data: list[T] = Field(description="当前页数据。")
    meta: PaginationMeta = Field(description="分页元信息。")


class MessageData(BaseSchema):
    """仅包含提示文本的数据主体。"""

    message: str = Field(description="提示文本。")


class StatusUpdateRequest(BaseModel):
    """通用状态更新请求体。"""

    status: str = Field(min_length=1, max_length=32, description="目标状态。")
