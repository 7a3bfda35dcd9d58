"""统一响应结构工具。"""

from typing import Any

from portal_api.core.errors import ResponseCode

DEFAULT_ERROR_MESSAGE = "Internal server error"


def success(
    data: Any = None,
    *,
    message: str,
    code: str = ResponseCode.SUCCESS,
    meta: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """构造统一成功响应结构，列表接口额外携带分页元信息。"""
    payload: dict[str, Any] = {"code": code, "message": message, "data": data}
    if meta is not None:
        payload["meta"] = meta
    return payload


def created(data: Any = None, *, message: str) -> dict[str, Any]:
    """构造资源创建成功响应。"""
    return success(data, message=message, code=ResponseCode.CREATED)


def updated(data: Any = None, *, message: str) -> dict[str, Any]:
    """构造资源更新成功响应。"""
    return success(data, message=message, code=ResponseCode.UPDATED)


def deleted(*, message: str) -> dict[str, Any]:
    """构造资源删除成功响应。"""
    return success(None, message=message, code=ResponseCode.DELETED)


def error_payload(
    code: str,
    message: str,
    details: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """构造统一错误响应结构。"""
    return {
        "code": code,
        "message": message,
        "details": details or [],
    }
