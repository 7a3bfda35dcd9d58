"""应用异常处理注册。"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from portal_api.core.errors import PortalError, ResponseCode
from portal_api.schemas.common import ALPHANUMERIC_PATTERN, EMAIL_PATTERN
from portal_api.utils.response import DEFAULT_ERROR_MESSAGE, error_payload

logger = logging.getLogger(__name__)

# 请求体本身无法解析时的错误类型，按 400 处理而非字段校验失败。
_BODY_DECODE_ERROR_TYPES = {"json_invalid", "model_attributes_type", "dict_type", "model_type"}
_REQUEST_LOCATIONS = {"body", "query", "path", "header", "cookie"}


def _default_http_error_code(status_code: int) -> str:
    if status_code == status.HTTP_400_BAD_REQUEST:
        return ResponseCode.BAD_REQUEST
    if status_code == status.HTTP_401_UNAUTHORIZED:
        return ResponseCode.UNAUTHORIZED
    if status_code == status.HTTP_403_FORBIDDEN:
        return ResponseCode.FORBIDDEN
    if status_code == status.HTTP_404_NOT_FOUND:
        return ResponseCode.NOT_FOUND
    if status_code == status.HTTP_409_CONFLICT:
        return ResponseCode.CONFLICT
    if status_code == 422:
        return ResponseCode.VALIDATION_FAILED
    if status_code == status.HTTP_429_TOO_MANY_REQUESTS:
        return ResponseCode.TOO_MANY_REQUESTS
    if status_code == status.HTTP_503_SERVICE_UNAVAILABLE:
        return ResponseCode.SERVICE_UNAVAILABLE
    if status_code >= 500:
        return ResponseCode.INTERNAL_ERROR
    return ResponseCode.BAD_REQUEST


def _default_http_message(status_code: int) -> str:
    if status_code == status.HTTP_404_NOT_FOUND:
        return "Resource not found"
    if status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        return "Method not allowed"
    if status_code == status.HTTP_401_UNAUTHORIZED:
        return "Unauthorized"
    if status_code == status.HTTP_403_FORBIDDEN:
        return "Forbidden"
    if status_code >= 500:
        return DEFAULT_ERROR_MESSAGE
    return "Bad request"


def _field_name(loc: tuple[Any, ...]) -> str:
    parts = [str(item) for item in loc if item not in _REQUEST_LOCATIONS]
    return ".".join(parts) or "body"


def _field_message(field: str, err: dict[str, Any]) -> str:
    """把校验错误翻译为面向调用方的字段提示。"""
    err_type = err.get("type", "")
    ctx = err.get("ctx") or {}
    if err_type == "missing":
        return f"{field} is required"
    if err_type == "string_too_short":
        return f"{field} must be at least {ctx.get('min_length')} characters"
    if err_type == "string_too_long":
        return f"{field} must be at most {ctx.get('max_length')} characters"
    if err_type == "string_pattern_mismatch":
        pattern = ctx.get("pattern")
        if pattern == EMAIL_PATTERN:
            return f"{field} must be a valid email"
        if pattern == ALPHANUMERIC_PATTERN:
            return f"{field} must contain only alphanumeric characters"
        return f"{field} has an invalid format"
    if err_type == "literal_error":
        return f"{field} must be one of {ctx.get('expected')}"
    if err_type in {"greater_than_equal", "greater_than"}:
        return f"{field} must be at least {ctx.get('ge', ctx.get('gt'))}"
    if err_type in {"less_than_equal", "less_than"}:
        return f"{field} must be at most {ctx.get('le', ctx.get('lt'))}"
    if err_type == "too_short":
        return f"{field} must contain at least {ctx.get('min_length')} items"
    if err_type == "too_long":
        return f"{field} must contain at most {ctx.get('max_length')} items"
    return f"{field} is invalid"


def _is_body_decode_error(err: dict[str, Any]) -> bool:
    loc = tuple(err.get("loc", ()))
    if err.get("type") == "json_invalid":
        return True
    return loc == ("body",) and (err.get("type") == "missing" or err.get("type") in _BODY_DECODE_ERROR_TYPES)


async def portal_error_handler(request: Request, exc: PortalError):
    """将领域错误翻译为标准错误结构。"""
    if exc.status_code >= 500:
        logger.error("request failed path=%s error=%s", request.url.path, exc.message)
        message = DEFAULT_ERROR_MESSAGE
    else:
        message = exc.message
    return JSONResponse(
        status_code=exc.status_code,
        content=error_payload(exc.code, message, exc.details),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """将协议异常统一包装为标准错误结构。"""
    message = exc.detail if isinstance(exc.detail, str) and exc.detail else _default_http_message(exc.status_code)
    if exc.status_code >= 500:
        message = DEFAULT_ERROR_MESSAGE
    return JSONResponse(
        status_code=exc.status_code,
        content=error_payload(_default_http_error_code(exc.status_code), message),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """统一处理请求参数校验错误。"""
    errors = list(exc.errors())
    if any(_is_body_decode_error(err) for err in errors):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_payload(ResponseCode.BAD_REQUEST, "Invalid request body"),
        )

    details = []
    for err in errors:
        field = _field_name(tuple(err.get("loc", ())))
        details.append({"field": field, "message": _field_message(field, err)})
    return JSONResponse(
        status_code=422,
        content=error_payload(ResponseCode.VALIDATION_FAILED, "Validation failed", details),
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    """数据库异常只记录日志，对外返回不透明信息。"""
    logger.exception("database error path=%s", request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_payload(ResponseCode.INTERNAL_ERROR, DEFAULT_ERROR_MESSAGE),
    )


async def unexpected_exception_handler(request: Request, exc: Exception):
    """处理未捕获异常，避免内部细节泄露。"""
    logger.exception("unhandled error path=%s", request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_payload(ResponseCode.INTERNAL_ERROR, DEFAULT_ERROR_MESSAGE),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """集中注册异常处理器。"""
    app.exception_handler(PortalError)(portal_error_handler)
    app.exception_handler(StarletteHTTPException)(http_exception_handler)
    app.exception_handler(RequestValidationError)(validation_exception_handler)
    app.exception_handler(SQLAlchemyError)(database_exception_handler)
    app.exception_handler(Exception)(unexpected_exception_handler)
