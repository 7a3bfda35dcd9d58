"""应用中间件注册。"""

import asyncio
import logging
from time import perf_counter
import uuid

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from portal_api.core.config import get_settings
from portal_api.core.errors import ResponseCode
from portal_api.utils.response import error_payload

logger = logging.getLogger("portal_api.access")

_BODY_METHODS = {"POST", "PUT", "PATCH"}
_ACCEPTED_CONTENT_TYPES = ("application/json", "multipart/form-data")


async def request_id_middleware(request: Request, call_next):
    """注入请求追踪 ID，并通过响应头返回。"""
    request.state.request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
    request.state.request_started_at = perf_counter()
    response = await call_next(request)
    response.headers["X-Request-Id"] = request.state.request_id
    elapsed = perf_counter() - request.state.request_started_at
    response.headers["X-Process-Time-Ms"] = str(round(elapsed * 1000, 2))
    return response


async def access_log_middleware(request: Request, call_next):
    """每个请求输出一行访问日志。"""
    started_at = perf_counter()
    response = await call_next(request)
    logger.info(
        "%s %s %s %.2fms request_id=%s",
        request.method,
        request.url.path,
        response.status_code,
        (perf_counter() - started_at) * 1000,
        getattr(request.state, "request_id", "-"),
    )
    return response


async def timeout_middleware(request: Request, call_next):
    """超过配置时长的请求直接返回 503。"""
    timeout = get_settings().server_request_timeout_seconds
    try:
        return await asyncio.wait_for(call_next(request), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("request timeout %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=error_payload(ResponseCode.SERVICE_UNAVAILABLE, "Request timeout"),
        )


async def content_type_middleware(request: Request, call_next):
    """写请求只接受 JSON 或表单上传。"""
    if request.method in _BODY_METHODS:
        content_type = request.headers.get("content-type", "").lower()
        if content_type and not content_type.startswith(_ACCEPTED_CONTENT_TYPES):
            return JSONResponse(
                status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
                content=error_payload(ResponseCode.BAD_REQUEST, "Content-Type must be application/json"),
            )
    return await call_next(request)


def register_middlewares(app: FastAPI) -> None:
    """集中注册中间件，后注册的位于外层。"""
    settings = get_settings()
    app.middleware("http")(content_type_middleware)
    app.middleware("http")(timeout_middleware)
    app.middleware("http")(access_log_middleware)
    app.middleware("http")(request_id_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins or ["*"],
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        expose_headers=["Content-Length", "Content-Type"],
        max_age=86400,
    )
