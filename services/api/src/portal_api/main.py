"""FastAPI 应用入口点。"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from portal_api.api.router import api_router
from portal_api.core.config import get_settings
from portal_api.core.logging import setup_logging
from portal_api.db.session import engine
from portal_api.exceptions import register_exception_handlers
from portal_api.middlewares import register_middlewares

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """启动时记录配置，停机时释放连接池。"""
    logger.info("%s %s starting env=%s", settings.app_name, settings.app_version, settings.app_env)
    yield
    engine.dispose()
    logger.info("%s stopped", settings.app_name)


def create_app() -> FastAPI:
    """创建并配置 FastAPI 应用实例。"""
    setup_logging(settings)
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.app_debug,
        lifespan=lifespan,
        description=(
            "开放数据门户接口。\n\n"
            "成功响应统一返回：`{code, message, data}`，列表额外携带 `meta`。\n"
            "错误响应统一返回：`{code, message, details}`。\n"
            "受保护接口通过 `Authorization: Bearer <access_token>` 认证。"
        ),
        openapi_tags=[
            {"name": "health", "description": "服务存活与就绪探针。"},
            {"name": "auth", "description": "登录、注册、令牌刷新与吊销。"},
            {"name": "users", "description": "用户资料与状态管理。"},
            {"name": "organizations", "description": "数据发布组织管理。"},
            {"name": "datasets", "description": "数据集聚合读写。"},
            {"name": "catalog", "description": "标签、主题、业务领域、计量单位字典。"},
            {"name": "feedbacks", "description": "用户反馈。"},
            {"name": "files", "description": "文件上传与元数据。"},
            {"name": "publications", "description": "出版物。"},
            {"name": "visualizations", "description": "图表与地图可视化。"},
            {"name": "settings", "description": "系统与用户配置项。"},
            {"name": "notifications", "description": "站内通知。"},
            {"name": "tickets", "description": "服务台工单。"},
            {"name": "data-rows", "description": "数据集明细行。"},
            {"name": "integrations", "description": "外部系统集成。"},
            {"name": "analytics", "description": "平台统计汇总。"},
        ],
    )

    register_middlewares(app)
    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.api_prefix)
    return app


app = create_app()


def run() -> None:
    """以 uvicorn 启动服务，收到停机信号后等待在途请求完成。"""
    uvicorn.run(
        "portal_api.main:app",
        host=settings.server_host,
        port=settings.server_port,
        timeout_graceful_shutdown=settings.server_shutdown_timeout_seconds,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
