"""日志初始化。"""

import logging

from portal_api.core.config import Settings


def setup_logging(settings: Settings) -> None:
    """初始化日志输出格式与级别。"""
    level = logging.DEBUG if settings.app_debug else getattr(logging, settings.log_level, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    # uvicorn 自带访问日志与中间件访问日志重复，统一由中间件输出。
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
