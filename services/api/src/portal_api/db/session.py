from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from portal_api.core.config import Settings, get_settings


def _engine_options(settings: Settings) -> dict[str, Any]:
    """按方言生成连接池与超时参数。"""
    options: dict[str, Any] = {"future": True, "pool_pre_ping": True}
    if settings.database_url.startswith("sqlite"):
        return options

    # 常驻连接数 + 可溢出连接数 = 最大连接数。
    options["pool_size"] = settings.db_max_idle_conns
    options["max_overflow"] = max(0, settings.db_max_open_conns - settings.db_max_idle_conns)
    options["pool_recycle"] = settings.db_conn_max_lifetime_seconds
    if settings.database_url.startswith("postgresql"):
        options["connect_args"] = {"options": f"-c statement_timeout={settings.db_statement_timeout_ms}"}
    return options


settings = get_settings()
engine = create_engine(settings.database_url, **_engine_options(settings))
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, class_=Session)


def get_db() -> Generator[Session, None, None]:
    """每个请求独立会话，结束后归还连接。"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
