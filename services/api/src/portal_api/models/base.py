"""对象映射基础模型与通用混入。"""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import DateTime, MetaData, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def new_id() -> str:
    """生成规范化字符串形式的随机 UUID。"""
    return str(uuid4())


def utc_now() -> datetime:
    """返回带时区的当前 UTC 时间。"""
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """补齐时区信息（SQLite 读回的时间不带时区）。"""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class Base(DeclarativeBase):
    """全局对象映射声明基类。"""

    metadata = MetaData(
        naming_convention={
            # 统一约束/索引命名规范（无外键场景）。
            "pk": "pk_%(table_name)s",
            "ix": "ix_%(table_name)s_%(column_0_name)s",
            "uq": "uk_%(table_name)s_%(column_0_name)s",
            "ck": "ck_%(table_name)s_%(constraint_name)s",
        }
    )


class IdMixin:
    """提供统一字符串 UUID 主键字段。"""

    # 主键以 36 位规范字符串存储，跨库一致且便于日志检索。
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id, comment="主键 ID。")


class CreatedAtMixin:
    """仅提供创建时间字段。"""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=func.now(),
        nullable=False,
        index=True,
        comment="创建时间。",
    )


class TimestampMixin(CreatedAtMixin):
    """提供创建时间与更新时间字段。"""

    # 记录最后更新时间，更新时自动刷新。
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=func.now(),
        onupdate=utc_now,
        nullable=False,
        comment="更新时间。",
    )


class SoftDeleteMixin:
    """提供逻辑删除标记。"""

    # 非空即视为已删除，所有读路径都需排除。
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, comment="删除时间。")
