"""系统模型：配置项与外部集成。"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from portal_api.models.base import Base, IdMixin, SoftDeleteMixin, TimestampMixin
from portal_api.models.enums import IntegrationStatus


class Setting(Base, IdMixin, TimestampMixin, SoftDeleteMixin):
    """键值配置项，user_id 为空表示全局配置。"""

    __tablename__ = "settings"

    key: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    # 取值类型（string/number/boolean/json）。
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    # 归属范围（system/user/organization）。
    category: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    user_id: Mapped[str | None] = mapped_column(String(36), index=True)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class Integration(Base, IdMixin, TimestampMixin, SoftDeleteMixin):
    """外部系统集成配置。"""

    __tablename__ = "integrations"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    # 集成类型（api/webhook/database/custom）。
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    # 连接配置 JSON 文本。
    config: Mapped[str] = mapped_column(Text, nullable=False)
    endpoint: Mapped[str | None] = mapped_column(String(512))
    # 访问凭据，从不对外序列化。
    api_key: Mapped[str | None] = mapped_column(String(512))
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=IntegrationStatus.ACTIVE)
    last_sync_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    organization_id: Mapped[str | None] = mapped_column(String(64), index=True)
    created_by: Mapped[str] = mapped_column(String(36), nullable=False)
