"""认证相关模型。"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from portal_api.models.base import Base, CreatedAtMixin, IdMixin


class RefreshToken(Base, IdMixin, CreatedAtMixin):
    """服务端跟踪的刷新令牌记录。

    仅当 `revoked = false` 且当前时间早于 `expires_at` 时记录有效。
    """

    __tablename__ = "tokens"

    # 所属用户 ID（逻辑关联 users.id）。
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    # 同批签发的访问令牌，登出时用于核对调用方身份。
    access_token: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    # 刷新令牌原文。
    refresh_token: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    # 过期时间。
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    # 是否已吊销。
    revoked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
