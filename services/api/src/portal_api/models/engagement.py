"""用户互动模型：反馈、通知、工单。"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from portal_api.models.base import Base, CreatedAtMixin, IdMixin, SoftDeleteMixin, TimestampMixin
from portal_api.models.enums import FeedbackStatus, TicketStatus


class Feedback(Base, IdMixin, TimestampMixin):
    """用户对平台或数据集的反馈。"""

    __tablename__ = "feedbacks"

    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    dataset_id: Mapped[str | None] = mapped_column(String(36), index=True)
    # 评分 1-5。
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=FeedbackStatus.PENDING)


class Notification(Base, IdMixin, CreatedAtMixin, SoftDeleteMixin):
    """站内通知。"""

    __tablename__ = "notifications"

    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    # 通知级别（info/warning/error/success）。
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    # 来源分类（system/dataset/publication/...）。
    category: Mapped[str] = mapped_column(String(32), nullable=False)
    action_url: Mapped[str | None] = mapped_column(String(512))
    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    read_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))


class Ticket(Base, IdMixin, TimestampMixin, SoftDeleteMixin):
    """服务台工单。"""

    __tablename__ = "tickets"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=TicketStatus.OPEN)
    priority: Mapped[str] = mapped_column(String(32), nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False)
    # 提单用户。
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    # 当前处理人。
    assigned_to: Mapped[str | None] = mapped_column(String(36), index=True)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_by: Mapped[str] = mapped_column(String(36), nullable=False)
