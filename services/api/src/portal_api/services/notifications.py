"""站内通知的批量状态操作。"""

from datetime import timedelta

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from portal_api.models.base import utc_now
from portal_api.models.engagement import Notification


def _unread_of(user_id: str):
    return (
        (Notification.user_id == user_id)
        & Notification.read.is_(False)
        & Notification.deleted_at.is_(None)
    )


def mark_read(db: Session, user_id: str, notification_ids: list[str]) -> int:
    """把调用人名下的指定通知标记为已读，返回受影响行数。"""
    result = db.execute(
        update(Notification)
        .where(Notification.id.in_(notification_ids))
        .where(_unread_of(user_id))
        .values(read=True, read_at=utc_now())
    )
    db.commit()
    return result.rowcount


def mark_all_read(db: Session, user_id: str) -> int:
    result = db.execute(update(Notification).where(_unread_of(user_id)).values(read=True, read_at=utc_now()))
    db.commit()
    return result.rowcount


def unread_count(db: Session, user_id: str) -> int:
    return db.execute(select(func.count(Notification.id)).where(_unread_of(user_id))).scalar_one()


def cleanup_read_notifications(db: Session, older_than: timedelta) -> int:
    """物理删除已读超过指定时长的通知，返回删除行数。"""
    cutoff = utc_now() - older_than
    result = db.execute(
        delete(Notification).where(Notification.read.is_(True)).where(Notification.read_at < cutoff)
    )
    db.commit()
    return result.rowcount
