"""刷新令牌记录的持久化操作。"""

from datetime import datetime

from sqlalchemy import delete, or_, select, update
from sqlalchemy.orm import Session

from portal_api.core.errors import NotFoundError
from portal_api.models.auth import RefreshToken
from portal_api.models.base import as_utc, utc_now


def is_record_valid(record: RefreshToken, *, now: datetime | None = None) -> bool:
    """记录未吊销且未过期时才有效。"""
    now = now or utc_now()
    return not record.revoked and now < as_utc(record.expires_at)


def create_token_record(
    db: Session,
    *,
    user_id: str,
    access_token: str,
    refresh_token: str,
    expires_at: datetime,
) -> RefreshToken:
    """新增一条令牌记录，由调用方提交事务。"""
    record = RefreshToken(
        user_id=user_id,
        access_token=access_token,
        refresh_token=refresh_token,
        expires_at=expires_at,
        revoked=False,
    )
    db.add(record)
    db.flush()
    return record


def find_by_refresh(db: Session, refresh_token: str) -> RefreshToken | None:
    """按刷新令牌原文查找最新记录。"""
    return db.execute(
        select(RefreshToken)
        .where(RefreshToken.refresh_token == refresh_token)
        .order_by(RefreshToken.created_at.desc())
        .limit(1)
    ).scalar_one_or_none()


def find_by_access(db: Session, access_token: str) -> RefreshToken | None:
    """按访问令牌原文查找最新记录。"""
    return db.execute(
        select(RefreshToken)
        .where(RefreshToken.access_token == access_token)
        .order_by(RefreshToken.created_at.desc())
        .limit(1)
    ).scalar_one_or_none()


def revoke(db: Session, record_id: str) -> None:
    """吊销单条记录，记录不存在时报错。"""
    result = db.execute(update(RefreshToken).where(RefreshToken.id == record_id).values(revoked=True))
    if result.rowcount == 0:
        raise NotFoundError()


def revoke_all_of_user(db: Session, user_id: str) -> int:
    """吊销用户名下全部记录，返回受影响行数。"""
    result = db.execute(
        update(RefreshToken)
        .where(RefreshToken.user_id == user_id)
        .where(RefreshToken.revoked.is_(False))
        .values(revoked=True)
    )
    return result.rowcount


def cleanup_expired_tokens(db: Session) -> int:
    """删除已过期或已吊销的记录，返回删除行数。"""
    result = db.execute(
        delete(RefreshToken).where(
            or_(RefreshToken.expires_at < utc_now(), RefreshToken.revoked.is_(True))
        )
    )
    db.commit()
    return result.rowcount
