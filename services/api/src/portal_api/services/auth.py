"""认证用例：登录、注册、刷新、登出与吊销。

刷新令牌在服务端留有记录，访问令牌保持无状态；
轮换时旧记录的吊销与新记录的写入在同一事务内提交。
"""

import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from portal_api.core.errors import (
    EmailTakenError,
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError,
    TokenExpiredError,
    TokenRevokedError,
    UserDisabledError,
    UsernameTakenError,
)
from portal_api.core.security import TokenClaims, TokenPair, TokenSigner
from portal_api.models.base import utc_now
from portal_api.models.enums import UserStatus
from portal_api.models.user import User
from portal_api.services import token_store
from portal_api.services.local_auth import hash_password, verify_password

logger = logging.getLogger(__name__)


@dataclass
class AuthResult:
    """认证成功后返回的用户与令牌对。"""

    user: User
    tokens: TokenPair


@dataclass
class RegisterInput:
    """注册所需的用户资料。"""

    organization_id: str
    role_id: str
    name: str
    username: str
    email: str
    password: str
    employee_id: str | None = None
    position: str | None = None
    phone: str | None = None
    address: str | None = None


def find_active_user_by_email(db: Session, email: str) -> User | None:
    """按邮箱查找未删除用户。"""
    return db.execute(
        select(User).where(User.email == email).where(User.status != UserStatus.DELETED).limit(1)
    ).scalar_one_or_none()


def _username_taken(db: Session, username: str) -> bool:
    return (
        db.execute(
            select(User.id).where(User.username == username).where(User.status != UserStatus.DELETED).limit(1)
        ).first()
        is not None
    )


def _issue_and_store(db: Session, signer: TokenSigner, user: User) -> TokenPair:
    """签发令牌对并写入刷新令牌记录，不提交事务。"""
    tokens = signer.issue_pair(user.id, user.organization_id, user.role_id, user.email)
    token_store.create_token_record(
        db,
        user_id=user.id,
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        expires_at=utc_now() + signer.refresh_ttl,
    )
    return tokens


def login(db: Session, signer: TokenSigner, *, email: str, password: str) -> AuthResult:
    """校验邮箱口令并签发令牌对。"""
    user = find_active_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("login rejected: invalid credentials")
        raise InvalidCredentialsError()
    if user.status != UserStatus.ACTIVE:
        logger.warning("login rejected: user %s is %s", user.id, user.status)
        raise UserDisabledError()

    tokens = _issue_and_store(db, signer, user)
    user.last_login_at = utc_now()
    db.commit()
    db.refresh(user)
    return AuthResult(user=user, tokens=tokens)


def register(db: Session, signer: TokenSigner, payload: RegisterInput) -> AuthResult:
    """创建启用状态的用户并直接签发令牌对。"""
    if find_active_user_by_email(db, payload.email) is not None:
        raise EmailTakenError()
    if _username_taken(db, payload.username):
        raise UsernameTakenError()

    user = User(
        organization_id=payload.organization_id,
        role_id=payload.role_id,
        name=payload.name,
        username=payload.username,
        email=payload.email,
        password_hash=hash_password(payload.password),
        employee_id=payload.employee_id,
        position=payload.position,
        phone=payload.phone,
        address=payload.address,
        status=UserStatus.ACTIVE,
    )
    db.add(user)
    db.flush()

    tokens = _issue_and_store(db, signer, user)
    db.commit()
    db.refresh(user)
    logger.info("user registered: %s", user.id)
    return AuthResult(user=user, tokens=tokens)


def refresh(db: Session, signer: TokenSigner, *, refresh_token: str) -> AuthResult:
    """用刷新令牌换取新令牌对，旧刷新令牌随即失效。"""
    record = token_store.find_by_refresh(db, refresh_token)
    if record is None:
        raise InvalidTokenError()
    if not token_store.is_record_valid(record):
        raise TokenExpiredError()

    user = db.get(User, record.user_id)
    if user is None or user.status == UserStatus.DELETED:
        raise InvalidTokenError()

    # 吊销旧记录与写入新记录同属一个事务，任一步失败都整体回滚。
    record.revoked = True
    tokens = _issue_and_store(db, signer, user)
    db.commit()
    return AuthResult(user=user, tokens=tokens)


def logout(db: Session, *, access_token: str, refresh_token: str) -> None:
    """吊销与访问令牌成对签发的刷新令牌记录。"""
    record = token_store.find_by_refresh(db, refresh_token)
    if record is None or record.access_token != access_token:
        raise InvalidTokenError()

    token_store.revoke(db, record.id)
    db.commit()


def revoke_all(db: Session, user_id: str) -> int:
    """吊销用户名下全部刷新令牌。"""
    count = token_store.revoke_all_of_user(db, user_id)
    db.commit()
    logger.info("revoked %d token records of user %s", count, user_id)
    return count


def validate_access_token(db: Session, signer: TokenSigner, access_token: str) -> TokenClaims:
    """校验访问令牌；若服务端存有对应记录且已失效则视为已吊销。"""
    claims = signer.verify(access_token)
    record = token_store.find_by_access(db, access_token)
    if record is not None and not token_store.is_record_valid(record):
        raise TokenRevokedError()
    return claims


def get_current_user(db: Session, user_id: str) -> User:
    """按 ID 读取当前用户。"""
    user = db.get(User, user_id)
    if user is None or user.status == UserStatus.DELETED:
        raise NotFoundError("User not found")
    return user
