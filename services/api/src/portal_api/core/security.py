"""令牌签发与校验工具。"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import uuid4

import jwt
from jwt import ExpiredSignatureError, InvalidTokenError as JWTInvalidTokenError

from portal_api.core.config import Settings, get_settings
from portal_api.core.errors import InvalidTokenError, MissingUserIdError, TokenExpiredError, UnauthorizedError

TOKEN_TYPE = "Bearer"
BEARER_PREFIX = "Bearer "
# 仅接受对称 HMAC-SHA256，拒绝声明为其他算法（含 none）的令牌。
SIGNING_ALGORITHM = "HS256"


@dataclass
class TokenClaims:
    """令牌中携带的身份声明。"""

    # 用户 ID，同时写入 sub。
    user_id: str
    # 所属组织 ID。
    organization_id: str
    # 角色 ID。
    role_id: str
    # 登录邮箱。
    email: str
    issuer: str
    issued_at: datetime
    expires_at: datetime
    # 令牌唯一标识，保证同一秒内签发的令牌也互不相同。
    token_id: str


@dataclass
class TokenPair:
    """一次签发得到的访问令牌与刷新令牌。"""

    access_token: str
    refresh_token: str
    # 访问令牌有效期（秒）。
    expires_in: int
    token_type: str = TOKEN_TYPE


class TokenSigner:
    """无状态的令牌签发器，只持有不可变的密钥与有效期配置。"""

    def __init__(
        self,
        *,
        secret: str,
        issuer: str,
        access_ttl: timedelta,
        refresh_ttl: timedelta,
        leeway_seconds: int = 0,
    ) -> None:
        self._secret = secret
        self.issuer = issuer
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self._leeway_seconds = leeway_seconds

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "TokenSigner":
        """按应用配置构造签发器。"""
        settings = settings or get_settings()
        return cls(
            secret=settings.auth_jwt_secret,
            issuer=settings.auth_jwt_issuer,
            access_ttl=timedelta(seconds=settings.auth_access_token_ttl_seconds),
            refresh_ttl=timedelta(seconds=settings.auth_refresh_token_ttl_seconds),
            leeway_seconds=settings.auth_jwt_leeway_seconds,
        )

    def issue_pair(self, user_id: str, organization_id: str, role_id: str, email: str) -> TokenPair:
        """签发访问令牌与刷新令牌，两者仅有效期不同。"""
        if not user_id:
            raise MissingUserIdError()

        now = datetime.now(timezone.utc)
        access_token = self._sign(user_id, organization_id, role_id, email, issued_at=now, ttl=self.access_ttl)
        refresh_token = self._sign(user_id, organization_id, role_id, email, issued_at=now, ttl=self.refresh_ttl)
        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=int(self.access_ttl.total_seconds()),
        )

    def _sign(
        self,
        user_id: str,
        organization_id: str,
        role_id: str,
        email: str,
        *,
        issued_at: datetime,
        ttl: timedelta,
    ) -> str:
        issued_ts = int(issued_at.timestamp())
        payload: dict[str, Any] = {
            "user_id": user_id,
            "organization_id": organization_id,
            "role_id": role_id,
            "email": email,
            "iss": self.issuer,
            "sub": user_id,
            "iat": issued_ts,
            "nbf": issued_ts,
            "exp": int((issued_at + ttl).timestamp()),
            "jti": str(uuid4()),
        }
        return jwt.encode(payload, self._secret, algorithm=SIGNING_ALGORITHM)

    def verify(self, token: str) -> TokenClaims:
        """校验签名与时间窗，返回声明；过期与其他失败分别报错。"""
        if not token:
            raise InvalidTokenError()
        try:
            payload = jwt.decode(
                token,
                key=self._secret,
                algorithms=[SIGNING_ALGORITHM],
                issuer=self.issuer,
                leeway=self._leeway_seconds,
                options={"require": ["exp", "iat", "sub"]},
            )
        except ExpiredSignatureError as exc:
            raise TokenExpiredError() from exc
        except JWTInvalidTokenError as exc:
            raise InvalidTokenError() from exc

        user_id = payload.get("user_id")
        if not isinstance(user_id, str) or not user_id:
            raise InvalidTokenError()

        return TokenClaims(
            user_id=user_id,
            organization_id=str(payload.get("organization_id") or ""),
            role_id=str(payload.get("role_id") or ""),
            email=str(payload.get("email") or ""),
            issuer=str(payload.get("iss") or ""),
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            token_id=str(payload.get("jti") or ""),
        )


def get_token_signer() -> TokenSigner:
    """依赖注入入口，随配置缓存一起刷新。"""
    return TokenSigner.from_settings(get_settings())


def extract_bearer_token(authorization: str | None) -> str:
    """从 Authorization 头中提取 Bearer 令牌。"""
    if not authorization:
        raise UnauthorizedError("Authorization header required")
    if not authorization.startswith(BEARER_PREFIX):
        raise UnauthorizedError("Invalid authorization header format")
    return authorization[len(BEARER_PREFIX):]
