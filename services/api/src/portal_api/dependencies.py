"""请求上下文依赖。

职责:
1. 读取 Authorization 头并校验 Bearer 访问令牌。
2. 将令牌中的身份声明写入 request.state。
3. 生成后续路由统一使用的 AuthContext。
4. 解析列表接口共享的分页、搜索与排序参数。

网关只校验签名与有效期，不查询令牌存储；访问令牌在过期前始终有效。
"""

import logging
from dataclasses import dataclass

from fastapi import Depends, Header, Query, Request

from portal_api.core.errors import InvalidTokenError, TokenExpiredError, UnauthorizedError
from portal_api.core.security import TokenSigner, extract_bearer_token, get_token_signer
from portal_api.utils.listing import MAX_LIMIT, Pagination, normalize_pagination

logger = logging.getLogger(__name__)


@dataclass
class AuthContext:
    """已认证请求的身份视图。"""

    # 当前请求用户 ID。
    user_id: str
    # 令牌声明的组织 ID。
    organization_id: str
    # 令牌声明的角色 ID。
    role_id: str
    # 登录邮箱。
    email: str
    # 原始访问令牌，登出时用于核对。
    access_token: str


def require_auth(
    request: Request,
    authorization: str | None = Header(default=None, alias="Authorization", include_in_schema=False),
    signer: TokenSigner = Depends(get_token_signer),
) -> AuthContext:
    """校验访问令牌并注入身份上下文。"""
    token = extract_bearer_token(authorization)
    try:
        claims = signer.verify(token)
    except TokenExpiredError:
        logger.warning("rejected expired token path=%s", request.url.path)
        raise UnauthorizedError("Token expired") from None
    except InvalidTokenError:
        logger.warning("rejected invalid token path=%s", request.url.path)
        raise UnauthorizedError("Invalid token") from None

    request.state.user_id = claims.user_id
    request.state.organization_id = claims.organization_id
    request.state.role_id = claims.role_id
    request.state.email = claims.email
    return AuthContext(
        user_id=claims.user_id,
        organization_id=claims.organization_id,
        role_id=claims.role_id,
        email=claims.email,
        access_token=token,
    )


@dataclass
class ListQuery:
    """列表接口共享的查询参数。"""

    page: int | None
    limit: int | None
    search: str | None
    sort_by: str | None
    sort_order: str | None

    def pagination(self, *, max_limit: int = MAX_LIMIT) -> Pagination:
        return normalize_pagination(self.page, self.limit, max_limit=max_limit)


def list_query(
    page: int | None = Query(default=None, description="页码，从 1 开始，非法值按 1 处理。"),
    limit: int | None = Query(default=None, description="每页条数，默认 20，超过上限时截断。"),
    search: str | None = Query(default=None, description="模糊搜索关键字。"),
    sort_by: str | None = Query(default=None, description="排序字段，不在白名单内时按 created_at 排序。"),
    sort_order: str | None = Query(default=None, description="排序方向 ASC/DESC，默认 DESC。"),
) -> ListQuery:
    """解析列表接口的分页、搜索与排序参数。"""
    return ListQuery(page=page, limit=limit, search=search, sort_by=sort_by, sort_order=sort_order)
