"""认证接口。"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from portal_api.core.security import TokenSigner, get_token_signer
from portal_api.db.session import get_db
from portal_api.dependencies import AuthContext, require_auth
from portal_api.schemas.auth import (
    AuthLoginRequest,
    AuthLogoutRequest,
    AuthRefreshRequest,
    AuthRegisterRequest,
    AuthTokenData,
)
from portal_api.schemas.common import ErrorResponse, MessageData, SuccessResponse
from portal_api.schemas.user import UserData
from portal_api.services import auth as auth_service
from portal_api.services.auth import AuthResult, RegisterInput
from portal_api.utils.response import created, success
from portal_api.utils.text import blank_to_none, normalize_email

router = APIRouter(prefix="/auth", tags=["auth"])
me_router = APIRouter(tags=["auth"])


def _token_payload(result: AuthResult) -> dict:
    user = result.user
    return {
        "user": {
            "id": user.id,
            "organization_id": user.organization_id,
            "role_id": user.role_id,
            "name": user.name,
            "username": user.username,
            "email": user.email,
            "thumbnail": user.thumbnail,
        },
        "access_token": result.tokens.access_token,
        "refresh_token": result.tokens.refresh_token,
        "expires_in": result.tokens.expires_in,
        "token_type": result.tokens.token_type,
    }


@router.post(
    "/login",
    summary="邮箱密码登录",
    description="校验邮箱与密码，返回访问令牌与刷新令牌。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[AuthTokenData],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
def login(
    payload: AuthLoginRequest,
    db: Session = Depends(get_db),
    signer: TokenSigner = Depends(get_token_signer),
):
    """登录并签发令牌对。"""
    result = auth_service.login(db, signer, email=normalize_email(payload.email), password=payload.password)
    return success(_token_payload(result), message="Login successful")


@router.post(
    "/register",
    summary="注册账号",
    description="创建启用状态的用户并直接返回令牌对。",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[AuthTokenData],
    responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def register(
    payload: AuthRegisterRequest,
    db: Session = Depends(get_db),
    signer: TokenSigner = Depends(get_token_signer),
):
    """注册账号。"""
    result = auth_service.register(
        db,
        signer,
        RegisterInput(
            organization_id=payload.organization_id,
            role_id=payload.role_id,
            name=payload.name.strip(),
            username=payload.username,
            email=normalize_email(payload.email),
            password=payload.password,
            employee_id=blank_to_none(payload.employee_id),
            position=blank_to_none(payload.position),
            phone=blank_to_none(payload.phone),
            address=blank_to_none(payload.address),
        ),
    )
    return created(_token_payload(result), message="Registration successful")


@router.post(
    "/refresh",
    summary="刷新令牌",
    description="使用刷新令牌换取新的令牌对，旧刷新令牌立即失效。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[AuthTokenData],
    responses={401: {"model": ErrorResponse}},
)
def refresh(
    payload: AuthRefreshRequest,
    db: Session = Depends(get_db),
    signer: TokenSigner = Depends(get_token_signer),
):
    """轮换刷新令牌。"""
    result = auth_service.refresh(db, signer, refresh_token=payload.refresh_token)
    return success(_token_payload(result), message="Token refreshed successfully")


@router.post(
    "/logout",
    summary="登出",
    description="吊销与当前访问令牌成对签发的刷新令牌。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[MessageData],
    responses={401: {"model": ErrorResponse}},
)
def logout(
    payload: AuthLogoutRequest,
    ctx: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
):
    """登出当前会话。"""
    auth_service.logout(db, access_token=ctx.access_token, refresh_token=payload.refresh_token)
    return success({"message": "Successfully logged out"}, message="Logout successful")


@router.post(
    "/revoke-all",
    summary="吊销全部会话",
    description="吊销当前用户名下的全部刷新令牌。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[MessageData],
    responses={401: {"model": ErrorResponse}},
)
def revoke_all(
    ctx: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
):
    """吊销当前用户全部刷新令牌。"""
    auth_service.revoke_all(db, ctx.user_id)
    return success({"message": "All tokens revoked"}, message="All tokens revoked successfully")


@me_router.get(
    "/me",
    summary="当前用户资料",
    description="返回访问令牌对应的用户资料；已吊销会话的访问令牌会被拒绝。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[UserData],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def me(
    ctx: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
    signer: TokenSigner = Depends(get_token_signer),
):
    """查询当前用户资料。"""
    auth_service.validate_access_token(db, signer, ctx.access_token)
    user = auth_service.get_current_user(db, ctx.user_id)
    return success(UserData.model_validate(user).model_dump(), message="User retrieved successfully")
