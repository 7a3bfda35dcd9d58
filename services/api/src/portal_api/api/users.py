"""用户管理接口。"""

import logging

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from portal_api.core.errors import NotFoundError
from portal_api.db.session import get_db
from portal_api.dependencies import AuthContext, ListQuery, list_query, require_auth
from portal_api.models.base import utc_now
from portal_api.models.enums import UserStatus
from portal_api.models.user import User
from portal_api.schemas.common import ErrorResponse, ListResponse, SuccessResponse
from portal_api.schemas.user import UserData, UserStatusUpdateRequest, UserUpdateRequest
from portal_api.utils.listing import FilterSet, build_meta, paginate, resolve_sort
from portal_api.utils.response import deleted, success, updated
from portal_api.utils.text import blank_to_none

router = APIRouter(prefix="/users", tags=["users"], dependencies=[Depends(require_auth)])
logger = logging.getLogger(__name__)

SORT_WHITELIST = {
    "name": User.name,
    "username": User.username,
    "email": User.email,
    "status": User.status,
    "created_at": User.created_at,
    "updated_at": User.updated_at,
}


def _get_visible_user(db: Session, user_id: str) -> User:
    user = db.execute(
        select(User).where(User.id == user_id).where(User.status != UserStatus.DELETED)
    ).scalar_one_or_none()
    if user is None:
        raise NotFoundError("User not found")
    return user


@router.get(
    "",
    summary="查询用户列表",
    description="分页查询未删除用户，支持按组织、角色、状态过滤与姓名/用户名/邮箱搜索。",
    status_code=status.HTTP_200_OK,
    response_model=ListResponse[UserData],
    responses={401: {"model": ErrorResponse}},
)
def list_users(
    query: ListQuery = Depends(list_query),
    organization_id: str | None = Query(default=None, description="组织 ID。"),
    role_id: str | None = Query(default=None, description="角色 ID。"),
    user_status: str | None = Query(default=None, alias="status", description="用户状态。"),
    db: Session = Depends(get_db),
):
    """分页查询用户。"""
    pagination = query.pagination()
    conditions = (
        FilterSet()
        .add(User.status != UserStatus.DELETED)
        .equals(User.organization_id, organization_id)
        .equals(User.role_id, role_id)
        .equals(User.status, user_status)
        .search(query.search, User.name, User.username, User.email)
    )
    rows, total = paginate(
        db,
        conditions.apply(select(User)),
        pagination=pagination,
        order_by=resolve_sort(query.sort_by, query.sort_order, SORT_WHITELIST, tiebreaker=User.id),
    )
    return success(rows, message="Users retrieved successfully", meta=build_meta(pagination, total))


@router.get(
    "/{user_id}",
    summary="查询用户详情",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[UserData],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def get_user(
    user_id: str = Path(..., description="目标用户 ID。"),
    db: Session = Depends(get_db),
):
    """查询单个用户。"""
    return success(_get_visible_user(db, user_id), message="User retrieved successfully")


@router.put(
    "/{user_id}",
    summary="更新用户资料",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[UserData],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def update_user(
    payload: UserUpdateRequest,
    user_id: str = Path(..., description="目标用户 ID。"),
    db: Session = Depends(get_db),
):
    """更新用户资料。"""
    user = _get_visible_user(db, user_id)
    user.name = payload.name.strip()
    user.position = blank_to_none(payload.position)
    user.address = blank_to_none(payload.address)
    user.phone = blank_to_none(payload.phone)
    user.bio = blank_to_none(payload.bio)
    user.thumbnail = blank_to_none(payload.thumbnail)
    user.birth_date = payload.birth_date
    user.updated_at = utc_now()
    db.commit()
    db.refresh(user)
    return updated(user, message="User updated successfully")


@router.delete(
    "/{user_id}",
    summary="删除用户",
    description="逻辑删除：状态置为 deleted，邮箱与用户名随即可被重新注册。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[None],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def delete_user(
    user_id: str = Path(..., description="目标用户 ID。"),
    ctx: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
):
    """逻辑删除用户。"""
    user = _get_visible_user(db, user_id)
    user.status = UserStatus.DELETED
    user.updated_at = utc_now()
    db.commit()
    logger.info("user %s deleted by %s", user_id, ctx.user_id)
    return deleted(message="User deleted successfully")


@router.patch(
    "/{user_id}/status",
    summary="更新用户状态",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[UserData],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def update_user_status(
    payload: UserStatusUpdateRequest,
    user_id: str = Path(..., description="目标用户 ID。"),
    db: Session = Depends(get_db),
):
    """启用、停用或暂停用户。"""
    user = _get_visible_user(db, user_id)
    user.status = payload.status
    user.updated_at = utc_now()
    db.commit()
    db.refresh(user)
    return updated(user, message="User status updated successfully")
