"""站内通知接口，读取范围限定为调用人本人。"""

from datetime import datetime

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from portal_api.core.errors import NotFoundError
from portal_api.db.session import get_db
from portal_api.dependencies import AuthContext, ListQuery, list_query, require_auth
from portal_api.models.base import utc_now
from portal_api.models.engagement import Notification
from portal_api.schemas.common import ErrorResponse, ListResponse, SuccessResponse
from portal_api.schemas.engagement import (
    AffectedRowsData,
    NotificationBulkCreateRequest,
    NotificationCountData,
    NotificationCreateRequest,
    NotificationData,
    NotificationMarkReadRequest,
)
from portal_api.services import notifications as notification_service
from portal_api.utils.listing import FilterSet, build_meta, paginate, resolve_sort
from portal_api.utils.response import created, deleted, success, updated

router = APIRouter(prefix="/notifications", tags=["notifications"])

SORT_WHITELIST = {
    "created_at": Notification.created_at,
    "type": Notification.type,
    "category": Notification.category,
    "read": Notification.read,
}
_AUTH_ERRORS = {401: {"model": ErrorResponse}, 422: {"model": ErrorResponse}}


def _get_own_notification(db: Session, notification_id: str, user_id: str) -> Notification:
    notification = db.execute(
        select(Notification)
        .where(Notification.id == notification_id)
        .where(Notification.user_id == user_id)
        .where(Notification.deleted_at.is_(None))
    ).scalar_one_or_none()
    if notification is None:
        raise NotFoundError("Notification not found")
    return notification


@router.get(
    "",
    summary="查询我的通知",
    status_code=status.HTTP_200_OK,
    response_model=ListResponse[NotificationData],
    responses=_AUTH_ERRORS,
)
def list_notifications(
    query: ListQuery = Depends(list_query),
    notification_type: str | None = Query(default=None, alias="type", description="通知级别。"),
    category: str | None = Query(default=None, description="来源分类。"),
    is_read: bool | None = Query(default=None, description="是否已读。"),
    start_date: datetime | None = Query(default=None, description="创建时间下限。"),
    end_date: datetime | None = Query(default=None, description="创建时间上限。"),
    ctx: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
):
    """分页查询调用人的通知。"""
    pagination = query.pagination()
    conditions = (
        FilterSet()
        .add(Notification.user_id == ctx.user_id)
        .add(Notification.deleted_at.is_(None))
        .equals(Notification.type, notification_type)
        .equals(Notification.category, category)
        .equals(Notification.read, is_read)
        .add(Notification.created_at >= start_date if start_date else None)
        .add(Notification.created_at <= end_date if end_date else None)
        .search(query.search, Notification.title, Notification.message)
    )
    rows, total = paginate(
        db,
        conditions.apply(select(Notification)),
        pagination=pagination,
        order_by=resolve_sort(query.sort_by, query.sort_order, SORT_WHITELIST, tiebreaker=Notification.id),
    )
    return success(rows, message="Notifications retrieved successfully", meta=build_meta(pagination, total))


@router.post(
    "",
    summary="创建通知",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[NotificationData],
    responses=_AUTH_ERRORS,
    dependencies=[Depends(require_auth)],
)
def create_notification(payload: NotificationCreateRequest, db: Session = Depends(get_db)):
    notification = Notification(**payload.model_dump(), read=False)
    db.add(notification)
    db.commit()
    db.refresh(notification)
    return created(notification, message="Notification created successfully")


@router.post(
    "/bulk",
    summary="批量创建通知",
    description="同一内容发送给多个用户，重复的用户 ID 只发送一次。",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[AffectedRowsData],
    responses=_AUTH_ERRORS,
    dependencies=[Depends(require_auth)],
)
def bulk_create_notifications(payload: NotificationBulkCreateRequest, db: Session = Depends(get_db)):
    content = payload.model_dump(exclude={"user_ids"})
    user_ids = list(dict.fromkeys(user_id for user_id in payload.user_ids if user_id))
    db.add_all([Notification(user_id=user_id, read=False, **content) for user_id in user_ids])
    db.commit()
    return created({"affected": len(user_ids)}, message="Notifications created successfully")


@router.post(
    "/mark-read",
    summary="标记通知已读",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[AffectedRowsData],
    responses=_AUTH_ERRORS,
)
def mark_notifications_read(
    payload: NotificationMarkReadRequest,
    ctx: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
):
    affected = notification_service.mark_read(db, ctx.user_id, payload.notification_ids)
    return updated({"affected": affected}, message="Notifications marked as read")


@router.post(
    "/mark-all-read",
    summary="全部标记已读",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[AffectedRowsData],
    responses=_AUTH_ERRORS,
)
def mark_all_notifications_read(ctx: AuthContext = Depends(require_auth), db: Session = Depends(get_db)):
    affected = notification_service.mark_all_read(db, ctx.user_id)
    return updated({"affected": affected}, message="All notifications marked as read")


@router.get(
    "/unread-count",
    summary="查询未读数量",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[NotificationCountData],
    responses=_AUTH_ERRORS,
)
def get_unread_count(ctx: AuthContext = Depends(require_auth), db: Session = Depends(get_db)):
    count = notification_service.unread_count(db, ctx.user_id)
    return success({"unread_count": count}, message="Unread count retrieved successfully")


@router.get(
    "/{notification_id}",
    summary="查询通知详情",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[NotificationData],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def get_notification(
    notification_id: str = Path(..., description="通知 ID。"),
    ctx: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
):
    notification = _get_own_notification(db, notification_id, ctx.user_id)
    return success(notification, message="Notification retrieved successfully")


@router.delete(
    "/{notification_id}",
    summary="删除通知",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[None],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def delete_notification(
    notification_id: str = Path(..., description="通知 ID。"),
    ctx: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
):
    notification = _get_own_notification(db, notification_id, ctx.user_id)
    notification.deleted_at = utc_now()
    db.commit()
    return deleted(message="Notification deleted successfully")
