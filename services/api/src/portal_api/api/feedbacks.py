"""用户反馈接口。"""

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from portal_api.core.errors import NotFoundError
from portal_api.db.session import get_db
from portal_api.dependencies import AuthContext, ListQuery, list_query, require_auth
from portal_api.models.base import utc_now
from portal_api.models.engagement import Feedback
from portal_api.models.enums import FeedbackStatus
from portal_api.schemas.common import ErrorResponse, ListResponse, SuccessResponse
from portal_api.schemas.engagement import FeedbackCreateRequest, FeedbackData, FeedbackStatusUpdateRequest
from portal_api.utils.listing import FilterSet, build_meta, paginate, resolve_sort
from portal_api.utils.response import created, deleted, success, updated

router = APIRouter(prefix="/feedbacks", tags=["feedbacks"], dependencies=[Depends(require_auth)])

SORT_WHITELIST = {
    "created_at": Feedback.created_at,
    "updated_at": Feedback.updated_at,
    "rating": Feedback.rating,
    "status": Feedback.status,
}


def _get_feedback(db: Session, feedback_id: str) -> Feedback:
    feedback = db.get(Feedback, feedback_id)
    if feedback is None:
        raise NotFoundError("Feedback not found")
    return feedback


@router.get(
    "",
    summary="查询反馈列表",
    status_code=status.HTTP_200_OK,
    response_model=ListResponse[FeedbackData],
    responses={401: {"model": ErrorResponse}},
)
def list_feedbacks(
    query: ListQuery = Depends(list_query),
    dataset_id: str | None = Query(default=None, description="数据集 ID。"),
    category: str | None = Query(default=None, description="反馈分类。"),
    feedback_status: str | None = Query(default=None, alias="status", description="处理状态。"),
    user_id: str | None = Query(default=None, description="提交用户 ID。"),
    db: Session = Depends(get_db),
):
    """分页查询反馈，支持按内容搜索。"""
    pagination = query.pagination()
    conditions = (
        FilterSet()
        .equals(Feedback.dataset_id, dataset_id)
        .equals(Feedback.category, category)
        .equals(Feedback.status, feedback_status)
        .equals(Feedback.user_id, user_id)
        .search(query.search, Feedback.comment)
    )
    rows, total = paginate(
        db,
        conditions.apply(select(Feedback)),
        pagination=pagination,
        order_by=resolve_sort(query.sort_by, query.sort_order, SORT_WHITELIST, tiebreaker=Feedback.id),
    )
    return success(rows, message="Feedbacks retrieved successfully", meta=build_meta(pagination, total))


@router.get(
    "/{feedback_id}",
    summary="查询反馈详情",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[FeedbackData],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def get_feedback(feedback_id: str = Path(..., description="反馈 ID。"), db: Session = Depends(get_db)):
    return success(_get_feedback(db, feedback_id), message="Feedback retrieved successfully")


@router.post(
    "",
    summary="提交反馈",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[FeedbackData],
    responses={401: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def create_feedback(
    payload: FeedbackCreateRequest,
    ctx: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
):
    """提交反馈，提交人取自访问令牌。"""
    feedback = Feedback(
        user_id=ctx.user_id,
        dataset_id=payload.dataset_id or None,
        rating=payload.rating,
        comment=payload.comment,
        category=payload.category,
        status=FeedbackStatus.PENDING,
    )
    db.add(feedback)
    db.commit()
    db.refresh(feedback)
    return created(feedback, message="Feedback created successfully")


@router.patch(
    "/{feedback_id}/status",
    summary="更新反馈状态",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[FeedbackData],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def update_feedback_status(
    payload: FeedbackStatusUpdateRequest,
    feedback_id: str = Path(..., description="反馈 ID。"),
    db: Session = Depends(get_db),
):
    feedback = _get_feedback(db, feedback_id)
    feedback.status = payload.status
    feedback.updated_at = utc_now()
    db.commit()
    db.refresh(feedback)
    return updated(feedback, message="Feedback status updated successfully")


@router.delete(
    "/{feedback_id}",
    summary="删除反馈",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[None],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def delete_feedback(feedback_id: str = Path(..., description="反馈 ID。"), db: Session = Depends(get_db)):
    feedback = _get_feedback(db, feedback_id)
    db.delete(feedback)
    db.commit()
    return deleted(message="Feedback deleted successfully")
