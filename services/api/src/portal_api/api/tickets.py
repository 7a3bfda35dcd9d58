"""服务台工单接口。"""

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from portal_api.core.errors import NotFoundError
from portal_api.db.session import get_db
from portal_api.dependencies import AuthContext, ListQuery, list_query, require_auth
from portal_api.models.base import utc_now
from portal_api.models.engagement import Ticket
from portal_api.models.enums import TicketStatus
from portal_api.schemas.common import ErrorResponse, ListResponse, SuccessResponse
from portal_api.schemas.engagement import (
    TicketAssignRequest,
    TicketCreateRequest,
    TicketData,
    TicketStatusUpdateRequest,
    TicketUpdateRequest,
)
from portal_api.utils.listing import FilterSet, build_meta, paginate, resolve_sort
from portal_api.utils.response import created, deleted, success, updated

router = APIRouter(prefix="/tickets", tags=["tickets"], dependencies=[Depends(require_auth)])

SORT_WHITELIST = {
    "title": Ticket.title,
    "status": Ticket.status,
    "priority": Ticket.priority,
    "category": Ticket.category,
    "created_at": Ticket.created_at,
    "updated_at": Ticket.updated_at,
}
_WRITE_ERRORS = {401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}}


def _get_ticket(db: Session, ticket_id: str) -> Ticket:
    ticket = db.execute(
        select(Ticket).where(Ticket.id == ticket_id).where(Ticket.deleted_at.is_(None))
    ).scalar_one_or_none()
    if ticket is None:
        raise NotFoundError("Ticket not found")
    return ticket


def _save(db: Session, ticket: Ticket) -> Ticket:
    ticket.updated_at = utc_now()
    db.commit()
    db.refresh(ticket)
    return ticket


@router.get(
    "",
    summary="查询工单列表",
    status_code=status.HTTP_200_OK,
    response_model=ListResponse[TicketData],
    responses={401: {"model": ErrorResponse}},
)
def list_tickets(
    query: ListQuery = Depends(list_query),
    user_id: str | None = Query(default=None, description="提单用户 ID。"),
    assigned_to: str | None = Query(default=None, description="处理人 ID。"),
    ticket_status: str | None = Query(default=None, alias="status", description="工单状态。"),
    priority: str | None = Query(default=None, description="优先级。"),
    category: str | None = Query(default=None, description="工单分类。"),
    db: Session = Depends(get_db),
):
    """分页查询工单，支持按标题与描述搜索。"""
    pagination = query.pagination()
    conditions = (
        FilterSet()
        .add(Ticket.deleted_at.is_(None))
        .equals(Ticket.user_id, user_id)
        .equals(Ticket.assigned_to, assigned_to)
        .equals(Ticket.status, ticket_status)
        .equals(Ticket.priority, priority)
        .equals(Ticket.category, category)
        .search(query.search, Ticket.title, Ticket.description)
    )
    rows, total = paginate(
        db,
        conditions.apply(select(Ticket)),
        pagination=pagination,
        order_by=resolve_sort(query.sort_by, query.sort_order, SORT_WHITELIST, tiebreaker=Ticket.id),
    )
    return success(rows, message="Tickets retrieved successfully", meta=build_meta(pagination, total))


@router.post(
    "",
    summary="创建工单",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[TicketData],
    responses={401: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def create_ticket(
    payload: TicketCreateRequest,
    ctx: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
):
    """创建工单，提单人取自访问令牌。"""
    ticket = Ticket(
        title=payload.title.strip(),
        description=payload.description,
        priority=payload.priority,
        category=payload.category,
        status=TicketStatus.OPEN,
        user_id=ctx.user_id,
        created_by=ctx.user_id,
    )
    db.add(ticket)
    db.commit()
    db.refresh(ticket)
    return created(ticket, message="Ticket created successfully")


@router.get(
    "/{ticket_id}",
    summary="查询工单详情",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[TicketData],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def get_ticket(ticket_id: str = Path(..., description="工单 ID。"), db: Session = Depends(get_db)):
    return success(_get_ticket(db, ticket_id), message="Ticket retrieved successfully")


@router.put(
    "/{ticket_id}",
    summary="更新工单",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[TicketData],
    responses=_WRITE_ERRORS,
)
def update_ticket(
    payload: TicketUpdateRequest,
    ticket_id: str = Path(..., description="工单 ID。"),
    db: Session = Depends(get_db),
):
    ticket = _get_ticket(db, ticket_id)
    ticket.title = payload.title.strip()
    ticket.description = payload.description
    ticket.priority = payload.priority
    ticket.category = payload.category
    return updated(_save(db, ticket), message="Ticket updated successfully")


@router.delete(
    "/{ticket_id}",
    summary="删除工单",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[None],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def delete_ticket(ticket_id: str = Path(..., description="工单 ID。"), db: Session = Depends(get_db)):
    ticket = _get_ticket(db, ticket_id)
    ticket.deleted_at = utc_now()
    db.commit()
    return deleted(message="Ticket deleted successfully")


@router.patch(
    "/{ticket_id}/status",
    summary="更新工单状态",
    description="置为 resolved 时记录解决时间。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[TicketData],
    responses=_WRITE_ERRORS,
)
def update_ticket_status(
    payload: TicketStatusUpdateRequest,
    ticket_id: str = Path(..., description="工单 ID。"),
    db: Session = Depends(get_db),
):
    ticket = _get_ticket(db, ticket_id)
    ticket.status = payload.status
    if payload.status == TicketStatus.RESOLVED:
        ticket.resolved_at = utc_now()
    return updated(_save(db, ticket), message="Ticket status updated successfully")


@router.patch(
    "/{ticket_id}/assign",
    summary="指派工单",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[TicketData],
    responses=_WRITE_ERRORS,
)
def assign_ticket(
    payload: TicketAssignRequest,
    ticket_id: str = Path(..., description="工单 ID。"),
    db: Session = Depends(get_db),
):
    ticket = _get_ticket(db, ticket_id)
    ticket.assigned_to = payload.assigned_to
    return updated(_save(db, ticket), message="Ticket assigned successfully")
