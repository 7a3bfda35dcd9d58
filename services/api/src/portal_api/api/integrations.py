"""外部集成接口，访问凭据只写不读。"""

import logging

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from portal_api.core.errors import NotFoundError
from portal_api.db.session import get_db
from portal_api.dependencies import AuthContext, ListQuery, list_query, require_auth
from portal_api.models.base import utc_now
from portal_api.models.enums import IntegrationStatus
from portal_api.models.system import Integration
from portal_api.schemas.common import ErrorResponse, ListResponse, SuccessResponse
from portal_api.schemas.system import (
    IntegrationCreateRequest,
    IntegrationData,
    IntegrationStatusUpdateRequest,
    IntegrationUpdateRequest,
)
from portal_api.utils.listing import FilterSet, build_meta, paginate, resolve_sort
from portal_api.utils.response import created, deleted, success, updated
from portal_api.utils.text import blank_to_none

router = APIRouter(prefix="/integrations", tags=["integrations"], dependencies=[Depends(require_auth)])
logger = logging.getLogger(__name__)

SORT_WHITELIST = {
    "name": Integration.name,
    "type": Integration.type,
    "status": Integration.status,
    "last_sync_at": Integration.last_sync_at,
    "created_at": Integration.created_at,
    "updated_at": Integration.updated_at,
}
_WRITE_ERRORS = {401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}}


def _get_integration(db: Session, integration_id: str) -> Integration:
    integration = db.execute(
        select(Integration).where(Integration.id == integration_id).where(Integration.deleted_at.is_(None))
    ).scalar_one_or_none()
    if integration is None:
        raise NotFoundError("Integration not found")
    return integration


def _save(db: Session, integration: Integration) -> Integration:
    integration.updated_at = utc_now()
    db.commit()
    db.refresh(integration)
    return integration


@router.get(
    "",
    summary="查询外部集成列表",
    status_code=status.HTTP_200_OK,
    response_model=ListResponse[IntegrationData],
    responses={401: {"model": ErrorResponse}},
)
def list_integrations(
    query: ListQuery = Depends(list_query),
    organization_id: str | None = Query(default=None, description="所属组织 ID。"),
    integration_type: str | None = Query(default=None, alias="type", description="集成类型。"),
    integration_status: str | None = Query(default=None, alias="status", description="集成状态。"),
    db: Session = Depends(get_db),
):
    pagination = query.pagination()
    conditions = (
        FilterSet()
        .add(Integration.deleted_at.is_(None))
        .equals(Integration.organization_id, organization_id)
        .equals(Integration.type, integration_type)
        .equals(Integration.status, integration_status)
        .search(query.search, Integration.name, Integration.description)
    )
    rows, total = paginate(
        db,
        conditions.apply(select(Integration)),
        pagination=pagination,
        order_by=resolve_sort(query.sort_by, query.sort_order, SORT_WHITELIST, tiebreaker=Integration.id),
    )
    return success(rows, message="Integrations retrieved successfully", meta=build_meta(pagination, total))


@router.post(
    "",
    summary="创建外部集成",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[IntegrationData],
    responses={401: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def create_integration(
    payload: IntegrationCreateRequest,
    ctx: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
):
    integration = Integration(
        name=payload.name.strip(),
        type=payload.type,
        description=blank_to_none(payload.description),
        config=payload.config,
        endpoint=blank_to_none(payload.endpoint),
        api_key=blank_to_none(payload.api_key),
        organization_id=blank_to_none(payload.organization_id) or ctx.organization_id or None,
        status=IntegrationStatus.ACTIVE,
        created_by=ctx.user_id,
    )
    db.add(integration)
    db.commit()
    db.refresh(integration)
    return created(integration, message="Integration created successfully")


@router.get(
    "/{integration_id}",
    summary="查询外部集成详情",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[IntegrationData],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def get_integration(integration_id: str = Path(..., description="集成 ID。"), db: Session = Depends(get_db)):
    return success(_get_integration(db, integration_id), message="Integration retrieved successfully")


@router.put(
    "/{integration_id}",
    summary="更新外部集成",
    description="api_key 省略时保留原凭据。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[IntegrationData],
    responses=_WRITE_ERRORS,
)
def update_integration(
    payload: IntegrationUpdateRequest,
    integration_id: str = Path(..., description="集成 ID。"),
    db: Session = Depends(get_db),
):
    integration = _get_integration(db, integration_id)
    integration.name = payload.name.strip()
    integration.description = blank_to_none(payload.description)
    integration.config = payload.config
    integration.endpoint = blank_to_none(payload.endpoint)
    if payload.api_key:
        integration.api_key = payload.api_key
    return updated(_save(db, integration), message="Integration updated successfully")


@router.delete(
    "/{integration_id}",
    summary="删除外部集成",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[None],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def delete_integration(integration_id: str = Path(..., description="集成 ID。"), db: Session = Depends(get_db)):
    integration = _get_integration(db, integration_id)
    integration.deleted_at = utc_now()
    db.commit()
    return deleted(message="Integration deleted successfully")


@router.patch(
    "/{integration_id}/status",
    summary="更新外部集成状态",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[IntegrationData],
    responses=_WRITE_ERRORS,
)
def update_integration_status(
    payload: IntegrationStatusUpdateRequest,
    integration_id: str = Path(..., description="集成 ID。"),
    db: Session = Depends(get_db),
):
    integration = _get_integration(db, integration_id)
    integration.status = payload.status
    return updated(_save(db, integration), message="Integration status updated successfully")


@router.post(
    "/{integration_id}/sync",
    summary="触发同步",
    description="记录最近一次同步时间，实际同步由外部系统执行。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[IntegrationData],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def sync_integration(integration_id: str = Path(..., description="集成 ID。"), db: Session = Depends(get_db)):
    integration = _get_integration(db, integration_id)
    integration.last_sync_at = utc_now()
    _save(db, integration)
    logger.info("integration sync requested: %s type=%s", integration.id, integration.type)
    return success(integration, message="Integration synced successfully")
