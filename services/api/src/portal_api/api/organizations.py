"""组织管理接口。"""

import logging

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from portal_api.core.errors import AlreadyExistsError, NotFoundError
from portal_api.db.session import get_db
from portal_api.dependencies import AuthContext, ListQuery, list_query, require_auth
from portal_api.models.base import utc_now
from portal_api.models.enums import OrganizationStatus
from portal_api.models.organization import Organization
from portal_api.schemas.common import ErrorResponse, ListResponse, SuccessResponse
from portal_api.schemas.organization import (
    OrganizationCreateRequest,
    OrganizationData,
    OrganizationStatusUpdateRequest,
    OrganizationUpdateRequest,
)
from portal_api.utils.listing import FilterSet, build_meta, paginate, resolve_sort
from portal_api.utils.response import created, deleted, success, updated
from portal_api.utils.text import blank_to_none, slugify

router = APIRouter(prefix="/organizations", tags=["organizations"])
logger = logging.getLogger(__name__)

SORT_WHITELIST = {
    "name": Organization.name,
    "code": Organization.code,
    "status": Organization.status,
    "created_at": Organization.created_at,
    "updated_at": Organization.updated_at,
}


def _get_organization(db: Session, organization_id: str) -> Organization:
    organization = db.get(Organization, organization_id)
    if organization is None:
        raise NotFoundError("Organization not found")
    return organization


@router.get(
    "",
    summary="查询组织列表",
    status_code=status.HTTP_200_OK,
    response_model=ListResponse[OrganizationData],
)
def list_organizations(
    query: ListQuery = Depends(list_query),
    organization_status: str | None = Query(default=None, alias="status", description="组织状态。"),
    db: Session = Depends(get_db),
):
    """分页查询组织，支持按名称与编码搜索。"""
    pagination = query.pagination()
    conditions = (
        FilterSet()
        .equals(Organization.status, organization_status)
        .search(query.search, Organization.name, Organization.code)
    )
    rows, total = paginate(
        db,
        conditions.apply(select(Organization)),
        pagination=pagination,
        order_by=resolve_sort(query.sort_by, query.sort_order, SORT_WHITELIST, tiebreaker=Organization.id),
    )
    return success(rows, message="Organizations retrieved successfully", meta=build_meta(pagination, total))


@router.get(
    "/code/{code}",
    summary="按编码查询组织",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[OrganizationData],
    responses={404: {"model": ErrorResponse}},
)
def get_organization_by_code(
    code: str = Path(..., description="组织编码，不区分大小写。"),
    db: Session = Depends(get_db),
):
    """按编码查询组织。"""
    organization = db.execute(
        select(Organization).where(Organization.code == code.strip().upper())
    ).scalar_one_or_none()
    if organization is None:
        raise NotFoundError("Organization not found")
    return success(organization, message="Organization retrieved successfully")


@router.get(
    "/{organization_id}",
    summary="查询组织详情",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[OrganizationData],
    responses={404: {"model": ErrorResponse}},
)
def get_organization(
    organization_id: str = Path(..., description="组织 ID。"),
    db: Session = Depends(get_db),
):
    """查询单个组织。"""
    return success(_get_organization(db, organization_id), message="Organization retrieved successfully")


def _code_taken(db: Session, code: str) -> bool:
    return db.execute(select(Organization.id).where(Organization.code == code)).first() is not None


@router.post(
    "",
    summary="创建组织",
    description="编码统一转为大写且全局唯一，短标识由名称派生。",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[OrganizationData],
    responses={401: {"model": ErrorResponse}, 409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def create_organization(
    payload: OrganizationCreateRequest,
    ctx: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
):
    """创建组织。"""
    code = payload.code.strip().upper()
    if _code_taken(db, code):
        raise AlreadyExistsError("Organization code already exists")

    organization = Organization(
        code=code,
        name=payload.name.strip(),
        slug=slugify(payload.name),
        description=blank_to_none(payload.description),
        logo_url=blank_to_none(payload.logo_url),
        phone_number=blank_to_none(payload.phone_number),
        address=blank_to_none(payload.address),
        website_url=blank_to_none(payload.website_url),
        email=blank_to_none(payload.email),
        status=OrganizationStatus.ACTIVE,
        created_by=ctx.user_id,
        updated_by=ctx.user_id,
    )
    db.add(organization)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise AlreadyExistsError("Organization code already exists") from None
    db.refresh(organization)
    logger.info("organization created: %s (%s)", organization.id, organization.code)
    return created(organization, message="Organization created successfully")


@router.put(
    "/{organization_id}",
    summary="更新组织",
    description="名称变更时重新计算短标识，可选字段传空字符串即清空。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[OrganizationData],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def update_organization(
    payload: OrganizationUpdateRequest,
    organization_id: str = Path(..., description="组织 ID。"),
    ctx: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
):
    """更新组织资料。"""
    organization = _get_organization(db, organization_id)
    organization.name = payload.name.strip()
    organization.slug = slugify(payload.name)
    organization.description = blank_to_none(payload.description)
    organization.logo_url = blank_to_none(payload.logo_url)
    organization.phone_number = blank_to_none(payload.phone_number)
    organization.address = blank_to_none(payload.address)
    organization.website_url = blank_to_none(payload.website_url)
    organization.email = blank_to_none(payload.email)
    organization.updated_by = ctx.user_id
    organization.updated_at = utc_now()
    db.commit()
    db.refresh(organization)
    return updated(organization, message="Organization updated successfully")


@router.delete(
    "/{organization_id}",
    summary="删除组织",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[None],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def delete_organization(
    organization_id: str = Path(..., description="组织 ID。"),
    ctx: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
):
    """删除组织。"""
    organization = _get_organization(db, organization_id)
    db.delete(organization)
    db.commit()
    logger.info("organization %s deleted by %s", organization_id, ctx.user_id)
    return deleted(message="Organization deleted successfully")


@router.patch(
    "/{organization_id}/status",
    summary="更新组织状态",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[OrganizationData],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def update_organization_status(
    payload: OrganizationStatusUpdateRequest,
    organization_id: str = Path(..., description="组织 ID。"),
    ctx: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
):
    """启用、停用或暂停组织。"""
    organization = _get_organization(db, organization_id)
    organization.status = payload.status
    organization.updated_by = ctx.user_id
    organization.updated_at = utc_now()
    db.commit()
    db.refresh(organization)
    return updated(organization, message="Organization status updated successfully")
