"""出版物接口。"""

import json

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from portal_api.core.errors import NotFoundError
from portal_api.db.session import get_db
from portal_api.dependencies import AuthContext, ListQuery, list_query, require_auth
from portal_api.models.base import utc_now
from portal_api.models.content import Publication
from portal_api.models.enums import PublicationStatus
from portal_api.schemas.common import ErrorResponse, ListResponse, SuccessResponse
from portal_api.schemas.content import PublicationData, PublicationRequest, PublicationStatusUpdateRequest
from portal_api.utils.listing import FilterSet, build_meta, paginate, resolve_sort
from portal_api.utils.response import created, deleted, success, updated
from portal_api.utils.text import blank_to_none

router = APIRouter(prefix="/publications", tags=["publications"])

SORT_WHITELIST = {
    "title": Publication.title,
    "published_date": Publication.published_date,
    "view_count": Publication.view_count,
    "download_count": Publication.download_count,
    "created_at": Publication.created_at,
    "updated_at": Publication.updated_at,
}
_AUTH_ERRORS = {401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}}


def _visible() -> FilterSet:
    return FilterSet().add(Publication.deleted_at.is_(None))


def _get_publication(db: Session, publication_id: str) -> Publication:
    publication = db.execute(
        select(Publication).where(Publication.id == publication_id).where(Publication.deleted_at.is_(None))
    ).scalar_one_or_none()
    if publication is None:
        raise NotFoundError("Publication not found")
    return publication


def _apply_payload(publication: Publication, payload: PublicationRequest) -> None:
    publication.title = payload.title.strip()
    publication.description = blank_to_none(payload.description)
    publication.content = payload.content
    publication.doi = blank_to_none(payload.doi)
    publication.publisher = blank_to_none(payload.publisher)
    publication.published_date = payload.published_date
    publication.dataset_id = blank_to_none(payload.dataset_id)
    publication.organization_id = blank_to_none(payload.organization_id)
    publication.authors = json.dumps(payload.authors, ensure_ascii=False)
    publication.tags = json.dumps(payload.tags, ensure_ascii=False)
    publication.is_featured = payload.is_featured


def _list(db: Session, query: ListQuery, conditions: FilterSet, message: str):
    pagination = query.pagination()
    rows, total = paginate(
        db,
        conditions.apply(select(Publication)),
        pagination=pagination,
        order_by=resolve_sort(query.sort_by, query.sort_order, SORT_WHITELIST, tiebreaker=Publication.id),
    )
    return success(rows, message=message, meta=build_meta(pagination, total))


@router.get(
    "",
    summary="查询出版物列表",
    status_code=status.HTTP_200_OK,
    response_model=ListResponse[PublicationData],
)
def list_publications(
    query: ListQuery = Depends(list_query),
    dataset_id: str | None = Query(default=None, description="数据集 ID。"),
    organization_id: str | None = Query(default=None, description="组织 ID。"),
    publication_status: str | None = Query(default=None, alias="status", description="出版物状态。"),
    is_featured: bool | None = Query(default=None, description="是否精选。"),
    db: Session = Depends(get_db),
):
    """分页查询出版物，支持按标题与摘要搜索。"""
    conditions = (
        _visible()
        .equals(Publication.dataset_id, dataset_id)
        .equals(Publication.organization_id, organization_id)
        .equals(Publication.status, publication_status)
        .equals(Publication.is_featured, is_featured)
        .search(query.search, Publication.title, Publication.description)
    )
    return _list(db, query, conditions, "Publications retrieved successfully")


@router.get(
    "/dataset/{dataset_id}",
    summary="查询数据集下的出版物",
    status_code=status.HTTP_200_OK,
    response_model=ListResponse[PublicationData],
)
def list_dataset_publications(
    dataset_id: str = Path(..., description="数据集 ID。"),
    query: ListQuery = Depends(list_query),
    db: Session = Depends(get_db),
):
    conditions = _visible().equals(Publication.dataset_id, dataset_id)
    return _list(db, query, conditions, "Publications retrieved successfully")


@router.get(
    "/organization/{organization_id}",
    summary="查询组织下的出版物",
    status_code=status.HTTP_200_OK,
    response_model=ListResponse[PublicationData],
)
def list_organization_publications(
    organization_id: str = Path(..., description="组织 ID。"),
    query: ListQuery = Depends(list_query),
    db: Session = Depends(get_db),
):
    conditions = _visible().equals(Publication.organization_id, organization_id)
    return _list(db, query, conditions, "Publications retrieved successfully")


@router.get(
    "/{publication_id}",
    summary="查询出版物详情",
    description="每次读取累加一次访问量。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[PublicationData],
    responses={404: {"model": ErrorResponse}},
)
def get_publication(publication_id: str = Path(..., description="出版物 ID。"), db: Session = Depends(get_db)):
    """查询出版物并累加访问量。"""
    publication = _get_publication(db, publication_id)
    db.execute(
        update(Publication)
        .where(Publication.id == publication.id)
        .values(view_count=Publication.view_count + 1)
    )
    db.commit()
    db.refresh(publication)
    return success(publication, message="Publication retrieved successfully")


@router.post(
    "",
    summary="创建出版物",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[PublicationData],
    responses=_AUTH_ERRORS,
)
def create_publication(
    payload: PublicationRequest,
    ctx: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
):
    publication = Publication(
        status=PublicationStatus.DRAFT,
        view_count=0,
        download_count=0,
        created_by=ctx.user_id,
        updated_by=ctx.user_id,
    )
    _apply_payload(publication, payload)
    db.add(publication)
    db.commit()
    db.refresh(publication)
    return created(publication, message="Publication created successfully")


@router.put(
    "/{publication_id}",
    summary="更新出版物",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[PublicationData],
    responses=_AUTH_ERRORS,
)
def update_publication(
    payload: PublicationRequest,
    publication_id: str = Path(..., description="出版物 ID。"),
    ctx: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
):
    publication = _get_publication(db, publication_id)
    _apply_payload(publication, payload)
    publication.updated_by = ctx.user_id
    publication.updated_at = utc_now()
    db.commit()
    db.refresh(publication)
    return updated(publication, message="Publication updated successfully")


@router.delete(
    "/{publication_id}",
    summary="删除出版物",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[None],
    responses=_AUTH_ERRORS,
)
def delete_publication(
    publication_id: str = Path(..., description="出版物 ID。"),
    ctx: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
):
    publication = _get_publication(db, publication_id)
    publication.deleted_at = utc_now()
    publication.updated_by = ctx.user_id
    db.commit()
    return deleted(message="Publication deleted successfully")


@router.patch(
    "/{publication_id}/status",
    summary="更新出版物状态",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[PublicationData],
    responses=_AUTH_ERRORS,
)
def update_publication_status(
    payload: PublicationStatusUpdateRequest,
    publication_id: str = Path(..., description="出版物 ID。"),
    ctx: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
):
    publication = _get_publication(db, publication_id)
    publication.status = payload.status
    if payload.status == PublicationStatus.PUBLISHED and publication.published_date is None:
        publication.published_date = utc_now()
    publication.updated_by = ctx.user_id
    publication.updated_at = utc_now()
    db.commit()
    db.refresh(publication)
    return updated(publication, message="Publication status updated successfully")


@router.post(
    "/{publication_id}/download",
    summary="记录出版物下载",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[PublicationData],
    responses=_AUTH_ERRORS,
    dependencies=[Depends(require_auth)],
)
def download_publication(
    publication_id: str = Path(..., description="出版物 ID。"),
    db: Session = Depends(get_db),
):
    """累加下载量。"""
    publication = _get_publication(db, publication_id)
    db.execute(
        update(Publication)
        .where(Publication.id == publication.id)
        .values(download_count=Publication.download_count + 1)
    )
    db.commit()
    db.refresh(publication)
    return success(publication, message="Publication download recorded successfully")
