"""可视化接口。"""

import json

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from portal_api.core.errors import NotFoundError
from portal_api.db.session import get_db
from portal_api.dependencies import AuthContext, ListQuery, list_query, require_auth
from portal_api.models.base import utc_now
from portal_api.models.content import Visualization
from portal_api.models.enums import VisualizationStatus
from portal_api.schemas.common import ErrorResponse, ListResponse, SuccessResponse
from portal_api.schemas.content import (
    VisualizationData,
    VisualizationRequest,
    VisualizationStatsData,
    VisualizationStatusUpdateRequest,
)
from portal_api.utils.listing import FilterSet, build_meta, paginate, resolve_sort
from portal_api.utils.response import created, deleted, success, updated
from portal_api.utils.text import blank_to_none

router = APIRouter(prefix="/visualizations", tags=["visualizations"])

SORT_WHITELIST = {
    "title": Visualization.title,
    "type": Visualization.type,
    "status": Visualization.status,
    "created_at": Visualization.created_at,
    "updated_at": Visualization.updated_at,
}
_AUTH_ERRORS = {401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}}


def _visible() -> FilterSet:
    return FilterSet().add(Visualization.deleted_at.is_(None))


def _get_visualization(db: Session, visualization_id: str) -> Visualization:
    visualization = db.execute(
        select(Visualization)
        .where(Visualization.id == visualization_id)
        .where(Visualization.deleted_at.is_(None))
    ).scalar_one_or_none()
    if visualization is None:
        raise NotFoundError("Visualization not found")
    return visualization


def _apply_payload(visualization: Visualization, payload: VisualizationRequest) -> None:
    visualization.title = payload.title.strip()
    visualization.description = blank_to_none(payload.description)
    visualization.type = payload.type
    visualization.config = json.dumps(payload.config, ensure_ascii=False)
    visualization.dataset_id = blank_to_none(payload.dataset_id)
    visualization.organization_id = blank_to_none(payload.organization_id)
    visualization.topic_id = blank_to_none(payload.topic_id)
    visualization.is_highlight = payload.is_highlight


def _list(db: Session, query: ListQuery, conditions: FilterSet):
    pagination = query.pagination()
    rows, total = paginate(
        db,
        conditions.apply(select(Visualization)),
        pagination=pagination,
        order_by=resolve_sort(query.sort_by, query.sort_order, SORT_WHITELIST, tiebreaker=Visualization.id),
    )
    return success(rows, message="Visualizations retrieved successfully", meta=build_meta(pagination, total))


@router.get(
    "",
    summary="查询可视化列表",
    status_code=status.HTTP_200_OK,
    response_model=ListResponse[VisualizationData],
)
def list_visualizations(
    query: ListQuery = Depends(list_query),
    dataset_id: str | None = Query(default=None, description="数据集 ID。"),
    organization_id: str | None = Query(default=None, description="组织 ID。"),
    topic_id: str | None = Query(default=None, description="主题 ID。"),
    visualization_type: str | None = Query(default=None, alias="type", description="图表类型。"),
    visualization_status: str | None = Query(default=None, alias="status", description="可视化状态。"),
    is_highlight: bool | None = Query(default=None, description="是否首页推荐。"),
    db: Session = Depends(get_db),
):
    """分页查询可视化，支持按标题与说明搜索。"""
    conditions = (
        _visible()
        .equals(Visualization.dataset_id, dataset_id)
        .equals(Visualization.organization_id, organization_id)
        .equals(Visualization.topic_id, topic_id)
        .equals(Visualization.type, visualization_type)
        .equals(Visualization.status, visualization_status)
        .equals(Visualization.is_highlight, is_highlight)
        .search(query.search, Visualization.title, Visualization.description)
    )
    return _list(db, query, conditions)


@router.get(
    "/stats",
    summary="可视化数量统计",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[VisualizationStatsData],
)
def visualization_stats(db: Session = Depends(get_db)):
    """按状态与类型统计未删除的可视化。"""
    by_status = dict(
        db.execute(
            select(Visualization.status, func.count(Visualization.id))
            .where(Visualization.deleted_at.is_(None))
            .group_by(Visualization.status)
        ).all()
    )
    by_type = dict(
        db.execute(
            select(Visualization.type, func.count(Visualization.id))
            .where(Visualization.deleted_at.is_(None))
            .group_by(Visualization.type)
        ).all()
    )
    highlighted = db.execute(
        select(func.count(Visualization.id))
        .where(Visualization.deleted_at.is_(None))
        .where(Visualization.is_highlight.is_(True))
    ).scalar_one()
    data = {
        "total": sum(by_status.values()),
        "by_status": by_status,
        "by_type": by_type,
        "highlighted": highlighted,
    }
    return success(data, message="Visualization stats retrieved successfully")


@router.get(
    "/dataset/{dataset_id}",
    summary="查询数据集下的可视化",
    status_code=status.HTTP_200_OK,
    response_model=ListResponse[VisualizationData],
)
def list_dataset_visualizations(
    dataset_id: str = Path(..., description="数据集 ID。"),
    query: ListQuery = Depends(list_query),
    db: Session = Depends(get_db),
):
    return _list(db, query, _visible().equals(Visualization.dataset_id, dataset_id))


@router.get(
    "/organization/{organization_id}",
    summary="查询组织下的可视化",
    status_code=status.HTTP_200_OK,
    response_model=ListResponse[VisualizationData],
)
def list_organization_visualizations(
    organization_id: str = Path(..., description="组织 ID。"),
    query: ListQuery = Depends(list_query),
    db: Session = Depends(get_db),
):
    return _list(db, query, _visible().equals(Visualization.organization_id, organization_id))


@router.get(
    "/{visualization_id}",
    summary="查询可视化详情",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[VisualizationData],
    responses={404: {"model": ErrorResponse}},
)
def get_visualization(
    visualization_id: str = Path(..., description="可视化 ID。"),
    db: Session = Depends(get_db),
):
    return success(_get_visualization(db, visualization_id), message="Visualization retrieved successfully")


@router.post(
    "",
    summary="创建可视化",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[VisualizationData],
    responses=_AUTH_ERRORS,
)
def create_visualization(
    payload: VisualizationRequest,
    ctx: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
):
    visualization = Visualization(
        status=VisualizationStatus.DRAFT,
        created_by=ctx.user_id,
        updated_by=ctx.user_id,
    )
    _apply_payload(visualization, payload)
    db.add(visualization)
    db.commit()
    db.refresh(visualization)
    return created(visualization, message="Visualization created successfully")


@router.put(
    "/{visualization_id}",
    summary="更新可视化",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[VisualizationData],
    responses=_AUTH_ERRORS,
)
def update_visualization(
    payload: VisualizationRequest,
    visualization_id: str = Path(..., description="可视化 ID。"),
    ctx: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
):
    visualization = _get_visualization(db, visualization_id)
    _apply_payload(visualization, payload)
    visualization.updated_by = ctx.user_id
    visualization.updated_at = utc_now()
    db.commit()
    db.refresh(visualization)
    return updated(visualization, message="Visualization updated successfully")


@router.delete(
    "/{visualization_id}",
    summary="删除可视化",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[None],
    responses=_AUTH_ERRORS,
)
def delete_visualization(
    visualization_id: str = Path(..., description="可视化 ID。"),
    ctx: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
):
    visualization = _get_visualization(db, visualization_id)
    visualization.deleted_at = utc_now()
    visualization.updated_by = ctx.user_id
    db.commit()
    return deleted(message="Visualization deleted successfully")


@router.patch(
    "/{visualization_id}/status",
    summary="更新可视化状态",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[VisualizationData],
    responses=_AUTH_ERRORS,
)
def update_visualization_status(
    payload: VisualizationStatusUpdateRequest,
    visualization_id: str = Path(..., description="可视化 ID。"),
    ctx: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
):
    visualization = _get_visualization(db, visualization_id)
    visualization.status = payload.status
    visualization.updated_by = ctx.user_id
    visualization.updated_at = utc_now()
    db.commit()
    db.refresh(visualization)
    return updated(visualization, message="Visualization status updated successfully")
