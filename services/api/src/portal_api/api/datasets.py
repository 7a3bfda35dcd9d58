"""数据集接口。"""

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from portal_api.core.errors import InvalidInputError
from portal_api.db.session import get_db
from portal_api.dependencies import AuthContext, ListQuery, list_query, require_auth
from portal_api.schemas.common import ErrorResponse, ListResponse, SuccessResponse
from portal_api.schemas.dataset import (
    DatasetCreateRequest,
    DatasetData,
    DatasetStatusUpdateRequest,
    DatasetUpdateRequest,
)
from portal_api.services import datasets as dataset_service
from portal_api.services.datasets import DatasetFilter, DatasetView
from portal_api.utils.listing import build_meta
from portal_api.utils.response import created, deleted, success, updated
from portal_api.utils.text import blank_to_none

router = APIRouter(prefix="/datasets", tags=["datasets"])

_WRITE_ERRORS = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
}
_OPTIONAL_TEXT_FIELDS = ("description", "period", "unit_id", "business_field_id", "image", "topic_id", "reference_id")


def _dataset_payload(view: DatasetView) -> dict:
    """主行字段平铺，单值关联与标签作为嵌套对象。"""
    payload = DatasetData.model_validate(view.dataset).model_dump(
        exclude={"organization", "unit", "business_field", "topic", "tags"}
    )
    payload.update(
        organization=view.organization,
        unit=view.unit,
        business_field=view.business_field,
        topic=view.topic,
        tags=view.tags,
    )
    return payload


def _scalar_values(payload: DatasetCreateRequest | DatasetUpdateRequest) -> dict:
    values = payload.model_dump(exclude={"tag_ids"})
    values["name"] = values["name"].strip()
    for key in _OPTIONAL_TEXT_FIELDS:
        values[key] = blank_to_none(values[key])
    return values


@router.get(
    "",
    summary="查询数据集列表",
    description="分页查询未归档数据集；排序字段限定 name/created_at/updated_at/category/classification。",
    status_code=status.HTTP_200_OK,
    response_model=ListResponse[DatasetData],
)
def list_datasets(
    query: ListQuery = Depends(list_query),
    organization_id: str | None = Query(default=None, description="组织 ID。"),
    topic_id: str | None = Query(default=None, description="主题 ID。"),
    business_field_id: str | None = Query(default=None, description="业务领域 ID。"),
    tag_id: str | None = Query(default=None, description="标签 ID。"),
    dataset_status: str | None = Query(default=None, alias="status", description="生命周期状态。"),
    validation_status: str | None = Query(default=None, description="校验状态。"),
    classification: str | None = Query(default=None, description="数据分级。"),
    db: Session = Depends(get_db),
):
    """分页查询数据集聚合。"""
    pagination = query.pagination()
    views, total = dataset_service.list_datasets(
        db,
        DatasetFilter(
            organization_id=organization_id,
            topic_id=topic_id,
            business_field_id=business_field_id,
            tag_id=tag_id,
            status=dataset_status,
            validation_status=validation_status,
            classification=classification,
            search=query.search,
        ),
        pagination,
        sort_by=query.sort_by,
        sort_order=query.sort_order,
    )
    return success(
        [_dataset_payload(view) for view in views],
        message="Datasets retrieved successfully",
        meta=build_meta(pagination, total),
    )


@router.get(
    "/slug/{slug}",
    summary="按短标识查询数据集",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[DatasetData],
    responses={404: {"model": ErrorResponse}},
)
def get_dataset_by_slug(
    slug: str = Path(..., description="数据集短标识。"),
    db: Session = Depends(get_db),
):
    """按短标识查询数据集。"""
    view = dataset_service.get_by_slug(db, slug)
    return success(_dataset_payload(view), message="Dataset retrieved successfully")


@router.get(
    "/{dataset_id}",
    summary="查询数据集详情",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[DatasetData],
    responses={404: {"model": ErrorResponse}},
)
def get_dataset(
    dataset_id: str = Path(..., description="数据集 ID。"),
    db: Session = Depends(get_db),
):
    """按 ID 查询数据集。"""
    view = dataset_service.get_by_id(db, dataset_id)
    return success(_dataset_payload(view), message="Dataset retrieved successfully")


@router.post(
    "",
    summary="创建数据集",
    description="所属组织取自访问令牌；主行与标签链接在同一事务内写入。",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[DatasetData],
    responses=_WRITE_ERRORS,
)
def create_dataset(
    payload: DatasetCreateRequest,
    ctx: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
):
    """创建数据集。"""
    if not ctx.organization_id:
        raise InvalidInputError("Organization ID is required")

    view = dataset_service.create_dataset(
        db,
        values=_scalar_values(payload),
        tag_ids=payload.tag_ids,
        organization_id=ctx.organization_id,
        created_by=ctx.user_id,
    )
    return created(_dataset_payload(view), message="Dataset created successfully")


@router.put(
    "/{dataset_id}",
    summary="更新数据集",
    description="更新标量字段；传入 tag_ids 时整体替换标签集合。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[DatasetData],
    responses=_WRITE_ERRORS,
)
def update_dataset(
    payload: DatasetUpdateRequest,
    dataset_id: str = Path(..., description="数据集 ID。"),
    ctx: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
):
    """更新数据集。"""
    view = dataset_service.update_dataset(
        db,
        dataset_id,
        values=_scalar_values(payload),
        tag_ids=payload.tag_ids,
        updated_by=ctx.user_id,
    )
    return updated(_dataset_payload(view), message="Dataset updated successfully")


@router.delete(
    "/{dataset_id}",
    summary="归档数据集",
    description="逻辑删除：状态置为 archived，之后所有读取接口均不可见。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[None],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def delete_dataset(
    dataset_id: str = Path(..., description="数据集 ID。"),
    ctx: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
):
    """归档数据集。"""
    dataset_service.archive_dataset(db, dataset_id, updated_by=ctx.user_id)
    return deleted(message="Dataset deleted successfully")


@router.patch(
    "/{dataset_id}/status",
    summary="更新数据集状态",
    description="直接写入 draft/published/archived，写入 archived 后响应数据为空。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[DatasetData | None],
    responses=_WRITE_ERRORS,
)
def update_dataset_status(
    payload: DatasetStatusUpdateRequest,
    dataset_id: str = Path(..., description="数据集 ID。"),
    ctx: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
):
    """更新数据集生命周期状态。"""
    view = dataset_service.update_status(db, dataset_id, payload.status, updated_by=ctx.user_id)
    data = _dataset_payload(view) if view is not None else None
    return updated(data, message="Dataset status updated successfully")
