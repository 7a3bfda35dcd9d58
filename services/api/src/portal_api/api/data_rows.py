"""数据集明细行接口。

集合操作挂在 /datasets/{dataset_id}/data-rows 下，单行操作挂在 /data-rows/{id} 下。
"""

import json

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from portal_api.core.errors import NotFoundError
from portal_api.db.session import get_db
from portal_api.dependencies import AuthContext, ListQuery, list_query, require_auth
from portal_api.models.base import utc_now
from portal_api.models.content import DataRow
from portal_api.models.dataset import Dataset
from portal_api.models.enums import DatasetStatus
from portal_api.schemas.common import ErrorResponse, ListResponse, SuccessResponse
from portal_api.schemas.content import (
    DataRowBulkCreateRequest,
    DataRowCreateRequest,
    DataRowData,
    DataRowStatsData,
    DataRowUpdateRequest,
)
from portal_api.schemas.engagement import AffectedRowsData
from portal_api.utils.listing import DATA_ROW_MAX_LIMIT, FilterSet, build_meta, fixed_order, paginate
from portal_api.utils.response import created, deleted, success, updated

dataset_rows_router = APIRouter(
    prefix="/datasets/{dataset_id}/data-rows",
    tags=["data-rows"],
    dependencies=[Depends(require_auth)],
)
router = APIRouter(prefix="/data-rows", tags=["data-rows"], dependencies=[Depends(require_auth)])

_ERRORS = {401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}}


def _ensure_dataset(db: Session, dataset_id: str) -> None:
    found = db.execute(
        select(Dataset.id).where(Dataset.id == dataset_id).where(Dataset.status != DatasetStatus.ARCHIVED)
    ).first()
    if found is None:
        raise NotFoundError("Dataset not found")


def _get_row(db: Session, row_id: str) -> DataRow:
    row = db.execute(
        select(DataRow).where(DataRow.id == row_id).where(DataRow.deleted_at.is_(None))
    ).scalar_one_or_none()
    if row is None:
        raise NotFoundError("Data row not found")
    return row


def _encode(data: dict) -> str:
    return json.dumps(data, ensure_ascii=False)


@dataset_rows_router.get(
    "",
    summary="查询数据集明细行",
    description="固定按 row_index 升序，每页上限 1000 行；search 匹配行内容文本。",
    status_code=status.HTTP_200_OK,
    response_model=ListResponse[DataRowData],
    responses={401: {"model": ErrorResponse}},
)
def list_data_rows(
    dataset_id: str = Path(..., description="数据集 ID。"),
    query: ListQuery = Depends(list_query),
    db: Session = Depends(get_db),
):
    pagination = query.pagination(max_limit=DATA_ROW_MAX_LIMIT)
    conditions = (
        FilterSet()
        .add(DataRow.dataset_id == dataset_id)
        .add(DataRow.deleted_at.is_(None))
        .search(query.search, DataRow.data)
    )
    rows, total = paginate(
        db,
        conditions.apply(select(DataRow)),
        pagination=pagination,
        order_by=fixed_order(DataRow.row_index, DataRow.id),
    )
    return success(rows, message="Data rows retrieved successfully", meta=build_meta(pagination, total))


@dataset_rows_router.post(
    "",
    summary="新增明细行",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[DataRowData],
    responses=_ERRORS,
)
def create_data_row(
    payload: DataRowCreateRequest,
    dataset_id: str = Path(..., description="数据集 ID。"),
    ctx: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
):
    _ensure_dataset(db, dataset_id)
    row = DataRow(
        dataset_id=dataset_id,
        row_index=payload.row_index,
        data=_encode(payload.data),
        created_by=ctx.user_id,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return created(row, message="Data row created successfully")


@dataset_rows_router.post(
    "/bulk",
    summary="批量新增明细行",
    description="单次最多 1000 行，全部成功或全部失败。",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[AffectedRowsData],
    responses=_ERRORS,
)
def bulk_create_data_rows(
    payload: DataRowBulkCreateRequest,
    dataset_id: str = Path(..., description="数据集 ID。"),
    ctx: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
):
    _ensure_dataset(db, dataset_id)
    db.add_all(
        [
            DataRow(dataset_id=dataset_id, row_index=item.row_index, data=_encode(item.data), created_by=ctx.user_id)
            for item in payload.rows
        ]
    )
    db.commit()
    return created({"affected": len(payload.rows)}, message="Data rows created successfully")


@dataset_rows_router.get(
    "/stats",
    summary="明细行统计",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[DataRowStatsData],
    responses={401: {"model": ErrorResponse}},
)
def data_row_stats(dataset_id: str = Path(..., description="数据集 ID。"), db: Session = Depends(get_db)):
    total, max_row_index = db.execute(
        select(func.count(DataRow.id), func.max(DataRow.row_index))
        .where(DataRow.dataset_id == dataset_id)
        .where(DataRow.deleted_at.is_(None))
    ).one()
    data = {"dataset_id": dataset_id, "total_rows": total, "max_row_index": max_row_index}
    return success(data, message="Data row stats retrieved successfully")


@dataset_rows_router.delete(
    "",
    summary="清空数据集明细行",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[AffectedRowsData],
    responses={401: {"model": ErrorResponse}},
)
def delete_dataset_rows(dataset_id: str = Path(..., description="数据集 ID。"), db: Session = Depends(get_db)):
    """逻辑删除数据集下全部行。"""
    now = utc_now()
    result = db.execute(
        update(DataRow)
        .where(DataRow.dataset_id == dataset_id)
        .where(DataRow.deleted_at.is_(None))
        .values(deleted_at=now, updated_at=now)
    )
    db.commit()
    return success({"affected": result.rowcount}, message="Data rows deleted successfully")


@router.get(
    "/{row_id}",
    summary="查询明细行",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[DataRowData],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def get_data_row(row_id: str = Path(..., description="数据行 ID。"), db: Session = Depends(get_db)):
    return success(_get_row(db, row_id), message="Data row retrieved successfully")


@router.put(
    "/{row_id}",
    summary="更新明细行",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[DataRowData],
    responses=_ERRORS,
)
def update_data_row(
    payload: DataRowUpdateRequest,
    row_id: str = Path(..., description="数据行 ID。"),
    db: Session = Depends(get_db),
):
    row = _get_row(db, row_id)
    row.data = _encode(payload.data)
    row.updated_at = utc_now()
    db.commit()
    db.refresh(row)
    return updated(row, message="Data row updated successfully")


@router.delete(
    "/{row_id}",
    summary="删除明细行",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[None],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def delete_data_row(row_id: str = Path(..., description="数据行 ID。"), db: Session = Depends(get_db)):
    row = _get_row(db, row_id)
    row.deleted_at = utc_now()
    db.commit()
    return deleted(message="Data row deleted successfully")
