"""文件上传与元数据接口。"""

import logging

from fastapi import APIRouter, Depends, File, Form, Path, Query, UploadFile, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from portal_api.core.errors import NotFoundError
from portal_api.db.session import get_db
from portal_api.dependencies import AuthContext, ListQuery, list_query, require_auth
from portal_api.models.base import utc_now
from portal_api.models.content import StoredFile
from portal_api.models.enums import FileStatus, StorageType
from portal_api.schemas.common import ErrorResponse, ListResponse, SuccessResponse
from portal_api.schemas.content import FileData, FileStatusUpdateRequest
from portal_api.services.storage import persist_upload, safe_filename
from portal_api.utils.listing import FilterSet, build_meta, paginate, resolve_sort
from portal_api.utils.response import created, deleted, success, updated

router = APIRouter(prefix="/files", tags=["files"], dependencies=[Depends(require_auth)])
logger = logging.getLogger(__name__)

SORT_WHITELIST = {
    "name": StoredFile.name,
    "original_name": StoredFile.original_name,
    "size": StoredFile.size,
    "created_at": StoredFile.created_at,
    "updated_at": StoredFile.updated_at,
}
DEFAULT_MIME_TYPE = "application/octet-stream"


def _visible_files() -> FilterSet:
    return FilterSet().add(StoredFile.status != FileStatus.DELETED)


def _get_file(db: Session, file_id: str) -> StoredFile:
    stored = db.execute(
        select(StoredFile).where(StoredFile.id == file_id).where(StoredFile.status != FileStatus.DELETED)
    ).scalar_one_or_none()
    if stored is None:
        raise NotFoundError("File not found")
    return stored


@router.get(
    "",
    summary="查询文件列表",
    status_code=status.HTTP_200_OK,
    response_model=ListResponse[FileData],
    responses={401: {"model": ErrorResponse}},
)
def list_files(
    query: ListQuery = Depends(list_query),
    dataset_id: str | None = Query(default=None, description="数据集 ID。"),
    file_status: str | None = Query(default=None, alias="status", description="文件状态。"),
    db: Session = Depends(get_db),
):
    """分页查询文件，支持按文件名搜索。"""
    pagination = query.pagination()
    conditions = (
        _visible_files()
        .equals(StoredFile.dataset_id, dataset_id)
        .equals(StoredFile.status, file_status)
        .search(query.search, StoredFile.name, StoredFile.original_name)
    )
    rows, total = paginate(
        db,
        conditions.apply(select(StoredFile)),
        pagination=pagination,
        order_by=resolve_sort(query.sort_by, query.sort_order, SORT_WHITELIST, tiebreaker=StoredFile.id),
    )
    return success(rows, message="Files retrieved successfully", meta=build_meta(pagination, total))


@router.get(
    "/dataset/{dataset_id}",
    summary="查询数据集下的文件",
    status_code=status.HTTP_200_OK,
    response_model=ListResponse[FileData],
    responses={401: {"model": ErrorResponse}},
)
def list_dataset_files(
    dataset_id: str = Path(..., description="数据集 ID。"),
    query: ListQuery = Depends(list_query),
    db: Session = Depends(get_db),
):
    pagination = query.pagination()
    conditions = _visible_files().equals(StoredFile.dataset_id, dataset_id)
    rows, total = paginate(
        db,
        conditions.apply(select(StoredFile)),
        pagination=pagination,
        order_by=resolve_sort(query.sort_by, query.sort_order, SORT_WHITELIST, tiebreaker=StoredFile.id),
    )
    return success(rows, message="Files retrieved successfully", meta=build_meta(pagination, total))


@router.get(
    "/{file_id}",
    summary="查询文件详情",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[FileData],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def get_file(file_id: str = Path(..., description="文件 ID。"), db: Session = Depends(get_db)):
    return success(_get_file(db, file_id), message="File retrieved successfully")


@router.post(
    "/upload",
    summary="上传文件",
    description="表单字段 file 为文件内容，dataset_id 可选。",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[FileData],
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
def upload_file(
    file: UploadFile = File(..., description="上传的文件。"),
    dataset_id: str | None = Form(default=None, description="关联数据集 ID。"),
    ctx: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
):
    """保存文件内容并记录元数据。"""
    content = file.file.read()
    stored_object = persist_upload(file.filename, content)

    stored = StoredFile(
        name=stored_object.name,
        original_name=safe_filename(file.filename),
        extension=stored_object.extension,
        size=stored_object.size,
        mime_type=file.content_type or DEFAULT_MIME_TYPE,
        path=f"/storage/{stored_object.object_key}",
        storage_path=stored_object.object_key,
        storage_type=StorageType.LOCAL,
        dataset_id=dataset_id or None,
        uploaded_by=ctx.user_id,
        status=FileStatus.READY,
    )
    db.add(stored)
    db.commit()
    db.refresh(stored)
    logger.info("file uploaded: %s size=%d", stored.id, stored.size)
    return created(stored, message="File uploaded successfully")


@router.patch(
    "/{file_id}/status",
    summary="更新文件状态",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[FileData],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def update_file_status(
    payload: FileStatusUpdateRequest,
    file_id: str = Path(..., description="文件 ID。"),
    db: Session = Depends(get_db),
):
    stored = _get_file(db, file_id)
    stored.status = payload.status
    stored.updated_at = utc_now()
    db.commit()
    db.refresh(stored)
    return updated(stored, message="File status updated successfully")


@router.delete(
    "/{file_id}",
    summary="删除文件",
    description="逻辑删除：状态置为 deleted，存储中的内容保留。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[None],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def delete_file(file_id: str = Path(..., description="文件 ID。"), db: Session = Depends(get_db)):
    stored = _get_file(db, file_id)
    stored.status = FileStatus.DELETED
    stored.updated_at = utc_now()
    db.commit()
    return deleted(message="File deleted successfully")
