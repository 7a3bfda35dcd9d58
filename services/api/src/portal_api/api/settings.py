"""配置项接口。"""

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from portal_api.core.errors import AlreadyExistsError, InvalidInputError, NotFoundError
from portal_api.db.session import get_db
from portal_api.dependencies import ListQuery, list_query, require_auth
from portal_api.models.base import utc_now
from portal_api.models.system import Setting
from portal_api.schemas.common import ErrorResponse, ListResponse, SuccessResponse
from portal_api.schemas.system import SettingCreateRequest, SettingData, SettingUpdateRequest
from portal_api.utils.listing import FilterSet, build_meta, fixed_order, paginate
from portal_api.utils.response import created, deleted, success, updated

router = APIRouter(prefix="/settings", tags=["settings"], dependencies=[Depends(require_auth)])


def _scope(user_id: str | None):
    """user_id 为空时限定全局配置。"""
    if user_id:
        return Setting.user_id == user_id
    return Setting.user_id.is_(None)


def _visible() -> FilterSet:
    return FilterSet().add(Setting.deleted_at.is_(None))


def _get_setting(db: Session, setting_id: str) -> Setting:
    setting = db.execute(
        select(Setting).where(Setting.id == setting_id).where(Setting.deleted_at.is_(None))
    ).scalar_one_or_none()
    if setting is None:
        raise NotFoundError("Setting not found")
    return setting


def _list(db: Session, query: ListQuery, conditions: FilterSet):
    pagination = query.pagination()
    rows, total = paginate(
        db,
        conditions.apply(select(Setting)),
        pagination=pagination,
        order_by=fixed_order(Setting.key, Setting.id),
    )
    return success(rows, message="Settings retrieved successfully", meta=build_meta(pagination, total))


@router.get(
    "",
    summary="查询配置项列表",
    description="固定按 key 升序，不接受排序参数。",
    status_code=status.HTTP_200_OK,
    response_model=ListResponse[SettingData],
    responses={401: {"model": ErrorResponse}},
)
def list_settings(
    query: ListQuery = Depends(list_query),
    category: str | None = Query(default=None, description="归属范围。"),
    user_id: str | None = Query(default=None, description="所属用户 ID。"),
    setting_type: str | None = Query(default=None, alias="type", description="取值类型。"),
    db: Session = Depends(get_db),
):
    conditions = (
        _visible()
        .equals(Setting.category, category)
        .equals(Setting.user_id, user_id)
        .equals(Setting.type, setting_type)
        .search(query.search, Setting.key, Setting.value)
    )
    return _list(db, query, conditions)


@router.post(
    "",
    summary="创建配置项",
    description="同一作用域（全局或同一用户）下 key 唯一。",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[SettingData],
    responses={401: {"model": ErrorResponse}, 409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def create_setting(payload: SettingCreateRequest, db: Session = Depends(get_db)):
    key = payload.key.strip()
    user_id = payload.user_id or None
    exists = db.execute(
        select(Setting.id)
        .where(Setting.key == key)
        .where(_scope(user_id))
        .where(Setting.deleted_at.is_(None))
        .limit(1)
    ).first()
    if exists is not None:
        raise AlreadyExistsError("Setting key already exists")

    setting = Setting(
        key=key,
        value=payload.value,
        type=payload.type,
        category=payload.category,
        user_id=user_id,
        is_public=payload.is_public,
    )
    db.add(setting)
    db.commit()
    db.refresh(setting)
    return created(setting, message="Setting created successfully")


@router.get(
    "/keys",
    summary="批量读取配置值",
    description="keys 以逗号分隔；指定 user_id 时用户配置覆盖同名全局配置。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[dict[str, str]],
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
def get_settings_by_keys(
    keys: str = Query(default="", description="配置键列表，逗号分隔。"),
    user_id: str | None = Query(default=None, description="所属用户 ID。"),
    db: Session = Depends(get_db),
):
    """返回 key 到 value 的映射。"""
    requested = [key.strip() for key in keys.split(",") if key.strip()]
    if not requested:
        raise InvalidInputError("Keys parameter is required")

    stmt = select(Setting).where(Setting.key.in_(requested)).where(Setting.deleted_at.is_(None))
    if user_id:
        stmt = stmt.where((Setting.user_id == user_id) | Setting.user_id.is_(None))
    else:
        stmt = stmt.where(Setting.user_id.is_(None))

    values: dict[str, str] = {}
    # 全局配置先写入，用户配置后写入覆盖。
    for setting in sorted(db.execute(stmt).scalars(), key=lambda item: item.user_id is not None):
        values[setting.key] = setting.value
    return success(values, message="Settings retrieved successfully")


@router.get(
    "/category/{category}",
    summary="按归属范围查询配置项",
    status_code=status.HTTP_200_OK,
    response_model=ListResponse[SettingData],
    responses={401: {"model": ErrorResponse}},
)
def list_settings_by_category(
    category: str = Path(..., description="归属范围。"),
    user_id: str | None = Query(default=None, description="所属用户 ID，为空时只看全局配置。"),
    query: ListQuery = Depends(list_query),
    db: Session = Depends(get_db),
):
    conditions = _visible().equals(Setting.category, category).add(_scope(user_id))
    return _list(db, query, conditions)


@router.get(
    "/key/{key}",
    summary="按 key 查询配置项",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[SettingData],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def get_setting_by_key(
    key: str = Path(..., description="配置键。"),
    user_id: str | None = Query(default=None, description="所属用户 ID，为空时读取全局配置。"),
    db: Session = Depends(get_db),
):
    setting = db.execute(
        select(Setting)
        .where(Setting.key == key)
        .where(_scope(user_id))
        .where(Setting.deleted_at.is_(None))
        .limit(1)
    ).scalar_one_or_none()
    if setting is None:
        raise NotFoundError("Setting not found")
    return success(setting, message="Setting retrieved successfully")


@router.get(
    "/{setting_id}",
    summary="查询配置项详情",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[SettingData],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def get_setting(setting_id: str = Path(..., description="配置项 ID。"), db: Session = Depends(get_db)):
    return success(_get_setting(db, setting_id), message="Setting retrieved successfully")


@router.put(
    "/{setting_id}",
    summary="更新配置项",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[SettingData],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def update_setting(
    payload: SettingUpdateRequest,
    setting_id: str = Path(..., description="配置项 ID。"),
    db: Session = Depends(get_db),
):
    setting = _get_setting(db, setting_id)
    setting.value = payload.value
    setting.type = payload.type
    setting.is_public = payload.is_public
    setting.updated_at = utc_now()
    db.commit()
    db.refresh(setting)
    return updated(setting, message="Setting updated successfully")


@router.delete(
    "/{setting_id}",
    summary="删除配置项",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[None],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def delete_setting(setting_id: str = Path(..., description="配置项 ID。"), db: Session = Depends(get_db)):
    setting = _get_setting(db, setting_id)
    setting.deleted_at = utc_now()
    db.commit()
    return deleted(message="Setting deleted successfully")
