"""数据目录字典接口：标签、主题、业务领域、计量单位。

标签、主题、业务领域结构一致（名称 + 短标识），由同一工厂生成路由；
读取接口公开，写入接口需要登录。
"""

from typing import Any

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from portal_api.core.errors import NotFoundError
from portal_api.db.session import get_db
from portal_api.dependencies import ListQuery, list_query, require_auth
from portal_api.models.catalog import BusinessField, Tag, Topic, Unit
from portal_api.models.dataset import DatasetTagLink
from portal_api.schemas.catalog import NamedItemData, NamedItemRequest, UnitData, UnitRequest
from portal_api.schemas.common import ErrorResponse, ListResponse, SuccessResponse
from portal_api.utils.listing import FilterSet, build_meta, fixed_order, paginate
from portal_api.utils.response import created, deleted, success, updated
from portal_api.utils.text import slugify

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
}


def _build_named_router(model, *, prefix: str, singular: str, plural: str) -> APIRouter:
    """生成名称 + 短标识字典项的增删改查路由。"""
    router = APIRouter(prefix=prefix, tags=["catalog"])

    def _get_item(db: Session, item_id: str):
        item = db.get(model, item_id)
        if item is None:
            raise NotFoundError(f"{singular} not found")
        return item

    @router.get(
        "",
        summary=f"查询{singular}列表",
        description="固定按名称升序，不接受排序参数。",
        status_code=status.HTTP_200_OK,
        response_model=ListResponse[NamedItemData],
    )
    def list_items(query: ListQuery = Depends(list_query), db: Session = Depends(get_db)):
        pagination = query.pagination()
        conditions = FilterSet().search(query.search, model.name, model.slug)
        rows, total = paginate(
            db,
            conditions.apply(select(model)),
            pagination=pagination,
            order_by=fixed_order(model.name, model.id),
        )
        return success(rows, message=f"{plural} retrieved successfully", meta=build_meta(pagination, total))

    @router.get(
        "/{item_id}",
        summary=f"查询{singular}详情",
        status_code=status.HTTP_200_OK,
        response_model=SuccessResponse[NamedItemData],
        responses={404: {"model": ErrorResponse}},
    )
    def get_item(item_id: str = Path(...), db: Session = Depends(get_db)):
        return success(_get_item(db, item_id), message=f"{singular} retrieved successfully")

    @router.post(
        "",
        summary=f"创建{singular}",
        status_code=status.HTTP_201_CREATED,
        response_model=SuccessResponse[NamedItemData],
        responses=_ERROR_RESPONSES,
        dependencies=[Depends(require_auth)],
    )
    def create_item(payload: NamedItemRequest, db: Session = Depends(get_db)):
        item = model(name=payload.name.strip(), slug=slugify(payload.name))
        db.add(item)
        db.commit()
        db.refresh(item)
        return created(item, message=f"{singular} created successfully")

    @router.put(
        "/{item_id}",
        summary=f"更新{singular}",
        status_code=status.HTTP_200_OK,
        response_model=SuccessResponse[NamedItemData],
        responses=_ERROR_RESPONSES,
        dependencies=[Depends(require_auth)],
    )
    def update_item(payload: NamedItemRequest, item_id: str = Path(...), db: Session = Depends(get_db)):
        item = _get_item(db, item_id)
        item.name = payload.name.strip()
        item.slug = slugify(payload.name)
        db.commit()
        db.refresh(item)
        return updated(item, message=f"{singular} updated successfully")

    @router.delete(
        "/{item_id}",
        summary=f"删除{singular}",
        status_code=status.HTTP_200_OK,
        response_model=SuccessResponse[None],
        responses=_ERROR_RESPONSES,
        dependencies=[Depends(require_auth)],
    )
    def delete_item(item_id: str = Path(...), db: Session = Depends(get_db)):
        item = _get_item(db, item_id)
        if model is Tag:
            # 标签删除时一并清理数据集链接，避免残留悬空关联。
            db.execute(delete(DatasetTagLink).where(DatasetTagLink.tag_id == item.id))
        db.delete(item)
        db.commit()
        return deleted(message=f"{singular} deleted successfully")

    return router


tags_router = _build_named_router(Tag, prefix="/tags", singular="Tag", plural="Tags")
topics_router = _build_named_router(Topic, prefix="/topics", singular="Topic", plural="Topics")
business_fields_router = _build_named_router(
    BusinessField, prefix="/business-fields", singular="Business field", plural="Business fields"
)


units_router = APIRouter(prefix="/units", tags=["catalog"])


def _get_unit(db: Session, unit_id: str) -> Unit:
    unit = db.get(Unit, unit_id)
    if unit is None:
        raise NotFoundError("Unit not found")
    return unit


@units_router.get(
    "",
    summary="查询计量单位列表",
    description="固定按名称升序，不接受排序参数。",
    status_code=status.HTTP_200_OK,
    response_model=ListResponse[UnitData],
)
def list_units(query: ListQuery = Depends(list_query), db: Session = Depends(get_db)):
    """分页查询计量单位，支持按名称与符号搜索。"""
    pagination = query.pagination()
    conditions = FilterSet().search(query.search, Unit.name, Unit.symbol)
    rows, total = paginate(
        db,
        conditions.apply(select(Unit)),
        pagination=pagination,
        order_by=fixed_order(Unit.name, Unit.id),
    )
    return success(rows, message="Units retrieved successfully", meta=build_meta(pagination, total))


@units_router.get(
    "/{unit_id}",
    summary="查询计量单位详情",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[UnitData],
    responses={404: {"model": ErrorResponse}},
)
def get_unit(unit_id: str = Path(...), db: Session = Depends(get_db)):
    return success(_get_unit(db, unit_id), message="Unit retrieved successfully")


@units_router.post(
    "",
    summary="创建计量单位",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[UnitData],
    responses=_ERROR_RESPONSES,
    dependencies=[Depends(require_auth)],
)
def create_unit(payload: UnitRequest, db: Session = Depends(get_db)):
    unit = Unit(name=payload.name.strip(), symbol=payload.symbol.strip())
    db.add(unit)
    db.commit()
    db.refresh(unit)
    return created(unit, message="Unit created successfully")


@units_router.put(
    "/{unit_id}",
    summary="更新计量单位",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[UnitData],
    responses=_ERROR_RESPONSES,
    dependencies=[Depends(require_auth)],
)
def update_unit(payload: UnitRequest, unit_id: str = Path(...), db: Session = Depends(get_db)):
    unit = _get_unit(db, unit_id)
    unit.name = payload.name.strip()
    unit.symbol = payload.symbol.strip()
    db.commit()
    db.refresh(unit)
    return updated(unit, message="Unit updated successfully")


@units_router.delete(
    "/{unit_id}",
    summary="删除计量单位",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[None],
    responses=_ERROR_RESPONSES,
    dependencies=[Depends(require_auth)],
)
def delete_unit(unit_id: str = Path(...), db: Session = Depends(get_db)):
    unit = _get_unit(db, unit_id)
    db.delete(unit)
    db.commit()
    return deleted(message="Unit deleted successfully")
