"""数据集聚合读写服务。

读取：数据集主行左连接组织、单位、业务领域、主题，标签集合另行按链接表加载。
写入：主行与标签链接在同一事务内落库，更新时整体替换标签集合。
删除：置为 archived 的逻辑删除，归档后的数据集对所有读路径不可见。
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import delete, exists, select, update
from sqlalchemy.orm import Session

from portal_api.core.errors import NotFoundError, ValidationFailedError
from portal_api.models.base import utc_now
from portal_api.models.catalog import BusinessField, Tag, Topic, Unit
from portal_api.models.dataset import Dataset, DatasetTagLink
from portal_api.models.enums import DatasetStatus, ValidationStatus
from portal_api.models.organization import Organization
from portal_api.services import organizations
from portal_api.utils.listing import FilterSet, Pagination, count_rows, resolve_sort
from portal_api.utils.text import slugify

logger = logging.getLogger(__name__)

SORT_WHITELIST = {
    "name": Dataset.name,
    "created_at": Dataset.created_at,
    "updated_at": Dataset.updated_at,
    "category": Dataset.category,
    "classification": Dataset.classification,
}

# 允许通过创建与更新接口写入的标量字段。
SCALAR_FIELDS = (
    "name",
    "description",
    "period",
    "unit_id",
    "business_field_id",
    "image",
    "topic_id",
    "reference_id",
    "classification",
    "category",
    "data_fixed",
    "validation_status",
    "metadatas",
    "is_highlight",
)


@dataclass
class DatasetView:
    """数据集聚合的读取视图。"""

    dataset: Dataset
    organization: Organization | None = None
    unit: Unit | None = None
    business_field: BusinessField | None = None
    topic: Topic | None = None
    tags: list[Tag] = field(default_factory=list)


@dataclass
class DatasetFilter:
    """数据集列表过滤条件，空值表示不过滤。"""

    organization_id: str | None = None
    topic_id: str | None = None
    business_field_id: str | None = None
    tag_id: str | None = None
    status: str | None = None
    validation_status: str | None = None
    classification: str | None = None
    search: str | None = None


def _joined_select():
    return (
        select(Dataset, Organization, Unit, BusinessField, Topic)
        .outerjoin(Organization, Organization.id == Dataset.organization_id)
        .outerjoin(Unit, Unit.id == Dataset.unit_id)
        .outerjoin(BusinessField, BusinessField.id == Dataset.business_field_id)
        .outerjoin(Topic, Topic.id == Dataset.topic_id)
    )


def _aggregate_query():
    return _joined_select().where(Dataset.status != DatasetStatus.ARCHIVED)


def load_tags(db: Session, dataset_ids: list[str]) -> dict[str, list[Tag]]:
    """按链接表批量加载标签集合，无标签的数据集返回空列表。"""
    tag_map: dict[str, list[Tag]] = {dataset_id: [] for dataset_id in dataset_ids}
    if not dataset_ids:
        return tag_map

    rows = db.execute(
        select(DatasetTagLink.dataset_id, Tag)
        .join(Tag, Tag.id == DatasetTagLink.tag_id)
        .where(DatasetTagLink.dataset_id.in_(dataset_ids))
        .order_by(Tag.name)
    ).all()
    for dataset_id, tag in rows:
        tag_map.setdefault(dataset_id, []).append(tag)
    return tag_map


def _to_views(db: Session, rows) -> list[DatasetView]:
    views = [
        DatasetView(dataset=dataset, organization=org, unit=unit, business_field=business_field, topic=topic)
        for dataset, org, unit, business_field, topic in rows
    ]
    tag_map = load_tags(db, [view.dataset.id for view in views])
    for view in views:
        view.tags = tag_map.get(view.dataset.id, [])
    return views


def get_by_id(db: Session, dataset_id: str) -> DatasetView:
    """按 ID 读取数据集聚合。"""
    row = db.execute(_aggregate_query().where(Dataset.id == dataset_id)).first()
    if row is None:
        raise NotFoundError("Dataset not found")
    return _to_views(db, [row])[0]


def get_by_slug(db: Session, slug: str) -> DatasetView:
    """按短标识读取最新创建的数据集聚合。"""
    row = db.execute(
        _aggregate_query().where(Dataset.slug == slug).order_by(Dataset.created_at.desc()).limit(1)
    ).first()
    if row is None:
        raise NotFoundError("Dataset not found")
    return _to_views(db, [row])[0]


def _build_filters(filters: DatasetFilter) -> FilterSet:
    conditions = FilterSet()
    conditions.add(Dataset.status != DatasetStatus.ARCHIVED)
    conditions.equals(Dataset.organization_id, filters.organization_id)
    conditions.equals(Dataset.topic_id, filters.topic_id)
    conditions.equals(Dataset.business_field_id, filters.business_field_id)
    conditions.equals(Dataset.status, filters.status)
    conditions.equals(Dataset.validation_status, filters.validation_status)
    conditions.equals(Dataset.classification, filters.classification)
    if filters.tag_id:
        conditions.add(
            exists()
            .where(DatasetTagLink.dataset_id == Dataset.id)
            .where(DatasetTagLink.tag_id == filters.tag_id)
        )
    conditions.search(filters.search, Dataset.name, Dataset.description)
    return conditions


def list_datasets(
    db: Session,
    filters: DatasetFilter,
    pagination: Pagination,
    *,
    sort_by: str | None = None,
    sort_order: str | None = None,
) -> tuple[list[DatasetView], int]:
    """按过滤条件分页读取数据集聚合，返回 (views, total)。"""
    conditions = _build_filters(filters)
    total = count_rows(db, conditions.apply(select(Dataset.id)))

    stmt = (
        conditions.apply(_joined_select())
        .order_by(*resolve_sort(sort_by, sort_order, SORT_WHITELIST, tiebreaker=Dataset.id))
        .limit(pagination.limit)
        .offset(pagination.offset)
    )
    return _to_views(db, db.execute(stmt).all()), total


def _normalize_tag_ids(db: Session, tag_ids: list[str]) -> list[str]:
    """去重并确认标签全部存在，任何未知标签都拒绝写入。"""
    unique_ids = list(dict.fromkeys(tag_id for tag_id in tag_ids if tag_id))
    if not unique_ids:
        return []

    found = set(db.execute(select(Tag.id).where(Tag.id.in_(unique_ids))).scalars().all())
    missing = [tag_id for tag_id in unique_ids if tag_id not in found]
    if missing:
        raise ValidationFailedError(
            details=[{"field": "tag_ids", "message": f"Tag not found: {tag_id}"} for tag_id in missing]
        )
    return unique_ids


def _replace_links(db: Session, dataset_id: str, tag_ids: list[str]) -> None:
    db.execute(delete(DatasetTagLink).where(DatasetTagLink.dataset_id == dataset_id))
    for tag_id in tag_ids:
        db.add(DatasetTagLink(dataset_id=dataset_id, tag_id=tag_id))


def _adjust_counters(db: Session, organization_id: str, old_status: str | None, new_status: str) -> None:
    """按状态迁移维护组织数据集计数器。"""
    try:
        was_active = old_status is not None and old_status != DatasetStatus.ARCHIVED
        is_active = new_status != DatasetStatus.ARCHIVED
        was_public = old_status == DatasetStatus.PUBLISHED
        is_public = new_status == DatasetStatus.PUBLISHED

        if is_active and not was_active:
            organizations.increment_dataset_count(db, organization_id, is_public=is_public)
        elif was_active and not is_active:
            organizations.decrement_dataset_count(db, organization_id, is_public=was_public)
        elif is_public and not was_public:
            organizations.increment_public_dataset_count(db, organization_id)
        elif was_public and not is_public:
            organizations.decrement_public_dataset_count(db, organization_id)
    except NotFoundError:
        logger.debug("organization %s not registered, skip dataset counters", organization_id)


def create_dataset(
    db: Session,
    *,
    values: dict[str, Any],
    tag_ids: list[str],
    organization_id: str,
    created_by: str,
) -> DatasetView:
    """事务内写入数据集主行与标签链接，提交后重新读取聚合。"""
    normalized_tags = _normalize_tag_ids(db, tag_ids)
    scalars = {key: values[key] for key in SCALAR_FIELDS if key in values}
    scalars.setdefault("validation_status", ValidationStatus.PENDING)
    if scalars["validation_status"] is None:
        scalars["validation_status"] = ValidationStatus.PENDING

    dataset = Dataset(
        **scalars,
        slug=slugify(scalars["name"]),
        organization_id=organization_id,
        created_by=created_by,
        updated_by=created_by,
        status=DatasetStatus.DRAFT,
    )
    try:
        db.add(dataset)
        db.flush()
        for tag_id in normalized_tags:
            db.add(DatasetTagLink(dataset_id=dataset.id, tag_id=tag_id))
        _adjust_counters(db, organization_id, None, DatasetStatus.DRAFT)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("dataset created: %s", dataset.id)
    return get_by_id(db, dataset.id)


def update_dataset(
    db: Session,
    dataset_id: str,
    *,
    values: dict[str, Any],
    tag_ids: list[str] | None,
    updated_by: str,
) -> DatasetView:
    """事务内更新标量字段并整体替换标签集合；tag_ids 为 None 时保留原标签。"""
    normalized_tags = _normalize_tag_ids(db, tag_ids) if tag_ids is not None else None
    scalars = {key: values[key] for key in SCALAR_FIELDS if key in values}
    if scalars.get("name"):
        scalars["slug"] = slugify(scalars["name"])
    scalars["updated_by"] = updated_by
    scalars["updated_at"] = utc_now()

    try:
        result = db.execute(
            update(Dataset)
            .where(Dataset.id == dataset_id)
            .where(Dataset.status != DatasetStatus.ARCHIVED)
            .values(**scalars)
        )
        if result.rowcount == 0:
            raise NotFoundError("Dataset not found")
        if normalized_tags is not None:
            _replace_links(db, dataset_id, normalized_tags)
        db.commit()
    except Exception:
        db.rollback()
        raise

    return get_by_id(db, dataset_id)


def archive_dataset(db: Session, dataset_id: str, *, updated_by: str) -> None:
    """逻辑删除：置为 archived 并刷新更新时间。"""
    dataset = db.execute(
        select(Dataset).where(Dataset.id == dataset_id).where(Dataset.status != DatasetStatus.ARCHIVED)
    ).scalar_one_or_none()
    if dataset is None:
        raise NotFoundError("Dataset not found")

    old_status = dataset.status
    try:
        result = db.execute(
            update(Dataset)
            .where(Dataset.id == dataset_id)
            .where(Dataset.status != DatasetStatus.ARCHIVED)
            .values(status=DatasetStatus.ARCHIVED, updated_by=updated_by, updated_at=utc_now())
        )
        if result.rowcount == 0:
            raise NotFoundError("Dataset not found")
        _adjust_counters(db, dataset.organization_id, old_status, DatasetStatus.ARCHIVED)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("dataset archived: %s", dataset_id)


def update_status(db: Session, dataset_id: str, status: str, *, updated_by: str) -> DatasetView | None:
    """按 ID 直接写入状态列；写入 archived 时返回 None。"""
    dataset = db.get(Dataset, dataset_id)
    if dataset is None:
        raise NotFoundError("Dataset not found")

    old_status = dataset.status
    organization_id = dataset.organization_id
    try:
        db.execute(
            update(Dataset)
            .where(Dataset.id == dataset_id)
            .values(status=status, updated_by=updated_by, updated_at=utc_now())
        )
        _adjust_counters(db, organization_id, old_status, status)
        db.commit()
    except Exception:
        db.rollback()
        raise

    if status == DatasetStatus.ARCHIVED:
        return None
    return get_by_id(db, dataset_id)
