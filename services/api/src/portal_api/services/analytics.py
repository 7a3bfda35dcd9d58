"""平台统计汇总服务。"""

from collections import Counter
from datetime import date, datetime, timedelta
from typing import Any

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from portal_api.models.base import as_utc, utc_now
from portal_api.models.catalog import Tag
from portal_api.models.content import Publication
from portal_api.models.dataset import Dataset, DatasetTagLink
from portal_api.models.enums import DatasetStatus, OrganizationStatus, TrendPeriod, UserStatus
from portal_api.models.organization import Organization
from portal_api.models.user import User

ACTIVE_USER_WINDOW = timedelta(days=30)
# 每个趋势粒度对应的回溯天数。
PERIOD_SPAN_DAYS = {
    TrendPeriod.DAILY: 1,
    TrendPeriod.WEEKLY: 7,
    TrendPeriod.MONTHLY: 31,
}


def _count_where(condition) -> Any:
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)


def dataset_stats(db: Session) -> dict[str, Any]:
    """按状态统计数据集数量，并汇总出版物访问量。"""
    row = db.execute(
        select(
            func.count(Dataset.id),
            _count_where(Dataset.status == DatasetStatus.PUBLISHED),
            _count_where(Dataset.status == DatasetStatus.DRAFT),
            _count_where(Dataset.status == DatasetStatus.ARCHIVED),
            func.max(Dataset.updated_at),
        )
    ).one()
    views, downloads = db.execute(
        select(
            func.coalesce(func.sum(Publication.view_count), 0),
            func.coalesce(func.sum(Publication.download_count), 0),
        ).where(Publication.deleted_at.is_(None))
    ).one()
    return {
        "total_datasets": int(row[0]),
        "published_count": int(row[1]),
        "draft_count": int(row[2]),
        "archived_count": int(row[3]),
        "total_downloads": int(downloads),
        "total_views": int(views),
        "last_updated": as_utc(row[4]) or utc_now(),
    }


def organization_stats(db: Session) -> dict[str, Any]:
    """统计组织数量与数据集计数器合计。"""
    total, active, datasets = db.execute(
        select(
            func.count(Organization.id),
            _count_where(Organization.status == OrganizationStatus.ACTIVE),
            func.coalesce(func.sum(Organization.total_datasets), 0),
        )
    ).one()
    return {
        "total_organizations": int(total),
        "active_organizations": int(active),
        "total_datasets": int(datasets),
        "last_updated": utc_now(),
    }


def user_stats(db: Session) -> dict[str, Any]:
    """统计用户总数、近 30 天活跃数与本月新增数。"""
    now = utc_now()
    month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    total, active, new_this_month = db.execute(
        select(
            func.count(User.id),
            _count_where(User.last_login_at > now - ACTIVE_USER_WINDOW),
            _count_where(User.created_at >= month_start),
        ).where(User.status != UserStatus.DELETED)
    ).one()
    return {
        "total_users": int(total),
        "active_users": int(active),
        "new_users_this_month": int(new_this_month),
        "last_updated": now,
    }


def popular_datasets(db: Session, limit: int) -> list[dict[str, Any]]:
    """按出版物访问量与下载量之和排序的已发布数据集。"""
    views = func.coalesce(func.sum(Publication.view_count), 0)
    downloads = func.coalesce(func.sum(Publication.download_count), 0)
    rows = db.execute(
        select(Dataset.id, Dataset.name, Organization.name, views, downloads)
        .outerjoin(Organization, Organization.id == Dataset.organization_id)
        .outerjoin(
            Publication,
            (Publication.dataset_id == Dataset.id) & Publication.deleted_at.is_(None),
        )
        .where(Dataset.status == DatasetStatus.PUBLISHED)
        .group_by(Dataset.id, Dataset.name, Organization.name)
        .order_by((views + downloads).desc(), Dataset.name)
        .limit(limit)
    ).all()
    return [
        {
            "id": dataset_id,
            "title": name,
            "organization": organization or "",
            "views": int(view_count),
            "downloads": int(download_count),
        }
        for dataset_id, name, organization, view_count, download_count in rows
    ]


def popular_tags(db: Session, limit: int) -> list[dict[str, Any]]:
    """按关联的未归档数据集数量排序的标签。"""
    dataset_count = func.count(Dataset.id)
    rows = db.execute(
        select(Tag.id, Tag.name, dataset_count)
        .outerjoin(DatasetTagLink, DatasetTagLink.tag_id == Tag.id)
        .outerjoin(
            Dataset,
            (Dataset.id == DatasetTagLink.dataset_id) & (Dataset.status != DatasetStatus.ARCHIVED),
        )
        .group_by(Tag.id, Tag.name)
        .order_by(dataset_count.desc(), Tag.name)
        .limit(limit)
    ).all()
    return [{"tag_id": tag_id, "name": name, "dataset_count": int(count)} for tag_id, name, count in rows]


def _bucket(value: datetime, period: TrendPeriod) -> date:
    day = value.date()
    if period == TrendPeriod.WEEKLY:
        return day - timedelta(days=day.weekday())
    if period == TrendPeriod.MONTHLY:
        return day.replace(day=1)
    return day


def dataset_trend(db: Session, period: TrendPeriod, limit: int) -> list[dict[str, Any]]:
    """按粒度统计新建数据集数量，最近的时间桶在前。"""
    cutoff = utc_now() - timedelta(days=limit * PERIOD_SPAN_DAYS[period])
    created = db.execute(
        select(Dataset.created_at)
        .where(Dataset.status != DatasetStatus.ARCHIVED)
        .where(Dataset.created_at > cutoff)
    ).scalars().all()

    counts = Counter(_bucket(as_utc(value), period) for value in created)
    buckets = sorted(counts.items(), key=lambda item: item[0], reverse=True)[:limit]
    return [{"date": bucket.isoformat(), "count": count} for bucket, count in buckets]


def dashboard(db: Session) -> dict[str, Any]:
    """依次汇总六项统计。"""
    return {
        "dataset_stats": dataset_stats(db),
        "organization_stats": organization_stats(db),
        "user_stats": user_stats(db),
        "popular_datasets": popular_datasets(db, 10),
        "popular_tags": popular_tags(db, 10),
        "dataset_trend": dataset_trend(db, TrendPeriod.DAILY, 30),
    }
