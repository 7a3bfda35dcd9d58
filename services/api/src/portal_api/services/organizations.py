"""组织计数器维护。"""

from sqlalchemy import case, update
from sqlalchemy.orm import Session

from portal_api.core.errors import NotFoundError
from portal_api.models.organization import Organization


def _decremented(column):
    # 单条语句内完成截断，已为 0 的计数器保持 0。
    return case((column > 0, column - 1), else_=0)


def increment_dataset_count(db: Session, organization_id: str, *, is_public: bool) -> None:
    """数据集总数加一，公开数据集同时累加公开数。"""
    values = {"total_datasets": Organization.total_datasets + 1}
    if is_public:
        values["public_datasets"] = Organization.public_datasets + 1
    result = db.execute(update(Organization).where(Organization.id == organization_id).values(**values))
    if result.rowcount == 0:
        raise NotFoundError("Organization not found")


def decrement_dataset_count(db: Session, organization_id: str, *, is_public: bool) -> None:
    """数据集总数减一并截断到 0。"""
    values = {"total_datasets": _decremented(Organization.total_datasets)}
    if is_public:
        values["public_datasets"] = _decremented(Organization.public_datasets)
    result = db.execute(update(Organization).where(Organization.id == organization_id).values(**values))
    if result.rowcount == 0:
        raise NotFoundError("Organization not found")


def increment_public_dataset_count(db: Session, organization_id: str) -> None:
    """数据集转为公开时累加公开数，不超过总数。"""
    db.execute(
        update(Organization)
        .where(Organization.id == organization_id)
        .values(
            public_datasets=case(
                (Organization.public_datasets < Organization.total_datasets, Organization.public_datasets + 1),
                else_=Organization.public_datasets,
            )
        )
    )


def decrement_public_dataset_count(db: Session, organization_id: str) -> None:
    """数据集取消公开时公开数减一并截断到 0。"""
    db.execute(
        update(Organization)
        .where(Organization.id == organization_id)
        .values(public_datasets=_decremented(Organization.public_datasets))
    )
