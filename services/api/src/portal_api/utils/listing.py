"""列表接口通用能力：分页、排序白名单、搜索与过滤组合。

所有列表接口共享同一套流程：先收敛分页参数，再按需追加过滤条件，
以同一组条件统计总数，最后按白名单排序并分页读取。
排序列只能来自白名单映射，取值一律通过绑定参数传入。
"""

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import ColumnElement, Select, func, or_, select
from sqlalchemy.orm import Session

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100
DATA_ROW_MAX_LIMIT = 1000
DEFAULT_SORT_FIELD = "created_at"


@dataclass
class Pagination:
    """收敛后的分页参数。"""

    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def normalize_pagination(
    page: int | None,
    limit: int | None,
    *,
    max_limit: int = MAX_LIMIT,
    default_limit: int = DEFAULT_LIMIT,
) -> Pagination:
    """页码小于 1 取 1，条数小于 1 取默认值，超过上限截断。"""
    normalized_page = page if page is not None and page >= 1 else DEFAULT_PAGE
    normalized_limit = limit if limit is not None and limit >= 1 else default_limit
    return Pagination(page=normalized_page, limit=min(normalized_limit, max_limit))


def total_pages(total: int, limit: int) -> int:
    """总页数 = ceil(total / limit)，limit 已保证不小于 1。"""
    return math.ceil(total / limit) if total > 0 else 0


def build_meta(pagination: Pagination, total: int) -> dict[str, int]:
    """构造列表响应的分页元信息。"""
    return {
        "page": pagination.page,
        "limit": pagination.limit,
        "total": total,
        "total_pages": total_pages(total, pagination.limit),
    }


def normalize_sort_order(sort_order: str | None) -> str:
    """仅接受 ASC/DESC（不区分大小写），其余一律 DESC。"""
    return "ASC" if (sort_order or "").strip().upper() == "ASC" else "DESC"


def resolve_sort(
    sort_by: str | None,
    sort_order: str | None,
    whitelist: Mapping[str, Any],
    *,
    tiebreaker: Any,
    default_field: str = DEFAULT_SORT_FIELD,
) -> list[Any]:
    """把用户提交的排序参数映射为白名单内的排序表达式。

    不在白名单内的字段回退到默认字段；次序键单独传入且不对用户开放，
    保证同值记录在分页间顺序稳定。
    """
    key = (sort_by or "").strip()
    column = whitelist.get(key)
    if column is None:
        column = whitelist[default_field]
    ascending = normalize_sort_order(sort_order) == "ASC"

    clauses = [column.asc() if ascending else column.desc()]
    if tiebreaker is not column:
        clauses.append(tiebreaker.asc() if ascending else tiebreaker.desc())
    return clauses


def fixed_order(column: Any, tiebreaker: Any) -> list[Any]:
    """固定升序排序，忽略用户提交的排序参数。"""
    return [column.asc(), tiebreaker.asc()]


def search_clause(term: str | None, *columns: Any) -> ColumnElement[bool] | None:
    """把搜索词展开为多列大小写不敏感的模糊匹配，空词返回 None。"""
    normalized = (term or "").strip()
    if not normalized or not columns:
        return None
    pattern = f"%{normalized}%"
    return or_(*(column.ilike(pattern) for column in columns))


@dataclass
class FilterSet:
    """按顺序累积 WHERE 条件，空值过滤项自动跳过。"""

    conditions: list[ColumnElement[bool]] = field(default_factory=list)

    def add(self, clause: ColumnElement[bool] | None) -> "FilterSet":
        if clause is not None:
            self.conditions.append(clause)
        return self

    def equals(self, column: Any, value: Any) -> "FilterSet":
        if value is None or value == "":
            return self
        return self.add(column == value)

    def search(self, term: str | None, *columns: Any) -> "FilterSet":
        return self.add(search_clause(term, *columns))

    def apply(self, stmt: Select) -> Select:
        if not self.conditions:
            return stmt
        return stmt.where(*self.conditions)


def count_rows(db: Session, stmt: Select) -> int:
    """以相同过滤条件统计总数，不带排序与分页。"""
    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    return int(db.execute(count_stmt).scalar_one())


def paginate(
    db: Session,
    stmt: Select,
    *,
    pagination: Pagination,
    order_by: Sequence[Any],
) -> tuple[list[Any], int]:
    """执行单实体查询的统计与分页读取，返回 (rows, total)。"""
    total = count_rows(db, stmt)
    rows = (
        db.execute(stmt.order_by(*order_by).limit(pagination.limit).offset(pagination.offset))
        .scalars()
        .all()
    )
    return list(rows), total
