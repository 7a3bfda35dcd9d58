"""平台统计接口（公开）。"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from portal_api.db.session import get_db
from portal_api.models.enums import TrendPeriod
from portal_api.schemas.common import SuccessResponse
from portal_api.schemas.responses import (
    DashboardData,
    DatasetStatsData,
    OrganizationStatsData,
    PopularDatasetData,
    TagStatsData,
    TrendPointData,
    UserStatsData,
)
from portal_api.services import analytics
from portal_api.utils.listing import MAX_LIMIT
from portal_api.utils.response import success

router = APIRouter(prefix="/analytics", tags=["analytics"])

DEFAULT_TOP_LIMIT = 10
DEFAULT_TREND_LIMIT = 30


def _clamp(limit: int | None, default: int) -> int:
    if limit is None or limit < 1:
        return default
    return min(limit, MAX_LIMIT)


@router.get(
    "/dashboard",
    summary="仪表盘汇总",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[DashboardData],
)
def get_dashboard(db: Session = Depends(get_db)):
    return success(analytics.dashboard(db), message="Dashboard retrieved successfully")


@router.get(
    "/stats/datasets",
    summary="数据集统计",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[DatasetStatsData],
)
def get_dataset_stats(db: Session = Depends(get_db)):
    return success(analytics.dataset_stats(db), message="Dataset stats retrieved successfully")


@router.get(
    "/stats/organizations",
    summary="组织统计",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[OrganizationStatsData],
)
def get_organization_stats(db: Session = Depends(get_db)):
    return success(analytics.organization_stats(db), message="Organization stats retrieved successfully")


@router.get(
    "/stats/users",
    summary="用户统计",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[UserStatsData],
)
def get_user_stats(db: Session = Depends(get_db)):
    return success(analytics.user_stats(db), message="User stats retrieved successfully")


@router.get(
    "/popular/datasets",
    summary="热门数据集",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[list[PopularDatasetData]],
)
def get_popular_datasets(
    limit: int | None = Query(default=None, description="返回条数，默认 10，上限 100。"),
    db: Session = Depends(get_db),
):
    data = analytics.popular_datasets(db, _clamp(limit, DEFAULT_TOP_LIMIT))
    return success(data, message="Popular datasets retrieved successfully")


@router.get(
    "/popular/tags",
    summary="热门标签",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[list[TagStatsData]],
)
def get_popular_tags(
    limit: int | None = Query(default=None, description="返回条数，默认 10，上限 100。"),
    db: Session = Depends(get_db),
):
    data = analytics.popular_tags(db, _clamp(limit, DEFAULT_TOP_LIMIT))
    return success(data, message="Popular tags retrieved successfully")


@router.get(
    "/trend/datasets",
    summary="数据集新增趋势",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[list[TrendPointData]],
)
def get_dataset_trend(
    period: TrendPeriod = Query(default=TrendPeriod.DAILY, description="统计粒度 daily/weekly/monthly。"),
    limit: int | None = Query(default=None, description="时间桶数量，默认 30，上限 100。"),
    db: Session = Depends(get_db),
):
    data = analytics.dataset_trend(db, period, _clamp(limit, DEFAULT_TREND_LIMIT))
    return success(data, message="Dataset trend retrieved successfully")
