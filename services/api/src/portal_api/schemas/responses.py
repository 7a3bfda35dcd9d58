"""杂项响应数据结构：健康检查与统计汇总。"""

from datetime import datetime

from portal_api.schemas.common import BaseSchema


class HealthStatusData(BaseSchema):
    """健康检查结果。"""

    status: str
    version: str


class DatasetStatsData(BaseSchema):
    total_datasets: int
    published_count: int
    draft_count: int
    archived_count: int
    total_downloads: int
    total_views: int
    last_updated: datetime


class OrganizationStatsData(BaseSchema):
    total_organizations: int
    active_organizations: int
    total_datasets: int
    last_updated: datetime


class UserStatsData(BaseSchema):
    total_users: int
    active_users: int
    new_users_this_month: int
    last_updated: datetime


class PopularDatasetData(BaseSchema):
    id: str
    title: str
    organization: str
    views: int
    downloads: int


class TagStatsData(BaseSchema):
    tag_id: str
    name: str
    dataset_count: int


class TrendPointData(BaseSchema):
    """趋势时间桶，date 为桶起始日期。"""

    date: str
    count: int


class DashboardData(BaseSchema):
    """仪表盘汇总。"""

    dataset_stats: DatasetStatsData
    organization_stats: OrganizationStatsData
    user_stats: UserStatsData
    popular_datasets: list[PopularDatasetData]
    popular_tags: list[TagStatsData]
    dataset_trend: list[TrendPointData]
