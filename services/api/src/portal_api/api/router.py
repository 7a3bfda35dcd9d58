"""顶层路由注册。"""

from fastapi import APIRouter

from . import (
    analytics,
    auth,
    catalog,
    data_rows,
    datasets,
    feedbacks,
    files,
    health,
    integrations,
    notifications,
    organizations,
    publications,
    settings,
    tickets,
    users,
    visualizations,
)

api_router = APIRouter()

# 固定注册顺序，便于在线接口文档展示和问题定位。
api_router.include_router(health.router)
api_router.include_router(auth.router)
api_router.include_router(auth.me_router)
api_router.include_router(users.router)
api_router.include_router(organizations.router)
api_router.include_router(datasets.router)
api_router.include_router(data_rows.dataset_rows_router)
api_router.include_router(data_rows.router)
api_router.include_router(catalog.tags_router)
api_router.include_router(catalog.topics_router)
api_router.include_router(catalog.business_fields_router)
api_router.include_router(catalog.units_router)
api_router.include_router(feedbacks.router)
api_router.include_router(files.router)
api_router.include_router(publications.router)
api_router.include_router(visualizations.router)
api_router.include_router(settings.router)
api_router.include_router(notifications.router)
api_router.include_router(tickets.router)
api_router.include_router(integrations.router)
api_router.include_router(analytics.router)
