"""路由模块导出集合。"""

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

__all__ = [
    "analytics",
    "auth",
    "catalog",
    "data_rows",
    "datasets",
    "feedbacks",
    "files",
    "health",
    "integrations",
    "notifications",
    "organizations",
    "publications",
    "settings",
    "tickets",
    "users",
    "visualizations",
]
