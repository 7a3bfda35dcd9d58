"""ORM 模型导出集合。"""

from portal_api.models.auth import RefreshToken
from portal_api.models.catalog import BusinessField, Tag, Topic, Unit
from portal_api.models.content import DataRow, Publication, StoredFile, Visualization
from portal_api.models.dataset import Dataset, DatasetTagLink
from portal_api.models.engagement import Feedback, Notification, Ticket
from portal_api.models.organization import Organization
from portal_api.models.system import Integration, Setting
from portal_api.models.user import User

__all__ = [
    "BusinessField",
    "DataRow",
    "Dataset",
    "DatasetTagLink",
    "Feedback",
    "Integration",
    "Notification",
    "Organization",
    "Publication",
    "RefreshToken",
    "Setting",
    "StoredFile",
    "Tag",
    "Ticket",
    "Topic",
    "Unit",
    "User",
    "Visualization",
]
