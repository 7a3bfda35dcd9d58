"""领域枚举定义。"""

from enum import StrEnum


class UserStatus(StrEnum):
    """用户状态。"""

    ACTIVE = "active"  # 正常可登录。
    INACTIVE = "inactive"  # 未激活或被停用，禁止登录。
    SUSPENDED = "suspended"  # 暂停使用，禁止登录。
    DELETED = "deleted"  # 逻辑删除，对所有读路径不可见。


class OrganizationStatus(StrEnum):
    """组织状态。"""

    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class DatasetStatus(StrEnum):
    """数据集生命周期状态。"""

    DRAFT = "draft"  # 新建默认状态。
    PUBLISHED = "published"  # 已公开。
    ARCHIVED = "archived"  # 已归档，等同逻辑删除。


class ValidationStatus(StrEnum):
    """数据集校验状态。"""

    VALID = "valid"
    INVALID = "invalid"
    PENDING = "pending"


class FeedbackCategory(StrEnum):
    """反馈分类。"""

    DATA_QUALITY = "data_quality"
    USABILITY = "usability"
    FEATURE_REQUEST = "feature_request"
    BUG = "bug"
    OTHER = "other"


class FeedbackStatus(StrEnum):
    """反馈处理状态。"""

    PENDING = "pending"
    IN_REVIEW = "in_review"
    RESOLVED = "resolved"
    CLOSED = "closed"


class FileStatus(StrEnum):
    """上传文件状态。"""

    UPLOADING = "uploading"
    PROCESSING = "processing"
    READY = "ready"
    FAILED = "failed"
    DELETED = "deleted"  # 逻辑删除。


class StorageType(StrEnum):
    """文件存储后端类型。"""

    LOCAL = "local"
    S3 = "s3"
    MINIO = "minio"


class PublicationStatus(StrEnum):
    """出版物状态。"""

    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class VisualizationStatus(StrEnum):
    """可视化状态。"""

    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class VisualizationType(StrEnum):
    """可视化图表类型。"""

    BAR = "bar"
    LINE = "line"
    PIE = "pie"
    MAP = "map"
    TABLE = "table"
    SCATTER = "scatter"
    AREA = "area"
    HISTOGRAM = "histogram"


class SettingType(StrEnum):
    """配置项取值类型。"""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    JSON = "json"


class SettingCategory(StrEnum):
    """配置项归属范围。"""

    SYSTEM = "system"
    USER = "user"
    ORGANIZATION = "organization"


class NotificationType(StrEnum):
    """通知级别。"""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


class NotificationCategory(StrEnum):
    """通知来源分类。"""

    SYSTEM = "system"
    DATASET = "dataset"
    PUBLICATION = "publication"
    USER = "user"
    FEEDBACK = "feedback"


class TicketStatus(StrEnum):
    """工单状态。"""

    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class TicketPriority(StrEnum):
    """工单优先级。"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class TicketCategory(StrEnum):
    """工单分类。"""

    TECHNICAL = "technical"
    DATA_REQUEST = "data_request"
    REPORT = "report"
    OTHER = "other"


class IntegrationType(StrEnum):
    """外部集成类型。"""

    API = "api"
    WEBHOOK = "webhook"
    DATABASE = "database"
    CUSTOM = "custom"


class IntegrationStatus(StrEnum):
    """外部集成状态。"""

    ACTIVE = "active"
    INACTIVE = "inactive"
    ERROR = "error"


class TrendPeriod(StrEnum):
    """趋势统计粒度。"""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
