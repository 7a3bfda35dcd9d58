"""用户互动结构：反馈、通知、工单。"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from portal_api.schemas.common import BaseSchema

NotificationTypeLiteral = Literal["info", "warning", "error", "success"]
NotificationCategoryLiteral = Literal["system", "dataset", "publication", "user", "feedback"]
TicketStatusLiteral = Literal["open", "in_progress", "resolved", "closed"]
TicketPriorityLiteral = Literal["low", "medium", "high", "urgent"]
TicketCategoryLiteral = Literal["technical", "data_request", "report", "other"]


class FeedbackData(BaseSchema):
    """反馈详情。"""

    id: str
    user_id: str
    dataset_id: str | None = None
    rating: int
    comment: str
    category: str
    status: str
    created_at: datetime
    updated_at: datetime


class FeedbackCreateRequest(BaseModel):
    """提交反馈请求体。"""

    dataset_id: str | None = Field(default=None, max_length=36, description="关联数据集 ID。")
    rating: int = Field(ge=1, le=5, description="评分 1-5。")
    comment: str = Field(min_length=10, max_length=1000, description="反馈内容。")
    category: Literal["data_quality", "usability", "feature_request", "bug", "other"] = Field(
        description="反馈分类。"
    )


class FeedbackStatusUpdateRequest(BaseModel):
    """更新反馈状态请求体。"""

    status: Literal["pending", "in_review", "resolved", "closed"] = Field(description="目标状态。")


class NotificationData(BaseSchema):
    """通知详情。"""

    id: str
    user_id: str
    title: str
    message: str
    type: str
    category: str
    action_url: str | None = None
    read: bool
    read_at: datetime | None = None
    created_at: datetime


class NotificationCreateRequest(BaseModel):
    """创建通知请求体。"""

    user_id: str = Field(min_length=1, max_length=36, description="接收用户 ID。")
    title: str = Field(min_length=1, max_length=200, description="标题。")
    message: str = Field(min_length=1, description="通知正文。")
    type: NotificationTypeLiteral = Field(description="通知级别。")
    category: NotificationCategoryLiteral = Field(description="来源分类。")
    action_url: str | None = Field(default=None, max_length=512, description="跳转地址。")


class NotificationBulkCreateRequest(BaseModel):
    """批量创建通知请求体，同一内容发给多个用户。"""

    user_ids: list[str] = Field(min_length=1, max_length=1000, description="接收用户 ID 列表。")
    title: str = Field(min_length=1, max_length=200, description="标题。")
    message: str = Field(min_length=1, description="通知正文。")
    type: NotificationTypeLiteral = Field(description="通知级别。")
    category: NotificationCategoryLiteral = Field(description="来源分类。")
    action_url: str | None = Field(default=None, max_length=512, description="跳转地址。")


class NotificationMarkReadRequest(BaseModel):
    """标记已读请求体。"""

    notification_ids: list[str] = Field(min_length=1, description="通知 ID 列表。")


class NotificationCountData(BaseSchema):
    """未读数量。"""

    unread_count: int


class AffectedRowsData(BaseSchema):
    """批量操作影响行数。"""

    affected: int


class TicketData(BaseSchema):
    """工单详情。"""

    id: str
    title: str
    description: str
    status: str
    priority: str
    category: str
    user_id: str
    assigned_to: str | None = None
    resolved_at: datetime | None = None
    created_by: str
    created_at: datetime
    updated_at: datetime


class TicketCreateRequest(BaseModel):
    """创建工单请求体。"""

    title: str = Field(min_length=5, max_length=200, description="标题。")
    description: str = Field(min_length=10, description="问题描述。")
    priority: TicketPriorityLiteral = Field(default="medium", description="优先级。")
    category: TicketCategoryLiteral = Field(description="工单分类。")


class TicketUpdateRequest(BaseModel):
    """更新工单请求体。"""

    title: str = Field(min_length=5, max_length=200, description="标题。")
    description: str = Field(min_length=10, description="问题描述。")
    priority: TicketPriorityLiteral = Field(description="优先级。")
    category: TicketCategoryLiteral = Field(description="工单分类。")


class TicketStatusUpdateRequest(BaseModel):
    """更新工单状态请求体。"""

    status: TicketStatusLiteral = Field(description="目标状态。")


class TicketAssignRequest(BaseModel):
    """指派工单请求体。"""

    assigned_to: str = Field(min_length=1, max_length=36, description="处理人用户 ID。")
