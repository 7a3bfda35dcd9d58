"""领域错误分类。

服务层只抛出这里定义的错误，由 `portal_api.exceptions` 在边界统一翻译为
HTTP 状态码与标准错误结构，调用方不会看到底层实现细节。
"""

from typing import Any

from fastapi import status


class ResponseCode:
    """响应体中的规范化业务码。"""

    SUCCESS = "OPERATION_SUCCESSFUL"
    CREATED = "RESOURCE_CREATED"
    UPDATED = "RESOURCE_UPDATED"
    DELETED = "RESOURCE_DELETED"
    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    INTERNAL_ERROR = "INTERNAL_SERVER_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    TOO_MANY_REQUESTS = "TOO_MANY_REQUESTS"


class PortalError(Exception):
    """所有领域错误的基类。"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = ResponseCode.INTERNAL_ERROR
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, *, details: list[dict[str, Any]] | None = None) -> None:
        self.message = message or self.default_message
        self.details = details or []
        super().__init__(self.message)


class NotFoundError(PortalError):
    status_code = status.HTTP_404_NOT_FOUND
    code = ResponseCode.NOT_FOUND
    default_message = "Resource not found"


class AlreadyExistsError(PortalError):
    status_code = status.HTTP_409_CONFLICT
    code = ResponseCode.CONFLICT
    default_message = "Resource already exists"


class InvalidInputError(PortalError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = ResponseCode.BAD_REQUEST
    default_message = "Invalid input"


class ValidationFailedError(PortalError):
    status_code = 422
    code = ResponseCode.VALIDATION_FAILED
    default_message = "Validation failed"


class UnauthorizedError(PortalError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = ResponseCode.UNAUTHORIZED
    default_message = "Unauthorized"


class ForbiddenError(PortalError):
    status_code = status.HTTP_403_FORBIDDEN
    code = ResponseCode.FORBIDDEN
    default_message = "Forbidden"


class InternalError(PortalError):
    """数据库或其他基础设施失败，消息对外保持不透明。"""


class InvalidCredentialsError(UnauthorizedError):
    default_message = "Invalid credentials"


class InvalidTokenError(UnauthorizedError):
    default_message = "Invalid token"


class TokenExpiredError(UnauthorizedError):
    default_message = "Token expired"


class TokenRevokedError(UnauthorizedError):
    default_message = "Token revoked"


class UserDisabledError(ForbiddenError):
    default_message = "User account is disabled"


class EmailTakenError(AlreadyExistsError):
    default_message = "Email already registered"


class UsernameTakenError(AlreadyExistsError):
    default_message = "Username already taken"


class PasswordTooShortError(ValidationFailedError):
    default_message = "Password must be at least 8 characters"


class MissingUserIdError(InternalError):
    """签发令牌时缺少用户 ID，属于调用方编程错误。"""

    default_message = "User ID is required"
