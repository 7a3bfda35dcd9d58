"""健康检查接口。"""

from sqlalchemy import text
from sqlalchemy.orm import Session

from fastapi import APIRouter, Depends, status

from portal_api.core.config import get_settings
from portal_api.db.session import get_db
from portal_api.schemas.common import ErrorResponse, SuccessResponse
from portal_api.schemas.responses import HealthStatusData
from portal_api.utils.response import success

router = APIRouter(prefix="/health", tags=["health"])


@router.get(
    "",
    summary="存活探针",
    description="无需认证，仅表示进程存活，不校验外部依赖。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[HealthStatusData],
)
def health():
    """返回服务状态与版本号。"""
    return success({"status": "ok", "version": get_settings().app_version}, message="Service is healthy")


@router.get(
    "/ready",
    summary="就绪探针",
    description="通过数据库连通性检测服务是否具备对外提供能力。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[HealthStatusData],
    responses={500: {"model": ErrorResponse}},
)
def ready(db: Session = Depends(get_db)):
    """执行轻量数据库探活语句验证数据库可用。"""
    db.execute(text("select 1"))
    return success({"status": "ready", "version": get_settings().app_version}, message="Service is ready")
