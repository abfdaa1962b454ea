"""健康检查接口。

live 只说明进程在运行；ready 额外读取菜单目录，目录表不可读时由全局异常处理返回 503。
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from mta_api.db.session import get_db
from mta_api.models.menu import Menu
from mta_api.schemas.common import ErrorResponse, HealthStatusData, SuccessResponse
from mta_api.services.errors import translate_store_errors
from mta_api.utils.response import success

router = APIRouter(prefix="/health", tags=["health"])


@router.get(
    "/live",
    summary="存活检查",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[HealthStatusData],
)
def live(request: Request):
    return success(request, {"status": "ok"}, message="服务运行中。")


@router.get(
    "/ready",
    summary="就绪检查",
    description="读取菜单目录条数，确认数据库连接与菜单表均可用。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[HealthStatusData],
    responses={503: {"model": ErrorResponse}},
)
def ready(request: Request, db: Session = Depends(get_db)):
    with translate_store_errors("health check"):
        menu_count = db.execute(select(func.count()).select_from(Menu)).scalar_one()
    return success(request, {"status": "ready", "menu_count": menu_count}, message="服务已就绪。")
