"""FastAPI 应用入口点。"""

from fastapi import FastAPI

from mta_api.core.config import get_settings
from mta_api.core.logging import configure_logging
from mta_api.exceptions import register_exception_handlers
from mta_api.middlewares import register_middlewares
from mta_api.api.router import api_router

settings = get_settings()


def create_app() -> FastAPI:
    """创建并配置 FastAPI 应用实例。"""
    configure_logging(settings.log_level)
    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        debug=settings.app_debug,
        description=(
            "多租户后台菜单权限接口。\n\n"
            "成功响应统一返回：`{data, meta}`；错误响应统一返回：`{error: {code, message, details}}`。\n"
            "通过访问令牌进行认证，租户上下文取自令牌中的 `tenant_id`。"
        ),
        openapi_tags=[
            {"name": "health", "description": "服务存活与就绪探针。"},
            {"name": "platform-menus", "description": "平台菜单目录、按钮权限与租户菜单范围维护（超级管理员）。"},
            {"name": "role-menus", "description": "租户内角色菜单授权查询与保存。"},
            {"name": "user-menus", "description": "当前用户可见菜单树。"},
        ],
    )

    register_middlewares(app)
    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.api_prefix)
    return app


app = create_app()
