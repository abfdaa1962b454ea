"""路由模块导出集合。"""

from . import health, platform_menus, role_menus, user_menus

__all__ = [
    "health",
    "platform_menus",
    "role_menus",
    "user_menus",
]
