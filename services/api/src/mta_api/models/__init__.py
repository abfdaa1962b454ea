"""ORM 模型导出集合。"""

from mta_api.models.menu import Menu, MenuAuth
from mta_api.models.scope import RoleAuth, RoleMenu, TenantAuthScope, TenantMenuScope
from mta_api.models.tenant import Role, Tenant, User

__all__ = [
    "Menu",
    "MenuAuth",
    "Role",
    "RoleAuth",
    "RoleMenu",
    "Tenant",
    "TenantAuthScope",
    "TenantMenuScope",
    "User",
]
