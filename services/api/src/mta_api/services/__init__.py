"""服务层能力导出集合。"""

from mta_api.services.menu_assignment import update_role_assignment, update_tenant_scope
from mta_api.services.menu_catalog import (
    add_menu,
    add_menu_auth,
    delete_menu,
    delete_menu_auth,
    find_child_menus,
    find_menu_list,
    get_all_auths,
    get_all_menus,
    get_menu,
    list_menu_auths,
    update_menu,
    update_menu_auth,
)
from mta_api.services.menu_permissions import (
    resolve_platform_menu_tree,
    resolve_role_menu_tree,
    resolve_tenant_menu_tree,
    resolve_user_menu_tree,
)
from mta_api.services.menu_scope_filter import EmptyScope, filter_auths_by_ids, filter_menus_by_ids
from mta_api.services.menu_tree import build_menu_tree, extract_checked_auth_ids, extract_checked_menu_ids

__all__ = [
    "EmptyScope",
    "add_menu",
    "add_menu_auth",
    "build_menu_tree",
    "delete_menu",
    "delete_menu_auth",
    "extract_checked_auth_ids",
    "extract_checked_menu_ids",
    "filter_auths_by_ids",
    "filter_menus_by_ids",
    "find_child_menus",
    "find_menu_list",
    "get_all_auths",
    "get_all_menus",
    "get_menu",
    "list_menu_auths",
    "resolve_platform_menu_tree",
    "resolve_role_menu_tree",
    "resolve_tenant_menu_tree",
    "resolve_user_menu_tree",
    "update_menu",
    "update_menu_auth",
    "update_role_assignment",
    "update_tenant_scope",
]
