"""菜单权限解析：按查看者身份返回带勾选标记的菜单树。

三层范围：平台目录 -> 租户范围 -> 角色授权。各调用点对“空范围”的处理如下：
1. 平台视角：不过滤，全部标记为已拥有。
2. 租户视角：展示完整目录，租户范围为空则全部未勾选。
3. 角色/用户视角：租户范围为空表示什么都不可见（EmptyScope.NOTHING）。
"""

from sqlalchemy.orm import Session

from mta_api.models.tenant import Role
from mta_api.schemas.menu import MenuTreeNode
from mta_api.services.errors import PermissionDeniedError
from mta_api.services.identity import get_role, get_tenant, get_user
from mta_api.services.menu_catalog import get_all_auths, get_all_menus
from mta_api.services.menu_scope_filter import EmptyScope, filter_auths_by_ids, filter_ids, filter_menus_by_ids
from mta_api.services.menu_scope_store import (
    get_role_menu_and_auth_ids,
    get_tenant_auth_scope_ids,
    get_tenant_menu_scope_ids,
)
from mta_api.services.menu_tree import build_menu_tree


def ensure_role_access(role: Role, *, viewer_tenant_id: int | None, viewer_is_super_admin: bool) -> None:
    """非超级管理员只能操作本租户的角色。"""
    if viewer_is_super_admin:
        return
    if not viewer_tenant_id or role.tenant_id != viewer_tenant_id:
        raise PermissionDeniedError("无权操作该角色菜单。", role_id=role.id)


def resolve_platform_menu_tree(db: Session) -> list[MenuTreeNode]:
    """平台视角：完整目录，包含禁用菜单，全部标记为已拥有。"""
    menus = get_all_menus(db)
    auths = get_all_auths(db)
    return build_menu_tree(
        menus,
        auths,
        [menu.id for menu in menus],
        [auth.id for auth in auths],
        include_disabled=True,
    )


def resolve_tenant_menu_tree(db: Session, tenant_id: int) -> list[MenuTreeNode]:
    """租户视角：完整目录，勾选租户当前被授权的菜单与按钮。"""
    get_tenant(db, tenant_id)
    menus = get_all_menus(db)
    auths = get_all_auths(db)
    menu_scope_ids = get_tenant_menu_scope_ids(db, tenant_id)
    auth_scope_ids = get_tenant_auth_scope_ids(db, tenant_id)
    return build_menu_tree(menus, auths, menu_scope_ids, auth_scope_ids, include_disabled=True)


def resolve_role_menu_tree(
    db: Session,
    role_id: int,
    *,
    viewer_tenant_id: int | None,
    viewer_is_super_admin: bool,
) -> list[MenuTreeNode]:
    """角色视角：只展示角色所属租户范围内的菜单与按钮，勾选角色当前授权。

    包含禁用菜单，管理员仍可调整禁用项的授权状态。
    """
    role = get_role(db, role_id)
    ensure_role_access(role, viewer_tenant_id=viewer_tenant_id, viewer_is_super_admin=viewer_is_super_admin)

    menu_scope_ids = get_tenant_menu_scope_ids(db, role.tenant_id)
    auth_scope_ids = get_tenant_auth_scope_ids(db, role.tenant_id)
    # 范围内子菜单的父级即使不在范围内也要展示，否则子菜单无处挂载；这些父级不会被勾选。
    menus, auths = filter_menus_by_ids(
        get_all_menus(db),
        get_all_auths(db),
        menu_scope_ids,
        empty=EmptyScope.NOTHING,
        include_ancestors=True,
    )
    auths = filter_auths_by_ids(auths, auth_scope_ids, empty=EmptyScope.NOTHING)

    # 角色授权理论上已是租户范围的子集，这里仍再过滤一次，去掉范围收缩后残留的引用。
    role_menu_ids, role_auth_ids = get_role_menu_and_auth_ids(db, role.id)
    role_menu_ids = filter_ids(role_menu_ids, menu_scope_ids)
    role_auth_ids = filter_ids(role_auth_ids, [auth.id for auth in auths])

    return build_menu_tree(menus, auths, role_menu_ids, role_auth_ids, include_disabled=True)


def resolve_user_menu_tree(db: Session, user_id: int, tenant_id: int) -> list[MenuTreeNode]:
    """终端用户视角：角色菜单 ∩ 租户菜单范围，补齐父级，不含禁用菜单。

    只授权了子菜单时，父级菜单作为导航一并展示。
    已展示菜单下的按钮全部列出，是否拥有由 角色按钮 ∩ 租户按钮范围 决定；
    租户按钮范围为空时按钮仍然列出，只是全部未勾选。
    """
    user = get_user(db, user_id)
    if user.tenant_id != tenant_id:
        raise PermissionDeniedError("用户不属于当前租户。", user_id=user_id, tenant_id=tenant_id)
    role = get_role(db, user.role_id)

    role_menu_ids, role_auth_ids = get_role_menu_and_auth_ids(db, role.id)
    menu_scope_ids = get_tenant_menu_scope_ids(db, tenant_id)
    auth_scope_ids = get_tenant_auth_scope_ids(db, tenant_id)

    granted_menu_ids = filter_ids(role_menu_ids, menu_scope_ids)
    menus, auths = filter_menus_by_ids(
        get_all_menus(db),
        get_all_auths(db),
        granted_menu_ids,
        empty=EmptyScope.NOTHING,
        include_ancestors=True,
    )

    granted_auth_ids = filter_ids(role_auth_ids, auth_scope_ids)
    return build_menu_tree(
        menus,
        auths,
        [menu.id for menu in menus],
        granted_auth_ids,
        include_disabled=False,
    )
