"""菜单授权写入：租户范围调整与角色授权保存。

所有校验都在写入前完成；写入在单个事务内进行，任何一步失败整体回滚。
同一角色被并发保存时不加锁，以最后提交者为准。
"""

import logging

from sqlalchemy.orm import Session

from mta_api.db.session import transaction
from mta_api.schemas.menu import MenuTreeNode
from mta_api.services.errors import (
    AuthOutOfScopeError,
    InvalidAuthIdsError,
    InvalidMenuIdsError,
    MenuOutOfScopeError,
    translate_store_errors,
)
from mta_api.services.identity import get_role, get_tenant
from mta_api.services.menu_catalog import find_missing_auth_ids, find_missing_menu_ids, get_all_auths, get_all_menus
from mta_api.services.menu_permissions import ensure_role_access, resolve_tenant_menu_tree
from mta_api.services.menu_scope_filter import (
    checked_auth_ids_out_of_scope,
    checked_menu_ids_out_of_scope,
    menu_ids_out_of_scope,
)
from mta_api.services.menu_scope_store import (
    get_tenant_auth_scope_ids,
    get_tenant_menu_scope_ids,
    prune_tenant_role_associations,
    save_role_associations,
    save_tenant_auth_scope,
    save_tenant_menu_scope,
)
from mta_api.services.menu_tree import extract_checked_auth_ids, extract_checked_menu_ids, with_ancestor_ids

logger = logging.getLogger(__name__)


def update_tenant_scope(db: Session, tenant_id: int, menu_data: list[MenuTreeNode]) -> list[MenuTreeNode]:
    """按提交的完整菜单树覆盖租户的菜单与按钮范围，并级联清理该租户角色的越界授权。

    调用方负责确认操作者为平台超级管理员。提交中勾选了不存在的 ID 时整体拒绝；
    未出现在提交中的 ID 视为未勾选。

    勾选的子菜单会连同其全部祖先一起写入范围，保证范围内每个菜单都能从根节点挂载；
    所属菜单最终不在范围内的按钮不会写入。
    """
    get_tenant(db, tenant_id)
    menu_ids = extract_checked_menu_ids(menu_data)
    auth_ids = extract_checked_auth_ids(menu_data)

    missing_menu_ids = find_missing_menu_ids(db, menu_ids)
    if missing_menu_ids:
        raise InvalidMenuIdsError(menu_ids=missing_menu_ids)
    missing_auth_ids = find_missing_auth_ids(db, auth_ids)
    if missing_auth_ids:
        raise InvalidAuthIdsError(auth_ids=missing_auth_ids)

    menu_ids = with_ancestor_ids(get_all_menus(db), menu_ids)
    kept_menu_ids = set(menu_ids)
    auth_menu_ids = {auth.id: auth.menu_id for auth in get_all_auths(db)}
    orphan_auth_ids = [auth_id for auth_id in auth_ids if auth_menu_ids[auth_id] not in kept_menu_ids]
    if orphan_auth_ids:
        logger.warning("tenant %s: dropping auths whose menu is not in scope: %s", tenant_id, orphan_auth_ids)
        auth_ids = [auth_id for auth_id in auth_ids if auth_menu_ids[auth_id] in kept_menu_ids]

    with translate_store_errors("update tenant scope", tenant_id=tenant_id), transaction(db):
        save_tenant_menu_scope(db, tenant_id, menu_ids)
        save_tenant_auth_scope(db, tenant_id, auth_ids)
        prune_tenant_role_associations(db, tenant_id, menu_ids, auth_ids)

    logger.info(
        "tenant %s scope replaced: %d menus, %d auths",
        tenant_id,
        len(menu_ids),
        len(auth_ids),
    )
    return resolve_tenant_menu_tree(db, tenant_id)


def update_role_assignment(
    db: Session,
    role_id: int,
    menu_data: list[MenuTreeNode],
    *,
    viewer_tenant_id: int | None,
    viewer_is_super_admin: bool,
) -> None:
    """按提交的角色菜单树全量覆盖角色授权。

    客户端应原样提交查询得到的整棵树。树中节点只能是租户菜单范围内的菜单，或为挂载它们而展示的祖先，
    否则视为篡改或过期数据；祖先本身不能被勾选。被勾选的按钮必须在租户按钮范围内。
    """
    role = get_role(db, role_id)
    ensure_role_access(role, viewer_tenant_id=viewer_tenant_id, viewer_is_super_admin=viewer_is_super_admin)

    menu_scope_ids = get_tenant_menu_scope_ids(db, role.tenant_id)
    visible_menu_ids = with_ancestor_ids(get_all_menus(db), menu_scope_ids)
    out_of_scope_menus = menu_ids_out_of_scope(menu_data, visible_menu_ids) or checked_menu_ids_out_of_scope(
        menu_data, menu_scope_ids
    )
    if out_of_scope_menus:
        raise MenuOutOfScopeError(role_id=role_id, menu_ids=out_of_scope_menus)

    auth_scope_ids = get_tenant_auth_scope_ids(db, role.tenant_id)
    out_of_scope_auths = checked_auth_ids_out_of_scope(menu_data, auth_scope_ids)
    if out_of_scope_auths:
        raise AuthOutOfScopeError(role_id=role_id, auth_ids=out_of_scope_auths)

    menu_ids = extract_checked_menu_ids(menu_data)
    auth_ids = extract_checked_auth_ids(menu_data)
    with translate_store_errors("update role assignment", role_id=role_id), transaction(db):
        save_role_associations(db, role_id, menu_ids, auth_ids)

    logger.info("role %s associations replaced: %d menus, %d auths", role_id, len(menu_ids), len(auth_ids))
