"""租户范围与角色授权关联的存取。

保存均为全量覆盖：先删除该租户/角色的全部关联，再插入新集合。
本模块只负责写入，不提交事务，由调用方把多步写入放进同一个事务。
"""

from collections.abc import Iterable
import logging

from sqlalchemy import delete, or_, select
from sqlalchemy.orm import Session

from mta_api.models.menu import MenuAuth
from mta_api.models.scope import RoleAuth, RoleMenu, TenantAuthScope, TenantMenuScope
from mta_api.models.tenant import Role
from mta_api.services.errors import InvalidAuthIdsError, InvalidMenuIdsError, translate_store_errors
from mta_api.services.menu_catalog import find_missing_auth_ids, find_missing_menu_ids

logger = logging.getLogger(__name__)


def _unique(ids: Iterable[int]) -> list[int]:
    return list(dict.fromkeys(ids))


def get_tenant_menu_scope_ids(db: Session, tenant_id: int) -> list[int]:
    """返回租户可使用的菜单 ID，升序。"""
    with translate_store_errors("get tenant menu scope", tenant_id=tenant_id):
        stmt = select(TenantMenuScope.menu_id).where(TenantMenuScope.tenant_id == tenant_id)
        return sorted(db.execute(stmt).scalars().all())


def get_tenant_auth_scope_ids(db: Session, tenant_id: int) -> list[int]:
    """返回租户可使用的按钮权限 ID，升序。"""
    with translate_store_errors("get tenant auth scope", tenant_id=tenant_id):
        stmt = select(TenantAuthScope.auth_id).where(TenantAuthScope.tenant_id == tenant_id)
        return sorted(db.execute(stmt).scalars().all())


def save_tenant_menu_scope(db: Session, tenant_id: int, menu_ids: Iterable[int]) -> list[int]:
    """全量覆盖租户菜单范围，任一 ID 不存在时整体拒绝。"""
    menu_ids = _unique(menu_ids)
    missing = find_missing_menu_ids(db, menu_ids)
    if missing:
        raise InvalidMenuIdsError(menu_ids=missing)
    with translate_store_errors("save tenant menu scope", tenant_id=tenant_id):
        db.execute(delete(TenantMenuScope).where(TenantMenuScope.tenant_id == tenant_id))
        db.add_all(TenantMenuScope(tenant_id=tenant_id, menu_id=menu_id) for menu_id in menu_ids)
        db.flush()
    return menu_ids


def save_tenant_auth_scope(db: Session, tenant_id: int, auth_ids: Iterable[int]) -> list[int]:
    """全量覆盖租户按钮权限范围，任一 ID 不存在时整体拒绝。"""
    auth_ids = _unique(auth_ids)
    missing = find_missing_auth_ids(db, auth_ids)
    if missing:
        raise InvalidAuthIdsError(auth_ids=missing)
    with translate_store_errors("save tenant auth scope", tenant_id=tenant_id):
        db.execute(delete(TenantAuthScope).where(TenantAuthScope.tenant_id == tenant_id))
        db.add_all(TenantAuthScope(tenant_id=tenant_id, auth_id=auth_id) for auth_id in auth_ids)
        db.flush()
    return auth_ids


def get_role_menu_and_auth_ids(db: Session, role_id: int) -> tuple[list[int], list[int]]:
    """返回角色当前拥有的 (菜单 ID, 按钮 ID)，均升序。"""
    with translate_store_errors("get role associations", role_id=role_id):
        menu_ids = db.execute(select(RoleMenu.menu_id).where(RoleMenu.role_id == role_id)).scalars().all()
        auth_ids = db.execute(select(RoleAuth.auth_id).where(RoleAuth.role_id == role_id)).scalars().all()
    return sorted(menu_ids), sorted(auth_ids)


def save_role_associations(db: Session, role_id: int, menu_ids: Iterable[int], auth_ids: Iterable[int]) -> None:
    """全量覆盖角色的菜单与按钮授权，范围校验由上层完成。"""
    menu_ids = _unique(menu_ids)
    auth_ids = _unique(auth_ids)
    with translate_store_errors("save role associations", role_id=role_id):
        db.execute(delete(RoleMenu).where(RoleMenu.role_id == role_id))
        db.add_all(RoleMenu(role_id=role_id, menu_id=menu_id) for menu_id in menu_ids)
        db.execute(delete(RoleAuth).where(RoleAuth.role_id == role_id))
        db.add_all(RoleAuth(role_id=role_id, auth_id=auth_id) for auth_id in auth_ids)
        db.flush()


def prune_tenant_role_associations(
    db: Session,
    tenant_id: int,
    allowed_menu_ids: Iterable[int],
    allowed_auth_ids: Iterable[int],
) -> dict[str, int]:
    """租户范围收缩后，清理该租户所有角色中超出新范围的授权。

    被移除的按钮授权包括：按钮本身不在新范围内，或按钮所属菜单不在新菜单范围内。
    """
    allowed_menu_ids = _unique(allowed_menu_ids)
    allowed_auth_ids = _unique(allowed_auth_ids)
    tenant_role_ids = select(Role.id).where(Role.tenant_id == tenant_id)
    orphan_auth_ids = select(MenuAuth.id).where(MenuAuth.menu_id.not_in(allowed_menu_ids))

    with translate_store_errors("prune tenant role associations", tenant_id=tenant_id):
        menu_result = db.execute(
            delete(RoleMenu)
            .where(RoleMenu.role_id.in_(tenant_role_ids))
            .where(RoleMenu.menu_id.not_in(allowed_menu_ids))
            .execution_options(synchronize_session=False)
        )
        auth_result = db.execute(
            delete(RoleAuth)
            .where(RoleAuth.role_id.in_(tenant_role_ids))
            .where(or_(RoleAuth.auth_id.not_in(allowed_auth_ids), RoleAuth.auth_id.in_(orphan_auth_ids)))
            .execution_options(synchronize_session=False)
        )
        db.flush()

    pruned = {"role_menus": menu_result.rowcount or 0, "role_auths": auth_result.rowcount or 0}
    logger.info("pruned role associations for tenant %s: %s", tenant_id, pruned)
    return pruned
