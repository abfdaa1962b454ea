"""平台菜单目录：菜单与按钮权限的读写。

写操作的约束：
1. 父级菜单必须存在且处于启用状态。
2. 存在启用子菜单时不能禁用。
3. 存在任意子菜单时不能删除。
"""

from collections.abc import Iterable
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from mta_api.db.session import transaction
from mta_api.models.enums import RecordStatus
from mta_api.models.menu import Menu, MenuAuth
from mta_api.models.scope import RoleAuth, RoleMenu, TenantAuthScope, TenantMenuScope
from mta_api.services.errors import (
    DisableMenuWithEnabledChildError,
    InvalidArgumentError,
    MenuAuthNotFoundError,
    MenuHasChildrenError,
    MenuNotFoundError,
    ParentMenuDisabledError,
    ParentMenuNotFoundError,
    translate_store_errors,
)
from mta_api.services.menu_tree import ROOT_PARENT_ID

# page_size 为该值时不分页，此时 page 被忽略。
NO_PAGINATION = -1

MENU_WRITABLE_FIELDS = (
    "path",
    "name",
    "component",
    "title",
    "icon",
    "show_badge",
    "show_text_badge",
    "is_hide",
    "is_hide_tab",
    "link",
    "is_iframe",
    "keep_alive",
    "is_first_level",
    "status",
    "parent_id",
    "sort",
)


def get_all_menus(db: Session) -> list[Menu]:
    with translate_store_errors("get all menus"):
        return list(db.execute(select(Menu).order_by(Menu.id)).scalars().all())


def get_all_auths(db: Session) -> list[MenuAuth]:
    with translate_store_errors("get all menu auths"):
        return list(db.execute(select(MenuAuth).order_by(MenuAuth.id)).scalars().all())


def get_menu(db: Session, menu_id: int) -> Menu:
    """按 ID 查询菜单，不存在时抛出 MenuNotFoundError。"""
    with translate_store_errors("get menu", menu_id=menu_id):
        menu = db.get(Menu, menu_id)
    if menu is None:
        raise MenuNotFoundError(menu_id=menu_id)
    return menu


def find_child_menus(db: Session, parent_id: int) -> list[Menu]:
    with translate_store_errors("find child menus", parent_id=parent_id):
        stmt = select(Menu).where(Menu.parent_id == parent_id).order_by(Menu.sort, Menu.id)
        return list(db.execute(stmt).scalars().all())


def find_menu_list(
    db: Session,
    *,
    title: str | None = None,
    name: str | None = None,
    path: str | None = None,
    parent_id: int | None = None,
    status: str | None = None,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[Menu], int]:
    """按条件查询菜单列表，返回 (当前页数据, 总数)。"""
    stmt = select(Menu)
    if title:
        stmt = stmt.where(Menu.title.contains(title))
    if name:
        stmt = stmt.where(Menu.name.contains(name))
    if path:
        stmt = stmt.where(Menu.path.contains(path))
    if parent_id is not None:
        stmt = stmt.where(Menu.parent_id == parent_id)
    if status:
        stmt = stmt.where(Menu.status == status)

    with translate_store_errors("find menu list"):
        total = db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()
        stmt = stmt.order_by(Menu.sort, Menu.id)
        if page_size != NO_PAGINATION:
            stmt = stmt.offset((max(page, 1) - 1) * page_size).limit(page_size)
        items = list(db.execute(stmt).scalars().all())
    return items, total


def find_missing_menu_ids(db: Session, menu_ids: Iterable[int]) -> list[int]:
    """返回不存在于目录中的菜单 ID。"""
    wanted = set(menu_ids)
    if not wanted:
        return []
    with translate_store_errors("validate menu ids"):
        found = set(db.execute(select(Menu.id).where(Menu.id.in_(wanted))).scalars().all())
    return sorted(wanted - found)


def find_missing_auth_ids(db: Session, auth_ids: Iterable[int]) -> list[int]:
    """返回不存在于目录中的按钮权限 ID。"""
    wanted = set(auth_ids)
    if not wanted:
        return []
    with translate_store_errors("validate auth ids"):
        found = set(db.execute(select(MenuAuth.id).where(MenuAuth.id.in_(wanted))).scalars().all())
    return sorted(wanted - found)


def _resolve_level(db: Session, parent_id: int) -> int:
    """校验父级菜单并返回新节点层级。"""
    if parent_id == ROOT_PARENT_ID:
        return 1
    parent = db.get(Menu, parent_id)
    if parent is None:
        raise ParentMenuNotFoundError(parent_id=parent_id)
    if parent.status != RecordStatus.ENABLED:
        raise ParentMenuDisabledError(parent_id=parent_id)
    return parent.level + 1


def _is_descendant(db: Session, candidate_id: int, ancestor_id: int) -> bool:
    """沿父级链向上查找，判断 candidate_id 是否位于 ancestor_id 的子树中。"""
    seen: set[int] = set()
    current_id = candidate_id
    while current_id != ROOT_PARENT_ID and current_id not in seen:
        if current_id == ancestor_id:
            return True
        seen.add(current_id)
        current = db.get(Menu, current_id)
        if current is None:
            return False
        current_id = current.parent_id or ROOT_PARENT_ID
    return False


def add_menu(db: Session, **fields: Any) -> Menu:
    """新增菜单。"""
    values = {key: fields[key] for key in MENU_WRITABLE_FIELDS if key in fields}
    parent_id = values.setdefault("parent_id", ROOT_PARENT_ID)
    with translate_store_errors("add menu", parent_id=parent_id), transaction(db):
        menu = Menu(**values, level=_resolve_level(db, parent_id))
        db.add(menu)
        db.flush()
    return menu


def update_menu(db: Session, menu_id: int, **fields: Any) -> Menu:
    """全量更新菜单定义。"""
    values = {key: fields[key] for key in MENU_WRITABLE_FIELDS if key in fields}
    with translate_store_errors("update menu", menu_id=menu_id), transaction(db):
        menu = db.get(Menu, menu_id)
        if menu is None:
            raise MenuNotFoundError(menu_id=menu_id)
        parent_id = values.get("parent_id", menu.parent_id)
        if parent_id == menu_id:
            raise InvalidArgumentError("菜单不能以自身作为父级。", menu_id=menu_id)
        if _is_descendant(db, parent_id, menu_id):
            raise InvalidArgumentError("不能将菜单移动到其子孙菜单下。", menu_id=menu_id, parent_id=parent_id)
        level = _resolve_level(db, parent_id)

        if values.get("status", menu.status) == RecordStatus.DISABLED:
            enabled_child = db.execute(
                select(Menu.id)
                .where(Menu.parent_id == menu_id)
                .where(Menu.status == RecordStatus.ENABLED)
                .limit(1)
            ).scalar_one_or_none()
            if enabled_child is not None:
                raise DisableMenuWithEnabledChildError(menu_id=menu_id, child_id=enabled_child)

        for key, value in values.items():
            setattr(menu, key, value)
        menu.level = level
        db.flush()
    return menu


def delete_menu(db: Session, menu_id: int) -> None:
    """删除没有子菜单的菜单，并清理引用它的租户范围与角色授权。"""
    with translate_store_errors("delete menu", menu_id=menu_id), transaction(db):
        menu = db.get(Menu, menu_id)
        if menu is None:
            raise MenuNotFoundError(menu_id=menu_id)
        child = db.execute(select(Menu.id).where(Menu.parent_id == menu_id).limit(1)).scalar_one_or_none()
        if child is not None:
            raise MenuHasChildrenError(menu_id=menu_id, child_id=child)

        db.execute(delete(TenantMenuScope).where(TenantMenuScope.menu_id == menu_id))
        db.execute(delete(RoleMenu).where(RoleMenu.menu_id == menu_id))
        db.delete(menu)
        db.flush()


def list_menu_auths(db: Session, menu_id: int) -> list[MenuAuth]:
    with translate_store_errors("list menu auths", menu_id=menu_id):
        stmt = select(MenuAuth).where(MenuAuth.menu_id == menu_id).order_by(MenuAuth.id)
        return list(db.execute(stmt).scalars().all())


def get_menu_auth(db: Session, auth_id: int) -> MenuAuth:
    with translate_store_errors("get menu auth", auth_id=auth_id):
        auth = db.get(MenuAuth, auth_id)
    if auth is None:
        raise MenuAuthNotFoundError(auth_id=auth_id)
    return auth


def add_menu_auth(db: Session, *, menu_id: int, mark: str, title: str = "") -> MenuAuth:
    """在指定菜单下新增按钮权限。"""
    with translate_store_errors("add menu auth", menu_id=menu_id), transaction(db):
        if db.get(Menu, menu_id) is None:
            raise MenuNotFoundError(menu_id=menu_id)
        auth = MenuAuth(menu_id=menu_id, mark=mark, title=title)
        db.add(auth)
        db.flush()
    return auth


def update_menu_auth(db: Session, auth_id: int, *, menu_id: int, mark: str, title: str = "") -> MenuAuth:
    with translate_store_errors("update menu auth", auth_id=auth_id), transaction(db):
        auth = db.get(MenuAuth, auth_id)
        if auth is None:
            raise MenuAuthNotFoundError(auth_id=auth_id)
        if db.get(Menu, menu_id) is None:
            raise MenuNotFoundError(menu_id=menu_id)
        auth.menu_id = menu_id
        auth.mark = mark
        auth.title = title
        db.flush()
    return auth


def delete_menu_auth(db: Session, auth_id: int) -> None:
    """删除按钮权限。

    与菜单删除不同，这里不因存在租户范围或角色授权而拒绝删除，
    而是连同这些关联一起移除。
    """
    with translate_store_errors("delete menu auth", auth_id=auth_id), transaction(db):
        auth = db.get(MenuAuth, auth_id)
        if auth is None:
            raise MenuAuthNotFoundError(auth_id=auth_id)
        db.execute(delete(TenantAuthScope).where(TenantAuthScope.auth_id == auth_id))
        db.execute(delete(RoleAuth).where(RoleAuth.auth_id == auth_id))
        db.delete(auth)
        db.flush()
