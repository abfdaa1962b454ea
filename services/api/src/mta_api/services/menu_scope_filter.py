"""按允许的 ID 集合裁剪菜单与按钮。

“允许集合为空”在不同调用点含义不同，因此由调用方通过 EmptyScope 显式声明，
不在这里推断统一规则。
"""

from collections.abc import Iterable
from enum import StrEnum

from mta_api.models.menu import Menu, MenuAuth
from mta_api.schemas.menu import MenuTreeNode
from mta_api.services.menu_tree import iter_tree_nodes, with_ancestor_ids


class EmptyScope(StrEnum):
    """允许集合为空时的处理策略。"""

    NOTHING = "nothing"  # 空集合表示什么都不允许。
    EVERYTHING = "everything"  # 空集合表示不做限制。


def filter_menus_by_ids(
    menus: Iterable[Menu],
    auths: Iterable[MenuAuth],
    allowed_menu_ids: Iterable[int],
    *,
    empty: EmptyScope,
    include_ancestors: bool = False,
) -> tuple[list[Menu], list[MenuAuth]]:
    """只保留允许范围内的菜单，以及所属菜单被保留的按钮。

    include_ancestors 为真时，从 menus 中补齐被保留菜单的父级，
    保证结果能从根节点连通，只授权了子菜单时子菜单仍可见。
    """
    menus = list(menus)
    auths = list(auths)
    allowed = set(allowed_menu_ids)
    if not allowed:
        if empty == EmptyScope.EVERYTHING:
            return menus, auths
        return [], []
    if include_ancestors:
        allowed = set(with_ancestor_ids(menus, allowed))

    kept_menus = [menu for menu in menus if menu.id in allowed]
    kept_ids = {menu.id for menu in kept_menus}
    kept_auths = [auth for auth in auths if auth.menu_id in kept_ids]
    return kept_menus, kept_auths


def filter_auths_by_ids(
    auths: Iterable[MenuAuth],
    allowed_auth_ids: Iterable[int],
    *,
    empty: EmptyScope,
) -> list[MenuAuth]:
    """只保留 ID 在允许集合内的按钮。"""
    auths = list(auths)
    allowed = set(allowed_auth_ids)
    if not allowed:
        return auths if empty == EmptyScope.EVERYTHING else []
    return [auth for auth in auths if auth.id in allowed]


def filter_ids(source: Iterable[int], allowed_ids: Iterable[int]) -> list[int]:
    """把已拥有的 ID 再用允许集合过滤一遍，去掉失效引用。空允许集合结果为空。"""
    allowed = set(allowed_ids)
    return [item for item in source if item in allowed]


def menu_ids_out_of_scope(tree: list[MenuTreeNode], allowed_menu_ids: Iterable[int]) -> list[int]:
    """返回提交树中不在允许范围内的菜单 ID（检查所有节点，不只是勾选节点）。

    允许集合为空时，提交树中任何节点都算越权，即只能提交空树。
    """
    allowed = set(allowed_menu_ids)
    return sorted({node.id for node in iter_tree_nodes(tree) if node.id not in allowed})


def checked_menu_ids_out_of_scope(tree: list[MenuTreeNode], allowed_menu_ids: Iterable[int]) -> list[int]:
    """返回被勾选但不在允许范围内的菜单 ID。"""
    allowed = set(allowed_menu_ids)
    return sorted({node.id for node in iter_tree_nodes(tree) if node.has_permission and node.id not in allowed})


def checked_auth_ids_out_of_scope(tree: list[MenuTreeNode], allowed_auth_ids: Iterable[int]) -> list[int]:
    """返回被勾选但不在允许范围内的按钮 ID。

    允许集合为空时，任何被勾选的按钮都算越权。
    """
    allowed = set(allowed_auth_ids)
    return sorted(
        {
            auth.id
            for node in iter_tree_nodes(tree)
            for auth in node.meta.auth_list or []
            if auth.has_permission and auth.id not in allowed
        }
    )


def validate_menu_scope(tree: list[MenuTreeNode], allowed_menu_ids: Iterable[int]) -> bool:
    return not menu_ids_out_of_scope(tree, allowed_menu_ids)


def validate_auth_scope(tree: list[MenuTreeNode], allowed_auth_ids: Iterable[int]) -> bool:
    return not checked_auth_ids_out_of_scope(tree, allowed_auth_ids)
