"""菜单树构建与勾选项提取。

菜单在库中是带 parent_id 的平铺记录。构建时先按父级建立索引并对兄弟节点排序，
再从根（parent_id = 0）向下递归组装，整体为 O(n log n)。
相同输入总是得到完全相同的输出，前端原样回传时提取出的 ID 集合与渲染时一致。
"""

from collections import defaultdict
from collections.abc import Iterable

from mta_api.models.enums import RecordStatus
from mta_api.models.menu import Menu, MenuAuth
from mta_api.schemas.menu import MenuAuthNode, MenuTreeMeta, MenuTreeNode

ROOT_PARENT_ID = 0


def menu_sort_key(menu: Menu) -> tuple[int, int, int]:
    """兄弟节点排序：非 0 权重升序，0 权重排在最后，同权重按 ID 升序。"""
    weight = menu.sort or 0
    return (1 if weight == 0 else 0, weight, menu.id)


def is_menu_enabled(menu: Menu) -> bool:
    return menu.status == RecordStatus.ENABLED


def _to_tree_node(
    menu: Menu,
    auths: list[MenuAuth],
    granted_menu_ids: set[int],
    granted_auth_ids: set[int],
) -> MenuTreeNode:
    auth_list = [
        MenuAuthNode(
            id=auth.id,
            title=auth.title or "",
            auth_mark=auth.mark or "",
            has_permission=auth.id in granted_auth_ids,
        )
        for auth in auths
    ]
    return MenuTreeNode(
        id=menu.id,
        updated_at=int(menu.updated_at.timestamp()) if menu.updated_at else None,
        path=menu.path or "",
        name=menu.name or "",
        component=menu.component or "",
        meta=MenuTreeMeta(
            title=menu.title or "",
            icon=menu.icon or "",
            keep_alive=bool(menu.keep_alive),
            show_badge=bool(menu.show_badge),
            show_text_badge=menu.show_text_badge or "",
            is_hide=bool(menu.is_hide),
            is_hide_tab=bool(menu.is_hide_tab),
            link=menu.link or "",
            is_iframe=bool(menu.is_iframe),
            is_in_main_container=bool(menu.is_first_level),
            is_enable=is_menu_enabled(menu),
            sort=menu.sort or 0,
            auth_list=auth_list or None,
        ),
        has_permission=menu.id in granted_menu_ids,
    )


def _build_level(
    parent_id: int,
    children_index: dict[int, list[Menu]],
    auth_index: dict[int, list[MenuAuth]],
    granted_menu_ids: set[int],
    granted_auth_ids: set[int],
) -> list[MenuTreeNode]:
    nodes = []
    for menu in children_index.get(parent_id, []):
        node = _to_tree_node(menu, auth_index.get(menu.id, []), granted_menu_ids, granted_auth_ids)
        children = _build_level(menu.id, children_index, auth_index, granted_menu_ids, granted_auth_ids)
        node.children = children or None
        nodes.append(node)
    return nodes


def build_menu_tree(
    menus: Iterable[Menu],
    auths: Iterable[MenuAuth],
    granted_menu_ids: Iterable[int],
    granted_auth_ids: Iterable[int],
    *,
    include_disabled: bool,
) -> list[MenuTreeNode]:
    """构建带权限标记的菜单树。

    - include_disabled 为 False 时，禁用节点及其整棵子树都不会出现。
    - 只从根节点向下遍历，父级缺失的孤立节点不会出现在结果中。
    - 按钮按 ID 升序挂在所属菜单的 authList 下。
    """
    children_index: dict[int, list[Menu]] = defaultdict(list)
    for menu in menus:
        if not include_disabled and not is_menu_enabled(menu):
            continue
        children_index[menu.parent_id or ROOT_PARENT_ID].append(menu)
    for siblings in children_index.values():
        siblings.sort(key=menu_sort_key)

    auth_index: dict[int, list[MenuAuth]] = defaultdict(list)
    for auth in sorted(auths, key=lambda item: item.id):
        auth_index[auth.menu_id].append(auth)

    return _build_level(
        ROOT_PARENT_ID,
        children_index,
        auth_index,
        set(granted_menu_ids),
        set(granted_auth_ids),
    )


def iter_tree_nodes(tree: list[MenuTreeNode]) -> Iterable[MenuTreeNode]:
    """先序遍历菜单树。"""
    for node in tree:
        yield node
        if node.children:
            yield from iter_tree_nodes(node.children)


def _unique(ids: Iterable[int]) -> list[int]:
    seen: set[int] = set()
    result = []
    for item in ids:
        if item in seen:
            continue
        seen.add(item)
        result.append(item)
    return result


def with_ancestor_ids(menus: Iterable[Menu], menu_ids: Iterable[int]) -> list[int]:
    """补齐父级菜单：返回 menu_ids 及其在 menus 中能找到的全部祖先 ID。

    只沿 menus 内存在的父级向上走，遇到缺失的父级即停止；已走过的节点不会重复访问，
    即使数据中存在环也能结束。
    """
    parent_of = {menu.id: menu.parent_id or ROOT_PARENT_ID for menu in menus}
    result = _unique(menu_id for menu_id in menu_ids if menu_id in parent_of)
    seen = set(result)
    for menu_id in list(result):
        parent_id = parent_of[menu_id]
        while parent_id != ROOT_PARENT_ID and parent_id in parent_of and parent_id not in seen:
            seen.add(parent_id)
            result.append(parent_id)
            parent_id = parent_of[parent_id]
    return result


def collect_menu_ids(tree: list[MenuTreeNode]) -> list[int]:
    """返回树中出现的全部菜单 ID（不论是否勾选）。"""
    return _unique(node.id for node in iter_tree_nodes(tree))


def extract_checked_menu_ids(tree: list[MenuTreeNode]) -> list[int]:
    """提取所有 hasPermission 为真的菜单 ID，按先序去重。"""
    return _unique(node.id for node in iter_tree_nodes(tree) if node.has_permission)


def extract_checked_auth_ids(tree: list[MenuTreeNode]) -> list[int]:
    """提取所有 hasPermission 为真的按钮 ID，按先序去重。"""
    return _unique(
        auth.id
        for node in iter_tree_nodes(tree)
        for auth in node.meta.auth_list or []
        if auth.has_permission
    )
