import pytest
from sqlalchemy import delete
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from mta_api.models.scope import RoleAuth, RoleMenu, TenantAuthScope, TenantMenuScope
from mta_api.schemas.menu import MenuAuthNode, MenuTreeMeta, MenuTreeNode
from mta_api.services import menu_assignment
from mta_api.services.errors import (
    AuthOutOfScopeError,
    InvalidAuthIdsError,
    InvalidMenuIdsError,
    MenuOutOfScopeError,
    PermissionDeniedError,
    StoreUnavailableError,
    TenantNotFoundError,
)
from mta_api.services.menu_permissions import resolve_role_menu_tree, resolve_tenant_menu_tree
from mta_api.services.menu_scope_store import (
    get_role_menu_and_auth_ids,
    get_tenant_auth_scope_ids,
    get_tenant_menu_scope_ids,
    prune_tenant_role_associations,
)
from mta_api.services.menu_tree import (
    collect_menu_ids,
    extract_checked_auth_ids,
    extract_checked_menu_ids,
    iter_tree_nodes,
)


def _set_checks(tree: list[MenuTreeNode], menu_ids: set[int], auth_ids: set[int]) -> list[MenuTreeNode]:
    for node in iter_tree_nodes(tree):
        node.has_permission = node.id in menu_ids
        for auth in node.meta.auth_list or []:
            auth.has_permission = auth.id in auth_ids
    return tree


@pytest.fixture
def tenant_setup(db_session: Session, catalog, make_identity):
    make_identity(1, 1, 100)
    make_identity(1, 3)
    make_identity(2, 2, 200)
    db_session.add_all(TenantMenuScope(tenant_id=1, menu_id=menu_id) for menu_id in (1, 2, 4))
    db_session.add_all(TenantAuthScope(tenant_id=1, auth_id=auth_id) for auth_id in (11, 14))
    db_session.add_all(TenantMenuScope(tenant_id=2, menu_id=menu_id) for menu_id in (1, 2))
    db_session.add_all(TenantAuthScope(tenant_id=2, auth_id=auth_id) for auth_id in (11,))
    db_session.add_all([RoleMenu(role_id=1, menu_id=1), RoleMenu(role_id=1, menu_id=2), RoleAuth(role_id=1, auth_id=11)])
    db_session.add_all([RoleMenu(role_id=3, menu_id=4), RoleAuth(role_id=3, auth_id=14)])
    db_session.add_all([RoleMenu(role_id=2, menu_id=2), RoleAuth(role_id=2, auth_id=11)])
    db_session.commit()


def _update_role(db: Session, role_id: int, tree: list[MenuTreeNode], *, tenant_id: int = 1) -> None:
    menu_assignment.update_role_assignment(
        db,
        role_id,
        tree,
        viewer_tenant_id=tenant_id,
        viewer_is_super_admin=False,
    )


def _role_tree(db: Session, role_id: int, *, tenant_id: int = 1) -> list[MenuTreeNode]:
    return resolve_role_menu_tree(db, role_id, viewer_tenant_id=tenant_id, viewer_is_super_admin=False)


# ---- 租户范围 ----


def test_update_tenant_scope_replaces_scope_and_returns_tree(db_session: Session, tenant_setup):
    submitted = _set_checks(resolve_tenant_menu_tree(db_session, 1), {1, 2, 3, 4}, {11, 12, 13, 14})

    tree = menu_assignment.update_tenant_scope(db_session, 1, submitted)

    assert get_tenant_menu_scope_ids(db_session, 1) == [1, 2, 3, 4]
    assert get_tenant_auth_scope_ids(db_session, 1) == [11, 12, 13, 14]
    assert extract_checked_menu_ids(tree) == [1, 2, 3, 4]
    assert extract_checked_auth_ids(tree) == [11, 12, 13, 14]


def test_update_tenant_scope_omitted_ids_are_unchecked(db_session: Session, tenant_setup):
    submitted = [MenuTreeNode(id=4, has_permission=True)]

    menu_assignment.update_tenant_scope(db_session, 1, submitted)

    assert get_tenant_menu_scope_ids(db_session, 1) == [4]
    assert get_tenant_auth_scope_ids(db_session, 1) == []


def test_update_tenant_scope_adds_parents_of_checked_children(db_session: Session, tenant_setup):
    submitted = _set_checks(resolve_tenant_menu_tree(db_session, 1), {2}, {11})

    tree = menu_assignment.update_tenant_scope(db_session, 1, submitted)

    assert get_tenant_menu_scope_ids(db_session, 1) == [1, 2]
    assert extract_checked_menu_ids(tree) == [1, 2]
    assert get_role_menu_and_auth_ids(db_session, 1) == ([1, 2], [11])


def test_update_tenant_scope_drops_auths_of_unchecked_menus(db_session: Session, tenant_setup):
    # 按钮 11 属于未勾选的菜单 2，不写入范围。
    submitted = _set_checks(resolve_tenant_menu_tree(db_session, 1), {4}, {11, 14})

    menu_assignment.update_tenant_scope(db_session, 1, submitted)

    assert get_tenant_menu_scope_ids(db_session, 1) == [4]
    assert get_tenant_auth_scope_ids(db_session, 1) == [14]


def test_update_tenant_scope_rejects_unknown_ids_atomically(db_session: Session, tenant_setup):
    bad_menu = _set_checks(resolve_tenant_menu_tree(db_session, 1), {1}, set())
    bad_menu.append(MenuTreeNode(id=999, has_permission=True))
    with pytest.raises(InvalidMenuIdsError) as exc_info:
        menu_assignment.update_tenant_scope(db_session, 1, bad_menu)
    assert exc_info.value.details["menu_ids"] == [999]

    bad_auth = [
        MenuTreeNode(
            id=1,
            has_permission=True,
            meta=MenuTreeMeta(auth_list=[MenuAuthNode(id=888, has_permission=True)]),
        )
    ]
    with pytest.raises(InvalidAuthIdsError):
        menu_assignment.update_tenant_scope(db_session, 1, bad_auth)

    assert get_tenant_menu_scope_ids(db_session, 1) == [1, 2, 4]
    assert get_tenant_auth_scope_ids(db_session, 1) == [11, 14]
    assert get_role_menu_and_auth_ids(db_session, 1) == ([1, 2], [11])


def test_update_tenant_scope_missing_tenant(db_session: Session, tenant_setup):
    with pytest.raises(TenantNotFoundError):
        menu_assignment.update_tenant_scope(db_session, 42, [])


def test_shrinking_tenant_scope_prunes_role_associations(db_session: Session, tenant_setup):
    # 收回菜单 2：按钮 11 随之不写入范围，角色 1 的菜单 2 与按钮 11 都被移除。
    submitted = _set_checks(resolve_tenant_menu_tree(db_session, 1), {1, 4}, {11, 14})

    menu_assignment.update_tenant_scope(db_session, 1, submitted)

    assert get_role_menu_and_auth_ids(db_session, 1) == ([1], [])
    assert get_role_menu_and_auth_ids(db_session, 3) == ([4], [14])
    # 其他租户的角色不受影响。
    assert get_role_menu_and_auth_ids(db_session, 2) == ([2], [11])


def test_shrinking_auth_scope_prunes_role_auths(db_session: Session, tenant_setup):
    submitted = _set_checks(resolve_tenant_menu_tree(db_session, 1), {1, 2, 4}, {11})

    menu_assignment.update_tenant_scope(db_session, 1, submitted)

    assert get_role_menu_and_auth_ids(db_session, 1) == ([1, 2], [11])
    assert get_role_menu_and_auth_ids(db_session, 3) == ([4], [])


def test_clearing_tenant_scope_clears_all_role_associations(db_session: Session, tenant_setup):
    menu_assignment.update_tenant_scope(db_session, 1, [])

    assert get_role_menu_and_auth_ids(db_session, 1) == ([], [])
    assert get_role_menu_and_auth_ids(db_session, 3) == ([], [])


def test_tenant_scope_update_rolls_back_when_prune_fails(db_session: Session, tenant_setup, monkeypatch):
    def _fail(*args, **kwargs):
        raise OperationalError("delete", {}, Exception("statement timeout"))

    monkeypatch.setattr(menu_assignment, "prune_tenant_role_associations", _fail)
    submitted = _set_checks(resolve_tenant_menu_tree(db_session, 1), {1}, set())

    with pytest.raises(StoreUnavailableError):
        menu_assignment.update_tenant_scope(db_session, 1, submitted)

    assert get_tenant_menu_scope_ids(db_session, 1) == [1, 2, 4]
    assert get_tenant_auth_scope_ids(db_session, 1) == [11, 14]


def test_prune_reports_removed_rows(db_session: Session, tenant_setup):
    pruned = prune_tenant_role_associations(db_session, 1, [1], [11])
    db_session.commit()

    assert pruned == {"role_menus": 2, "role_auths": 2}


# ---- 角色授权 ----


def test_role_round_trip_without_edits_is_idempotent(db_session: Session, tenant_setup):
    before = get_role_menu_and_auth_ids(db_session, 1)

    _update_role(db_session, 1, _role_tree(db_session, 1))

    assert get_role_menu_and_auth_ids(db_session, 1) == before


def test_role_round_trip_with_child_only_scope(db_session: Session, tenant_setup):
    # 租户 2 的范围只剩子菜单 2，角色树会补出父级 1，原样回传必须成功。
    db_session.execute(delete(TenantMenuScope).where(TenantMenuScope.tenant_id == 2, TenantMenuScope.menu_id == 1))
    db_session.commit()

    rendered = _role_tree(db_session, 2, tenant_id=2)
    assert collect_menu_ids(rendered) == [1, 2]

    _update_role(db_session, 2, rendered, tenant_id=2)

    assert get_role_menu_and_auth_ids(db_session, 2) == ([2], [11])


def test_role_assignment_rejects_checking_parent_outside_scope(db_session: Session, tenant_setup):
    db_session.execute(delete(TenantMenuScope).where(TenantMenuScope.tenant_id == 2, TenantMenuScope.menu_id == 1))
    db_session.commit()
    submitted = _set_checks(_role_tree(db_session, 2, tenant_id=2), {1, 2}, {11})

    with pytest.raises(MenuOutOfScopeError) as exc_info:
        _update_role(db_session, 2, submitted, tenant_id=2)

    assert exc_info.value.details["menu_ids"] == [1]
    assert get_role_menu_and_auth_ids(db_session, 2) == ([2], [11])


def test_role_assignment_replaces_associations(db_session: Session, tenant_setup):
    submitted = _set_checks(_role_tree(db_session, 1), {4}, {14})

    _update_role(db_session, 1, submitted)

    assert get_role_menu_and_auth_ids(db_session, 1) == ([4], [14])


def test_role_assignment_never_exceeds_tenant_scope(db_session: Session, tenant_setup):
    submitted = _set_checks(_role_tree(db_session, 1), {1, 2, 4}, {11, 14})

    _update_role(db_session, 1, submitted)

    role_menu_ids, role_auth_ids = get_role_menu_and_auth_ids(db_session, 1)
    assert set(role_menu_ids) <= set(get_tenant_menu_scope_ids(db_session, 1))
    assert set(role_auth_ids) <= set(get_tenant_auth_scope_ids(db_session, 1))


def test_role_assignment_rejects_unchecked_node_outside_scope(db_session: Session, tenant_setup):
    submitted = _role_tree(db_session, 1)
    submitted.append(MenuTreeNode(id=3, has_permission=False))

    with pytest.raises(MenuOutOfScopeError) as exc_info:
        _update_role(db_session, 1, submitted)

    assert exc_info.value.details["menu_ids"] == [3]
    assert get_role_menu_and_auth_ids(db_session, 1) == ([1, 2], [11])


def test_role_assignment_rejects_checked_auth_outside_scope(db_session: Session, tenant_setup):
    submitted = _role_tree(db_session, 1)
    menu_2 = next(node for node in iter_tree_nodes(submitted) if node.id == 2)
    menu_2.meta.auth_list.append(MenuAuthNode(id=12, has_permission=True))

    with pytest.raises(AuthOutOfScopeError) as exc_info:
        _update_role(db_session, 1, submitted)

    assert exc_info.value.details["auth_ids"] == [12]
    assert get_role_menu_and_auth_ids(db_session, 1) == ([1, 2], [11])


def test_empty_auth_scope_allows_no_checked_auth(db_session: Session, tenant_setup):
    submitted = _set_checks(resolve_tenant_menu_tree(db_session, 1), {1, 2, 4}, set())
    menu_assignment.update_tenant_scope(db_session, 1, submitted)

    role_tree = _role_tree(db_session, 1)
    role_tree[0].meta.auth_list = [MenuAuthNode(id=11, has_permission=True)]
    with pytest.raises(AuthOutOfScopeError):
        _update_role(db_session, 1, role_tree)

    role_tree[0].meta.auth_list = [MenuAuthNode(id=11, has_permission=False)]
    _update_role(db_session, 1, role_tree)
    assert get_role_menu_and_auth_ids(db_session, 1)[1] == []


def test_role_assignment_access_rules(db_session: Session, tenant_setup):
    with pytest.raises(PermissionDeniedError):
        _update_role(db_session, 1, [], tenant_id=2)

    menu_assignment.update_role_assignment(
        db_session,
        1,
        [MenuTreeNode(id=4, has_permission=True)],
        viewer_tenant_id=2,
        viewer_is_super_admin=True,
    )
    assert get_role_menu_and_auth_ids(db_session, 1) == ([4], [])


def test_sequential_role_saves_last_writer_wins(db_session: Session, tenant_setup):
    first = _set_checks(_role_tree(db_session, 1), {1}, set())
    second = _set_checks(_role_tree(db_session, 1), {4}, {14})

    _update_role(db_session, 1, first)
    _update_role(db_session, 1, second)

    assert get_role_menu_and_auth_ids(db_session, 1) == ([4], [14])
