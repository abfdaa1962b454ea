from mta_api.models.enums import RecordStatus
from mta_api.models.menu import Menu, MenuAuth
from mta_api.schemas.menu import MenuAuthNode, MenuTreeMeta, MenuTreeNode
from mta_api.services.menu_scope_filter import (
    EmptyScope,
    checked_auth_ids_out_of_scope,
    checked_menu_ids_out_of_scope,
    filter_auths_by_ids,
    filter_ids,
    filter_menus_by_ids,
    menu_ids_out_of_scope,
    validate_auth_scope,
    validate_menu_scope,
)


def _menus() -> list[Menu]:
    return [
        Menu(id=1, parent_id=0, status=RecordStatus.ENABLED),
        Menu(id=2, parent_id=1, status=RecordStatus.ENABLED),
        Menu(id=3, parent_id=0, status=RecordStatus.ENABLED),
    ]


def _auths() -> list[MenuAuth]:
    return [MenuAuth(id=10, menu_id=1), MenuAuth(id=20, menu_id=2), MenuAuth(id=30, menu_id=3)]


def test_filter_menus_keeps_allowed_menus_and_their_auths():
    menus, auths = filter_menus_by_ids(_menus(), _auths(), [1, 3], empty=EmptyScope.NOTHING)

    assert [menu.id for menu in menus] == [1, 3]
    assert [auth.id for auth in auths] == [10, 30]


def test_filter_menus_does_not_add_missing_ancestors():
    menus, auths = filter_menus_by_ids(_menus(), _auths(), [2], empty=EmptyScope.NOTHING)

    assert [menu.id for menu in menus] == [2]
    assert [auth.id for auth in auths] == [20]


def test_filter_menus_can_add_ancestors_on_request():
    menus, auths = filter_menus_by_ids(_menus(), _auths(), [2], empty=EmptyScope.NOTHING, include_ancestors=True)

    assert [menu.id for menu in menus] == [1, 2]
    assert [auth.id for auth in auths] == [10, 20]


def test_empty_allowed_set_policy_is_explicit():
    nothing = filter_menus_by_ids(_menus(), _auths(), [], empty=EmptyScope.NOTHING)
    everything = filter_menus_by_ids(_menus(), _auths(), [], empty=EmptyScope.EVERYTHING)

    assert nothing == ([], [])
    assert [menu.id for menu in everything[0]] == [1, 2, 3]
    assert [auth.id for auth in everything[1]] == [10, 20, 30]


def test_filter_auths_by_ids():
    assert [auth.id for auth in filter_auths_by_ids(_auths(), [20, 99], empty=EmptyScope.NOTHING)] == [20]
    assert filter_auths_by_ids(_auths(), [], empty=EmptyScope.NOTHING) == []
    assert len(filter_auths_by_ids(_auths(), [], empty=EmptyScope.EVERYTHING)) == 3


def test_filter_ids_drops_stale_references():
    assert filter_ids([1, 2, 5], [1, 2, 3]) == [1, 2]
    assert filter_ids([1, 2], []) == []


def _submitted_tree() -> list[MenuTreeNode]:
    return [
        MenuTreeNode(
            id=1,
            has_permission=False,
            meta=MenuTreeMeta(auth_list=[MenuAuthNode(id=10, has_permission=False)]),
            children=[
                MenuTreeNode(
                    id=2,
                    has_permission=True,
                    meta=MenuTreeMeta(auth_list=[MenuAuthNode(id=20, has_permission=True)]),
                )
            ],
        )
    ]


def test_menu_scope_checks_every_submitted_node_not_only_checked_ones():
    tree = _submitted_tree()

    assert menu_ids_out_of_scope(tree, [1, 2]) == []
    assert menu_ids_out_of_scope(tree, [2]) == [1]
    assert validate_menu_scope(tree, [1, 2, 3]) is True
    assert validate_menu_scope(tree, []) is False
    assert validate_menu_scope([], []) is True


def test_checked_menu_scope_ignores_unchecked_parents():
    tree = _submitted_tree()

    assert checked_menu_ids_out_of_scope(tree, [2]) == []
    tree[0].has_permission = True
    assert checked_menu_ids_out_of_scope(tree, [2]) == [1]


def test_auth_scope_checks_only_checked_auths():
    tree = _submitted_tree()

    assert checked_auth_ids_out_of_scope(tree, [20]) == []
    assert checked_auth_ids_out_of_scope(tree, [10]) == [20]
    assert validate_auth_scope(tree, [20]) is True


def test_empty_auth_scope_rejects_any_checked_auth():
    tree = _submitted_tree()

    assert validate_auth_scope(tree, []) is False
    tree[0].children[0].meta.auth_list[0].has_permission = False
    assert validate_auth_scope(tree, []) is True
