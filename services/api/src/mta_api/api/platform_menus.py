"""平台菜单管理接口。

仅平台超级管理员可访问：维护菜单目录与按钮权限，并调整租户可用的菜单范围。
"""

from fastapi import APIRouter, Depends, Path, Query, Request, status
from sqlalchemy.orm import Session

from mta_api.db.session import get_db
from mta_api.dependencies import require_super_admin
from mta_api.models.enums import RecordStatus
from mta_api.schemas.common import ErrorResponse, SuccessResponse
from mta_api.schemas.menu import (
    DeletedData,
    MenuAuthData,
    MenuAuthUpdateRequest,
    MenuAuthWriteRequest,
    MenuData,
    MenuListData,
    MenuTreeNode,
    MenuWriteRequest,
    TenantMenuScopeUpdateRequest,
)
from mta_api.services import (
    add_menu,
    add_menu_auth,
    delete_menu,
    delete_menu_auth,
    find_menu_list,
    list_menu_auths,
    resolve_platform_menu_tree,
    resolve_tenant_menu_tree,
    update_menu,
    update_menu_auth,
    update_tenant_scope,
)
from mta_api.utils.response import menu_tree_success, paginated, success

router = APIRouter(prefix="/platform/menus", tags=["platform-menus"])

_ERROR_RESPONSES = {
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


def _menu_data(menu) -> dict:
    return MenuData.model_validate(menu).model_dump(mode="json")


def _auth_data(auth) -> dict:
    return MenuAuthData.model_validate(auth).model_dump(mode="json")


@router.get(
    "",
    summary="查询平台菜单树",
    description="返回完整菜单目录（含禁用菜单），所有菜单与按钮均标记为已拥有。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[list[MenuTreeNode]],
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
)
def get_platform_menu_tree(
    request: Request,
    _ctx=Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    """查询平台菜单树。"""
    return menu_tree_success(request, resolve_platform_menu_tree(db), message="平台菜单查询成功。")


@router.get(
    "/list",
    summary="分页查询菜单",
    description="按标题、名称、路径、父级与状态筛选菜单；page_size 为 -1 时返回全部。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[MenuListData],
    responses=_ERROR_RESPONSES,
)
def list_menus(
    request: Request,
    title: str | None = Query(default=None, max_length=128),
    name: str | None = Query(default=None, max_length=128),
    path: str | None = Query(default=None, max_length=256),
    parent_id: int | None = Query(default=None, ge=0),
    menu_status: RecordStatus | None = Query(default=None, alias="status"),
    page: int = Query(default=1, ge=-1),
    page_size: int = Query(default=20, ge=-1, le=500),
    _ctx=Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    """分页查询菜单列表。"""
    items, total = find_menu_list(
        db,
        title=title,
        name=name,
        path=path,
        parent_id=parent_id,
        status=menu_status,
        page=page,
        page_size=page_size,
    )
    return paginated(
        request,
        [_menu_data(item) for item in items],
        page=page,
        page_size=page_size,
        total=total,
        message="菜单列表查询成功。",
    )


@router.get(
    "/tenant",
    summary="查询租户菜单范围",
    description="返回完整菜单目录，勾选租户当前可使用的菜单与按钮。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[list[MenuTreeNode]],
    response_model_exclude_none=True,
    responses={**_ERROR_RESPONSES, 404: {"model": ErrorResponse}},
)
def get_tenant_menu_tree(
    request: Request,
    tenant_id: int = Query(..., gt=0, description="租户 ID。"),
    _ctx=Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    """查询租户菜单范围。"""
    return menu_tree_success(request, resolve_tenant_menu_tree(db, tenant_id), message="租户菜单范围查询成功。")


@router.put(
    "/tenant",
    summary="更新租户菜单范围",
    description="按提交的完整菜单树覆盖租户范围，并清理该租户角色中超出新范围的授权。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[list[MenuTreeNode]],
    response_model_exclude_none=True,
    responses={**_ERROR_RESPONSES, 400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def put_tenant_menu_tree(
    payload: TenantMenuScopeUpdateRequest,
    request: Request,
    _ctx=Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    """更新租户菜单范围。"""
    tree = update_tenant_scope(db, payload.tenant_id, payload.menu_data)
    return menu_tree_success(request, tree, message="租户菜单范围已更新。")


@router.post(
    "",
    summary="新增菜单",
    description="父级菜单必须存在且处于启用状态，parent_id 为 0 表示根菜单。",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[MenuData],
    responses={**_ERROR_RESPONSES, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def create_menu(
    payload: MenuWriteRequest,
    request: Request,
    _ctx=Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    """新增菜单。"""
    menu = add_menu(db, **payload.model_dump())
    return success(request, _menu_data(menu), message="菜单已创建。")


@router.put(
    "/{menu_id}",
    summary="更新菜单",
    description="全量更新菜单定义；存在启用子菜单时不能禁用。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[MenuData],
    responses={**_ERROR_RESPONSES, 400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def edit_menu(
    payload: MenuWriteRequest,
    request: Request,
    menu_id: int = Path(..., gt=0, description="菜单 ID。"),
    _ctx=Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    """更新菜单。"""
    menu = update_menu(db, menu_id, **payload.model_dump())
    return success(request, _menu_data(menu), message="菜单已更新。")


@router.delete(
    "/{menu_id}",
    summary="删除菜单",
    description="存在子菜单时拒绝删除；同时移除引用该菜单的租户范围与角色授权。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[DeletedData],
    responses={**_ERROR_RESPONSES, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def remove_menu(
    request: Request,
    menu_id: int = Path(..., gt=0, description="菜单 ID。"),
    _ctx=Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    """删除菜单。"""
    delete_menu(db, menu_id)
    return success(request, {"id": menu_id}, message="菜单已删除。")


@router.get(
    "/{menu_id}/auths",
    summary="查询菜单按钮权限",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[list[MenuAuthData]],
    responses=_ERROR_RESPONSES,
)
def get_menu_auths(
    request: Request,
    menu_id: int = Path(..., gt=0, description="菜单 ID。"),
    _ctx=Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    return success(request, [_auth_data(auth) for auth in list_menu_auths(db, menu_id)], message="按钮权限查询成功。")


@router.post(
    "/{menu_id}/auths",
    summary="新增按钮权限",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[MenuAuthData],
    responses={**_ERROR_RESPONSES, 404: {"model": ErrorResponse}},
)
def create_menu_auth(
    payload: MenuAuthWriteRequest,
    request: Request,
    menu_id: int = Path(..., gt=0, description="菜单 ID。"),
    _ctx=Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    auth = add_menu_auth(db, menu_id=menu_id, mark=payload.mark, title=payload.title)
    return success(request, _auth_data(auth), message="按钮权限已创建。")


@router.put(
    "/auths/{auth_id}",
    summary="更新按钮权限",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[MenuAuthData],
    responses={**_ERROR_RESPONSES, 404: {"model": ErrorResponse}},
)
def edit_menu_auth(
    payload: MenuAuthUpdateRequest,
    request: Request,
    auth_id: int = Path(..., gt=0, description="按钮权限 ID。"),
    _ctx=Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    auth = update_menu_auth(db, auth_id, menu_id=payload.menu_id, mark=payload.mark, title=payload.title)
    return success(request, _auth_data(auth), message="按钮权限已更新。")


@router.delete(
    "/auths/{auth_id}",
    summary="删除按钮权限",
    description="不因存在租户范围或角色授权而拒绝，相关关联一并移除。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[DeletedData],
    responses={**_ERROR_RESPONSES, 404: {"model": ErrorResponse}},
)
def remove_menu_auth(
    request: Request,
    auth_id: int = Path(..., gt=0, description="按钮权限 ID。"),
    _ctx=Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    delete_menu_auth(db, auth_id)
    return success(request, {"id": auth_id}, message="按钮权限已删除。")
