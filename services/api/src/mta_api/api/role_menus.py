"""角色菜单授权接口。

租户管理员只能查看和调整本租户角色；平台超级管理员可操作任意租户的角色。
"""

from fastapi import APIRouter, Depends, Path, Request, status
from sqlalchemy.orm import Session

from mta_api.db.session import get_db
from mta_api.dependencies import RequestContext, get_request_context, get_tenant_id, is_super_admin
from mta_api.schemas.common import ErrorResponse, SuccessResponse
from mta_api.schemas.menu import MenuTreeNode, RoleMenuUpdateRequest
from mta_api.services import resolve_role_menu_tree, update_role_assignment
from mta_api.utils.response import menu_tree_success

router = APIRouter(prefix="/system/roles", tags=["role-menus"])


@router.get(
    "/{role_id}/menus",
    summary="查询角色菜单授权",
    description="返回角色所属租户范围内的菜单树（含禁用菜单），勾选角色当前拥有的菜单与按钮。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[list[MenuTreeNode]],
    response_model_exclude_none=True,
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def get_role_menu_tree(
    request: Request,
    role_id: int = Path(..., gt=0, description="角色 ID。"),
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """查询角色菜单授权。"""
    tree = resolve_role_menu_tree(
        db,
        role_id,
        viewer_tenant_id=get_tenant_id(ctx),
        viewer_is_super_admin=is_super_admin(ctx),
    )
    return menu_tree_success(request, tree, message="角色菜单授权查询成功。")


@router.put(
    "/{role_id}/menus",
    summary="更新角色菜单授权",
    description="提交查询得到的完整菜单树；任何节点超出租户范围或勾选了范围外按钮时整体拒绝。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[list[MenuTreeNode]],
    response_model_exclude_none=True,
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
def put_role_menu_tree(
    payload: RoleMenuUpdateRequest,
    request: Request,
    role_id: int = Path(..., gt=0, description="角色 ID。"),
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """保存角色菜单授权，返回保存后的角色菜单树。"""
    update_role_assignment(
        db,
        role_id,
        payload.menu_data,
        viewer_tenant_id=get_tenant_id(ctx),
        viewer_is_super_admin=is_super_admin(ctx),
    )
    tree = resolve_role_menu_tree(
        db,
        role_id,
        viewer_tenant_id=get_tenant_id(ctx),
        viewer_is_super_admin=is_super_admin(ctx),
    )
    return menu_tree_success(request, tree, message="角色菜单授权已保存。")
