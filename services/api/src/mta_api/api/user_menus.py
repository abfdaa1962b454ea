"""当前用户菜单接口。"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from mta_api.db.session import get_db
from mta_api.dependencies import RequestContext, get_request_context, get_tenant_id
from mta_api.schemas.common import ErrorResponse, SuccessResponse
from mta_api.schemas.menu import MenuTreeNode
from mta_api.services import resolve_user_menu_tree
from mta_api.utils.response import menu_tree_success

router = APIRouter(prefix="/users", tags=["user-menus"])


@router.get(
    "/me/menus",
    summary="查询当前用户菜单",
    description="返回当前用户在令牌租户内可见的菜单树（不含禁用菜单），用于前端动态路由与按钮鉴权。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[list[MenuTreeNode]],
    response_model_exclude_none=True,
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def get_my_menu_tree(
    request: Request,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """查询当前用户菜单。"""
    tree = resolve_user_menu_tree(db, ctx.user_id, get_tenant_id(ctx))
    return menu_tree_success(request, tree, message="用户菜单查询成功。")
