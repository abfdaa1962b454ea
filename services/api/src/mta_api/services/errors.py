"""菜单权限领域异常。

每个异常携带稳定的机器错误码与 HTTP 状态码，同样的非法输入总是得到同一种异常，
路由层只负责把异常包装为统一错误结构。
"""

from collections.abc import Iterator
from contextlib import contextmanager
import logging
from typing import Any

from fastapi import status
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class MenuDomainError(Exception):
    """领域异常基类。"""

    code = "DOMAIN_ERROR"
    message = "请求处理失败。"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str | None = None, **details: Any) -> None:
        self.message = message or self.message
        self.details = details
        super().__init__(self.message)


# ---- NotFound ----


class NotFoundError(MenuDomainError):
    code = "NOT_FOUND"
    message = "请求资源不存在。"
    status_code = status.HTTP_404_NOT_FOUND


class MenuNotFoundError(NotFoundError):
    code = "MENU_NOT_FOUND"
    message = "菜单不存在。"


class ParentMenuNotFoundError(NotFoundError):
    code = "PARENT_MENU_NOT_FOUND"
    message = "父级菜单不存在。"


class MenuAuthNotFoundError(NotFoundError):
    code = "MENU_AUTH_NOT_FOUND"
    message = "按钮权限不存在。"


class TenantNotFoundError(NotFoundError):
    code = "TENANT_NOT_FOUND"
    message = "租户不存在。"


class RoleNotFoundError(NotFoundError):
    code = "ROLE_NOT_FOUND"
    message = "角色不存在。"


class UserNotFoundError(NotFoundError):
    code = "USER_NOT_FOUND"
    message = "用户不存在。"


# ---- PermissionDenied / OutOfScope ----


class PermissionDeniedError(MenuDomainError):
    code = "PERMISSION_DENIED"
    message = "无权操作该资源。"
    status_code = status.HTTP_403_FORBIDDEN


class OutOfScopeError(MenuDomainError):
    code = "OUT_OF_SCOPE"
    message = "超出可分配范围。"
    status_code = status.HTTP_403_FORBIDDEN


class MenuOutOfScopeError(OutOfScopeError):
    code = "MENU_OUT_OF_SCOPE"
    message = "菜单超出可分配范围。"


class AuthOutOfScopeError(OutOfScopeError):
    code = "AUTH_OUT_OF_SCOPE"
    message = "按钮权限超出可分配范围。"


# ---- InvalidArgument ----


class InvalidArgumentError(MenuDomainError):
    code = "INVALID_ARGUMENT"
    message = "请求参数不合法。"
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidMenuIdsError(InvalidArgumentError):
    code = "INVALID_MENU_IDS"
    message = "提交的菜单 ID 不存在。"


class InvalidAuthIdsError(InvalidArgumentError):
    code = "INVALID_AUTH_IDS"
    message = "提交的按钮权限 ID 不存在。"


# ---- Conflict ----


class MenuConflictError(MenuDomainError):
    code = "CONFLICT"
    message = "请求与当前菜单状态冲突。"
    status_code = status.HTTP_409_CONFLICT


class ParentMenuDisabledError(MenuConflictError):
    code = "PARENT_MENU_DISABLED"
    message = "父级菜单已禁用。"


class MenuHasChildrenError(MenuConflictError):
    code = "MENU_HAS_CHILDREN"
    message = "请先删除子菜单。"


class DisableMenuWithEnabledChildError(MenuConflictError):
    code = "DISABLE_MENU_WITH_ENABLED_CHILD"
    message = "请先禁用子菜单。"


# ---- Infrastructure ----


class StoreUnavailableError(MenuDomainError):
    code = "STORE_UNAVAILABLE"
    message = "数据存储暂不可用。"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


@contextmanager
def translate_store_errors(action: str, **context: Any) -> Iterator[None]:
    """把存储层异常记录日志后转换为 StoreUnavailableError，调用方无需感知数据库驱动异常。"""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("failed to %s %s", action, context, exc_info=exc)
        raise StoreUnavailableError(action=action) from exc
