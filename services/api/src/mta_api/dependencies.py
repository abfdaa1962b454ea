"""请求上下文依赖。

职责:
1. 解析并校验访问令牌。
2. 将认证主体映射为本地 User，并校验用户可用。
3. 从 JWT 的 tenant_id 声明确定租户上下文，缺省时使用用户所属租户。
4. 生成后续路由统一使用的 RequestContext。
"""

from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from mta_api.core.config import get_settings
from mta_api.core.security import UNAUTHORIZED, AuthenticatedPrincipal, parse_authorization_header
from mta_api.db.session import get_db
from mta_api.models.enums import RecordStatus
from mta_api.models.tenant import User
from mta_api.services.errors import PermissionDeniedError

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class RequestContext:
    """请求上下文。

    该对象在路由层作为统一输入，避免每个接口重复解析用户与租户关系。
    """

    # 当前请求用户 ID。
    user_id: int
    # 当前请求租户 ID。
    tenant_id: int
    # 是否为平台超级管理员。
    is_super_admin: bool
    # 认证主体原始信息（来自 JWT）。
    principal: AuthenticatedPrincipal


def _parse_positive_int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str) and value.strip().isdigit():
        parsed = int(value.strip())
        return parsed if parsed > 0 else None
    return None


def _extract_tenant_id_from_claims(principal: AuthenticatedPrincipal) -> int | None:
    """从认证声明中提取租户上下文。"""
    for key in ("tenant_id", "tid"):
        tenant_id = _parse_positive_int(principal.claims.get(key))
        if tenant_id is not None:
            return tenant_id
    return None


def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> AuthenticatedPrincipal:
    """提取并解析当前请求认证主体。"""
    authorization = None
    if credentials is not None and credentials.credentials:
        authorization = f"{credentials.scheme} {credentials.credentials}"
    return parse_authorization_header(authorization)


def get_request_context(
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> RequestContext:
    """完成认证并确定租户上下文。"""
    user_id = _parse_positive_int(principal.subject)
    if user_id is None:
        raise UNAUTHORIZED

    user = db.get(User, user_id)
    if user is None or user.status != RecordStatus.ENABLED:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "code": "USER_NOT_ACTIVE",
                "message": "用户不存在或已被禁用。",
                "details": {"reason": "user_not_active"},
            },
        )

    tenant_id = _extract_tenant_id_from_claims(principal)
    if tenant_id is None:
        tenant_id = user.tenant_id
    elif tenant_id != user.tenant_id:
        # 令牌中的租户必须与用户归属一致，拒绝跨租户访问。
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "code": "TENANT_CONTEXT_MISMATCH",
                "message": "访问令牌中的租户与用户所属租户不一致。",
                "details": {"reason": "tenant_context_mismatch"},
            },
        )

    return RequestContext(
        user_id=user.id,
        tenant_id=tenant_id,
        is_super_admin=user.id in get_settings().super_admin_ids,
        principal=principal,
    )


def is_super_admin(ctx: RequestContext) -> bool:
    return ctx.is_super_admin


def get_tenant_id(ctx: RequestContext) -> int:
    return ctx.tenant_id


def require_super_admin(ctx: RequestContext = Depends(get_request_context)) -> RequestContext:
    """平台级接口仅允许超级管理员访问。"""
    if not is_super_admin(ctx):
        raise PermissionDeniedError("仅平台超级管理员可执行该操作。", user_id=ctx.user_id)
    return ctx
