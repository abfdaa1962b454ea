"""租户、角色、用户查询。

这些实体的增删改不在本服务内，这里只提供菜单权限解析所需的查找。
"""

from sqlalchemy.orm import Session

from mta_api.models.tenant import Role, Tenant, User
from mta_api.services.errors import RoleNotFoundError, TenantNotFoundError, UserNotFoundError, translate_store_errors


def get_tenant(db: Session, tenant_id: int) -> Tenant:
    with translate_store_errors("get tenant", tenant_id=tenant_id):
        tenant = db.get(Tenant, tenant_id)
    if tenant is None:
        raise TenantNotFoundError(tenant_id=tenant_id)
    return tenant


def get_role(db: Session, role_id: int) -> Role:
    with translate_store_errors("get role", role_id=role_id):
        role = db.get(Role, role_id)
    if role is None:
        raise RoleNotFoundError(role_id=role_id)
    return role


def get_user(db: Session, user_id: int) -> User:
    with translate_store_errors("get user", user_id=user_id):
        user = db.get(User, user_id)
    if user is None:
        raise UserNotFoundError(user_id=user_id)
    return user
