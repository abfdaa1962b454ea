"""租户范围与角色授权关联模型。

四张关联表均为全量覆盖写入（先删后插），不做增量更新。
"""

from sqlalchemy import Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from mta_api.models.base import Base, IntPrimaryKeyMixin


class TenantMenuScope(Base, IntPrimaryKeyMixin):
    """租户可使用的菜单范围，由平台管理员维护。"""

    __tablename__ = "tenant_menu_scopes"
    __table_args__ = (UniqueConstraint("tenant_id", "menu_id", name="uk_tenant_menu_scope"),)

    tenant_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    menu_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)


class TenantAuthScope(Base, IntPrimaryKeyMixin):
    """租户可使用的按钮权限范围，由平台管理员维护。"""

    __tablename__ = "tenant_auth_scopes"
    __table_args__ = (UniqueConstraint("tenant_id", "auth_id", name="uk_tenant_auth_scope"),)

    tenant_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    auth_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)


class RoleMenu(Base, IntPrimaryKeyMixin):
    """角色当前拥有的菜单。"""

    __tablename__ = "role_menus"
    __table_args__ = (UniqueConstraint("role_id", "menu_id", name="uk_role_menu"),)

    role_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    menu_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)


class RoleAuth(Base, IntPrimaryKeyMixin):
    """角色当前拥有的按钮权限。"""

    __tablename__ = "role_auths"
    __table_args__ = (UniqueConstraint("role_id", "auth_id", name="uk_role_auth"),)

    role_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    auth_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
