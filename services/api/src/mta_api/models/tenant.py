"""租户与身份模型。

这里只保留菜单权限解析需要的字段，完整的增删改由其他模块负责。
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from mta_api.models.base import Base, IntPrimaryKeyMixin, TimestampMixin
from mta_api.models.enums import RecordStatus


class Tenant(Base, IntPrimaryKeyMixin, TimestampMixin):
    """租户实体，系统最高数据隔离边界。"""

    __tablename__ = "tenants"

    # 全局唯一租户编码，登录时使用。
    code: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=RecordStatus.ENABLED)


class Role(Base, IntPrimaryKeyMixin, TimestampMixin):
    """租户内角色。"""

    __tablename__ = "roles"

    # 所属租户 ID。
    tenant_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    desc: Mapped[str] = mapped_column(String(256), nullable=False, default="")
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=RecordStatus.ENABLED)


class User(Base, IntPrimaryKeyMixin, TimestampMixin):
    """租户内用户，每个用户仅绑定一个角色。"""

    __tablename__ = "users"

    tenant_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    role_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    username: Mapped[str] = mapped_column(String(128), nullable=False)
    # 姓名，不可修改。
    name: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=RecordStatus.ENABLED)
