"""菜单目录模型。"""

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from mta_api.models.base import Base, IntPrimaryKeyMixin, TimestampMixin
from mta_api.models.enums import RecordStatus


class Menu(Base, IntPrimaryKeyMixin, TimestampMixin):
    """平台级菜单定义，通过 parent_id 组织为树，所有租户共享。"""

    __tablename__ = "menus"

    # 前端路由路径。
    path: Mapped[str] = mapped_column(String(256), nullable=False)
    # 前端路由名称。
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    # 前端组件路径。
    component: Mapped[str] = mapped_column(String(256), nullable=False, default="")
    # 菜单标题。
    title: Mapped[str] = mapped_column(String(128), nullable=False)
    # 菜单图标。
    icon: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    show_badge: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    show_text_badge: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    is_hide: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_hide_tab: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # 外链地址。
    link: Mapped[str] = mapped_column(String(512), nullable=False, default="")
    is_iframe: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    keep_alive: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # 一级菜单是否在主容器内渲染。
    is_first_level: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=RecordStatus.ENABLED)
    # 层级，根节点为 1。
    level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    # 父级菜单 ID，0 表示根。
    parent_id: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)
    # 排序权重，非 0 升序在前，0 排在最后。
    sort: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class MenuAuth(Base, IntPrimaryKeyMixin, TimestampMixin):
    """菜单下的按钮权限点。"""

    __tablename__ = "menu_auths"

    # 所属菜单 ID。
    menu_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    # 机器可识别的按钮标识，如 add / edit / delete。
    mark: Mapped[str] = mapped_column(String(128), nullable=False)
    title: Mapped[str] = mapped_column(String(128), nullable=False, default="")
