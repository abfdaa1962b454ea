"""菜单树与菜单管理相关结构。

菜单树结构同时用于输出与输入：前端拿到带 hasPermission 标记的完整树，
勾选/取消后原样提交回来。树字段使用驼峰命名以兼容前端路由配置。
"""

from datetime import datetime
import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from mta_api.models.enums import RecordStatus
from mta_api.schemas.common import BaseSchema, PaginationMeta


class _TreeSchema(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MenuAuthNode(_TreeSchema):
    """菜单树中的按钮权限项。"""

    id: int = Field(gt=0, description="按钮权限 ID。")
    title: str = Field(default="", description="按钮标题。")
    auth_mark: str = Field(default="", alias="auth_mark", description="按钮标识。")
    has_permission: bool = Field(default=False, description="当前视角下是否拥有该按钮。")


class MenuTreeMeta(_TreeSchema):
    """菜单展示元数据。"""

    title: str = ""
    icon: str = ""
    keep_alive: bool = False
    show_badge: bool = False
    show_text_badge: str = ""
    is_hide: bool = False
    is_hide_tab: bool = False
    link: str = ""
    is_iframe: bool = False
    is_in_main_container: bool = False
    is_enable: bool = False
    sort: int = 0
    auth_list: list[MenuAuthNode] | None = None


class MenuTreeNode(_TreeSchema):
    """菜单树节点。"""

    id: int = Field(gt=0, description="菜单 ID。")
    updated_at: int | None = Field(default=None, description="最后更新时间（秒级时间戳）。")
    path: str = ""
    name: str = ""
    component: str = ""
    meta: MenuTreeMeta = Field(default_factory=MenuTreeMeta)
    has_permission: bool = Field(default=False, description="当前视角下是否拥有该菜单。")
    children: list["MenuTreeNode"] | None = None


def dump_menu_tree(tree: list[MenuTreeNode]) -> list[dict[str, Any]]:
    """序列化菜单树，空的 children / authList 不输出。"""
    return [node.model_dump(by_alias=True, exclude_none=True) for node in tree]


def _parse_menu_data(value: Any) -> Any:
    """兼容前端以 JSON 字符串提交整棵树。"""
    if isinstance(value, str):
        try:
            return json.loads(value)
        except json.JSONDecodeError as exc:
            raise ValueError("menu_data 不是合法的 JSON") from exc
    return value


class TenantMenuScopeUpdateRequest(BaseModel):
    """租户菜单范围更新请求（全量覆盖）。"""

    tenant_id: int = Field(gt=0, description="目标租户 ID。")
    menu_data: list[MenuTreeNode] = Field(description="完整菜单树，hasPermission 表示是否授权给租户。")

    @field_validator("menu_data", mode="before")
    @classmethod
    def parse_menu_data(cls, value: Any) -> Any:
        return _parse_menu_data(value)


class RoleMenuUpdateRequest(BaseModel):
    """角色菜单授权更新请求（全量覆盖）。"""

    menu_data: list[MenuTreeNode] = Field(description="角色菜单树，需与查询接口返回的树保持一致。")

    @field_validator("menu_data", mode="before")
    @classmethod
    def parse_menu_data(cls, value: Any) -> Any:
        return _parse_menu_data(value)


class MenuWriteRequest(BaseModel):
    """菜单新增/更新请求。"""

    path: str = Field(min_length=1, max_length=256, description="前端路由路径。")
    name: str = Field(min_length=1, max_length=128, description="前端路由名称。")
    component: str = Field(default="", max_length=256)
    title: str = Field(min_length=1, max_length=128, description="菜单标题。")
    icon: str = Field(default="", max_length=128)
    show_badge: bool = False
    show_text_badge: str = Field(default="", max_length=32)
    is_hide: bool = False
    is_hide_tab: bool = False
    link: str = Field(default="", max_length=512)
    is_iframe: bool = False
    keep_alive: bool = False
    is_first_level: bool = False
    status: RecordStatus = RecordStatus.ENABLED
    parent_id: int = Field(default=0, ge=0, description="父级菜单 ID，0 表示根。")
    sort: int = Field(default=0, ge=0, description="排序权重，0 排在最后。")


class MenuAuthWriteRequest(BaseModel):
    """按钮权限新增/更新请求。"""

    mark: str = Field(min_length=1, max_length=128, description="按钮标识。")
    title: str = Field(default="", max_length=128, description="按钮标题。")


class MenuAuthUpdateRequest(MenuAuthWriteRequest):
    """按钮权限更新请求，可改挂到其他菜单。"""

    menu_id: int = Field(gt=0, description="所属菜单 ID。")


class MenuData(BaseSchema):
    """菜单记录。"""

    id: int
    path: str
    name: str
    component: str
    title: str
    icon: str
    show_badge: bool
    show_text_badge: str
    is_hide: bool
    is_hide_tab: bool
    link: str
    is_iframe: bool
    keep_alive: bool
    is_first_level: bool
    status: str
    level: int
    parent_id: int
    sort: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class MenuAuthData(BaseSchema):
    """按钮权限记录。"""

    id: int
    menu_id: int
    mark: str
    title: str


class MenuListData(BaseSchema):
    """菜单分页列表。"""

    items: list[MenuData]
    pagination: PaginationMeta


class DeletedData(BaseSchema):
    """删除结果。"""

    id: int
