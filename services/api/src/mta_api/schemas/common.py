"""响应包裹结构，供接口文档展示。"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field


class BaseSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class PaginationMeta(BaseSchema):
    """菜单列表分页信息，page_size 为 -1 表示返回全部。"""

    page: int = Field(description="当前页码，从 1 开始。")
    page_size: int = Field(description="每页条数，-1 表示不分页。")
    total: int = Field(description="符合筛选条件的菜单总数。")


class ErrorPayload(BaseSchema):
    code: str = Field(description="错误码，如 MENU_NOT_FOUND、MENU_OUT_OF_SCOPE。")
    message: str = Field(description="错误说明。")
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="请求方法、路径、时间戳，以及涉及的菜单、按钮、角色或租户 ID。",
    )


class ErrorResponse(BaseSchema):
    error: ErrorPayload


T = TypeVar("T")


class SuccessResponse(BaseSchema, Generic[T]):
    data: T
    meta: dict[str, Any] = Field(
        default_factory=dict,
        description="message、method、path、timestamp、process_ms；菜单树响应另含 menu_count。",
    )


class HealthStatusData(BaseSchema):
    status: str = Field(description="ok 或 ready。")
    menu_count: int | None = Field(default=None, description="菜单目录条数，仅就绪检查返回。")
