"""接口响应包装。

成功响应为 {"data": ..., "meta": {...}}，错误响应为 {"error": {"code", "message", "details"}}。
meta 与 details 都带上请求方法、路径和时间戳，联调时可直接对应到具体请求。
"""

from datetime import datetime, timezone
from time import perf_counter
from typing import Any

from fastapi import Request

from mta_api.schemas.menu import MenuTreeNode, dump_menu_tree

DEFAULT_ERROR_MESSAGE = "服务内部错误，请稍后重试。"


def _request_summary(request: Request) -> dict[str, Any]:
    return {
        "method": request.method.upper(),
        "path": request.url.path,
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }


def _elapsed_ms(request: Request) -> int | None:
    # 开始时间由 process_time_middleware 写入；直接调用路由函数时不存在。
    started_at = getattr(request.state, "request_started_at", None)
    if not isinstance(started_at, float):
        return None
    return int((perf_counter() - started_at) * 1000)


def success(
    request: Request,
    data: Any,
    *,
    message: str = "操作成功。",
    meta: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """构造成功响应。message 由路由按业务语义给出。"""
    final_meta = {"message": message, **_request_summary(request), "process_ms": _elapsed_ms(request)}
    if meta:
        final_meta.update(meta)
    return {"data": data, "meta": final_meta}


def menu_tree_success(request: Request, tree: list[MenuTreeNode], *, message: str) -> dict[str, Any]:
    """菜单树响应：按前端约定的 camelCase 输出，并省略空的 children / authList。"""
    return success(request, dump_menu_tree(tree), message=message, meta={"menu_count": _count_nodes(tree)})


def _count_nodes(tree: list[MenuTreeNode]) -> int:
    return sum(1 + _count_nodes(node.children or []) for node in tree)


def paginated(
    request: Request,
    items: list[Any],
    *,
    page: int,
    page_size: int,
    total: int,
    message: str,
) -> dict[str, Any]:
    """列表响应：items 与分页信息一并放入 data。"""
    return success(
        request,
        {"items": items, "pagination": {"page": page, "page_size": page_size, "total": total}},
        message=message,
    )


def error_payload(
    request: Request,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """构造错误响应，业务细节覆盖同名的请求信息。"""
    return {"error": {"code": code, "message": message, "details": {**_request_summary(request), **(details or {})}}}
