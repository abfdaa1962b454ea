"""应用中间件注册。"""

from time import perf_counter

from fastapi import FastAPI, Request


async def process_time_middleware(request: Request, call_next):
    """记录请求开始时间，并通过响应头返回处理耗时。"""
    request.state.request_started_at = perf_counter()
    response = await call_next(request)
    elapsed = perf_counter() - request.state.request_started_at
    response.headers["X-Process-Time-Ms"] = str(round(elapsed * 1000, 2))
    return response


def register_middlewares(app: FastAPI) -> None:
    """集中注册中间件。"""
    app.middleware("http")(process_time_middleware)
