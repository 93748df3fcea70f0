"""FastAPI 应用主文件

app 创建 + lifespan 管理：DB 初始化/关闭 + 会话与授权策略初始化 + 路由注册。
TaskTrackError 与请求体校验失败统一渲染为 {"error": {...}} 响应。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse
from tasktrack.core.auth import SessionProvider
from tasktrack.core.config import load_settings
from tasktrack.core.errors import TaskTrackError
from tasktrack.core.policy import TaskPolicy
from tasktrack.core.store import create_store_group

from .middleware.logging_config import setup_logfire, setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .middleware.task_context_mw import TaskContextMiddleware
from .routes import auth, health, tasks

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理：启动时初始化 DB、会话与策略，关闭时清理连接"""
    settings = load_settings()
    store_group = await create_store_group(settings.db_path)
    app.state.store_group = store_group
    app.state.session_provider = SessionProvider(
        store_group, ttl_seconds=settings.session_ttl_s
    )
    app.state.policy = TaskPolicy(settings.policy_variant)

    log.info(
        "gateway_started",
        db_path=settings.db_path,
        policy_variant=settings.policy_variant.value,
    )

    yield

    await store_group.close()
    log.info("gateway_stopped")


async def handle_tasktrack_error(request: Request, exc: TaskTrackError) -> JSONResponse:
    """领域异常 -> {"error": {"code", "message"}}"""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def handle_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """请求体校验失败 -> 422 VALIDATION_ERROR"""
    details = [
        {
            "loc": [str(part) for part in err.get("loc", ())],
            "msg": err.get("msg", ""),
            "type": err.get("type", ""),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content={
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Request validation failed",
                "details": details,
            }
        },
    )


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title="TaskTrack Gateway",
        version="0.1.0",
        description="多角色任务跟踪 API（ABAC 授权）",
        lifespan=lifespan,
    )

    # 注册中间件（后注册的在外层：Logging 包裹 TaskContext）
    app.add_middleware(TaskContextMiddleware)
    app.add_middleware(LoggingMiddleware)

    app.add_exception_handler(TaskTrackError, handle_tasktrack_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)

    setup_logging()
    setup_logfire(app)

    app.include_router(auth.router, tags=["auth"])
    app.include_router(tasks.router, tags=["tasks"])
    app.include_router(health.router, tags=["health"])

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()
