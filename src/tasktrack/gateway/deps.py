"""依赖注入模块 -- 通过 FastAPI Depends 注入 Store、会话与策略实例

实例通过 app.state 管理，在 lifespan 中初始化/清理。
"""

import structlog
from fastapi import Depends, Request
from tasktrack.core.auth import SessionProvider
from tasktrack.core.config import SESSION_COOKIE_NAME
from tasktrack.core.errors import UnauthenticatedError
from tasktrack.core.models import Actor
from tasktrack.core.policy import TaskPolicy
from tasktrack.core.store import StoreGroup

from .services.task_service import TaskService


def get_store_group(request: Request) -> StoreGroup:
    """从 app.state 获取 StoreGroup 实例"""
    return request.app.state.store_group


def get_session_provider(request: Request) -> SessionProvider:
    """从 app.state 获取 SessionProvider 实例"""
    return request.app.state.session_provider


def get_policy(request: Request) -> TaskPolicy:
    """从 app.state 获取 TaskPolicy 实例"""
    return request.app.state.policy


def get_task_service(
    store_group: StoreGroup = Depends(get_store_group),
    policy: TaskPolicy = Depends(get_policy),
) -> TaskService:
    return TaskService(store_group, policy)


def extract_session_token(request: Request) -> str | None:
    """从 Authorization: Bearer 头或会话 cookie 中提取令牌"""
    authorization = request.headers.get("Authorization", "")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return request.cookies.get(SESSION_COOKIE_NAME)


async def get_current_actor(
    request: Request,
    provider: SessionProvider = Depends(get_session_provider),
) -> Actor:
    """解析当前请求的 Actor；无有效会话抛出 UnauthenticatedError（先于策略评估）"""
    actor = await provider.resolve(extract_session_token(request))
    if actor is None:
        raise UnauthenticatedError()

    structlog.contextvars.bind_contextvars(
        actor_id=actor.user_id,
        role=actor.role.value,
    )
    return actor
