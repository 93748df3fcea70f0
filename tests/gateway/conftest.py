"""gateway 测试配置 -- FastAPI app + httpx AsyncClient + 登录头构造"""

import os
from collections.abc import AsyncGenerator, Awaitable, Callable

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tasktrack.core.auth import SessionProvider
from tasktrack.core.models import Role
from tasktrack.core.policy import TaskPolicy
from tasktrack.gateway.services.task_service import TaskService


@pytest_asyncio.fixture
async def app(store_group, tmp_db_path):
    """创建测试用 FastAPI app 实例（手动初始化 state，绕过 lifespan）"""
    os.environ["TASKTRACK_DB_PATH"] = str(tmp_db_path)
    os.environ["LOGFIRE_SEND_TO_LOGFIRE"] = "false"

    from tasktrack.gateway.main import create_app

    application = create_app()
    application.state.store_group = store_group
    application.state.session_provider = SessionProvider(store_group, ttl_seconds=3600)
    application.state.policy = TaskPolicy()
    TaskService._task_locks.clear()

    yield application

    for key in ["TASKTRACK_DB_PATH", "LOGFIRE_SEND_TO_LOGFIRE"]:
        os.environ.pop(key, None)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient 用于测试"""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def login(make_user, make_session) -> Callable[..., Awaitable[tuple]]:
    """创建指定角色的用户并返回 (user, Authorization 头)"""

    async def _login(role: Role = Role.USER):
        user = await make_user(role)
        session = await make_session(user)
        return user, {"Authorization": f"Bearer {session.token}"}

    return _login
