"""集成测试共享 fixture -- 经由 lifespan 启动完整应用"""

from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import UTC, datetime
from pathlib import Path

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tasktrack.core.models import Role
from tasktrack.core.store import atomic
from tasktrack.gateway.services.task_service import TaskService


@pytest_asyncio.fixture
async def integration_app(tmp_path: Path, monkeypatch):
    """集成测试用 FastAPI app（真实 lifespan：读取环境变量配置）"""
    monkeypatch.setenv("TASKTRACK_DB_PATH", str(tmp_path / "integration.db"))
    monkeypatch.setenv("LOGFIRE_SEND_TO_LOGFIRE", "false")
    monkeypatch.delenv("TASKTRACK_POLICY_VARIANT", raising=False)

    from tasktrack.gateway.main import create_app

    app = create_app()
    TaskService._task_locks.clear()

    async with app.router.lifespan_context(app):
        yield app


@pytest_asyncio.fixture
async def client(integration_app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=integration_app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def sign_up_as(
    client: AsyncClient, integration_app
) -> Callable[..., Awaitable[tuple[str, dict]]]:
    """通过 HTTP 注册用户，再经存储层调整角色，返回 (user_id, Authorization 头)"""

    async def _sign_up(name: str, role: Role = Role.USER) -> tuple[str, dict]:
        resp = await client.post(
            "/api/auth/sign-up/email",
            json={
                "name": name,
                "email": f"{name.lower()}@example.com",
                "password": "integration-pass",
            },
        )
        assert resp.status_code == 201
        data = resp.json()
        if role != Role.USER:
            store_group = integration_app.state.store_group
            async with atomic(store_group.conn):
                await store_group.user_store.set_role(
                    data["user"]["id"], role, datetime.now(UTC)
                )
        # 每个用户独立使用 Bearer 令牌，清掉 cookie 避免串号
        client.cookies.clear()
        return data["user"]["id"], {"Authorization": f"Bearer {data['token']}"}

    return _sign_up
