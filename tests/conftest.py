"""全局 pytest 配置 -- 临时 SQLite 数据库与用户/会话构造 fixture"""

import itertools
import secrets
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest_asyncio
from tasktrack.core.models import Role, Session, TaskStatus, User
from tasktrack.core.models.task import Task
from tasktrack.core.store import StoreGroup, atomic, create_store_group
from ulid import ULID

_email_seq = itertools.count(1)


@pytest_asyncio.fixture
async def tmp_db_path(tmp_path: Path) -> Path:
    """提供临时 SQLite 数据库路径"""
    return tmp_path / "sqlite" / "test.db"


@pytest_asyncio.fixture
async def store_group(tmp_db_path: Path) -> AsyncGenerator[StoreGroup, None]:
    """提供已初始化的 StoreGroup"""
    group = await create_store_group(str(tmp_db_path))
    yield group
    await group.close()


@pytest_asyncio.fixture
async def make_user(store_group: StoreGroup) -> Callable[..., Awaitable[User]]:
    """构造用户（不做 bcrypt 哈希，仅供不需要登录的测试）"""

    async def _make(role: Role = Role.USER, name: str = "Test User") -> User:
        email = f"user{next(_email_seq)}@example.com"
        async with atomic(store_group.conn):
            return await store_group.user_store.create_user(
                name=name,
                email=email,
                password_hash="unusable",
                role=role,
                now=datetime.now(UTC),
            )

    return _make


@pytest_asyncio.fixture
async def make_task(store_group: StoreGroup) -> Callable[..., Awaitable[Task]]:
    """直接在存储层构造任务（绕过策略）"""

    async def _make(
        owner: User,
        title: str = "Task",
        description: str = "",
        status: TaskStatus = TaskStatus.DRAFT,
    ) -> Task:
        async with atomic(store_group.conn):
            return await store_group.task_store.create_task(
                title=title,
                description=description,
                owner_id=owner.id,
                status=status,
                now=datetime.now(UTC),
            )

    return _make


@pytest_asyncio.fixture
async def make_session(store_group: StoreGroup) -> Callable[..., Awaitable[Session]]:
    """直接写入会话并返回，expires_in 为负数时构造过期会话"""

    async def _make(user: User, expires_in: timedelta = timedelta(hours=1)) -> Session:
        now = datetime.now(UTC)
        session = Session(
            id=str(ULID()),
            user_id=user.id,
            token=secrets.token_urlsafe(32),
            expires_at=now + expires_in,
            created_at=now,
        )
        async with atomic(store_group.conn):
            await store_group.session_store.create_session(session)
        return session

    return _make
