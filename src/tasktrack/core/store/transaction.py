"""事务封装

atomic(): 在同一连接上提交一组写操作，失败自动回滚并重新抛出。
delete_users_with_dependents(): 在同一事务内删除用户及其会话、任务，满足外键约束。
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import aiosqlite

from .protocols import SessionStore, TaskStore, UserStore


@asynccontextmanager
async def atomic(conn: aiosqlite.Connection) -> AsyncIterator[aiosqlite.Connection]:
    """原子提交上下文

    Raises:
        Exception: 块内任何异常都会先回滚再向上抛出
    """
    try:
        yield conn
        await conn.commit()
    except Exception:
        await conn.rollback()
        raise


async def delete_users_with_dependents(
    conn: aiosqlite.Connection,
    user_store: UserStore,
    session_store: SessionStore,
    task_store: TaskStore,
    user_ids: list[str],
) -> int:
    """在同一事务内删除用户及其会话、任务

    Args:
        conn: 数据库连接（需在同一连接上操作以保证事务性）
        user_store: UserStore 实例
        session_store: SessionStore 实例
        task_store: TaskStore 实例
        user_ids: 要删除的用户 ID

    Returns:
        删除的用户数量
    """
    if not user_ids:
        return 0

    async with atomic(conn):
        # 先删除依赖行（外键约束）
        await session_store.delete_sessions_for_users(user_ids)
        await task_store.delete_tasks_for_owners(user_ids)
        return await user_store.delete_users(user_ids)
