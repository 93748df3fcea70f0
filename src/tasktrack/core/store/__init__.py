"""TaskTrack Core Store -- SQLite 持久化实现

提供工厂函数创建共享数据库连接的 Store 实例组。
"""

from pathlib import Path

import aiosqlite

from .protocols import SessionStore, TaskStore, UserStore
from .session_store import SqliteSessionStore
from .sqlite_init import init_db
from .task_store import SqliteTaskStore
from .transaction import atomic, delete_users_with_dependents
from .user_store import SqliteUserStore


class StoreGroup:
    """Store 实例组 -- 共享同一个数据库连接"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self.conn = conn
        self.task_store: TaskStore = SqliteTaskStore(conn)
        self.user_store: UserStore = SqliteUserStore(conn)
        self.session_store: SessionStore = SqliteSessionStore(conn)

    async def close(self) -> None:
        await self.conn.close()


async def create_store_group(db_path: str) -> StoreGroup:
    """创建 Store 实例组

    Args:
        db_path: SQLite 数据库文件路径

    Returns:
        StoreGroup 实例
    """
    # 确保数据库目录存在
    db_dir = Path(db_path).parent
    db_dir.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(db_path)
    conn.row_factory = aiosqlite.Row
    await init_db(conn)

    return StoreGroup(conn=conn)


__all__ = [
    "StoreGroup",
    "TaskStore",
    "UserStore",
    "SessionStore",
    "create_store_group",
    "SqliteTaskStore",
    "SqliteUserStore",
    "SqliteSessionStore",
    "init_db",
    "atomic",
    "delete_users_with_dependents",
]
