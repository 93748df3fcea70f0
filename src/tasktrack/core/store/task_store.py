"""TaskStore SQLite 实现

仅提供数据库操作，不做权限判断；提交由调用方（transaction.atomic）负责。
"""

from datetime import datetime

import aiosqlite

from ..models.enums import TaskStatus
from ..models.task import Task


class SqliteTaskStore:
    """TaskStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def create_task(
        self,
        title: str,
        description: str,
        owner_id: str,
        status: TaskStatus,
        now: datetime,
    ) -> Task:
        """创建任务记录，返回带生成 ID 的任务"""
        cursor = await self._conn.execute(
            """
            INSERT INTO tasks (title, description, status, owner_id, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                title,
                description,
                TaskStatus(status).value,
                owner_id,
                now.isoformat(),
                now.isoformat(),
            ),
        )
        return Task(
            id=cursor.lastrowid,
            title=title,
            description=description,
            status=status,
            owner_id=owner_id,
            created_at=now,
            updated_at=now,
        )

    async def get_task(self, task_id: int) -> Task | None:
        """根据 ID 查询任务"""
        cursor = await self._conn.execute(
            "SELECT * FROM tasks WHERE id = ?",
            (task_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_task(row)

    async def list_tasks(self, owner_id: str | None = None) -> list[Task]:
        """查询任务列表，按 ID 升序；owner_id 为 None 时返回全部"""
        if owner_id is not None:
            cursor = await self._conn.execute(
                "SELECT * FROM tasks WHERE owner_id = ? ORDER BY id",
                (owner_id,),
            )
        else:
            cursor = await self._conn.execute("SELECT * FROM tasks ORDER BY id")
        rows = await cursor.fetchall()
        return [self._row_to_task(row) for row in rows]

    async def update_task(
        self,
        task_id: int,
        title: str,
        description: str,
        status: TaskStatus,
        now: datetime,
    ) -> Task | None:
        """覆盖写入 title/description/status，任务不存在返回 None"""
        cursor = await self._conn.execute(
            """
            UPDATE tasks
            SET title = ?, description = ?, status = ?, updated_at = ?
            WHERE id = ?
            """,
            (title, description, TaskStatus(status).value, now.isoformat(), task_id),
        )
        if cursor.rowcount == 0:
            return None
        return await self.get_task(task_id)

    async def delete_task(self, task_id: int) -> bool:
        """物理删除任务"""
        cursor = await self._conn.execute(
            "DELETE FROM tasks WHERE id = ?",
            (task_id,),
        )
        return cursor.rowcount > 0

    async def delete_tasks_for_owners(self, owner_ids: list[str]) -> int:
        """删除指定用户拥有的全部任务（清理账户时使用）"""
        if not owner_ids:
            return 0
        placeholders = ", ".join("?" for _ in owner_ids)
        cursor = await self._conn.execute(
            f"DELETE FROM tasks WHERE owner_id IN ({placeholders})",
            tuple(owner_ids),
        )
        return cursor.rowcount

    @staticmethod
    def _row_to_task(row: aiosqlite.Row) -> Task:
        """将数据库行转换为 Task 模型"""
        return Task(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            status=row["status"],
            owner_id=row["owner_id"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
