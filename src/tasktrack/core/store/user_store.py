"""UserStore SQLite 实现

email 统一小写存储；密码哈希只通过 get_password_hash 读取，不进入 User 模型。
"""

from datetime import datetime

import aiosqlite
from ulid import ULID

from ..models.enums import Role
from ..models.user import User


def normalize_email(email: str) -> str:
    return email.strip().lower()


class SqliteUserStore:
    """UserStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def create_user(
        self,
        name: str,
        email: str,
        password_hash: str,
        role: Role,
        now: datetime,
    ) -> User:
        """创建用户

        Raises:
            aiosqlite.IntegrityError: 邮箱已存在
        """
        user = User(
            id=str(ULID()),
            name=name,
            email=normalize_email(email),
            role=role,
            created_at=now,
            updated_at=now,
        )
        await self._conn.execute(
            """
            INSERT INTO users (id, name, email, email_verified, image, role,
                               password_hash, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                user.id,
                user.name,
                user.email,
                int(user.email_verified),
                user.image,
                user.role.value,
                password_hash,
                now.isoformat(),
                now.isoformat(),
            ),
        )
        return user

    async def get_user(self, user_id: str) -> User | None:
        """根据 ID 查询用户"""
        cursor = await self._conn.execute(
            "SELECT * FROM users WHERE id = ?",
            (user_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_user(row)

    async def get_user_by_email(self, email: str) -> User | None:
        """根据邮箱查询用户"""
        cursor = await self._conn.execute(
            "SELECT * FROM users WHERE email = ?",
            (normalize_email(email),),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_user(row)

    async def get_password_hash(self, user_id: str) -> str | None:
        """读取密码哈希"""
        cursor = await self._conn.execute(
            "SELECT password_hash FROM users WHERE id = ?",
            (user_id,),
        )
        row = await cursor.fetchone()
        return row["password_hash"] if row is not None else None

    async def list_users_by_emails(self, emails: list[str]) -> list[User]:
        """批量按邮箱查询用户"""
        if not emails:
            return []
        normalized = [normalize_email(e) for e in emails]
        placeholders = ", ".join("?" for _ in normalized)
        cursor = await self._conn.execute(
            f"SELECT * FROM users WHERE email IN ({placeholders}) ORDER BY email",
            tuple(normalized),
        )
        rows = await cursor.fetchall()
        return [self._row_to_user(row) for row in rows]

    async def set_role(self, user_id: str, role: Role, now: datetime) -> None:
        """修改用户角色"""
        await self._conn.execute(
            "UPDATE users SET role = ?, updated_at = ? WHERE id = ?",
            (Role(role).value, now.isoformat(), user_id),
        )

    async def delete_users(self, user_ids: list[str]) -> int:
        """删除用户记录（调用方需先清理 tasks/sessions）"""
        if not user_ids:
            return 0
        placeholders = ", ".join("?" for _ in user_ids)
        cursor = await self._conn.execute(
            f"DELETE FROM users WHERE id IN ({placeholders})",
            tuple(user_ids),
        )
        return cursor.rowcount

    @staticmethod
    def _row_to_user(row: aiosqlite.Row) -> User:
        """将数据库行转换为 User 模型"""
        return User(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            email_verified=bool(row["email_verified"]),
            image=row["image"],
            role=row["role"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
