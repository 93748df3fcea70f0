"""SessionStore SQLite 实现"""

from datetime import datetime

import aiosqlite

from ..models.user import Session


class SqliteSessionStore:
    """SessionStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def create_session(self, session: Session) -> None:
        """写入会话"""
        await self._conn.execute(
            """
            INSERT INTO sessions (id, user_id, token, expires_at, ip_address,
                                  user_agent, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                session.id,
                session.user_id,
                session.token,
                session.expires_at.isoformat(),
                session.ip_address,
                session.user_agent,
                session.created_at.isoformat(),
                session.created_at.isoformat(),
            ),
        )

    async def get_session_by_token(self, token: str) -> Session | None:
        """根据令牌查询会话"""
        cursor = await self._conn.execute(
            "SELECT * FROM sessions WHERE token = ?",
            (token,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return Session(
            id=row["id"],
            user_id=row["user_id"],
            token=row["token"],
            expires_at=datetime.fromisoformat(row["expires_at"]),
            ip_address=row["ip_address"],
            user_agent=row["user_agent"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    async def delete_session_by_token(self, token: str) -> bool:
        """删除会话"""
        cursor = await self._conn.execute(
            "DELETE FROM sessions WHERE token = ?",
            (token,),
        )
        return cursor.rowcount > 0

    async def delete_sessions_for_users(self, user_ids: list[str]) -> int:
        """删除指定用户的全部会话"""
        if not user_ids:
            return 0
        placeholders = ", ".join("?" for _ in user_ids)
        cursor = await self._conn.execute(
            f"DELETE FROM sessions WHERE user_id IN ({placeholders})",
            tuple(user_ids),
        )
        return cursor.rowcount

    async def delete_expired_sessions(self, now: datetime) -> int:
        """删除已过期会话（时间统一以 UTC ISO 字符串比较）"""
        cursor = await self._conn.execute(
            "DELETE FROM sessions WHERE expires_at <= ?",
            (now.isoformat(),),
        )
        return cursor.rowcount
