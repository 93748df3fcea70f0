"""Store Protocol 接口定义

定义 TaskStore、UserStore、SessionStore 的抽象接口，
使用 Python Protocol 实现结构化子类型（duck typing）。
"""

from datetime import datetime
from typing import Protocol, runtime_checkable

from ..models.enums import Role, TaskStatus
from ..models.task import Task
from ..models.user import Session, User


@runtime_checkable
class TaskStore(Protocol):
    """Task 存储接口"""

    async def create_task(
        self,
        title: str,
        description: str,
        owner_id: str,
        status: TaskStatus,
        now: datetime,
    ) -> Task:
        """创建任务记录，返回带生成 ID 的任务"""
        ...

    async def get_task(self, task_id: int) -> Task | None:
        """根据 ID 查询任务"""
        ...

    async def list_tasks(self, owner_id: str | None = None) -> list[Task]:
        """查询任务列表，owner_id 为 None 时返回全部"""
        ...

    async def update_task(
        self,
        task_id: int,
        title: str,
        description: str,
        status: TaskStatus,
        now: datetime,
    ) -> Task | None:
        """覆盖写入可变字段，任务不存在返回 None"""
        ...

    async def delete_task(self, task_id: int) -> bool:
        """物理删除任务，返回是否删除了记录"""
        ...

    async def delete_tasks_for_owners(self, owner_ids: list[str]) -> int:
        """删除指定用户拥有的全部任务"""
        ...


@runtime_checkable
class UserStore(Protocol):
    """User 存储接口"""

    async def create_user(
        self,
        name: str,
        email: str,
        password_hash: str,
        role: Role,
        now: datetime,
    ) -> User:
        """创建用户"""
        ...

    async def get_user(self, user_id: str) -> User | None:
        """根据 ID 查询用户"""
        ...

    async def get_user_by_email(self, email: str) -> User | None:
        """根据邮箱查询用户"""
        ...

    async def get_password_hash(self, user_id: str) -> str | None:
        """读取密码哈希"""
        ...

    async def list_users_by_emails(self, emails: list[str]) -> list[User]:
        """批量按邮箱查询用户"""
        ...

    async def set_role(self, user_id: str, role: Role, now: datetime) -> None:
        """修改用户角色"""
        ...

    async def delete_users(self, user_ids: list[str]) -> int:
        """删除用户记录"""
        ...


@runtime_checkable
class SessionStore(Protocol):
    """Session 存储接口"""

    async def create_session(self, session: Session) -> None:
        """写入会话"""
        ...

    async def get_session_by_token(self, token: str) -> Session | None:
        """根据令牌查询会话"""
        ...

    async def delete_session_by_token(self, token: str) -> bool:
        """删除会话，返回是否删除了记录"""
        ...

    async def delete_sessions_for_users(self, user_ids: list[str]) -> int:
        """删除指定用户的全部会话"""
        ...

    async def delete_expired_sessions(self, now: datetime) -> int:
        """删除已过期会话，返回删除数量"""
        ...
