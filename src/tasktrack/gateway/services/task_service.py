"""TaskService -- 任务 CRUD 业务逻辑

每个写操作的顺序固定：
1. 读取目标任务（不存在 -> TaskNotFoundError，先于权限判断）
2. 授权策略判定（拒绝 -> ForbiddenError）
3. 执行存储变更

同一任务的 读取-判定-变更 在 task 级别锁内串行执行（仅限单进程）。
"""

import asyncio
from datetime import UTC, datetime

import structlog
from tasktrack.core.errors import ForbiddenError, TaskNotFoundError
from tasktrack.core.models import Action, Actor, Task, TaskCreate, TaskStatus, TaskUpdate
from tasktrack.core.policy import TaskPolicy
from tasktrack.core.store import StoreGroup, atomic

log = structlog.get_logger()


class TaskService:
    """任务业务服务"""

    _task_locks: dict[int, asyncio.Lock] = {}
    _task_locks_guard = asyncio.Lock()

    def __init__(self, store_group: StoreGroup, policy: TaskPolicy | None = None) -> None:
        self._stores = store_group
        self._policy = policy or TaskPolicy()

    @property
    def policy(self) -> TaskPolicy:
        return self._policy

    async def list_tasks(self, actor: Actor) -> list[Task]:
        """查询任务列表：监督角色返回全部，普通用户仅返回自己的任务"""
        owner_id = self._policy.list_owner_filter(actor)
        return await self._stores.task_store.list_tasks(owner_id=owner_id)

    async def get_task(self, actor: Actor, task_id: int) -> Task:
        """查询单个任务

        Raises:
            TaskNotFoundError: 任务不存在
            ForbiddenError: 无查看权限
        """
        task = await self._fetch_task(task_id)
        self._enforce(actor, Action.READ, task)
        return task

    async def create_task(self, actor: Actor, payload: TaskCreate) -> Task:
        """创建任务：所有者为当前操作者，状态固定为 draft

        Raises:
            ForbiddenError: 当前角色不允许创建
        """
        self._enforce(actor, Action.CREATE)

        async with atomic(self._stores.conn):
            task = await self._stores.task_store.create_task(
                title=payload.title,
                description=payload.description or "",
                owner_id=actor.user_id,
                status=TaskStatus.DRAFT,
                now=datetime.now(UTC),
            )

        log.info("task_created", task_id=task.id, owner_id=task.owner_id)
        return task

    async def update_task(self, actor: Actor, task_id: int, patch: TaskUpdate) -> Task:
        """更新任务（合并语义，未提供的字段保持原值）

        Raises:
            TaskNotFoundError: 任务不存在
            ForbiddenError: 非所有者或角色不是 user
        """
        # 不存在的任务直接 404，不为其创建锁
        await self._fetch_task(task_id)
        lock = await self._get_task_lock(task_id)
        try:
            async with lock:
                task = await self._fetch_task(task_id)
                self._enforce(actor, Action.UPDATE, task)

                title, description, status = patch.merge_into(task)
                async with atomic(self._stores.conn):
                    updated = await self._stores.task_store.update_task(
                        task_id=task_id,
                        title=title,
                        description=description,
                        status=status,
                        now=datetime.now(UTC),
                    )
                if updated is None:
                    # 锁只覆盖本进程，其他进程可能已删除
                    raise TaskNotFoundError(task_id)
        except TaskNotFoundError:
            await self._cleanup_task_lock(task_id)
            raise

        log.info(
            "task_updated",
            task_id=task_id,
            fields=sorted(patch.model_dump(exclude_none=True)),
            status=updated.status.value,
        )
        return updated

    async def delete_task(self, actor: Actor, task_id: int) -> None:
        """物理删除任务

        Raises:
            TaskNotFoundError: 任务不存在
            ForbiddenError: 策略拒绝
        """
        await self._fetch_task(task_id)
        lock = await self._get_task_lock(task_id)
        try:
            async with lock:
                task = await self._fetch_task(task_id)
                self._enforce(actor, Action.DELETE, task)

                async with atomic(self._stores.conn):
                    deleted = await self._stores.task_store.delete_task(task_id)
        except TaskNotFoundError:
            await self._cleanup_task_lock(task_id)
            raise

        await self._cleanup_task_lock(task_id)

        if not deleted:
            raise TaskNotFoundError(task_id)

        log.info("task_deleted", task_id=task_id, owner_id=task.owner_id)

    def permissions_for(self, actor: Actor, task: Task) -> dict[str, bool]:
        return self._policy.permissions_for(actor, task)

    async def _fetch_task(self, task_id: int) -> Task:
        task = await self._stores.task_store.get_task(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    def _enforce(self, actor: Actor, action: Action, task: Task | None = None) -> None:
        try:
            self._policy.enforce(actor, action, task)
        except ForbiddenError as e:
            log.info(
                "task_access_denied",
                action=action.value,
                task_id=task.id if task else None,
                reason=e.reason,
                variant=self._policy.variant.value,
            )
            raise

    @classmethod
    async def _get_task_lock(cls, task_id: int) -> asyncio.Lock:
        """获取 task 级别锁，串行化同一任务的 读取-判定-变更。"""
        async with cls._task_locks_guard:
            lock = cls._task_locks.get(task_id)
            if lock is None:
                lock = asyncio.Lock()
                cls._task_locks[task_id] = lock
            return lock

    @classmethod
    async def _cleanup_task_lock(cls, task_id: int) -> None:
        """任务删除后清理 lock，避免全局字典无限增长。"""
        async with cls._task_locks_guard:
            lock = cls._task_locks.get(task_id)
            if lock is not None and not lock.locked():
                cls._task_locks.pop(task_id, None)
