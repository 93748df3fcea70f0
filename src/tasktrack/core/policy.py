"""任务授权策略（ABAC）

根据操作者角色、任务所有权和任务状态判定 list/read/create/update/delete 是否允许。
纯函数、同步、无副作用；任务属性由调用方从存储中实时读取后传入。

两种命名配置：
- STRICT（默认）：仅 user 可创建；删除草稿要求 user 角色 + 所有者
- PERMISSIVE：任何已认证角色可创建；删除草稿只要求所有者

两种配置共同的规则：
- list: manager/admin 可见全部，user 仅可见自己的任务（只过滤，不拒绝）
- update: 仅所有者且角色为 user（admin 无更新豁免）
- delete: admin 可删除任意任务，不论所有者与状态
"""

from pydantic import BaseModel, ConfigDict

from .errors import ForbiddenError
from .models.actor import Actor
from .models.enums import OVERSIGHT_ROLES, Action, PolicyVariant, Role, TaskStatus
from .models.task import Task

# 拒绝原因（直接作为 403 消息返回）
DENY_READ = "You cannot view this task"
DENY_CREATE = "Only users can create tasks"
DENY_UPDATE = "You cannot update this task"
DENY_DELETE = "You cannot delete this task"


class PolicyDecision(BaseModel):
    """单次授权判定结果"""

    model_config = ConfigDict(frozen=True)

    allowed: bool
    reason: str

    def __bool__(self) -> bool:
        return self.allowed


def _allow(reason: str) -> PolicyDecision:
    return PolicyDecision(allowed=True, reason=reason)


def _deny(reason: str) -> PolicyDecision:
    return PolicyDecision(allowed=False, reason=reason)


def sees_all_tasks(actor: Actor) -> bool:
    """监督角色（manager/admin）可查看全部任务"""
    return actor.role in OVERSIGHT_ROLES


def is_owner(actor: Actor, task: Task) -> bool:
    return task.owner_id == actor.user_id


class TaskPolicy:
    """任务授权策略评估器"""

    def __init__(self, variant: PolicyVariant = PolicyVariant.STRICT) -> None:
        self.variant = PolicyVariant(variant)

    def list_owner_filter(self, actor: Actor) -> str | None:
        """列表查询的所有者过滤条件

        Returns:
            None 表示不过滤（返回全部任务），否则为需要匹配的 owner_id
        """
        if sees_all_tasks(actor):
            return None
        return actor.user_id

    def can_read(self, actor: Actor, task: Task) -> PolicyDecision:
        if sees_all_tasks(actor):
            return _allow("oversight role")
        if is_owner(actor, task):
            return _allow("owner")
        return _deny(DENY_READ)

    def can_create(self, actor: Actor) -> PolicyDecision:
        if actor.role == Role.USER:
            return _allow("user role")
        if self.variant == PolicyVariant.PERMISSIVE:
            return _allow("authenticated")
        return _deny(DENY_CREATE)

    def can_update(self, actor: Actor, task: Task) -> PolicyDecision:
        if actor.role == Role.USER and is_owner(actor, task):
            return _allow("owner")
        return _deny(DENY_UPDATE)

    def can_delete(self, actor: Actor, task: Task) -> PolicyDecision:
        if actor.role == Role.ADMIN:
            return _allow("admin override")

        # STRICT 额外要求 user 角色（manager 即使是所有者也不能删除）
        role_ok = (
            actor.role == Role.USER or self.variant == PolicyVariant.PERMISSIVE
        )
        if role_ok and is_owner(actor, task) and task.status == TaskStatus.DRAFT:
            return _allow("owner draft")
        return _deny(DENY_DELETE)

    def evaluate(
        self,
        actor: Actor,
        action: Action,
        task: Task | None = None,
    ) -> PolicyDecision:
        """按操作类型分派判定

        Raises:
            ValueError: 需要目标任务的操作未传入 task
        """
        action = Action(action)
        if action == Action.LIST:
            return _allow("filtered")
        if action == Action.CREATE:
            return self.can_create(actor)

        if task is None:
            raise ValueError(f"action {action} requires a target task")
        if action == Action.READ:
            return self.can_read(actor, task)
        if action == Action.UPDATE:
            return self.can_update(actor, task)
        return self.can_delete(actor, task)

    def enforce(
        self,
        actor: Actor,
        action: Action,
        task: Task | None = None,
    ) -> PolicyDecision:
        """判定并在拒绝时抛出 ForbiddenError"""
        decision = self.evaluate(actor, action, task)
        if not decision.allowed:
            raise ForbiddenError(str(action), decision.reason)
        return decision

    def permissions_for(self, actor: Actor, task: Task) -> dict[str, bool]:
        """单个任务上的可用操作，供列表响应标注"""
        return {
            "update": self.can_update(actor, task).allowed,
            "delete": self.can_delete(actor, task).allowed,
        }
