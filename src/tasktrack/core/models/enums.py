"""枚举定义

包含 Role、TaskStatus、Action、PolicyVariant 枚举。
TaskStatus 不约束流转顺序：任何被策略允许的更新都可以设置任意状态。
"""

from enum import StrEnum


class Role(StrEnum):
    """用户角色"""

    USER = "user"
    MANAGER = "manager"
    ADMIN = "admin"


# 可查看全部任务的监督角色
OVERSIGHT_ROLES: frozenset[Role] = frozenset({Role.MANAGER, Role.ADMIN})


class TaskStatus(StrEnum):
    """Task 生命周期状态"""

    DRAFT = "draft"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class Action(StrEnum):
    """任务操作类型"""

    LIST = "list"
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class PolicyVariant(StrEnum):
    """授权策略配置

    STRICT: 仅 user 角色可创建，删除草稿需要 user 角色
    PERMISSIVE: 任何已认证角色可创建，删除草稿只校验所有权
    """

    STRICT = "strict"
    PERMISSIVE = "permissive"
