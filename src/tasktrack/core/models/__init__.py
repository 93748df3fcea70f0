"""TaskTrack Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .actor import Actor
from .enums import OVERSIGHT_ROLES, Action, PolicyVariant, Role, TaskStatus
from .task import TITLE_MAX_LENGTH, Task, TaskCreate, TaskUpdate
from .user import Session, User

__all__ = [
    # 枚举
    "Role",
    "TaskStatus",
    "Action",
    "PolicyVariant",
    "OVERSIGHT_ROLES",
    # 身份
    "Actor",
    "User",
    "Session",
    # Task
    "Task",
    "TaskCreate",
    "TaskUpdate",
    "TITLE_MAX_LENGTH",
]
