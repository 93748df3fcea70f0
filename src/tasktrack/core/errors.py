"""TaskTrack 异常体系

所有异常均为终态、不可重试，由 gateway 统一渲染为
{"error": {"code": ..., "message": ...}} 响应。
"""


class TaskTrackError(Exception):
    """TaskTrack 基础异常"""

    code: str = "INTERNAL_ERROR"
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": {"code": self.code, "message": self.message}}


class UnauthenticatedError(TaskTrackError):
    """无有效会话 -- 在策略评估之前抛出"""

    code = "UNAUTHORIZED"
    status_code = 401

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class TaskNotFoundError(TaskTrackError):
    """目标任务不存在 -- 在更新/删除的权限判断之前抛出"""

    code = "TASK_NOT_FOUND"
    status_code = 404

    def __init__(self, task_id: int) -> None:
        """
        Args:
            task_id: 请求的任务 ID
        """
        super().__init__(f"Task with id {task_id} does not exist")
        self.task_id = task_id


class ForbiddenError(TaskTrackError):
    """策略评估后拒绝"""

    code = "FORBIDDEN"
    status_code = 403

    def __init__(self, action: str, reason: str) -> None:
        """
        Args:
            action: 被拒绝的操作
            reason: 拒绝原因（直接返回给调用方）
        """
        super().__init__(f"Forbidden: {reason}")
        self.action = action
        self.reason = reason


class InvalidCredentialsError(TaskTrackError):
    """登录失败：邮箱不存在或密码错误"""

    code = "INVALID_CREDENTIALS"
    status_code = 401

    def __init__(self) -> None:
        super().__init__("Invalid email or password")


class UserAlreadyExistsError(TaskTrackError):
    """注册冲突：邮箱已被使用"""

    code = "USER_ALREADY_EXISTS"
    status_code = 409

    def __init__(self, email: str) -> None:
        super().__init__(f"User with email {email} already exists")
        self.email = email
