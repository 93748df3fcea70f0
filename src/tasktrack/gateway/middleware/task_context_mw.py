"""TaskContextMiddleware

对 /api/tasks/{id} 形式的请求，把 task_id 绑定到 structlog contextvars，
使该请求内的所有日志（包括拒绝日志）都带上目标任务。
"""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

TASKS_PREFIX = "/api/tasks/"


def extract_task_id(path: str) -> int | None:
    """从路径中提取整数 task_id，非任务路径或非数字返回 None"""
    if not path.startswith(TASKS_PREFIX):
        return None
    segment = path[len(TASKS_PREFIX):].split("/", 1)[0]
    if not segment.isdigit():
        return None
    return int(segment)


class TaskContextMiddleware(BaseHTTPMiddleware):
    """任务级上下文中间件 -- 为任务操作绑定 task_id"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        task_id = extract_task_id(request.url.path)
        if task_id is not None:
            structlog.contextvars.bind_contextvars(task_id=task_id)

        return await call_next(request)
