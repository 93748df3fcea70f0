"""任务路由

GET    /api/tasks:       任务列表（manager/admin 全部，user 仅自己的），附带每项可用操作
POST   /api/tasks:       创建任务（201）
GET    /api/tasks/{id}:  任务详情
PATCH  /api/tasks/{id}:  部分更新（404 先于 403）
DELETE /api/tasks/{id}:  物理删除（404 先于 403）

未认证请求在策略评估前返回 401；错误统一由 main 中的异常处理器渲染。
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from starlette.responses import JSONResponse
from tasktrack.core.models import Actor, Task, TaskCreate, TaskUpdate

from ..deps import get_current_actor, get_task_service
from ..services.task_service import TaskService

router = APIRouter()


class TaskResponse(BaseModel):
    """任务详情"""

    id: int
    title: str
    description: str
    status: str
    owner_id: str
    created_at: str
    updated_at: str

    @classmethod
    def from_task(cls, task: Task) -> "TaskResponse":
        return cls(
            id=task.id,
            title=task.title,
            description=task.description,
            status=task.status.value,
            owner_id=task.owner_id,
            created_at=task.created_at.isoformat(),
            updated_at=task.updated_at.isoformat(),
        )


class TaskPermissions(BaseModel):
    """当前操作者在该任务上的可用操作"""

    update: bool
    delete: bool


class TaskListItem(TaskResponse):
    """任务列表项"""

    permissions: TaskPermissions


class TaskListResponse(BaseModel):
    """任务列表响应"""

    tasks: list[TaskListItem]


class DeleteResponse(BaseModel):
    success: bool


@router.get("/api/tasks", response_model=TaskListResponse)
async def list_tasks(
    actor: Actor = Depends(get_current_actor),
    service: TaskService = Depends(get_task_service),
):
    """查询任务列表，按 ID 升序"""
    tasks = await service.list_tasks(actor)
    return TaskListResponse(
        tasks=[
            TaskListItem(
                **TaskResponse.from_task(t).model_dump(),
                permissions=TaskPermissions(**service.permissions_for(actor, t)),
            )
            for t in tasks
        ]
    )


@router.post("/api/tasks", status_code=201, response_model=TaskResponse)
async def create_task(
    body: TaskCreate,
    actor: Actor = Depends(get_current_actor),
    service: TaskService = Depends(get_task_service),
):
    """创建任务 -- 所有者为当前用户，状态为 draft"""
    task = await service.create_task(actor, body)
    return JSONResponse(
        status_code=201,
        content=TaskResponse.from_task(task).model_dump(),
    )


@router.get("/api/tasks/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: int,
    actor: Actor = Depends(get_current_actor),
    service: TaskService = Depends(get_task_service),
):
    """查询单个任务"""
    task = await service.get_task(actor, task_id)
    return TaskResponse.from_task(task)


@router.patch("/api/tasks/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: int,
    body: TaskUpdate,
    actor: Actor = Depends(get_current_actor),
    service: TaskService = Depends(get_task_service),
):
    """部分更新任务 -- 仅所有者（user 角色）"""
    task = await service.update_task(actor, task_id, body)
    return TaskResponse.from_task(task)


@router.delete("/api/tasks/{task_id}", response_model=DeleteResponse)
async def delete_task(
    task_id: int,
    actor: Actor = Depends(get_current_actor),
    service: TaskService = Depends(get_task_service),
):
    """删除任务 -- admin 任意；user 仅自己的 draft 任务"""
    await service.delete_task(actor, task_id)
    return DeleteResponse(success=True)
