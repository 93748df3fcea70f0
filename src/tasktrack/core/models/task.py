"""Task Domain Model

tasks 表的持久化实体，以及请求边界上的创建/更新校验模型。
owner_id 创建后不可变，status 默认为 draft。
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import TaskStatus

TITLE_MAX_LENGTH = 255


class Task(BaseModel):
    """Task 数据模型"""

    id: int = Field(description="自增主键")
    title: str = Field(description="任务标题")
    description: str = Field(default="", description="任务描述")
    status: TaskStatus = Field(default=TaskStatus.DRAFT, description="当前状态")
    owner_id: str = Field(description="所有者用户 ID")
    created_at: datetime = Field(description="创建时间")
    updated_at: datetime = Field(description="更新时间")

    @field_validator("description", mode="before")
    @classmethod
    def null_description_to_empty(cls, value):
        # 数据库中 NULL 描述统一读作空串
        return "" if value is None else value


class TaskCreate(BaseModel):
    """创建任务请求体"""

    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH, description="任务标题")
    description: str | None = Field(default=None, description="任务描述")

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("title must not be blank")
        return value


class TaskUpdate(BaseModel):
    """更新任务请求体 -- 合并语义，未提供的字段保持原值"""

    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(default=None, description="任务标题")
    description: str | None = Field(default=None, description="任务描述")
    status: TaskStatus | None = Field(default=None, description="目标状态")

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str | None) -> str | None:
        if value is None:
            return value
        if not value.strip():
            raise ValueError("title must not be blank")
        if len(value) > TITLE_MAX_LENGTH:
            raise ValueError(f"title must be at most {TITLE_MAX_LENGTH} characters")
        return value

    def merge_into(self, task: Task) -> tuple[str, str, TaskStatus]:
        """将提供的字段合并到现有任务上，返回 (title, description, status)"""
        return (
            self.title if self.title is not None else task.title,
            self.description if self.description is not None else task.description,
            self.status if self.status is not None else task.status,
        )
