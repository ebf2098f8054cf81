from datetime import datetime
from typing import List, Optional
from uuid import UUID
from pydantic import Field

from pulse.models.task import TaskPriority
from pulse.schemas.activity import ActivityResponse
from pulse.schemas.column import ColumnInDB
from pulse.schemas.common import CamelModel, ProjectBrief, UserBrief


class TaskCreate(CamelModel):
    """Schema for task creation"""
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    priority: Optional[TaskPriority] = None
    column_id: UUID
    project_id: Optional[int] = None
    assigned_to_id: Optional[int] = None
    order: Optional[int] = None


class TaskUpdate(CamelModel):
    """Schema for task update. Only the fields sent are applied"""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    priority: Optional[TaskPriority] = None
    column_id: Optional[UUID] = None
    project_id: Optional[int] = None
    assigned_to_id: Optional[int] = None
    completed: Optional[bool] = None


class TaskMove(CamelModel):
    """Schema for moving a task to a different column"""
    column_id: UUID
    order: Optional[int] = None


class TaskResponse(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    priority: TaskPriority
    completed: bool
    order: int
    column_id: str
    project_id: Optional[int] = None
    assigned_to_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    column: Optional[ColumnInDB] = None
    project: Optional[ProjectBrief] = None
    assigned_to: Optional[UserBrief] = None


class TaskDetailResponse(TaskResponse):
    """Task with its latest activities"""
    activities: List[ActivityResponse] = []
