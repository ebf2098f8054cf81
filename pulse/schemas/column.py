from datetime import datetime
from typing import List, Optional
from uuid import UUID
from pydantic import Field

from pulse.models.task import TaskPriority
from pulse.schemas.common import CamelModel, ProjectBrief, UserBrief

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class ColumnCreate(CamelModel):
    """Schema for column creation"""
    title: str = Field(..., min_length=1, max_length=100)
    color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    project_id: Optional[int] = None
    order: Optional[int] = None


class ColumnUpdate(CamelModel):
    """Schema for column update"""
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    order: Optional[int] = None


class ColumnOrderItem(CamelModel):
    id: UUID
    order: int


class ColumnReorder(CamelModel):
    """Schema for reordering several columns at once"""
    columns: List[ColumnOrderItem] = Field(..., min_length=1)


class ColumnInDB(CamelModel):
    """Schema for column representation in the database"""
    id: str
    title: str
    color: str
    order: int
    project_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ColumnTask(CamelModel):
    """Task as listed inside its column"""
    id: str
    title: str
    description: Optional[str] = None
    priority: TaskPriority
    completed: bool
    order: int
    column_id: str
    project_id: Optional[int] = None
    assigned_to_id: Optional[int] = None
    assigned_to: Optional[UserBrief] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ColumnResponse(ColumnInDB):
    """Schema for column response"""
    project: Optional[ProjectBrief] = None
    tasks: List[ColumnTask] = []
