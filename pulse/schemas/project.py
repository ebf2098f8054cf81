from datetime import datetime
from typing import List, Literal, Optional, Union
from pydantic import Field, field_validator

from pulse.models.project import ProjectStatus
from pulse.schemas.column import ColumnInDB
from pulse.schemas.common import CamelModel, UserBrief

# An empty string clears the due date on update
DueDate = Optional[Union[datetime, Literal[""]]]


def parse_due_date(value):
    if value is None or value == "" or isinstance(value, datetime):
        if isinstance(value, datetime) and value.tzinfo is not None:
            return value.replace(tzinfo=None)
        return value
    if not isinstance(value, str):
        raise ValueError("Invalid date format")
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise ValueError("Invalid date format")
    # Stored as naive UTC
    return parsed.replace(tzinfo=None)


class ProjectCreate(CamelModel):
    """Schema for project creation"""
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    due_date: DueDate = None
    owner_id: Optional[int] = None

    @field_validator("due_date", mode="before")
    @classmethod
    def validate_due_date(cls, value):
        return parse_due_date(value)


class ProjectUpdate(CamelModel):
    """Schema for project update"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    progress: Optional[int] = Field(None, ge=0, le=100)
    status: Optional[ProjectStatus] = None
    due_date: DueDate = None
    owner_id: Optional[int] = None

    @field_validator("due_date", mode="before")
    @classmethod
    def validate_due_date(cls, value):
        return parse_due_date(value)


class TaskCounts(CamelModel):
    completed: int = 0
    total: int = 0


class ProjectResponse(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    progress: int
    status: ProjectStatus
    due_date: Optional[datetime] = None
    owner_id: Optional[int] = None
    owner: Optional[UserBrief] = None
    tasks: TaskCounts = Field(
        default_factory=TaskCounts,
        validation_alias="task_counts",
        serialization_alias="tasks",
    )
    columns: List[ColumnInDB] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
