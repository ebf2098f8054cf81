from datetime import datetime
from typing import List, Optional

from pulse.schemas.common import CamelModel, ProjectBrief, TaskBrief, UserBrief
from pulse.schemas.response import Pagination


class ActivityResponse(CamelModel):
    id: int
    type: str
    description: str
    user_id: Optional[int] = None
    project_id: Optional[int] = None
    task_id: Optional[str] = None
    created_at: datetime
    user: Optional[UserBrief] = None
    project: Optional[ProjectBrief] = None
    task: Optional[TaskBrief] = None


class ActivityPage(CamelModel):
    """Paginated list of activities"""
    activities: List[ActivityResponse]
    pagination: Pagination
