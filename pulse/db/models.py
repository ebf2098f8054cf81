# Import all models here for Alembic to discover them
from pulse.db.base import Base
from pulse.models.user import User, UserRole, UserStatus
from pulse.models.team import TeamMember
from pulse.models.project import Project, ProjectStatus
from pulse.models.column import Column
from pulse.models.task import Task, TaskPriority
from pulse.models.activity import Activity, ActivityType
