from datetime import datetime
import enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum, CheckConstraint
from sqlalchemy.orm import relationship

from pulse.db.base import Base
from pulse.models.user import enum_values


class ProjectStatus(str, enum.Enum):
    STARTED = "Started"
    IN_PROGRESS = "In progress"
    ON_TRACK = "On track"
    ALMOST_DONE = "Almost done"
    COMPLETED = "Completed"


class Project(Base):
    """Project with its board columns and tasks"""

    __tablename__ = "projects"
    __table_args__ = (
        CheckConstraint("progress >= 0 AND progress <= 100", name="ck_projects_progress_range"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    # Derived from task completion, see ProgressService
    progress = Column(Integer, nullable=False, default=0)
    status = Column(
        Enum(ProjectStatus, native_enum=False, length=32, values_callable=enum_values),
        nullable=False,
        default=ProjectStatus.STARTED,
    )
    due_date = Column(DateTime, nullable=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    owner = relationship("User", backref="owned_projects", foreign_keys=[owner_id])

    columns = relationship(
        "Column",
        back_populates="project",
        order_by="Column.order",
        passive_deletes=True,
    )

    tasks = relationship("Task", back_populates="project", passive_deletes=True)

    @property
    def task_counts(self) -> dict:
        """Completed/total counts over the loaded tasks"""
        tasks = self.tasks or []
        return {
            "completed": sum(1 for task in tasks if task.completed),
            "total": len(tasks),
        }
