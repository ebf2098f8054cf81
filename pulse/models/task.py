from datetime import datetime
import enum
import uuid

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Boolean, Enum
from sqlalchemy.orm import relationship

from pulse.db.base import Base
from pulse.models.user import enum_values


class TaskPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Task(Base):
    """Task card living in exactly one column"""

    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    priority = Column(
        Enum(TaskPriority, native_enum=False, length=16, values_callable=enum_values),
        nullable=False,
        default=TaskPriority.MEDIUM,
    )
    completed = Column(Boolean, nullable=False, default=False)
    order = Column(Integer, nullable=False, default=0)  # Position inside the column
    column_id = Column(String(36), ForeignKey("columns.id", ondelete="CASCADE"), nullable=False, index=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=True, index=True)
    assigned_to_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    column = relationship("Column", back_populates="tasks")
    project = relationship("Project", back_populates="tasks")
    assigned_to = relationship("User", backref="assigned_tasks", foreign_keys=[assigned_to_id])
