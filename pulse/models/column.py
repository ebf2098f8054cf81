from datetime import datetime
import uuid

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from pulse.db.base import Base

DEFAULT_COLUMN_COLOR = "#94a3b8"


class Column(Base):
    """Board column, ordered left to right by `order`"""

    __tablename__ = "columns"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(100), nullable=False)
    color = Column(String(7), nullable=False, default=DEFAULT_COLUMN_COLOR)
    order = Column(Integer, nullable=False, default=0)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    project = relationship("Project", back_populates="columns")

    # No delete cascade: a column holding tasks must not be deleted
    tasks = relationship("Task", back_populates="column", order_by="Task.created_at")
