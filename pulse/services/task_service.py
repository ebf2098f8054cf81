from typing import Any, Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func
from sqlalchemy.orm import selectinload
from datetime import datetime

from pulse.models.task import Task, TaskPriority
from pulse.services.progress_service import ProgressService
from pulse.logs import debug_logger, log_function

# Fields that may be explicitly cleared with null on update
NULLABLE_FIELDS = {"description", "project_id", "assigned_to_id"}

# Changes to these fields affect the owning project's progress
PROGRESS_FIELDS = {"completed", "project_id"}


def _with_relations(query):
    return query.options(
        selectinload(Task.column),
        selectinload(Task.project),
        selectinload(Task.assigned_to),
    )


class TaskService:
    """CRUD operations service for Task model.

    Every mutation that changes which tasks a project has, or whether they
    are completed, recomputes the project's progress before committing.
    """

    @staticmethod
    async def next_order(db: AsyncSession, column_id: str) -> int:
        query = select(func.max(Task.order)).where(Task.column_id == column_id)
        result = await db.execute(query)
        max_order = result.scalar()
        return 0 if max_order is None else max_order + 1

    @staticmethod
    @log_function()
    async def create(
        db: AsyncSession,
        title: str,
        column_id: str,
        description: Optional[str] = None,
        priority: Optional[TaskPriority] = None,
        project_id: Optional[int] = None,
        assigned_to_id: Optional[int] = None,
        order: Optional[int] = None
    ) -> Task:
        """Create a task in a column and refresh its project's progress"""
        if order is None:
            order = await TaskService.next_order(db, column_id)

        task = Task(
            title=title,
            description=description,
            priority=priority or TaskPriority.MEDIUM,
            column_id=column_id,
            project_id=project_id,
            assigned_to_id=assigned_to_id,
            order=order,
            completed=False,
        )

        db.add(task)
        await db.flush()

        await ProgressService.recalculate(db, project_id)
        await db.commit()

        debug_logger.info(f"Task created: {task.id} in column {column_id}")
        return await TaskService.get_by_id(db, task.id)

    @staticmethod
    async def get_by_id(
        db: AsyncSession,
        task_id: str,
        load_relations: bool = True
    ) -> Optional[Task]:
        """Get a task by ID with its column, project and assignee"""
        query = select(Task).where(Task.id == task_id)

        if load_relations:
            query = _with_relations(query).execution_options(populate_existing=True)

        result = await db.execute(query)
        return result.scalars().first()

    @staticmethod
    async def get_list(
        db: AsyncSession,
        project_id: Optional[int] = None,
        column_id: Optional[str] = None,
        assigned_to_id: Optional[int] = None
    ) -> List[Task]:
        """Get tasks, newest first, with optional filters"""
        query = select(Task).order_by(Task.created_at.desc())
        if project_id is not None:
            query = query.where(Task.project_id == project_id)
        if column_id is not None:
            query = query.where(Task.column_id == column_id)
        if assigned_to_id is not None:
            query = query.where(Task.assigned_to_id == assigned_to_id)

        result = await db.execute(_with_relations(query))
        return list(result.scalars().all())

    @staticmethod
    @log_function()
    async def update(
        db: AsyncSession,
        task: Task,
        changes: Dict[str, Any]
    ) -> Task:
        """Apply a partial update to a task.

        ``changes`` holds only the fields the client sent. Progress is
        recomputed for the previous and the new project when completion or
        project membership changed.
        """
        previous_project_id = task.project_id

        update_data = {
            field: value for field, value in changes.items()
            if value is not None or field in NULLABLE_FIELDS
        }

        if update_data:
            for field, value in update_data.items():
                setattr(task, field, value)
            task.updated_at = datetime.utcnow()
            await db.flush()

            if PROGRESS_FIELDS & update_data.keys():
                await ProgressService.recalculate_many(db, previous_project_id, task.project_id)

            await db.commit()
            debug_logger.info(f"Task {task.id} updated: {sorted(update_data)}")

        return await TaskService.get_by_id(db, task.id)

    @staticmethod
    @log_function()
    async def move(
        db: AsyncSession,
        task: Task,
        column_id: str,
        order: Optional[int] = None
    ) -> Task:
        """Move a task to another column. Completion, and so progress, is untouched"""
        task.column_id = column_id
        if order is not None:
            task.order = order
        task.updated_at = datetime.utcnow()

        await db.commit()
        debug_logger.info(f"Task {task.id} moved to column {column_id}")
        return await TaskService.get_by_id(db, task.id)

    @staticmethod
    async def delete(
        db: AsyncSession,
        task: Task
    ) -> bool:
        """Delete a task and refresh its project's progress"""
        project_id = task.project_id

        result = await db.execute(delete(Task).where(Task.id == task.id))
        if result.rowcount == 0:
            debug_logger.warning(f"Task {task.id} was already gone")
            return False

        await ProgressService.recalculate(db, project_id)
        await db.commit()

        debug_logger.info(f"Task {task.id} deleted")
        return True
