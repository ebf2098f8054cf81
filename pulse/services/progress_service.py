from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func, case, true

from pulse.models.project import Project
from pulse.models.task import Task
from pulse.logs import debug_logger


class ProgressService:
    """Keeps Project.progress equal to the completion ratio of its tasks.

    Progress is ``round(100 * completed / total)`` with halves rounded up.
    A project without tasks keeps whatever progress it already has.

    ``recalculate`` issues a single ``UPDATE ... SET progress = (subquery)``
    in the caller's transaction instead of reading the tasks and writing the
    result back. The task mutation and the new aggregate therefore commit
    together, and concurrent writers on the same project are serialized by
    the row lock the UPDATE takes.
    """

    @staticmethod
    def progress_expression(project_id: int):
        """SQL expression computing the new progress of one project"""
        total = (
            select(func.count(Task.id))
            .where(Task.project_id == project_id)
            .scalar_subquery()
        )
        completed = (
            select(func.count(Task.id))
            .where(Task.project_id == project_id, Task.completed.is_(true()))
            .scalar_subquery()
        )
        # Integer form of floor(100 * completed / total + 0.5)
        return case(
            (total == 0, Project.progress),
            else_=(200 * completed + total) // (2 * total),
        )

    @staticmethod
    async def recalculate(
        db: AsyncSession,
        project_id: Optional[int]
    ) -> Optional[int]:
        """Recompute and persist progress for a project.

        Does not commit. Returns the stored value, or None when there is no
        project to update.
        """
        if project_id is None:
            return None

        stmt = (
            update(Project)
            .where(Project.id == project_id)
            .values(progress=ProgressService.progress_expression(project_id))
            .execution_options(synchronize_session=False)
        )
        await db.execute(stmt)

        result = await db.execute(select(Project.progress).where(Project.id == project_id))
        progress = result.scalar()
        debug_logger.debug(f"Project {project_id} progress recalculated: {progress}")
        return progress

    @staticmethod
    async def recalculate_many(
        db: AsyncSession,
        *project_ids: Optional[int]
    ) -> None:
        """Recompute several projects, skipping empty and repeated ids"""
        seen = set()
        for project_id in project_ids:
            if project_id is None or project_id in seen:
                continue
            seen.add(project_id)
            await ProgressService.recalculate(db, project_id)
