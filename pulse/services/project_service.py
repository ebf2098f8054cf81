from typing import Any, Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from sqlalchemy.orm import selectinload
from datetime import datetime

from pulse.models.project import Project, ProjectStatus
from pulse.services.column_service import ColumnService
from pulse.services.progress_service import ProgressService
from pulse.logs import debug_logger, log_function


def _with_relations(query):
    return query.options(
        selectinload(Project.owner),
        selectinload(Project.tasks),
        selectinload(Project.columns),
    )


class ProjectService:
    """CRUD operations service for Project model"""

    @staticmethod
    @log_function()
    async def create(
        db: AsyncSession,
        name: str,
        owner_id: Optional[int],
        description: Optional[str] = None,
        due_date: Optional[datetime] = None
    ) -> Project:
        """Create a project together with its default board columns"""
        project = Project(
            name=name,
            description=description,
            due_date=due_date,
            owner_id=owner_id,
            progress=0,
            status=ProjectStatus.STARTED,
        )

        db.add(project)
        await db.flush()

        await ColumnService.create_defaults(db, project.id)
        await db.commit()

        debug_logger.info(f"Project created: {project.id} ({name})")
        return await ProjectService.get_by_id(db, project.id)

    @staticmethod
    async def get_by_id(
        db: AsyncSession,
        project_id: int
    ) -> Optional[Project]:
        """Get a project with owner, tasks and columns"""
        query = _with_relations(
            select(Project).where(Project.id == project_id)
        ).execution_options(populate_existing=True)
        result = await db.execute(query)
        return result.scalars().first()

    @staticmethod
    async def exists(db: AsyncSession, project_id: int) -> bool:
        result = await db.execute(select(Project.id).where(Project.id == project_id))
        return result.scalar() is not None

    @staticmethod
    async def get_all(db: AsyncSession) -> List[Project]:
        """All projects, newest first"""
        query = _with_relations(select(Project).order_by(Project.created_at.desc()))
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    @log_function()
    async def update(
        db: AsyncSession,
        project: Project,
        changes: Dict[str, Any]
    ) -> Project:
        """Apply a partial update.

        When ``progress`` is not part of the update it is recomputed from the
        project's tasks. ``status`` only ever changes when sent explicitly.
        """
        update_data = dict(changes)
        if update_data.get("due_date") == "":
            update_data["due_date"] = None

        for field, value in update_data.items():
            if value is None and field not in ("description", "due_date", "owner_id"):
                continue
            setattr(project, field, value)
        project.updated_at = datetime.utcnow()
        await db.flush()

        if update_data.get("progress") is None:
            await ProgressService.recalculate(db, project.id)

        await db.commit()
        debug_logger.info(f"Project {project.id} updated: {sorted(update_data)}")
        return await ProjectService.get_by_id(db, project.id)

    @staticmethod
    async def delete(
        db: AsyncSession,
        project_id: int
    ) -> bool:
        """Delete a project. Columns and tasks are removed by the store"""
        stmt = delete(Project).where(Project.id == project_id)
        result = await db.execute(stmt)
        await db.commit()
        return result.rowcount > 0
