from typing import Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func
from sqlalchemy.orm import selectinload
from datetime import datetime

from pulse.models.column import Column, DEFAULT_COLUMN_COLOR
from pulse.models.task import Task
from pulse.logs import debug_logger, log_function

DEFAULT_PROJECT_COLUMNS = [
    {"title": "To Do", "color": "#94a3b8", "order": 0},
    {"title": "In Progress", "color": "#3b82f6", "order": 1},
    {"title": "Review", "color": "#f59e0b", "order": 2},
    {"title": "Done", "color": "#10b981", "order": 3},
]


def _with_tasks(query):
    return query.options(
        selectinload(Column.project),
        selectinload(Column.tasks).selectinload(Task.assigned_to),
    )


class ColumnService:
    """CRUD operations service for Column model"""

    @staticmethod
    async def next_order(db: AsyncSession, project_id: Optional[int]) -> int:
        """Position after the last column of a project, 0 for the first one"""
        if project_id is None:
            return 0
        query = select(func.max(Column.order)).where(Column.project_id == project_id)
        result = await db.execute(query)
        max_order = result.scalar()
        return 0 if max_order is None else max_order + 1

    @staticmethod
    async def create(
        db: AsyncSession,
        title: str,
        project_id: Optional[int] = None,
        color: Optional[str] = None,
        order: Optional[int] = None
    ) -> Column:
        """Create a new column, appended to the project board by default"""
        if order is None:
            order = await ColumnService.next_order(db, project_id)

        column = Column(
            title=title,
            color=color or DEFAULT_COLUMN_COLOR,
            project_id=project_id,
            order=order
        )

        db.add(column)
        await db.commit()

        debug_logger.info(f"Column created: {column.id} ({title}) in project {project_id}")
        return await ColumnService.get_by_id(db, column.id, load_tasks=True)

    @staticmethod
    async def create_defaults(db: AsyncSession, project_id: int) -> None:
        """Add the standard board columns to a new project. Does not commit"""
        for defaults in DEFAULT_PROJECT_COLUMNS:
            db.add(Column(project_id=project_id, **defaults))
        await db.flush()

    @staticmethod
    async def get_by_id(
        db: AsyncSession,
        column_id: str,
        load_tasks: bool = False
    ) -> Optional[Column]:
        """Get column by id with optional tasks loading"""
        query = select(Column).where(Column.id == column_id)

        if load_tasks:
            query = _with_tasks(query).execution_options(populate_existing=True)

        result = await db.execute(query)
        return result.scalars().first()

    @staticmethod
    async def get_list(
        db: AsyncSession,
        project_id: Optional[int] = None
    ) -> List[Column]:
        """Get columns ordered left to right, optionally for one project"""
        query = select(Column).order_by(Column.order, Column.created_at)
        if project_id is not None:
            query = query.where(Column.project_id == project_id)

        result = await db.execute(_with_tasks(query))
        return list(result.scalars().all())

    @staticmethod
    async def count_tasks(db: AsyncSession, column_id: str) -> int:
        query = select(func.count(Task.id)).where(Task.column_id == column_id)
        result = await db.execute(query)
        return result.scalar() or 0

    @staticmethod
    async def update(
        db: AsyncSession,
        column_id: str,
        title: Optional[str] = None,
        color: Optional[str] = None,
        order: Optional[int] = None
    ) -> Optional[Column]:
        """Update a column's details"""
        update_data = {}
        if title is not None:
            update_data["title"] = title
        if color is not None:
            update_data["color"] = color
        if order is not None:
            update_data["order"] = order

        if not update_data:
            return await ColumnService.get_by_id(db, column_id, load_tasks=True)

        update_data["updated_at"] = datetime.utcnow()

        stmt = update(Column).where(Column.id == column_id).values(**update_data)
        await db.execute(stmt)
        await db.commit()

        return await ColumnService.get_by_id(db, column_id, load_tasks=True)

    @staticmethod
    async def delete(
        db: AsyncSession,
        column_id: str
    ) -> bool:
        """Delete a column"""
        stmt = delete(Column).where(Column.id == column_id)
        result = await db.execute(stmt)
        await db.commit()
        return result.rowcount > 0

    @staticmethod
    @log_function()
    async def reorder_columns(
        db: AsyncSession,
        column_orders: Dict[str, int]
    ) -> bool:
        """Apply new positions to several columns in one transaction.

        Args:
            db: Database session
            column_orders: Mapping of column id to its new order

        Returns:
            True if every column was updated. When any id has no row the
            whole transaction is rolled back and False is returned.
        """
        current_time = datetime.utcnow()
        try:
            for column_id, new_order in column_orders.items():
                stmt = update(Column).where(
                    Column.id == column_id
                ).values(order=new_order, updated_at=current_time)
                result = await db.execute(stmt)
                if result.rowcount == 0:
                    await db.rollback()
                    debug_logger.warning(f"Reorder aborted, column {column_id} not found")
                    return False

            await db.commit()
        except Exception:
            await db.rollback()
            raise

        debug_logger.info(f"Columns reordered: {column_orders}")
        return True

    @staticmethod
    async def get_many(
        db: AsyncSession,
        column_ids: List[str]
    ) -> List[Column]:
        """Columns with the given ids, sorted by order"""
        query = select(Column).where(Column.id.in_(column_ids)).order_by(Column.order)
        result = await db.execute(_with_tasks(query).execution_options(populate_existing=True))
        return list(result.scalars().all())
