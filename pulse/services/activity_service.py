from typing import List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from pulse.models.activity import Activity, ActivityType
from pulse.logs import debug_logger

DESCRIPTION_TEMPLATES = {
    ActivityType.TASK_CREATED: 'Task "{title}" was created',
    ActivityType.TASK_UPDATED: 'Task "{title}" was updated',
    ActivityType.TASK_COMPLETED: 'Task "{title}" was completed',
    ActivityType.PROJECT_CREATED: 'User created project "{name}"',
    ActivityType.PROJECT_UPDATED: 'Project "{name}" was updated',
    ActivityType.MEMBER_ADDED: 'Team member "{name}" was added',
    ActivityType.MEMBER_UPDATED: 'Team member "{name}" was updated',
}


def describe(activity_type: ActivityType, **values) -> str:
    """Human readable description for an activity type"""
    return DESCRIPTION_TEMPLATES[activity_type].format(**values)


def _with_relations(query):
    return query.options(
        selectinload(Activity.user),
        selectinload(Activity.project),
        selectinload(Activity.task),
    )


class ActivityService:
    """Append-only activity feed"""

    @staticmethod
    async def record(
        db: AsyncSession,
        activity_type: ActivityType,
        description: str,
        user_id: Optional[int] = None,
        project_id: Optional[int] = None,
        task_id: Optional[str] = None
    ) -> Optional[Activity]:
        """Append an activity entry after a committed mutation.

        Best effort: the insert runs in a savepoint, so a failing insert is
        logged and rolled back on its own and None is returned. Objects the
        caller already loaded stay usable.
        """
        activity = Activity(
            type=activity_type.value,
            description=description,
            user_id=user_id,
            project_id=project_id,
            task_id=task_id,
        )
        try:
            async with db.begin_nested():
                db.add(activity)
        except SQLAlchemyError:
            debug_logger.error(f"Failed to record activity {activity_type.value}: {description}")
            return None

        await db.commit()
        debug_logger.debug(f"Activity recorded: {activity_type.value} - {description}")
        return activity

    @staticmethod
    async def get_by_id(
        db: AsyncSession,
        activity_id: int
    ) -> Optional[Activity]:
        query = _with_relations(select(Activity).where(Activity.id == activity_id))
        result = await db.execute(query)
        return result.scalars().first()

    @staticmethod
    async def get_list(
        db: AsyncSession,
        project_id: Optional[int] = None,
        task_id: Optional[str] = None,
        user_id: Optional[int] = None,
        activity_type: Optional[str] = None,
        limit: int = 50,
        offset: int = 0
    ) -> Tuple[List[Activity], int]:
        """Filtered page of activities, newest first, with the total count"""
        filters = []
        if project_id is not None:
            filters.append(Activity.project_id == project_id)
        if task_id is not None:
            filters.append(Activity.task_id == task_id)
        if user_id is not None:
            filters.append(Activity.user_id == user_id)
        if activity_type is not None:
            filters.append(Activity.type == activity_type)

        query = _with_relations(
            select(Activity)
            .where(*filters)
            .order_by(Activity.created_at.desc(), Activity.id.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await db.execute(query)
        activities = list(result.scalars().all())

        count_query = select(func.count(Activity.id)).where(*filters)
        total = (await db.execute(count_query)).scalar() or 0

        return activities, total

    @staticmethod
    async def get_recent(
        db: AsyncSession,
        limit: int = 20
    ) -> List[Activity]:
        """Latest activities across all projects"""
        query = _with_relations(
            select(Activity)
            .order_by(Activity.created_at.desc(), Activity.id.desc())
            .limit(limit)
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def get_for_task(
        db: AsyncSession,
        task_id: str,
        limit: int = 10
    ) -> List[Activity]:
        activities, _ = await ActivityService.get_list(db, task_id=task_id, limit=limit)
        return activities
