from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from pulse.db.database import get_async_session
from pulse.api.dependencies.auth import get_current_active_user
from pulse.models.user import User
from pulse.schemas.column import (
    ColumnCreate,
    ColumnResponse,
    ColumnUpdate,
    ColumnReorder,
)
from pulse.schemas.response import ApiResponse, ok
from pulse.services.column_service import ColumnService
from pulse.services.project_service import ProjectService

router = APIRouter(
    prefix="/columns",
    tags=["columns"],
)


@router.get("", response_model=ApiResponse[List[ColumnResponse]])
async def get_columns(
    project_id: Optional[int] = Query(None, alias="projectId"),
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_active_user),
):
    """Get columns with their tasks, ordered left to right"""
    columns = await ColumnService.get_list(db, project_id=project_id)
    return ok(columns, "Columns retrieved successfully")


# Declared before "/{column_id}" so "reorder" is not taken for an id
@router.patch("/reorder", response_model=ApiResponse[List[ColumnResponse]])
async def reorder_columns(
    column_order: ColumnReorder,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_active_user),
):
    """Set the order of several columns atomically"""
    column_orders = {str(item.id): item.order for item in column_order.columns}

    success = await ColumnService.reorder_columns(db=db, column_orders=column_orders)
    if not success:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Column not found"
        )

    columns = await ColumnService.get_many(db, list(column_orders))
    return ok(columns, "Columns reordered successfully")


@router.get("/{column_id}", response_model=ApiResponse[ColumnResponse])
async def get_column(
    column_id: UUID,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_active_user),
):
    """Get a specific column by ID"""
    column = await ColumnService.get_by_id(db=db, column_id=str(column_id), load_tasks=True)
    if not column:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Column not found"
        )
    return ok(column, "Column retrieved successfully")


@router.post("", response_model=ApiResponse[ColumnResponse], status_code=status.HTTP_201_CREATED)
async def create_column(
    column_create: ColumnCreate,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_active_user),
):
    """Create a new column"""
    if column_create.project_id is not None and not await ProjectService.exists(db, column_create.project_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Project not found"
        )

    column = await ColumnService.create(
        db=db,
        title=column_create.title,
        project_id=column_create.project_id,
        color=column_create.color,
        order=column_create.order
    )
    return ok(column, "Column created successfully")


@router.patch("/{column_id}", response_model=ApiResponse[ColumnResponse])
async def update_column(
    column_id: UUID,
    column_update: ColumnUpdate,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_active_user),
):
    """Update a column"""
    column = await ColumnService.get_by_id(db=db, column_id=str(column_id))
    if not column:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Column not found"
        )

    updated_column = await ColumnService.update(
        db=db,
        column_id=str(column_id),
        title=column_update.title,
        color=column_update.color,
        order=column_update.order
    )
    return ok(updated_column, "Column updated successfully")


@router.delete("/{column_id}", response_model=ApiResponse[None])
async def delete_column(
    column_id: UUID,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_active_user),
):
    """Delete an empty column"""
    column = await ColumnService.get_by_id(db=db, column_id=str(column_id))
    if not column:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Column not found"
        )

    if await ColumnService.count_tasks(db, str(column_id)) > 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete column with tasks. Please move or delete tasks first."
        )

    await ColumnService.delete(db=db, column_id=str(column_id))
    return ok(None, "Column deleted successfully")
