import pytest
from uuid import uuid4
from unittest.mock import AsyncMock, MagicMock, patch
from fastapi import HTTPException, status
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from pulse.api.routes.columns import (
    get_columns,
    create_column,
    update_column,
    delete_column,
    reorder_columns,
)
from pulse.models.column import Column, DEFAULT_COLUMN_COLOR
from pulse.models.user import User
from pulse.schemas.column import ColumnCreate, ColumnUpdate, ColumnReorder
from pulse.services.column_service import ColumnService, DEFAULT_PROJECT_COLUMNS


@pytest.fixture
def mock_db():
    return AsyncMock(spec=AsyncSession)


@pytest.fixture
def current_user():
    user = MagicMock(spec=User)
    user.id = 1
    return user


@pytest.fixture
def mock_column():
    column = MagicMock(spec=Column)
    column.id = str(uuid4())
    column.title = "Review"
    column.color = "#f59e0b"
    column.project_id = 1
    column.order = 2
    return column


class TestReorderColumns:
    """Tests for the reorder_columns endpoint"""

    @pytest.fixture
    def column_ids(self):
        return [uuid4(), uuid4(), uuid4()]

    @pytest.fixture
    def column_order_data(self, column_ids):
        return ColumnReorder(columns=[
            {"id": column_ids[0], "order": 2},
            {"id": column_ids[1], "order": 0},
            {"id": column_ids[2], "order": 1},
        ])

    @pytest.mark.asyncio
    async def test_reorder_columns_success(self, mock_db, current_user, column_ids, column_order_data):
        """Columns come back sorted after a successful reorder"""
        mock_columns = [MagicMock(spec=Column) for _ in range(3)]

        with patch('pulse.api.routes.columns.ColumnService.reorder_columns', new_callable=AsyncMock, return_value=True) as mock_reorder, \
             patch('pulse.api.routes.columns.ColumnService.get_many', new_callable=AsyncMock, return_value=mock_columns) as mock_get:

            result = await reorder_columns(column_order_data, mock_db, current_user)

        expected_orders = {
            str(column_ids[0]): 2,
            str(column_ids[1]): 0,
            str(column_ids[2]): 1,
        }
        mock_reorder.assert_awaited_once_with(db=mock_db, column_orders=expected_orders)
        mock_get.assert_awaited_once_with(mock_db, list(expected_orders))
        assert result["data"] == mock_columns
        assert result["message"] == "Columns reordered successfully"

    @pytest.mark.asyncio
    async def test_reorder_columns_unknown_id(self, mock_db, current_user, column_order_data):
        """A missing column aborts the reorder with 404"""
        with patch('pulse.api.routes.columns.ColumnService.reorder_columns', new_callable=AsyncMock, return_value=False), \
             patch('pulse.api.routes.columns.ColumnService.get_many', new_callable=AsyncMock) as mock_get:

            with pytest.raises(HTTPException) as exc_info:
                await reorder_columns(column_order_data, mock_db, current_user)

        assert exc_info.value.status_code == status.HTTP_404_NOT_FOUND
        mock_get.assert_not_called()

    def test_reorder_requires_entries(self):
        with pytest.raises(ValueError):
            ColumnReorder(columns=[])


class TestColumnServiceReorder:
    """ColumnService.reorder_columns is all or nothing"""

    @pytest.mark.asyncio
    async def test_all_rows_updated_commits(self, mock_db):
        mock_db.execute.return_value = MagicMock(rowcount=1)

        result = await ColumnService.reorder_columns(mock_db, {"a": 1, "b": 0})

        assert result is True
        assert mock_db.execute.await_count == 2
        mock_db.commit.assert_awaited_once()
        mock_db.rollback.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_row_rolls_back(self, mock_db):
        mock_db.execute.side_effect = [MagicMock(rowcount=1), MagicMock(rowcount=0)]

        result = await ColumnService.reorder_columns(mock_db, {"a": 1, "missing": 0})

        assert result is False
        mock_db.rollback.assert_awaited_once()
        mock_db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_database_error_rolls_back_and_raises(self, mock_db):
        mock_db.execute.side_effect = OperationalError("UPDATE columns", {}, Exception("gone"))

        with pytest.raises(OperationalError):
            await ColumnService.reorder_columns(mock_db, {"a": 1})

        mock_db.rollback.assert_awaited_once()


class TestCreateColumn:
    """Tests for the create_column endpoint"""

    @pytest.mark.asyncio
    async def test_create_column_success(self, mock_db, current_user, mock_column):
        column_create = ColumnCreate(title="Review", projectId=1, color="#f59e0b")

        with patch('pulse.api.routes.columns.ProjectService.exists', new_callable=AsyncMock, return_value=True), \
             patch('pulse.api.routes.columns.ColumnService.create', new_callable=AsyncMock, return_value=mock_column) as mock_create:

            result = await create_column(column_create, mock_db, current_user)

        mock_create.assert_awaited_once_with(
            db=mock_db,
            title="Review",
            project_id=1,
            color="#f59e0b",
            order=None
        )
        assert result["data"] == mock_column

    @pytest.mark.asyncio
    async def test_create_column_unknown_project(self, mock_db, current_user):
        column_create = ColumnCreate(title="Review", projectId=42)

        with patch('pulse.api.routes.columns.ProjectService.exists', new_callable=AsyncMock, return_value=False), \
             patch('pulse.api.routes.columns.ColumnService.create', new_callable=AsyncMock) as mock_create:

            with pytest.raises(HTTPException) as exc_info:
                await create_column(column_create, mock_db, current_user)

        assert exc_info.value.status_code == status.HTTP_404_NOT_FOUND
        mock_create.assert_not_called()

    def test_color_must_be_hex(self):
        with pytest.raises(ValueError):
            ColumnCreate(title="Review", color="orange")

    @pytest.mark.asyncio
    async def test_service_appends_with_default_color(self, mock_db, mock_column):
        with patch.object(ColumnService, 'next_order', new_callable=AsyncMock, return_value=4), \
             patch.object(ColumnService, 'get_by_id', new_callable=AsyncMock, return_value=mock_column):

            await ColumnService.create(mock_db, title="Blocked", project_id=1)

        added = mock_db.add.call_args.args[0]
        assert added.order == 4
        assert added.color == DEFAULT_COLUMN_COLOR
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_first_column_gets_order_zero(self, mock_db):
        result = MagicMock()
        result.scalar.return_value = None
        mock_db.execute.return_value = result

        assert await ColumnService.next_order(mock_db, 1) == 0

    @pytest.mark.asyncio
    async def test_next_order_follows_last_column(self, mock_db):
        result = MagicMock()
        result.scalar.return_value = 3
        mock_db.execute.return_value = result

        assert await ColumnService.next_order(mock_db, 1) == 4

    @pytest.mark.asyncio
    async def test_default_board_columns(self, mock_db):
        await ColumnService.create_defaults(mock_db, 9)

        added = [c.args[0] for c in mock_db.add.call_args_list]
        assert [c.title for c in added] == ["To Do", "In Progress", "Review", "Done"]
        assert [c.order for c in added] == [0, 1, 2, 3]
        assert all(c.project_id == 9 for c in added)
        assert len(DEFAULT_PROJECT_COLUMNS) == 4
        mock_db.commit.assert_not_called()


class TestGetColumns:
    """Tests for the get_columns endpoint"""

    @pytest.mark.asyncio
    async def test_get_columns_for_project(self, mock_db, current_user, mock_column):
        with patch('pulse.api.routes.columns.ColumnService.get_list', new_callable=AsyncMock, return_value=[mock_column]) as mock_get:

            result = await get_columns(1, mock_db, current_user)

        mock_get.assert_awaited_once_with(mock_db, project_id=1)
        assert result["data"] == [mock_column]


class TestUpdateColumn:
    """Tests for the update_column endpoint"""

    @pytest.mark.asyncio
    async def test_update_column_not_found(self, mock_db, current_user):
        with patch('pulse.api.routes.columns.ColumnService.get_by_id', new_callable=AsyncMock, return_value=None):

            with pytest.raises(HTTPException) as exc_info:
                await update_column(uuid4(), ColumnUpdate(title="Doing"), mock_db, current_user)

        assert exc_info.value.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_update_column_success(self, mock_db, current_user, mock_column):
        column_id = uuid4()

        with patch('pulse.api.routes.columns.ColumnService.get_by_id', new_callable=AsyncMock, return_value=mock_column), \
             patch('pulse.api.routes.columns.ColumnService.update', new_callable=AsyncMock, return_value=mock_column) as mock_update:

            await update_column(column_id, ColumnUpdate(title="Doing"), mock_db, current_user)

        mock_update.assert_awaited_once_with(
            db=mock_db,
            column_id=str(column_id),
            title="Doing",
            color=None,
            order=None
        )


class TestDeleteColumn:
    """Tests for the delete_column endpoint"""

    @pytest.mark.asyncio
    async def test_delete_column_with_tasks(self, mock_db, current_user, mock_column):
        """A column that still holds tasks is kept"""
        with patch('pulse.api.routes.columns.ColumnService.get_by_id', new_callable=AsyncMock, return_value=mock_column), \
             patch('pulse.api.routes.columns.ColumnService.count_tasks', new_callable=AsyncMock, return_value=2), \
             patch('pulse.api.routes.columns.ColumnService.delete', new_callable=AsyncMock) as mock_delete:

            with pytest.raises(HTTPException) as exc_info:
                await delete_column(uuid4(), mock_db, current_user)

        assert exc_info.value.status_code == status.HTTP_400_BAD_REQUEST
        assert exc_info.value.detail == "Cannot delete column with tasks. Please move or delete tasks first."
        mock_delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_empty_column(self, mock_db, current_user, mock_column):
        column_id = uuid4()

        with patch('pulse.api.routes.columns.ColumnService.get_by_id', new_callable=AsyncMock, return_value=mock_column), \
             patch('pulse.api.routes.columns.ColumnService.count_tasks', new_callable=AsyncMock, return_value=0), \
             patch('pulse.api.routes.columns.ColumnService.delete', new_callable=AsyncMock, return_value=True) as mock_delete:

            result = await delete_column(column_id, mock_db, current_user)

        mock_delete.assert_awaited_once_with(db=mock_db, column_id=str(column_id))
        assert result == {"success": True, "message": "Column deleted successfully", "data": None}

    @pytest.mark.asyncio
    async def test_delete_column_not_found(self, mock_db, current_user):
        with patch('pulse.api.routes.columns.ColumnService.get_by_id', new_callable=AsyncMock, return_value=None):

            with pytest.raises(HTTPException) as exc_info:
                await delete_column(uuid4(), mock_db, current_user)

        assert exc_info.value.status_code == status.HTTP_404_NOT_FOUND
