import pytest
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock, patch
from fastapi import HTTPException, status
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from pulse.api.routes.projects import create_project, update_project, delete_project
from pulse.models.activity import ActivityType
from pulse.models.project import Project, ProjectStatus
from pulse.models.user import User
from pulse.schemas.project import ProjectCreate, ProjectUpdate, ProjectResponse
from pulse.services.column_service import ColumnService
from pulse.services.progress_service import ProgressService
from pulse.services.project_service import ProjectService


@pytest.fixture
def mock_db():
    return AsyncMock(spec=AsyncSession)


@pytest.fixture
def member_user():
    user = MagicMock(spec=User)
    user.id = 1
    user.is_admin = False
    return user


@pytest.fixture
def mock_project():
    project = MagicMock(spec=Project)
    project.id = 10
    project.name = "Launch"
    project.owner_id = 2
    project.progress = 0
    project.status = ProjectStatus.STARTED
    return project


class TestProjectSchemas:
    """Due date parsing"""

    def test_utc_suffix_is_accepted(self):
        project = ProjectCreate(name="Launch", dueDate="2026-12-01T09:30:00Z")

        assert project.due_date == datetime(2026, 12, 1, 9, 30)

    def test_invalid_date_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            ProjectCreate(name="Launch", dueDate="next friday")

        assert "Invalid date format" in str(exc_info.value)

    def test_empty_string_clears_due_date(self):
        update = ProjectUpdate(dueDate="")

        assert update.model_dump(exclude_unset=True) == {"due_date": ""}

    def test_progress_bounds(self):
        with pytest.raises(ValidationError):
            ProjectUpdate(progress=101)

    def test_response_exposes_task_counts(self):
        project = Project(id=1, name="Launch", progress=13, status=ProjectStatus.STARTED)

        data = ProjectResponse.model_validate(project).model_dump(by_alias=True)

        assert data["tasks"] == {"completed": 0, "total": 0}
        assert data["progress"] == 13


class TestCreateProject:
    """Tests for the create_project endpoint"""

    @pytest.mark.asyncio
    async def test_create_project_records_activity(self, mock_db, member_user, mock_project):
        with patch('pulse.api.routes.projects.ProjectService.create', new_callable=AsyncMock, return_value=mock_project) as mock_create, \
             patch('pulse.api.routes.projects.ActivityService.record', new_callable=AsyncMock) as mock_record:

            result = await create_project(ProjectCreate(name="Launch"), mock_db, member_user)

        assert mock_create.await_args.kwargs["owner_id"] == member_user.id
        assert mock_create.await_args.kwargs["due_date"] is None
        mock_record.assert_awaited_once_with(
            mock_db,
            ActivityType.PROJECT_CREATED,
            'User created project "Launch"',
            user_id=1,
            project_id=10,
        )
        assert result["data"] is mock_project

    @pytest.mark.asyncio
    async def test_create_project_unknown_owner(self, mock_db, member_user):
        with patch('pulse.api.routes.projects.UserService.get_by_id', new_callable=AsyncMock, return_value=None) as mock_lookup, \
             patch('pulse.api.routes.projects.ProjectService.create', new_callable=AsyncMock) as mock_create:

            with pytest.raises(HTTPException) as exc_info:
                await create_project(ProjectCreate(name="P", ownerId=999), mock_db, member_user)

        assert exc_info.value.status_code == status.HTTP_404_NOT_FOUND
        assert exc_info.value.detail == "User not found"
        mock_lookup.assert_awaited_once_with(mock_db, 999)
        mock_create.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_project_known_owner(self, mock_db, member_user, mock_project):
        owner = MagicMock(spec=User)

        with patch('pulse.api.routes.projects.UserService.get_by_id', new_callable=AsyncMock, return_value=owner), \
             patch('pulse.api.routes.projects.ProjectService.create', new_callable=AsyncMock, return_value=mock_project) as mock_create, \
             patch('pulse.api.routes.projects.ActivityService.record', new_callable=AsyncMock):

            await create_project(ProjectCreate(name="Launch", ownerId=2), mock_db, member_user)

        assert mock_create.await_args.kwargs["owner_id"] == 2

    @pytest.mark.asyncio
    async def test_service_creates_default_board(self, mock_db, mock_project):
        with patch.object(ColumnService, 'create_defaults', new_callable=AsyncMock) as mock_defaults, \
             patch.object(ProjectService, 'get_by_id', new_callable=AsyncMock, return_value=mock_project):

            await ProjectService.create(mock_db, name="Launch", owner_id=1)

        added = mock_db.add.call_args.args[0]
        assert added.progress == 0
        assert added.status == ProjectStatus.STARTED
        mock_defaults.assert_awaited_once()
        mock_db.commit.assert_awaited_once()


class TestUpdateProject:
    """Progress is derived from tasks unless the client sets it"""

    @pytest.mark.asyncio
    async def test_update_without_progress_recalculates(self, mock_db, mock_project):
        with patch.object(ProgressService, 'recalculate', new_callable=AsyncMock) as mock_recalculate, \
             patch.object(ProjectService, 'get_by_id', new_callable=AsyncMock, return_value=mock_project):

            await ProjectService.update(mock_db, mock_project, {"name": "Launch v2"})

        mock_recalculate.assert_awaited_once_with(mock_db, 10)
        assert mock_project.name == "Launch v2"
        assert mock_project.status == ProjectStatus.STARTED

    @pytest.mark.asyncio
    async def test_explicit_progress_is_kept(self, mock_db, mock_project):
        with patch.object(ProgressService, 'recalculate', new_callable=AsyncMock) as mock_recalculate, \
             patch.object(ProjectService, 'get_by_id', new_callable=AsyncMock, return_value=mock_project):

            await ProjectService.update(mock_db, mock_project, {"progress": 0})

        mock_recalculate.assert_not_called()
        assert mock_project.progress == 0

    @pytest.mark.asyncio
    async def test_empty_due_date_clears_it(self, mock_db, mock_project):
        mock_project.due_date = datetime(2026, 1, 1)

        with patch.object(ProgressService, 'recalculate', new_callable=AsyncMock), \
             patch.object(ProjectService, 'get_by_id', new_callable=AsyncMock, return_value=mock_project):

            await ProjectService.update(mock_db, mock_project, {"due_date": ""})

        assert mock_project.due_date is None

    @pytest.mark.asyncio
    async def test_update_route_records_activity(self, mock_db, member_user, mock_project):
        with patch('pulse.api.routes.projects.ProjectService.get_by_id', new_callable=AsyncMock, return_value=mock_project), \
             patch('pulse.api.routes.projects.ProjectService.update', new_callable=AsyncMock, return_value=mock_project) as mock_update, \
             patch('pulse.api.routes.projects.ActivityService.record', new_callable=AsyncMock) as mock_record:

            await update_project(10, ProjectUpdate(status="On track"), mock_db, member_user)

        assert mock_update.await_args.args[2] == {"status": ProjectStatus.ON_TRACK}
        assert mock_record.await_args.args[1] == ActivityType.PROJECT_UPDATED

    @pytest.mark.asyncio
    async def test_update_project_unknown_owner(self, mock_db, member_user, mock_project):
        with patch('pulse.api.routes.projects.ProjectService.get_by_id', new_callable=AsyncMock, return_value=mock_project), \
             patch('pulse.api.routes.projects.UserService.get_by_id', new_callable=AsyncMock, return_value=None), \
             patch('pulse.api.routes.projects.ProjectService.update', new_callable=AsyncMock) as mock_update:

            with pytest.raises(HTTPException) as exc_info:
                await update_project(10, ProjectUpdate(ownerId=999), mock_db, member_user)

        assert exc_info.value.status_code == status.HTTP_404_NOT_FOUND
        assert exc_info.value.detail == "User not found"
        mock_update.assert_not_called()

    @pytest.mark.asyncio
    async def test_update_without_owner_skips_lookup(self, mock_db, member_user, mock_project):
        with patch('pulse.api.routes.projects.ProjectService.get_by_id', new_callable=AsyncMock, return_value=mock_project), \
             patch('pulse.api.routes.projects.UserService.get_by_id', new_callable=AsyncMock) as mock_lookup, \
             patch('pulse.api.routes.projects.ProjectService.update', new_callable=AsyncMock, return_value=mock_project), \
             patch('pulse.api.routes.projects.ActivityService.record', new_callable=AsyncMock):

            await update_project(10, ProjectUpdate(name="Launch v2"), mock_db, member_user)

        mock_lookup.assert_not_called()


class TestDeleteProject:
    """Only the owner or an admin may delete"""

    @pytest.mark.asyncio
    async def test_delete_by_other_member_forbidden(self, mock_db, member_user, mock_project):
        with patch('pulse.api.routes.projects.ProjectService.get_by_id', new_callable=AsyncMock, return_value=mock_project), \
             patch('pulse.api.routes.projects.ProjectService.delete', new_callable=AsyncMock) as mock_delete:

            with pytest.raises(HTTPException) as exc_info:
                await delete_project(10, mock_db, member_user)

        assert exc_info.value.status_code == status.HTTP_403_FORBIDDEN
        mock_delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_by_owner(self, mock_db, member_user, mock_project):
        mock_project.owner_id = member_user.id

        with patch('pulse.api.routes.projects.ProjectService.get_by_id', new_callable=AsyncMock, return_value=mock_project), \
             patch('pulse.api.routes.projects.ProjectService.delete', new_callable=AsyncMock, return_value=True) as mock_delete:

            result = await delete_project(10, mock_db, member_user)

        mock_delete.assert_awaited_once_with(mock_db, 10)
        assert result["success"] is True

    @pytest.mark.asyncio
    async def test_delete_by_admin(self, mock_db, member_user, mock_project):
        member_user.is_admin = True

        with patch('pulse.api.routes.projects.ProjectService.get_by_id', new_callable=AsyncMock, return_value=mock_project), \
             patch('pulse.api.routes.projects.ProjectService.delete', new_callable=AsyncMock, return_value=True) as mock_delete:

            await delete_project(10, mock_db, member_user)

        mock_delete.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_delete_missing_project(self, mock_db, member_user):
        with patch('pulse.api.routes.projects.ProjectService.get_by_id', new_callable=AsyncMock, return_value=None):

            with pytest.raises(HTTPException) as exc_info:
                await delete_project(10, mock_db, member_user)

        assert exc_info.value.status_code == status.HTTP_404_NOT_FOUND
