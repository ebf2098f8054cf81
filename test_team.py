import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from pulse.api.routes.team import create_team_member, update_team_member
from pulse.models.activity import ActivityType
from pulse.models.team import TeamMember
from pulse.models.user import User, UserStatus, make_initials
from pulse.schemas.team import TeamMemberCreate, TeamMemberUpdate
from pulse.services.team_service import TeamService


class TestInitials:

    @pytest.mark.parametrize("name,expected", [
        ("Ada Lovelace", "AL"),
        ("grace brewster hopper", "GB"),
        ("Linus", "L"),
        ("  Alan   Turing ", "AT"),
    ])
    def test_make_initials(self, name, expected):
        assert make_initials(name) == expected


class TestTeamEndpoints:
    """Tests for the team roster endpoints"""

    @pytest.fixture
    def mock_db(self):
        return AsyncMock(spec=AsyncSession)

    @pytest.fixture
    def current_user(self):
        user = MagicMock(spec=User)
        user.id = 1
        return user

    @pytest.fixture
    def mock_member(self):
        member = MagicMock(spec=TeamMember)
        member.id = 3
        member.name = "Ada Lovelace"
        member.email = "ada@pulse.dev"
        return member

    @pytest.mark.asyncio
    async def test_create_member_records_activity(self, mock_db, current_user, mock_member):
        member_create = TeamMemberCreate(name="Ada Lovelace", role="Engineer", email="ada@pulse.dev")

        with patch('pulse.api.routes.team.TeamService.get_by_email', new_callable=AsyncMock, return_value=None), \
             patch('pulse.api.routes.team.TeamService.create', new_callable=AsyncMock, return_value=mock_member), \
             patch('pulse.api.routes.team.ActivityService.record', new_callable=AsyncMock) as mock_record:

            result = await create_team_member(member_create, mock_db, current_user)

        mock_record.assert_awaited_once_with(
            mock_db,
            ActivityType.MEMBER_ADDED,
            'Team member "Ada Lovelace" was added',
            user_id=1,
        )
        assert result["data"] is mock_member

    @pytest.mark.asyncio
    async def test_create_member_duplicate_email(self, mock_db, current_user, mock_member):
        member_create = TeamMemberCreate(name="Ada Lovelace", role="Engineer", email="ada@pulse.dev")

        with patch('pulse.api.routes.team.TeamService.get_by_email', new_callable=AsyncMock, return_value=mock_member), \
             patch('pulse.api.routes.team.TeamService.create', new_callable=AsyncMock) as mock_create:

            with pytest.raises(HTTPException) as exc_info:
                await create_team_member(member_create, mock_db, current_user)

        assert exc_info.value.status_code == status.HTTP_409_CONFLICT
        mock_create.assert_not_called()

    @pytest.mark.asyncio
    async def test_update_member_to_taken_email(self, mock_db, current_user, mock_member):
        other = MagicMock(spec=TeamMember)

        with patch('pulse.api.routes.team.TeamService.get_by_id', new_callable=AsyncMock, return_value=mock_member), \
             patch('pulse.api.routes.team.TeamService.get_by_email', new_callable=AsyncMock, return_value=other), \
             patch('pulse.api.routes.team.TeamService.update', new_callable=AsyncMock) as mock_update:

            with pytest.raises(HTTPException) as exc_info:
                await update_team_member(3, TeamMemberUpdate(email="grace@pulse.dev"), mock_db, current_user)

        assert exc_info.value.status_code == status.HTTP_409_CONFLICT
        mock_update.assert_not_called()

    @pytest.mark.asyncio
    async def test_update_member_keeping_own_email(self, mock_db, current_user, mock_member):
        with patch('pulse.api.routes.team.TeamService.get_by_id', new_callable=AsyncMock, return_value=mock_member), \
             patch('pulse.api.routes.team.TeamService.get_by_email', new_callable=AsyncMock) as mock_lookup, \
             patch('pulse.api.routes.team.TeamService.update', new_callable=AsyncMock, return_value=mock_member), \
             patch('pulse.api.routes.team.ActivityService.record', new_callable=AsyncMock) as mock_record:

            await update_team_member(3, TeamMemberUpdate(email="ada@pulse.dev", role="Lead"), mock_db, current_user)

        mock_lookup.assert_not_called()
        assert mock_record.await_args.args[1] == ActivityType.MEMBER_UPDATED

    @pytest.mark.asyncio
    async def test_update_missing_member(self, mock_db, current_user):
        with patch('pulse.api.routes.team.TeamService.get_by_id', new_callable=AsyncMock, return_value=None):

            with pytest.raises(HTTPException) as exc_info:
                await update_team_member(3, TeamMemberUpdate(role="Lead"), mock_db, current_user)

        assert exc_info.value.status_code == status.HTTP_404_NOT_FOUND


class TestTeamService:

    @pytest.mark.asyncio
    async def test_create_fills_defaults(self):
        mock_db = AsyncMock(spec=AsyncSession)

        member = await TeamService.create(mock_db, name="Grace Hopper", role="Engineer", email="grace@pulse.dev")

        assert member.initials == "GH"
        assert member.status == UserStatus.ACTIVE
        assert member.tasks_completed == 0
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_rename_updates_initials(self):
        mock_db = AsyncMock(spec=AsyncSession)
        member = TeamMember(name="Grace Hopper", role="Engineer", email="grace@pulse.dev", initials="GH")

        await TeamService.update(mock_db, member, {"name": "Ada Lovelace", "role": None})

        assert member.initials == "AL"
        assert member.role == "Engineer"
