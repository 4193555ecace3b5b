"""Tests for ProjectService."""
import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock


NOW = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


def make_db():
    mock_db = MagicMock()
    collections = {
        "projects": AsyncMock(),
        "clients": AsyncMock(),
        "counters": AsyncMock(),
    }
    collections["counters"].find_one_and_update.return_value = {"_id": "projects", "seq": 2}
    mock_db.__getitem__.side_effect = lambda key: collections[key]
    return mock_db, collections


@pytest.mark.asyncio
class TestProjectServiceCreate:
    """Tests for project creation."""

    async def test_create_project_success(self):
        """Creating a project under an existing client."""
        from app.models.project import ProjectCreate
        from app.services.project_service import ProjectService

        mock_db, collections = make_db()
        collections["clients"].find_one.return_value = {"_id": 1, "name": "Acme", "archived": False}

        service = ProjectService(mock_db)
        project = await service.create_project(ProjectCreate(client_id=1, name="Website"))

        assert project.id == 2
        assert project.client_id == 1
        assert project.name == "Website"
        assert project.archived is False
        collections["clients"].find_one.assert_called_once_with({"_id": 1, "archived": False})
        collections["counters"].find_one_and_update.assert_called_once()

    async def test_create_project_unknown_client(self):
        """Projects need a live client."""
        from app.models.project import ProjectCreate
        from app.services.project_service import ProjectService

        mock_db, collections = make_db()
        collections["clients"].find_one.return_value = None

        service = ProjectService(mock_db)

        with pytest.raises(ValueError, match="Client not found"):
            await service.create_project(ProjectCreate(client_id=9, name="Website"))
        collections["projects"].insert_one.assert_not_called()

    async def test_create_project_rejects_blank_name(self):
        """Names must be non-empty."""
        from pydantic import ValidationError
        from app.models.project import ProjectCreate

        with pytest.raises(ValidationError):
            ProjectCreate(client_id=1, name="")


@pytest.mark.asyncio
class TestProjectServiceList:
    """Tests for listing projects."""

    async def test_list_projects_by_client(self):
        """Client filter and archived exclusion are applied."""
        from app.services.project_service import ProjectService

        mock_db = MagicMock()
        mock_projects = MagicMock()
        mock_db.__getitem__.return_value = mock_projects

        mock_cursor = MagicMock()
        mock_cursor.sort.return_value = mock_cursor
        mock_cursor.to_list = AsyncMock(return_value=[
            {
                "_id": 2,
                "client_id": 1,
                "name": "Website",
                "archived": False,
                "created_at": NOW,
                "updated_at": NOW,
            },
        ])
        mock_projects.find.return_value = mock_cursor

        service = ProjectService(mock_db)
        projects = await service.list_projects(client_id=1)

        assert [p.name for p in projects] == ["Website"]
        assert mock_projects.find.call_args[0][0] == {"archived": False, "client_id": 1}
        mock_cursor.sort.assert_called_once_with("name", 1)


@pytest.mark.asyncio
class TestProjectServiceUpdate:
    """Tests for project updates."""

    async def test_archive_project(self):
        """Only supplied fields are written."""
        from app.models.project import ProjectUpdate
        from app.services.project_service import ProjectService

        mock_db, collections = make_db()
        collections["projects"].find_one_and_update.return_value = {
            "_id": 2,
            "client_id": 1,
            "name": "Website",
            "archived": True,
            "created_at": NOW,
            "updated_at": NOW,
        }

        service = ProjectService(mock_db)
        project = await service.update_project(2, ProjectUpdate(archived=True))

        assert project.archived is True
        update = collections["projects"].find_one_and_update.call_args[0][1]["$set"]
        assert update["archived"] is True
        assert "name" not in update

    async def test_update_missing_project(self):
        """Unknown projects raise NotFoundError."""
        from app.exceptions import NotFoundError
        from app.models.project import ProjectUpdate
        from app.services.project_service import ProjectService

        mock_db, collections = make_db()
        collections["projects"].find_one_and_update.return_value = None

        service = ProjectService(mock_db)

        with pytest.raises(NotFoundError, match="Project not found"):
            await service.update_project(2, ProjectUpdate(name="New"))

    async def test_get_project_missing(self):
        """get_project returns None for unknown ids."""
        from app.services.project_service import ProjectService

        mock_db, collections = make_db()
        collections["projects"].find_one.return_value = None

        service = ProjectService(mock_db)

        assert await service.get_project(2) is None
