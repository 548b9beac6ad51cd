"""
Tests for project service operations.

Covers:
- Project creation, listing, update and archiving
- Collaborator add, replace and removal
- Archived projects hidden from permission-checked lookups
"""
import pytest
from pydantic import ValidationError

from storyboard_api.exceptions import BadRequestError, ForbiddenError, NotFoundError
from storyboard_api.schemas.project import CollaboratorIn, ProjectCreate, ProjectUpdate
from storyboard_api.services import project_service
from tests.conftest import FakeSession, OTHER_USER_ID, OWNER_ID


class TestProjectLifecycle:

    async def test_create_sets_owner_and_defaults(self, fake_session):
        data = ProjectCreate(title="Harbour Lights")
        project = await project_service.create_project(fake_session, OWNER_ID, data)

        assert fake_session.added == [project]
        assert project.owner_id == OWNER_ID
        assert project.type == "short-film"
        assert project.status == "planning"
        assert project.is_archived is False
        assert project.collaborators == []
        assert project.id is not None

    async def test_list_returns_rows_and_filters_archived(self, make_project):
        projects = [make_project(), make_project(title="Second Unit")]
        session = FakeSession(rows=projects)

        result = await project_service.list_user_projects(session, OWNER_ID, limit=10)

        assert result == projects
        sql = str(session.statements[0])
        assert "is_archived" in sql
        assert "owner_id" in sql

    async def test_update_only_touches_sent_fields(self, make_project, fake_session):
        project = make_project(description="Old logline")
        update = ProjectUpdate.model_validate({"status": "production"})

        await project_service.update_project(fake_session, project, update)

        assert project.status == "production"
        assert project.title == "Night Shoot"
        assert project.description == "Old logline"
        assert fake_session.commits == 1

    def test_update_rejects_null_title(self):
        with pytest.raises(ValidationError, match="title cannot be null"):
            ProjectUpdate.model_validate({"title": None})

    async def test_archive(self, make_project, fake_session):
        project = make_project()
        await project_service.archive_project(fake_session, project)

        assert project.is_archived is True
        assert project.archived_at is not None


class TestCollaborators:

    async def test_add_collaborator(self, make_project, fake_session):
        project = make_project()
        data = CollaboratorIn(user_id=OTHER_USER_ID, role="editor", permissions=["read", "write"])

        await project_service.upsert_collaborator(fake_session, project, data)

        collaborator = project.collaborators[0]
        assert collaborator.user_id == OTHER_USER_ID
        assert collaborator.role == "editor"
        assert collaborator.permissions == ["read", "write"]
        assert project.has_permission(OTHER_USER_ID, "write")

    async def test_existing_collaborator_is_replaced(self, make_project, fake_session):
        project = make_project(collaborators={OTHER_USER_ID: ["read"]})
        data = CollaboratorIn(user_id=OTHER_USER_ID, role="producer", permissions=["admin"])

        await project_service.upsert_collaborator(fake_session, project, data)

        assert len(project.collaborators) == 1
        assert project.collaborators[0].role == "producer"
        assert project.has_permission(OTHER_USER_ID, "delete")

    async def test_default_permissions_are_read_only(self, make_project, fake_session):
        project = make_project()
        await project_service.upsert_collaborator(fake_session, project, CollaboratorIn(user_id=OTHER_USER_ID))

        assert project.collaborators[0].permissions == ["read"]
        assert not project.has_permission(OTHER_USER_ID, "write")

    async def test_owner_cannot_be_collaborator(self, make_project, fake_session):
        project = make_project()
        with pytest.raises(BadRequestError):
            await project_service.upsert_collaborator(fake_session, project, CollaboratorIn(user_id=OWNER_ID))
        assert fake_session.commits == 0

    async def test_remove_collaborator(self, make_project, fake_session):
        project = make_project(collaborators={OTHER_USER_ID: ["read", "write"]})
        await project_service.remove_collaborator(fake_session, project, OTHER_USER_ID)

        assert project.collaborators == []
        assert not project.has_permission(OTHER_USER_ID, "read")

    async def test_remove_unknown_collaborator(self, make_project, fake_session):
        with pytest.raises(NotFoundError):
            await project_service.remove_collaborator(fake_session, make_project(), OTHER_USER_ID)


class TestGetProjectForUser:

    async def test_returns_project_when_permitted(self, make_project):
        project = make_project()
        found = await project_service.get_project_for_user(FakeSession(rows=[project]), project.id, OWNER_ID, "write")
        assert found is project

    async def test_missing_project(self):
        with pytest.raises(NotFoundError):
            await project_service.get_project_for_user(FakeSession(), "missing", OWNER_ID, "read")

    async def test_archived_project_is_not_found(self, make_project):
        project = make_project(is_archived=True)
        with pytest.raises(NotFoundError):
            await project_service.get_project_for_user(FakeSession(rows=[project]), project.id, OWNER_ID, "read")

    async def test_stranger_is_forbidden(self, make_project):
        project = make_project()
        with pytest.raises(ForbiddenError):
            await project_service.get_project_for_user(FakeSession(rows=[project]), project.id, OTHER_USER_ID, "read")
