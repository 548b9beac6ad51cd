import pytest

from storyboard_api.exceptions import ForbiddenError
from storyboard_api.services.project_service import require_permission
from tests.conftest import OTHER_USER_ID, OWNER_ID

EDITOR_ID = "33333333-3333-3333-3333-333333333333"
ADMIN_ID = "44444444-4444-4444-4444-444444444444"


@pytest.fixture
def project(make_project):
    return make_project(
        collaborators={
            EDITOR_ID: ["read", "write"],
            ADMIN_ID: ["admin"],
        }
    )


@pytest.mark.parametrize("permission", ["read", "write", "delete", "admin"])
def test_owner_has_every_permission(project, permission):
    assert project.has_permission(OWNER_ID, permission)


def test_collaborator_has_listed_permissions_only(project):
    assert project.has_permission(EDITOR_ID, "read")
    assert project.has_permission(EDITOR_ID, "write")
    assert not project.has_permission(EDITOR_ID, "delete")
    assert not project.has_permission(EDITOR_ID, "admin")


@pytest.mark.parametrize("permission", ["read", "write", "delete", "admin"])
def test_admin_collaborator_has_every_permission(project, permission):
    assert project.has_permission(ADMIN_ID, permission)


def test_stranger_has_no_permission(project):
    assert not project.has_permission(OTHER_USER_ID, "read")


def test_require_permission_raises_forbidden(project):
    require_permission(project, EDITOR_ID, "write")
    with pytest.raises(ForbiddenError) as exc_info:
        require_permission(project, EDITOR_ID, "admin", "Admin access required")
    assert exc_info.value.status_code == 403
    assert exc_info.value.detail == "Admin access required"
