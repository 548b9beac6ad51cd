from datetime import datetime
from typing import ClassVar, List, Optional, Tuple

from pydantic import Field

from storyboard_api.models.project import CollaboratorRole, Permission, ProjectStatus, ProjectType
from storyboard_api.schemas.base import CamelModel, PartialUpdate


class CollaboratorIn(CamelModel):
    user_id: str
    role: CollaboratorRole = CollaboratorRole.CREW
    permissions: List[Permission] = Field(default_factory=lambda: [Permission.READ])


class CollaboratorResponse(CamelModel):
    user_id: str
    role: str
    permissions: List[str]
    added_at: datetime


class ProjectBase(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    type: ProjectType = ProjectType.SHORT_FILM
    status: ProjectStatus = ProjectStatus.PLANNING


class ProjectCreate(ProjectBase):
    pass


class ProjectUpdate(PartialUpdate):
    non_nullable: ClassVar[Tuple[str, ...]] = ("title", "type", "status")

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    type: Optional[ProjectType] = None
    status: Optional[ProjectStatus] = None


class ProjectResponse(ProjectBase):
    id: str
    owner_id: str
    is_archived: bool
    collaborators: List[CollaboratorResponse]
    created_at: datetime
    updated_at: datetime


class ProjectListResponse(CamelModel):
    count: int
    items: List[ProjectResponse]
