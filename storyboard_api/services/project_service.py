"""
Project Service
Project lookup, ownership and collaborator permissions.
"""
from datetime import datetime
from typing import List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from storyboard_api.exceptions import BadRequestError, ForbiddenError, NotFoundError
from storyboard_api.logging_config import get_logger
from storyboard_api.models.project import Project, ProjectCollaborator
from storyboard_api.schemas.project import CollaboratorIn, ProjectCreate, ProjectUpdate

logger = get_logger(__name__)


async def get_project(session: AsyncSession, project_id: str) -> Optional[Project]:
    result = await session.execute(select(Project).filter(Project.id == project_id))
    return result.scalar_one_or_none()


def require_permission(project: Project, user_id: str, permission: str, detail: str = "Access denied") -> None:
    if not project.has_permission(user_id, permission):
        logger.info(f"User {user_id} denied {permission} on project {project.id}")
        raise ForbiddenError(detail)


async def get_project_for_user(
    session: AsyncSession,
    project_id: str,
    user_id: str,
    permission: str,
) -> Project:
    """
    Load a project and check the caller holds ``permission`` on it.

    Raises:
        NotFoundError: project does not exist or is archived
        ForbiddenError: caller lacks the permission
    """
    project = await get_project(session, project_id)
    if not project or project.is_archived:
        raise NotFoundError("Project not found")
    require_permission(project, user_id, permission)
    return project


async def create_project(session: AsyncSession, user_id: str, data: ProjectCreate) -> Project:
    project = Project(owner_id=user_id, is_archived=False, collaborators=[], **data.model_dump())
    session.add(project)
    await session.commit()
    await session.refresh(project)

    logger.info(f"Created project {project.id} for owner {user_id}")
    return project


async def list_user_projects(
    session: AsyncSession,
    user_id: str,
    limit: int = 50,
    offset: int = 0,
) -> List[Project]:
    """Projects the user owns or collaborates on, newest first, archived excluded."""
    stmt = (
        select(Project)
        .outerjoin(ProjectCollaborator, ProjectCollaborator.project_id == Project.id)
        .filter(
            and_(
                Project.is_archived.is_(False),
                or_(Project.owner_id == user_id, ProjectCollaborator.user_id == user_id),
            )
        )
        .distinct()
        .order_by(Project.created_at.desc())
        .offset(offset)
        .limit(limit)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def update_project(session: AsyncSession, project: Project, data: ProjectUpdate) -> Project:
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(project, field, value)

    await session.commit()
    await session.refresh(project)

    logger.info(f"Updated project {project.id}")
    return project


async def archive_project(session: AsyncSession, project: Project) -> Project:
    project.is_archived = True
    project.archived_at = datetime.utcnow()
    await session.commit()

    logger.info(f"Archived project {project.id}")
    return project


async def upsert_collaborator(session: AsyncSession, project: Project, data: CollaboratorIn) -> Project:
    if str(data.user_id) == str(project.owner_id):
        raise BadRequestError("The project owner cannot be added as a collaborator")

    existing = next((c for c in project.collaborators if str(c.user_id) == str(data.user_id)), None)
    if existing:
        existing.role = data.role
        existing.permissions = list(data.permissions)
    else:
        project.collaborators.append(
            ProjectCollaborator(user_id=data.user_id, role=data.role, permissions=list(data.permissions))
        )

    await session.commit()
    await session.refresh(project)

    logger.info(f"Set collaborator {data.user_id} on project {project.id}")
    return project


async def remove_collaborator(session: AsyncSession, project: Project, user_id: str) -> Project:
    collaborator = next((c for c in project.collaborators if str(c.user_id) == str(user_id)), None)
    if not collaborator:
        raise NotFoundError("Collaborator not found")

    project.collaborators.remove(collaborator)
    await session.commit()
    await session.refresh(project)

    logger.info(f"Removed collaborator {user_id} from project {project.id}")
    return project
