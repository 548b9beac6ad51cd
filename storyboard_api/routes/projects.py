from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from storyboard_api.db import get_db_session
from storyboard_api.dependencies import get_current_user_id
from storyboard_api.exceptions import InternalServerError
from storyboard_api.logging_config import get_logger
from storyboard_api.models.project import Permission
from storyboard_api.schemas.project import (
    CollaboratorIn,
    ProjectCreate,
    ProjectListResponse,
    ProjectResponse,
    ProjectUpdate,
)
from storyboard_api.services import project_service

logger = get_logger(__name__)
router = APIRouter(prefix="/projects", tags=["projects"])


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    project_data: ProjectCreate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    """Create a new project owned by the caller"""
    try:
        return await project_service.create_project(db, user_id, project_data)

    except Exception as e:
        logger.error(f"Error creating project: {e}")
        await db.rollback()
        raise InternalServerError("Failed to create project")


@router.get("", response_model=ProjectListResponse)
async def get_projects(
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    """Projects the caller owns or collaborates on"""
    try:
        projects = await project_service.list_user_projects(db, user_id, limit=limit, offset=offset)
        return {"count": len(projects), "items": projects}

    except Exception as e:
        logger.error(f"Error fetching projects: {e}")
        raise InternalServerError("Failed to fetch projects")


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    try:
        return await project_service.get_project_for_user(db, project_id, user_id, Permission.READ.value)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching project {project_id}: {e}")
        raise InternalServerError("Failed to fetch project")


@router.put("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: str,
    project_data: ProjectUpdate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    try:
        project = await project_service.get_project_for_user(db, project_id, user_id, Permission.WRITE.value)
        return await project_service.update_project(db, project, project_data)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating project {project_id}: {e}")
        await db.rollback()
        raise InternalServerError("Failed to update project")


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def archive_project(
    project_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    """Archive a project; its budgets and schedules are kept"""
    try:
        project = await project_service.get_project_for_user(db, project_id, user_id, Permission.DELETE.value)
        await project_service.archive_project(db, project)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error archiving project {project_id}: {e}")
        await db.rollback()
        raise InternalServerError("Failed to archive project")


@router.post("/{project_id}/collaborators", response_model=ProjectResponse)
async def add_collaborator(
    project_id: str,
    collaborator_data: CollaboratorIn,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    """Add a collaborator, or replace the role and permissions of an existing one"""
    try:
        project = await project_service.get_project_for_user(db, project_id, user_id, Permission.ADMIN.value)
        return await project_service.upsert_collaborator(db, project, collaborator_data)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error adding collaborator to project {project_id}: {e}")
        await db.rollback()
        raise InternalServerError("Failed to add collaborator")


@router.delete("/{project_id}/collaborators/{collaborator_id}", response_model=ProjectResponse)
async def remove_collaborator(
    project_id: str,
    collaborator_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    try:
        project = await project_service.get_project_for_user(db, project_id, user_id, Permission.ADMIN.value)
        return await project_service.remove_collaborator(db, project, collaborator_id)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error removing collaborator from project {project_id}: {e}")
        await db.rollback()
        raise InternalServerError("Failed to remove collaborator")
