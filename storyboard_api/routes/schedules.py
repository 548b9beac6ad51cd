from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from storyboard_api.db import get_db_session
from storyboard_api.dependencies import get_current_user_id
from storyboard_api.exceptions import BadRequestError, InternalServerError
from storyboard_api.logging_config import get_logger
from storyboard_api.models.project import Permission
from storyboard_api.models.schedule import ScheduleStatus, ScheduleType
from storyboard_api.schemas.base import TIME_REGEX
from storyboard_api.schemas.schedule import (
    CalendarResponse,
    ConflictsResponse,
    CrewChangeResponse,
    CrewMemberAdd,
    ScheduleCreate,
    ScheduleListResponse,
    ScheduleResponse,
    ScheduleUpdate,
    StatusUpdate,
    StatusUpdateResponse,
)
from storyboard_api.services import schedule_service
from storyboard_api.services.project_service import get_project_for_user
from storyboard_api.services.schedule_conflicts import parse_time

logger = get_logger(__name__)
router = APIRouter(tags=["schedules"])


@router.post("/projects/{project_id}/schedules", response_model=ScheduleResponse, status_code=status.HTTP_201_CREATED)
async def create_schedule(
    project_id: str,
    schedule_data: ScheduleCreate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    """Create a schedule entry; overlapping entries on the same day are rejected with 409"""
    try:
        project = await get_project_for_user(db, project_id, user_id, Permission.WRITE.value)
        return await schedule_service.create_schedule(db, project, user_id, schedule_data)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating schedule for project {project_id}: {e}")
        await db.rollback()
        raise InternalServerError("Failed to create schedule")


@router.get("/projects/{project_id}/schedules", response_model=ScheduleListResponse)
async def get_schedules(
    project_id: str,
    status_filter: Optional[ScheduleStatus] = Query(default=None, alias="status"),
    type: Optional[ScheduleType] = Query(default=None),
    on_date: Optional[date] = Query(default=None, alias="date"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    """List a project's schedule entries by date and start time"""
    try:
        await get_project_for_user(db, project_id, user_id, Permission.READ.value)
        schedules, pagination = await schedule_service.list_schedules(
            db,
            project_id,
            status=status_filter.value if status_filter else None,
            type=type.value if type else None,
            on_date=on_date,
            page=page,
            limit=limit,
        )
        return {"schedules": schedules, "pagination": pagination}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error listing schedules for project {project_id}: {e}")
        raise InternalServerError("Failed to fetch schedules")


@router.get("/schedules/{schedule_id}", response_model=ScheduleResponse)
async def get_schedule(
    schedule_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    """Get a schedule entry by ID"""
    try:
        return await schedule_service.get_schedule_for_user(db, schedule_id, user_id, Permission.READ.value)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching schedule {schedule_id}: {e}")
        raise InternalServerError("Failed to fetch schedule")


@router.put("/schedules/{schedule_id}", response_model=ScheduleResponse)
async def update_schedule(
    schedule_id: str,
    schedule_data: ScheduleUpdate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    """Update a schedule entry"""
    try:
        schedule = await schedule_service.get_schedule_for_user(db, schedule_id, user_id, Permission.WRITE.value)
        return await schedule_service.update_schedule(db, schedule, user_id, schedule_data)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating schedule {schedule_id}: {e}")
        await db.rollback()
        raise InternalServerError("Failed to update schedule")


@router.delete("/schedules/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_schedule(
    schedule_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    """Delete a schedule entry"""
    try:
        schedule = await schedule_service.get_schedule_for_user(db, schedule_id, user_id, Permission.DELETE.value)
        await schedule_service.delete_schedule(db, schedule)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting schedule {schedule_id}: {e}")
        await db.rollback()
        raise InternalServerError("Failed to delete schedule")


@router.get("/projects/{project_id}/calendar", response_model=CalendarResponse)
async def get_calendar(
    project_id: str,
    view: str = Query(default="month", pattern="^(week|month)$"),
    start_date: Optional[date] = Query(default=None, alias="startDate"),
    end_date: Optional[date] = Query(default=None, alias="endDate"),
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    """Schedule entries grouped by day for a week, a month or an explicit range"""
    try:
        await get_project_for_user(db, project_id, user_id, Permission.READ.value)
        return await schedule_service.get_calendar(db, project_id, view, start_date, end_date)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error building calendar for project {project_id}: {e}")
        raise InternalServerError("Failed to fetch calendar")


@router.get("/projects/{project_id}/conflicts", response_model=ConflictsResponse)
async def get_conflicts(
    project_id: str,
    on_date: date = Query(..., alias="date"),
    start_time: str = Query(..., alias="startTime", pattern=TIME_REGEX),
    end_time: str = Query(..., alias="endTime", pattern=TIME_REGEX),
    exclude_id: Optional[str] = Query(default=None, alias="excludeId"),
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    """Entries that would overlap the given date and time range"""
    try:
        if parse_time(end_time) <= parse_time(start_time):
            raise BadRequestError("End time must be after start time")

        await get_project_for_user(db, project_id, user_id, Permission.READ.value)
        conflicts = await schedule_service.find_schedule_conflicts(
            db, project_id, on_date, start_time, end_time, exclude_id=exclude_id
        )
        return {
            "conflicts": [schedule_service.serialize_conflict(c) for c in conflicts],
            "has_conflicts": bool(conflicts),
        }

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error checking conflicts for project {project_id}: {e}")
        raise InternalServerError("Failed to check schedule conflicts")


@router.patch("/schedules/{schedule_id}/status", response_model=StatusUpdateResponse)
async def update_status(
    schedule_id: str,
    status_data: StatusUpdate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    """Set the entry's status; completing it completes every scene"""
    try:
        schedule = await schedule_service.get_schedule_for_user(db, schedule_id, user_id, Permission.WRITE.value)
        schedule = await schedule_service.update_status(db, schedule, user_id, status_data.status)
        return {"schedule_id": schedule.id, "status": schedule.status}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating status of schedule {schedule_id}: {e}")
        await db.rollback()
        raise InternalServerError("Failed to update schedule status")


@router.post("/schedules/{schedule_id}/crew", response_model=CrewChangeResponse)
async def add_crew_member(
    schedule_id: str,
    crew_data: CrewMemberAdd,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    """Assign a crew member to the entry"""
    try:
        schedule = await schedule_service.get_schedule_for_user(db, schedule_id, user_id, Permission.WRITE.value)
        schedule = await schedule_service.add_crew_member(db, schedule, user_id, crew_data)
        return {"schedule_id": schedule.id, "crew_count": schedule.crew_count}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error adding crew to schedule {schedule_id}: {e}")
        await db.rollback()
        raise InternalServerError("Failed to add crew member")


@router.delete("/schedules/{schedule_id}/crew/{member_id}", response_model=CrewChangeResponse)
async def remove_crew_member(
    schedule_id: str,
    member_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    """Remove a crew member from the entry"""
    try:
        schedule = await schedule_service.get_schedule_for_user(db, schedule_id, user_id, Permission.WRITE.value)
        schedule = await schedule_service.remove_crew_member(db, schedule, user_id, member_id)
        return {"schedule_id": schedule.id, "crew_count": schedule.crew_count}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error removing crew from schedule {schedule_id}: {e}")
        await db.rollback()
        raise InternalServerError("Failed to remove crew member")
