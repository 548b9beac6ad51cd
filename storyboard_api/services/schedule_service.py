"""
Schedule Service
CRUD for schedule entries plus conflict detection, calendar grouping,
status changes and crew assignment.
"""
import math
from collections import OrderedDict
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from storyboard_api.exceptions import BadRequestError, NotFoundError, ScheduleConflictError
from storyboard_api.logging_config import get_logger
from storyboard_api.models.project import Project
from storyboard_api.models.schedule import SceneStatus, Schedule, ScheduleStatus
from storyboard_api.schemas.schedule import (
    ConflictEntry,
    CrewAssignment,
    CrewMemberAdd,
    ScheduleCreate,
    ScheduleUpdate,
)
from storyboard_api.services.project_service import get_project, require_permission
from storyboard_api.services.schedule_conflicts import find_conflicts, parse_time, slot_duration
from storyboard_api.utils.date_utils import resolve_calendar_range

logger = get_logger(__name__)

# JSONB list columns; null in an update clears the list
LIST_FIELDS = ("scenes", "crew", "cast", "equipment", "emergency_contacts")


def serialize_conflict(schedule: Schedule) -> Dict[str, Any]:
    return {
        "id": schedule.id,
        "title": schedule.title,
        "date": schedule.date,
        "time_slot": schedule.time_slot,
        "status": schedule.status,
    }


async def get_schedule(session: AsyncSession, schedule_id: str) -> Optional[Schedule]:
    result = await session.execute(select(Schedule).filter(Schedule.id == schedule_id))
    return result.scalar_one_or_none()


async def find_schedule_conflicts(
    session: AsyncSession,
    project_id: str,
    on_date: date,
    start_time: str,
    end_time: str,
    exclude_id: Optional[str] = None,
) -> List[Schedule]:
    """
    Entries of the project on ``on_date`` whose slot overlaps [start_time, end_time].

    The date narrows the query in SQL; the overlap test itself runs on
    parsed minutes so "9:00" and "09:00" compare correctly.
    """
    result = await session.execute(
        select(Schedule).filter(Schedule.project_id == project_id, Schedule.date == on_date)
    )
    same_day = result.scalars().all()
    conflicts = find_conflicts(same_day, on_date, start_time, end_time, exclude_id=exclude_id)

    if conflicts:
        logger.info(
            f"Found {len(conflicts)} conflict(s) for project {project_id} on {on_date} "
            f"{start_time}-{end_time}"
        )
    return conflicts


async def create_schedule(session: AsyncSession, project: Project, user_id: str, data: ScheduleCreate) -> Schedule:
    """
    Raises:
        ScheduleConflictError: the slot overlaps another entry of the project that day
    """
    start_time, end_time = data.time_slot.start_time, data.time_slot.end_time
    conflicts = await find_schedule_conflicts(session, project.id, data.date, start_time, end_time)
    if conflicts:
        raise ScheduleConflictError([_conflict_json(c) for c in conflicts])

    payload = data.model_dump(exclude={"time_slot"})
    schedule = Schedule(
        project_id=project.id,
        start_time=start_time,
        end_time=end_time,
        duration_minutes=slot_duration(start_time, end_time),
        created_by=user_id,
        **payload,
    )

    session.add(schedule)
    await session.commit()
    await session.refresh(schedule)

    logger.info(f"Created schedule {schedule.id} for project {project.id} on {schedule.date}")
    return schedule


async def list_schedules(
    session: AsyncSession,
    project_id: str,
    status: Optional[str] = None,
    type: Optional[str] = None,
    on_date: Optional[date] = None,
    page: int = 1,
    limit: int = 10,
) -> Tuple[List[Schedule], Dict[str, int]]:
    conditions = [Schedule.project_id == project_id]
    if status:
        conditions.append(Schedule.status == status)
    if type:
        conditions.append(Schedule.type == type)
    if on_date:
        conditions.append(Schedule.date == on_date)

    total = (
        await session.execute(select(func.count()).select_from(Schedule).filter(*conditions))
    ).scalar_one()

    result = await session.execute(
        select(Schedule)
        .filter(*conditions)
        .order_by(Schedule.date.asc(), Schedule.start_time.asc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    # start times are stored zero-padded, so text order is time order
    schedules = list(result.scalars().all())
    pagination = {"current": page, "pages": math.ceil(total / limit), "total": total}
    return schedules, pagination


def sort_by_slot(schedules) -> List[Schedule]:
    return sorted(schedules, key=lambda s: (s.date, parse_time(s.start_time)))


async def update_schedule(session: AsyncSession, schedule: Schedule, user_id: str, data: ScheduleUpdate) -> Schedule:
    """
    Apply a partial update. When the date or time slot changes, the new slot
    is validated and re-checked for conflicts, excluding this entry.
    """
    payload = data.model_dump(exclude_unset=True)
    time_slot = payload.pop("time_slot", None) or {}

    if "date" in payload or time_slot:
        new_date = payload.get("date") or schedule.date
        new_start = time_slot.get("start_time") or schedule.start_time
        new_end = time_slot.get("end_time") or schedule.end_time

        if parse_time(new_end) <= parse_time(new_start):
            raise BadRequestError("End time must be after start time")

        conflicts = await find_schedule_conflicts(
            session, schedule.project_id, new_date, new_start, new_end, exclude_id=schedule.id
        )
        if conflicts:
            raise ScheduleConflictError([_conflict_json(c) for c in conflicts])

        schedule.date = new_date
        schedule.start_time = new_start
        schedule.end_time = new_end
        schedule.duration_minutes = slot_duration(new_start, new_end)
        payload.pop("date", None)

    for field, value in payload.items():
        if field in LIST_FIELDS and value is None:
            value = []
        setattr(schedule, field, value)

    schedule.last_modified_by = user_id

    await session.commit()
    await session.refresh(schedule)

    logger.info(f"Updated schedule {schedule.id}")
    return schedule


async def delete_schedule(session: AsyncSession, schedule: Schedule) -> None:
    await session.delete(schedule)
    await session.commit()
    logger.info(f"Deleted schedule {schedule.id}")


async def update_status(session: AsyncSession, schedule: Schedule, user_id: str, status: str) -> Schedule:
    """
    Status changes are accepted unconditionally. Completing an entry marks
    all of its scenes completed.
    """
    schedule.status = status
    schedule.last_modified_by = user_id

    if status == ScheduleStatus.COMPLETED.value and schedule.scenes:
        schedule.scenes = [
            {**scene, "status": SceneStatus.COMPLETED.value} for scene in schedule.scenes
        ]

    await session.commit()
    await session.refresh(schedule)

    logger.info(f"Schedule {schedule.id} status set to {status}")
    return schedule


async def add_crew_member(session: AsyncSession, schedule: Schedule, user_id: str, data: CrewMemberAdd) -> Schedule:
    if schedule.has_crew_member(data.user_id):
        raise BadRequestError("Crew member already assigned to this schedule")

    member = CrewAssignment(
        member_id=data.user_id,
        role=data.role,
        call_time=data.call_time,
        wrap_time=data.wrap_time,
        notes=data.notes,
    )
    schedule.crew = list(schedule.crew or []) + [member.model_dump()]
    schedule.last_modified_by = user_id

    await session.commit()
    await session.refresh(schedule)

    logger.info(f"Added crew member {data.user_id} to schedule {schedule.id}")
    return schedule


async def remove_crew_member(session: AsyncSession, schedule: Schedule, user_id: str, member_id: str) -> Schedule:
    schedule.crew = [m for m in (schedule.crew or []) if str(m.get("member_id")) != str(member_id)]
    schedule.last_modified_by = user_id

    await session.commit()
    await session.refresh(schedule)

    logger.info(f"Removed crew member {member_id} from schedule {schedule.id}")
    return schedule


async def get_calendar(
    session: AsyncSession,
    project_id: str,
    view: str = "month",
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> Dict[str, Any]:
    """Entries in the range grouped by ISO date, in date and start time order."""
    start, end = resolve_calendar_range(view, start_date, end_date)

    result = await session.execute(
        select(Schedule).filter(
            Schedule.project_id == project_id,
            Schedule.date >= start,
            Schedule.date <= end,
        )
    )
    schedules = sort_by_slot(result.scalars().all())

    calendar: Dict[str, List[Schedule]] = OrderedDict()
    for schedule in schedules:
        calendar.setdefault(schedule.date.isoformat(), []).append(schedule)

    return {
        "calendar": calendar,
        "view": view,
        "date_range": {"start": start, "end": end},
        "total_schedules": len(schedules),
    }


def _conflict_json(schedule: Schedule) -> Dict[str, Any]:
    return ConflictEntry.model_validate(serialize_conflict(schedule)).model_dump(mode="json", by_alias=True)


async def get_schedule_for_user(
    session: AsyncSession,
    schedule_id: str,
    user_id: str,
    permission: str,
) -> Schedule:
    """
    Raises:
        NotFoundError: schedule or its project does not exist
        ForbiddenError: caller lacks the permission on the owning project
    """
    schedule = await get_schedule(session, schedule_id)
    if not schedule:
        raise NotFoundError("Schedule not found")

    project = await get_project(session, schedule.project_id)
    if not project or project.is_archived:
        raise NotFoundError("Project not found")
    require_permission(project, user_id, permission)
    return schedule
