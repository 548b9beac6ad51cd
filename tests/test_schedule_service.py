from datetime import date, timedelta

import pytest

from storyboard_api.exceptions import BadRequestError, ScheduleConflictError
from storyboard_api.schemas.schedule import CrewMemberAdd, ScheduleCreate, ScheduleUpdate
from storyboard_api.services import schedule_service
from tests.conftest import FakeSession, OWNER_ID


def create_data(on: date, start: str, end: str) -> ScheduleCreate:
    return ScheduleCreate.model_validate({
        "title": "Rooftop scene",
        "date": on.isoformat(),
        "timeSlot": {"startTime": start, "endTime": end},
        "scenes": [{"sceneId": "s-1", "estimatedDuration": 45}, {"sceneId": "s-2", "estimatedDuration": 30}],
    })


class TestCreateSchedule:

    async def test_creates_entry_with_duration(self, make_project, future_date):
        project = make_project()
        session = FakeSession()

        schedule = await schedule_service.create_schedule(
            session, project, OWNER_ID, create_data(future_date, "10:00", "12:30")
        )

        assert session.added == [schedule]
        assert schedule.project_id == project.id
        assert schedule.duration_minutes == 150
        assert schedule.total_estimated_duration == 75
        assert schedule.status == "draft"
        assert schedule.created_by == OWNER_ID

    async def test_overlap_raises_conflict(self, make_project, make_schedule, future_date):
        project = make_project()
        existing = make_schedule("09:00", "11:00", project_id=project.id)
        session = FakeSession(rows=[existing])

        with pytest.raises(ScheduleConflictError) as exc_info:
            await schedule_service.create_schedule(
                session, project, OWNER_ID, create_data(future_date, "10:00", "12:00")
            )

        error = exc_info.value
        assert error.status_code == 409
        assert error.conflicts[0]["id"] == existing.id
        assert error.conflicts[0]["timeSlot"]["startTime"] == "09:00"
        assert session.added == []

    async def test_back_to_back_is_a_conflict(self, make_project, make_schedule, future_date):
        project = make_project()
        session = FakeSession(rows=[make_schedule("09:00", "11:00", project_id=project.id)])

        with pytest.raises(ScheduleConflictError):
            await schedule_service.create_schedule(
                session, project, OWNER_ID, create_data(future_date, "11:00", "13:00")
            )


class TestUpdateSchedule:

    async def test_moving_within_own_slot_is_not_a_conflict(self, make_schedule):
        schedule = make_schedule("09:00", "11:00")
        session = FakeSession(rows=[schedule])

        update = ScheduleUpdate.model_validate({"timeSlot": {"startTime": "09:30"}})
        await schedule_service.update_schedule(session, schedule, OWNER_ID, update)

        assert schedule.start_time == "09:30"
        assert schedule.end_time == "11:00"
        assert schedule.duration_minutes == 90
        assert schedule.last_modified_by == OWNER_ID

    async def test_moving_onto_other_entry_conflicts(self, make_schedule, future_date):
        schedule = make_schedule("09:00", "10:00")
        other = make_schedule("14:00", "16:00", project_id=schedule.project_id)
        session = FakeSession(rows=[schedule, other])

        update = ScheduleUpdate.model_validate({"timeSlot": {"startTime": "13:00", "endTime": "15:00"}})
        with pytest.raises(ScheduleConflictError):
            await schedule_service.update_schedule(session, schedule, OWNER_ID, update)
        assert schedule.start_time == "09:00"

    async def test_end_before_start_rejected(self, make_schedule):
        schedule = make_schedule("09:00", "11:00")
        update = ScheduleUpdate.model_validate({"timeSlot": {"startTime": "12:00"}})

        with pytest.raises(BadRequestError):
            await schedule_service.update_schedule(FakeSession(rows=[schedule]), schedule, OWNER_ID, update)

    async def test_null_list_clears_it(self, make_schedule):
        schedule = make_schedule(cast=[{"name": "Lead"}])
        update = ScheduleUpdate.model_validate({"cast": None, "notes": "Cast moved to day 2"})

        await schedule_service.update_schedule(FakeSession(), schedule, OWNER_ID, update)
        assert schedule.cast == []
        assert schedule.notes == "Cast moved to day 2"


class TestStatusAndCrew:

    async def test_completing_marks_scenes_completed(self, make_schedule):
        schedule = make_schedule(scenes=[
            {"scene_id": "s-1", "status": "in-progress"},
            {"scene_id": "s-2", "status": "not-started"},
        ])

        await schedule_service.update_status(FakeSession(), schedule, OWNER_ID, "completed")

        assert schedule.status == "completed"
        assert {s["status"] for s in schedule.scenes} == {"completed"}

    async def test_other_status_leaves_scenes(self, make_schedule):
        schedule = make_schedule(status="draft", scenes=[{"scene_id": "s-1", "status": "not-started"}])
        await schedule_service.update_status(FakeSession(), schedule, OWNER_ID, "postponed")
        assert schedule.scenes[0]["status"] == "not-started"

    async def test_add_and_remove_crew(self, make_schedule):
        schedule = make_schedule()
        data = CrewMemberAdd(user_id="crew-1", role="Gaffer", call_time="06:30")

        await schedule_service.add_crew_member(FakeSession(), schedule, OWNER_ID, data)
        assert schedule.crew_count == 1
        assert schedule.crew[0]["member_id"] == "crew-1"
        assert schedule.crew[0]["status"] == "pending"

        with pytest.raises(BadRequestError):
            await schedule_service.add_crew_member(FakeSession(), schedule, OWNER_ID, data)

        await schedule_service.remove_crew_member(FakeSession(), schedule, OWNER_ID, "crew-1")
        assert schedule.crew_count == 0


async def test_calendar_groups_by_day(make_schedule):
    monday = date(2030, 6, 3)
    entries = [
        make_schedule("14:00", "15:00", date=monday),
        make_schedule("9:00", "10:00", date=monday),
        make_schedule("08:00", "09:00", date=monday + timedelta(days=2)),
    ]

    result = await schedule_service.get_calendar(
        FakeSession(rows=entries), "project-1", "week", monday, monday + timedelta(days=6)
    )

    assert list(result["calendar"]) == ["2030-06-03", "2030-06-05"]
    assert [s.start_time for s in result["calendar"]["2030-06-03"]] == ["9:00", "14:00"]
    assert result["total_schedules"] == 3
    assert result["date_range"] == {"start": monday, "end": monday + timedelta(days=6)}


class TestListOrder:

    async def test_single_digit_start_times_page_in_time_order(self, make_project, future_date):
        project = make_project()
        session = FakeSession()
        for start, end in [("11:00", "11:30"), ("9:00", "9:30"), ("10:00", "10:30")]:
            await schedule_service.create_schedule(session, project, OWNER_ID, create_data(future_date, start, end))

        # what ORDER BY date, start_time OFFSET/LIMIT returns for limit=2
        stored = sorted(session.added, key=lambda s: (s.date, s.start_time))
        pages = [stored[0:2], stored[2:4]]

        assert [s.start_time for page in pages for s in page] == ["09:00", "10:00", "11:00"]
        assert session.added[1].end_time == "09:30"

    async def test_list_keeps_query_order_and_paginates(self, make_schedule):
        rows = [make_schedule("08:00", "09:00"), make_schedule("13:00", "14:00")]
        session = FakeSession(rows=rows)

        schedules, pagination = await schedule_service.list_schedules(session, "project-1", page=1, limit=2)

        assert schedules == rows
        assert "ORDER BY schedules.date ASC, schedules.start_time ASC" in str(session.statements[1])


async def test_update_with_single_digit_time_stores_padded(make_schedule):
    schedule = make_schedule("09:00", "11:00")
    update = ScheduleUpdate.model_validate({"timeSlot": {"startTime": "8:15"}})

    await schedule_service.update_schedule(FakeSession(rows=[schedule]), schedule, OWNER_ID, update)
    assert schedule.start_time == "08:15"
