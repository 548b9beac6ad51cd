"""
Pydantic schemas for schedule entries.

Time strings are validated here ("HH:MM", end strictly after start) so the
interval checks only ever see well-formed slots.
"""
from datetime import date as date_type, datetime
from decimal import Decimal
from typing import ClassVar, Dict, List, Optional, Tuple

from pydantic import Field, field_validator, model_validator

from storyboard_api.models.schedule import (
    AttendanceStatus,
    EquipmentCategory,
    EquipmentStatus,
    SceneStatus,
    SchedulePriority,
    ScheduleStatus,
    ScheduleType,
)
from storyboard_api.schemas.base import TIME_REGEX, CamelModel, Money, Pagination, PartialUpdate
from storyboard_api.services.schedule_conflicts import format_time, parse_time


class TimeSlot(CamelModel):
    start_time: str = Field(..., pattern=TIME_REGEX)
    end_time: str = Field(..., pattern=TIME_REGEX)

    @field_validator("start_time", "end_time")
    @classmethod
    def pad_time(cls, v: str) -> str:
        return format_time(v)

    @model_validator(mode="after")
    def check_end_after_start(self):
        if parse_time(self.end_time) <= parse_time(self.start_time):
            raise ValueError("End time must be after start time")
        return self


class TimeSlotUpdate(PartialUpdate):
    non_nullable: ClassVar[Tuple[str, ...]] = ("start_time", "end_time")

    start_time: Optional[str] = Field(default=None, pattern=TIME_REGEX)
    end_time: Optional[str] = Field(default=None, pattern=TIME_REGEX)

    @field_validator("start_time", "end_time")
    @classmethod
    def pad_time(cls, v: Optional[str]) -> Optional[str]:
        return format_time(v) if v is not None else v


class TimeSlotResponse(CamelModel):
    start_time: str
    end_time: str
    duration: Optional[int] = None


class Coordinates(CamelModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class Location(CamelModel):
    name: Optional[str] = Field(default=None, max_length=200)
    address: Optional[str] = Field(default=None, max_length=500)
    coordinates: Optional[Coordinates] = None
    notes: Optional[str] = None


class SceneAssignment(CamelModel):
    scene_id: Optional[str] = None
    estimated_duration: Optional[int] = Field(default=None, ge=1)
    status: SceneStatus = SceneStatus.NOT_STARTED
    notes: Optional[str] = None
    actual_start_time: Optional[str] = Field(default=None, pattern=TIME_REGEX)
    actual_end_time: Optional[str] = Field(default=None, pattern=TIME_REGEX)


class CrewAssignment(CamelModel):
    member_id: str
    role: str = Field(..., min_length=2, max_length=100)
    call_time: Optional[str] = Field(default=None, pattern=TIME_REGEX)
    wrap_time: Optional[str] = Field(default=None, pattern=TIME_REGEX)
    status: AttendanceStatus = AttendanceStatus.PENDING
    notes: Optional[str] = Field(default=None, max_length=500)


class CastAssignment(CamelModel):
    name: str
    character: Optional[str] = None
    contact: Optional[str] = None
    call_time: Optional[str] = Field(default=None, pattern=TIME_REGEX)
    wrap_time: Optional[str] = Field(default=None, pattern=TIME_REGEX)
    costume: Optional[str] = None
    makeup: Optional[str] = None
    status: AttendanceStatus = AttendanceStatus.PENDING
    notes: Optional[str] = None


class EquipmentAssignment(CamelModel):
    name: str
    category: EquipmentCategory = EquipmentCategory.OTHER
    quantity: int = Field(default=1, ge=1)
    supplier: Optional[str] = None
    pickup_time: Optional[str] = Field(default=None, pattern=TIME_REGEX)
    return_time: Optional[str] = Field(default=None, pattern=TIME_REGEX)
    status: EquipmentStatus = EquipmentStatus.RESERVED
    notes: Optional[str] = None


class Weather(CamelModel):
    condition: Optional[str] = None
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    wind_speed: Optional[float] = None
    notes: Optional[str] = None


class EmergencyContact(CamelModel):
    name: str
    role: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


class ScheduleCreate(CamelModel):
    title: str = Field(..., min_length=3, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    type: ScheduleType = ScheduleType.SHOOTING
    date: date_type
    time_slot: TimeSlot
    location: Optional[Location] = None
    scenes: List[SceneAssignment] = Field(default_factory=list)
    crew: List[CrewAssignment] = Field(default_factory=list)
    cast: List[CastAssignment] = Field(default_factory=list)
    equipment: List[EquipmentAssignment] = Field(default_factory=list)
    weather: Optional[Weather] = None
    estimated_budget: Money = Field(default=Decimal("0"), ge=0)
    status: ScheduleStatus = ScheduleStatus.DRAFT
    priority: SchedulePriority = SchedulePriority.MEDIUM
    notes: Optional[str] = None
    contingency_plan: Optional[str] = None
    emergency_contacts: List[EmergencyContact] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        return v.strip()

    @field_validator("date")
    @classmethod
    def date_not_in_past(cls, v: date_type) -> date_type:
        if v < date_type.today():
            raise ValueError("Schedule date cannot be in the past")
        return v


class ScheduleUpdate(PartialUpdate):
    non_nullable: ClassVar[Tuple[str, ...]] = (
        "title", "type", "date", "time_slot", "estimated_budget", "status", "priority",
    )

    title: Optional[str] = Field(default=None, min_length=3, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    type: Optional[ScheduleType] = None
    date: Optional[date_type] = None
    time_slot: Optional[TimeSlotUpdate] = None
    location: Optional[Location] = None
    scenes: Optional[List[SceneAssignment]] = None
    crew: Optional[List[CrewAssignment]] = None
    cast: Optional[List[CastAssignment]] = None
    equipment: Optional[List[EquipmentAssignment]] = None
    weather: Optional[Weather] = None
    estimated_budget: Optional[Money] = Field(default=None, ge=0)
    actual_budget: Optional[Money] = Field(default=None, ge=0)
    status: Optional[ScheduleStatus] = None
    priority: Optional[SchedulePriority] = None
    notes: Optional[str] = None
    contingency_plan: Optional[str] = None
    emergency_contacts: Optional[List[EmergencyContact]] = None


class ScheduleResponse(CamelModel):
    id: str
    project_id: str
    title: str
    description: Optional[str] = None
    type: str
    date: date_type
    time_slot: TimeSlotResponse
    location: Optional[Location] = None
    scenes: List[SceneAssignment]
    crew: List[CrewAssignment]
    cast: List[CastAssignment]
    equipment: List[EquipmentAssignment]
    weather: Optional[Weather] = None
    estimated_budget: Money
    actual_budget: Optional[Money] = None
    status: str
    priority: str
    notes: Optional[str] = None
    contingency_plan: Optional[str] = None
    emergency_contacts: List[EmergencyContact]
    total_estimated_duration: int
    crew_count: int
    cast_count: int
    created_by: str
    last_modified_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ScheduleListResponse(CamelModel):
    schedules: List[ScheduleResponse]
    pagination: Pagination


class ConflictEntry(CamelModel):
    id: str
    title: str
    date: date_type
    time_slot: TimeSlotResponse
    status: str


class ConflictsResponse(CamelModel):
    conflicts: List[ConflictEntry]
    has_conflicts: bool


class DateRange(CamelModel):
    start: date_type
    end: date_type


class CalendarResponse(CamelModel):
    calendar: Dict[str, List[ScheduleResponse]]
    view: str
    date_range: DateRange
    total_schedules: int


class StatusUpdate(CamelModel):
    status: ScheduleStatus


class StatusUpdateResponse(CamelModel):
    schedule_id: str
    status: str


class CrewMemberAdd(CamelModel):
    user_id: str
    role: str = Field(..., min_length=2, max_length=100)
    call_time: Optional[str] = Field(default=None, pattern=TIME_REGEX)
    wrap_time: Optional[str] = Field(default=None, pattern=TIME_REGEX)
    notes: Optional[str] = Field(default=None, max_length=500)

    @field_validator("role")
    @classmethod
    def strip_role(cls, v: str) -> str:
        return v.strip()


class CrewChangeResponse(CamelModel):
    schedule_id: str
    crew_count: int
