import enum
import uuid
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID

from storyboard_api.db import Base


class ScheduleType(str, enum.Enum):
    SHOOTING = "shooting"
    PRE_PRODUCTION = "pre-production"
    POST_PRODUCTION = "post-production"
    MEETING = "meeting"
    OTHER = "other"


class ScheduleStatus(str, enum.Enum):
    """draft -> confirmed -> in-progress -> completed; cancelled/postponed from any non-terminal state"""
    DRAFT = "draft"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    POSTPONED = "postponed"


class SchedulePriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class SceneStatus(str, enum.Enum):
    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    POSTPONED = "postponed"
    CANCELLED = "cancelled"


class AttendanceStatus(str, enum.Enum):
    CONFIRMED = "confirmed"
    PENDING = "pending"
    DECLINED = "declined"
    ABSENT = "absent"


class EquipmentCategory(str, enum.Enum):
    CAMERA = "camera"
    LENS = "lens"
    LIGHTING = "lighting"
    AUDIO = "audio"
    GRIP = "grip"
    OTHER = "other"


class EquipmentStatus(str, enum.Enum):
    RESERVED = "reserved"
    CONFIRMED = "confirmed"
    PICKED_UP = "picked-up"
    RETURNED = "returned"
    CANCELLED = "cancelled"


class Schedule(Base):
    """
    A single schedule entry (shoot day, meeting, ...) for a project.

    Assignment lists (scenes, crew, cast, equipment) are stored as JSONB
    arrays of dicts shaped by the request schemas. Replace the whole list
    when mutating so the change is flushed.
    """
    __tablename__ = "schedules"
    __table_args__ = (
        Index("ix_schedules_project_date", "project_id", "date"),
        Index("ix_schedules_project_status", "project_id", "status"),
    )

    id = Column(UUID(as_uuid=False), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    project_id = Column(UUID(as_uuid=False), ForeignKey('projects.id', ondelete='CASCADE'), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(String, nullable=False, default=ScheduleType.SHOOTING.value)
    date = Column(Date, nullable=False)
    start_time = Column(String(5), nullable=False)  # "HH:MM"
    end_time = Column(String(5), nullable=False)  # "HH:MM"
    duration_minutes = Column(Integer, nullable=True)
    location = Column(JSONB, nullable=True)
    scenes = Column(JSONB, nullable=False, default=list)
    crew = Column(JSONB, nullable=False, default=list)
    cast = Column(JSONB, nullable=False, default=list)
    equipment = Column(JSONB, nullable=False, default=list)
    weather = Column(JSONB, nullable=True)
    estimated_budget = Column(Numeric(precision=14, scale=2), nullable=False, default=0)
    actual_budget = Column(Numeric(precision=14, scale=2), nullable=True)
    status = Column(String, nullable=False, default=ScheduleStatus.DRAFT.value)
    priority = Column(String, nullable=False, default=SchedulePriority.MEDIUM.value)
    notes = Column(Text, nullable=True)
    contingency_plan = Column(Text, nullable=True)
    emergency_contacts = Column(JSONB, nullable=False, default=list)
    created_by = Column(UUID(as_uuid=False), nullable=False)
    last_modified_by = Column(UUID(as_uuid=False), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    @property
    def time_slot(self) -> dict:
        return {
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration": self.duration_minutes,
        }

    @property
    def total_estimated_duration(self) -> int:
        return sum((scene.get("estimated_duration") or 0) for scene in (self.scenes or []))

    @property
    def crew_count(self) -> int:
        return len(self.crew or [])

    @property
    def cast_count(self) -> int:
        return len(self.cast or [])

    def has_crew_member(self, member_id: str) -> bool:
        return any(str(m.get("member_id")) == str(member_id) for m in (self.crew or []))

    def __repr__(self):
        return f"<Schedule(id={self.id}, date={self.date}, {self.start_time}-{self.end_time}, status={self.status})>"
