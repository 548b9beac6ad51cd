import enum
import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import relationship

from storyboard_api.db import Base


class ProjectType(str, enum.Enum):
    MOVIE = "movie"
    SHORT_FILM = "short-film"
    COMMERCIAL = "commercial"
    MUSIC_VIDEO = "music-video"
    DOCUMENTARY = "documentary"
    TV_SERIES = "tv-series"
    OTHER = "other"


class ProjectStatus(str, enum.Enum):
    PLANNING = "planning"
    PRE_PRODUCTION = "pre-production"
    PRODUCTION = "production"
    POST_PRODUCTION = "post-production"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class CollaboratorRole(str, enum.Enum):
    DIRECTOR = "director"
    PRODUCER = "producer"
    WRITER = "writer"
    CINEMATOGRAPHER = "cinematographer"
    EDITOR = "editor"
    ACTOR = "actor"
    CREW = "crew"


class Permission(str, enum.Enum):
    READ = "read"
    WRITE = "write"
    DELETE = "delete"
    ADMIN = "admin"


class Project(Base):
    __tablename__ = "projects"

    id = Column(UUID(as_uuid=False), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(String, nullable=False, default=ProjectType.SHORT_FILM.value)
    status = Column(String, nullable=False, default=ProjectStatus.PLANNING.value)
    owner_id = Column(UUID(as_uuid=False), nullable=False, index=True)
    is_archived = Column(Boolean, nullable=False, default=False)
    archived_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    collaborators = relationship(
        "ProjectCollaborator",
        back_populates="project",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def has_permission(self, user_id: str, permission: str) -> bool:
        """
        Owner has every permission. A collaborator has a permission when it is
        listed on their membership or when they hold ``admin``.
        """
        if str(self.owner_id) == str(user_id):
            return True

        collaborator = next(
            (c for c in self.collaborators if str(c.user_id) == str(user_id)),
            None,
        )
        if collaborator is None:
            return False

        granted = collaborator.permissions or []
        return permission in granted or Permission.ADMIN.value in granted

    def __repr__(self):
        return f"<Project(id={self.id}, title={self.title!r}, owner_id={self.owner_id})>"


class ProjectCollaborator(Base):
    __tablename__ = "project_collaborators"
    __table_args__ = (
        UniqueConstraint("project_id", "user_id", name="uq_project_collaborators_project_user"),
    )

    id = Column(UUID(as_uuid=False), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    project_id = Column(UUID(as_uuid=False), ForeignKey('projects.id', ondelete='CASCADE'), nullable=False, index=True)
    user_id = Column(UUID(as_uuid=False), nullable=False, index=True)
    role = Column(String, nullable=False, default=CollaboratorRole.CREW.value)
    permissions = Column(JSONB, nullable=False, default=lambda: [Permission.READ.value])
    added_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    project = relationship("Project", back_populates="collaborators")
