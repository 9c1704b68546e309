from sqlalchemy import Column, String, DateTime, Integer, Float, Text, ForeignKey, Index
from sqlalchemy.orm import relationship

from app.core.database import Base
from app.core.types import GUID, generate_uuid, utcnow


class Project(Base):
    """Interior design project - progress/status are derived, never stored"""
    __tablename__ = "projects"

    __table_args__ = (
        Index('ix_projects_organization_id', 'organization_id'),
        Index('ix_projects_created_at', 'created_at'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    organization_id = Column(GUID, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False)
    created_by = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    name = Column(String(500), nullable=False)
    code = Column(String(50), unique=True, nullable=False)  # e.g. 20250512-INT-BED1
    client_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    # Timeline
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    organization = relationship("Organization", back_populates="projects")
    phases = relationship(
        "Phase", back_populates="project", cascade="all, delete-orphan",
        order_by="Phase.order", lazy="selectin",
    )
    tasks = relationship("Task", back_populates="project", cascade="all, delete-orphan")
    materials = relationship("MaterialItem", back_populates="project", cascade="all, delete-orphan")
    activity = relationship("ActivityLog", back_populates="project", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Project {self.code}>"


class Phase(Base):
    """Weighted stage of a project (Moodboard, Layout, Design, ...)"""
    __tablename__ = "phases"

    __table_args__ = (
        Index('ix_phases_project_order', 'project_id', 'order'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    project_id = Column(GUID, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)

    key = Column(String(100), nullable=False)  # moodboard, layout, ...
    name = Column(String(255), nullable=False)
    order = Column(Integer, nullable=False, default=0)
    weight = Column(Float, nullable=False, default=0)  # relative share of project progress
    progress = Column(Integer, nullable=False, default=0)  # 0-100, average of task progress

    start_date = Column(DateTime, nullable=True)
    due_date = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    project = relationship("Project", back_populates="phases")
    tasks = relationship("Task", back_populates="phase")
    revisions = relationship("Revision", back_populates="phase", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Phase {self.key} ({self.progress}%)>"
