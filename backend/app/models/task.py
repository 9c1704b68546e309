from sqlalchemy import Column, String, DateTime, Integer, Text, Enum as SQLEnum, ForeignKey, Index
from sqlalchemy.orm import relationship
import enum

from app.core.database import Base
from app.core.types import GUID, generate_uuid, utcnow


class TaskStatus(str, enum.Enum):
    """Kanban columns"""
    BACKLOG = "backlog"
    IN_PROGRESS = "in_progress"
    REVIEW = "review"
    DONE = "done"


class Task(Base):
    """Unit of work on the project board, optionally attached to a phase"""
    __tablename__ = "tasks"

    __table_args__ = (
        Index('ix_tasks_project_status_order', 'project_id', 'status', 'order'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    project_id = Column(GUID, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    phase_id = Column(GUID, ForeignKey("phases.id", ondelete="SET NULL"), nullable=True, index=True)
    assignee_id = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(SQLEnum(TaskStatus), default=TaskStatus.BACKLOG, nullable=False)
    order = Column(Integer, nullable=False, default=1)  # position inside the status column
    progress = Column(Integer, nullable=False, default=0)

    start_date = Column(DateTime, nullable=True)
    due_date = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    project = relationship("Project", back_populates="tasks")
    phase = relationship("Phase", back_populates="tasks")
    assignee = relationship("User", lazy="selectin")

    @property
    def assignee_name(self):
        return self.assignee.full_name if self.assignee else None

    def __repr__(self):
        return f"<Task {self.title} [{self.status}]>"
