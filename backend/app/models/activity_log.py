from sqlalchemy import BigInteger, Column, String, DateTime, JSON, ForeignKey, Index
from sqlalchemy.orm import relationship

from app.core.database import Base
from app.core.types import GUID, generate_uuid, next_sequence, utcnow


class ActivityAction:
    """Action names written to the project activity feed"""
    CREATE_PROJECT = "CREATE_PROJECT"
    UPDATE_PROJECT = "UPDATE_PROJECT"
    CREATE_TASK = "CREATE_TASK"
    UPDATE_TASK = "UPDATE_TASK"
    MOVE_TASK = "MOVE_TASK"
    DELETE_TASK = "DELETE_TASK"
    CREATE_REVISION = "CREATE_REVISION"
    UPDATE_REVISION_STATUS = "UPDATE_REVISION_STATUS"
    DELETE_REVISION = "DELETE_REVISION"
    CREATE_MATERIAL = "CREATE_MATERIAL"
    UPDATE_MATERIAL = "UPDATE_MATERIAL"
    DELETE_MATERIAL = "DELETE_MATERIAL"
    UPDATE_PHASE_PROGRESS = "UPDATE_PHASE_PROGRESS"


class ActivityLog(Base):
    """Append-only project activity feed"""
    __tablename__ = "activity_logs"

    __table_args__ = (
        Index('ix_activity_logs_project_created', 'project_id', 'created_at'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    project_id = Column(GUID, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    actor_id = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    action = Column(String(100), nullable=False)
    payload = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    # Tie-breaker for entries sharing a created_at
    sequence = Column(BigInteger, default=next_sequence, nullable=False)

    project = relationship("Project", back_populates="activity")
    actor = relationship("User", lazy="selectin")

    @property
    def actor_name(self):
        return self.actor.full_name if self.actor else None

    def __repr__(self):
        return f"<ActivityLog {self.action}>"
