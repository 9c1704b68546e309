from sqlalchemy import Column, String, DateTime, Text, Enum as SQLEnum, ForeignKey
from sqlalchemy.orm import relationship
import enum

from app.core.database import Base
from app.core.types import GUID, generate_uuid, utcnow


class RevisionStatus(str, enum.Enum):
    """Design revision review states"""
    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


DECIDED_STATUSES = frozenset({RevisionStatus.APPROVED, RevisionStatus.REJECTED})


class Revision(Base):
    """Design revision (D1, D2, ...) submitted for a phase"""
    __tablename__ = "revisions"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    phase_id = Column(GUID, ForeignKey("phases.id", ondelete="CASCADE"), nullable=False, index=True)
    created_by = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    label = Column(String(100), nullable=False)
    notes = Column(Text, nullable=True)
    status = Column(SQLEnum(RevisionStatus), default=RevisionStatus.DRAFT, nullable=False)

    submitted_at = Column(DateTime, nullable=True)
    decided_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    phase = relationship("Phase", back_populates="revisions")
    author = relationship("User", lazy="selectin")

    @property
    def created_by_name(self):
        return self.author.full_name if self.author else None

    def __repr__(self):
        return f"<Revision {self.label} [{self.status}]>"
