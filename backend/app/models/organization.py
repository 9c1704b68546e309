from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship

from app.core.database import Base
from app.core.types import GUID, generate_uuid, utcnow


class Organization(Base):
    """Design studio owning users and projects"""
    __tablename__ = "organizations"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(255), unique=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    users = relationship("User", back_populates="organization")
    projects = relationship("Project", back_populates="organization")

    def __repr__(self):
        return f"<Organization {self.name}>"
