from sqlalchemy import Column, String, DateTime, Float, Text, Enum as SQLEnum, ForeignKey
from sqlalchemy.orm import relationship
import enum

from app.core.database import Base
from app.core.types import GUID, generate_uuid, utcnow


class MaterialStatus(str, enum.Enum):
    """Material schedule item states"""
    SAMPLED = "sampled"
    APPROVED = "approved"
    REPLACED = "replaced"
    OBSOLETE = "obsolete"


class MaterialItem(Base):
    """Material schedule entry (paint, laminate, glass, hardware, fabric)"""
    __tablename__ = "material_items"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    project_id = Column(GUID, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)

    code = Column(String(50), nullable=False)  # PT-1, PL-1, GL-1 ...
    name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=False)
    vendor = Column(String(255), nullable=True)
    url = Column(String(1000), nullable=True)
    price = Column(Float, nullable=True)
    status = Column(SQLEnum(MaterialStatus), default=MaterialStatus.SAMPLED, nullable=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    project = relationship("Project", back_populates="materials")

    def __repr__(self):
        return f"<MaterialItem {self.code} {self.name}>"
