"""Site visit model — inspections scheduled at an enterprise."""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from compliance.database import Base


class VisitStatus(str, enum.Enum):
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class Visit(Base):
    __tablename__ = "visits"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    enterprise_id = Column(String(36), ForeignKey("enterprises.id"), nullable=False, index=True)
    inspector_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)
    requested_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    scheduled_at = Column(DateTime, nullable=False)  # naive UTC
    type = Column(String(50), nullable=True)
    comment = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=VisitStatus.SCHEDULED.value)
    outcome = Column(String(255), nullable=True)
    cancellation_reason = Column(Text, nullable=True)

    # Report
    report_content = Column(Text, nullable=True)
    report_submitted_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    report_submitted_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    # Relationships
    enterprise = relationship("Enterprise", back_populates="visits")
    inspector = relationship("User", foreign_keys=[inspector_id])
