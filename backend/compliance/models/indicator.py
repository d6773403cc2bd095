"""Indicator (KPI) models. Owned by the KPI workflow; conventions only read their status.

Reported values arrive as submissions and only move ``current_value`` once
a reviewer validates them.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Float, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from compliance.database import Base


class IndicatorStatus(str, enum.Enum):
    ON_TRACK = "ON_TRACK"
    AT_RISK = "AT_RISK"
    LATE = "LATE"
    ACHIEVED = "ACHIEVED"


class SubmissionStatus(str, enum.Enum):
    PENDING = "PENDING"
    VALIDATED = "VALIDATED"
    REJECTED = "REJECTED"


class Indicator(Base):
    __tablename__ = "indicators"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    convention_id = Column(String(36), ForeignKey("conventions.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    current_value = Column(Float, nullable=True)
    target_value = Column(Float, nullable=True)
    status = Column(String(20), nullable=False, default=IndicatorStatus.ON_TRACK.value)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    # Relationships
    convention = relationship("Convention", back_populates="indicators")
    submissions = relationship(
        "IndicatorSubmission",
        back_populates="indicator",
        order_by="IndicatorSubmission.submitted_at",
        cascade="all, delete-orphan",
    )


class IndicatorSubmission(Base):
    __tablename__ = "indicator_submissions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    indicator_id = Column(String(36), ForeignKey("indicators.id"), nullable=False, index=True)
    value = Column(Float, nullable=False)
    comment = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=SubmissionStatus.PENDING.value)
    submitted_by = Column(String(36), ForeignKey("users.id"), nullable=False)
    submitted_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    reviewed_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
    review_comment = Column(Text, nullable=True)

    # Relationships
    indicator = relationship("Indicator", back_populates="submissions")
