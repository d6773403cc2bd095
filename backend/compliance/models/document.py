"""Document model — metadata for files submitted by an enterprise."""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from compliance.database import Base


class DocumentStatus(str, enum.Enum):
    PENDING = "PENDING"
    VALIDATED = "VALIDATED"
    REJECTED = "REJECTED"


class Document(Base):
    __tablename__ = "documents"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    enterprise_id = Column(String(36), ForeignKey("enterprises.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    doc_type = Column(String(50), nullable=True)
    status = Column(String(20), nullable=False, default=DocumentStatus.PENDING.value)
    uploaded_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    uploaded_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    comment = Column(Text, nullable=True)
    validated_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    validated_at = Column(DateTime, nullable=True)

    # Relationships
    enterprise = relationship("Enterprise", back_populates="documents")
