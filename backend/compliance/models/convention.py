"""Convention models: the agreement itself, its attached documents, and its audit trail.

History rows are append-only. Once flushed, an entry can never be updated or
deleted through the ORM; the listeners at the bottom of this module enforce it.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    String,
    UniqueConstraint,
    event,
)
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import relationship

from compliance.database import Base


class ConventionStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    TERMINATED = "TERMINATED"


class HistoryAction(str, enum.Enum):
    CREATED = "CREATED"
    UPDATED = "UPDATED"
    STATUS_CHANGED = "STATUS_CHANGED"
    DOCUMENT_ADDED = "DOCUMENT_ADDED"


class Convention(Base):
    __tablename__ = "conventions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    enterprise_id = Column(String(36), ForeignKey("enterprises.id"), nullable=False, index=True)
    signed_date = Column(Date, nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    type = Column(String(50), nullable=False)
    advantages = Column(JSON, nullable=True)
    obligations = Column(JSON, nullable=True)
    status = Column(String(20), nullable=False, default=ConventionStatus.DRAFT.value)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=False)
    last_modified_by = Column(String(36), ForeignKey("users.id"), nullable=False)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    # Every UPDATE is guarded by "WHERE version = <read version>".
    __mapper_args__ = {"version_id_col": version}

    # Relationships
    enterprise = relationship("Enterprise", back_populates="conventions")
    document_links = relationship(
        "ConventionDocument",
        order_by="ConventionDocument.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
    )
    indicators = relationship(
        "Indicator", back_populates="convention", order_by="Indicator.created_at"
    )
    history = relationship(
        "ConventionHistoryEntry",
        back_populates="convention",
        order_by="ConventionHistoryEntry.sequence",
        cascade="save-update, merge",
    )

    @property
    def document_ids(self) -> list[str]:
        return [link.document_id for link in self.document_links]


class ConventionDocument(Base):
    """Ordered reference from a convention to a document.

    ``document_id`` is not a foreign key. Ids that no longer resolve are skipped
    when the convention is read back.
    """

    __tablename__ = "convention_documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    convention_id = Column(String(36), ForeignKey("conventions.id"), nullable=False, index=True)
    document_id = Column(String(36), nullable=False)
    position = Column(Integer, nullable=False)
    added_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))


class ConventionHistoryEntry(Base):
    __tablename__ = "convention_history"
    __table_args__ = (UniqueConstraint("convention_id", "sequence", name="uq_convention_history_seq"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    convention_id = Column(String(36), ForeignKey("conventions.id"), nullable=False, index=True)
    sequence = Column(Integer, nullable=False)
    action = Column(String(30), nullable=False)  # CREATED | UPDATED | STATUS_CHANGED | DOCUMENT_ADDED
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    changes = Column(JSON, nullable=False, default=dict)
    timestamp = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    # Relationships
    convention = relationship("Convention", back_populates="history")
    user = relationship("User")


class AppendOnlyViolation(Exception):
    pass


@event.listens_for(ConventionHistoryEntry, "before_update")
def _reject_history_update(mapper, connection, target):
    raise AppendOnlyViolation(f"History entry {target.id} is immutable")


@event.listens_for(ConventionHistoryEntry, "before_delete")
def _reject_history_delete(mapper, connection, target):
    raise AppendOnlyViolation(f"History entry {target.id} cannot be deleted")
