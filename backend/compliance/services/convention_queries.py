"""Read-only convention views. Nothing here touches the audit trail."""

import math
from datetime import date, datetime, time, timezone
from typing import Iterable, Optional

from sqlalchemy.orm import Session, joinedload, selectinload

from compliance.exceptions import NotFoundError
from compliance.models.convention import Convention, ConventionHistoryEntry, ConventionStatus
from compliance.models.document import Document
from compliance.models.indicator import IndicatorStatus

SECONDS_PER_DAY = 24 * 60 * 60


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def list_by_enterprise(db: Session, enterprise_id: str) -> list[Convention]:
    """All conventions of an enterprise, most recently created first."""
    return (
        db.query(Convention)
        .options(selectinload(Convention.indicators), selectinload(Convention.document_links))
        .filter(Convention.enterprise_id == enterprise_id)
        .order_by(Convention.created_at.desc())
        .all()
    )


def list_active(db: Session, enterprise_id: str, today: Optional[date] = None) -> list[Convention]:
    """ACTIVE conventions whose [start_date, end_date] contains ``today`` (UTC, both ends inclusive)."""
    today = today or _utcnow().date()
    return (
        db.query(Convention)
        .options(selectinload(Convention.indicators), selectinload(Convention.document_links))
        .filter(
            Convention.enterprise_id == enterprise_id,
            Convention.status == ConventionStatus.ACTIVE.value,
            Convention.start_date <= today,
            Convention.end_date >= today,
        )
        .order_by(Convention.start_date.asc())
        .all()
    )


def resolve_documents(db: Session, conventions: Iterable[Convention]) -> dict[str, list[Document]]:
    """Map convention id -> attached documents in attachment order.

    Ids that no longer resolve to a document are skipped.
    """
    conventions = list(conventions)
    wanted = {doc_id for c in conventions for doc_id in c.document_ids}
    found = {}
    if wanted:
        found = {d.id: d for d in db.query(Document).filter(Document.id.in_(wanted)).all()}
    return {
        c.id: [found[doc_id] for doc_id in c.document_ids if doc_id in found]
        for c in conventions
    }


def get_history(db: Session, convention_id: str) -> list[ConventionHistoryEntry]:
    exists = db.query(Convention.id).filter(Convention.id == convention_id).first()
    if not exists:
        raise NotFoundError("Convention")
    return (
        db.query(ConventionHistoryEntry)
        .options(joinedload(ConventionHistoryEntry.user))
        .filter(ConventionHistoryEntry.convention_id == convention_id)
        .order_by(ConventionHistoryEntry.sequence.asc())
        .all()
    )


def days_remaining(end_date: date, now: Optional[datetime] = None) -> int:
    """Whole days from ``now`` until the start (00:00 UTC) of ``end_date``, rounded up.

    Negative once the end date has passed.
    """
    now = now or _utcnow()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    end = datetime.combine(end_date, time.min, tzinfo=timezone.utc)
    return math.ceil((end - now).total_seconds() / SECONDS_PER_DAY)


def get_summary(db: Session, convention_id: str, now: Optional[datetime] = None) -> dict:
    """Progress read model for a convention. History is not part of it."""
    convention = (
        db.query(Convention)
        .options(selectinload(Convention.indicators), selectinload(Convention.document_links))
        .filter(Convention.id == convention_id)
        .first()
    )
    if not convention:
        raise NotFoundError("Convention")

    documents = resolve_documents(db, [convention])[convention.id]
    indicators = convention.indicators
    on_track = [i for i in indicators if i.status == IndicatorStatus.ON_TRACK.value]

    return {
        "id": convention.id,
        "type": convention.type,
        "status": convention.status,
        "progress": {
            "documents_submitted": len(documents),
            "indicators_on_track": len(on_track),
            "total_indicators": len(indicators),
        },
        "start_date": convention.start_date,
        "end_date": convention.end_date,
        "days_remaining": days_remaining(convention.end_date, now),
    }
