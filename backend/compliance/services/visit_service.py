"""Site visit scheduling — requests, inspector assignment, cancellations and reports.

Times are stored as naive UTC. Incoming aware datetimes are converted first,
so "upcoming" and "past" compare on one clock.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from compliance.exceptions import NotFoundError, PermissionDenied, PersistenceError, ValidationError
from compliance.models.enterprise import Enterprise
from compliance.models.user import User
from compliance.models.visit import Visit, VisitStatus

logger = logging.getLogger(__name__)


def to_utc_naive(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _commit(db: Session, visit: Visit) -> Visit:
    try:
        db.commit()
        db.refresh(visit)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Failed to persist visit %s", visit.id)
        raise PersistenceError(original_error=e) from e
    return visit


def _query(db: Session):
    return db.query(Visit).options(joinedload(Visit.inspector), joinedload(Visit.enterprise))


def get_visit(db: Session, visit_id: str) -> Visit:
    visit = _query(db).filter(Visit.id == visit_id).first()
    if not visit:
        raise NotFoundError("Visit")
    return visit


def request_visit(
    db: Session,
    enterprise_id: str,
    scheduled_at: datetime,
    acting_user_id: str,
    type: Optional[str] = None,
    comment: Optional[str] = None,
) -> Visit:
    enterprise = db.query(Enterprise.id).filter(Enterprise.id == enterprise_id).first()
    if not enterprise:
        raise NotFoundError("Enterprise")

    visit = Visit(
        id=str(uuid.uuid4()),
        enterprise_id=enterprise_id,
        scheduled_at=to_utc_naive(scheduled_at),
        type=type,
        comment=comment,
        status=VisitStatus.SCHEDULED.value,
        requested_by=acting_user_id,
    )
    db.add(visit)
    _commit(db, visit)

    logger.info("Visit %s requested for enterprise %s by %s", visit.id, enterprise_id, acting_user_id)
    return visit


def cancel_visit(db: Session, visit_id: str, acting_user_id: str, reason: Optional[str] = None) -> Visit:
    visit = get_visit(db, visit_id)
    if visit.status == VisitStatus.COMPLETED.value:
        raise ValidationError("Cannot cancel a completed visit")

    visit.status = VisitStatus.CANCELLED.value
    visit.cancellation_reason = reason
    _commit(db, visit)

    logger.info("Visit %s cancelled by %s", visit_id, acting_user_id)
    return visit


def assign_inspector(db: Session, visit_id: str, inspector_id: str, acting_user_id: str) -> Visit:
    visit = get_visit(db, visit_id)
    inspector = db.query(User).filter(User.id == inspector_id).first()
    if not inspector:
        raise NotFoundError("Inspector")
    if inspector.role != "inspector":
        raise ValidationError("Assigned user must have the inspector role")

    visit.inspector_id = inspector.id
    _commit(db, visit)

    logger.info("Visit %s assigned to %s by %s", visit_id, inspector_id, acting_user_id)
    return visit


def update_status(
    db: Session,
    visit_id: str,
    status: str,
    acting_user: User,
    outcome: Optional[str] = None,
) -> Visit:
    """Only the inspector assigned to the visit may move its status."""
    visit = get_visit(db, visit_id)
    if visit.inspector_id is None or visit.inspector_id != acting_user.id:
        raise PermissionDenied("Not authorized to update this visit")
    if status not in {s.value for s in VisitStatus}:
        raise ValidationError(f"Invalid visit status: {status}")

    old_status = visit.status
    visit.status = status
    if outcome:
        visit.outcome = outcome
    _commit(db, visit)

    logger.info("Visit %s status %s -> %s by %s", visit_id, old_status, status, acting_user.id)
    return visit


def submit_report(
    db: Session,
    visit_id: str,
    content: str,
    acting_user_id: str,
    outcome: Optional[str] = None,
) -> Visit:
    """Attach the inspection report and close the visit as COMPLETED."""
    visit = get_visit(db, visit_id)
    if visit.status == VisitStatus.CANCELLED.value:
        raise ValidationError("Cannot report on a cancelled visit")

    visit.report_content = content
    visit.report_submitted_by = acting_user_id
    visit.report_submitted_at = _utcnow()
    if outcome:
        visit.outcome = outcome
    visit.status = VisitStatus.COMPLETED.value
    _commit(db, visit)

    logger.info("Visit %s report submitted by %s", visit_id, acting_user_id)
    return visit


def list_by_enterprise(db: Session, enterprise_id: str) -> list[Visit]:
    """All visits of an enterprise, latest scheduled first."""
    return (
        _query(db)
        .filter(Visit.enterprise_id == enterprise_id)
        .order_by(Visit.scheduled_at.desc())
        .all()
    )


def list_upcoming(db: Session, enterprise_id: str, now: Optional[datetime] = None) -> list[Visit]:
    """SCHEDULED visits at or after ``now``, soonest first."""
    now = to_utc_naive(now) if now else _utcnow()
    return (
        _query(db)
        .filter(
            Visit.enterprise_id == enterprise_id,
            Visit.status == VisitStatus.SCHEDULED.value,
            Visit.scheduled_at >= now,
        )
        .order_by(Visit.scheduled_at.asc())
        .all()
    )


def list_past(db: Session, enterprise_id: str, now: Optional[datetime] = None) -> list[Visit]:
    """COMPLETED visits plus anything scheduled before ``now``, latest first."""
    now = to_utc_naive(now) if now else _utcnow()
    return (
        _query(db)
        .filter(
            Visit.enterprise_id == enterprise_id,
            or_(Visit.status == VisitStatus.COMPLETED.value, Visit.scheduled_at < now),
        )
        .order_by(Visit.scheduled_at.desc())
        .all()
    )


def list_for_inspector(db: Session, inspector_id: str) -> list[Visit]:
    return (
        _query(db)
        .filter(Visit.inspector_id == inspector_id)
        .order_by(Visit.scheduled_at.desc())
        .all()
    )
