"""KPI workflow — value submissions, their review, and per-enterprise overviews."""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from compliance.exceptions import NotFoundError, PersistenceError, ValidationError
from compliance.models.convention import Convention
from compliance.models.indicator import (
    Indicator,
    IndicatorStatus,
    IndicatorSubmission,
    SubmissionStatus,
)

logger = logging.getLogger(__name__)


def get_indicator(db: Session, indicator_id: str) -> Indicator:
    indicator = db.query(Indicator).filter(Indicator.id == indicator_id).first()
    if not indicator:
        raise NotFoundError("Indicator")
    return indicator


def _commit(db: Session, *instances) -> None:
    try:
        db.commit()
        for instance in instances:
            db.refresh(instance)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Failed to persist KPI change")
        raise PersistenceError(original_error=e) from e


def list_by_enterprise(db: Session, enterprise_id: str) -> list[Indicator]:
    """Every indicator tracked under any convention of the enterprise."""
    return (
        db.query(Indicator)
        .join(Convention, Indicator.convention_id == Convention.id)
        .filter(Convention.enterprise_id == enterprise_id)
        .order_by(Indicator.created_at.asc())
        .all()
    )


def submit_value(
    db: Session,
    indicator_id: str,
    value: float,
    acting_user_id: str,
    comment: Optional[str] = None,
) -> IndicatorSubmission:
    """Record a reported value. It stays PENDING until reviewed."""
    indicator = get_indicator(db, indicator_id)
    submission = IndicatorSubmission(
        id=str(uuid.uuid4()),
        indicator_id=indicator.id,
        value=value,
        comment=comment,
        status=SubmissionStatus.PENDING.value,
        submitted_by=acting_user_id,
    )
    db.add(submission)
    _commit(db, submission)

    logger.info("Indicator %s: value %s submitted by %s", indicator_id, value, acting_user_id)
    return submission


def review_submission(
    db: Session,
    indicator_id: str,
    submission_id: str,
    status: str,
    acting_user_id: str,
    comment: Optional[str] = None,
) -> IndicatorSubmission:
    """Validate or reject a pending submission.

    A validated value becomes the indicator's current value, and the
    indicator is marked ACHIEVED once that value reaches its target.
    """
    if status not in (SubmissionStatus.VALIDATED.value, SubmissionStatus.REJECTED.value):
        raise ValidationError(f"Invalid review status: {status}")

    indicator = get_indicator(db, indicator_id)
    submission = (
        db.query(IndicatorSubmission)
        .filter(IndicatorSubmission.id == submission_id, IndicatorSubmission.indicator_id == indicator.id)
        .first()
    )
    if not submission:
        raise NotFoundError("Submission")
    if submission.status != SubmissionStatus.PENDING.value:
        raise ValidationError(f"Submission already {submission.status.lower()}")

    submission.status = status
    submission.reviewed_by = acting_user_id
    submission.reviewed_at = datetime.now(timezone.utc)
    submission.review_comment = comment

    if status == SubmissionStatus.VALIDATED.value:
        indicator.current_value = submission.value
        if indicator.target_value is not None and submission.value >= indicator.target_value:
            indicator.status = IndicatorStatus.ACHIEVED.value

    _commit(db, submission, indicator)

    logger.info(
        "Indicator %s: submission %s %s by %s", indicator_id, submission_id, status, acting_user_id
    )
    return submission


def get_submissions(db: Session, indicator_id: str) -> list[IndicatorSubmission]:
    """Submission history, oldest first."""
    indicator = get_indicator(db, indicator_id)
    return list(indicator.submissions)


def get_overview(db: Session, enterprise_id: str) -> dict:
    """Counts by status plus the mean completion ratio of indicators that have a target."""
    indicators = list_by_enterprise(db, enterprise_id)
    by_status = {s.value: 0 for s in IndicatorStatus}
    for indicator in indicators:
        by_status[indicator.status] = by_status.get(indicator.status, 0) + 1

    ratios = [
        min((i.current_value or 0.0) / i.target_value, 1.0)
        for i in indicators
        if i.target_value
    ]

    pending = 0
    if indicators:
        pending = (
            db.query(IndicatorSubmission)
            .filter(
                IndicatorSubmission.indicator_id.in_([i.id for i in indicators]),
                IndicatorSubmission.status == SubmissionStatus.PENDING.value,
            )
            .count()
        )

    return {
        "enterprise_id": enterprise_id,
        "total_indicators": len(indicators),
        "by_status": by_status,
        "pending_submissions": pending,
        "completion_rate": round(sum(ratios) / len(ratios), 4) if ratios else None,
    }
