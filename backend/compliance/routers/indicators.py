"""Indicators router — KPIs tracked against a convention."""

import logging
import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from compliance.database import get_db
from compliance.exceptions import NotFoundError
from compliance.middleware.auth import get_current_user, require_editor
from compliance.models.convention import Convention
from compliance.models.indicator import Indicator, IndicatorSubmission
from compliance.models.user import User
from compliance.schemas.common import Envelope
from compliance.schemas.indicator import (
    IndicatorCreate,
    IndicatorOverview,
    IndicatorResponse,
    IndicatorStatusUpdate,
    SubmissionCreate,
    SubmissionResponse,
    SubmissionReview,
)
from compliance.services import kpi_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/indicators", tags=["indicators"])


def _submission_to_response(submission: IndicatorSubmission) -> SubmissionResponse:
    return SubmissionResponse(
        id=submission.id,
        indicator_id=submission.indicator_id,
        value=submission.value,
        comment=submission.comment,
        status=submission.status,
        submitted_by=submission.submitted_by,
        submitted_at=submission.submitted_at.isoformat(),
        reviewed_by=submission.reviewed_by,
        reviewed_at=submission.reviewed_at.isoformat() if submission.reviewed_at else None,
        review_comment=submission.review_comment,
    )


@router.post("", response_model=Envelope[IndicatorResponse], status_code=201)
def create_indicator(
    req: IndicatorCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_editor),
):
    convention = db.query(Convention).filter(Convention.id == req.convention_id).first()
    if not convention:
        raise NotFoundError("Convention")

    indicator = Indicator(
        id=str(uuid.uuid4()),
        convention_id=req.convention_id,
        name=req.name,
        current_value=req.current_value,
        target_value=req.target_value,
        status=req.status.value,
    )
    db.add(indicator)
    db.commit()
    db.refresh(indicator)
    return Envelope(data=IndicatorResponse.model_validate(indicator))


@router.get("/convention/{convention_id}", response_model=Envelope[list[IndicatorResponse]])
def list_convention_indicators(
    convention_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    indicators = (
        db.query(Indicator)
        .filter(Indicator.convention_id == convention_id)
        .order_by(Indicator.created_at.asc())
        .all()
    )
    return Envelope(data=[IndicatorResponse.model_validate(i) for i in indicators])


@router.patch("/{indicator_id}/status", response_model=Envelope[IndicatorResponse])
def update_indicator_status(
    indicator_id: str,
    req: IndicatorStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_editor),
):
    indicator = db.query(Indicator).filter(Indicator.id == indicator_id).first()
    if not indicator:
        raise NotFoundError("Indicator")

    old_status = indicator.status
    indicator.status = req.status.value
    db.commit()
    db.refresh(indicator)

    logger.info("Indicator %s status %s -> %s by %s", indicator_id, old_status, indicator.status, current_user.id)
    return Envelope(data=IndicatorResponse.model_validate(indicator))


@router.get("/enterprise/{enterprise_id}", response_model=Envelope[list[IndicatorResponse]])
def list_enterprise_indicators(
    enterprise_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    indicators = kpi_service.list_by_enterprise(db, enterprise_id)
    return Envelope(data=[IndicatorResponse.model_validate(i) for i in indicators])


@router.get("/enterprise/{enterprise_id}/overview", response_model=Envelope[IndicatorOverview])
def get_enterprise_overview(
    enterprise_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return Envelope(data=IndicatorOverview(**kpi_service.get_overview(db, enterprise_id)))


@router.post("/{indicator_id}/submit", response_model=Envelope[SubmissionResponse], status_code=201)
def submit_indicator_value(
    indicator_id: str,
    req: SubmissionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Report a new value; it waits for review before counting."""
    submission = kpi_service.submit_value(db, indicator_id, req.value, current_user.id, comment=req.comment)
    return Envelope(data=_submission_to_response(submission))


@router.put("/{indicator_id}/submissions/{submission_id}", response_model=Envelope[SubmissionResponse])
def review_indicator_submission(
    indicator_id: str,
    submission_id: str,
    req: SubmissionReview,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_editor),
):
    submission = kpi_service.review_submission(
        db, indicator_id, submission_id, req.status, current_user.id, comment=req.comment
    )
    return Envelope(data=_submission_to_response(submission))


@router.get("/{indicator_id}/history", response_model=Envelope[list[SubmissionResponse]])
def get_indicator_history(
    indicator_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    submissions = kpi_service.get_submissions(db, indicator_id)
    return Envelope(data=[_submission_to_response(s) for s in submissions])
