"""Visits router — on-site inspections of an enterprise."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from compliance.database import get_db
from compliance.middleware.auth import get_current_user, require_admin, require_editor
from compliance.models.user import User
from compliance.models.visit import Visit
from compliance.schemas.common import Envelope, UserSummary
from compliance.schemas.visit import (
    VisitAssign,
    VisitCancel,
    VisitReport,
    VisitRequest,
    VisitResponse,
    VisitStatusUpdate,
)
from compliance.services import visit_service

router = APIRouter(prefix="/visits", tags=["visits"])


def _visit_to_response(visit: Visit) -> VisitResponse:
    return VisitResponse(
        id=visit.id,
        enterprise_id=visit.enterprise_id,
        enterprise_name=visit.enterprise.name if visit.enterprise else None,
        inspector=UserSummary.model_validate(visit.inspector) if visit.inspector else None,
        scheduled_at=visit.scheduled_at.isoformat(),
        type=visit.type,
        comment=visit.comment,
        status=visit.status,
        outcome=visit.outcome,
        cancellation_reason=visit.cancellation_reason,
        report_content=visit.report_content,
        report_submitted_by=visit.report_submitted_by,
        report_submitted_at=visit.report_submitted_at.isoformat() if visit.report_submitted_at else None,
        created_at=visit.created_at.isoformat(),
    )


def _many(visits: list[Visit]) -> Envelope[list[VisitResponse]]:
    return Envelope(data=[_visit_to_response(v) for v in visits])


@router.get("/enterprise/{enterprise_id}", response_model=Envelope[list[VisitResponse]])
def list_enterprise_visits(
    enterprise_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _many(visit_service.list_by_enterprise(db, enterprise_id))


@router.get("/enterprise/{enterprise_id}/upcoming", response_model=Envelope[list[VisitResponse]])
def list_upcoming_visits(
    enterprise_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _many(visit_service.list_upcoming(db, enterprise_id))


@router.get("/enterprise/{enterprise_id}/past", response_model=Envelope[list[VisitResponse]])
def list_past_visits(
    enterprise_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _many(visit_service.list_past(db, enterprise_id))


@router.get("/inspector/my-visits", response_model=Envelope[list[VisitResponse]])
def list_my_visits(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Visits assigned to the calling inspector."""
    return _many(visit_service.list_for_inspector(db, current_user.id))


@router.post("/request", response_model=Envelope[VisitResponse], status_code=201)
def request_visit(
    req: VisitRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    visit = visit_service.request_visit(
        db,
        enterprise_id=req.enterprise_id,
        scheduled_at=req.scheduled_at,
        acting_user_id=current_user.id,
        type=req.type,
        comment=req.comment,
    )
    return Envelope(data=_visit_to_response(visit))


@router.put("/{visit_id}/cancel", response_model=Envelope[VisitResponse])
def cancel_visit(
    visit_id: str,
    req: VisitCancel,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    visit = visit_service.cancel_visit(db, visit_id, current_user.id, reason=req.reason)
    return Envelope(data=_visit_to_response(visit))


@router.put("/{visit_id}/assign-inspector", response_model=Envelope[VisitResponse])
def assign_inspector(
    visit_id: str,
    req: VisitAssign,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    visit = visit_service.assign_inspector(db, visit_id, req.inspector_id, current_user.id)
    return Envelope(data=_visit_to_response(visit))


@router.put("/{visit_id}/status", response_model=Envelope[VisitResponse])
def update_visit_status(
    visit_id: str,
    req: VisitStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Move a visit's status. Reserved to the inspector assigned to it."""
    visit = visit_service.update_status(db, visit_id, req.status.value, current_user, outcome=req.outcome)
    return Envelope(data=_visit_to_response(visit))


@router.post("/{visit_id}/report", response_model=Envelope[VisitResponse])
def submit_visit_report(
    visit_id: str,
    req: VisitReport,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_editor),
):
    visit = visit_service.submit_report(db, visit_id, req.content, current_user.id, outcome=req.outcome)
    return Envelope(data=_visit_to_response(visit))


@router.get("/{visit_id}", response_model=Envelope[VisitResponse])
def get_visit(
    visit_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return Envelope(data=_visit_to_response(visit_service.get_visit(db, visit_id)))
