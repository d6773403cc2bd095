"""Conventions router — lifecycle, audit history and progress summary.

Responses here are the bare entity or projection, without the
``{success, data}`` envelope the other resources use.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from compliance.database import get_db
from compliance.middleware.auth import get_current_user
from compliance.models.convention import Convention
from compliance.models.user import User
from compliance.schemas.common import UserSummary
from compliance.schemas.convention import (
    ConventionCreate,
    ConventionDocumentAdd,
    ConventionMetadata,
    ConventionResponse,
    ConventionStatusUpdate,
    ConventionSummaryResponse,
    ConventionUpdate,
    HistoryEntryResponse,
    ResolvedHistoryEntryResponse,
)
from compliance.routers.documents import document_to_response
from compliance.schemas.indicator import IndicatorResponse
from compliance.services import convention_queries, convention_service

router = APIRouter(prefix="/conventions", tags=["conventions"])


def _convention_to_response(convention: Convention, documents: Optional[list] = None) -> ConventionResponse:
    """Convert a Convention ORM model to a response schema."""
    return ConventionResponse(
        id=convention.id,
        enterprise_id=convention.enterprise_id,
        signed_date=convention.signed_date,
        start_date=convention.start_date,
        end_date=convention.end_date,
        type=convention.type,
        advantages=convention.advantages,
        obligations=convention.obligations,
        status=convention.status,
        documents=[document_to_response(d) for d in documents or []],
        indicators=[IndicatorResponse.model_validate(i) for i in convention.indicators],
        history=[
            HistoryEntryResponse(
                action=h.action,
                user_id=h.user_id,
                changes=h.changes or {},
                timestamp=h.timestamp.isoformat(),
            )
            for h in convention.history
        ],
        metadata=ConventionMetadata(
            created_by=convention.created_by,
            last_modified_by=convention.last_modified_by,
        ),
        version=convention.version,
        created_at=convention.created_at.isoformat(),
        updated_at=convention.updated_at.isoformat(),
    )


def _respond(db: Session, convention: Convention) -> ConventionResponse:
    documents = convention_queries.resolve_documents(db, [convention])
    return _convention_to_response(convention, documents[convention.id])


@router.post("", response_model=ConventionResponse, status_code=201)
def create_convention(
    req: ConventionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create a convention for an existing enterprise."""
    convention = convention_service.create_convention(
        db,
        acting_user_id=current_user.id,
        enterprise_id=req.enterprise_id,
        signed_date=req.signed_date,
        start_date=req.start_date,
        end_date=req.end_date,
        type=req.type,
        advantages=req.advantages,
        obligations=req.obligations,
    )
    return _respond(db, convention)


@router.get("/enterprise/{enterprise_id}", response_model=list[ConventionResponse])
def list_conventions(
    enterprise_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """All conventions of an enterprise, newest first."""
    conventions = convention_queries.list_by_enterprise(db, enterprise_id)
    documents = convention_queries.resolve_documents(db, conventions)
    return [_convention_to_response(c, documents[c.id]) for c in conventions]


@router.get("/enterprise/{enterprise_id}/active", response_model=list[ConventionResponse])
def list_active_conventions(
    enterprise_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Conventions of an enterprise that are ACTIVE and in force today."""
    conventions = convention_queries.list_active(db, enterprise_id)
    documents = convention_queries.resolve_documents(db, conventions)
    return [_convention_to_response(c, documents[c.id]) for c in conventions]


@router.put("/{convention_id}", response_model=ConventionResponse)
def update_convention(
    convention_id: str,
    req: ConventionUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Partially update a convention; only submitted fields are considered."""
    convention = convention_service.update_convention(
        db,
        convention_id,
        req.model_dump(exclude_unset=True, exclude={"version"}),
        current_user.id,
        expected_version=req.version,
    )
    return _respond(db, convention)


@router.patch("/{convention_id}/status", response_model=ConventionResponse)
def update_convention_status(
    convention_id: str,
    req: ConventionStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    convention = convention_service.update_status(
        db, convention_id, req.status.value, current_user.id, expected_version=req.version
    )
    return _respond(db, convention)


@router.post("/{convention_id}/documents", response_model=ConventionResponse)
def add_document(
    convention_id: str,
    req: ConventionDocumentAdd,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    convention = convention_service.add_document(
        db, convention_id, req.document_id, current_user.id, expected_version=req.version
    )
    return _respond(db, convention)


@router.get("/{convention_id}/history", response_model=list[ResolvedHistoryEntryResponse])
def get_convention_history(
    convention_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Audit trail, oldest first, with acting users resolved to name and email."""
    entries = convention_queries.get_history(db, convention_id)
    return [
        ResolvedHistoryEntryResponse(
            action=e.action,
            user_id=e.user_id,
            user=UserSummary.model_validate(e.user) if e.user else None,
            changes=e.changes or {},
            timestamp=e.timestamp.isoformat(),
        )
        for e in entries
    ]


@router.get("/{convention_id}/summary", response_model=ConventionSummaryResponse)
def get_convention_summary(
    convention_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    summary = convention_queries.get_summary(db, convention_id)
    return ConventionSummaryResponse(**summary)
