"""Documents router — document metadata records. File transfer lives elsewhere."""

import logging
import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from compliance.database import get_db
from compliance.exceptions import NotFoundError, PermissionDenied
from compliance.middleware.auth import get_current_user, require_editor
from compliance.models.document import Document, DocumentStatus
from compliance.models.enterprise import Enterprise
from compliance.models.user import User
from compliance.schemas.common import Envelope, MessageResponse
from compliance.schemas.document import DocumentCreate, DocumentResponse, DocumentValidate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])


def document_to_response(document: Document) -> DocumentResponse:
    return DocumentResponse(
        id=document.id,
        enterprise_id=document.enterprise_id,
        name=document.name,
        doc_type=document.doc_type,
        status=document.status,
        uploaded_at=document.uploaded_at.isoformat(),
        comment=document.comment,
        validated_by=document.validated_by,
        validated_at=document.validated_at.isoformat() if document.validated_at else None,
    )


@router.post("", response_model=Envelope[DocumentResponse], status_code=201)
def create_document(
    req: DocumentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Register a document submitted by an enterprise. Starts out PENDING."""
    enterprise = db.query(Enterprise).filter(Enterprise.id == req.enterprise_id).first()
    if not enterprise:
        raise NotFoundError("Enterprise")

    document = Document(
        id=str(uuid.uuid4()),
        enterprise_id=req.enterprise_id,
        name=req.name,
        doc_type=req.doc_type,
        status=DocumentStatus.PENDING.value,
        uploaded_by=current_user.id,
    )
    db.add(document)
    db.commit()
    db.refresh(document)
    return Envelope(data=document_to_response(document))


@router.get("/enterprise/{enterprise_id}", response_model=Envelope[list[DocumentResponse]])
def list_enterprise_documents(
    enterprise_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    documents = (
        db.query(Document)
        .filter(Document.enterprise_id == enterprise_id)
        .order_by(Document.uploaded_at.desc())
        .all()
    )
    return Envelope(data=[document_to_response(d) for d in documents])


@router.put("/{document_id}/validate", response_model=Envelope[DocumentResponse])
def validate_document(
    document_id: str,
    req: DocumentValidate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_editor),
):
    """Accept or reject a submitted document."""
    document = db.query(Document).filter(Document.id == document_id).first()
    if not document:
        raise NotFoundError("Document")

    document.status = req.status
    document.comment = req.comment
    document.validated_by = current_user.id
    document.validated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(document)

    logger.info("Document %s marked %s by %s", document_id, req.status, current_user.id)
    return Envelope(data=document_to_response(document))


@router.delete("/{document_id}", response_model=MessageResponse)
def delete_document(
    document_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Remove a document record. Allowed for its uploader, inspectors and admins.

    Conventions that reference the document keep the id; reads skip it.
    """
    document = db.query(Document).filter(Document.id == document_id).first()
    if not document:
        raise NotFoundError("Document")
    if current_user.role not in ("admin", "inspector") and document.uploaded_by != current_user.id:
        raise PermissionDenied("Not allowed to delete this document")

    db.delete(document)
    db.commit()

    logger.info("Document %s deleted by %s", document_id, current_user.id)
    return MessageResponse(message="Document deleted")
