"""Convention service — creation and every audited mutation.

Each public function is one unit of work: load, diff, append the history
entry, apply the change, then commit once. A failure anywhere rolls the whole
unit back, so a mutation and its audit record are persisted together or not
at all.
"""

import logging
import uuid
from datetime import date, datetime, timezone
from typing import Any, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from compliance.exceptions import ConflictError, NotFoundError, PersistenceError, ValidationError
from compliance.models.convention import Convention, ConventionDocument, ConventionStatus
from compliance.models.enterprise import Enterprise
from compliance.services.audit_trail import (
    Created,
    DocumentAdded,
    StatusChanged,
    append_entry,
    diff_fields,
)

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("signed_date", "start_date", "end_date", "type", "advantages", "obligations")
REQUIRED_FIELDS = ("start_date", "end_date", "type")


def get_convention(db: Session, convention_id: str) -> Convention:
    convention = db.query(Convention).filter(Convention.id == convention_id).first()
    if not convention:
        raise NotFoundError("Convention")
    return convention


def _check_window(start_date: Optional[date], end_date: Optional[date]) -> None:
    if start_date and end_date and start_date > end_date:
        raise ValidationError("startDate must be on or before endDate")


def _check_version(convention: Convention, expected_version: Optional[int]) -> None:
    if expected_version is not None and expected_version != convention.version:
        raise ConflictError(
            f"Convention has version {convention.version}, request was based on {expected_version}"
        )


def _touch(convention: Convention, user_id: str) -> None:
    convention.last_modified_by = user_id
    convention.updated_at = datetime.now(timezone.utc)


def _commit(db: Session, convention: Convention) -> Convention:
    try:
        db.commit()
        db.refresh(convention)
    except StaleDataError as e:
        db.rollback()
        raise ConflictError("Convention was modified by another request") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Failed to persist convention %s", convention.id)
        raise PersistenceError(original_error=e) from e
    return convention


def create_convention(
    db: Session,
    acting_user_id: str,
    enterprise_id: str,
    start_date: date,
    end_date: date,
    type: str,
    signed_date: Optional[date] = None,
    advantages: Any = None,
    obligations: Any = None,
) -> Convention:
    """Create a convention in DRAFT status for an existing enterprise."""
    enterprise = db.query(Enterprise).filter(Enterprise.id == enterprise_id).first()
    if not enterprise:
        raise NotFoundError("Enterprise")
    _check_window(start_date, end_date)

    convention = Convention(
        id=str(uuid.uuid4()),
        enterprise_id=enterprise_id,
        signed_date=signed_date,
        start_date=start_date,
        end_date=end_date,
        type=type,
        advantages=advantages,
        obligations=obligations,
        status=ConventionStatus.DRAFT.value,
        created_by=acting_user_id,
        last_modified_by=acting_user_id,
    )
    append_entry(convention, Created(type=type), acting_user_id)
    db.add(convention)
    _commit(db, convention)

    logger.info("Convention %s created for enterprise %s by %s", convention.id, enterprise_id, acting_user_id)
    return convention


def update_convention(
    db: Session,
    convention_id: str,
    field_updates: Mapping[str, Any],
    acting_user_id: str,
    expected_version: Optional[int] = None,
) -> Convention:
    """Apply a partial update and record every field that actually changed.

    An update whose values all match the stored ones still appends an UPDATED
    entry with empty changes: it records that the user touched the record.
    """
    convention = get_convention(db, convention_id)
    _check_version(convention, expected_version)

    for name, value in field_updates.items():
        if name not in EDITABLE_FIELDS:
            raise ValidationError(f"Field '{name}' cannot be updated")
        if name in REQUIRED_FIELDS and value is None:
            raise ValidationError(f"Field '{name}' cannot be null")
    _check_window(
        field_updates.get("start_date", convention.start_date),
        field_updates.get("end_date", convention.end_date),
    )

    change = diff_fields(convention, field_updates)
    append_entry(convention, change, acting_user_id)
    for name, value in field_updates.items():
        setattr(convention, name, value)
    _touch(convention, acting_user_id)
    _commit(db, convention)

    logger.info(
        "Convention %s updated by %s (%d field(s) changed)",
        convention_id, acting_user_id, len(change.fields),
    )
    return convention


def update_status(
    db: Session,
    convention_id: str,
    new_status: str,
    acting_user_id: str,
    expected_version: Optional[int] = None,
) -> Convention:
    """Move a convention to ``new_status``, recording the transition."""
    try:
        new_status = ConventionStatus(new_status).value
    except ValueError:
        raise ValidationError(f"Invalid status '{new_status}'")

    convention = get_convention(db, convention_id)
    _check_version(convention, expected_version)

    old_status = convention.status
    append_entry(convention, StatusChanged(old=old_status, new=new_status), acting_user_id)
    convention.status = new_status
    _touch(convention, acting_user_id)
    _commit(db, convention)

    logger.info("Convention %s status %s -> %s by %s", convention_id, old_status, new_status, acting_user_id)
    return convention


def add_document(
    db: Session,
    convention_id: str,
    document_id: str,
    acting_user_id: str,
    expected_version: Optional[int] = None,
) -> Convention:
    """Attach a document reference. References are never removed here."""
    convention = get_convention(db, convention_id)
    _check_version(convention, expected_version)

    convention.document_links.append(ConventionDocument(document_id=document_id))
    append_entry(convention, DocumentAdded(document_id=document_id), acting_user_id)
    _touch(convention, acting_user_id)
    _commit(db, convention)

    logger.info("Document %s attached to convention %s by %s", document_id, convention_id, acting_user_id)
    return convention
