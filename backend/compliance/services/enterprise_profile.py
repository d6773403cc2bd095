"""Enterprise profile service — registration, nested partial updates and removal.

An update only touches what the request carries. Identification fields are
replaced; the nested sections (economic performance, investment and
employment, innovation, contact) are merged key by key into what is already
stored, so a client can change ``contact.manager.phone`` without resending
the rest of ``contact``.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from compliance.exceptions import ConflictError, NotFoundError, PersistenceError, ValidationError
from compliance.models.convention import Convention
from compliance.models.enterprise import Enterprise

logger = logging.getLogger(__name__)

IDENTIFICATION_FIELDS = (
    "name",
    "legal_name",
    "region",
    "city",
    "creation_date",
    "sector",
    "sub_sector",
    "legal_form",
    "taxpayer_number",
    "description",
)
SECTION_FIELDS = ("economic_performance", "investment_employment", "innovation", "contact")


def merge_section(current: Optional[Mapping[str, Any]], patch: Mapping[str, Any]) -> dict:
    """Return a new dict with ``patch`` merged into ``current``.

    Objects merge recursively; lists and scalars replace the stored value.
    Neither argument is mutated.
    """
    merged = dict(current or {})
    for key, value in patch.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = merge_section(merged[key], value)
        else:
            merged[key] = value
    return merged


def get_enterprise(db: Session, enterprise_id: str) -> Enterprise:
    enterprise = db.query(Enterprise).filter(Enterprise.id == enterprise_id).first()
    if not enterprise:
        raise NotFoundError("Enterprise")
    return enterprise


def _commit(db: Session, enterprise: Optional[Enterprise] = None) -> None:
    try:
        db.commit()
        if enterprise is not None:
            db.refresh(enterprise)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Failed to persist enterprise")
        raise PersistenceError(original_error=e) from e


def create_enterprise(db: Session, fields: Mapping[str, Any], acting_user_id: str) -> Enterprise:
    enterprise = Enterprise(id=str(uuid.uuid4()))
    for field in IDENTIFICATION_FIELDS + SECTION_FIELDS:
        if field in fields:
            setattr(enterprise, field, fields[field])
    enterprise.name = enterprise.name.strip()
    db.add(enterprise)
    _commit(db, enterprise)

    logger.info("Enterprise %s created by %s", enterprise.id, acting_user_id)
    return enterprise


def update_enterprise(
    db: Session,
    enterprise_id: str,
    updates: Mapping[str, Any],
    acting_user_id: str,
) -> Enterprise:
    """Apply a partial update. ``updates`` holds only the keys the client sent.

    An explicit null clears an optional field or a whole section.
    """
    unknown = set(updates) - set(IDENTIFICATION_FIELDS) - set(SECTION_FIELDS)
    if unknown:
        raise ValidationError(f"Fields not editable: {', '.join(sorted(unknown))}")
    if "name" in updates and updates["name"] is None:
        raise ValidationError("name cannot be null")

    enterprise = get_enterprise(db, enterprise_id)
    for field, value in updates.items():
        if field in SECTION_FIELDS and value is not None:
            value = merge_section(getattr(enterprise, field), value)
        elif field == "name":
            value = value.strip()
        setattr(enterprise, field, value)
    enterprise.updated_at = datetime.now(timezone.utc)
    _commit(db, enterprise)

    logger.info(
        "Enterprise %s updated by %s (%s)", enterprise_id, acting_user_id, ", ".join(sorted(updates)) or "no fields"
    )
    return enterprise


def delete_enterprise(db: Session, enterprise_id: str, acting_user_id: str) -> None:
    """Delete an enterprise with its documents and visits.

    Enterprises that hold conventions are refused: convention history can
    never be deleted.
    """
    enterprise = get_enterprise(db, enterprise_id)
    has_conventions = db.query(Convention.id).filter(Convention.enterprise_id == enterprise_id).first()
    if has_conventions:
        raise ConflictError("Enterprise has conventions and cannot be deleted")

    db.delete(enterprise)
    _commit(db)
    logger.info("Enterprise %s deleted by %s", enterprise_id, acting_user_id)
