"""Convention audit trail.

Each mutation kind has its own change record. Records serialize to the open
``changes`` mapping stored on a history entry:

    Created        -> {"type": "ANNUAL"}
    Updated        -> {"endDate": {"from": "2026-01-01", "to": "2026-06-30"}, ...}
    StatusChanged  -> {"from": "DRAFT", "to": "ACTIVE"}
    DocumentAdded  -> {"documentId": "..."}

``append_entry`` only touches the in-memory convention. Persisting it, together
with the mutation it describes, is the caller's job.
"""

import enum
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, ClassVar, Mapping, Union

from pydantic.alias_generators import to_camel

from compliance.models.convention import Convention, ConventionHistoryEntry, HistoryAction


def _wire_value(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, enum.Enum):
        return value.value
    return value


@dataclass(frozen=True)
class FieldChange:
    old: Any
    new: Any

    def to_wire(self) -> dict:
        return {"from": _wire_value(self.old), "to": _wire_value(self.new)}


@dataclass(frozen=True)
class Created:
    action: ClassVar[HistoryAction] = HistoryAction.CREATED
    type: str

    def to_wire(self) -> dict:
        return {"type": self.type}


@dataclass(frozen=True)
class Updated:
    action: ClassVar[HistoryAction] = HistoryAction.UPDATED
    fields: dict[str, FieldChange] = field(default_factory=dict)

    def to_wire(self) -> dict:
        return {to_camel(name): change.to_wire() for name, change in self.fields.items()}


@dataclass(frozen=True)
class StatusChanged:
    action: ClassVar[HistoryAction] = HistoryAction.STATUS_CHANGED
    old: str
    new: str

    def to_wire(self) -> dict:
        return {"from": _wire_value(self.old), "to": _wire_value(self.new)}


@dataclass(frozen=True)
class DocumentAdded:
    action: ClassVar[HistoryAction] = HistoryAction.DOCUMENT_ADDED
    document_id: str

    def to_wire(self) -> dict:
        return {"documentId": self.document_id}


Change = Union[Created, Updated, StatusChanged, DocumentAdded]


def diff_fields(convention: Convention, updates: Mapping[str, Any]) -> Updated:
    """Collect a from/to pair for every submitted field whose value differs."""
    fields = {}
    for name, new_value in updates.items():
        current = getattr(convention, name)
        if current != new_value:
            fields[name] = FieldChange(old=current, new=new_value)
    return Updated(fields=fields)


def append_entry(convention: Convention, change: Change, user_id: str) -> ConventionHistoryEntry:
    """Append one history entry to ``convention.history`` and return it."""
    entry = ConventionHistoryEntry(
        id=str(uuid.uuid4()),
        sequence=len(convention.history) + 1,
        action=change.action.value,
        user_id=user_id,
        changes=change.to_wire(),
        timestamp=datetime.now(timezone.utc),
    )
    convention.history.append(entry)
    return entry
