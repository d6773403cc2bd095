"""Convention request/response schemas.

Mutating requests may carry the ``version`` the client last read; a stale
version is rejected with 409.
"""

from datetime import date
from typing import Any, Optional

from pydantic import ConfigDict

from compliance.models.convention import ConventionStatus
from compliance.schemas.common import CamelModel, UserSummary
from compliance.schemas.document import DocumentResponse
from compliance.schemas.indicator import IndicatorResponse


class ConventionCreate(CamelModel):
    enterprise_id: str
    signed_date: Optional[date] = None
    start_date: date
    end_date: date
    type: str
    advantages: Any = None
    obligations: Any = None


class ConventionUpdate(CamelModel):
    signed_date: Optional[date] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    type: Optional[str] = None
    advantages: Any = None
    obligations: Any = None
    version: Optional[int] = None

    model_config = ConfigDict(extra="forbid")


class ConventionStatusUpdate(CamelModel):
    status: ConventionStatus
    version: Optional[int] = None


class ConventionDocumentAdd(CamelModel):
    document_id: str
    version: Optional[int] = None


class ConventionMetadata(CamelModel):
    created_by: str
    last_modified_by: str


class HistoryEntryResponse(CamelModel):
    action: str
    user_id: str
    changes: dict[str, Any]
    timestamp: str


class ResolvedHistoryEntryResponse(HistoryEntryResponse):
    user: Optional[UserSummary] = None


class ConventionResponse(CamelModel):
    id: str
    enterprise_id: str
    signed_date: Optional[date]
    start_date: date
    end_date: date
    type: str
    advantages: Any
    obligations: Any
    status: str
    documents: list[DocumentResponse] = []
    indicators: list[IndicatorResponse] = []
    history: list[HistoryEntryResponse] = []
    metadata: ConventionMetadata
    version: int
    created_at: str
    updated_at: str


class ConventionProgress(CamelModel):
    documents_submitted: int
    indicators_on_track: int
    total_indicators: int


class ConventionSummaryResponse(CamelModel):
    id: str
    type: str
    status: str
    progress: ConventionProgress
    start_date: date
    end_date: date
    days_remaining: int
