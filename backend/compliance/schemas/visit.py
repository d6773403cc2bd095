"""Site visit request/response schemas."""

from datetime import datetime
from typing import Optional

from compliance.models.visit import VisitStatus
from compliance.schemas.common import CamelModel, UserSummary


class VisitRequest(CamelModel):
    enterprise_id: str
    scheduled_at: datetime
    type: Optional[str] = None
    comment: Optional[str] = None


class VisitCancel(CamelModel):
    reason: Optional[str] = None


class VisitAssign(CamelModel):
    inspector_id: str


class VisitStatusUpdate(CamelModel):
    status: VisitStatus
    outcome: Optional[str] = None


class VisitReport(CamelModel):
    content: str
    outcome: Optional[str] = None


class VisitResponse(CamelModel):
    id: str
    enterprise_id: str
    enterprise_name: Optional[str] = None
    inspector: Optional[UserSummary] = None
    scheduled_at: str
    type: Optional[str]
    comment: Optional[str]
    status: str
    outcome: Optional[str] = None
    cancellation_reason: Optional[str] = None
    report_content: Optional[str] = None
    report_submitted_by: Optional[str] = None
    report_submitted_at: Optional[str] = None
    created_at: str
