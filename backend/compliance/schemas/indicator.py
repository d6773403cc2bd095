"""Indicator (KPI) request/response schemas."""

from typing import Literal, Optional

from compliance.models.indicator import IndicatorStatus
from compliance.schemas.common import CamelModel


class IndicatorCreate(CamelModel):
    convention_id: str
    name: str
    current_value: Optional[float] = None
    target_value: Optional[float] = None
    status: IndicatorStatus = IndicatorStatus.ON_TRACK


class IndicatorStatusUpdate(CamelModel):
    status: IndicatorStatus


class IndicatorResponse(CamelModel):
    id: str
    convention_id: str
    name: str
    current_value: Optional[float]
    target_value: Optional[float]
    status: str


class SubmissionCreate(CamelModel):
    value: float
    comment: Optional[str] = None


class SubmissionReview(CamelModel):
    status: Literal["VALIDATED", "REJECTED"]
    comment: Optional[str] = None


class SubmissionResponse(CamelModel):
    id: str
    indicator_id: str
    value: float
    comment: Optional[str]
    status: str
    submitted_by: str
    submitted_at: str
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[str] = None
    review_comment: Optional[str] = None


class IndicatorOverview(CamelModel):
    enterprise_id: str
    total_indicators: int
    by_status: dict[str, int]
    pending_submissions: int
    completion_rate: Optional[float]
