"""SQLAlchemy ORM models."""

from compliance.models.user import User
from compliance.models.enterprise import Enterprise
from compliance.models.document import Document, DocumentStatus
from compliance.models.indicator import (
    Indicator,
    IndicatorStatus,
    IndicatorSubmission,
    SubmissionStatus,
)
from compliance.models.convention import (
    Convention,
    ConventionDocument,
    ConventionHistoryEntry,
    ConventionStatus,
    HistoryAction,
)
from compliance.models.visit import Visit, VisitStatus

__all__ = [
    "User",
    "Enterprise",
    "Document",
    "DocumentStatus",
    "Indicator",
    "IndicatorStatus",
    "IndicatorSubmission",
    "SubmissionStatus",
    "Convention",
    "ConventionDocument",
    "ConventionHistoryEntry",
    "ConventionStatus",
    "HistoryAction",
    "Visit",
    "VisitStatus",
]
