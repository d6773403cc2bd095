"""Document request/response schemas."""

from typing import Literal, Optional

from compliance.schemas.common import CamelModel


class DocumentCreate(CamelModel):
    enterprise_id: str
    name: str
    doc_type: Optional[str] = None


class DocumentValidate(CamelModel):
    status: Literal["VALIDATED", "REJECTED"]
    comment: Optional[str] = None


class DocumentResponse(CamelModel):
    id: str
    enterprise_id: str
    name: str
    doc_type: Optional[str]
    status: str
    uploaded_at: str
    comment: Optional[str] = None
    validated_by: Optional[str] = None
    validated_at: Optional[str] = None
