"""Enterprises router — registry of inspected enterprises."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from compliance.database import get_db
from compliance.middleware.auth import get_current_user, require_admin
from compliance.models.enterprise import Enterprise
from compliance.models.user import User
from compliance.schemas.common import Envelope, MessageResponse
from compliance.schemas.enterprise import EnterpriseCreate, EnterpriseResponse, EnterpriseUpdate
from compliance.services import enterprise_profile

router = APIRouter(prefix="/enterprises", tags=["enterprises"])


def _enterprise_to_response(enterprise: Enterprise) -> EnterpriseResponse:
    return EnterpriseResponse(
        id=enterprise.id,
        name=enterprise.name,
        legal_name=enterprise.legal_name,
        region=enterprise.region,
        city=enterprise.city,
        creation_date=enterprise.creation_date,
        sector=enterprise.sector,
        sub_sector=enterprise.sub_sector,
        legal_form=enterprise.legal_form,
        taxpayer_number=enterprise.taxpayer_number,
        economic_performance=enterprise.economic_performance or {},
        investment_employment=enterprise.investment_employment or {},
        innovation=enterprise.innovation or {},
        contact=enterprise.contact or {},
        description=enterprise.description,
        created_at=enterprise.created_at.isoformat(),
        updated_at=enterprise.updated_at.isoformat() if enterprise.updated_at else None,
    )


@router.post("", response_model=Envelope[EnterpriseResponse], status_code=201)
def create_enterprise(
    req: EnterpriseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Register an enterprise (admin only)."""
    enterprise = enterprise_profile.create_enterprise(db, req.model_dump(exclude_unset=True), current_user.id)
    return Envelope(data=_enterprise_to_response(enterprise))


@router.get("", response_model=Envelope[list[EnterpriseResponse]])
def list_enterprises(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    enterprises = db.query(Enterprise).order_by(Enterprise.name.asc()).all()
    return Envelope(data=[_enterprise_to_response(e) for e in enterprises])


@router.get("/{enterprise_id}", response_model=Envelope[EnterpriseResponse])
def get_enterprise(
    enterprise_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    enterprise = enterprise_profile.get_enterprise(db, enterprise_id)
    return Envelope(data=_enterprise_to_response(enterprise))


@router.put("/{enterprise_id}", response_model=Envelope[EnterpriseResponse])
def update_enterprise(
    enterprise_id: str,
    req: EnterpriseUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Partial update; nested sections merge into the stored profile."""
    enterprise = enterprise_profile.update_enterprise(
        db, enterprise_id, req.model_dump(exclude_unset=True), current_user.id
    )
    return Envelope(data=_enterprise_to_response(enterprise))


@router.delete("/{enterprise_id}", response_model=MessageResponse)
def delete_enterprise(
    enterprise_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    enterprise_profile.delete_enterprise(db, enterprise_id, current_user.id)
    return MessageResponse(message="Enterprise deleted")
