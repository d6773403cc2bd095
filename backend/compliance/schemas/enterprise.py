"""Enterprise request/response schemas."""

from datetime import date
from typing import Any, Literal, Optional

from pydantic import ConfigDict, Field

from compliance.schemas.common import CamelModel

Region = Literal[
    "Adamaoua", "Centre", "Est", "Extreme-Nord", "Littoral",
    "Nord", "Nord-Ouest", "Ouest", "Sud", "Sud-Ouest",
]
Sector = Literal["Primaire", "Secondaire", "Tertiaire"]
SubSector = Literal[
    "Agro-industriel", "Foret-Bois", "Mines", "Petrole-Gaz",
    "Industrie manufacturiere", "BTP", "Energie", "Eau",
    "Commerce", "Transport", "Telecommunications", "Banque-Assurance",
    "Tourisme", "Sante", "Education", "Autres",
]

# Nested sections are free-form JSON objects merged key by key on update.
Section = Optional[dict[str, Any]]


class EnterpriseCreate(CamelModel):
    name: str = Field(min_length=2, max_length=200)
    legal_name: Optional[str] = None
    region: Optional[Region] = None
    city: Optional[str] = Field(default=None, min_length=2, max_length=100)
    creation_date: Optional[date] = None
    sector: Optional[Sector] = None
    sub_sector: Optional[SubSector] = None
    legal_form: Optional[str] = None
    taxpayer_number: Optional[str] = None
    economic_performance: Section = None
    investment_employment: Section = None
    innovation: Section = None
    contact: Section = None
    description: Optional[str] = None


class EnterpriseUpdate(CamelModel):
    """Partial update. Only submitted keys are applied; sections merge into what is stored."""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=2, max_length=200)
    legal_name: Optional[str] = None
    region: Optional[Region] = None
    city: Optional[str] = Field(default=None, min_length=2, max_length=100)
    creation_date: Optional[date] = None
    sector: Optional[Sector] = None
    sub_sector: Optional[SubSector] = None
    legal_form: Optional[str] = None
    taxpayer_number: Optional[str] = None
    economic_performance: Section = None
    investment_employment: Section = None
    innovation: Section = None
    contact: Section = None
    description: Optional[str] = None


class EnterpriseResponse(CamelModel):
    id: str
    name: str
    legal_name: Optional[str] = None
    region: Optional[str]
    city: Optional[str]
    creation_date: Optional[date] = None
    sector: Optional[str]
    sub_sector: Optional[str] = None
    legal_form: Optional[str] = None
    taxpayer_number: Optional[str] = None
    economic_performance: dict[str, Any] = {}
    investment_employment: dict[str, Any] = {}
    innovation: dict[str, Any] = {}
    contact: dict[str, Any] = {}
    description: Optional[str] = None
    created_at: str
    updated_at: Optional[str] = None
