"""Enterprise model.

Identification fields are plain columns. The rest of the profile lives in
nested JSON sections that are merged key by key on update, see
``services/enterprise_profile.py``.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, JSON, String, Text
from sqlalchemy.orm import relationship

from compliance.database import Base


class Enterprise(Base):
    __tablename__ = "enterprises"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Identification
    name = Column(String(200), nullable=False)
    legal_name = Column(String(200), nullable=True)
    region = Column(String(50), nullable=True)
    city = Column(String(100), nullable=True)
    creation_date = Column(Date, nullable=True)
    sector = Column(String(50), nullable=True)  # Primaire | Secondaire | Tertiaire
    sub_sector = Column(String(50), nullable=True)
    legal_form = Column(String(50), nullable=True)
    taxpayer_number = Column(String(50), nullable=True)

    # Nested profile sections
    economic_performance = Column(JSON, nullable=True)
    investment_employment = Column(JSON, nullable=True)
    innovation = Column(JSON, nullable=True)
    contact = Column(JSON, nullable=True)
    description = Column(Text, nullable=True)

    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, nullable=True)

    # Relationships
    conventions = relationship("Convention", back_populates="enterprise")
    documents = relationship("Document", back_populates="enterprise", cascade="all, delete-orphan")
    visits = relationship("Visit", back_populates="enterprise", cascade="all, delete-orphan")
