"""User model."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime

from compliance.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="user")  # admin | inspector | user
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
