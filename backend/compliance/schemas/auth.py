"""Auth and user request/response schemas."""

from typing import Literal

from compliance.schemas.common import CamelModel


class LoginRequest(CamelModel):
    email: str
    password: str


class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"


class UserCreate(CamelModel):
    name: str
    email: str
    password: str
    role: Literal["admin", "inspector", "user"] = "user"


class UserResponse(CamelModel):
    id: str
    name: str
    email: str
    role: str
    created_at: str
