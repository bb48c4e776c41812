from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from backend.schemas.base import RequestModel


class RegisterExpertRequest(RequestModel):
    email: str = Field(..., min_length=5, max_length=255)
    password: str = Field(..., min_length=8)
    name: str = Field(..., min_length=1)
    phone: Optional[str] = None


class RegisterPmeRequest(RegisterExpertRequest):
    societe_nom: str = Field(..., min_length=1)


class LoginRequest(RequestModel):
    email: str
    password: str


class UserPayload(BaseModel):
    id: int
    email: str
    name: str
    phone: Optional[str] = None
    role: str = Field(description="PME | EXPERT")
    created_at: Optional[datetime] = None


class AuthResponse(BaseModel):
    user: UserPayload
    token: str
    token_type: str = "bearer"


__all__ = [
    "AuthResponse",
    "LoginRequest",
    "RegisterExpertRequest",
    "RegisterPmeRequest",
    "UserPayload",
]
