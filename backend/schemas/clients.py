"""Schemas for client endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from backend.schemas.base import RequestModel


class ClientCreateRequest(RequestModel):
    nom: str = Field(..., min_length=1)
    adresse: Optional[str] = None
    email: Optional[str] = None
    telephone: Optional[str] = None
    numero_cc: Optional[str] = Field(default=None, description="Numéro de compte contribuable")


class ClientUpdateRequest(RequestModel):
    nom: Optional[str] = Field(default=None, min_length=1)
    adresse: Optional[str] = None
    email: Optional[str] = None
    telephone: Optional[str] = None
    numero_cc: Optional[str] = None


class ClientPayload(BaseModel):
    id: int
    societe_id: int
    nom: str
    adresse: Optional[str] = None
    email: Optional[str] = None
    telephone: Optional[str] = None
    numero_cc: Optional[str] = None
    created_at: Optional[datetime] = None


__all__ = ["ClientCreateRequest", "ClientPayload", "ClientUpdateRequest"]
