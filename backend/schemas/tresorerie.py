"""Schemas for treasury (recettes/dépenses) endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from backend.schemas.base import RequestModel


class OperationRequest(RequestModel):
    date: datetime
    montant: float = Field(..., gt=0)
    description: Optional[str] = None


class OperationPayload(BaseModel):
    id: int
    societe_id: int
    date: datetime
    montant: float
    description: Optional[str] = None
    created_at: Optional[datetime] = None


class OperationListResponse(BaseModel):
    items: List[OperationPayload]


__all__ = ["OperationListResponse", "OperationPayload", "OperationRequest"]
