"""Schemas for budget endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from backend.schemas.base import RequestModel


class BudgetUpsertRequest(RequestModel):
    annee: int = Field(..., ge=1900, le=2200)
    budget_recettes: float = Field(..., ge=0)
    budget_depenses: float = Field(..., ge=0)


class BudgetPayload(BaseModel):
    id: int
    societe_id: int
    annee: int
    budget_recettes: float
    budget_depenses: float
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BudgetAvecComparaison(BudgetPayload):
    reel_recettes: float
    reel_depenses: float
    ecart_recettes: float
    ecart_depenses: float
    ecart_resultat: float


class BudgetListResponse(BaseModel):
    items: List[BudgetPayload]


class BudgetComparaisonListResponse(BaseModel):
    items: List[BudgetAvecComparaison]


__all__ = [
    "BudgetAvecComparaison",
    "BudgetComparaisonListResponse",
    "BudgetListResponse",
    "BudgetPayload",
    "BudgetUpsertRequest",
]
