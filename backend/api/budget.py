"""Budget endpoints (annual targets and actual-vs-budget variance)."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Path, status

from backend.dependencies.tenant import Societe, get_current_societe
from backend.schemas.budget import (
    BudgetAvecComparaison,
    BudgetComparaisonListResponse,
    BudgetListResponse,
    BudgetPayload,
    BudgetUpsertRequest,
)
from backend.services import budget as budget_service

router = APIRouter(prefix="/societes/{societe_id}/budgets", tags=["budget"])


@router.post("", response_model=BudgetPayload)
def create_or_update_budget(payload: BudgetUpsertRequest, societe: Societe = Depends(get_current_societe)):
    try:
        row = budget_service.create_or_update(
            societe_id=societe.id,
            annee=payload.annee,
            budget_recettes=payload.budget_recettes,
            budget_depenses=payload.budget_depenses,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return BudgetPayload(**row)


@router.get("", response_model=BudgetListResponse)
def list_budgets(societe: Societe = Depends(get_current_societe)):
    return BudgetListResponse(items=budget_service.list_budgets(societe_id=societe.id))


@router.get("/comparaison", response_model=BudgetComparaisonListResponse)
def list_budgets_avec_comparaison(societe: Societe = Depends(get_current_societe)):
    return BudgetComparaisonListResponse(items=budget_service.list_avec_comparaison(societe_id=societe.id))


@router.get("/{annee}/comparaison", response_model=Optional[BudgetAvecComparaison])
def get_budget_avec_comparaison(
    annee: int = Path(..., ge=1900, le=2200),
    societe: Societe = Depends(get_current_societe),
):
    row = budget_service.get_avec_comparaison(annee, societe_id=societe.id)
    return BudgetAvecComparaison(**row) if row else None


@router.get("/{annee}", response_model=Optional[BudgetPayload])
def get_budget(
    annee: int = Path(..., ge=1900, le=2200),
    societe: Societe = Depends(get_current_societe),
):
    row = budget_service.get_budget(annee, societe_id=societe.id)
    return BudgetPayload(**row) if row else None


@router.delete("/{annee}")
def delete_budget(
    annee: int = Path(..., ge=1900, le=2200),
    societe: Societe = Depends(get_current_societe),
) -> dict[str, bool]:
    try:
        budget_service.delete(annee, societe_id=societe.id)
    except budget_service.BudgetNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return {"success": True}
