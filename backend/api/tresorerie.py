"""Treasury endpoints: recettes et dépenses d'une société."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status

from backend.dependencies.tenant import Societe, get_current_societe
from backend.schemas.tresorerie import OperationListResponse, OperationPayload, OperationRequest
from backend.services import tresorerie as tresorerie_service

router = APIRouter(prefix="/societes/{societe_id}/tresorerie", tags=["tresorerie"])


@router.get("/recettes", response_model=OperationListResponse)
def list_recettes(
    date_from: date | None = Query(default=None, alias="from"),
    date_to: date | None = Query(default=None, alias="to"),
    societe: Societe = Depends(get_current_societe),
):
    items = tresorerie_service.list_recettes(societe_id=societe.id, date_from=date_from, date_to=date_to)
    return OperationListResponse(items=items)


@router.post("/recettes", response_model=OperationPayload, status_code=status.HTTP_201_CREATED)
def create_recette(payload: OperationRequest, societe: Societe = Depends(get_current_societe)):
    try:
        row = tresorerie_service.create_recette(
            societe_id=societe.id,
            date_operation=payload.date,
            montant=payload.montant,
            description=payload.description,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return OperationPayload(**row)


@router.get("/depenses", response_model=OperationListResponse)
def list_depenses(
    date_from: date | None = Query(default=None, alias="from"),
    date_to: date | None = Query(default=None, alias="to"),
    societe: Societe = Depends(get_current_societe),
):
    items = tresorerie_service.list_depenses(societe_id=societe.id, date_from=date_from, date_to=date_to)
    return OperationListResponse(items=items)


@router.post("/depenses", response_model=OperationPayload, status_code=status.HTTP_201_CREATED)
def create_depense(payload: OperationRequest, societe: Societe = Depends(get_current_societe)):
    try:
        row = tresorerie_service.create_depense(
            societe_id=societe.id,
            date_operation=payload.date,
            montant=payload.montant,
            description=payload.description,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return OperationPayload(**row)
