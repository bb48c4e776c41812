"""Sociétés owned by the authenticated user."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from backend.dependencies.security import AuthenticatedUser, get_current_user, require_roles
from backend.dependencies.tenant import Societe, get_current_societe
from backend.schemas.societes import SocietePayload, SocieteUpdateRequest
from core import societe_service
from core.user_service import ROLE_PME

router = APIRouter(prefix="/societes", tags=["societes"])


@router.get("", response_model=list[SocietePayload])
def list_societes(user: AuthenticatedUser = Depends(get_current_user)):
    return [SocietePayload(**row) for row in societe_service.list_societes_for_owner(user.id)]


@router.get("/{societe_id}", response_model=SocietePayload)
def get_societe(societe: Societe = Depends(get_current_societe)):
    row = societe_service.get_societe(societe.id)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Société introuvable")
    return SocietePayload(**row)


@router.patch(
    "/{societe_id}",
    response_model=SocietePayload,
    dependencies=[Depends(require_roles(ROLE_PME))],
)
def rename_societe(payload: SocieteUpdateRequest, societe: Societe = Depends(get_current_societe)):
    try:
        row = societe_service.rename_societe(societe.id, payload.nom)
    except societe_service.SocieteNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return SocietePayload(**row)
