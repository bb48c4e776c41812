"""Portefeuille de l'expert-comptable : toutes les sociétés suivies."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from backend.dependencies.security import require_roles
from backend.schemas.societes import SocietePayload
from core import societe_service
from core.user_service import ROLE_EXPERT

router = APIRouter(
    prefix="/experts",
    tags=["experts"],
    dependencies=[Depends(require_roles(ROLE_EXPERT))],
)


@router.get("/societes", response_model=list[SocietePayload])
def list_societes():
    return [SocietePayload(**row) for row in societe_service.list_all_societes()]
