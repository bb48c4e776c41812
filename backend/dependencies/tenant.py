"""Reusable dependency resolving the société (tenant) from the `societe_id` path segment."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, HTTPException, Path, status

from core.societe_service import get_societe
from core.user_service import ROLE_EXPERT
from backend.dependencies.security import AuthenticatedUser, get_current_user


@dataclass(frozen=True)
class Societe:
    id: int
    nom: str
    owner_id: int


def resolve_societe(societe_id: int) -> Societe | None:
    row = get_societe(societe_id)
    if row is None:
        return None
    return Societe(id=int(row["id"]), nom=str(row["nom"]), owner_id=int(row["owner_id"]))


def get_current_societe(
    societe_id: int = Path(..., ge=1),
    user: AuthenticatedUser = Depends(get_current_user),
) -> Societe:
    """Charge la société ciblée ; seul son propriétaire ou un expert-comptable y accède."""

    societe = resolve_societe(societe_id)
    if societe is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Société introuvable",
        )
    if user.role != ROLE_EXPERT and societe.owner_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Accès refusé à cette société",
        )
    return societe
