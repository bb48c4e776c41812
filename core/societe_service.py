"""Sociétés (locataires) : lecture, renommage et contrôle de propriété."""

from __future__ import annotations  # Active l'évaluation différée des annotations

from typing import Optional  # Typage optionnel

from sqlalchemy import text  # Permet de construire des requêtes SQL textuelles

from .data_repository import fetch_all, fetch_one, get_engine  # Fonctions utilitaires d'accès à la base


_SOCIETE_COLUMNS = "id, nom, owner_id, created_at"


class SocieteNotFoundError(LookupError):
    """Levée lorsqu'une société n'existe pas."""


def get_societe(societe_id: int) -> Optional[dict]:
    """Retourne la société ou None si l'identifiant est inconnu."""

    engine = get_engine()
    with engine.connect() as conn:
        return fetch_one(
            conn,
            f"SELECT {_SOCIETE_COLUMNS} FROM societes WHERE id = :societe_id",
            {"societe_id": int(societe_id)},
        )


def list_societes_for_owner(owner_id: int) -> list[dict]:
    """Liste les sociétés détenues par un utilisateur, triées par nom."""

    engine = get_engine()
    with engine.connect() as conn:
        return fetch_all(
            conn,
            f"SELECT {_SOCIETE_COLUMNS} FROM societes WHERE owner_id = :owner_id ORDER BY nom, id",
            {"owner_id": int(owner_id)},
        )


def list_all_societes() -> list[dict]:
    """Toutes les sociétés, les plus récentes d'abord (portefeuille d'un expert-comptable)."""

    engine = get_engine()
    with engine.connect() as conn:
        return fetch_all(
            conn,
            f"SELECT {_SOCIETE_COLUMNS} FROM societes ORDER BY created_at DESC, id DESC",
        )


def rename_societe(societe_id: int, nom: str) -> dict:
    """Corrige le nom d'une société et retourne la ligne mise à jour."""

    cleaned = (nom or "").strip()
    if not cleaned:
        raise ValueError("Le nom de la société est obligatoire.")

    engine = get_engine()
    with engine.begin() as conn:
        updated = conn.execute(
            text("UPDATE societes SET nom = :nom WHERE id = :societe_id"),
            {"nom": cleaned, "societe_id": int(societe_id)},
        ).rowcount
        if not updated:
            raise SocieteNotFoundError("Société introuvable")
        return fetch_one(
            conn,
            f"SELECT {_SOCIETE_COLUMNS} FROM societes WHERE id = :societe_id",
            {"societe_id": int(societe_id)},
        )


__all__ = [
    "SocieteNotFoundError",
    "get_societe",
    "list_all_societes",
    "list_societes_for_owner",
    "rename_societe",
]
