"""Recettes et dépenses de trésorerie (source du réel budgétaire)."""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Any, Optional

from sqlalchemy import text

from core.data_repository import fetch_all, fetch_one, get_engine, insert_returning_id

_TABLES = {"recette": "recettes", "depense": "depenses"}


def _as_datetime(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time())


def _end_of_day(value: date | datetime) -> datetime:
    day = value.date() if isinstance(value, datetime) else value
    return datetime.combine(day, time(23, 59, 59, 999000))


def _payload(row: dict[str, Any]) -> dict[str, Any]:
    payload = dict(row)
    payload["montant"] = float(payload["montant"])
    return payload


def _create(kind: str, *, societe_id: int, date_operation: date | datetime, montant: float, description: Optional[str]) -> dict[str, Any]:
    table = _TABLES[kind]
    if float(montant) <= 0:
        raise ValueError("Le montant doit être strictement positif")

    engine = get_engine()
    with engine.begin() as conn:
        new_id = insert_returning_id(
            conn,
            text(
                f"""
                INSERT INTO {table} (societe_id, date, montant, description)
                VALUES (:societe_id, :date, :montant, :description)
                RETURNING id
                """
            ),
            {
                "societe_id": int(societe_id),
                "date": _as_datetime(date_operation),
                "montant": float(montant),
                "description": (description or "").strip() or None,
            },
        )
        row = fetch_one(
            conn,
            f"SELECT id, societe_id, date, montant, description, created_at FROM {table} WHERE id = :id",
            {"id": new_id},
        )
    return _payload(row)


def _list(kind: str, *, societe_id: int, date_from: Optional[date] = None, date_to: Optional[date] = None) -> list[dict[str, Any]]:
    table = _TABLES[kind]
    sql = f"""
        SELECT id, societe_id, date, montant, description, created_at
        FROM {table}
        WHERE societe_id = :societe_id
    """
    params: dict[str, object] = {"societe_id": int(societe_id)}
    if date_from is not None:
        sql += " AND date >= :date_from"
        params["date_from"] = _as_datetime(date_from)
    if date_to is not None:
        sql += " AND date <= :date_to"
        params["date_to"] = _end_of_day(date_to)
    sql += " ORDER BY date DESC, id DESC"

    engine = get_engine()
    with engine.connect() as conn:
        rows = fetch_all(conn, sql, params)
    return [_payload(row) for row in rows]


def create_recette(*, societe_id: int, date_operation: date | datetime, montant: float, description: Optional[str] = None) -> dict[str, Any]:
    return _create("recette", societe_id=societe_id, date_operation=date_operation, montant=montant, description=description)


def create_depense(*, societe_id: int, date_operation: date | datetime, montant: float, description: Optional[str] = None) -> dict[str, Any]:
    return _create("depense", societe_id=societe_id, date_operation=date_operation, montant=montant, description=description)


def list_recettes(*, societe_id: int, date_from: Optional[date] = None, date_to: Optional[date] = None) -> list[dict[str, Any]]:
    return _list("recette", societe_id=societe_id, date_from=date_from, date_to=date_to)


def list_depenses(*, societe_id: int, date_from: Optional[date] = None, date_to: Optional[date] = None) -> list[dict[str, Any]]:
    return _list("depense", societe_id=societe_id, date_from=date_from, date_to=date_to)


__all__ = ["create_depense", "create_recette", "list_depenses", "list_recettes"]
