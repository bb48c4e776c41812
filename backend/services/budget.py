"""Annual budgets and actual-vs-budget variance per société."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

import pandas as pd
from sqlalchemy import text

from core.data_repository import fetch_all, fetch_one, get_engine, query_df

logger = logging.getLogger(__name__)

_BUDGET_COLUMNS = "id, societe_id, annee, budget_recettes, budget_depenses, created_at, updated_at"


class BudgetNotFoundError(LookupError):
    """Aucun budget pour (société, année)."""


def periode_annee(annee: int) -> tuple[datetime, datetime]:
    """Bornes inclusives de l'année civile : 1er janvier 00:00 au 31 décembre 23:59:59.999."""

    return datetime(annee, 1, 1), datetime(annee, 12, 31, 23, 59, 59, 999000)


def _budget_payload(row: dict[str, Any]) -> dict[str, Any]:
    payload = dict(row)
    payload["annee"] = int(payload["annee"])
    payload["budget_recettes"] = float(payload["budget_recettes"])
    payload["budget_depenses"] = float(payload["budget_depenses"])
    return payload


def _comparaison(budget: dict[str, Any], reel_recettes: float, reel_depenses: float) -> dict[str, Any]:
    budget_recettes = budget["budget_recettes"]
    budget_depenses = budget["budget_depenses"]
    resultat_reel = reel_recettes - reel_depenses
    resultat_budget = budget_recettes - budget_depenses
    return {
        **budget,
        "reel_recettes": reel_recettes,
        "reel_depenses": reel_depenses,
        # positif = mieux que prévu
        "ecart_recettes": reel_recettes - budget_recettes,
        # positif = dépassement
        "ecart_depenses": reel_depenses - budget_depenses,
        "ecart_resultat": resultat_reel - resultat_budget,
    }


def create_or_update(
    *,
    societe_id: int,
    annee: int,
    budget_recettes: float,
    budget_depenses: float,
) -> dict[str, Any]:
    """Upsert keyed by (societe_id, annee): a second submission overwrites the amounts."""

    if budget_recettes < 0 or budget_depenses < 0:
        raise ValueError("Les montants budgétés doivent être positifs")

    params = {
        "societe_id": int(societe_id),
        "annee": int(annee),
        "recettes": float(budget_recettes),
        "depenses": float(budget_depenses),
        "now": datetime.now(),
    }
    engine = get_engine()
    with engine.begin() as conn:
        conn.execute(
            text(
                """
                INSERT INTO budgets (societe_id, annee, budget_recettes, budget_depenses, created_at, updated_at)
                VALUES (:societe_id, :annee, :recettes, :depenses, :now, :now)
                ON CONFLICT (societe_id, annee) DO UPDATE SET
                    budget_recettes = excluded.budget_recettes,
                    budget_depenses = excluded.budget_depenses,
                    updated_at = excluded.updated_at
                """
            ),
            params,
        )
        row = fetch_one(
            conn,
            f"SELECT {_BUDGET_COLUMNS} FROM budgets WHERE societe_id = :societe_id AND annee = :annee",
            params,
        )
    return _budget_payload(row)


def list_budgets(*, societe_id: int) -> list[dict[str, Any]]:
    engine = get_engine()
    with engine.connect() as conn:
        rows = fetch_all(
            conn,
            f"SELECT {_BUDGET_COLUMNS} FROM budgets WHERE societe_id = :societe_id ORDER BY annee DESC",
            {"societe_id": int(societe_id)},
        )
    return [_budget_payload(row) for row in rows]


def get_budget(annee: int, *, societe_id: int) -> Optional[dict[str, Any]]:
    engine = get_engine()
    with engine.connect() as conn:
        row = fetch_one(
            conn,
            f"SELECT {_BUDGET_COLUMNS} FROM budgets WHERE societe_id = :societe_id AND annee = :annee",
            {"societe_id": int(societe_id), "annee": int(annee)},
        )
    return _budget_payload(row) if row else None


def _sum_montants(conn, table: str, societe_id: int, annee: int) -> float:
    debut, fin = periode_annee(annee)
    row = fetch_one(
        conn,
        f"""
        SELECT COALESCE(SUM(montant), 0) AS total
        FROM {table}
        WHERE societe_id = :societe_id AND date >= :debut AND date <= :fin
        """,
        {"societe_id": int(societe_id), "debut": debut, "fin": fin},
    )
    return float(row["total"] or 0)


def get_avec_comparaison(annee: int, *, societe_id: int) -> Optional[dict[str, Any]]:
    """Budget de l'année avec le réel et les écarts, ou None sans budget."""

    budget = get_budget(annee, societe_id=societe_id)
    if budget is None:
        return None

    engine = get_engine()
    with engine.connect() as conn:
        reel_recettes = _sum_montants(conn, "recettes", societe_id, annee)
        reel_depenses = _sum_montants(conn, "depenses", societe_id, annee)
    return _comparaison(budget, reel_recettes, reel_depenses)


def _load_montants(table: str, societe_id: int) -> pd.DataFrame:
    df = query_df(
        f"SELECT date, montant FROM {table} WHERE societe_id = :societe_id",
        params={"societe_id": int(societe_id)},
    )
    if not df.empty:
        df["date"] = pd.to_datetime(df["date"], format="mixed")
        df["montant"] = pd.to_numeric(df["montant"], errors="coerce").fillna(0.0)
    return df


def _total_periode(df: pd.DataFrame, annee: int) -> float:
    if df.empty:
        return 0.0
    debut, fin = periode_annee(annee)
    mask = (df["date"] >= pd.Timestamp(debut)) & (df["date"] <= pd.Timestamp(fin))
    return float(df.loc[mask, "montant"].sum())


def list_avec_comparaison(*, societe_id: int) -> list[dict[str, Any]]:
    """Comparaison réel/budget pour chaque année budgétée, année décroissante."""

    budgets = list_budgets(societe_id=societe_id)
    if not budgets:
        return []

    recettes = _load_montants("recettes", societe_id)
    depenses = _load_montants("depenses", societe_id)
    return [
        _comparaison(budget, _total_periode(recettes, budget["annee"]), _total_periode(depenses, budget["annee"]))
        for budget in budgets
    ]


def delete(annee: int, *, societe_id: int) -> None:
    engine = get_engine()
    with engine.begin() as conn:
        deleted = conn.execute(
            text("DELETE FROM budgets WHERE societe_id = :societe_id AND annee = :annee"),
            {"societe_id": int(societe_id), "annee": int(annee)},
        ).rowcount
    if not deleted:
        raise BudgetNotFoundError("Budget introuvable")
    logger.info("Budget %s supprimé pour la société %s", annee, societe_id)


__all__ = [
    "BudgetNotFoundError",
    "create_or_update",
    "delete",
    "get_avec_comparaison",
    "get_budget",
    "list_avec_comparaison",
    "list_budgets",
    "periode_annee",
]
