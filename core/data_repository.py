from functools import lru_cache  # Cache standard pour l'engine
from typing import Any  # Typage des lignes retournées

import pandas as pd  # Bibliothèque de manipulation de données tabulaires
from sqlalchemy import create_engine, text  # Création d'engine et requêtes SQL
from sqlalchemy.sql.elements import ClauseElement, TextClause  # Types des expressions SQLAlchemy
from sqlalchemy.engine import Connection, Engine  # Types du moteur SQLAlchemy

from .settings import AppSettings

SETTINGS = AppSettings.load()
DATABASE_URL = SETTINGS.database_url  # DATABASE_URL ou assemblée depuis POSTGRES_* / DB_*
POOL_SIZE = SETTINGS.db_pool_size
POOL_MAX_OVERFLOW = SETTINGS.db_pool_max_overflow
SQL_ECHO = SETTINGS.sql_echo


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """Retourne le moteur SQLAlchemy partagé, mis en cache via functools."""
    # Certains dialectes (ex: sqlite memory) n'acceptent pas pool_size/max_overflow.
    kwargs = {"pool_pre_ping": True, "echo": SQL_ECHO}
    if not DATABASE_URL.startswith("sqlite"):
        kwargs.update(
            {
                "pool_size": max(1, POOL_SIZE),
                "max_overflow": max(0, POOL_MAX_OVERFLOW),
            }
        )
    return create_engine(DATABASE_URL, **kwargs)


def _normalize_statement(sql: str | ClauseElement) -> ClauseElement:
    if isinstance(sql, str):  # Si la requête est une chaîne brute
        return text(sql)  # Convertit en TextClause SQLAlchemy
    if isinstance(sql, ClauseElement):  # Si c'est déjà une expression SQL
        return sql  # Renvoie telle quelle
    raise TypeError("sql must be a string or SQLAlchemy ClauseElement")  # Erreur si type invalide


def query_df(sql: str | ClauseElement, params=None) -> pd.DataFrame:
    """Exécute une requête SELECT et retourne le résultat sous forme de DataFrame Pandas."""
    statement = _normalize_statement(sql)  # Normalise la requête fournie
    if params is not None and not isinstance(params, dict):  # Vérifie le type des paramètres
        raise TypeError("params must be a mapping when provided")  # Soulève une erreur en cas de mauvais type

    eng = get_engine()  # Récupère le moteur SQL
    with eng.connect() as conn:  # Ouvre une connexion en lecture
        result = conn.execute(statement, params or {})  # Exécute la requête préparée
        columns = list(result.keys())  # Récupère les noms de colonnes
        rows = result.fetchall()  # Récupère toutes les lignes

    if not rows:  # Si aucune ligne n'est retournée
        return pd.DataFrame(columns=columns)  # Renvoie un DataFrame vide avec colonnes

    return pd.DataFrame([tuple(row) for row in rows], columns=columns)  # Construit le DataFrame depuis les lignes


def fetch_one(conn: Connection, sql: str | ClauseElement, params=None) -> dict[str, Any] | None:
    """Exécute une requête sur une connexion ouverte et retourne la première ligne en dict."""
    row = conn.execute(_normalize_statement(sql), params or {}).mappings().first()  # Première ligne ou None
    return dict(row) if row is not None else None  # Convertit le RowMapping en dict


def fetch_all(conn: Connection, sql: str | ClauseElement, params=None) -> list[dict[str, Any]]:
    """Exécute une requête sur une connexion ouverte et retourne toutes les lignes en dicts."""
    result = conn.execute(_normalize_statement(sql), params or {})  # Exécute la requête
    return [dict(row) for row in result.mappings()]  # Liste de dictionnaires natifs


def insert_returning_id(conn: Connection, sql: str | TextClause, params=None) -> int:
    """Exécute un INSERT ... RETURNING id dans la transaction courante et retourne l'ID."""
    row = conn.execute(_normalize_statement(sql), params or {}).fetchone()  # Ligne RETURNING
    if row is None:  # Le dialecte n'a rien renvoyé
        raise RuntimeError("INSERT sans RETURNING id exploitable")  # Erreur système
    return int(row[0])  # Identifiant généré


__all__ = [
    "get_engine",
    "query_df",
    "fetch_one",
    "fetch_all",
    "insert_returning_id",
]
