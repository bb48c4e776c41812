"""Fixtures partagées : base SQLite en mémoire branchée sur tous les services."""

import os

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool

# Évite toute connexion Postgres lors de l'import des modules backend/core.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("PASSWORD_HASH_ITERATIONS", "1000")

from core import data_repository, societe_service, user_service
from backend.services import budget, clients, stock, tresorerie

SCHEMA = (
    """
    CREATE TABLE app_users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        email TEXT NOT NULL UNIQUE,
        password_hash TEXT NOT NULL,
        name TEXT NOT NULL,
        phone TEXT,
        role TEXT NOT NULL DEFAULT 'PME',
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE societes (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        nom TEXT NOT NULL,
        owner_id INTEGER NOT NULL REFERENCES app_users(id),
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE clients (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        societe_id INTEGER NOT NULL REFERENCES societes(id),
        nom TEXT NOT NULL,
        adresse TEXT,
        email TEXT,
        telephone TEXT,
        numero_cc TEXT,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE budgets (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        societe_id INTEGER NOT NULL REFERENCES societes(id),
        annee INTEGER NOT NULL,
        budget_recettes REAL NOT NULL DEFAULT 0,
        budget_depenses REAL NOT NULL DEFAULT 0,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        UNIQUE (societe_id, annee)
    )
    """,
    """
    CREATE TABLE recettes (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        societe_id INTEGER NOT NULL REFERENCES societes(id),
        date TIMESTAMP NOT NULL,
        montant REAL NOT NULL,
        description TEXT,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE depenses (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        societe_id INTEGER NOT NULL REFERENCES societes(id),
        date TIMESTAMP NOT NULL,
        montant REAL NOT NULL,
        description TEXT,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE produits (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        societe_id INTEGER NOT NULL REFERENCES societes(id),
        reference TEXT NOT NULL,
        designation TEXT NOT NULL,
        unite TEXT NOT NULL DEFAULT 'PIECE',
        quantite_en_stock REAL NOT NULL DEFAULT 0,
        seuil_alerte REAL,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE mouvements_stock (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        societe_id INTEGER NOT NULL REFERENCES societes(id),
        produit_id INTEGER NOT NULL REFERENCES produits(id),
        type TEXT NOT NULL,
        quantite REAL NOT NULL,
        date TIMESTAMP NOT NULL,
        libelle TEXT,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE inventaires (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        societe_id INTEGER NOT NULL REFERENCES societes(id),
        date_inventaire DATE NOT NULL,
        commentaire TEXT,
        statut TEXT NOT NULL DEFAULT 'BROUILLON',
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE lignes_inventaire (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        inventaire_id INTEGER NOT NULL REFERENCES inventaires(id),
        produit_id INTEGER NOT NULL REFERENCES produits(id),
        quantite_comptee REAL NOT NULL,
        quantite_systeme REAL NOT NULL,
        UNIQUE (inventaire_id, produit_id)
    )
    """,
)


@pytest.fixture()
def sqlite_engine(monkeypatch):
    engine = create_engine(
        "sqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    with engine.begin() as conn:
        conn.exec_driver_sql("PRAGMA foreign_keys = ON")
        for ddl in SCHEMA:
            conn.exec_driver_sql(ddl)

    # Patch le moteur pour toute la stack core.* / backend.services.*
    for module in (data_repository, user_service, societe_service, budget, clients, stock, tresorerie):
        monkeypatch.setattr(module, "get_engine", lambda: engine)
    return engine


def _insert_societe(engine, email: str, nom: str) -> int:
    with engine.begin() as conn:
        owner_id = conn.execute(
            text(
                "INSERT INTO app_users (email, password_hash, name, role) "
                "VALUES (:email, 'x', 'Gérant', 'PME')"
            ),
            {"email": email},
        ).lastrowid
        return conn.execute(
            text("INSERT INTO societes (nom, owner_id) VALUES (:nom, :owner_id)"),
            {"nom": nom, "owner_id": owner_id},
        ).lastrowid


@pytest.fixture()
def societe_id(sqlite_engine) -> int:
    return _insert_societe(sqlite_engine, "gerant@abidjan.ci", "Boutique Plateau")


@pytest.fixture()
def autre_societe_id(sqlite_engine) -> int:
    return _insert_societe(sqlite_engine, "autre@bouake.ci", "Quincaillerie Bouaké")
