"""FastAPI application exposing the ComptaCI accounting features for the SPA."""

from __future__ import annotations

import logging
import os
from functools import lru_cache

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.api import auth as auth_router
from backend.api import budget as budget_router
from backend.api import chat as chat_router
from backend.api import clients as clients_router
from backend.api import experts as experts_router
from backend.api import societes as societes_router
from backend.api import stock as stock_router
from backend.api import tresorerie as tresorerie_router
from backend.api import users as users_router
from backend.settings import Settings


def _load_allowed_origins() -> list[str]:
    raw_origins = os.getenv("CORS_ALLOWED_ORIGINS")
    if not raw_origins:
        # Vite/React dev server par défaut
        return [
            "http://localhost:5173",
            "http://localhost:5174",
            "http://localhost:3000",
        ]

    parsed: list[str] = []
    for entry in raw_origins.split(","):
        cleaned = entry.strip()
        if cleaned:
            parsed.append(cleaned)
    return parsed or ["http://localhost:5173"]


@lru_cache
def create_app() -> FastAPI:
    """Construit l'application FastAPI ainsi que tous les routeurs de domaine."""

    settings = Settings.load()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="ComptaCI API",
        version="1.0.0",
        description="""
## API de comptabilité SYSCOHADA pour PME

Cette API permet de gérer:
- **Comptes** : inscription PME / expert-comptable, connexion JWT
- **Budget** : budgets annuels et comparaison avec le réel
- **Stock** : produits, mouvements d'entrée/sortie, inventaires physiques
- **Clients** et **Trésorerie** (recettes / dépenses)
- **Assistant** : aide contextuelle par mots-clés

### Authentification
Obtenez un token via `/auth/login` puis passez-le en `Authorization: Bearer`.

### Multi-société
Les routes `/societes/{societe_id}/...` sont réservées au propriétaire de la société
et aux experts-comptables, qui listent le portefeuille via `/experts/societes`.
        """,
        openapi_tags=[
            {"name": "auth", "description": "Inscription, connexion et profil"},
            {"name": "societes", "description": "Sociétés de l'utilisateur"},
            {"name": "experts", "description": "Portefeuille de l'expert-comptable"},
            {"name": "budget", "description": "Budgets annuels et écarts"},
            {"name": "stock", "description": "Produits, mouvements et inventaires"},
            {"name": "clients", "description": "Fichier clients"},
            {"name": "tresorerie", "description": "Recettes et dépenses"},
            {"name": "chat", "description": "Assistant par mots-clés"},
        ],
        docs_url="/docs",
        redoc_url="/redoc",
    )

    allowed_origins = settings.cors_allowed_origins or _load_allowed_origins()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials="*" not in allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router.router)
    app.include_router(users_router.router)
    app.include_router(chat_router.router)
    app.include_router(societes_router.router)
    app.include_router(experts_router.router)
    app.include_router(budget_router.router)
    app.include_router(clients_router.router)
    app.include_router(stock_router.router)
    app.include_router(tresorerie_router.router)

    @app.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()
