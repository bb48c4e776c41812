"""Shared pytest fixtures for backend tests."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Add project root to path
ROOT = Path(__file__).resolve().parent.parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("APP_ENV", "test")


@pytest.fixture
def client() -> TestClient:
    """Create a TestClient instance for the FastAPI app."""
    from backend.main import app

    return TestClient(app)


@pytest.fixture
def mock_user():
    """Mock PME user for testing."""
    from backend.dependencies.security import AuthenticatedUser

    return AuthenticatedUser(id=1, email="gerant@example.ci", role="PME")


@pytest.fixture
def mock_societes(monkeypatch):
    """Sociétés 1 (owned by the mock user) and 2 (owned by someone else)."""
    from backend.dependencies.tenant import Societe

    societes = {
        1: Societe(id=1, nom="Boutique Plateau", owner_id=1),
        2: Societe(id=2, nom="Autre société", owner_id=42),
    }
    monkeypatch.setattr(
        "backend.dependencies.tenant.resolve_societe",
        lambda societe_id: societes.get(societe_id),
    )
    return societes


@pytest.fixture
def authenticated_client(client, mock_user, mock_societes):
    """Client with mocked authentication."""
    from backend.main import app
    from backend.dependencies.security import get_current_user

    app.dependency_overrides[get_current_user] = lambda: mock_user
    yield client
    app.dependency_overrides.clear()
