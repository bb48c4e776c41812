import pytest
from fastapi.testclient import TestClient

from backend.main import app


@pytest.fixture()
def api_client(sqlite_engine):
    return TestClient(app)


def _register(client, email="awa@example.ci", societe="Maquis Chez Awa"):
    response = client.post(
        "/auth/register",
        json={"email": email, "password": "motdepasse1", "name": "Awa", "societeNom": societe},
    )
    assert response.status_code == 201, response.text
    body = response.json()
    headers = {"Authorization": f"Bearer {body['token']}"}
    societe_id = client.get("/societes", headers=headers).json()[0]["id"]
    return headers, societe_id


def test_health(api_client):
    assert api_client.get("/health").json() == {"status": "ok"}


def test_register_login_and_me(api_client):
    _register(api_client)

    duplicate = api_client.post(
        "/auth/register",
        json={"email": "AWA@example.ci", "password": "motdepasse1", "name": "Awa", "societe_nom": "Bis"},
    )
    assert duplicate.status_code == 400
    assert duplicate.json()["detail"] == "Email déjà utilisé"

    bad = api_client.post("/auth/login", json={"email": "awa@example.ci", "password": "mauvais-mdp"})
    assert bad.status_code == 401
    assert bad.json()["detail"] == "Identifiants invalides"

    login = api_client.post("/auth/login", json={"email": "awa@example.ci", "password": "motdepasse1"})
    assert login.status_code == 200
    token = login.json()["token"]
    me = api_client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["email"] == "awa@example.ci"
    assert me.json()["role"] == "PME"


def test_tenant_routes_require_token(api_client):
    assert api_client.get("/societes/1/stock/produits").status_code == 401

    invalid = api_client.get("/societes/1/stock/produits", headers={"Authorization": "Bearer abc"})
    assert invalid.status_code == 401
    assert invalid.json()["detail"] == "Token invalide"


def test_tenant_access_is_owner_only(api_client):
    headers, societe_id = _register(api_client)
    autre_headers, _ = _register(api_client, email="kofi@example.ci", societe="Quincaillerie Kofi")

    assert api_client.get(f"/societes/{societe_id}/clients", headers=headers).status_code == 200
    forbidden = api_client.get(f"/societes/{societe_id}/clients", headers=autre_headers)
    assert forbidden.status_code == 403
    assert api_client.get("/societes/9999/clients", headers=headers).status_code == 404


def test_stock_flow(api_client):
    headers, societe_id = _register(api_client)
    base = f"/societes/{societe_id}/stock"

    assert api_client.get(f"{base}/unites", headers=headers).json()[0] == "PIECE"

    produit = api_client.post(
        f"{base}/produits",
        json={"reference": "abc", "designation": "Article ABC", "seuilAlerte": 5},
        headers=headers,
    ).json()
    entree = api_client.post(
        f"{base}/mouvements",
        json={"produitId": produit["id"], "type": "ENTREE", "quantite": 10, "date": "2024-03-01T09:00:00"},
        headers=headers,
    )
    assert entree.status_code == 201

    sortie = api_client.post(
        f"{base}/mouvements",
        json={"produitId": produit["id"], "type": "SORTIE", "quantite": 15, "date": "2024-03-02T09:00:00"},
        headers=headers,
    )
    assert sortie.status_code == 400
    assert sortie.json()["detail"] == "Stock insuffisant. Disponible: 10, demandé: 15"

    inventaire = api_client.post(
        f"{base}/inventaires", json={"dateInventaire": "2024-06-30"}, headers=headers
    ).json()
    ligne = api_client.post(
        f"{base}/inventaires/{inventaire['id']}/lignes",
        json={"produitId": produit["id"], "quantiteComptee": 3},
        headers=headers,
    ).json()
    assert ligne["ecart"] == -7.0

    cloture = api_client.post(f"{base}/inventaires/{inventaire['id']}/cloturer", headers=headers)
    assert cloture.status_code == 200
    assert cloture.json()["statut"] == "CLOTURE"
    again = api_client.post(f"{base}/inventaires/{inventaire['id']}/cloturer", headers=headers)
    assert again.status_code == 400

    alertes = api_client.get(f"{base}/produits/alerte", headers=headers).json()
    assert [p["reference"] for p in alertes] == ["ABC"]
    mouvements = api_client.get(f"{base}/mouvements", params={"produit_id": produit["id"]}, headers=headers).json()
    assert [m["type"] for m in mouvements] == ["SORTIE", "ENTREE"]

    assert api_client.get(f"{base}/produits/9999", headers=headers).status_code == 404


def test_budget_routes(api_client):
    headers, societe_id = _register(api_client)
    base = f"/societes/{societe_id}/budgets"

    assert api_client.get(f"{base}/2024/comparaison", headers=headers).json() is None

    api_client.post(
        f"/societes/{societe_id}/tresorerie/recettes",
        json={"date": "2024-05-01T00:00:00", "montant": 700},
        headers=headers,
    )
    saved = api_client.post(
        base,
        json={"annee": 2024, "budgetRecettes": 1000, "budgetDepenses": 400},
        headers=headers,
    )
    assert saved.status_code == 200

    comparaison = api_client.get(f"{base}/2024/comparaison", headers=headers).json()
    assert comparaison["reel_recettes"] == 700.0
    assert comparaison["ecart_resultat"] == (700.0 - 0.0) - (1000.0 - 400.0)
    assert [row["annee"] for row in api_client.get(f"{base}/comparaison", headers=headers).json()["items"]] == [2024]

    assert api_client.delete(f"{base}/2024", headers=headers).json() == {"success": True}
    assert api_client.delete(f"{base}/2024", headers=headers).status_code == 404


def test_users_and_chat_are_public(api_client):
    created = api_client.post(
        "/users",
        json={"email": "compta@cabinet.ci", "password": "motdepasse1", "name": "Cabinet", "role": "EXPERT"},
    )
    assert created.status_code == 201
    assert "password" not in created.json()
    assert "password_hash" not in created.json()

    chat = api_client.post("/chat", json={"message": "Bonjour"})
    assert chat.json()["reply"].startswith("Bonjour")


def test_expert_reaches_client_societes(api_client):
    pme_headers, societe_id = _register(api_client)
    expert = api_client.post(
        "/auth/register-expert",
        json={"email": "yao@cabinet.ci", "password": "motdepasse1", "name": "Cabinet Yao"},
    )
    assert expert.status_code == 201, expert.text
    headers = {"Authorization": f"Bearer {expert.json()['token']}"}

    portefeuille = api_client.get("/experts/societes", headers=headers)
    assert portefeuille.status_code == 200
    assert [societe["id"] for societe in portefeuille.json()] == [societe_id]

    assert api_client.get(f"/societes/{societe_id}/clients", headers=headers).status_code == 200
    assert api_client.get("/societes/9999/clients", headers=headers).status_code == 404
    rename = api_client.patch(f"/societes/{societe_id}", json={"nom": "Repris"}, headers=headers)
    assert rename.status_code == 403

    assert api_client.get("/experts/societes", headers=pme_headers).status_code == 403


def test_password_whitespace_is_significant(api_client):
    created = api_client.post(
        "/auth/register",
        json={"email": "awa@example.ci", "password": "  motdepasse1  ", "name": " Awa ", "societeNom": " Maquis "},
    )
    assert created.status_code == 201, created.text
    assert created.json()["user"]["name"] == "Awa"

    padded = api_client.post("/auth/login", json={"email": "awa@example.ci", "password": "  motdepasse1  "})
    assert padded.status_code == 200

    trimmed = api_client.post("/auth/login", json={"email": "awa@example.ci", "password": "motdepasse1"})
    assert trimmed.status_code == 401
