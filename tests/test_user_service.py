import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from core import societe_service, user_service


def _counts(engine):
    with engine.connect() as conn:
        users = conn.execute(text("SELECT COUNT(*) FROM app_users")).scalar()
        societes = conn.execute(text("SELECT COUNT(*) FROM societes")).scalar()
    return users, societes


def test_register_pme_creates_user_and_societe(sqlite_engine):
    user = user_service.register_pme("  Awa@Example.CI ", "motdepasse1", "Awa Koné", "Maquis Chez Awa")

    assert user["email"] == "awa@example.ci"
    assert user["role"] == "PME"
    assert "password_hash" not in user
    (societe,) = societe_service.list_societes_for_owner(user["id"])
    assert societe["nom"] == "Maquis Chez Awa"


def test_duplicate_registration_is_rejected_without_side_effects(sqlite_engine):
    user_service.register_pme("awa@example.ci", "motdepasse1", "Awa", "Maquis")

    with pytest.raises(user_service.ConflictError, match="Email déjà utilisé"):
        user_service.register_pme("AWA@example.ci", "autremotdepasse", "Awa bis", "Autre maquis")

    assert _counts(sqlite_engine) == (1, 1)


def test_register_expert_has_no_societe(sqlite_engine):
    user = user_service.register_expert("expert@cabinet.ci", "motdepasse1", "Cabinet Yao")

    assert user["role"] == "EXPERT"
    assert _counts(sqlite_engine) == (1, 0)


def test_password_is_stored_hashed(sqlite_engine):
    user_service.register_expert("expert@cabinet.ci", "motdepasse1", "Cabinet Yao")

    stored = user_service.get_user_by_email("expert@cabinet.ci")["password_hash"]

    assert stored.startswith("pbkdf2_sha256$")
    assert "motdepasse1" not in stored


@pytest.mark.parametrize(
    "email, password",
    [("awa@example.ci", "mauvais-mdp"), ("inconnu@example.ci", "motdepasse1")],
)
def test_login_failures_are_indistinguishable(sqlite_engine, email, password):
    user_service.register_pme("awa@example.ci", "motdepasse1", "Awa", "Maquis")

    with pytest.raises(user_service.InvalidCredentialsError) as excinfo:
        user_service.authenticate_user(email, password)

    assert str(excinfo.value) == "Identifiants invalides"


def test_authenticate_user_returns_public_fields(sqlite_engine):
    user_service.register_pme("awa@example.ci", "motdepasse1", "Awa", "Maquis")

    user = user_service.authenticate_user("Awa@Example.ci", "motdepasse1")

    assert user["email"] == "awa@example.ci"
    assert "password_hash" not in user


def test_create_user_validates_role(sqlite_engine):
    with pytest.raises(ValueError):
        user_service.create_user("x@example.ci", "motdepasse1", "X", role="ADMIN")

    user = user_service.create_user("x@example.ci", "motdepasse1", "X", role="expert")
    assert user["role"] == "EXPERT"
    assert _counts(sqlite_engine) == (1, 0)


def test_short_password_is_rejected(sqlite_engine):
    with pytest.raises(ValueError):
        user_service.register_expert("x@example.ci", "court", "X")


def test_rename_societe(sqlite_engine, societe_id):
    assert societe_service.rename_societe(societe_id, "  Nouveau nom ")["nom"] == "Nouveau nom"

    with pytest.raises(societe_service.SocieteNotFoundError):
        societe_service.rename_societe(9999, "Fantôme")


def test_societe_insert_failure_is_not_reported_as_duplicate_email(sqlite_engine):
    with sqlite_engine.begin() as conn:
        conn.execute(
            text(
                "CREATE TRIGGER refuse_societe BEFORE INSERT ON societes "
                "BEGIN SELECT RAISE(ABORT, 'refus'); END"
            )
        )

    with pytest.raises(IntegrityError):
        user_service.register_pme("awa@example.ci", "motdepasse1", "Awa", "Maquis")

    assert _counts(sqlite_engine) == (0, 0)


def test_list_all_societes_newest_first(sqlite_engine):
    ancienne = user_service.register_pme("awa@example.ci", "motdepasse1", "Awa", "Maquis Chez Awa")
    recente = user_service.register_pme("yao@example.ci", "motdepasse1", "Yao", "Garage Yao")
    with sqlite_engine.begin() as conn:
        conn.execute(
            text("UPDATE societes SET created_at = '2023-01-01 08:00:00' WHERE owner_id = :owner_id"),
            {"owner_id": ancienne["id"]},
        )
        conn.execute(
            text("UPDATE societes SET created_at = '2024-06-01 08:00:00' WHERE owner_id = :owner_id"),
            {"owner_id": recente["id"]},
        )

    noms = [societe["nom"] for societe in societe_service.list_all_societes()]

    assert noms == ["Garage Yao", "Maquis Chez Awa"]
