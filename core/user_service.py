"""Utilisateurs : hachage des mots de passe, inscription PME/expert et authentification."""

from __future__ import annotations  # Active l'évaluation différée des annotations

import hashlib  # Fonctions de hachage (PBKDF2)
import hmac  # Comparaison sécurisée des hash
import logging  # Journalisation
import secrets  # Génération de sels cryptographiques
from typing import Optional  # Typage optionnel

from sqlalchemy import text  # Construction de requêtes SQL textuelles
from sqlalchemy.exc import IntegrityError  # Gestion des erreurs d'intégrité SQL

from .data_repository import fetch_one, get_engine, insert_returning_id  # Fonctions d'accès base
from .settings import AppSettings


_PASSWORD_ITERATIONS = AppSettings.load().password_hash_iterations  # Facteur de coût PBKDF2
_HASH_ALGO = "pbkdf2_sha256"  # Identifiant de l'algorithme utilisé
ROLE_PME = "PME"
ROLE_EXPERT = "EXPERT"
ALLOWED_ROLES: tuple[str, ...] = (ROLE_PME, ROLE_EXPERT)  # Rôles autorisés
_PUBLIC_COLUMNS = "id, email, name, phone, role, created_at"  # Colonnes exposées (jamais le hash)


logger = logging.getLogger(__name__)


class UserServiceError(Exception):
    """Exception de base pour les opérations sur les utilisateurs."""


class ConflictError(UserServiceError):
    """Levée lorsqu'un e-mail est déjà utilisé."""


class InvalidCredentialsError(UserServiceError):
    """Levée lorsque l'e-mail ou le mot de passe est incorrect (cause non distinguée)."""


def _hash_password(password: str) -> str:
    """Hache via PBKDF2 et fournit un format compatible avec `django-style`."""
    salt = secrets.token_bytes(16)  # Génère un sel aléatoire de 16 octets
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt, _PASSWORD_ITERATIONS
    )  # Calcule PBKDF2-HMAC-SHA256
    return f"{_HASH_ALGO}${_PASSWORD_ITERATIONS}${salt.hex()}${digest.hex()}"  # Concatène dans un format lisible


def _verify_password(password: str, encoded: str) -> bool:
    try:  # Tente de découper le format encodé
        algorithm, iter_str, salt_hex, digest_hex = encoded.split("$")
    except ValueError:  # Format incorrect
        return False

    if algorithm != _HASH_ALGO:  # Vérifie l'algorithme attendu
        return False

    try:  # Convertit les paramètres
        iterations = int(iter_str)  # Nombre d'itérations
        salt = bytes.fromhex(salt_hex)  # Sel décodé
        expected = bytes.fromhex(digest_hex)  # Digest stocké
    except ValueError:  # Erreur de conversion
        return False

    computed = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)  # Recalcule le hash
    return hmac.compare_digest(computed, expected)  # Compare en timing-safe


def _normalize_email(value: str) -> str:
    return (value or "").strip().lower()  # Nettoie l'e-mail (espaces, casse)


def _clean_optional(value: Optional[str]) -> Optional[str]:
    cleaned = (value or "").strip()
    return cleaned or None


def _validate_new_user(email: str, password: str, name: str) -> None:
    if "@" not in email or len(email) < 5:  # Validation simple de l'email
        raise ValueError("Adresse e-mail invalide.")
    if len(password) < 8:  # Longueur minimale du mot de passe
        raise ValueError("Le mot de passe doit contenir au moins 8 caractères.")
    if not name.strip():
        raise ValueError("Le nom est obligatoire.")


def _public_user(row: dict) -> dict:
    return {
        "id": int(row["id"]),
        "email": row["email"],
        "name": row["name"],
        "phone": row.get("phone"),
        "role": row["role"],
        "created_at": row.get("created_at"),
    }  # Retourne les métadonnées sans hash


def get_user_by_email(email: str) -> Optional[dict]:
    """Retourne un utilisateur (hash inclus) à partir de son e-mail."""

    engine = get_engine()
    with engine.connect() as conn:
        return fetch_one(
            conn,
            f"SELECT {_PUBLIC_COLUMNS}, password_hash FROM app_users WHERE email = :email",
            {"email": _normalize_email(email)},
        )


def get_user_by_id(user_id: int) -> Optional[dict]:
    """Retourne les métadonnées publiques d'un utilisateur ou None."""

    engine = get_engine()
    with engine.connect() as conn:
        row = fetch_one(
            conn,
            f"SELECT {_PUBLIC_COLUMNS} FROM app_users WHERE id = :user_id",
            {"user_id": int(user_id)},
        )
    return _public_user(row) if row else None


def _insert_user(conn, *, email: str, password_hash: str, name: str, phone: Optional[str], role: str) -> int:
    return insert_returning_id(
        conn,
        text(
            """
            INSERT INTO app_users (email, password_hash, name, phone, role)
            VALUES (:email, :password_hash, :name, :phone, :role)
            RETURNING id
            """
        ),
        {
            "email": email,
            "password_hash": password_hash,
            "name": name.strip(),
            "phone": _clean_optional(phone),
            "role": role,
        },
    )


def _register(
    email: str,
    password: str,
    name: str,
    phone: Optional[str],
    role: str,
    societe_nom: Optional[str] = None,
) -> dict:
    email = _normalize_email(email)
    password = password or ""
    name = name or ""
    _validate_new_user(email, password, name)
    if societe_nom is not None and not societe_nom.strip():
        raise ValueError("Le nom de la société est obligatoire.")

    if get_user_by_email(email) is not None:  # Conflit détecté avant le hachage
        raise ConflictError("Email déjà utilisé")

    password_hash = _hash_password(password)  # Hache le mot de passe

    engine = get_engine()
    with engine.begin() as conn:  # Utilisateur et société : tout ou rien
        try:
            user_id = _insert_user(
                conn,
                email=email,
                password_hash=password_hash,
                name=name,
                phone=phone,
                role=role,
            )
        except IntegrityError as exc:  # Course sur l'index unique de l'email
            raise ConflictError("Email déjà utilisé") from exc
        if societe_nom is not None:
            conn.execute(
                text("INSERT INTO societes (nom, owner_id) VALUES (:nom, :owner_id)"),
                {"nom": societe_nom.strip(), "owner_id": user_id},
            )

    created = get_user_by_id(user_id)  # Recharge l'utilisateur créé
    if not created:
        raise RuntimeError("Impossible de retrouver l'utilisateur fraîchement créé.")
    logger.info("Utilisateur %s inscrit (rôle %s)", user_id, role)
    return created


def register_pme(
    email: str,
    password: str,
    name: str,
    societe_nom: str,
    phone: Optional[str] = None,
) -> dict:
    """Inscrit un dirigeant de PME et crée sa société dans la même transaction."""

    return _register(email, password, name, phone, ROLE_PME, societe_nom=societe_nom or "")


def register_expert(email: str, password: str, name: str, phone: Optional[str] = None) -> dict:
    """Inscrit un expert-comptable (aucune société créée)."""

    return _register(email, password, name, phone, ROLE_EXPERT)


def create_user(
    email: str,
    password: str,
    name: str,
    phone: Optional[str] = None,
    role: str = ROLE_PME,
) -> dict:
    """Crée un utilisateur sans société et retourne ses métadonnées (sans hash)."""

    role = (role or ROLE_PME).strip().upper()
    if role not in ALLOWED_ROLES:
        raise ValueError(f"Rôle invalide. Choisissez parmi {', '.join(ALLOWED_ROLES)}.")
    return _register(email, password, name, phone, role)


def authenticate_user(email: str, password: str) -> dict:
    """Valide les identifiants et retourne l'utilisateur sans le hash.

    Un e-mail inconnu et un mauvais mot de passe lèvent la même erreur afin de
    ne pas révéler l'existence d'un compte.
    """

    if not email or not password:  # Vérifie que l'entrée est fournie
        raise InvalidCredentialsError("Identifiants invalides")

    user = get_user_by_email(email)  # Charge l'utilisateur par e-mail
    if not user or not _verify_password(password, user["password_hash"]):
        raise InvalidCredentialsError("Identifiants invalides")

    return _public_user(user)


__all__ = [
    "ALLOWED_ROLES",
    "ROLE_EXPERT",
    "ROLE_PME",
    "ConflictError",
    "InvalidCredentialsError",
    "UserServiceError",
    "authenticate_user",
    "create_user",
    "get_user_by_email",
    "get_user_by_id",
    "register_expert",
    "register_pme",
]
