"""Jetons d'accès JWT (HS256) et dépendances d'authentification FastAPI.

Un jeton porte ``sub`` (id utilisateur), ``email``, ``role``, ``exp`` et ``jti``.
Plusieurs secrets peuvent être configurés (``JWT_SECRET_KEYS=k1,k2``) : le
premier signe, tous sont acceptés en vérification pour permettre la rotation.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from pydantic import BaseModel

from core.user_service import ALLOWED_ROLES
from backend.settings import Settings


DEFAULT_SECRET = "comptaci-dev-secret-change-me-in-production"
ALGORITHM = "HS256"
MIN_SECRET_LENGTH = 32

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


class AuthenticatedUser(BaseModel):
    """Identité extraite du jeton."""

    id: int
    email: str
    role: str


def _signing_keys(settings: Settings) -> list[str]:
    keys = list(settings.jwt_secret_keys or [])
    if not keys:
        if settings.is_production and not settings.allow_insecure_jwt_default:
            raise RuntimeError("JWT_SECRET_KEY manquant : démarrage refusé en production")
        logger.warning("Secret JWT par défaut utilisé ; définir JWT_SECRET_KEY hors développement")
        keys = [DEFAULT_SECRET]

    if any(len(key) < MIN_SECRET_LENGTH for key in keys):
        raise RuntimeError(f"Secret JWT trop court (< {MIN_SECRET_LENGTH} caractères)")
    return keys


_SETTINGS = Settings.load()
_KEYS = _signing_keys(_SETTINGS)
ACCESS_TOKEN_EXPIRE_MINUTES = _SETTINGS.jwt_expire_minutes


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def create_access_token(claims: dict[str, Any], expires_delta: timedelta | None = None) -> str:
    lifetime = expires_delta if expires_delta is not None else timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {
        **claims,
        "exp": datetime.now(timezone.utc) + lifetime,
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, _KEYS[0], algorithm=ALGORITHM)


def issue_user_token(user: dict[str, Any]) -> str:
    """Jeton de session pour un utilisateur issu de ``core.user_service``."""

    return create_access_token({"sub": str(user["id"]), "email": user["email"], "role": user["role"]})


def decode_access_token(token: str) -> dict[str, Any]:
    for key in _KEYS:
        try:
            return jwt.decode(token, key, algorithms=[ALGORITHM])
        except jwt.ExpiredSignatureError as exc:
            raise _unauthorized("Token expiré") from exc
        except jwt.InvalidSignatureError:
            continue
        except jwt.InvalidTokenError as exc:
            raise _unauthorized("Token invalide") from exc
    raise _unauthorized("Token invalide")


def get_current_user(token: str = Depends(oauth2_scheme)) -> AuthenticatedUser:
    payload = decode_access_token(token)
    try:
        user = AuthenticatedUser(
            id=int(payload["sub"]),
            email=str(payload["email"]),
            role=str(payload["role"]).upper(),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise _unauthorized("Token incomplet") from exc

    if user.role not in ALLOWED_ROLES:
        raise _unauthorized("Rôle inconnu dans le token")
    return user


def require_roles(*roles: str) -> Callable[[AuthenticatedUser], AuthenticatedUser]:
    """Dépendance qui refuse (403) les rôles hors de ``roles``."""

    allowed = {role.upper() for role in roles} or set(ALLOWED_ROLES)

    def _checker(user: AuthenticatedUser = Depends(get_current_user)) -> AuthenticatedUser:
        if user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Rôle insuffisant pour cette action",
            )
        return user

    return _checker
