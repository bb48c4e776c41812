"""Authentication endpoints: PME/expert registration and login (JWT)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from backend.dependencies.security import AuthenticatedUser, get_current_user, issue_user_token
from backend.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RegisterExpertRequest,
    RegisterPmeRequest,
    UserPayload,
)
from core import user_service


router = APIRouter(prefix="/auth", tags=["auth"])


def _auth_response(user: dict) -> AuthResponse:
    return AuthResponse(user=UserPayload(**user), token=issue_user_token(user))


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register_pme(payload: RegisterPmeRequest) -> AuthResponse:
    try:
        user = user_service.register_pme(
            payload.email,
            payload.password,
            payload.name,
            payload.societe_nom,
            phone=payload.phone,
        )
    except (user_service.ConflictError, ValueError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _auth_response(user)


@router.post("/register-expert", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register_expert(payload: RegisterExpertRequest) -> AuthResponse:
    try:
        user = user_service.register_expert(
            payload.email,
            payload.password,
            payload.name,
            phone=payload.phone,
        )
    except (user_service.ConflictError, ValueError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest) -> AuthResponse:
    try:
        user = user_service.authenticate_user(payload.email, payload.password)
    except user_service.InvalidCredentialsError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Identifiants invalides",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
    return _auth_response(user)


@router.get("/me", response_model=UserPayload)
def me(current: AuthenticatedUser = Depends(get_current_user)) -> UserPayload:
    user = user_service.get_user_by_id(current.id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Utilisateur inconnu")
    return UserPayload(**user)
