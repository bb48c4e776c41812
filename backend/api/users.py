"""Direct user creation (no société attached)."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from backend.schemas.auth import UserPayload
from backend.schemas.users import CreateUserRequest
from core import user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserPayload, status_code=status.HTTP_201_CREATED)
def create_user(payload: CreateUserRequest) -> UserPayload:
    try:
        user = user_service.create_user(
            payload.email,
            payload.password,
            payload.name,
            phone=payload.phone,
            role=payload.role,
        )
    except (user_service.ConflictError, ValueError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return UserPayload(**user)
