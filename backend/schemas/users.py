from __future__ import annotations

from typing import Literal

from backend.schemas.auth import RegisterExpertRequest


class CreateUserRequest(RegisterExpertRequest):
    role: Literal["PME", "EXPERT"] = "PME"


__all__ = ["CreateUserRequest"]
