from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from backend.schemas.base import RequestModel


class SocietePayload(BaseModel):
    id: int
    nom: str
    owner_id: int
    created_at: Optional[datetime] = None


class SocieteUpdateRequest(RequestModel):
    nom: str = Field(..., min_length=1)


__all__ = ["SocietePayload", "SocieteUpdateRequest"]
