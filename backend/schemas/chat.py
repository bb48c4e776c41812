from __future__ import annotations

from pydantic import BaseModel


class ChatRequest(BaseModel):
    message: str = ""


class ChatResponse(BaseModel):
    reply: str


__all__ = ["ChatRequest", "ChatResponse"]
