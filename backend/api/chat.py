"""Keyword chat assistant endpoint."""

from __future__ import annotations

from fastapi import APIRouter

from backend.schemas.chat import ChatRequest, ChatResponse
from backend.services import chat as chat_service

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("", response_model=ChatResponse)
def send_message(payload: ChatRequest) -> ChatResponse:
    return ChatResponse(reply=chat_service.reply(payload.message))
