"""Client endpoints, scoped to the société in the path."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from backend.dependencies.tenant import Societe, get_current_societe
from backend.schemas.clients import ClientCreateRequest, ClientPayload, ClientUpdateRequest
from backend.services import clients as clients_service

router = APIRouter(prefix="/societes/{societe_id}/clients", tags=["clients"])


@router.get("", response_model=list[ClientPayload])
def list_clients(societe: Societe = Depends(get_current_societe)):
    return [ClientPayload(**row) for row in clients_service.list_clients(societe_id=societe.id)]


@router.post("", response_model=ClientPayload, status_code=status.HTTP_201_CREATED)
def create_client(payload: ClientCreateRequest, societe: Societe = Depends(get_current_societe)):
    try:
        row = clients_service.create_client(payload.model_dump(), societe_id=societe.id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return ClientPayload(**row)


@router.patch("/{client_id}", response_model=ClientPayload)
def update_client(
    client_id: int,
    payload: ClientUpdateRequest,
    societe: Societe = Depends(get_current_societe),
):
    try:
        row = clients_service.update_client(
            client_id,
            payload.model_dump(exclude_unset=True),
            societe_id=societe.id,
        )
    except clients_service.ClientNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return ClientPayload(**row)


@router.delete("/{client_id}")
def delete_client(client_id: int, societe: Societe = Depends(get_current_societe)) -> dict[str, bool]:
    try:
        clients_service.delete_client(client_id, societe_id=societe.id)
    except clients_service.ClientNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return {"success": True}
