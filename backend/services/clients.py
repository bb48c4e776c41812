"""Customer records of a société."""

from __future__ import annotations

from typing import Any, Mapping

from sqlalchemy import text

from core.data_repository import fetch_all, fetch_one, get_engine, insert_returning_id

_CLIENT_COLUMNS = "id, societe_id, nom, adresse, email, telephone, numero_cc, created_at"
_CLIENT_FIELDS = ("nom", "adresse", "email", "telephone", "numero_cc")


class ClientNotFoundError(LookupError):
    """Client absent ou appartenant à une autre société."""


def _clean(values: Mapping[str, Any]) -> dict[str, Any]:
    cleaned: dict[str, Any] = {}
    for key in _CLIENT_FIELDS:
        if key not in values:
            continue
        value = values[key]
        if isinstance(value, str):
            value = value.strip() or None
        cleaned[key] = value
    if "nom" in cleaned and not cleaned["nom"]:
        raise ValueError("Le nom du client est obligatoire")
    return cleaned


def _load_client(conn, client_id: int, societe_id: int) -> dict[str, Any]:
    row = fetch_one(
        conn,
        f"SELECT {_CLIENT_COLUMNS} FROM clients WHERE id = :cid AND societe_id = :societe_id",
        {"cid": int(client_id), "societe_id": int(societe_id)},
    )
    if row is None:
        raise ClientNotFoundError("Client introuvable")
    return row


def list_clients(*, societe_id: int) -> list[dict[str, Any]]:
    engine = get_engine()
    with engine.connect() as conn:
        return fetch_all(
            conn,
            f"SELECT {_CLIENT_COLUMNS} FROM clients WHERE societe_id = :societe_id ORDER BY nom ASC, id ASC",
            {"societe_id": int(societe_id)},
        )


def create_client(values: Mapping[str, Any], *, societe_id: int) -> dict[str, Any]:
    data = _clean(values)
    if not data.get("nom"):
        raise ValueError("Le nom du client est obligatoire")
    row = {key: data.get(key) for key in _CLIENT_FIELDS}

    engine = get_engine()
    with engine.begin() as conn:
        client_id = insert_returning_id(
            conn,
            text(
                """
                INSERT INTO clients (societe_id, nom, adresse, email, telephone, numero_cc)
                VALUES (:societe_id, :nom, :adresse, :email, :telephone, :numero_cc)
                RETURNING id
                """
            ),
            {**row, "societe_id": int(societe_id)},
        )
        return _load_client(conn, client_id, societe_id)


def update_client(client_id: int, changes: Mapping[str, Any], *, societe_id: int) -> dict[str, Any]:
    """Mise à jour partielle ; refusée si le client n'appartient pas à la société."""

    data = _clean(changes)
    engine = get_engine()
    with engine.begin() as conn:
        _load_client(conn, client_id, societe_id)
        if data:
            assignments = ", ".join(f"{column} = :{column}" for column in sorted(data))
            conn.execute(
                text(f"UPDATE clients SET {assignments} WHERE id = :cid AND societe_id = :societe_id"),
                {**data, "cid": int(client_id), "societe_id": int(societe_id)},
            )
        return _load_client(conn, client_id, societe_id)


def delete_client(client_id: int, *, societe_id: int) -> None:
    engine = get_engine()
    with engine.begin() as conn:
        deleted = conn.execute(
            text("DELETE FROM clients WHERE id = :cid AND societe_id = :societe_id"),
            {"cid": int(client_id), "societe_id": int(societe_id)},
        ).rowcount
    if not deleted:
        raise ClientNotFoundError("Client introuvable")


__all__ = ["ClientNotFoundError", "create_client", "delete_client", "list_clients", "update_client"]
