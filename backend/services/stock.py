"""Stock ledger, products and physical inventories (all scoped by société)."""

from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Any, Mapping, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection

from core.data_repository import fetch_all, fetch_one, get_engine, insert_returning_id

logger = logging.getLogger(__name__)

UNITES = ["PIECE", "KG", "LITRE", "METRE", "CARTON", "AUTRE"]
MOUVEMENT_TYPES = ("ENTREE", "SORTIE")
STATUT_BROUILLON = "BROUILLON"
STATUT_CLOTURE = "CLOTURE"

_EPSILON = 1e-6
_PRODUIT_COLUMNS = "id, societe_id, reference, designation, unite, quantite_en_stock, seuil_alerte, created_at"
_UPDATABLE_PRODUIT_FIELDS = {"reference", "designation", "unite", "seuil_alerte"}


class StockServiceError(Exception):
    """Base class for stock errors."""


class ProduitNotFoundError(StockServiceError):
    """Produit absent ou hors de la société."""


class InventaireNotFoundError(StockServiceError):
    """Inventaire absent ou hors de la société."""


class StockError(StockServiceError):
    """Règle métier violée (quantité, stock insuffisant, inventaire clôturé)."""


def _as_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _as_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    return datetime.fromisoformat(str(value))


def _normalize_reference(reference: str) -> str:
    cleaned = (reference or "").strip().upper()
    if not cleaned:
        raise StockError("La référence du produit est obligatoire")
    return cleaned


def _validate_unite(unite: Optional[str]) -> str:
    value = (unite or "PIECE").strip().upper()
    if value not in UNITES:
        raise StockError(f"Unité invalide. Choisissez parmi {', '.join(UNITES)}.")
    return value


def _produit_payload(row: Mapping[str, Any]) -> dict[str, Any]:
    payload = dict(row)
    payload["quantite_en_stock"] = float(payload.get("quantite_en_stock") or 0)
    seuil = payload.get("seuil_alerte")
    payload["seuil_alerte"] = float(seuil) if seuil is not None else None
    return payload


def _mouvement_payload(row: Mapping[str, Any]) -> dict[str, Any]:
    payload = dict(row)
    payload["quantite"] = float(payload["quantite"])
    return payload


def get_unites() -> list[str]:
    return list(UNITES)


# --- Produits ---


def _load_produit(conn: Connection, produit_id: int, societe_id: int) -> dict[str, Any]:
    row = fetch_one(
        conn,
        f"SELECT {_PRODUIT_COLUMNS} FROM produits WHERE id = :pid AND societe_id = :societe_id",
        {"pid": int(produit_id), "societe_id": int(societe_id)},
    )
    if row is None:
        raise ProduitNotFoundError("Produit introuvable")
    return row


def create_produit(
    *,
    societe_id: int,
    reference: str,
    designation: str,
    unite: Optional[str] = None,
    quantite_en_stock: Optional[float] = None,
    seuil_alerte: Optional[float] = None,
) -> dict[str, Any]:
    designation = (designation or "").strip()
    if not designation:
        raise StockError("La désignation du produit est obligatoire")
    quantite = float(quantite_en_stock or 0)
    if quantite < 0:
        raise StockError("Le stock initial ne peut pas être négatif")

    engine = get_engine()
    with engine.begin() as conn:
        produit_id = insert_returning_id(
            conn,
            text(
                """
                INSERT INTO produits (societe_id, reference, designation, unite, quantite_en_stock, seuil_alerte)
                VALUES (:societe_id, :reference, :designation, :unite, :quantite, :seuil)
                RETURNING id
                """
            ),
            {
                "societe_id": int(societe_id),
                "reference": _normalize_reference(reference),
                "designation": designation,
                "unite": _validate_unite(unite),
                "quantite": quantite,
                "seuil": float(seuil_alerte) if seuil_alerte is not None else None,
            },
        )
        return _produit_payload(_load_produit(conn, produit_id, societe_id))


def list_produits(*, societe_id: int) -> list[dict[str, Any]]:
    engine = get_engine()
    with engine.connect() as conn:
        rows = fetch_all(
            conn,
            """
            SELECT p.id, p.societe_id, p.reference, p.designation, p.unite,
                   p.quantite_en_stock, p.seuil_alerte, p.created_at,
                   (SELECT COUNT(*) FROM mouvements_stock m WHERE m.produit_id = p.id) AS nb_mouvements
            FROM produits p
            WHERE p.societe_id = :societe_id
            ORDER BY p.reference ASC
            """,
            {"societe_id": int(societe_id)},
        )
    return [_produit_payload(row) for row in rows]


def get_produit(produit_id: int, *, societe_id: int) -> dict[str, Any]:
    """Produit avec ses 20 derniers mouvements."""

    engine = get_engine()
    with engine.connect() as conn:
        produit = _produit_payload(_load_produit(conn, produit_id, societe_id))
        mouvements = fetch_all(
            conn,
            """
            SELECT id, societe_id, produit_id, type, quantite, date, libelle, created_at
            FROM mouvements_stock
            WHERE produit_id = :pid AND societe_id = :societe_id
            ORDER BY date DESC, id DESC
            LIMIT 20
            """,
            {"pid": int(produit_id), "societe_id": int(societe_id)},
        )
    produit["mouvements"] = [_mouvement_payload(row) for row in mouvements]
    return produit


def update_produit(produit_id: int, changes: Mapping[str, Any], *, societe_id: int) -> dict[str, Any]:
    """Met à jour les champs descriptifs. Le stock ne se modifie que par mouvement."""

    values: dict[str, Any] = {}
    for key, value in changes.items():
        if key not in _UPDATABLE_PRODUIT_FIELDS:
            continue
        if key == "reference":
            value = _normalize_reference(value)
        elif key == "unite":
            value = _validate_unite(value)
        elif key == "designation":
            value = (value or "").strip()
            if not value:
                raise StockError("La désignation du produit est obligatoire")
        elif key == "seuil_alerte" and value is not None:
            value = float(value)
        values[key] = value

    engine = get_engine()
    with engine.begin() as conn:
        _load_produit(conn, produit_id, societe_id)
        if values:
            assignments = ", ".join(f"{column} = :{column}" for column in sorted(values))
            conn.execute(
                text(f"UPDATE produits SET {assignments} WHERE id = :pid AND societe_id = :societe_id"),
                {**values, "pid": int(produit_id), "societe_id": int(societe_id)},
            )
        return _produit_payload(_load_produit(conn, produit_id, societe_id))


def delete_produit(produit_id: int, *, societe_id: int) -> None:
    engine = get_engine()
    with engine.begin() as conn:
        _load_produit(conn, produit_id, societe_id)
        params = {"pid": int(produit_id), "societe_id": int(societe_id)}
        conn.execute(text("DELETE FROM lignes_inventaire WHERE produit_id = :pid"), params)
        conn.execute(
            text("DELETE FROM mouvements_stock WHERE produit_id = :pid AND societe_id = :societe_id"),
            params,
        )
        conn.execute(text("DELETE FROM produits WHERE id = :pid AND societe_id = :societe_id"), params)


def get_produits_en_alerte(*, societe_id: int) -> list[dict[str, Any]]:
    """Produits dont le stock est strictement sous le seuil d'alerte défini."""

    return [
        produit
        for produit in list_produits(societe_id=societe_id)
        if produit["seuil_alerte"] is not None and produit["quantite_en_stock"] < produit["seuil_alerte"]
    ]


# --- Mouvements ---


def _apply_movement(
    conn: Connection,
    *,
    societe_id: int,
    produit_id: int,
    movement_type: str,
    quantite: float,
    when: datetime,
    libelle: Optional[str],
) -> int:
    """Écrit le mouvement et ajuste le solde dans la transaction courante.

    La sortie est un décrément conditionnel : sous accès concurrent, la base
    réévalue `quantite_en_stock >= :q` sur la ligne verrouillée, donc deux
    sorties ne peuvent pas consommer le même stock.
    """

    params = {"pid": int(produit_id), "societe_id": int(societe_id), "q": float(quantite)}
    if movement_type == "ENTREE":
        updated = conn.execute(
            text(
                """
                UPDATE produits SET quantite_en_stock = quantite_en_stock + :q
                WHERE id = :pid AND societe_id = :societe_id
                """
            ),
            params,
        ).rowcount
    else:
        updated = conn.execute(
            text(
                """
                UPDATE produits SET quantite_en_stock = quantite_en_stock - :q
                WHERE id = :pid AND societe_id = :societe_id AND quantite_en_stock >= :q
                """
            ),
            params,
        ).rowcount
    if not updated:
        row = fetch_one(
            conn,
            "SELECT quantite_en_stock FROM produits WHERE id = :pid AND societe_id = :societe_id",
            params,
        )
        if row is None:
            raise ProduitNotFoundError("Produit introuvable")
        disponible = float(row["quantite_en_stock"] or 0)
        raise StockError(f"Stock insuffisant. Disponible: {disponible:g}, demandé: {float(quantite):g}")

    return insert_returning_id(
        conn,
        text(
            """
            INSERT INTO mouvements_stock (societe_id, produit_id, type, quantite, date, libelle)
            VALUES (:societe_id, :pid, :type, :q, :date, :libelle)
            RETURNING id
            """
        ),
        {**params, "type": movement_type, "date": when, "libelle": libelle},
    )


def create_mouvement(
    *,
    societe_id: int,
    produit_id: int,
    type_mouvement: str,
    quantite: float,
    date_mouvement: date | datetime | str,
    libelle: Optional[str] = None,
) -> dict[str, Any]:
    movement_type = (type_mouvement or "").strip().upper()
    if movement_type not in MOUVEMENT_TYPES:
        raise StockError("Le type doit être 'ENTREE' ou 'SORTIE'.")

    engine = get_engine()
    with engine.begin() as conn:
        produit = _load_produit(conn, produit_id, societe_id)

        qte = float(quantite)
        if qte <= 0:
            raise StockError("La quantité doit être strictement positive")

        stock_actuel = float(produit["quantite_en_stock"] or 0)
        if movement_type == "SORTIE" and qte > stock_actuel:
            raise StockError(f"Stock insuffisant. Disponible: {stock_actuel:g}, demandé: {qte:g}")

        mouvement_id = _apply_movement(
            conn,
            societe_id=societe_id,
            produit_id=produit_id,
            movement_type=movement_type,
            quantite=qte,
            when=_as_datetime(date_mouvement),
            libelle=(libelle or "").strip() or None,
        )
        row = fetch_one(
            conn,
            """
            SELECT id, societe_id, produit_id, type, quantite, date, libelle, created_at
            FROM mouvements_stock WHERE id = :id
            """,
            {"id": mouvement_id},
        )
    return _mouvement_payload(row)


def list_mouvements(*, societe_id: int, produit_id: Optional[int] = None) -> list[dict[str, Any]]:
    sql = """
        SELECT m.id, m.societe_id, m.produit_id, m.type, m.quantite, m.date, m.libelle, m.created_at,
               p.reference AS produit_reference, p.designation AS produit_designation
        FROM mouvements_stock m
        JOIN produits p ON p.id = m.produit_id
        WHERE m.societe_id = :societe_id
          AND p.societe_id = :societe_id
    """
    params: dict[str, object] = {"societe_id": int(societe_id)}
    if produit_id is not None:
        sql += " AND m.produit_id = :pid"
        params["pid"] = int(produit_id)
    sql += " ORDER BY m.date DESC, m.id DESC"

    engine = get_engine()
    with engine.connect() as conn:
        rows = fetch_all(conn, sql, params)
    return [_mouvement_payload(row) for row in rows]


# --- Inventaires ---


def _load_inventaire(conn: Connection, inventaire_id: int, societe_id: int) -> dict[str, Any]:
    row = fetch_one(
        conn,
        """
        SELECT id, societe_id, date_inventaire, commentaire, statut, created_at
        FROM inventaires
        WHERE id = :iid AND societe_id = :societe_id
        """,
        {"iid": int(inventaire_id), "societe_id": int(societe_id)},
    )
    if row is None:
        raise InventaireNotFoundError("Inventaire introuvable")
    return row


def _load_lignes(conn: Connection, inventaire_ids: list[int]) -> dict[int, list[dict[str, Any]]]:
    grouped: dict[int, list[dict[str, Any]]] = {iid: [] for iid in inventaire_ids}
    if not inventaire_ids:
        return grouped
    placeholders = ", ".join(f":i{index}" for index in range(len(inventaire_ids)))
    rows = fetch_all(
        conn,
        f"""
        SELECT l.id, l.inventaire_id, l.produit_id, l.quantite_comptee, l.quantite_systeme,
               p.reference AS produit_reference, p.designation AS produit_designation
        FROM lignes_inventaire l
        JOIN produits p ON p.id = l.produit_id
        WHERE l.inventaire_id IN ({placeholders})
        ORDER BY p.reference ASC
        """,
        {f"i{index}": iid for index, iid in enumerate(inventaire_ids)},
    )
    for row in rows:
        comptee = float(row["quantite_comptee"])
        systeme = float(row["quantite_systeme"])
        row.update(quantite_comptee=comptee, quantite_systeme=systeme, ecart=comptee - systeme)
        grouped[int(row["inventaire_id"])].append(row)
    return grouped


def _inventaire_payload(row: dict[str, Any], lignes: list[dict[str, Any]]) -> dict[str, Any]:
    payload = dict(row)
    payload["date_inventaire"] = _as_date(payload["date_inventaire"])
    payload["lignes"] = lignes
    return payload


def create_inventaire(
    *,
    societe_id: int,
    date_inventaire: date | datetime | str,
    commentaire: Optional[str] = None,
) -> dict[str, Any]:
    engine = get_engine()
    with engine.begin() as conn:
        inventaire_id = insert_returning_id(
            conn,
            text(
                """
                INSERT INTO inventaires (societe_id, date_inventaire, commentaire, statut)
                VALUES (:societe_id, :date_inventaire, :commentaire, :statut)
                RETURNING id
                """
            ),
            {
                "societe_id": int(societe_id),
                "date_inventaire": _as_date(date_inventaire),
                "commentaire": (commentaire or "").strip() or None,
                "statut": STATUT_BROUILLON,
            },
        )
        return _inventaire_payload(_load_inventaire(conn, inventaire_id, societe_id), [])


def list_inventaires(*, societe_id: int) -> list[dict[str, Any]]:
    engine = get_engine()
    with engine.connect() as conn:
        rows = fetch_all(
            conn,
            """
            SELECT id, societe_id, date_inventaire, commentaire, statut, created_at
            FROM inventaires
            WHERE societe_id = :societe_id
            ORDER BY date_inventaire DESC, id DESC
            """,
            {"societe_id": int(societe_id)},
        )
        lignes = _load_lignes(conn, [int(row["id"]) for row in rows])
    return [_inventaire_payload(row, lignes[int(row["id"])]) for row in rows]


def get_inventaire(inventaire_id: int, *, societe_id: int) -> dict[str, Any]:
    engine = get_engine()
    with engine.connect() as conn:
        row = _load_inventaire(conn, inventaire_id, societe_id)
        lignes = _load_lignes(conn, [int(row["id"])])
    return _inventaire_payload(row, lignes[int(row["id"])])


def ajouter_ligne_inventaire(
    inventaire_id: int,
    *,
    societe_id: int,
    produit_id: int,
    quantite_comptee: float,
) -> dict[str, Any]:
    """Saisit (ou corrige) le comptage d'un produit.

    `quantite_systeme` est figée au premier enregistrement de la ligne ; les
    saisies suivantes ne modifient que `quantite_comptee`.
    """

    comptee = float(quantite_comptee)
    if comptee < 0:
        raise StockError("La quantité comptée ne peut pas être négative")

    engine = get_engine()
    with engine.begin() as conn:
        inventaire = _load_inventaire(conn, inventaire_id, societe_id)
        if inventaire["statut"] == STATUT_CLOTURE:
            raise StockError("Impossible de modifier un inventaire clôturé")

        produit = _load_produit(conn, produit_id, societe_id)
        conn.execute(
            text(
                """
                INSERT INTO lignes_inventaire (inventaire_id, produit_id, quantite_comptee, quantite_systeme)
                VALUES (:iid, :pid, :comptee, :systeme)
                ON CONFLICT (inventaire_id, produit_id)
                DO UPDATE SET quantite_comptee = excluded.quantite_comptee
                """
            ),
            {
                "iid": int(inventaire_id),
                "pid": int(produit_id),
                "comptee": comptee,
                "systeme": float(produit["quantite_en_stock"] or 0),
            },
        )
        row = fetch_one(
            conn,
            """
            SELECT id, inventaire_id, produit_id, quantite_comptee, quantite_systeme
            FROM lignes_inventaire
            WHERE inventaire_id = :iid AND produit_id = :pid
            """,
            {"iid": int(inventaire_id), "pid": int(produit_id)},
        )

    row["quantite_comptee"] = float(row["quantite_comptee"])
    row["quantite_systeme"] = float(row["quantite_systeme"])
    row["ecart"] = row["quantite_comptee"] - row["quantite_systeme"]
    return row


def cloturer_inventaire(inventaire_id: int, *, societe_id: int) -> dict[str, Any]:
    """Clôture l'inventaire : un mouvement compensatoire par écart non nul, puis statut CLOTURE.

    Tout se fait dans une seule transaction ; une erreur sur une ligne annule
    l'ensemble et l'inventaire reste en BROUILLON.
    """

    engine = get_engine()
    with engine.begin() as conn:
        inventaire = _load_inventaire(conn, inventaire_id, societe_id)
        if inventaire["statut"] == STATUT_CLOTURE:
            raise StockError("Cet inventaire est déjà clôturé")

        date_inventaire = _as_date(inventaire["date_inventaire"])
        libelle = f"Inventaire {date_inventaire.isoformat()}"
        lignes = _load_lignes(conn, [int(inventaire_id)])[int(inventaire_id)]

        ajustements = 0
        for ligne in lignes:
            ecart = ligne["ecart"]
            if abs(ecart) < _EPSILON:
                continue
            _apply_movement(
                conn,
                societe_id=societe_id,
                produit_id=int(ligne["produit_id"]),
                movement_type="ENTREE" if ecart > 0 else "SORTIE",
                quantite=abs(ecart),
                when=_as_datetime(date_inventaire),
                libelle=libelle,
            )
            ajustements += 1

        closed = conn.execute(
            text(
                """
                UPDATE inventaires SET statut = :cloture
                WHERE id = :iid AND societe_id = :societe_id AND statut = :brouillon
                """
            ),
            {
                "cloture": STATUT_CLOTURE,
                "brouillon": STATUT_BROUILLON,
                "iid": int(inventaire_id),
                "societe_id": int(societe_id),
            },
        ).rowcount
        if not closed:
            raise StockError("Cet inventaire est déjà clôturé")

    logger.info(
        "Inventaire %s clôturé (société %s, %s ajustement(s))",
        inventaire_id,
        societe_id,
        ajustements,
    )
    return get_inventaire(inventaire_id, societe_id=societe_id)


__all__ = [
    "InventaireNotFoundError",
    "MOUVEMENT_TYPES",
    "ProduitNotFoundError",
    "StockError",
    "StockServiceError",
    "UNITES",
    "ajouter_ligne_inventaire",
    "cloturer_inventaire",
    "create_inventaire",
    "create_mouvement",
    "create_produit",
    "delete_produit",
    "get_inventaire",
    "get_produit",
    "get_produits_en_alerte",
    "get_unites",
    "list_inventaires",
    "list_mouvements",
    "list_produits",
    "update_produit",
]
