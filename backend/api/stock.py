"""Stock endpoints: produits, mouvements et inventaires physiques."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from backend.dependencies.tenant import Societe, get_current_societe
from backend.schemas.stock import (
    InventaireCreateRequest,
    InventairePayload,
    LigneInventairePayload,
    LigneInventaireRequest,
    MouvementCreateRequest,
    MouvementPayload,
    ProduitCreateRequest,
    ProduitDetailPayload,
    ProduitPayload,
    ProduitUpdateRequest,
)
from backend.services import stock as stock_service

router = APIRouter(prefix="/societes/{societe_id}/stock", tags=["stock"])


def _http_error(exc: stock_service.StockServiceError) -> HTTPException:
    if isinstance(exc, (stock_service.ProduitNotFoundError, stock_service.InventaireNotFoundError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.get("/unites", response_model=list[str])
def list_unites(societe: Societe = Depends(get_current_societe)):
    return stock_service.get_unites()


# --- Produits ---


@router.get("/produits", response_model=list[ProduitPayload])
def list_produits(societe: Societe = Depends(get_current_societe)):
    return [ProduitPayload(**row) for row in stock_service.list_produits(societe_id=societe.id)]


@router.get("/produits/alerte", response_model=list[ProduitPayload])
def list_produits_en_alerte(societe: Societe = Depends(get_current_societe)):
    return [ProduitPayload(**row) for row in stock_service.get_produits_en_alerte(societe_id=societe.id)]


@router.post("/produits", response_model=ProduitPayload, status_code=status.HTTP_201_CREATED)
def create_produit(payload: ProduitCreateRequest, societe: Societe = Depends(get_current_societe)):
    try:
        row = stock_service.create_produit(
            societe_id=societe.id,
            reference=payload.reference,
            designation=payload.designation,
            unite=payload.unite,
            quantite_en_stock=payload.quantite_en_stock,
            seuil_alerte=payload.seuil_alerte,
        )
    except stock_service.StockServiceError as exc:
        raise _http_error(exc) from exc
    return ProduitPayload(**row)


@router.get("/produits/{produit_id}", response_model=ProduitDetailPayload)
def get_produit(produit_id: int, societe: Societe = Depends(get_current_societe)):
    try:
        row = stock_service.get_produit(produit_id, societe_id=societe.id)
    except stock_service.StockServiceError as exc:
        raise _http_error(exc) from exc
    return ProduitDetailPayload(**row)


@router.patch("/produits/{produit_id}", response_model=ProduitPayload)
def update_produit(
    produit_id: int,
    payload: ProduitUpdateRequest,
    societe: Societe = Depends(get_current_societe),
):
    try:
        row = stock_service.update_produit(
            produit_id,
            payload.model_dump(exclude_unset=True),
            societe_id=societe.id,
        )
    except stock_service.StockServiceError as exc:
        raise _http_error(exc) from exc
    return ProduitPayload(**row)


@router.delete("/produits/{produit_id}")
def delete_produit(produit_id: int, societe: Societe = Depends(get_current_societe)) -> dict[str, bool]:
    try:
        stock_service.delete_produit(produit_id, societe_id=societe.id)
    except stock_service.StockServiceError as exc:
        raise _http_error(exc) from exc
    return {"success": True}


# --- Mouvements ---


@router.get("/mouvements", response_model=list[MouvementPayload])
def list_mouvements(
    produit_id: int | None = Query(default=None, ge=1),
    societe: Societe = Depends(get_current_societe),
):
    rows = stock_service.list_mouvements(societe_id=societe.id, produit_id=produit_id)
    return [MouvementPayload(**row) for row in rows]


@router.post("/mouvements", response_model=MouvementPayload, status_code=status.HTTP_201_CREATED)
def create_mouvement(payload: MouvementCreateRequest, societe: Societe = Depends(get_current_societe)):
    try:
        row = stock_service.create_mouvement(
            societe_id=societe.id,
            produit_id=payload.produit_id,
            type_mouvement=payload.type,
            quantite=payload.quantite,
            date_mouvement=payload.date,
            libelle=payload.libelle,
        )
    except stock_service.StockServiceError as exc:
        raise _http_error(exc) from exc
    return MouvementPayload(**row)


# --- Inventaires ---


@router.get("/inventaires", response_model=list[InventairePayload])
def list_inventaires(societe: Societe = Depends(get_current_societe)):
    return [InventairePayload(**row) for row in stock_service.list_inventaires(societe_id=societe.id)]


@router.post("/inventaires", response_model=InventairePayload, status_code=status.HTTP_201_CREATED)
def create_inventaire(payload: InventaireCreateRequest, societe: Societe = Depends(get_current_societe)):
    row = stock_service.create_inventaire(
        societe_id=societe.id,
        date_inventaire=payload.date_inventaire,
        commentaire=payload.commentaire,
    )
    return InventairePayload(**row)


@router.get("/inventaires/{inventaire_id}", response_model=InventairePayload)
def get_inventaire(inventaire_id: int, societe: Societe = Depends(get_current_societe)):
    try:
        row = stock_service.get_inventaire(inventaire_id, societe_id=societe.id)
    except stock_service.StockServiceError as exc:
        raise _http_error(exc) from exc
    return InventairePayload(**row)


@router.post("/inventaires/{inventaire_id}/lignes", response_model=LigneInventairePayload)
def ajouter_ligne(
    inventaire_id: int,
    payload: LigneInventaireRequest,
    societe: Societe = Depends(get_current_societe),
):
    try:
        row = stock_service.ajouter_ligne_inventaire(
            inventaire_id,
            societe_id=societe.id,
            produit_id=payload.produit_id,
            quantite_comptee=payload.quantite_comptee,
        )
    except stock_service.StockServiceError as exc:
        raise _http_error(exc) from exc
    return LigneInventairePayload(**row)


@router.post("/inventaires/{inventaire_id}/cloturer", response_model=InventairePayload)
def cloturer_inventaire(inventaire_id: int, societe: Societe = Depends(get_current_societe)):
    try:
        row = stock_service.cloturer_inventaire(inventaire_id, societe_id=societe.id)
    except stock_service.StockServiceError as exc:
        raise _http_error(exc) from exc
    return InventairePayload(**row)
