"""Schemas for stock, movement and inventory endpoints."""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from backend.schemas.base import RequestModel


class ProduitCreateRequest(RequestModel):
    reference: str = Field(..., min_length=1)
    designation: str = Field(..., min_length=1)
    unite: Optional[str] = None
    quantite_en_stock: Optional[float] = Field(default=None, ge=0)
    seuil_alerte: Optional[float] = Field(default=None, ge=0)


class ProduitUpdateRequest(RequestModel):
    reference: Optional[str] = Field(default=None, min_length=1)
    designation: Optional[str] = Field(default=None, min_length=1)
    unite: Optional[str] = None
    seuil_alerte: Optional[float] = Field(default=None, ge=0)


class MouvementCreateRequest(RequestModel):
    produit_id: int = Field(..., gt=0)
    type: Literal["ENTREE", "SORTIE"]
    quantite: float = Field(..., description="Strictement positive")
    date: datetime
    libelle: Optional[str] = None


class MouvementPayload(BaseModel):
    id: int
    societe_id: int
    produit_id: int
    type: str
    quantite: float
    date: datetime
    libelle: Optional[str] = None
    created_at: Optional[datetime] = None
    produit_reference: Optional[str] = None
    produit_designation: Optional[str] = None


class ProduitPayload(BaseModel):
    id: int
    societe_id: int
    reference: str
    designation: str
    unite: str
    quantite_en_stock: float
    seuil_alerte: Optional[float] = None
    created_at: Optional[datetime] = None
    nb_mouvements: Optional[int] = None


class ProduitDetailPayload(ProduitPayload):
    mouvements: List[MouvementPayload] = Field(default_factory=list)


class InventaireCreateRequest(RequestModel):
    date_inventaire: date
    commentaire: Optional[str] = None


class LigneInventaireRequest(RequestModel):
    produit_id: int = Field(..., gt=0)
    quantite_comptee: float = Field(..., ge=0)


class LigneInventairePayload(BaseModel):
    id: int
    inventaire_id: int
    produit_id: int
    quantite_comptee: float
    quantite_systeme: float
    ecart: float
    produit_reference: Optional[str] = None
    produit_designation: Optional[str] = None


class InventairePayload(BaseModel):
    id: int
    societe_id: int
    date_inventaire: date
    commentaire: Optional[str] = None
    statut: Literal["BROUILLON", "CLOTURE"]
    created_at: Optional[datetime] = None
    lignes: List[LigneInventairePayload] = Field(default_factory=list)


__all__ = [
    "InventaireCreateRequest",
    "InventairePayload",
    "LigneInventairePayload",
    "LigneInventaireRequest",
    "MouvementCreateRequest",
    "MouvementPayload",
    "ProduitCreateRequest",
    "ProduitDetailPayload",
    "ProduitPayload",
    "ProduitUpdateRequest",
]
