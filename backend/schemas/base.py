"""Shared pydantic configuration for request payloads."""

from __future__ import annotations

from pydantic import AliasGenerator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class RequestModel(BaseModel):
    """Accepte `societe_nom` comme `societeNom` (clients SPA historiques).

    Les chaînes sont transmises telles quelles : les services nettoient les
    champs texte, jamais les mots de passe.
    """

    model_config = ConfigDict(
        alias_generator=AliasGenerator(validation_alias=to_camel),
        populate_by_name=True,
    )


__all__ = ["RequestModel"]
