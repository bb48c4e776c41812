"""
Assistant de discussion par mots-clés (ComptaCI / SYSCOHADA).

Le message est normalisé (trim + minuscules) puis comparé, dans l'ordre, à une
table d'expressions régulières ; la première règle qui correspond fournit la
réponse. Aucun état, aucun appel externe.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field


EMPTY_REPLY = "Posez-moi une question sur la comptabilité, les factures, la TVA, le stock, etc."

FALLBACK_REPLY = (
    "Je n'ai pas bien compris. Vous pouvez demander de l'aide sur : factures, TVA, déclarations, "
    "stock, immobilisations, notes de frais, comptes bancaires, plan comptable SYSCOHADA. "
    "Tapez **aide** pour la liste."
)


@dataclass(frozen=True)
class ChatRule:
    """Déclencheur et réponse ; `details` affine la réponse pour un même sujet."""

    code: str
    pattern: re.Pattern[str]
    reply: str
    details: tuple[tuple[re.Pattern[str], str], ...] = field(default_factory=tuple)

    def answer(self, message: str) -> str | None:
        if not self.pattern.search(message):
            return None
        for detail_pattern, detail_reply in self.details:
            if detail_pattern.search(message):
                return detail_reply
        return self.reply


def _rule(code: str, pattern: str, reply: str, *details: tuple[str, str]) -> ChatRule:
    return ChatRule(
        code=code,
        pattern=re.compile(pattern),
        reply=reply,
        details=tuple((re.compile(p), r) for p, r in details),
    )


# =============================================================================
# RÈGLES (ordre significatif : la première correspondance l'emporte)
# =============================================================================

RULES: tuple[ChatRule, ...] = (
    _rule(
        "salutation",
        r"^(bonjour|salut|hello|bonsoir|coucou)",
        "Bonjour ! Je suis l'assistant ComptaCI. Comment puis-je vous aider ? "
        "(factures, TVA, déclarations, stock, immobilisations, notes de frais...)",
    ),
    _rule(
        "remerciement",
        r"^(merci|thanks)",
        "Avec plaisir ! N'hésitez pas si vous avez d'autres questions.",
    ),
    _rule(
        "aide",
        r"^(aide|help|\?)$",
        "Je peux vous aider sur : **Factures** (création, envoi, PDF), **Déclarations TVA**, "
        "**Stock et inventaires**, **Immobilisations et amortissements**, **Notes de frais**, "
        "**Comptes bancaires et rapprochement**, **Plan comptable SYSCOHADA**. Posez une question précise !",
    ),
    _rule(
        "factures",
        r"facture|devis",
        "Les factures sont dans **Devis | Facturation** > **Factures**. Vous pouvez créer, modifier, "
        "envoyer par email et télécharger en PDF.",
        (
            r"créer|création|nouvelle|ajouter",
            "Pour créer une facture : allez dans **Devis | Facturation** > **Factures**, puis créez une "
            "nouvelle facture en choisissant le client et en ajoutant des lignes (désignation, quantité, prix, TVA).",
        ),
        (
            r"envoyer|envoy|email",
            "Pour envoyer une facture par email : dans la liste des factures, cliquez sur **📧 Email** à côté "
            "de la facture. Le client doit avoir une adresse email renseignée.",
        ),
        (
            r"pdf",
            "Chaque facture peut être téléchargée en PDF via le bouton **PDF** dans la liste. "
            "Le PDF respecte les mentions SYSCOHADA.",
        ),
    ),
    _rule(
        "tva",
        r"tva|déclaration|déclarations",
        "Les **déclarations TVA** sont dans le menu **Déclarations TVA**. Vous pouvez générer une déclaration "
        "à partir des écritures sur la période, puis l'éditer, l'envoyer ou la marquer comme validée.",
    ),
    _rule(
        "stock",
        r"stock|inventaire|produit",
        "Le **Stock et inventaire** est dans le menu **Stock**. Vous pouvez : créer des produits (référence, "
        "désignation, unité, seuil d'alerte), enregistrer des entrées/sorties, créer des inventaires physiques "
        "et clôturer pour ajuster les stocks.",
    ),
    _rule(
        "immobilisations",
        r"immobilisation|amortissement",
        "Les **Immobilisations** sont dans le menu **Immobilisations**. Enregistrez un bien (véhicule, matériel, "
        "etc.) avec sa valeur d'origine et sa durée d'utilisation ; le plan d'amortissement (linéaire, prorata "
        "temporis) est calculé automatiquement (SYSCOHADA).",
    ),
    _rule(
        "notes_de_frais",
        r"note de frais|notes de frais",
        "Les **notes de frais** sont dans le menu **Notes de frais**. Créez une note avec montant, catégorie et "
        "justificatif (upload). Les statuts : brouillon, en attente, validé, refusé.",
    ),
    _rule(
        "banque",
        r"banque|compte bancaire|rapprochement",
        "Les **comptes bancaires** et le **rapprochement** sont dans **Comptes bancaires** (liste des comptes, "
        "transactions) et **Rapprochement**. Vous pouvez importer des relevés (CSV/TXT) et lier les transactions "
        "aux recettes/dépenses.",
    ),
    _rule(
        "plan_comptable",
        r"plan comptable|syscohada|compte",
        "Le **plan comptable SYSCOHADA** est accessible dans le menu **Plan comptable**. Les écritures comptables "
        "sont générées automatiquement à partir des factures et transactions.",
    ),
    _rule(
        "audit",
        r"audit|contrôle",
        "L'**Audit et contrôles** est dans le menu **Audit**. Des contrôles automatiques détectent : factures "
        "non payées, rapprochements à valider, documents manquants, doublons.",
    ),
    _rule(
        "budget",
        r"budget",
        "Le **Budget** est dans le menu **Budget**. Vous pouvez définir des budgets annuels (recettes/dépenses) "
        "et comparer avec le réel.",
    ),
)


def reply(message: str | None) -> str:
    """Retourne la réponse de l'assistant pour un message brut."""

    normalized = (message or "").strip().lower()
    if not normalized:
        return EMPTY_REPLY

    for rule in RULES:
        answer = rule.answer(normalized)
        if answer is not None:
            return answer
    return FALLBACK_REPLY


__all__ = ["EMPTY_REPLY", "FALLBACK_REPLY", "RULES", "ChatRule", "reply"]
