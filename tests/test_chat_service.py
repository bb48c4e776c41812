import pytest

from backend.services import chat


def test_greeting():
    assert chat.reply("  Bonjour ! ").startswith("Bonjour ! Je suis l'assistant ComptaCI.")


def test_empty_message():
    assert chat.reply("   ") == chat.EMPTY_REPLY
    assert chat.reply(None) == chat.EMPTY_REPLY


def test_help_only_on_exact_keyword():
    assert "Posez une question précise" in chat.reply("AIDE")
    assert chat.reply("aide moi") == chat.FALLBACK_REPLY


def test_invoice_detail_rules():
    assert chat.reply("comment créer une facture ?").startswith("Pour créer une facture")
    assert chat.reply("envoyer la facture au client").startswith("Pour envoyer une facture")
    assert "PDF" in chat.reply("facture pdf")
    assert chat.reply("mes devis").startswith("Les factures sont dans")


@pytest.mark.parametrize(
    "message, expected",
    [
        ("Déclaration TVA du mois", "déclarations TVA"),
        ("inventaire de fin d'année", "Stock et inventaire"),
        ("calcul d'amortissement", "Immobilisations"),
        ("mes notes de frais", "notes de frais"),
        ("rapprochement bancaire", "comptes bancaires"),
        ("plan comptable", "plan comptable SYSCOHADA"),
        ("audit", "Audit et contrôles"),
        ("budget 2025", "Budget"),
    ],
)
def test_topic_rules(message, expected):
    assert expected in chat.reply(message)


def test_first_matching_rule_wins():
    # « facture » est évalué avant « tva »
    assert chat.reply("tva sur facture").startswith("Les factures sont dans")


def test_unknown_message_falls_back():
    assert chat.reply("quelle heure est-il") == chat.FALLBACK_REPLY
