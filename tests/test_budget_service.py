from datetime import datetime

import pytest
from sqlalchemy import text

from backend.services import budget, tresorerie


def _recette(societe_id, when, montant):
    tresorerie.create_recette(societe_id=societe_id, date_operation=when, montant=montant)


def _depense(societe_id, when, montant):
    tresorerie.create_depense(societe_id=societe_id, date_operation=when, montant=montant)


def test_periode_annee_bounds_are_inclusive():
    debut, fin = budget.periode_annee(2024)

    assert debut == datetime(2024, 1, 1)
    assert fin == datetime(2024, 12, 31, 23, 59, 59, 999000)


def test_upsert_keeps_single_row_per_year(sqlite_engine, societe_id):
    budget.create_or_update(societe_id=societe_id, annee=2024, budget_recettes=100, budget_depenses=50)
    row = budget.create_or_update(societe_id=societe_id, annee=2024, budget_recettes=200, budget_depenses=80)

    assert row["budget_recettes"] == 200.0
    assert row["budget_depenses"] == 80.0
    with sqlite_engine.connect() as conn:
        count = conn.execute(
            text("SELECT COUNT(*) FROM budgets WHERE societe_id = :sid AND annee = 2024"),
            {"sid": societe_id},
        ).scalar()
    assert count == 1


def test_upsert_rejects_negative_amounts(societe_id):
    with pytest.raises(ValueError):
        budget.create_or_update(societe_id=societe_id, annee=2024, budget_recettes=-1, budget_depenses=0)


def test_comparaison_is_none_without_budget(societe_id):
    _recette(societe_id, datetime(2024, 5, 1), 500)

    assert budget.get_avec_comparaison(2024, societe_id=societe_id) is None


def test_comparaison_computes_variances(societe_id, autre_societe_id):
    budget.create_or_update(societe_id=societe_id, annee=2024, budget_recettes=1000, budget_depenses=600)
    _recette(societe_id, datetime(2024, 1, 1), 700)
    _recette(societe_id, datetime(2024, 12, 31, 23, 59, 59), 500)
    _recette(societe_id, datetime(2025, 1, 1), 10_000)
    _depense(societe_id, datetime(2024, 7, 14), 650)
    _depense(autre_societe_id, datetime(2024, 7, 14), 9_999)

    result = budget.get_avec_comparaison(2024, societe_id=societe_id)

    assert result["reel_recettes"] == 1200.0
    assert result["reel_depenses"] == 650.0
    assert result["ecart_recettes"] == 200.0
    assert result["ecart_depenses"] == 50.0
    assert result["ecart_resultat"] == (1200.0 - 650.0) - (1000.0 - 600.0)


def test_list_avec_comparaison_matches_single_year(societe_id):
    budget.create_or_update(societe_id=societe_id, annee=2023, budget_recettes=300, budget_depenses=100)
    budget.create_or_update(societe_id=societe_id, annee=2024, budget_recettes=1000, budget_depenses=600)
    _recette(societe_id, datetime(2023, 6, 1), 250)
    _recette(societe_id, datetime(2024, 3, 15, 10, 30), 900)
    _depense(societe_id, datetime(2024, 12, 31, 18, 0), 400)

    rows = budget.list_avec_comparaison(societe_id=societe_id)

    assert [row["annee"] for row in rows] == [2024, 2023]
    for row in rows:
        single = budget.get_avec_comparaison(row["annee"], societe_id=societe_id)
        assert row["reel_recettes"] == pytest.approx(single["reel_recettes"])
        assert row["reel_depenses"] == pytest.approx(single["reel_depenses"])
        assert row["ecart_resultat"] == pytest.approx(single["ecart_resultat"])


def test_list_avec_comparaison_empty_without_budgets(societe_id):
    assert budget.list_avec_comparaison(societe_id=societe_id) == []


def test_delete_missing_budget_raises(societe_id):
    with pytest.raises(budget.BudgetNotFoundError):
        budget.delete(2030, societe_id=societe_id)


def test_delete_budget(societe_id):
    budget.create_or_update(societe_id=societe_id, annee=2024, budget_recettes=1, budget_depenses=1)

    budget.delete(2024, societe_id=societe_id)

    assert budget.get_budget(2024, societe_id=societe_id) is None
    assert budget.list_budgets(societe_id=societe_id) == []
