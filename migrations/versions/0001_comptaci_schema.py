"""Initial ComptaCI schema: comptes, sociétés, budget, trésorerie, clients et stock."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "0001_comptaci_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "app_users",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("email", sa.Text, nullable=False, unique=True),
        sa.Column("password_hash", sa.Text, nullable=False),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("phone", sa.Text),
        sa.Column("role", sa.Text, nullable=False, server_default="PME"),
        sa.Column("created_at", sa.DateTime, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.CheckConstraint("role IN ('PME', 'EXPERT')", name="ck_app_users_role"),
    )

    op.create_table(
        "societes",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("nom", sa.Text, nullable=False),
        sa.Column("owner_id", sa.Integer, sa.ForeignKey("app_users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime, server_default=sa.text("CURRENT_TIMESTAMP")),
    )
    op.create_index("idx_societes_owner", "societes", ["owner_id"])

    op.create_table(
        "clients",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("societe_id", sa.Integer, sa.ForeignKey("societes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("nom", sa.Text, nullable=False),
        sa.Column("adresse", sa.Text),
        sa.Column("email", sa.Text),
        sa.Column("telephone", sa.Text),
        sa.Column("numero_cc", sa.Text),
        sa.Column("created_at", sa.DateTime, server_default=sa.text("CURRENT_TIMESTAMP")),
    )
    op.create_index("idx_clients_societe", "clients", ["societe_id"])

    op.create_table(
        "budgets",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("societe_id", sa.Integer, sa.ForeignKey("societes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("annee", sa.Integer, nullable=False),
        sa.Column("budget_recettes", sa.Numeric(18, 2), nullable=False, server_default="0"),
        sa.Column("budget_depenses", sa.Numeric(18, 2), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.UniqueConstraint("societe_id", "annee", name="uq_budgets_societe_annee"),
    )

    for table in ("recettes", "depenses"):
        op.create_table(
            table,
            sa.Column("id", sa.Integer, primary_key=True),
            sa.Column("societe_id", sa.Integer, sa.ForeignKey("societes.id", ondelete="CASCADE"), nullable=False),
            sa.Column("date", sa.DateTime, nullable=False),
            sa.Column("montant", sa.Numeric(18, 2), nullable=False),
            sa.Column("description", sa.Text),
            sa.Column("created_at", sa.DateTime, server_default=sa.text("CURRENT_TIMESTAMP")),
        )
        op.create_index(f"idx_{table}_societe_date", table, ["societe_id", "date"])

    op.create_table(
        "produits",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("societe_id", sa.Integer, sa.ForeignKey("societes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("reference", sa.Text, nullable=False),
        sa.Column("designation", sa.Text, nullable=False),
        sa.Column("unite", sa.Text, nullable=False, server_default="PIECE"),
        sa.Column("quantite_en_stock", sa.Numeric(14, 3), nullable=False, server_default="0"),
        sa.Column("seuil_alerte", sa.Numeric(14, 3)),
        sa.Column("created_at", sa.DateTime, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.CheckConstraint("quantite_en_stock >= 0", name="ck_produits_stock_positif"),
    )
    op.create_index("idx_produits_societe", "produits", ["societe_id"])

    op.create_table(
        "mouvements_stock",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("societe_id", sa.Integer, sa.ForeignKey("societes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("produit_id", sa.Integer, sa.ForeignKey("produits.id", ondelete="CASCADE"), nullable=False),
        sa.Column("type", sa.Text, nullable=False),
        sa.Column("quantite", sa.Numeric(14, 3), nullable=False),
        sa.Column("date", sa.DateTime, nullable=False),
        sa.Column("libelle", sa.Text),
        sa.Column("created_at", sa.DateTime, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.CheckConstraint("type IN ('ENTREE', 'SORTIE')", name="ck_mouvements_type"),
        sa.CheckConstraint("quantite > 0", name="ck_mouvements_quantite"),
    )
    op.create_index("idx_mouvements_produit_date", "mouvements_stock", ["produit_id", "date"])

    op.create_table(
        "inventaires",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("societe_id", sa.Integer, sa.ForeignKey("societes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("date_inventaire", sa.Date, nullable=False),
        sa.Column("commentaire", sa.Text),
        sa.Column("statut", sa.Text, nullable=False, server_default="BROUILLON"),
        sa.Column("created_at", sa.DateTime, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.CheckConstraint("statut IN ('BROUILLON', 'CLOTURE')", name="ck_inventaires_statut"),
    )

    op.create_table(
        "lignes_inventaire",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("inventaire_id", sa.Integer, sa.ForeignKey("inventaires.id", ondelete="CASCADE"), nullable=False),
        sa.Column("produit_id", sa.Integer, sa.ForeignKey("produits.id", ondelete="CASCADE"), nullable=False),
        sa.Column("quantite_comptee", sa.Numeric(14, 3), nullable=False),
        sa.Column("quantite_systeme", sa.Numeric(14, 3), nullable=False),
        sa.UniqueConstraint("inventaire_id", "produit_id", name="uq_lignes_inventaire_produit"),
    )


def downgrade() -> None:
    op.drop_table("lignes_inventaire")
    op.drop_table("inventaires")
    op.drop_index("idx_mouvements_produit_date", table_name="mouvements_stock")
    op.drop_table("mouvements_stock")
    op.drop_index("idx_produits_societe", table_name="produits")
    op.drop_table("produits")
    for table in ("depenses", "recettes"):
        op.drop_index(f"idx_{table}_societe_date", table_name=table)
        op.drop_table(table)
    op.drop_table("budgets")
    op.drop_index("idx_clients_societe", table_name="clients")
    op.drop_table("clients")
    op.drop_index("idx_societes_owner", table_name="societes")
    op.drop_table("societes")
    op.drop_table("app_users")
