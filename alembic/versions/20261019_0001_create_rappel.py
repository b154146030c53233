"""create rappel table

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "rappel",
        sa.Column("pk", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("id", sa.BigInteger(), nullable=True, comment="Upstream numeric row id"),
        sa.Column("numero_fiche", sa.String(length=64), nullable=False, comment="Business record number, upsert key"),
        sa.Column("numero_version", sa.Integer(), nullable=True),
        sa.Column("nature_juridique_rappel", sa.Text(), nullable=True),
        sa.Column("marque_produit", sa.Text(), nullable=True),
        sa.Column("modeles_ou_references", sa.Text(), nullable=True),
        sa.Column("categorie_produit", sa.String(length=255), nullable=True),
        sa.Column("sous_categorie_produit", sa.String(length=255), nullable=True),
        sa.Column("conditionnements", sa.Text(), nullable=True),
        sa.Column("motif_rappel", sa.Text(), nullable=True),
        sa.Column("risques_encourus", sa.Text(), nullable=True),
        sa.Column(
            "date_publication",
            sa.DateTime(timezone=True),
            nullable=True,
            comment="Publication date, canonical recall date",
        ),
        sa.Column("date_debut_commercialisation", sa.String(length=64), nullable=True),
        sa.Column("date_date_fin_commercialisation", sa.String(length=64), nullable=True),
        sa.Column("temperature_conservation", sa.Text(), nullable=True),
        sa.Column("marque_salubrite", sa.Text(), nullable=True),
        sa.Column("informations_complementaires", sa.Text(), nullable=True),
        sa.Column("zone_geographique_de_vente", sa.Text(), nullable=True),
        sa.Column("distributeurs", sa.Text(), nullable=True),
        sa.Column("identification_produits", sa.Text(), nullable=True),
        sa.Column("liens_vers_les_images", sa.Text(), nullable=True),
        sa.Column("libelle", sa.Text(), nullable=True),
        sa.Column("preconisations_sanitaires", sa.Text(), nullable=True),
        sa.Column("description_complementaire_risque", sa.Text(), nullable=True),
        sa.Column("conduites_a_tenir_par_le_consommateur", sa.Text(), nullable=True),
        sa.Column("numero_contact", sa.String(length=64), nullable=True),
        sa.Column("modalites_de_compensation", sa.Text(), nullable=True),
        sa.Column("date_de_fin_de_la_procedure_de_rappel", sa.String(length=64), nullable=True),
        sa.Column("informations_complementaires_publiques", sa.Text(), nullable=True),
        sa.Column("lien_vers_la_liste_des_produits", sa.Text(), nullable=True),
        sa.Column("lien_vers_la_liste_des_distributeurs", sa.Text(), nullable=True),
        sa.Column("lien_vers_affichette_pdf", sa.Text(), nullable=True),
        sa.Column("lien_vers_la_fiche_rappel", sa.Text(), nullable=True),
        sa.Column("rappel_guid", sa.String(length=64), nullable=True),
        sa.Column("synced_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("pk", name="pk_rappel"),
        sa.UniqueConstraint("numero_fiche", name="uq_rappel_numero_fiche"),
    )
    op.create_index("ix_rappel_date_publication", "rappel", ["date_publication"], unique=False)
    op.create_index("ix_rappel_categorie_produit", "rappel", ["categorie_produit"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_rappel_categorie_produit", table_name="rappel")
    op.drop_index("ix_rappel_date_publication", table_name="rappel")
    op.drop_table("rappel")
