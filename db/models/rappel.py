"""
db/models/rappel.py

Synchronized RappelConso recall rows, stored with upstream field names.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class RappelRecord(TimestampMixin, Base):
    __tablename__ = "rappel"

    pk: Mapped[uuid.UUID] = mapped_column(
        "pk",
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    id: Mapped[int | None] = mapped_column(
        BigInteger,
        nullable=True,
        comment="Upstream numeric row id",
    )
    numero_fiche: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="Business record number, upsert key",
    )
    numero_version: Mapped[int | None] = mapped_column(Integer, nullable=True)
    nature_juridique_rappel: Mapped[str | None] = mapped_column(Text, nullable=True)
    marque_produit: Mapped[str | None] = mapped_column(Text, nullable=True)
    modeles_ou_references: Mapped[str | None] = mapped_column(Text, nullable=True)
    categorie_produit: Mapped[str | None] = mapped_column(String(255), nullable=True)
    sous_categorie_produit: Mapped[str | None] = mapped_column(String(255), nullable=True)
    conditionnements: Mapped[str | None] = mapped_column(Text, nullable=True)
    motif_rappel: Mapped[str | None] = mapped_column(Text, nullable=True)
    risques_encourus: Mapped[str | None] = mapped_column(Text, nullable=True)
    date_publication: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Publication date, canonical recall date",
    )
    date_debut_commercialisation: Mapped[str | None] = mapped_column(String(64), nullable=True)
    date_date_fin_commercialisation: Mapped[str | None] = mapped_column(String(64), nullable=True)
    temperature_conservation: Mapped[str | None] = mapped_column(Text, nullable=True)
    marque_salubrite: Mapped[str | None] = mapped_column(Text, nullable=True)
    informations_complementaires: Mapped[str | None] = mapped_column(Text, nullable=True)
    zone_geographique_de_vente: Mapped[str | None] = mapped_column(Text, nullable=True)
    distributeurs: Mapped[str | None] = mapped_column(Text, nullable=True)
    identification_produits: Mapped[str | None] = mapped_column(Text, nullable=True)
    liens_vers_les_images: Mapped[str | None] = mapped_column(Text, nullable=True)
    libelle: Mapped[str | None] = mapped_column(Text, nullable=True)
    preconisations_sanitaires: Mapped[str | None] = mapped_column(Text, nullable=True)
    description_complementaire_risque: Mapped[str | None] = mapped_column(Text, nullable=True)
    conduites_a_tenir_par_le_consommateur: Mapped[str | None] = mapped_column(Text, nullable=True)
    numero_contact: Mapped[str | None] = mapped_column(String(64), nullable=True)
    modalites_de_compensation: Mapped[str | None] = mapped_column(Text, nullable=True)
    date_de_fin_de_la_procedure_de_rappel: Mapped[str | None] = mapped_column(String(64), nullable=True)
    informations_complementaires_publiques: Mapped[str | None] = mapped_column(Text, nullable=True)
    lien_vers_la_liste_des_produits: Mapped[str | None] = mapped_column(Text, nullable=True)
    lien_vers_la_liste_des_distributeurs: Mapped[str | None] = mapped_column(Text, nullable=True)
    lien_vers_affichette_pdf: Mapped[str | None] = mapped_column(Text, nullable=True)
    lien_vers_la_fiche_rappel: Mapped[str | None] = mapped_column(Text, nullable=True)
    rappel_guid: Mapped[str | None] = mapped_column(String(64), nullable=True)
    synced_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("numero_fiche", name="uq_rappel_numero_fiche"),
        Index("ix_rappel_date_publication", "date_publication"),
        Index("ix_rappel_categorie_produit", "categorie_produit"),
    )
