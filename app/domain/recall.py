"""
app/domain/recall.py

Domain models for recall notices and sync runs.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Mapping
from zoneinfo import ZoneInfo

BUCKET_TZ = ZoneInfo("Europe/Paris")
"""
Calendar on which publication dates are grouped into years and months.
"""

RawRecallRecord = Mapping[str, Any]
"""
One upstream RappelConso row keyed by vendor field names. Every field is optional.
"""

RAW_RECALL_FIELDS: tuple[str, ...] = (
    "id",
    "numero_fiche",
    "numero_version",
    "nature_juridique_rappel",
    "marque_produit",
    "modeles_ou_references",
    "categorie_produit",
    "sous_categorie_produit",
    "conditionnements",
    "motif_rappel",
    "risques_encourus",
    "date_publication",
    "date_debut_commercialisation",
    "date_date_fin_commercialisation",
    "temperature_conservation",
    "marque_salubrite",
    "informations_complementaires",
    "zone_geographique_de_vente",
    "distributeurs",
    "identification_produits",
    "liens_vers_les_images",
    "libelle",
    "preconisations_sanitaires",
    "description_complementaire_risque",
    "conduites_a_tenir_par_le_consommateur",
    "numero_contact",
    "modalites_de_compensation",
    "date_de_fin_de_la_procedure_de_rappel",
    "informations_complementaires_publiques",
    "lien_vers_la_liste_des_produits",
    "lien_vers_la_liste_des_distributeurs",
    "lien_vers_affichette_pdf",
    "lien_vers_la_fiche_rappel",
    "rappel_guid",
)


@dataclass(frozen=True)
class CanonicalRecall:
    """
    Normalized recall notice, independent of upstream field naming.

    Built once per raw record by ``app.mappers.recall_mapper.normalize``
    and never modified afterwards.
    """

    id: str
    record_number: str | None
    title: str
    brand: str
    category: str
    risk_level: str
    reason: str
    recall_date: str | None
    record_version: int | None = None
    legal_nature: str | None = None
    sub_category: str | None = None
    packaging: str | None = None
    risks: str | None = None
    batch_number: str | None = None
    image: str | None = None
    images: str | None = None
    commercialisation_start: str | None = None
    commercialisation_end: str | None = None
    temperature_conservation: str | None = None
    health_mark: str | None = None
    additional_info: str | None = None
    geographic_zone: str | None = None
    distributors: str | None = None
    health_recommendations: str | None = None
    risk_description: str | None = None
    consumer_actions: str | None = None
    contact_number: str | None = None
    compensation_method: str | None = None
    procedure_end_date: str | None = None
    public_additional_info: str | None = None
    product_list_link: str | None = None
    distributors_list_link: str | None = None
    poster_pdf_link: str | None = None
    recall_page_link: str | None = None
    guid: str | None = None


@dataclass(frozen=True)
class SyncSummary:
    """
    Outcome of one upstream-to-store synchronization run.
    """

    source: str
    records_fetched: int
    records_upserted: int
    failed_records: int
    status: str
    error: str | None = None


def parse_recall_date(value: Any) -> datetime | None:
    """
    Parse an ISO date or datetime string into a timezone-aware UTC datetime.

    Naive values are taken as UTC. Returns None for anything unparsable.
    """

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        normalized = text[:-1] + "+00:00" if text.endswith("Z") else text
        try:
            parsed = datetime.fromisoformat(normalized)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def local_recall_date(value: Any) -> datetime | None:
    """
    Publication date on the ``BUCKET_TZ`` calendar, or None when unparsable.

    Year and month grouping read this value, so a notice published at
    00:30 on 1 January in Paris belongs to the new year.
    """

    parsed = parse_recall_date(value)
    return parsed.astimezone(BUCKET_TZ) if parsed is not None else None
