"""
app/mappers/recall_mapper.py

Mapping from raw RappelConso rows to CanonicalRecall entities.

The upstream dataset populates its fields inconsistently, so mapping is
total: absent, null or empty values degrade to the documented fallback
literals or to ``None``. Nothing in this module raises on malformed input.

Fallback literals
-----------------
title     "Produit sans nom"    (after libelle, then modeles_ou_references)
brand     "Marque inconnue"
category  "Non catégorisé"
reason    "Motif non précisé"

Category and brand literals are group-by keys for the statistics layer
and must stay byte-identical.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from app.domain.recall import CanonicalRecall, RawRecallRecord
from app.mappers.packed_fields import extract_batch_number, extract_first_image
from risk.base import is_risk_tier
from risk.classifier import classify

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Produit sans nom"
DEFAULT_BRAND = "Marque inconnue"
DEFAULT_CATEGORY = "Non catégorisé"
DEFAULT_REASON = "Motif non précisé"
UNKNOWN_ID = "inconnu"

# Plain renames: canonical attribute -> vendor field.
_CARRY_THROUGH_FIELDS: dict[str, str] = {
    "legal_nature": "nature_juridique_rappel",
    "sub_category": "sous_categorie_produit",
    "packaging": "conditionnements",
    "risks": "risques_encourus",
    "recall_date": "date_publication",
    "commercialisation_start": "date_debut_commercialisation",
    "commercialisation_end": "date_date_fin_commercialisation",
    "temperature_conservation": "temperature_conservation",
    "health_mark": "marque_salubrite",
    "additional_info": "informations_complementaires",
    "geographic_zone": "zone_geographique_de_vente",
    "images": "liens_vers_les_images",
    "distributors": "distributeurs",
    "health_recommendations": "preconisations_sanitaires",
    "risk_description": "description_complementaire_risque",
    "consumer_actions": "conduites_a_tenir_par_le_consommateur",
    "contact_number": "numero_contact",
    "compensation_method": "modalites_de_compensation",
    "procedure_end_date": "date_de_fin_de_la_procedure_de_rappel",
    "public_additional_info": "informations_complementaires_publiques",
    "product_list_link": "lien_vers_la_liste_des_produits",
    "distributors_list_link": "lien_vers_la_liste_des_distributeurs",
    "poster_pdf_link": "lien_vers_affichette_pdf",
    "recall_page_link": "lien_vers_la_fiche_rappel",
    "guid": "rappel_guid",
}

# Fields kept by the compact historical-cache shape, with truncation limits.
COMPACT_FIELD_LIMITS: dict[str, int | None] = {
    "id": None,
    "title": 100,
    "brand": 50,
    "category": None,
    "risk_level": None,
    "reason": 100,
    "batch_number": None,
    "recall_date": None,
}


def _text(value: Any) -> str | None:
    """
    Coerce a raw scalar to text; falsy values become None.
    """

    if isinstance(value, bool) or not value:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list, tuple, set)):
        return None
    return str(value)


def _int_or_none(value: Any) -> int | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _resolve_id(raw: RawRecallRecord) -> str:
    for key in ("numero_fiche", "id", "rappel_guid"):
        candidate = _text(raw.get(key))
        if candidate and candidate.strip():
            return candidate
    return UNKNOWN_ID


def normalize(raw: RawRecallRecord) -> CanonicalRecall:
    """
    Map one raw RappelConso row to a CanonicalRecall.
    """

    if not isinstance(raw, Mapping):
        logger.debug("normalize received non-mapping row type=%s", type(raw).__name__)
        raw = {}

    risks = _text(raw.get("risques_encourus"))
    reason = _text(raw.get("motif_rappel"))

    carried = {
        attribute: _text(raw.get(source))
        for attribute, source in _CARRY_THROUGH_FIELDS.items()
    }

    return CanonicalRecall(
        id=_resolve_id(raw),
        record_number=_text(raw.get("numero_fiche")),
        record_version=_int_or_none(raw.get("numero_version")),
        title=(
            _text(raw.get("libelle"))
            or _text(raw.get("modeles_ou_references"))
            or DEFAULT_TITLE
        ),
        brand=_text(raw.get("marque_produit")) or DEFAULT_BRAND,
        category=_text(raw.get("categorie_produit")) or DEFAULT_CATEGORY,
        risk_level=classify(risks, reason),
        reason=reason or DEFAULT_REASON,
        batch_number=extract_batch_number(raw.get("identification_produits")),
        image=extract_first_image(raw.get("liens_vers_les_images")),
        **carried,
    )


def normalize_many(raws: Iterable[RawRecallRecord]) -> list[CanonicalRecall]:
    return [normalize(raw) for raw in raws]


# ---------------------------------------------------------------------------
# Compact cache shape
# ---------------------------------------------------------------------------


def compact_recall(recall: CanonicalRecall) -> dict[str, Any]:
    """
    Reduce a recall to the storage-bounded historical cache shape.

    Images and long free-text fields are dropped; title, brand and reason
    are truncated.
    """

    compact: dict[str, Any] = {}
    for attribute, limit in COMPACT_FIELD_LIMITS.items():
        value = getattr(recall, attribute)
        if limit is not None and isinstance(value, str):
            value = value[:limit]
        compact[attribute] = value
    return compact


def restore_recall(payload: Mapping[str, Any]) -> CanonicalRecall:
    """
    Rebuild a CanonicalRecall from a compact cache entry.

    Missing fields take the same defaults as ``normalize``; an unknown
    risk level is recomputed from the retained reason text.
    """

    if not isinstance(payload, Mapping):
        payload = {}

    reason = _text(payload.get("reason")) or DEFAULT_REASON
    risk_level = payload.get("risk_level")
    if not is_risk_tier(risk_level):
        risk_level = classify(None, reason)

    record_id = _text(payload.get("id"))
    return CanonicalRecall(
        id=record_id if record_id and record_id.strip() else UNKNOWN_ID,
        record_number=None,
        title=_text(payload.get("title")) or DEFAULT_TITLE,
        brand=_text(payload.get("brand")) or DEFAULT_BRAND,
        category=_text(payload.get("category")) or DEFAULT_CATEGORY,
        risk_level=risk_level,
        reason=reason,
        batch_number=_text(payload.get("batch_number")),
        recall_date=_text(payload.get("recall_date")),
    )
