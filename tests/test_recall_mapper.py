"""
tests/test_recall_mapper.py

Pytest unit tests for raw record normalization and the compact cache shape.

All tests are pure Python: no database, no I/O.
"""

from __future__ import annotations

import pytest

from app.domain.recall import CanonicalRecall
from app.mappers.recall_mapper import (
    DEFAULT_BRAND,
    DEFAULT_CATEGORY,
    DEFAULT_REASON,
    DEFAULT_TITLE,
    UNKNOWN_ID,
    compact_recall,
    normalize,
    normalize_many,
    restore_recall,
)
from risk.base import RiskTier, is_risk_tier


@pytest.fixture()
def raw_record() -> dict:
    return {
        "id": 18234,
        "numero_fiche": "2024-03-0112",
        "numero_version": 2,
        "libelle": "Fromage au lait cru",
        "marque_produit": "Les Alpages",
        "modeles_ou_references": "Tomme 250g",
        "categorie_produit": "Alimentation",
        "sous_categorie_produit": "Produits laitiers",
        "motif_rappel": "Présence de Listeria monocytogenes",
        "risques_encourus": "Listériose",
        "identification_produits": "3250390000000$LOT-42$2024-04-01",
        "liens_vers_les_images": "https://img/1.jpg|https://img/2.jpg",
        "distributeurs": "Carrefour¤Leclerc",
        "date_publication": "2024-03-12T08:00:00+00:00",
        "rappel_guid": "guid-1",
    }


class TestNormalize:
    def test_full_record(self, raw_record: dict) -> None:
        recall = normalize(raw_record)
        assert isinstance(recall, CanonicalRecall)
        assert recall.id == "2024-03-0112"
        assert recall.record_number == "2024-03-0112"
        assert recall.record_version == 2
        assert recall.title == "Fromage au lait cru"
        assert recall.brand == "Les Alpages"
        assert recall.category == "Alimentation"
        assert recall.risk_level == RiskTier.CRITICAL
        assert recall.batch_number == "LOT-42"
        assert recall.image == "https://img/1.jpg"
        assert recall.recall_date == "2024-03-12T08:00:00+00:00"

    def test_carry_through_fields(self, raw_record: dict) -> None:
        recall = normalize(raw_record)
        assert recall.sub_category == "Produits laitiers"
        assert recall.risks == "Listériose"
        assert recall.distributors == "Carrefour¤Leclerc"
        assert recall.images == "https://img/1.jpg|https://img/2.jpg"
        assert recall.guid == "guid-1"

    def test_empty_record_uses_literal_defaults(self) -> None:
        recall = normalize({})
        assert recall.id == UNKNOWN_ID
        assert recall.title == DEFAULT_TITLE == "Produit sans nom"
        assert recall.brand == DEFAULT_BRAND == "Marque inconnue"
        assert recall.category == DEFAULT_CATEGORY == "Non catégorisé"
        assert recall.reason == DEFAULT_REASON == "Motif non précisé"
        assert recall.risk_level == RiskTier.LOW
        assert recall.batch_number is None
        assert recall.image is None
        assert recall.recall_date is None

    def test_empty_strings_count_as_missing(self) -> None:
        recall = normalize({"marque_produit": "", "categorie_produit": "", "motif_rappel": ""})
        assert recall.brand == DEFAULT_BRAND
        assert recall.category == DEFAULT_CATEGORY
        assert recall.reason == DEFAULT_REASON

    def test_title_falls_back_to_model_reference(self) -> None:
        recall = normalize({"libelle": None, "modeles_ou_references": "Modèle X"})
        assert recall.title == "Modèle X"

    def test_boolean_values_count_as_missing(self) -> None:
        recall = normalize({"libelle": False, "marque_produit": True, "motif_rappel": False})
        assert recall.title == DEFAULT_TITLE
        assert recall.brand == DEFAULT_BRAND
        assert recall.reason == DEFAULT_REASON

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ({"numero_fiche": "F-1", "id": 7, "rappel_guid": "g"}, "F-1"),
            ({"id": 7, "rappel_guid": "g"}, "7"),
            ({"rappel_guid": "g"}, "g"),
            ({"numero_fiche": "", "id": None, "rappel_guid": ""}, UNKNOWN_ID),
        ],
    )
    def test_id_fallback_order(self, raw: dict, expected: str) -> None:
        assert normalize(raw).id == expected

    @pytest.mark.parametrize("junk", [None, 42, "text", ["a"], {"marque_produit": {"nested": 1}}])
    def test_never_raises_on_junk(self, junk: object) -> None:
        recall = normalize(junk)  # type: ignore[arg-type]
        assert is_risk_tier(recall.risk_level)
        assert recall.brand == DEFAULT_BRAND

    def test_normalize_many_keeps_order(self, raw_record: dict) -> None:
        recalls = normalize_many([raw_record, {}])
        assert [recall.id for recall in recalls] == ["2024-03-0112", UNKNOWN_ID]


class TestCompactShape:
    def test_compact_keeps_bounded_fields(self, raw_record: dict) -> None:
        raw_record["libelle"] = "T" * 150
        raw_record["motif_rappel"] = "Listeria " + "m" * 200
        compact = compact_recall(normalize(raw_record))
        assert set(compact) == {
            "id",
            "title",
            "brand",
            "category",
            "risk_level",
            "reason",
            "batch_number",
            "recall_date",
        }
        assert len(compact["title"]) == 100
        assert len(compact["reason"]) == 100
        assert "image" not in compact

    def test_restore_round_trip(self, raw_record: dict) -> None:
        original = normalize(raw_record)
        restored = restore_recall(compact_recall(original))
        assert restored.id == original.id
        assert restored.category == original.category
        assert restored.risk_level == original.risk_level
        assert restored.recall_date == original.recall_date
        assert restored.image is None

    def test_restore_reclassifies_unknown_tier(self) -> None:
        restored = restore_recall({"id": "x", "risk_level": "severe", "reason": "présence de salmonelle"})
        assert restored.risk_level == RiskTier.CRITICAL

    def test_restore_tolerates_empty_payload(self) -> None:
        restored = restore_recall({})
        assert restored.id == UNKNOWN_ID
        assert restored.title == DEFAULT_TITLE
        assert restored.risk_level == RiskTier.LOW
