"""
tests/test_risk_classifier.py

Pytest unit tests for the keyword risk classifier.

Coverage
--------
- One keyword per tier
- First matching tier wins over lower tiers
- Case-insensitive matching across both texts
- Missing texts classify as low
- Custom keyword tables
"""

from __future__ import annotations

import pytest

from risk.base import RISK_TIERS, RiskTier, is_risk_tier
from risk.classifier import KeywordRiskClassifier, classify


class TestTierKeywords:
    @pytest.mark.parametrize(
        "risks, expected",
        [
            ("Listeria monocytogenes", RiskTier.CRITICAL),
            ("Présence de salmonelle", RiskTier.CRITICAL),
            ("Risque de botulisme", RiskTier.CRITICAL),
            ("Danger grave pour la santé", RiskTier.CRITICAL),
            ("Risque d'étouffement", RiskTier.HIGH),
            ("Allergène non déclaré", RiskTier.HIGH),
            ("Risque de brûlure", RiskTier.HIGH),
            ("Défaut d'étiquetage", RiskTier.MEDIUM),
            ("Contamination possible", RiskTier.MEDIUM),
            ("Non-conformité réglementaire", RiskTier.LOW),
        ],
    )
    def test_keyword_maps_to_tier(self, risks: str, expected: str) -> None:
        assert classify(risks, None) == expected

    def test_reason_text_is_also_searched(self) -> None:
        assert classify(None, "Présence de Listeria") == RiskTier.CRITICAL

    def test_matching_is_case_insensitive(self) -> None:
        assert classify("SALMONELLE", "") == RiskTier.CRITICAL
        assert classify("", "ATTENTION au produit") == RiskTier.MEDIUM


class TestPriority:
    def test_critical_wins_over_high(self) -> None:
        assert classify("Allergène", "présence de salmonelle") == RiskTier.CRITICAL

    def test_high_wins_over_medium(self) -> None:
        assert classify("défaut de fabrication", "risque de blessure") == RiskTier.HIGH


class TestMissingText:
    def test_both_none_is_low(self) -> None:
        assert classify(None, None) == RiskTier.LOW

    def test_both_empty_is_low(self) -> None:
        assert classify("", "") == RiskTier.LOW

    def test_result_is_always_a_known_tier(self) -> None:
        for text in (None, "", "x", "Listeria", "défaut"):
            assert is_risk_tier(classify(text, text))
        assert set(RISK_TIERS) == {"critical", "high", "medium", "low"}


class TestCustomTable:
    def test_custom_table_and_default(self) -> None:
        classifier = KeywordRiskClassifier(
            table=[(RiskTier.HIGH, ["Plomb"])],
            default_tier=RiskTier.MEDIUM,
        )
        assert classifier.classify("présence de plomb", None) == RiskTier.HIGH
        assert classifier.classify("listeria", None) == RiskTier.MEDIUM

    def test_stateless_across_calls(self) -> None:
        classifier = KeywordRiskClassifier()
        first = classifier.classify("Listeria", None)
        classifier.classify(None, None)
        assert classifier.classify("Listeria", None) == first
