"""
risk/classifier.py

Keyword-based risk tier classifier for recall notices.
No I/O, no state, no side effects.
"""

from __future__ import annotations

from typing import Sequence

from risk.base import BaseRiskClassifier, RiskTier


# ---------------------------------------------------------------------------
# Keyword table, evaluated top to bottom; first match wins.
# ---------------------------------------------------------------------------

RISK_KEYWORD_TABLE: tuple[tuple[str, tuple[str, ...]], ...] = (
    (
        RiskTier.CRITICAL,
        ("décès", "salmonelle", "listeria", "e.coli", "botulisme", "danger grave"),
    ),
    (
        RiskTier.HIGH,
        ("étouffement", "allergène", "blessure", "brûlure", "intoxication"),
    ),
    (
        RiskTier.MEDIUM,
        ("attention", "défaut", "contamination"),
    ),
)

DEFAULT_RISK_TIER: str = RiskTier.LOW


class KeywordRiskClassifier(BaseRiskClassifier):
    """Maps hazard and reason texts to a risk tier by ordered keyword lookup.

    The two texts are joined with a space and lower-cased, then tested for
    substring containment against each ``(tier, keywords)`` row of the
    table in order. There is no scoring: the first row with any matching
    keyword decides the tier. Texts matching no row fall back to
    ``default_tier``.

    The default vocabulary is known to be incomplete (no heavy metals,
    no foreign-body terms) and therefore understates some hazards.
    """

    def __init__(
        self,
        table: Sequence[tuple[str, Sequence[str]]] = RISK_KEYWORD_TABLE,
        default_tier: str = DEFAULT_RISK_TIER,
    ) -> None:
        self._table: tuple[tuple[str, tuple[str, ...]], ...] = tuple(
            (tier, tuple(keyword.lower() for keyword in keywords))
            for tier, keywords in table
        )
        self._default_tier = default_tier

    def classify(self, risks_text: str | None, reason_text: str | None) -> str:
        text = f"{risks_text or ''} {reason_text or ''}".lower()
        for tier, keywords in self._table:
            if any(keyword in text for keyword in keywords):
                return tier
        return self._default_tier


_DEFAULT_CLASSIFIER = KeywordRiskClassifier()


def classify(risks_text: str | None, reason_text: str | None) -> str:
    """Classify with the default keyword table."""
    return _DEFAULT_CLASSIFIER.classify(risks_text, reason_text)
