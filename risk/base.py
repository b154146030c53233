"""
risk/base.py

Risk tier vocabulary and the abstract interface for recall risk classifiers.
All classifier implementations must inherit from BaseRiskClassifier.
"""

from abc import ABC, abstractmethod


class RiskTier:
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# Ordered from most to least severe.
RISK_TIERS: tuple[str, ...] = (
    RiskTier.CRITICAL,
    RiskTier.HIGH,
    RiskTier.MEDIUM,
    RiskTier.LOW,
)

RISK_TIER_LABELS: dict[str, str] = {
    RiskTier.CRITICAL: "Danger critique",
    RiskTier.HIGH: "Risque élevé",
    RiskTier.MEDIUM: "Attention",
    RiskTier.LOW: "Information",
}


def is_risk_tier(value: object) -> bool:
    """Return True when *value* is one of the four known tiers."""
    return isinstance(value, str) and value in RISK_TIERS


class BaseRiskClassifier(ABC):
    """Abstract base class for recall risk classifiers.

    Implementations map the free-text hazard and reason fields of a
    recall notice to exactly one tier of RISK_TIERS. Classification
    must be total: every input, including missing text, maps to a tier.
    """

    @abstractmethod
    def classify(self, risks_text: str | None, reason_text: str | None) -> str:
        """Classify a recall from its hazard and reason texts.

        Args:
            risks_text: Free-text description of the risks incurred
                        (``risques_encourus``). May be None or empty.
            reason_text: Free-text recall reason (``motif_rappel``).
                         May be None or empty.

        Returns:
            One of "critical", "high", "medium" or "low".
        """
        raise NotImplementedError("Subclasses must implement classify()")
