"""
Confidence scoring - penalty aggregation and risk classification.
The breakdown is kept for audit; only the final score is public.
"""

from typing import Tuple

from .config import DEFAULT_CONFIG, DecayConfig
from .freshness import CRITICAL
from .models import ConfidenceBreakdown, RiskLevel


def _cap(penalty: float, maximum: float) -> float:
    return max(0.0, min(penalty, maximum))


def calculate_support_penalty(supporting_docs_count: int, config: DecayConfig = DEFAULT_CONFIG) -> float:
    """0 docs -> full penalty, 3+ docs -> none, linear in between."""
    if supporting_docs_count <= 0:
        return config.max_support_penalty
    if supporting_docs_count < config.full_support_count:
        return config.max_support_penalty * (1 - supporting_docs_count / config.full_support_count)
    return 0.0


def calculate_confidence(
    age_penalty: float = 0.0,
    contradiction_penalty: float = 0.0,
    drift_penalty: float = 0.0,
    supporting_docs_count: int = 0,
    config: DecayConfig = DEFAULT_CONFIG,
) -> Tuple[float, ConfidenceBreakdown]:
    """
    Calculate confidence score with full breakdown.

    Starts at 1.0 and subtracts each penalty clamped to [0, cap]. The final
    score is clamped to [0, 1] and rounded to 2 places; breakdown values are
    rounded to 3 places independently.
    """
    applied_age = _cap(age_penalty, config.max_age_penalty)
    applied_contradiction = _cap(contradiction_penalty, config.max_contradiction_penalty)
    applied_drift = _cap(drift_penalty, config.max_drift_penalty)
    applied_support = calculate_support_penalty(supporting_docs_count, config)

    confidence = 1.0 - applied_age - applied_contradiction - applied_drift - applied_support
    confidence = max(0.0, min(1.0, confidence))
    confidence = round(confidence, 2)

    breakdown = ConfidenceBreakdown(
        starting_confidence=1.0,
        age_penalty=round(applied_age, 3),
        contradiction_penalty=round(applied_contradiction, 3),
        drift_penalty=round(applied_drift, 3),
        support_penalty=round(applied_support, 3),
        total_penalty=round(1.0 - confidence, 3),
        final_confidence=confidence,
    )

    return confidence, breakdown


def determine_risk_level(
    confidence: float,
    has_contradictions: bool = False,
    has_significant_drift: bool = False,
    freshness_status: str = None,
    config: DecayConfig = DEFAULT_CONFIG,
) -> str:
    """Classify risk; first matching rule wins."""
    if has_contradictions or confidence < config.high_risk_confidence:
        return RiskLevel.HIGH

    if has_significant_drift or freshness_status == CRITICAL or confidence < config.medium_risk_confidence:
        return RiskLevel.MEDIUM

    return RiskLevel.LOW


def should_flag_decay(confidence: float, risk_level: str) -> bool:
    # Any imperfection goes to human review
    return confidence < 1.0 or risk_level != RiskLevel.LOW
