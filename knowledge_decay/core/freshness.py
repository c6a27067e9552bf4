"""
Freshness evaluation - time-based staleness per document type.
Re-verification resets the reference date; nothing else moves a document back to fresh.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Tuple

from .config import DEFAULT_CONFIG, DecayConfig
from .models import DecayReason, DocumentSnapshot, ReasonType, parse_timestamp


FRESH = "fresh"
WARNING = "warning"
CRITICAL = "critical"


@dataclass
class FreshnessResult:
    status: str  # 'fresh', 'warning', 'critical'
    age_days: int
    thresholds: Tuple[int, int]
    penalty: float
    decay_reason: Optional[DecayReason]


def calculate_age_days(reference: datetime, now: datetime = None) -> int:
    """Whole days elapsed since reference. Future timestamps count as age 0."""
    now = parse_timestamp(now) if now is not None else datetime.now(timezone.utc)
    reference = parse_timestamp(reference)
    elapsed = (now - reference).total_seconds() / 86400
    return max(0, math.floor(elapsed))


def get_thresholds(doc_type: str, config: DecayConfig = DEFAULT_CONFIG) -> Tuple[int, int]:
    """Get (warning, critical) day thresholds for a document type."""
    return config.thresholds_for(doc_type)


def evaluate_freshness(document: DocumentSnapshot, config: DecayConfig = DEFAULT_CONFIG, now: datetime = None) -> FreshnessResult:
    """
    Evaluate document freshness against its type thresholds.

    Reference date is last_verified_at when present, otherwise updated_at.
    Penalty is 0 while fresh, rises linearly from the warning penalty to
    the max age penalty across the warning window, and is capped at the
    max once critical.
    """
    warning, critical = config.thresholds_for(document.type)
    reference = document.last_verified_at or document.updated_at
    age_days = calculate_age_days(reference, now)

    status = FRESH
    penalty = 0.0
    decay_reason = None

    if age_days >= critical:
        status = CRITICAL
        penalty = config.max_age_penalty
        decay_reason = DecayReason(
            type=ReasonType.TIME,
            description=f"Document last updated {age_days} days ago ({document.type} critical threshold: {critical} days)",
            sources=[],
        )
    elif age_days >= warning:
        status = WARNING
        over_warning = age_days - warning
        window = critical - warning
        penalty = config.warning_age_penalty + (config.max_age_penalty - config.warning_age_penalty) * (over_warning / window)
        decay_reason = DecayReason(
            type=ReasonType.TIME,
            description=f"Document last updated {age_days} days ago ({document.type} warning threshold: {warning} days)",
            sources=[],
        )

    return FreshnessResult(
        status=status,
        age_days=age_days,
        thresholds=(warning, critical),
        penalty=round(penalty, 3),
        decay_reason=decay_reason,
    )
