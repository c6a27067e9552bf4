"""
Version drift analysis - semantic change between the current document and its prior versions.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .config import DEFAULT_CONFIG, DecayConfig
from .models import DecayReason, DocumentSnapshot, ReasonType, VersionSnapshot
from ..vector.text import calculate_semantic_difference
from ..vector.types import are_compatible, semantic_difference


MODERATE = "moderate"
SIGNIFICANT = "significant"


@dataclass
class VersionChange:
    from_version: int
    to_version: int
    drift_score: float
    severity: str  # 'moderate', 'significant'
    summary: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from_version": self.from_version,
            "to_version": self.to_version,
            "drift_score": self.drift_score,
            "severity": self.severity,
            "summary": self.summary,
        }


@dataclass
class DriftResult:
    has_drift: bool
    has_significant_drift: bool
    drift_score: float
    penalty: float
    changes: List[VersionChange] = field(default_factory=list)
    decay_reason: Optional[DecayReason] = None


def version_drift(document: DocumentSnapshot, version: VersionSnapshot) -> float:
    """
    Semantic difference between the current content and one version.

    Stored embeddings are used when both sides have one of the same shape;
    otherwise both texts are compared with lexical vectors.
    """
    if are_compatible(document.embedding, version.embedding):
        return semantic_difference(document.embedding, version.embedding)
    return calculate_semantic_difference(document.content, version.content)


def analyze_version_drift(document: DocumentSnapshot, versions: Sequence[VersionSnapshot], config: DecayConfig = DEFAULT_CONFIG) -> DriftResult:
    """
    Analyze version drift for a document.

    Versions are expected newest-first. Only the most recent significant
    change produces a decay reason, however many versions drifted.
    """
    if not versions:
        return DriftResult(has_drift=False, has_significant_drift=False, drift_score=0.0, penalty=0.0)

    changes: List[VersionChange] = []
    max_drift = 0.0

    for version in versions:
        drift = version_drift(document, version)
        max_drift = max(max_drift, drift)

        if drift >= config.moderate_drift_threshold:
            changes.append(VersionChange(
                from_version=version.version_number,
                to_version=document.current_version,
                drift_score=drift,
                severity=SIGNIFICANT if drift >= config.significant_drift_threshold else MODERATE,
                summary=version.summary or f"Version {version.version_number}",
            ))

    significant_changes = [c for c in changes if c.severity == SIGNIFICANT]

    penalty = 0.0
    if max_drift >= config.significant_drift_threshold:
        penalty = config.significant_drift_penalty
    elif max_drift >= config.moderate_drift_threshold:
        penalty = config.moderate_drift_penalty

    decay_reason = None
    if significant_changes:
        most_recent = significant_changes[0]
        decay_reason = DecayReason(
            type=ReasonType.VERSION_DRIFT,
            description=(
                f"Significant semantic change detected from version {most_recent.from_version} "
                f"to {most_recent.to_version} (drift score: {most_recent.drift_score})"
            ),
            sources=[],
        )

    return DriftResult(
        has_drift=max_drift >= config.moderate_drift_threshold,
        has_significant_drift=bool(significant_changes),
        drift_score=round(max_drift, 3),
        penalty=round(penalty, 3),
        changes=changes,
        decay_reason=decay_reason,
    )


def identify_changes(old_content: str, new_content: str) -> Dict[str, Any]:
    """Line-level summary of what changed between two versions."""
    old_lines = [line for line in old_content.split("\n") if line.strip()]
    new_lines = [line for line in new_content.split("\n") if line.strip()]

    old_set = set(old_lines)
    new_set = set(new_lines)

    added = [line for line in new_lines if line not in old_set]
    removed = [line for line in old_lines if line not in new_set]

    return {
        "lines_added": len(added),
        "lines_removed": len(removed),
        "net_change": len(added) - len(removed),
        "sample_additions": added[:3],
        "sample_removals": removed[:3],
    }


def should_mark_as_historical(document: DocumentSnapshot, version: VersionSnapshot, config: DecayConfig = DEFAULT_CONFIG) -> bool:
    """A version that drifted significantly from the current content is historical reference only."""
    return version_drift(document, version) >= config.significant_drift_threshold
