"""
Update recommendations - templated, human-reviewable suggestions for decayed documents.
Nothing here edits a document; every suggestion waits for a reviewer.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence

from .models import DecayReason, DocumentSnapshot, ReasonType, RelatedDocument, UpdateRecommendation, parse_timestamp

REVIEW_INSTRUCTIONS = (
    "Please review each suggested update carefully. Suggestions may need adjustment "
    "based on current organizational context."
)

NO_CHANGES_SUMMARY = "No significant changes detected."
FALLBACK_SUMMARY = "Decay signals detected. Review recommended."


@dataclass
class RecommendationSet:
    recommendations: List[UpdateRecommendation] = field(default_factory=list)
    what_changed_summary: str = NO_CHANGES_SUMMARY
    requires_human_review: bool = True
    review_instructions: str = REVIEW_INSTRUCTIONS


def _extract_days(description: str) -> str:
    match = re.search(r"(\d+)\s*days?\s*ago", description, re.I)
    return match.group(1) if match else "N"


def _extract_section(description: str) -> str:
    """First quoted statement of a contradiction description, at most 50 characters."""
    match = re.search(r'"([^"]+)"', description)
    if match:
        return match.group(1)[:50]
    return "Conflicting Section"


def _format_date(value) -> str:
    date = parse_timestamp(value) if not isinstance(value, datetime) else value
    return f"{date:%b} {date.day}, {date.year}"


def _time_update(document: DocumentSnapshot, reason: DecayReason) -> UpdateRecommendation:
    return UpdateRecommendation(
        section="Document Review Required",
        suggested_text=(
            f"[REVIEW NEEDED] This {document.type} was last updated {_extract_days(reason.description)} days ago. "
            "Please verify that all information is still current and accurate. Key areas to check:\n"
            "- Process steps and procedures\n"
            "- Referenced tools and versions\n"
            "- Contact information and responsible parties\n"
            "- Compliance requirements"
        ),
        reason=reason.description,
        priority="medium",
    )


def _contradiction_update(reason: DecayReason, related_docs: Sequence[DocumentSnapshot]) -> UpdateRecommendation:
    conflicting = next((d for d in related_docs if d.id in reason.sources), None)

    suggested_text = "[CONFLICT DETECTED] "
    if conflicting is not None:
        suggested_text += (
            f'This section may conflict with "{conflicting.display_title}" '
            f"(updated {_format_date(conflicting.updated_at)}). "
            "Please reconcile the following difference:\n\n"
            "Current document states different information than the newer source. "
            "Consider updating to align with the latest guidance."
        )
    else:
        suggested_text += "A conflicting statement was detected. Please review and update as needed."

    return UpdateRecommendation(
        section=_extract_section(reason.description),
        suggested_text=suggested_text,
        reason=reason.description,
        priority="high",
    )


def _drift_update(document: DocumentSnapshot, reason: DecayReason) -> UpdateRecommendation:
    return UpdateRecommendation(
        section="Version History Note",
        suggested_text=(
            "[SIGNIFICANT CHANGES] This document has undergone substantial revisions. "
            "Previous versions may contain outdated information and should be considered historical reference only. "
            f"Current version (v{document.current_version}) is the authoritative source."
        ),
        reason=reason.description,
        priority="low",
    )


def _support_update(reason: DecayReason) -> UpdateRecommendation:
    return UpdateRecommendation(
        section="Verification Needed",
        suggested_text=(
            "[LOW SUPPORTING EVIDENCE] This document has limited supporting documentation. Consider:\n"
            "- Adding references to related documents\n"
            "- Cross-referencing with team leads\n"
            "- Documenting sources for key claims"
        ),
        reason=reason.description,
        priority="medium",
    )


def _recommendation_for(document: DocumentSnapshot, reason: DecayReason, related_docs) -> Optional[UpdateRecommendation]:
    if reason.type == ReasonType.TIME:
        return _time_update(document, reason)
    if reason.type == ReasonType.CONTRADICTION:
        return _contradiction_update(reason, related_docs)
    if reason.type == ReasonType.VERSION_DRIFT:
        return _drift_update(document, reason)
    if reason.type == ReasonType.LOW_SUPPORT:
        return _support_update(reason)
    return None


def generate_what_changed_summary(decay_reasons: Sequence[DecayReason], related_docs: Sequence[DocumentSnapshot] = ()) -> str:
    """Prose summary assembled from fixed clauses for the reason types present."""
    if not decay_reasons:
        return NO_CHANGES_SUMMARY

    types = {r.type for r in decay_reasons}
    parts = []

    if ReasonType.TIME in types:
        parts.append("The document has not been reviewed recently and may contain outdated information.")

    if ReasonType.CONTRADICTION in types:
        conflict_sources = {s for r in decay_reasons if r.type == ReasonType.CONTRADICTION for s in r.sources}
        titles = [d.display_title for d in related_docs if d.id in conflict_sources]
        if titles:
            parts.append(f"Conflicting information was found in: {', '.join(titles)}.")
        else:
            parts.append("Conflicting information was detected in related documents.")

    if ReasonType.VERSION_DRIFT in types:
        parts.append("Significant semantic changes were made in recent versions.")

    return " ".join(parts) or FALLBACK_SUMMARY


def generate_update_recommendations(
    document: DocumentSnapshot,
    decay_reasons: Sequence[DecayReason],
    related_docs: Sequence = (),
) -> RecommendationSet:
    """
    Generate update recommendations based on decay analysis.

    One suggestion per decay reason (error reasons get none). Suggestions
    are labelled and marked for human review; the document is not changed.
    """
    related = [r.document if isinstance(r, RelatedDocument) else r for r in related_docs]

    recommendations = []
    for reason in decay_reasons:
        recommendation = _recommendation_for(document, reason, related)
        if recommendation is not None:
            recommendations.append(recommendation)

    return RecommendationSet(
        recommendations=recommendations,
        what_changed_summary=generate_what_changed_summary(decay_reasons, related),
    )
