"""
Contradiction detection - factual conflicts between a document and newer or more authoritative ones.
Detection is driven by declarative rule tables; add a rule record to extend it.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .config import DEFAULT_CONFIG, DecayConfig
from .models import DecayReason, DocumentSnapshot, ReasonType, RelatedDocument, parse_timestamp
from ..vector.text import split_sentences, text_similarity


MIN_STATEMENT_LENGTH = 20
QUOTE_LENGTH = 60


@dataclass(frozen=True)
class FactualIndicator:
    name: str
    pattern: re.Pattern


@dataclass(frozen=True)
class NegationRule:
    """Opposite-polarity phrase pair.

    A statement matching `negative` has negative polarity even when it also
    matches `positive` ("must not" contains "must"). Only statements of
    opposite polarity conflict, so two "must not" statements agree.
    """
    name: str
    positive: re.Pattern
    negative: re.Pattern

    def polarity(self, statement: str) -> Optional[str]:
        if self.negative.search(statement):
            return "negative"
        if self.positive.search(statement):
            return "positive"
        return None


FACTUAL_INDICATORS = [
    FactualIndicator("obligation", re.compile(r"\b(must|shall|should|will|always|never|required|mandatory)\b", re.I)),
    FactualIndicator("process", re.compile(r"\b(step|process|procedure|method|approach)\b", re.I)),
    FactualIndicator("release", re.compile(r"\b(version|release|update|deploy)\b", re.I)),
    FactualIndicator("numeric", re.compile(r"\b\d+(?:\.\d+)?\b")),
]

NEGATION_RULES = [
    NegationRule("must", re.compile(r"\bmust\b"), re.compile(r"\bmust not\b|\bshould not\b")),
    NegationRule("always", re.compile(r"\balways\b"), re.compile(r"\bnever\b")),
    NegationRule("required", re.compile(r"\brequired\b"), re.compile(r"\boptional\b|\bnot required\b")),
    NegationRule("enable", re.compile(r"\benable\b"), re.compile(r"\bdisable\b")),
]

NUMERIC_UNIT_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*((?:days?|hours?|minutes?|weeks?|percent)\b|%)", re.I)


@dataclass
class StatementConflict:
    is_contradiction: bool
    score: float = 0.0
    reason: Optional[str] = None
    rule: Optional[str] = None


@dataclass
class Contradiction:
    statement: str
    document_id: str
    conflicting_statement: str
    conflicting_document_id: str
    conflicting_document_title: str
    severity: str  # 'medium', 'high'
    score: float
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "this_document": {"statement": self.statement, "document_id": self.document_id},
            "conflicts_with": {
                "statement": self.conflicting_statement,
                "document_id": self.conflicting_document_id,
                "document_title": self.conflicting_document_title,
            },
            "severity": self.severity,
            "score": self.score,
            "reason": self.reason,
        }


@dataclass
class ContradictionResult:
    has_contradictions: bool
    contradictions: List[Contradiction] = field(default_factory=list)
    penalty: float = 0.0
    decay_reasons: List[DecayReason] = field(default_factory=list)


def extract_key_statements(text: str) -> List[str]:
    """Sentences longer than 20 characters carrying at least one factual indicator."""
    return [
        sentence for sentence in split_sentences(text)
        if len(sentence) > MIN_STATEMENT_LENGTH
        and any(indicator.pattern.search(sentence) for indicator in FACTUAL_INDICATORS)
    ]


def _normalize_unit(unit: str) -> str:
    unit = unit.lower()
    if unit in ("%", "percent"):
        return "%"
    return unit[:-1] if unit.endswith("s") else unit


def detect_statement_contradiction(stmt1: str, stmt2: str, config: DecayConfig = DEFAULT_CONFIG) -> StatementConflict:
    """Compare two statements for a negation or numeric conflict. First matching rule wins."""
    s1 = stmt1.lower()
    s2 = stmt2.lower()

    for rule in NEGATION_RULES:
        p1 = rule.polarity(s1)
        p2 = rule.polarity(s2)
        if p1 and p2 and p1 != p2:
            # Same topic check: the rest of the statement must overlap
            similarity = text_similarity(s1, s2)
            if similarity > config.negation_similarity_threshold:
                return StatementConflict(True, similarity, "Contradicting requirements detected", rule.name)

    quantities1 = NUMERIC_UNIT_PATTERN.findall(s1)
    quantities2 = NUMERIC_UNIT_PATTERN.findall(s2)

    for n1, u1 in quantities1:
        for n2, u2 in quantities2:
            if _normalize_unit(u1) == _normalize_unit(u2) and float(n1) != float(n2):
                similarity = text_similarity(NUMERIC_UNIT_PATTERN.sub("", s1), NUMERIC_UNIT_PATTERN.sub("", s2))
                if similarity > config.numeric_similarity_threshold:
                    return StatementConflict(True, similarity, f"Numerical conflict: {n1} {u1} vs {n2} {u2}", "numeric")

    return StatementConflict(False)


def is_more_authoritative(doc1: DocumentSnapshot, doc2: DocumentSnapshot, config: DecayConfig = DEFAULT_CONFIG) -> bool:
    """Check if doc1 outranks doc2 (SOP > Policy > Spec > Guide > Notes)."""
    return config.rank_of(doc1.type) > config.rank_of(doc2.type)


def calculate_contradiction_penalty(contradictions: Sequence[Contradiction], config: DecayConfig = DEFAULT_CONFIG) -> float:
    if not contradictions:
        return 0.0

    high = sum(1 for c in contradictions if c.severity == "high")
    medium = sum(1 for c in contradictions if c.severity == "medium")

    penalty = high * config.high_severity_weight + medium * config.medium_severity_weight
    return min(config.max_contradiction_penalty, round(penalty, 3))


def truncate(text: str, max_len: int) -> str:
    if len(text) <= max_len:
        return text
    return text[:max_len - 3] + "..."


def _unwrap(related) -> DocumentSnapshot:
    return related.document if isinstance(related, RelatedDocument) else related


def detect_contradictions(document: DocumentSnapshot, related_docs: Sequence, config: DecayConfig = DEFAULT_CONFIG) -> ContradictionResult:
    """
    Find contradictions between a document and its related documents.

    Related documents older than the subject are skipped unless they are more
    authoritative. Every statement pair is compared; each conflict becomes
    one contradiction reason citing the conflicting document.
    """
    if not related_docs:
        return ContradictionResult(has_contradictions=False)

    doc_statements = extract_key_statements(document.content)
    contradictions: List[Contradiction] = []

    for related in related_docs:
        other = _unwrap(related)

        if parse_timestamp(other.updated_at) < parse_timestamp(document.updated_at) and not is_more_authoritative(other, document, config):
            continue

        other_statements = extract_key_statements(other.content)

        for stmt1 in doc_statements:
            for stmt2 in other_statements:
                result = detect_statement_contradiction(stmt1, stmt2, config)
                if not result.is_contradiction:
                    continue
                contradictions.append(Contradiction(
                    statement=stmt1,
                    document_id=document.id,
                    conflicting_statement=stmt2,
                    conflicting_document_id=other.id,
                    conflicting_document_title=other.display_title,
                    severity="high" if result.score > config.high_severity_threshold else "medium",
                    score=result.score,
                    reason=result.reason,
                ))

    decay_reasons = [
        DecayReason(
            type=ReasonType.CONTRADICTION,
            description=(
                f'"{truncate(c.statement, QUOTE_LENGTH)}" conflicts with '
                f'"{truncate(c.conflicting_statement, QUOTE_LENGTH)}" in "{c.conflicting_document_title}"'
            ),
            sources=[c.conflicting_document_id],
        )
        for c in contradictions
    ]

    return ContradictionResult(
        has_contradictions=bool(contradictions),
        contradictions=contradictions,
        penalty=calculate_contradiction_penalty(contradictions, config),
        decay_reasons=decay_reasons,
    )
