"""
Decay analysis records - document snapshots in, verdicts and audit breakdowns out.
"""

from dataclasses import asdict, dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..vector.types import RawVector, Vector, as_vector
from .errors import InvalidDocumentError


class DocumentType:
    SOP = "SOP"
    POLICY = "Policy"
    GUIDE = "Guide"
    SPEC = "Spec"
    NOTES = "Notes"

    ALL = (SOP, POLICY, GUIDE, SPEC, NOTES)


class ReasonType:
    TIME = "time"
    CONTRADICTION = "contradiction"
    VERSION_DRIFT = "version_drift"
    LOW_SUPPORT = "low_support"
    ERROR = "error"


class RiskLevel:
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def parse_timestamp(value, field_name: str = "timestamp", document_id: str = None) -> Optional[datetime]:
    """Parse a datetime or ISO-8601 string into an aware UTC datetime. Naive values are UTC."""
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            raise InvalidDocumentError(f"Invalid {field_name}: {value!r}", document_id)
    else:
        raise InvalidDocumentError(f"Invalid {field_name}: {value!r}", document_id)

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _pick(data: Dict[str, Any], *keys, default=None):
    for key in keys:
        if key in data:
            return data[key]
    return default


@dataclass(frozen=True)
class DocumentSnapshot:
    """Immutable view of a document as handed over by the persistence layer."""
    id: str
    workspace_id: str
    type: str
    content: str
    updated_at: datetime
    current_version: int = 1
    last_verified_at: Optional[datetime] = None
    embedding: Optional[RawVector] = None
    title: Optional[str] = None

    @property
    def display_title(self) -> str:
        return self.title or str(self.id)

    @property
    def vector(self) -> Optional[Vector]:
        """Stored embedding as a Vector, or None when the document has none."""
        if self.embedding is None:
            return None
        return as_vector(self.embedding)

    def validate(self) -> "DocumentSnapshot":
        """Fail fast on malformed input, returning a copy with normalized timestamps."""
        if self.id is None or str(self.id).strip() == "":
            raise InvalidDocumentError("Document id is required")
        if not isinstance(self.content, str):
            raise InvalidDocumentError(
                f"Document {self.id} content must be a string, got {type(self.content).__name__}",
                self.id,
            )
        if not isinstance(self.current_version, int) or self.current_version < 1:
            raise InvalidDocumentError(f"Document {self.id} current_version must be an integer >= 1", self.id)
        if self.updated_at is None:
            raise InvalidDocumentError(f"Document {self.id} updated_at is required", self.id)

        return replace(
            self,
            updated_at=parse_timestamp(self.updated_at, "updated_at", self.id),
            last_verified_at=parse_timestamp(self.last_verified_at, "last_verified_at", self.id),
        )

    def with_embedding(self, embedding: RawVector) -> "DocumentSnapshot":
        return replace(self, embedding=embedding)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DocumentSnapshot":
        """Create from a camelCase or snake_case dictionary (e.g. loaded from JSON)."""
        if not isinstance(data, dict):
            raise InvalidDocumentError(f"Document must be a mapping, got {type(data).__name__}")
        return cls(
            id=_pick(data, "id"),
            workspace_id=_pick(data, "workspace_id", "workspaceId"),
            type=_pick(data, "type", default=DocumentType.NOTES),
            content=_pick(data, "content"),
            updated_at=_pick(data, "updated_at", "updatedAt"),
            current_version=_pick(data, "current_version", "currentVersion", default=1),
            last_verified_at=_pick(data, "last_verified_at", "lastVerifiedAt"),
            embedding=_pick(data, "embedding"),
            title=_pick(data, "title"),
        )


@dataclass(frozen=True)
class VersionSnapshot:
    document_id: str
    version_number: int
    content: str
    embedding: Optional[RawVector] = None
    summary: Optional[str] = None
    author: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def vector(self) -> Optional[Vector]:
        if self.embedding is None:
            return None
        return as_vector(self.embedding)

    def validate(self) -> "VersionSnapshot":
        """Fail fast on malformed version input, returning a copy with a normalized timestamp."""
        if not isinstance(self.version_number, int) or isinstance(self.version_number, bool) or self.version_number < 1:
            raise InvalidDocumentError(
                f"Version of document {self.document_id} has invalid version_number: {self.version_number!r}",
                self.document_id,
            )
        if not isinstance(self.content, str):
            raise InvalidDocumentError(
                f"Version {self.version_number} of document {self.document_id} content must be a string, "
                f"got {type(self.content).__name__}",
                self.document_id,
            )
        return replace(self, created_at=parse_timestamp(self.created_at, "created_at", self.document_id))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VersionSnapshot":
        if not isinstance(data, dict):
            raise InvalidDocumentError(f"Version must be a mapping, got {type(data).__name__}")
        return cls(
            document_id=_pick(data, "document_id", "documentId"),
            version_number=_pick(data, "version_number", "versionNumber"),
            content=_pick(data, "content"),
            embedding=_pick(data, "embedding"),
            summary=_pick(data, "summary", "changeSummary"),
            author=_pick(data, "author", "createdBy"),
            created_at=_pick(data, "created_at", "createdAt"),
        )


@dataclass(frozen=True)
class RelatedDocument:
    """A candidate document together with its similarity to the subject."""
    document: DocumentSnapshot
    similarity: float

    @property
    def id(self) -> str:
        return self.document.id


@dataclass
class DecayReason:
    type: str
    description: str
    sources: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "description": self.description, "sources": list(self.sources)}


@dataclass
class ConfidenceBreakdown:
    """Itemized penalty ledger behind a confidence score. Audit only."""
    age_penalty: float
    contradiction_penalty: float
    drift_penalty: float
    support_penalty: float
    total_penalty: float
    final_confidence: float
    starting_confidence: float = 1.0

    def to_dict(self) -> Dict[str, float]:
        return {
            "starting_confidence": self.starting_confidence,
            "age_penalty": self.age_penalty,
            "contradiction_penalty": self.contradiction_penalty,
            "drift_penalty": self.drift_penalty,
            "support_penalty": self.support_penalty,
            "total_penalty": self.total_penalty,
            "final_confidence": self.final_confidence,
        }


@dataclass
class UpdateRecommendation:
    section: str
    suggested_text: str
    reason: str
    priority: str  # 'low', 'medium', 'high'

    def to_public_dict(self) -> Dict[str, str]:
        return {"section": self.section, "suggested_text": self.suggested_text}


@dataclass
class DecayVerdict:
    """Public verdict for one document."""
    decay_detected: bool
    confidence_score: float
    risk_level: str
    decay_reasons: List[DecayReason]
    what_changed_summary: str
    update_recommendations: List[UpdateRecommendation]
    citations: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "decay_detected": self.decay_detected,
            "confidence_score": self.confidence_score,
            "risk_level": self.risk_level,
            "decay_reasons": [r.to_dict() for r in self.decay_reasons],
            "what_changed_summary": self.what_changed_summary,
            "update_recommendations": [r.to_public_dict() for r in self.update_recommendations],
            "citations": list(self.citations),
        }

    @classmethod
    def error(cls, message: str) -> "DecayVerdict":
        """Synthetic verdict for a document whose analysis failed."""
        return cls(
            decay_detected=False,
            confidence_score=0.0,
            risk_level=RiskLevel.HIGH,
            decay_reasons=[DecayReason(ReasonType.ERROR, f"Analysis failed: {message}", [])],
            what_changed_summary="",
            update_recommendations=[],
            citations=[],
        )


@dataclass
class AuditBreakdown:
    """Internal analysis details for audit storage. Never forwarded externally."""
    confidence_breakdown: ConfidenceBreakdown
    freshness_status: str
    age_days: int
    contradictions: List[Dict[str, Any]]
    drift_score: float
    has_significant_drift: bool
    drift_changes: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["confidence_breakdown"] = self.confidence_breakdown.to_dict()
        return data


@dataclass
class AnalysisResult:
    document_id: str
    verdict: DecayVerdict
    audit: AuditBreakdown
    title: Optional[str] = None


@dataclass
class BatchItemResult:
    """One entry of a batch run: either a full analysis or an error record."""
    document_id: Optional[str]
    verdict: DecayVerdict
    title: Optional[str] = None
    audit: Optional[AuditBreakdown] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, result: AnalysisResult) -> "BatchItemResult":
        return cls(document_id=result.document_id, verdict=result.verdict, title=result.title, audit=result.audit)

    @classmethod
    def failure(cls, document_id: Optional[str], message: str, title: str = None) -> "BatchItemResult":
        return cls(document_id=document_id, verdict=DecayVerdict.error(message), title=title, error=message)


def coerce_document(document) -> DocumentSnapshot:
    if isinstance(document, DocumentSnapshot):
        return document
    return DocumentSnapshot.from_dict(document)


def coerce_versions(versions: Optional[Sequence]) -> Tuple[VersionSnapshot, ...]:
    """Version snapshots from mappings or snapshots, validated. Raises InvalidDocumentError."""
    if not versions:
        return ()
    return tuple(
        (v if isinstance(v, VersionSnapshot) else VersionSnapshot.from_dict(v)).validate() for v in versions
    )
