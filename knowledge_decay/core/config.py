"""
Decay scoring configuration.
Environment is read once at import; detectors receive an immutable DecayConfig.
"""

import os
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import List, Mapping, Tuple

from dotenv import load_dotenv

load_dotenv()

# Penalty caps
WEIGHT_AGE_PENALTY = float(os.getenv("WEIGHT_AGE_PENALTY", "0.3"))
WEIGHT_CONTRADICTION_PENALTY = float(os.getenv("WEIGHT_CONTRADICTION_PENALTY", "0.4"))
WEIGHT_DRIFT_PENALTY = float(os.getenv("WEIGHT_DRIFT_PENALTY", "0.2"))
WEIGHT_SUPPORT_PENALTY = float(os.getenv("WEIGHT_SUPPORT_PENALTY", "0.1"))

# Related-document discovery
RELATED_SIMILARITY_THRESHOLD = float(os.getenv("RELATED_SIMILARITY_THRESHOLD", "0.3"))

# Embedding provider configuration
EMBEDDING_PROVIDER = os.getenv("EMBEDDING_PROVIDER", "lexical")  # lexical|hash|sentence_transformers
EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "all-mpnet-base-v2")
EMBEDDING_TIMEOUT_SEC = float(os.getenv("EMBEDDING_TIMEOUT_SEC", "10"))

# Batch processing
BATCH_CONCURRENCY = int(os.getenv("BATCH_CONCURRENCY", "4"))

# Emit a low_support reason for 1-2 related documents too, not only for zero
EMIT_PARTIAL_SUPPORT_REASON = os.getenv("EMIT_PARTIAL_SUPPORT_REASON", "false").lower() == "true"

# Version string
VERSION = "1.0.0"

# (warning_days, critical_days) per document type
DEFAULT_FRESHNESS_THRESHOLDS = {
    "SOP": (30, 90),
    "Policy": (60, 180),
    "Guide": (90, 365),
    "Spec": (45, 120),
    "Notes": (180, 365),
}

# Higher rank wins when two documents disagree
DEFAULT_AUTHORITY_RANK = {
    "SOP": 5,
    "Policy": 4,
    "Spec": 3,
    "Guide": 2,
    "Notes": 1,
}

LENIENT_DOCUMENT_TYPE = "Notes"


def _frozen(mapping):
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class DecayConfig:
    """Read-only scoring configuration shared by every detector."""

    max_age_penalty: float = 0.3
    max_contradiction_penalty: float = 0.4
    max_drift_penalty: float = 0.2
    max_support_penalty: float = 0.1

    # Freshness
    freshness_thresholds: Mapping[str, Tuple[int, int]] = field(
        default_factory=lambda: _frozen(DEFAULT_FRESHNESS_THRESHOLDS)
    )
    lenient_type: str = LENIENT_DOCUMENT_TYPE
    warning_age_penalty: float = 0.1

    # Contradictions
    authority_rank: Mapping[str, int] = field(
        default_factory=lambda: _frozen(DEFAULT_AUTHORITY_RANK)
    )
    negation_similarity_threshold: float = 0.3
    numeric_similarity_threshold: float = 0.4
    high_severity_threshold: float = 0.6
    high_severity_weight: float = 0.15
    medium_severity_weight: float = 0.08

    # Version drift
    moderate_drift_threshold: float = 0.25
    significant_drift_threshold: float = 0.4
    moderate_drift_penalty: float = 0.1
    significant_drift_penalty: float = 0.2

    # Confidence / risk
    full_support_count: int = 3
    high_risk_confidence: float = 0.4
    medium_risk_confidence: float = 0.7

    # Related documents
    related_similarity_threshold: float = 0.3

    # Embeddings and batching
    embedding_provider: str = "lexical"
    embedding_model: str = "all-mpnet-base-v2"
    embedding_timeout_sec: float = 10.0
    batch_concurrency: int = 4

    emit_partial_support_reason: bool = False

    def thresholds_for(self, doc_type: str) -> Tuple[int, int]:
        """Get (warning, critical) days for a document type, lenient for unknown types."""
        if doc_type in self.freshness_thresholds:
            return self.freshness_thresholds[doc_type]
        return self.freshness_thresholds[self.lenient_type]

    def rank_of(self, doc_type: str) -> int:
        return self.authority_rank.get(doc_type, 1)

    def with_overrides(self, **overrides) -> "DecayConfig":
        """Return a copy with some fields replaced."""
        return replace(self, **overrides)


def load_config() -> DecayConfig:
    """Build the configuration from environment settings."""
    return DecayConfig(
        max_age_penalty=WEIGHT_AGE_PENALTY,
        max_contradiction_penalty=WEIGHT_CONTRADICTION_PENALTY,
        max_drift_penalty=WEIGHT_DRIFT_PENALTY,
        max_support_penalty=WEIGHT_SUPPORT_PENALTY,
        related_similarity_threshold=RELATED_SIMILARITY_THRESHOLD,
        embedding_provider=EMBEDDING_PROVIDER,
        embedding_model=EMBEDDING_MODEL,
        embedding_timeout_sec=EMBEDDING_TIMEOUT_SEC,
        batch_concurrency=BATCH_CONCURRENCY,
        emit_partial_support_reason=EMIT_PARTIAL_SUPPORT_REASON,
    )


DEFAULT_CONFIG = DecayConfig()


def get_embedding_provider(config: DecayConfig = None):
    """Get configured embedding provider implementation."""
    config = config or DEFAULT_CONFIG
    provider = config.embedding_provider

    if provider == "lexical":
        from ..vector.embeddings import LexicalEmbedding
        return LexicalEmbedding()
    elif provider == "hash":
        from ..vector.embeddings import DeterministicHashEmbedding
        return DeterministicHashEmbedding()
    elif provider == "sentence_transformers":
        from ..vector.embeddings import SentenceTransformerEmbedding
        return SentenceTransformerEmbedding(config.embedding_model)
    else:
        # Unknown providers fall back to local lexical vectors
        from ..vector.embeddings import LexicalEmbedding
        return LexicalEmbedding()


def debug_enabled():
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "false").lower() == "true"


def validate_config(config: DecayConfig) -> List[str]:
    """Validate scoring configuration and return any issues."""
    issues = []

    for name in ("max_age_penalty", "max_contradiction_penalty", "max_drift_penalty", "max_support_penalty"):
        value = getattr(config, name)
        if not 0.0 <= value <= 1.0:
            issues.append(f"{name} must be within [0, 1], got {value}")

    if config.warning_age_penalty > config.max_age_penalty:
        issues.append("warning_age_penalty must not exceed max_age_penalty")

    if config.lenient_type not in config.freshness_thresholds:
        issues.append(f"Lenient type {config.lenient_type} has no freshness thresholds")

    for doc_type, (warning, critical) in config.freshness_thresholds.items():
        if warning < 0 or critical <= warning:
            issues.append(f"Invalid freshness thresholds for {doc_type}: ({warning}, {critical})")

    if config.moderate_drift_threshold > config.significant_drift_threshold:
        issues.append("moderate_drift_threshold must not exceed significant_drift_threshold")

    if not 0.0 <= config.related_similarity_threshold <= 1.0:
        issues.append("related_similarity_threshold must be within [0, 1]")

    if config.embedding_provider not in ["lexical", "hash", "sentence_transformers"]:
        issues.append(f"Invalid EMBEDDING_PROVIDER: {config.embedding_provider}")

    if config.embedding_timeout_sec <= 0:
        issues.append("EMBEDDING_TIMEOUT_SEC must be > 0")

    if config.batch_concurrency < 1:
        issues.append("BATCH_CONCURRENCY must be >= 1")

    return issues
