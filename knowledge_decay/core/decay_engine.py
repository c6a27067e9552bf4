"""
Decay orchestration - one verdict per document from freshness, contradiction and drift signals.

The DecayEngine:

1. Ensures the subject document has a vector (embedding provider, lexical fallback)
2. Discovers related documents from a candidate pool when none are supplied
3. Runs the freshness, contradiction and drift detectors
4. Scores confidence and classifies risk
5. Collects decay reasons in a fixed order and recommends updates when flagged
6. Returns the public verdict plus an audit breakdown that stays internal
"""

import asyncio
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence

from util.logging import logger
from .config import DecayConfig, get_embedding_provider, load_config
from .confidence import calculate_confidence, determine_risk_level, should_flag_decay
from .contradictions import detect_contradictions
from .drift import analyze_version_drift
from .errors import InvalidDocumentError
from .freshness import evaluate_freshness
from .models import (
    AnalysisResult,
    AuditBreakdown,
    BatchItemResult,
    DecayReason,
    DecayVerdict,
    DocumentSnapshot,
    ReasonType,
    RelatedDocument,
    coerce_document,
    coerce_versions,
    parse_timestamp,
)
from .recommendations import generate_update_recommendations
from .related import find_related_documents
from ..api.schemas import DecayVerdictResponse
from ..vector.embeddings import IEmbeddingProvider, acquire_vector

NO_DECAY_SUMMARY = "No decay signals detected."


def _dedupe(ids) -> List[str]:
    seen = []
    for item in ids:
        if item and item not in seen:
            seen.append(item)
    return seen


def _usable_candidates(pool: Sequence) -> List[DocumentSnapshot]:
    """Validated candidate documents; malformed candidates are skipped, not fatal."""
    usable = []
    for candidate in pool or ():
        try:
            usable.append(coerce_document(candidate).validate())
        except InvalidDocumentError as e:
            logger.warning(f"Skipping malformed candidate document: {e}")
    return usable


def _normalize_related(related_docs: Sequence) -> List[RelatedDocument]:
    normalized = []
    for related in related_docs:
        if isinstance(related, RelatedDocument):
            normalized.append(RelatedDocument(related.document.validate(), related.similarity))
        else:
            normalized.append(RelatedDocument(coerce_document(related).validate(), 0.0))
    return normalized


class DecayEngine:
    """
    Orchestrates decay detection for single documents and batches.

    Configuration is read-only and shared; every analysis is independent, so
    a batch can run documents concurrently.
    """

    def __init__(self, config: DecayConfig = None, embedding_provider: IEmbeddingProvider = None):
        self.config = config or load_config()
        self.embedding_provider = embedding_provider or get_embedding_provider(self.config)

    async def analyze_document(
        self,
        document,
        versions: Sequence = (),
        related_docs: Optional[Sequence] = None,
        candidate_pool: Optional[Sequence] = None,
        now: datetime = None,
    ) -> AnalysisResult:
        """
        Analyze a document for decay.

        Args:
            document: DocumentSnapshot (or mapping) to analyze
            versions: Prior versions, newest first
            related_docs: Related documents for contradiction checks and support count
            candidate_pool: Workspace documents used to discover related documents
                when related_docs is empty
            now: Reference time for age calculations, defaults to current UTC time

        Returns:
            AnalysisResult with the public verdict and internal audit breakdown

        Raises:
            InvalidDocumentError: if the document or one of its versions is malformed
        """
        config = self.config
        now = parse_timestamp(now) if now is not None else datetime.now(timezone.utc)

        document = coerce_document(document).validate()
        versions = coerce_versions(versions)

        # 1. Ensure the subject has a vector
        if document.embedding is None:
            vector = await acquire_vector(
                self.embedding_provider, document.content, config.embedding_timeout_sec, document.id
            )
            document = document.with_embedding(vector)

        # 2. Auto-discover related documents
        related = _normalize_related(related_docs or ())
        if not related and candidate_pool:
            related = find_related_documents(
                document, _usable_candidates(candidate_pool), config.related_similarity_threshold
            )

        # 3. Independent detectors
        freshness = evaluate_freshness(document, config, now)
        contradiction = detect_contradictions(document, related, config)
        drift = analyze_version_drift(document, versions, config)

        # 4. Confidence and risk
        confidence, breakdown = calculate_confidence(
            age_penalty=freshness.penalty,
            contradiction_penalty=contradiction.penalty,
            drift_penalty=drift.penalty,
            supporting_docs_count=len(related),
            config=config,
        )
        risk_level = determine_risk_level(
            confidence,
            has_contradictions=contradiction.has_contradictions,
            has_significant_drift=drift.has_significant_drift,
            freshness_status=freshness.status,
            config=config,
        )

        # 5. Decay reasons: time, contradictions, drift, low support
        decay_reasons: List[DecayReason] = []
        if freshness.decay_reason:
            decay_reasons.append(freshness.decay_reason)
        decay_reasons.extend(contradiction.decay_reasons)
        if drift.decay_reason:
            decay_reasons.append(drift.decay_reason)
        if breakdown.support_penalty > 0 and (not related or config.emit_partial_support_reason):
            decay_reasons.append(self._low_support_reason(len(related)))

        # 6. Recommendations
        decay_detected = should_flag_decay(confidence, risk_level)
        if decay_detected:
            recommendation_set = generate_update_recommendations(document, decay_reasons, related)
            recommendations = recommendation_set.recommendations
            summary = recommendation_set.what_changed_summary
        else:
            recommendations = []
            summary = NO_DECAY_SUMMARY

        # 7. Citations
        citations = _dedupe(
            [source for reason in decay_reasons for source in reason.sources]
            + [r.id for r in related]
        )

        verdict = DecayVerdict(
            decay_detected=decay_detected,
            confidence_score=confidence,
            risk_level=risk_level,
            decay_reasons=decay_reasons,
            what_changed_summary=summary,
            update_recommendations=recommendations,
            citations=citations,
        )
        audit = AuditBreakdown(
            confidence_breakdown=breakdown,
            freshness_status=freshness.status,
            age_days=freshness.age_days,
            contradictions=[c.to_dict() for c in contradiction.contradictions],
            drift_score=drift.drift_score,
            has_significant_drift=drift.has_significant_drift,
            drift_changes=[c.to_dict() for c in drift.changes],
        )

        for reason in decay_reasons:
            logger.log_decay_reason(document.id, reason.type, reason.sources)
        logger.log_analysis(document.id, confidence, risk_level, decay_detected, {
            "reasons": len(decay_reasons),
            "related_documents": len(related),
        })

        return AnalysisResult(document_id=document.id, verdict=verdict, audit=audit, title=document.title)

    async def batch_analyze(
        self,
        documents: Sequence,
        candidate_pool: Optional[Sequence] = None,
        versions_by_document: Optional[Mapping[str, Sequence]] = None,
        now: datetime = None,
    ) -> List[BatchItemResult]:
        """
        Analyze many documents concurrently.

        Versions come from versions_by_document, or from a mapping's own
        "versions" entry when the document has none there. A failing document
        yields an error record instead of aborting the batch. Results come
        back in input order.
        """
        versions_by_document = versions_by_document or {}
        semaphore = asyncio.Semaphore(self.config.batch_concurrency)
        started = time.time()

        async def run_one(document) -> BatchItemResult:
            document_id, title = self._identify(document)
            versions = versions_by_document.get(document_id)
            if versions is None and isinstance(document, Mapping):
                versions = document.get("versions")
            async with semaphore:
                try:
                    result = await self.analyze_document(
                        document,
                        versions=versions or (),
                        candidate_pool=candidate_pool,
                        now=now,
                    )
                except Exception as e:
                    logger.log_batch_item(document_id, "failed", str(e))
                    return BatchItemResult.failure(document_id, str(e), title)

            logger.log_batch_item(document_id)
            return BatchItemResult.success(result)

        results = await asyncio.gather(*(run_one(document) for document in documents))

        failed = sum(1 for r in results if not r.ok)
        logger.log_batch_summary(len(results), failed, (time.time() - started) * 1000)
        return list(results)

    @staticmethod
    def _identify(document):
        if isinstance(document, DocumentSnapshot):
            return document.id, document.title
        if isinstance(document, Mapping):
            return document.get("id"), document.get("title")
        return None, None

    @staticmethod
    def _low_support_reason(related_count: int) -> DecayReason:
        if related_count == 0:
            description = "No supporting documents found for cross-validation"
        else:
            description = f"Only {related_count} supporting document(s) found for cross-validation"
        return DecayReason(type=ReasonType.LOW_SUPPORT, description=description, sources=[])


def analyze(
    document,
    versions: Sequence = (),
    related_docs: Optional[Sequence] = None,
    candidate_pool: Optional[Sequence] = None,
    now: datetime = None,
    engine: DecayEngine = None,
) -> AnalysisResult:
    """Analyze one document synchronously."""
    engine = engine or DecayEngine()
    return asyncio.run(engine.analyze_document(document, versions, related_docs, candidate_pool, now))


def batch_analyze(
    documents: Sequence,
    candidate_pool: Optional[Sequence] = None,
    versions_by_document: Optional[Mapping[str, Sequence]] = None,
    now: datetime = None,
    engine: DecayEngine = None,
) -> List[BatchItemResult]:
    """Analyze a batch synchronously; never raises for individual document failures."""
    engine = engine or DecayEngine()
    return asyncio.run(engine.batch_analyze(documents, candidate_pool, versions_by_document, now))


def to_public_payload(result) -> Dict[str, Any]:
    """
    Serialize a result for external interfaces.

    Only the public verdict fields are emitted; the audit breakdown is never
    included. Batch error records carry document id and error message.
    """
    payload = DecayVerdictResponse.model_validate(result.verdict.to_dict()).model_dump()
    if isinstance(result, BatchItemResult):
        record = {"document_id": result.document_id, "title": result.title, **payload}
        if result.error:
            record["error"] = result.error
        return record
    return payload


def build_audit_record(result, analyzed_at: datetime = None, analyzed_by: str = "system") -> Dict[str, Any]:
    """Fields persisted by the storage collaborator for one analysis."""
    analyzed_at = parse_timestamp(analyzed_at) if analyzed_at is not None else datetime.now(timezone.utc)
    verdict = result.verdict
    audit = result.audit

    return {
        "documentId": result.document_id,
        "decayDetected": verdict.decay_detected,
        "confidenceScore": verdict.confidence_score,
        "riskLevel": verdict.risk_level,
        "decayReasons": [r.to_dict() for r in verdict.decay_reasons],
        "whatChangedSummary": verdict.what_changed_summary,
        "updateRecommendations": [r.to_public_dict() for r in verdict.update_recommendations],
        "citations": list(verdict.citations),
        "confidenceBreakdown": audit.confidence_breakdown.to_dict() if audit else None,
        "analyzedAt": analyzed_at.isoformat(),
        "analyzedBy": analyzed_by,
        "reviewStatus": "pending",
    }
