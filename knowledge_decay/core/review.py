"""
Human review workflow for analysis records.
pending -> reviewed | dismissed | actioned; decided records stay decided.
"""

import uuid
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from util.logging import logger, audit_event
from ..api.schemas import ReviewDecisionRequest
from .errors import InvalidReviewTransition

PENDING = "pending"
REVIEWED = "reviewed"
DISMISSED = "dismissed"
ACTIONED = "actioned"

REVIEW_TRANSITIONS = {
    PENDING: (REVIEWED, DISMISSED, ACTIONED),
    REVIEWED: (),
    DISMISSED: (),
    ACTIONED: (),
}


@dataclass
class ReviewRecord:
    id: str
    document_id: Optional[str]
    audit_record: Dict[str, Any]
    status: str = PENDING
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None
    review_notes: Optional[str] = None

    def to_dict(self) -> Dict:
        """Convert to dictionary for storage."""
        data = asdict(self)
        data['created_at'] = self.created_at.isoformat()
        data['reviewed_at'] = self.reviewed_at.isoformat() if self.reviewed_at else None
        return data


class ReviewWorkflow:
    """Tracks review status of analysis records in memory.

    Persistence belongs to the caller; this keeps the transition rules and
    the audit trail in one place.
    """

    def __init__(self):
        self._records: Dict[str, ReviewRecord] = {}

    def submit(self, audit_record: Dict[str, Any]) -> ReviewRecord:
        """Register an analysis record for review. Records start pending."""
        record = ReviewRecord(
            id=str(uuid.uuid4()),
            document_id=audit_record.get("documentId"),
            audit_record=dict(audit_record, reviewStatus=PENDING),
        )
        self._records[record.id] = record

        logger.info(f"Queued analysis of document {record.document_id} for review as {record.id}")
        audit_event("review.submitted", {"record_id": record.id, "document_id": record.document_id}, {
            "risk_level": audit_record.get("riskLevel"),
            "decay_detected": audit_record.get("decayDetected"),
        })
        return record

    def get(self, record_id: str) -> Optional[ReviewRecord]:
        return self._records.get(record_id)

    def decide(self, record_id: str, status: str, reviewer: str, notes: str = "") -> ReviewRecord:
        """Move a record out of pending.

        Raises KeyError for an unknown record, InvalidReviewTransition when the
        record cannot move to status, and pydantic ValidationError for a blank
        reviewer.
        """
        record = self._records.get(record_id)
        if record is None:
            raise KeyError(f"Unknown review record: {record_id}")

        if status not in REVIEW_TRANSITIONS.get(record.status, ()):
            raise InvalidReviewTransition(f"Cannot move review record {record_id} from {record.status} to {status}")

        decision = ReviewDecisionRequest(status=status, reviewer=reviewer, notes=notes)

        previous = record.status
        record.status = decision.status
        record.reviewed_by = decision.reviewer
        record.review_notes = decision.notes
        record.reviewed_at = datetime.now(timezone.utc)
        record.audit_record["reviewStatus"] = decision.status

        logger.log_review_decision(record_id, previous, decision.status, decision.reviewer, decision.notes)
        return record

    def list_pending(self) -> List[ReviewRecord]:
        return [r for r in self._records.values() if r.status == PENDING]

    def list_by_risk(self, risk_level: str) -> List[ReviewRecord]:
        return [r for r in self._records.values() if r.audit_record.get("riskLevel") == risk_level]
