"""
Public verdict and audit record schemas.
External interfaces serialize through these models; the audit breakdown has no public schema.
"""

from pydantic import BaseModel, ConfigDict, field_validator
from typing import List, Optional
from datetime import datetime

RISK_LEVELS = ['low', 'medium', 'high']
REASON_TYPES = ['time', 'contradiction', 'version_drift', 'low_support', 'error']
REVIEW_STATUSES = ['pending', 'reviewed', 'dismissed', 'actioned']


class DecayReasonModel(BaseModel):
    model_config = ConfigDict(extra='forbid')

    type: str
    description: str
    sources: List[str] = []

    @field_validator('type')
    @classmethod
    def type_must_be_valid(cls, v):
        if v not in REASON_TYPES:
            raise ValueError(f'type must be one of: {REASON_TYPES}')
        return v


class UpdateRecommendationModel(BaseModel):
    model_config = ConfigDict(extra='forbid')

    section: str
    suggested_text: str


class DecayVerdictResponse(BaseModel):
    """Public decay verdict. Unknown fields are rejected so audit data cannot leak through."""
    model_config = ConfigDict(extra='forbid')

    decay_detected: bool
    confidence_score: float
    risk_level: str
    decay_reasons: List[DecayReasonModel]
    what_changed_summary: str
    update_recommendations: List[UpdateRecommendationModel]
    citations: List[str]

    @field_validator('confidence_score')
    @classmethod
    def confidence_must_be_in_range(cls, v):
        if not 0.0 <= v <= 1.0:
            raise ValueError('confidence_score must be within [0, 1]')
        return v

    @field_validator('risk_level')
    @classmethod
    def risk_level_must_be_valid(cls, v):
        if v not in RISK_LEVELS:
            raise ValueError(f'risk_level must be one of: {RISK_LEVELS}')
        return v


class ConfidenceBreakdownModel(BaseModel):
    starting_confidence: float = 1.0
    age_penalty: float
    contradiction_penalty: float
    drift_penalty: float
    support_penalty: float
    total_penalty: float
    final_confidence: float

    @field_validator('age_penalty', 'contradiction_penalty', 'drift_penalty', 'support_penalty', 'total_penalty')
    @classmethod
    def penalty_must_not_be_negative(cls, v):
        if v < 0:
            raise ValueError('penalties cannot be negative')
        return v


class AnalysisRecordModel(BaseModel):
    """Audit record as persisted by the storage collaborator."""
    model_config = ConfigDict(populate_by_name=True)

    document_id: Optional[str] = None
    decay_detected: bool
    confidence_score: float
    risk_level: str
    decay_reasons: List[DecayReasonModel]
    what_changed_summary: str
    update_recommendations: List[UpdateRecommendationModel]
    citations: List[str]
    confidence_breakdown: Optional[ConfidenceBreakdownModel] = None
    analyzed_at: datetime
    analyzed_by: str = 'system'
    review_status: str = 'pending'
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None
    review_notes: Optional[str] = None

    @field_validator('review_status')
    @classmethod
    def review_status_must_be_valid(cls, v):
        if v not in REVIEW_STATUSES:
            raise ValueError(f'review_status must be one of: {REVIEW_STATUSES}')
        return v

    @classmethod
    def from_audit_record(cls, record: dict) -> 'AnalysisRecordModel':
        """Build from the camelCase record produced by build_audit_record."""
        return cls(
            document_id=record.get('documentId'),
            decay_detected=record['decayDetected'],
            confidence_score=record['confidenceScore'],
            risk_level=record['riskLevel'],
            decay_reasons=record['decayReasons'],
            what_changed_summary=record['whatChangedSummary'],
            update_recommendations=record['updateRecommendations'],
            citations=record['citations'],
            confidence_breakdown=record.get('confidenceBreakdown'),
            analyzed_at=record['analyzedAt'],
            analyzed_by=record.get('analyzedBy', 'system'),
            review_status=record.get('reviewStatus', 'pending'),
        )


class ReviewDecisionRequest(BaseModel):
    status: str
    reviewer: str
    notes: str = ""

    @field_validator('status')
    @classmethod
    def status_must_be_terminal(cls, v):
        valid = [s for s in REVIEW_STATUSES if s != 'pending']
        if v not in valid:
            raise ValueError(f'status must be one of: {valid}')
        return v

    @field_validator('reviewer')
    @classmethod
    def reviewer_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('reviewer cannot be empty')
        return v
