"""
Structured audit logging for decay analysis.
Every verdict, fallback and review decision is logged as an operation record.
"""

import logging
from typing import Any, Dict, List

class StructuredLogger:
    """Structured logger for decay analysis, embedding fallbacks and review decisions."""

    def __init__(self, name: str = "knowledge_decay"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.INFO)

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None, level: int = logging.INFO):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {details}"

        self.logger.log(level, message)

    def log_analysis(self, document_id: str, confidence: float, risk_level: str, decay_detected: bool, details: Dict[str, Any] = None):
        """Log a completed document analysis."""
        log_details = {
            "document_id": document_id,
            "confidence_score": confidence,
            "risk_level": risk_level,
            "decay_detected": decay_detected
        }
        if details:
            log_details.update(details)

        self.log_operation("decay.analyze", "success", log_details)

    def log_decay_reason(self, document_id: str, reason_type: str, sources: List[str] = None):
        """Log a single decay reason found for a document."""
        log_details = {
            "document_id": document_id,
            "reason_type": reason_type,
            "sources": list(sources or [])
        }
        self.log_operation("decay.reason", "detected", log_details, level=logging.DEBUG)

    def log_embedding_fallback(self, provider: str, error: str, document_id: str = None):
        """Log an embedding provider failure that was downgraded to lexical vectors."""
        log_details = {
            "provider": provider,
            "fallback": "lexical",
            "error": error[:100] if error else ""
        }
        if document_id:
            log_details["document_id"] = document_id

        self.log_operation("embedding.fallback", "degraded", log_details, level=logging.WARNING)

    def log_batch_item(self, document_id: str, status: str = "success", error: str = None):
        """Log the outcome of one document in a batch run."""
        log_details = {"document_id": document_id}
        if error is not None:
            log_details["error"] = error[:100]

        level = logging.ERROR if status == "failed" else logging.INFO
        self.log_operation("decay.batch_item", status, log_details, level=level)

    def log_batch_summary(self, total: int, failed: int, duration_ms: float):
        """Log a finished batch run."""
        log_details = {
            "total": total,
            "failed": failed,
            "succeeded": total - failed,
            "duration_ms": round(duration_ms, 2)
        }
        self.log_operation("decay.batch", "complete", log_details)

    def log_review_decision(self, record_id: str, previous_status: str, new_status: str, reviewer: str, notes: str = ""):
        """Log a human review decision on an analysis record."""
        log_details = {
            "record_id": record_id,
            "previous_status": previous_status,
            "new_status": new_status,
            "reviewer": reviewer,
            "notes": notes[:100] if notes else ""  # Limit notes length
        }
        self.log_operation("review.decision", new_status, log_details)

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)

# Global logger instance
logger = StructuredLogger()

SENSITIVE_FIELDS = ['content', 'embedding', 'suggested_text', 'secret', 'password']

# General audit event function
def audit_event(event_type: str, identifiers: Dict[str, Any], payload: Dict[str, Any] = None, sensitive_fields: List[str] = None):
    """General audit event logging with content redaction."""
    if sensitive_fields is None:
        sensitive_fields = SENSITIVE_FIELDS

    log_details = identifiers.copy() if identifiers else {}

    if payload:
        sanitized_payload = {}
        for k, v in payload.items():
            if k not in sensitive_fields:
                # Truncate long values
                if isinstance(v, str) and len(v) > 100:
                    sanitized_payload[k] = v[:97] + "..."
                else:
                    sanitized_payload[k] = v
            else:
                sanitized_payload[k] = "[REDACTED]"
        log_details["payload"] = sanitized_payload

    # Determine operation type from event_type
    if event_type.startswith("review"):
        operation = "review"
    elif event_type.startswith("decay"):
        operation = "decay"
    elif event_type.startswith("embedding"):
        operation = "embedding"
    else:
        operation = event_type.replace(".", "_")

    logger.log_operation(operation, "audit", log_details)

def sanitize_payload(payload: Any, reveal_sensitive: bool = False, sensitive_fields: List[str] = None) -> Any:
    """Sanitize payloads for audit logging."""
    if sensitive_fields is None:
        sensitive_fields = SENSITIVE_FIELDS

    if isinstance(payload, dict):
        sanitized = {}
        for k, v in payload.items():
            if reveal_sensitive or k not in sensitive_fields:
                sanitized[k] = sanitize_payload(v, reveal_sensitive, sensitive_fields)
            else:
                sanitized[k] = "[REDACTED]"
        return sanitized
    elif isinstance(payload, str):
        # Truncate long strings
        return payload[:100] + "..." if len(payload) > 100 else payload
    elif isinstance(payload, list):
        return [sanitize_payload(item, reveal_sensitive, sensitive_fields) for item in payload]
    else:
        return payload
