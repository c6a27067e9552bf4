"""
Exceptions raised by the decay pipeline.
"""


class DecayAnalysisError(Exception):
    """Base class for decay analysis failures."""


class InvalidDocumentError(DecayAnalysisError, ValueError):
    """A document or version snapshot is missing required fields or has invalid values."""

    def __init__(self, message: str, document_id: str = None):
        super().__init__(message)
        self.document_id = document_id


class InvalidReviewTransition(DecayAnalysisError, ValueError):
    """A review status change is not allowed from the record's current status."""
