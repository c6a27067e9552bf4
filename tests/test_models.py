"""
Snapshot and verdict record tests.
"""

import pytest
from datetime import datetime, timedelta, timezone

from knowledge_decay.core.errors import DecayAnalysisError, InvalidDocumentError
from knowledge_decay.core.models import (
    DecayVerdict, DocumentSnapshot, VersionSnapshot, coerce_versions, parse_timestamp
)
from knowledge_decay.vector.types import DenseVector, SparseVector


class TestParseTimestamp:

    def test_zulu_suffix(self):
        assert parse_timestamp("2024-06-01T00:00:00Z") == datetime(2024, 6, 1, tzinfo=timezone.utc)

    def test_naive_is_utc(self):
        assert parse_timestamp(datetime(2024, 6, 1)).tzinfo == timezone.utc

    def test_offset_converted_to_utc(self):
        value = datetime(2024, 6, 1, 2, 0, tzinfo=timezone(timedelta(hours=2)))
        assert parse_timestamp(value) == datetime(2024, 6, 1, 0, 0, tzinfo=timezone.utc)

    def test_none_passes_through(self):
        assert parse_timestamp(None) is None

    @pytest.mark.parametrize("value", ["not a date", 12345])
    def test_invalid_values(self, value):
        with pytest.raises(InvalidDocumentError) as exc_info:
            parse_timestamp(value, "updated_at", "doc-1")
        assert exc_info.value.document_id == "doc-1"


class TestDocumentSnapshot:

    def test_from_dict_camel_case(self):
        document = DocumentSnapshot.from_dict({
            "id": "doc-1", "workspaceId": "ws-1", "type": "Policy", "content": "text",
            "updatedAt": "2024-06-01T00:00:00Z", "currentVersion": 3, "lastVerifiedAt": "2024-06-10T00:00:00Z",
        })

        assert document.workspace_id == "ws-1"
        assert document.current_version == 3
        assert document.last_verified_at == "2024-06-10T00:00:00Z"

    def test_from_dict_defaults_to_notes(self):
        assert DocumentSnapshot.from_dict({"id": "doc-1"}).type == "Notes"

    def test_validate_normalizes_timestamps(self, make_document):
        document = make_document(updated_at="2024-06-01T00:00:00Z").validate()
        assert document.updated_at == datetime(2024, 6, 1, tzinfo=timezone.utc)

    @pytest.mark.parametrize("overrides", [
        {"content": None},
        {"content": 42},
        {"current_version": 0},
        {"doc_id": None},
    ])
    def test_validate_rejects_malformed(self, make_document, overrides):
        with pytest.raises(InvalidDocumentError):
            make_document(**overrides).validate()

    def test_errors_are_value_errors(self):
        assert issubclass(InvalidDocumentError, ValueError)
        assert issubclass(InvalidDocumentError, DecayAnalysisError)

    def test_non_mapping_rejected(self):
        with pytest.raises(InvalidDocumentError):
            DocumentSnapshot.from_dict(["not", "a", "document"])

    def test_vector_from_stored_embedding(self, make_document):
        assert isinstance(make_document(embedding={"deploy": 1.0}).vector, SparseVector)
        assert isinstance(make_document(embedding=[0.1, 0.2]).vector, DenseVector)
        assert make_document().vector is None

    def test_display_title(self, make_document):
        assert make_document(title="Deploy SOP").display_title == "Deploy SOP"
        assert make_document(doc_id="doc-7").display_title == "doc-7"


class TestVersions:

    def test_coerce_versions_from_dicts(self):
        versions = coerce_versions([{"documentId": "doc-1", "versionNumber": 2, "content": "x", "changeSummary": "s"}])

        assert versions == (VersionSnapshot(document_id="doc-1", version_number=2, content="x", summary="s"),)

    def test_empty_versions(self):
        assert coerce_versions(None) == ()


class TestDecayVerdict:

    def test_error_verdict(self):
        verdict = DecayVerdict.error("boom")

        assert verdict.decay_detected is False
        assert verdict.confidence_score == 0.0
        assert verdict.risk_level == "high"
        assert verdict.decay_reasons[0].to_dict() == {
            "type": "error", "description": "Analysis failed: boom", "sources": [],
        }
        assert verdict.citations == []


class TestVersionValidation:
    """Malformed versions fail fast instead of reading as drift."""

    @pytest.mark.parametrize("data", [
        {"documentId": "doc-1", "versionNumber": None, "content": None},
        {"documentId": "doc-1", "versionNumber": 1, "content": None},
        {"documentId": "doc-1", "versionNumber": 0, "content": "text"},
        {"documentId": "doc-1", "versionNumber": True, "content": "text"},
        {"documentId": "doc-1", "versionNumber": 2, "content": "text", "createdAt": "last week"},
    ])
    def test_malformed_versions_rejected(self, data):
        with pytest.raises(InvalidDocumentError) as exc_info:
            coerce_versions([data])
        assert exc_info.value.document_id == "doc-1"

    def test_non_mapping_version_rejected(self):
        with pytest.raises(InvalidDocumentError):
            coerce_versions(["v1"])

    def test_validate_normalizes_created_at(self):
        version = VersionSnapshot(
            document_id="doc-1", version_number=1, content="text", created_at="2024-06-01T00:00:00Z"
        ).validate()
        assert version.created_at == datetime(2024, 6, 1, tzinfo=timezone.utc)
