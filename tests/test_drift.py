"""
Version drift tests - drift scoring, severity bands and historical marking.
"""

import pytest

from knowledge_decay.core.drift import (
    MODERATE, SIGNIFICANT, analyze_version_drift, identify_changes, should_mark_as_historical, version_drift
)


class TestVersionDrift:

    def test_no_versions(self, make_document, config):
        result = analyze_version_drift(make_document(), [], config)

        assert not result.has_drift
        assert not result.has_significant_drift
        assert result.drift_score == 0.0
        assert result.penalty == 0.0
        assert result.decay_reason is None

    def test_identical_version(self, make_document, make_version, config):
        document = make_document(current_version=2)
        result = analyze_version_drift(document, [make_version(1, document.content)], config)

        assert result.drift_score == 0.0
        assert result.changes == []

    def test_moderate_drift(self, make_document, make_version, config):
        document = make_document(content="alpha beta gamma delta", current_version=2)
        result = analyze_version_drift(document, [make_version(1, "alpha beta gamma epsilon")], config)

        assert result.has_drift
        assert not result.has_significant_drift
        assert result.drift_score == 0.25
        assert result.penalty == 0.1
        assert result.changes[0].severity == MODERATE
        assert result.decay_reason is None

    def test_significant_drift(self, make_document, make_version, config):
        document = make_document(content="Rollbacks are handled by the platform team.", current_version=4)
        versions = [make_version(3, "Lunch menu changes every Friday.")]

        result = analyze_version_drift(document, versions, config)

        assert result.has_significant_drift
        assert result.drift_score == 1.0
        assert result.penalty == 0.2
        assert result.decay_reason.type == "version_drift"
        assert result.decay_reason.description == (
            "Significant semantic change detected from version 3 to 4 (drift score: 1.0)"
        )

    def test_only_most_recent_significant_change_reported(self, make_document, make_version, config):
        document = make_document(content="Rollbacks are handled by the platform team.", current_version=5)
        versions = [
            make_version(4, "Lunch menu changes every Friday."),
            make_version(3, "Parking permits renew annually."),
        ]

        result = analyze_version_drift(document, versions, config)

        assert len(result.changes) == 2
        assert all(c.severity == SIGNIFICANT for c in result.changes)
        assert "from version 4 to 5" in result.decay_reason.description

    def test_stored_embeddings_preferred(self, make_document, make_version, config):
        document = make_document(content="same text", embedding=[1.0, 0.0])
        version = make_version(1, "same text", embedding=[0.0, 1.0])

        assert version_drift(document, version) == 1.0

    def test_incompatible_embeddings_use_text(self, make_document, make_version):
        document = make_document(content="same text", embedding=[1.0, 0.0])
        version = make_version(1, "same text", embedding=[0.0, 1.0, 0.0])

        assert version_drift(document, version) == 0.0

    def test_change_summary_uses_version_summary(self, make_document, make_version, config):
        document = make_document(content="Rollbacks are handled by the platform team.", current_version=2)
        version = make_version(1, "Lunch menu changes every Friday.", summary="Rewrote ownership")

        result = analyze_version_drift(document, [version], config)

        assert result.changes[0].summary == "Rewrote ownership"
        assert result.changes[0].to_dict()["from_version"] == 1


class TestHistoricalVersions:

    def test_should_mark_as_historical(self, make_document, make_version, config):
        document = make_document(content="Rollbacks are handled by the platform team.")

        assert should_mark_as_historical(document, make_version(1, "Lunch menu changes every Friday."), config)
        assert not should_mark_as_historical(document, make_version(1, document.content), config)

    def test_identify_changes(self):
        old = "step one\nstep two\nstep three"
        new = "step one\nstep 2\nstep three\nstep four"

        changes = identify_changes(old, new)

        assert changes["lines_added"] == 2
        assert changes["lines_removed"] == 1
        assert changes["net_change"] == 1
        assert changes["sample_additions"] == ["step 2", "step four"]
        assert changes["sample_removals"] == ["step two"]
