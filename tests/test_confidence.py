"""
Confidence scoring tests - penalty caps, support penalty, risk rules.
"""

import pytest

from knowledge_decay.core.confidence import (
    calculate_confidence, calculate_support_penalty, determine_risk_level, should_flag_decay
)


class TestSupportPenalty:

    @pytest.mark.parametrize("count,expected", [(0, 0.1), (3, 0.0), (10, 0.0)])
    def test_support_penalty(self, config, count, expected):
        assert calculate_support_penalty(count, config) == expected

    def test_partial_support_is_linear(self, config):
        assert calculate_support_penalty(1, config) == pytest.approx(0.0667, abs=1e-4)
        assert calculate_support_penalty(2, config) == pytest.approx(0.0333, abs=1e-4)


class TestCalculateConfidence:

    def test_no_penalties(self, config):
        confidence, breakdown = calculate_confidence(0.0, 0.0, 0.0, 3, config)

        assert confidence == 1.0
        assert breakdown.total_penalty == 0.0
        assert breakdown.starting_confidence == 1.0

    def test_no_supporting_documents(self, config):
        confidence, breakdown = calculate_confidence(supporting_docs_count=0, config=config)

        assert confidence == 0.9
        assert breakdown.support_penalty == 0.1

    def test_breakdown_rounding(self, config):
        confidence, breakdown = calculate_confidence(0.133, 0.0, 0.0, 1, config)

        assert confidence == 0.8
        assert breakdown.age_penalty == 0.133
        assert breakdown.support_penalty == 0.067
        assert breakdown.final_confidence == confidence
        assert breakdown.total_penalty == 0.2

    def test_penalties_capped(self, config):
        confidence, breakdown = calculate_confidence(5.0, 5.0, 5.0, 0, config)

        assert confidence == 0.0
        assert breakdown.age_penalty == 0.3
        assert breakdown.contradiction_penalty == 0.4
        assert breakdown.drift_penalty == 0.2

    def test_negative_penalties_ignored(self, config):
        confidence, breakdown = calculate_confidence(-1.0, -1.0, -1.0, 3, config)

        assert confidence == 1.0
        assert breakdown.age_penalty == 0.0

    def test_confidence_is_monotonic_in_penalties(self, config):
        scores = [calculate_confidence(age, 0.1, 0.1, 1, config)[0] for age in (0.0, 0.05, 0.1, 0.2, 0.3, 0.5)]
        assert scores == sorted(scores, reverse=True)

    def test_breakdown_to_dict(self, config):
        _, breakdown = calculate_confidence(0.1, 0.15, 0.0, 3, config)

        data = breakdown.to_dict()

        assert data["final_confidence"] == 0.75
        assert set(data) == {
            "starting_confidence", "age_penalty", "contradiction_penalty", "drift_penalty",
            "support_penalty", "total_penalty", "final_confidence",
        }


class TestRiskLevel:
    """First matching rule wins."""

    def test_contradictions_are_high_risk(self, config):
        assert determine_risk_level(0.95, has_contradictions=True, config=config) == "high"

    def test_low_confidence_is_high_risk(self, config):
        assert determine_risk_level(0.35, config=config) == "high"

    def test_significant_drift_is_medium_risk(self, config):
        assert determine_risk_level(0.95, has_significant_drift=True, config=config) == "medium"

    def test_critical_freshness_is_medium_risk(self, config):
        assert determine_risk_level(0.95, freshness_status="critical", config=config) == "medium"

    def test_moderate_confidence_is_medium_risk(self, config):
        assert determine_risk_level(0.65, config=config) == "medium"

    def test_high_confidence_is_low_risk(self, config):
        assert determine_risk_level(0.9, freshness_status="warning", config=config) == "low"

    def test_boundaries(self, config):
        assert determine_risk_level(0.4, config=config) == "medium"
        assert determine_risk_level(0.7, config=config) == "low"


class TestShouldFlagDecay:

    def test_perfect_low_risk_not_flagged(self):
        assert not should_flag_decay(1.0, "low")

    def test_any_imperfection_flagged(self):
        assert should_flag_decay(0.99, "low")
        assert should_flag_decay(1.0, "medium")
