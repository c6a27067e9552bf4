"""
Contradiction detector tests - statement extraction, rule tables, authority and recency.
"""

import pytest

from knowledge_decay.core.contradictions import (
    Contradiction,
    NEGATION_RULES,
    calculate_contradiction_penalty,
    detect_contradictions,
    detect_statement_contradiction,
    extract_key_statements,
    is_more_authoritative,
    truncate,
)
from knowledge_decay.core.models import RelatedDocument

from conftest import days_ago


def _contradiction(severity):
    return Contradiction(
        statement="a", document_id="d1", conflicting_statement="b", conflicting_document_id="d2",
        conflicting_document_title="D2", severity=severity, score=0.9, reason="test",
    )


class TestKeyStatements:

    def test_filters_short_and_non_factual_sentences(self):
        text = (
            "Short one. This sentence has no indicators at all here. "
            "Version 2.5 of the tool is deployed weekly."
        )
        assert extract_key_statements(text) == ["Version 2.5 of the tool is deployed weekly"]

    def test_obligation_and_process_indicators(self):
        text = "Every engineer must sign the checklist. Follow the rollback procedure carefully."
        assert extract_key_statements(text) == [
            "Every engineer must sign the checklist",
            "Follow the rollback procedure carefully",
        ]

    def test_empty_text(self):
        assert extract_key_statements("") == []


class TestStatementContradiction:
    """Negation and numeric rules."""

    def test_numeric_conflict(self):
        result = detect_statement_contradiction(
            "Deployments must complete within 5 minutes",
            "Deployments must complete within 15 minutes",
        )
        assert result.is_contradiction
        assert result.score == 1.0
        assert result.rule == "numeric"
        assert result.reason == "Numerical conflict: 5 minutes vs 15 minutes"

    def test_same_quantity_with_unit_variants(self):
        result = detect_statement_contradiction(
            "Uptime target must be 99 percent for the API",
            "Uptime target must be 99% for the API",
        )
        assert not result.is_contradiction

    def test_percent_and_symbol_compare_as_same_unit(self):
        result = detect_statement_contradiction(
            "Uptime target must be 99 percent for the API",
            "Uptime target must be 95% for the API",
        )
        assert result.is_contradiction
        assert result.rule == "numeric"

    def test_numeric_values_compared_as_numbers(self):
        result = detect_statement_contradiction(
            "Backups are retained for 30 days at minimum",
            "Backups are retained for 30.0 days at minimum",
        )
        assert not result.is_contradiction

    def test_different_units_do_not_conflict(self):
        result = detect_statement_contradiction(
            "Escalate the incident after 2 hours of downtime",
            "Escalate the incident after 30 minutes of downtime",
        )
        assert not result.is_contradiction

    def test_negation_conflict(self):
        result = detect_statement_contradiction(
            "Approval from a manager is always required before deployment",
            "Approval from a manager is never required before deployment",
        )
        assert result.is_contradiction
        assert result.rule == "always"
        assert result.score == 0.833

    def test_same_polarity_is_not_a_conflict(self):
        result = detect_statement_contradiction(
            "Passwords must not be shared over email",
            "Passwords must not be shared over chat",
        )
        assert not result.is_contradiction

    def test_unrelated_topics_are_not_a_conflict(self):
        result = detect_statement_contradiction(
            "Backups must always run nightly",
            "Lunch is never served on Fridays",
        )
        assert not result.is_contradiction

    def test_rule_polarity(self):
        must = NEGATION_RULES[0]
        assert must.polarity("you must not skip") == "negative"
        assert must.polarity("you must run tests") == "positive"
        assert must.polarity("nothing to see") is None


class TestPenalty:

    def test_no_contradictions(self, config):
        assert calculate_contradiction_penalty([], config) == 0.0

    def test_weighted_by_severity(self, config):
        penalty = calculate_contradiction_penalty([_contradiction("high"), _contradiction("medium")], config)
        assert penalty == 0.23

    def test_capped(self, config):
        penalty = calculate_contradiction_penalty([_contradiction("high")] * 3, config)
        assert penalty == 0.4


class TestAuthority:

    def test_rank_order(self, make_document, config):
        sop = make_document(doc_type="SOP")
        notes = make_document(doc_type="Notes")
        unknown = make_document(doc_type="Memo")

        assert is_more_authoritative(sop, notes, config)
        assert not is_more_authoritative(notes, sop, config)
        assert not is_more_authoritative(unknown, notes, config)


class TestDetectContradictions:
    """Document-level detection against related documents."""

    def test_newer_document_conflict(self, make_document, config):
        subject = make_document(updated_at=days_ago(100))
        newer = make_document(
            doc_id="doc-2", title="Release Runbook", updated_at=days_ago(10),
            content="Deployments must complete within 15 minutes.",
        )

        result = detect_contradictions(subject, [RelatedDocument(newer, 0.9)], config)

        assert result.has_contradictions
        assert result.penalty == 0.15
        assert result.contradictions[0].severity == "high"
        reason = result.decay_reasons[0]
        assert reason.type == "contradiction"
        assert reason.sources == ["doc-2"]
        assert reason.description == (
            '"Deployments must complete within 5 minutes" conflicts with '
            '"Deployments must complete within 15 minutes" in "Release Runbook"'
        )

    def test_older_less_authoritative_document_skipped(self, make_document, config):
        subject = make_document(doc_type="SOP", updated_at=days_ago(10))
        older = make_document(
            doc_id="doc-2", doc_type="Notes", updated_at=days_ago(100),
            content="Deployments must complete within 15 minutes.",
        )

        result = detect_contradictions(subject, [older], config)

        assert not result.has_contradictions
        assert result.penalty == 0.0
        assert result.decay_reasons == []

    def test_older_more_authoritative_document_checked(self, make_document, config):
        subject = make_document(doc_type="Notes", updated_at=days_ago(10))
        older = make_document(
            doc_id="doc-2", doc_type="SOP", updated_at=days_ago(100),
            content="Deployments must complete within 15 minutes.",
        )

        result = detect_contradictions(subject, [older], config)

        assert result.has_contradictions
        assert result.decay_reasons[0].sources == ["doc-2"]

    def test_untitled_document_uses_id(self, make_document, config):
        subject = make_document(updated_at=days_ago(100))
        newer = make_document(doc_id="doc-9", content="Deployments must complete within 15 minutes.")

        result = detect_contradictions(subject, [newer], config)

        assert result.decay_reasons[0].description.endswith('in "doc-9"')

    def test_no_related_documents(self, make_document, config):
        result = detect_contradictions(make_document(), [], config)
        assert not result.has_contradictions

    def test_long_statements_truncated(self):
        assert truncate("x" * 80, 60) == "x" * 57 + "..."
        assert truncate("short", 60) == "short"
