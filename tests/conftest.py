"""
Shared fixtures for decay analysis tests.
"""

import pytest
from datetime import datetime, timedelta, timezone

from knowledge_decay.core.config import DecayConfig
from knowledge_decay.core.decay_engine import DecayEngine
from knowledge_decay.core.models import DocumentSnapshot, VersionSnapshot
from knowledge_decay.vector.embeddings import LexicalEmbedding

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def days_ago(days: int) -> datetime:
    return NOW - timedelta(days=days)


@pytest.fixture
def now():
    """Fixed reference time so ages are deterministic."""
    return NOW


@pytest.fixture
def config():
    return DecayConfig()


@pytest.fixture
def engine(config):
    """Engine on default settings with local lexical vectors only."""
    return DecayEngine(config=config, embedding_provider=LexicalEmbedding())


@pytest.fixture
def make_document():
    """Factory for document snapshots with sensible defaults."""
    def _make(doc_id="doc-1", content="Deployments must complete within 5 minutes.", doc_type="SOP",
              updated_at=None, workspace_id="ws-1", **kwargs):
        return DocumentSnapshot(
            id=doc_id,
            workspace_id=workspace_id,
            type=doc_type,
            content=content,
            updated_at=updated_at if updated_at is not None else days_ago(10),
            **kwargs,
        )
    return _make


@pytest.fixture
def make_version():
    """Factory for version snapshots."""
    def _make(version_number, content, document_id="doc-1", **kwargs):
        return VersionSnapshot(document_id=document_id, version_number=version_number, content=content, **kwargs)
    return _make
