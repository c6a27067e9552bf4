"""
Embedding providers behind the embed(text) -> Vector contract.
Local lexical vectors are always available; remote models degrade to them on failure.
"""

from abc import ABC, abstractmethod
import asyncio
import hashlib
from typing import Any, Dict

import numpy as np

from util.logging import logger
from .text import lexical_vector
from .types import DenseVector, SparseVector, Vector


class IEmbeddingProvider(ABC):
    """Abstract interface for embedding providers."""

    name = "abstract"

    @abstractmethod
    def embed_text(self, text: str) -> Vector:
        """Generate embedding vector for given text."""
        pass


class LexicalEmbedding(IEmbeddingProvider):
    """Sparse term-frequency vectors computed locally. Never fails."""

    name = "lexical"

    def embed_text(self, text: str) -> SparseVector:
        return lexical_vector(text)


class DeterministicHashEmbedding(IEmbeddingProvider):
    """Deterministic hash-based embedding provider for testing purposes.

    Each token is hashed into one of ``dimension`` buckets, so texts sharing
    vocabulary end up with overlapping dense vectors without requiring
    external model dependencies.
    """

    name = "hash"

    def __init__(self, dimension: int = 384):
        self.dimension = dimension

    def embed_text(self, text: str) -> DenseVector:
        """Generate deterministic embedding vector using hash function."""
        vector = np.zeros(self.dimension, dtype=float)
        for term, weight in lexical_vector(text).terms.items():
            digest = hashlib.md5(term.encode()).hexdigest()
            bucket = int(digest[:8], 16) % self.dimension
            # Sign bit from the next chunk keeps unrelated terms from always adding up
            sign = 1.0 if int(digest[8:16], 16) % 2 == 0 else -1.0
            vector[bucket] += sign * weight
        return DenseVector(vector)

    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        return self.dimension


class SentenceTransformerEmbedding(IEmbeddingProvider):
    """Sentence transformers embedding provider using pre-trained models.

    Uses the all-mpnet-base-v2 model for high-quality semantic embeddings.
    """

    name = "sentence_transformers"

    def __init__(self, model_name: str = "all-mpnet-base-v2"):
        self.model_name = model_name
        self._model = None
        self._dimension = None

    @property
    def model(self):
        if self._model is None:
            from sentence_transformers import SentenceTransformer
            self._model = SentenceTransformer(self.model_name)
        return self._model

    def embed_text(self, text: str) -> DenseVector:
        """Generate embedding vector using sentence transformers."""
        embedding = self.model.encode(text, convert_to_tensor=False)
        return DenseVector(np.asarray(embedding, dtype=float))

    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        if self._dimension is None:
            # Get dimension by encoding a dummy string
            dummy_embedding = self.model.encode("test", convert_to_tensor=False)
            self._dimension = len(dummy_embedding)
        return self._dimension


_FALLBACK = LexicalEmbedding()


async def acquire_vector(provider: IEmbeddingProvider, text: str, timeout: float = 10.0, document_id: str = None) -> Vector:
    """
    Obtain a vector for text from the provider without blocking the event loop.

    Any provider error or timeout is downgraded to a local lexical vector;
    this never raises for provider failures.
    """
    if provider is None or isinstance(provider, LexicalEmbedding):
        return _FALLBACK.embed_text(text)

    try:
        return await asyncio.wait_for(asyncio.to_thread(provider.embed_text, text), timeout)
    except asyncio.TimeoutError:
        logger.log_embedding_fallback(provider.name, f"timed out after {timeout}s", document_id)
    except Exception as e:
        logger.log_embedding_fallback(provider.name, str(e), document_id)

    return _FALLBACK.embed_text(text)


def check_embedding_health(provider: IEmbeddingProvider) -> Dict[str, Any]:
    """Check if the embedding provider is configured and working."""
    try:
        vector = provider.embed_text("health check test")
        return {
            "provider": provider.name,
            "status": "healthy",
            "embedding_type": vector.kind,
            "dimension": len(vector),
        }
    except Exception as e:
        return {
            "provider": provider.name,
            "status": "error",
            "error": str(e),
        }
