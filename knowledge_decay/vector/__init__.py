"""
Similarity engine - text to vector, vector to similarity.
"""

# Package initialization for vector module
from .types import SparseVector, DenseVector, Vector, as_vector, cosine_similarity, semantic_difference
from .text import lexical_vector, tokenize, split_sentences
from .embeddings import (
    IEmbeddingProvider,
    LexicalEmbedding,
    DeterministicHashEmbedding,
    SentenceTransformerEmbedding,
    acquire_vector,
    check_embedding_health
)

__all__ = [
    'SparseVector',
    'DenseVector',
    'Vector',
    'as_vector',
    'cosine_similarity',
    'semantic_difference',
    'lexical_vector',
    'tokenize',
    'split_sentences',
    'IEmbeddingProvider',
    'LexicalEmbedding',
    'DeterministicHashEmbedding',
    'SentenceTransformerEmbedding',
    'acquire_vector',
    'check_embedding_health'
]
