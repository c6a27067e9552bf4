"""
Related-document discovery - nearest neighbours of a document within its workspace.
"""

from typing import Iterable, List

from .models import DocumentSnapshot, RelatedDocument
from ..vector.text import lexical_vector
from ..vector.types import Vector, as_vector

DEFAULT_SIMILARITY_THRESHOLD = 0.3


def _vector_of(document: DocumentSnapshot) -> Vector:
    if document.embedding is not None:
        return as_vector(document.embedding)
    return lexical_vector(document.content)


def document_similarity(subject: DocumentSnapshot, candidate: DocumentSnapshot, subject_vector: Vector = None) -> float:
    """
    Similarity between two documents.

    Stored vectors are compared directly when their shapes match; otherwise
    both documents are compared with lexical vectors of their content.
    """
    v1 = subject_vector if subject_vector is not None else _vector_of(subject)
    v2 = _vector_of(candidate)
    if not v1.is_compatible(v2):
        return lexical_vector(subject.content).similarity(lexical_vector(candidate.content))
    return v1.similarity(v2)


def find_related_documents(
    document: DocumentSnapshot,
    candidates: Iterable[DocumentSnapshot],
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> List[RelatedDocument]:
    """
    Find related documents based on content similarity.

    The subject itself and documents from other workspaces are excluded.
    Results at or above the threshold come back sorted by similarity,
    highest first.
    """
    subject_vector = _vector_of(document)
    related = []

    for candidate in candidates:
        if candidate.id == document.id:
            continue
        if document.workspace_id is not None and candidate.workspace_id not in (None, document.workspace_id):
            continue
        if not isinstance(candidate.content, str):
            continue

        similarity = document_similarity(document, candidate, subject_vector)
        if similarity >= threshold:
            related.append(RelatedDocument(document=candidate, similarity=similarity))

    # sorted() is stable, ties keep pool order
    return sorted(related, key=lambda r: r.similarity, reverse=True)


def search_documents(
    query_vector: Vector,
    candidates: Iterable[DocumentSnapshot],
    top_k: int = 5,
    min_similarity: float = 0.1,
) -> List[RelatedDocument]:
    """Nearest-neighbour search of a query vector over candidate documents."""
    query_vector = as_vector(query_vector)
    scored = []

    for candidate in candidates:
        if candidate.embedding is None:
            continue
        similarity = query_vector.similarity(as_vector(candidate.embedding))
        scored.append(RelatedDocument(document=candidate, similarity=similarity))

    scored.sort(key=lambda r: r.similarity, reverse=True)
    return [r for r in scored[:top_k] if r.similarity > min_similarity]
