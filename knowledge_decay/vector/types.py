"""
Vector representations used by the similarity engine.
A vector is either a sparse term-weight mapping or a dense numeric array.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, Mapping, Sequence, Union

import numpy as np


def _round3(value: float) -> float:
    return round(value, 3)


@dataclass(frozen=True)
class SparseVector:
    """Term -> weight mapping produced by local lexical statistics."""

    terms: Mapping[str, float] = field(default_factory=dict)

    kind = "sparse"

    def __len__(self) -> int:
        return len(self.terms)

    def is_compatible(self, other: "Vector") -> bool:
        return isinstance(other, SparseVector)

    def norm(self) -> float:
        return math.sqrt(sum(w * w for w in self.terms.values()))

    def similarity(self, other: "Vector") -> float:
        """Cosine similarity over the union of both term sets, rounded to 3 places."""
        if not self.is_compatible(other):
            return 0.0
        if not self.terms or not other.terms:
            return 0.0

        dot = 0.0
        norm1 = 0.0
        norm2 = 0.0
        for term in set(self.terms) | set(other.terms):
            v1 = self.terms.get(term, 0.0)
            v2 = other.terms.get(term, 0.0)
            dot += v1 * v2
            norm1 += v1 * v1
            norm2 += v2 * v2

        magnitude = math.sqrt(norm1) * math.sqrt(norm2)
        if magnitude == 0:
            return 0.0
        return _round3(dot / magnitude)

    def to_raw(self) -> Dict[str, float]:
        return dict(self.terms)


@dataclass(frozen=True, eq=False)
class DenseVector:
    """Dense embedding as returned by an external embedding model."""

    values: np.ndarray

    kind = "dense"

    def __post_init__(self):
        object.__setattr__(self, "values", np.asarray(self.values, dtype=float).ravel())

    def __len__(self) -> int:
        return int(self.values.shape[0])

    def __eq__(self, other) -> bool:
        return isinstance(other, DenseVector) and np.array_equal(self.values, other.values)

    def is_compatible(self, other: "Vector") -> bool:
        return isinstance(other, DenseVector) and len(other) == len(self)

    def norm(self) -> float:
        return float(np.linalg.norm(self.values))

    def similarity(self, other: "Vector") -> float:
        """Cosine similarity clamped to [0, 1], rounded to 3 places."""
        if not self.is_compatible(other):
            return 0.0
        if len(self) == 0:
            return 0.0

        magnitude = self.norm() * other.norm()
        if magnitude == 0:
            return 0.0

        score = float(np.dot(self.values, other.values)) / magnitude
        return _round3(min(1.0, max(0.0, score)))

    def to_raw(self) -> list:
        return self.values.tolist()


Vector = Union[SparseVector, DenseVector]
RawVector = Union[Vector, Mapping[str, float], Sequence[float], np.ndarray]


def as_vector(raw: RawVector) -> Vector:
    """Coerce a stored embedding (mapping, list, ndarray or vector) into a Vector."""
    if isinstance(raw, (SparseVector, DenseVector)):
        return raw
    if isinstance(raw, Mapping):
        return SparseVector({str(k): float(v) for k, v in raw.items()})
    if isinstance(raw, (list, tuple, np.ndarray)):
        return DenseVector(np.asarray(raw, dtype=float))
    raise TypeError(f"Unsupported embedding type: {type(raw).__name__}")


def cosine_similarity(v1: RawVector, v2: RawVector) -> float:
    """Similarity in [0, 1]; 0 for empty, zero-norm or incompatible vectors."""
    if v1 is None or v2 is None:
        return 0.0
    return as_vector(v1).similarity(as_vector(v2))


def semantic_difference(v1: RawVector, v2: RawVector) -> float:
    """1 - similarity, rounded to 3 places."""
    return _round3(1 - cosine_similarity(v1, v2))


def are_compatible(v1: RawVector, v2: RawVector) -> bool:
    if v1 is None or v2 is None:
        return False
    return as_vector(v1).is_compatible(as_vector(v2))
