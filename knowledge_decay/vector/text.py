"""
Lexical text statistics for local vectors.
Term-frequency vectors over lower-cased, stop-word filtered tokens.
"""

import re
from collections import Counter
from typing import List

from .types import SparseVector

TOKEN_PATTERN = re.compile(r"[a-z0-9]+")

# Sentence ends at terminal punctuation followed by whitespace or end of text,
# so decimals such as "2.5 hours" stay inside one sentence.
SENTENCE_BOUNDARY = re.compile(r"[.!?]+(?=\s|$)")

STOP_WORDS = frozenset("""
a about above after again against all am an and any are as at be because been
being below between both but by can could did do does doing down during each
few for from further had has have having he her here hers herself him himself
his how i if in into is it its itself just me more most my myself no nor of off
on once only other our ours ourselves out over own same she so some such than
that the their theirs them themselves then there these they this those through
to too under until up very was we were what when where which while who whom why
with would you your yours yourself yourselves
""".split())


def tokenize(text: str) -> List[str]:
    """Lower-case word tokens with stop words removed."""
    if not text or not isinstance(text, str):
        return []
    return [t for t in TOKEN_PATTERN.findall(text.lower()) if t not in STOP_WORDS]


def lexical_vector(text: str) -> SparseVector:
    """Build a sparse term-frequency vector; empty for blank or non-string input."""
    counts = Counter(tokenize(text))
    return SparseVector({term: float(count) for term, count in counts.items()})


def split_sentences(text: str) -> List[str]:
    if not text or not isinstance(text, str):
        return []
    return [s.strip() for s in SENTENCE_BOUNDARY.split(text) if s.strip()]


def text_similarity(text1: str, text2: str) -> float:
    """Lexical cosine similarity of two texts."""
    return lexical_vector(text1).similarity(lexical_vector(text2))


def calculate_semantic_difference(text1: str, text2: str) -> float:
    """Lexical semantic difference (1 - similarity) of two texts."""
    return round(1 - text_similarity(text1, text2), 3)
