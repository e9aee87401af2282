"""
Text similarity for comparing translations of the same source text.

Tokenization: NFKC normalization, Unicode case folding, tokens are runs of
word characters (apostrophes inside a word are kept, so "don't" is one
token). Punctuation and whitespace only separate tokens.

Every similarity function here satisfies:
    sim(a, b) == sim(b, a)
    sim(a, a) == 1.0
    0.0 <= sim(a, b) <= 1.0
"""

import math
import re
import unicodedata
from collections import Counter
from typing import Callable, Dict, List

SimilarityFn = Callable[[str, str], float]

TOKEN_PATTERN = re.compile(r"\w+(?:['’]\w+)*")


def tokenize(text: str) -> List[str]:
    """Split text into normalized tokens"""
    if not text:
        return []
    normalized = unicodedata.normalize("NFKC", text).casefold()
    return TOKEN_PATTERN.findall(normalized)


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def cosine_similarity(text_a: str, text_b: str) -> float:
    """
    Cosine similarity of term-count vectors.

    Two texts without tokens are identical (1.0); exactly one empty side
    shares nothing with the other (0.0).
    """
    counts_a = Counter(tokenize(text_a))
    counts_b = Counter(tokenize(text_b))

    if not counts_a and not counts_b:
        return 1.0
    if not counts_a or not counts_b:
        return 0.0
    if counts_a == counts_b:
        return 1.0

    # Iterate the smaller vector; the dot product is symmetric either way
    small, large = (counts_a, counts_b) if len(counts_a) <= len(counts_b) else (counts_b, counts_a)
    dot = sum(count * large[token] for token, count in small.items())
    norm_a = math.sqrt(sum(c * c for c in counts_a.values()))
    norm_b = math.sqrt(sum(c * c for c in counts_b.values()))

    return _clamp(dot / (norm_a * norm_b))


def jaccard_similarity(text_a: str, text_b: str) -> float:
    """Token-set overlap (intersection over union)"""
    tokens_a = set(tokenize(text_a))
    tokens_b = set(tokenize(text_b))

    if not tokens_a and not tokens_b:
        return 1.0
    union = tokens_a | tokens_b
    return len(tokens_a & tokens_b) / len(union)


SIMILARITY_FUNCTIONS: Dict[str, SimilarityFn] = {
    "cosine": cosine_similarity,
    "jaccard": jaccard_similarity,
}


def get_similarity_function(name: str) -> SimilarityFn:
    """Look up a similarity function by name"""
    try:
        return SIMILARITY_FUNCTIONS[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown similarity function: {name} "
            f"(available: {', '.join(sorted(SIMILARITY_FUNCTIONS))})"
        ) from None
