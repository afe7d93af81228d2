"""
Sentence similarity strategies.

Every strategy takes two sentences and returns a score in [0, 1]. Strategies
are looked up by name so the matcher used by the differ and the critical term
scanner is chosen through configuration.
"""

import re
from typing import Callable, Dict, FrozenSet, List, Set, Tuple

WORD_RE = re.compile(r"[\w'’]+")

# Score given when one sentence contains the other verbatim.
SUBSTRING_SIMILARITY = 0.95
PHRASE_WEIGHT = 0.7
WORD_WEIGHT = 0.3

Similarity = Callable[[str, str], float]


def jaccard(a: Set, b: Set, empty: float = 0.0) -> float:
    """|a & b| / |a | b|, or `empty` when both sets are empty."""
    union = a | b
    if not union:
        return empty
    return len(a & b) / len(union)


def word_tokens(text: str) -> List[str]:
    return WORD_RE.findall(text.lower())


def unigram_set(text: str, min_length: int = 4) -> FrozenSet[str]:
    return frozenset(w for w in word_tokens(text) if len(w) >= min_length)


def bigram_set(text: str) -> FrozenSet[Tuple[str, str]]:
    words = word_tokens(text)
    return frozenset(zip(words, words[1:]))


def unigram_jaccard(a: str, b: str) -> float:
    return jaccard(unigram_set(a), unigram_set(b))


def phrase_weighted(a: str, b: str) -> float:
    """
    Substring containment scores SUBSTRING_SIMILARITY; otherwise a blend of
    bigram and word Jaccard, floored at the plain word Jaccard so short
    sentences with few bigrams are not under-scored.
    """
    na = " ".join(a.lower().split())
    nb = " ".join(b.lower().split())
    if na and nb and (na in nb or nb in na):
        return SUBSTRING_SIMILARITY

    words = unigram_jaccard(na, nb)
    phrases = jaccard(bigram_set(na), bigram_set(nb))
    return max(PHRASE_WEIGHT * phrases + WORD_WEIGHT * words, words)


SIMILARITY_STRATEGIES: Dict[str, Similarity] = {
    "unigram": unigram_jaccard,
    "phrase_weighted": phrase_weighted,
}


def get_similarity(name: str) -> Similarity:
    try:
        return SIMILARITY_STRATEGIES[name]
    except KeyError:
        known = ", ".join(sorted(SIMILARITY_STRATEGIES))
        raise ValueError(f"Unknown similarity strategy '{name}'. Use one of: {known}") from None
