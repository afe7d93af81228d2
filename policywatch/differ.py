"""
Sentence-level differ.

A sentence is "added" when no sentence of the previous corpus matches it above
the match threshold, and "removed" when no sentence of the current corpus
matches it. The magnitude of a change is the count of both.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .relevance import extract_policy_sentences
from .similarity import Similarity, jaccard, phrase_weighted, word_tokens


@dataclass(frozen=True)
class SentenceDiff:
    added: Tuple[str, ...] = ()
    removed: Tuple[str, ...] = ()

    @property
    def magnitude(self) -> int:
        return len(self.added) + len(self.removed)

    @property
    def changed(self) -> Tuple[str, ...]:
        return self.added + self.removed


def _has_counterpart(sentence: str, corpus: Sequence[str], threshold: float,
                     similarity: Similarity) -> bool:
    return any(similarity(sentence, other) > threshold for other in corpus)


def diff_sentences(
    previous: Sequence[str],
    current: Sequence[str],
    threshold: float = 0.7,
    similarity: Similarity = phrase_weighted,
) -> SentenceDiff:
    added = tuple(s for s in current if not _has_counterpart(s, previous, threshold, similarity))
    removed = tuple(s for s in previous if not _has_counterpart(s, current, threshold, similarity))
    return SentenceDiff(added=added, removed=removed)


def policy_sentence_diff(
    previous_normalized: str,
    current_normalized: str,
    threshold: float = 0.7,
    similarity: Similarity = phrase_weighted,
    terms: Optional[Sequence[str]] = None,
    min_length: int = 20,
) -> SentenceDiff:
    prev_policy = extract_policy_sentences(previous_normalized, terms, min_length)
    curr_policy = extract_policy_sentences(current_normalized, terms, min_length)
    return diff_sentences(prev_policy, curr_policy, threshold, similarity)


def policy_change_magnitude(previous_normalized: str, current_normalized: str, **kwargs) -> int:
    return policy_sentence_diff(previous_normalized, current_normalized, **kwargs).magnitude


def policy_token_similarity(
    previous_normalized: str,
    current_normalized: str,
    terms: Optional[Sequence[str]] = None,
    min_length: int = 20,
    min_token_length: int = 3,
) -> float:
    """Word-set Jaccard over the policy-relevant sentences of both versions."""
    def tokens(text):
        words = set()
        for sentence in extract_policy_sentences(text, terms, min_length):
            words.update(w for w in word_tokens(sentence) if len(w) >= min_token_length)
        return words

    # No policy text on either side gives nothing to call coincidental.
    return jaccard(tokens(previous_normalized), tokens(current_normalized), empty=0.0)


def real_policy_change_confirmed(
    previous_normalized: str,
    current_normalized: str,
    cutoff: float = 0.80,
    terms: Optional[Sequence[str]] = None,
    min_length: int = 20,
    min_token_length: int = 3,
) -> bool:
    """
    Stricter check that a policy change is more than keyword coincidence.

    When the policy-relevant vocabulary of both versions overlaps at or above
    `cutoff`, the apparent change is treated as spurious.
    """
    similarity = policy_token_similarity(
        previous_normalized, current_normalized, terms, min_length, min_token_length
    )
    return similarity < cutoff
