"""
Critical term scanner.

Safety net over the structural and magnitude verdicts: if any sentence that
was added or removed anywhere in the document carries high-consequence
language, the change must not be dropped silently.
"""

from typing import List, Optional, Sequence

from .differ import diff_sentences
from .normalize import split_sentences
from .similarity import Similarity, phrase_weighted

MONTH_NAMES = (
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
)

CRITICAL_TERMS = (
    # legal and enforcement
    "prohibited", "banned", "restricted", "violation", "penalty", "suspended",
    "required", "mandatory", "must comply", "shall comply",
    "effective immediately", "deadline", "expires", "terminated",
    # temporal markers
    "starting", "beginning", "effective", "ending", "until",
) + MONTH_NAMES + (
    "2024", "2025", "2026", "2027", "2028",
    # severity of the policy wording
    "new requirement", "updated requirement", "changed requirement",
    "no longer", "will not", "cannot", "must not",
    "approval required", "certification required", "license required",
    # geographic scope
    "all countries", "specific countries", "region", "territory",
    "united states", "european union", "united kingdom", "australia", "canada",
    # business impact
    "fee", "cost", "charge", "payment", "price",
    "age restriction", "adult content", "minor", "child",
    "gambling", "healthcare", "pharmaceutical", "medical", "dangerous products",
)


def find_critical_terms(sentences: Sequence[str], terms: Optional[Sequence[str]] = None) -> List[str]:
    """Critical terms (case-insensitive substrings) present in any of the sentences."""
    vocabulary = [t.lower() for t in (terms if terms is not None else CRITICAL_TERMS)]
    found = []
    for sentence in sentences:
        lowered = sentence.lower()
        for term in vocabulary:
            if term in lowered and term not in found:
                found.append(term)
    return found


def changed_sentences(
    previous: str,
    current: str,
    threshold: float = 0.8,
    similarity: Similarity = phrase_weighted,
    min_length: int = 20,
) -> List[str]:
    """Added and removed sentences of the whole raw documents."""
    diff = diff_sentences(
        split_sentences(previous.lower(), min_length),
        split_sentences(current.lower(), min_length),
        threshold,
        similarity,
    )
    return list(diff.changed)


def contains_critical_changes(
    previous: str,
    current: str,
    threshold: float = 0.8,
    similarity: Similarity = phrase_weighted,
    terms: Optional[Sequence[str]] = None,
    min_length: int = 20,
) -> bool:
    changed = changed_sentences(previous, current, threshold, similarity, min_length)
    return bool(find_critical_terms(changed, terms))
