"""
Structural similarity detection.

Decides whether the difference between two extractions is confined to
navigation: breadcrumbs, menus and footers. Cores are compared as word sets,
so reordered menus still count as the same page.
"""

import logging
from typing import FrozenSet, Optional

from .normalize import apply_rules, normalize_text
from .patterns import DEFAULT_PATTERNS, PatternSet, strip_breadcrumbs
from .similarity import jaccard, word_tokens

log = logging.getLogger(__name__)


def extract_core(content: str, patterns: Optional[PatternSet] = None) -> str:
    """Remove breadcrumbs and every boilerplate/navigation rule, then normalize."""
    patterns = patterns or DEFAULT_PATTERNS
    core = strip_breadcrumbs(content)
    core = apply_rules(core, patterns.structural)
    return normalize_text(core)


def core_tokens(content: str, patterns: Optional[PatternSet] = None,
                min_length: int = 3) -> FrozenSet[str]:
    return frozenset(w for w in word_tokens(extract_core(content, patterns)) if len(w) >= min_length)


def structural_similarity(previous: str, current: str, patterns: Optional[PatternSet] = None,
                          min_length: int = 3) -> Optional[float]:
    """Jaccard similarity of the two cores, or None when both cores are empty."""
    prev_words = core_tokens(previous, patterns, min_length)
    curr_words = core_tokens(current, patterns, min_length)
    if not prev_words and not curr_words:
        return None
    return jaccard(prev_words, curr_words)


def is_structural_only(
    previous: str,
    current: str,
    threshold: float = 0.90,
    patterns: Optional[PatternSet] = None,
    min_length: int = 3,
    empty_is_structural: bool = False,
) -> bool:
    similarity = structural_similarity(previous, current, patterns, min_length)
    if similarity is None:
        log.debug("Both structural cores are empty; structural=%s", empty_is_structural)
        return empty_is_structural
    log.debug("Structural core similarity %.3f (threshold %.2f)", similarity, threshold)
    return similarity > threshold
