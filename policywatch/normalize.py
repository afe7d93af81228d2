import re
from typing import Iterable, List, Optional

from .patterns import DEFAULT_PATTERNS, PatternRule, PatternSet, strip_breadcrumbs

SENTENCE_BOUNDARY = re.compile(r"[.!?]+")


def normalize_text(s: str) -> str:
    return " ".join(s.strip().lower().split())


def apply_rules(text: str, rules: Iterable[PatternRule]) -> str:
    for rule in rules:
        text = rule.apply(text)
    return text


def _normalize_once(text: str, rules: Iterable[PatternRule]) -> str:
    return normalize_text(apply_rules(text, rules))


def normalize_content(content: str, patterns: Optional[PatternSet] = None) -> str:
    """
    Strip breadcrumb lines and boilerplate, genericize dates, collapse
    whitespace and case-fold.

    Breadcrumbs are removed once, from the raw lines. The rule pass is then
    repeated until the output stops changing, so
    normalize_content(normalize_content(x)) == normalize_content(x).

    Raises:
        ValueError: If the pattern set lengthens the text or cycles
    """
    patterns = patterns or DEFAULT_PATTERNS
    rules = patterns.boilerplate
    current = _normalize_once(strip_breadcrumbs(content), rules)
    seen = {current}
    while True:
        following = _normalize_once(current, rules)
        if following == current:
            return current
        if len(following) > len(current) or following in seen:
            raise ValueError(f"Pattern set '{patterns.name}' does not converge; rules must only shorten text")
        seen.add(following)
        current = following


def split_sentences(text: str, min_length: int = 20) -> List[str]:
    """Split on sentence-terminal punctuation, dropping fragments of min_length chars or fewer."""
    sentences = []
    for part in SENTENCE_BOUNDARY.split(text):
        part = part.strip()
        if len(part) > min_length:
            sentences.append(part)
    return sentences
