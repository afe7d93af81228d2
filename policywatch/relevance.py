import re
from typing import Iterable, List, Optional, Sequence

from .normalize import split_sentences

POLICY_TERMS = (
    # obligations and prohibitions
    "required", "prohibited", "allowed", "must", "cannot", "shall", "will",
    "policy", "rule", "regulation", "compliance", "violation", "restriction",
    "requirement", "guideline", "standard", "criteria", "condition",
    # dates
    "effective", "starting", "ending", "deadline", "date",
    # geography
    "country", "countries", "region", "location", "territory",
    # commercial parties and objects
    "advertiser", "merchant", "seller", "buyer", "customer",
    "product", "service", "content", "ad", "listing",
    "approve", "disapprove", "reject", "accept", "review",
    "fee", "cost", "price", "payment", "charge",
    # age and content restrictions
    "age", "adult", "minor", "child",
)


def compile_terms(terms: Iterable[str]) -> "re.Pattern[str]":
    # Terms match at a word start so "ad" finds "ads" and "advertiser" but not "load".
    alternatives = sorted({t.lower() for t in terms if t}, key=len, reverse=True)
    if not alternatives:
        return re.compile(r"(?!)")
    return re.compile(r"\b(?:" + "|".join(re.escape(t) for t in alternatives) + r")", re.IGNORECASE)


_DEFAULT_TERMS_RE = compile_terms(POLICY_TERMS)


def is_policy_relevant(sentence: str, terms: Optional[Sequence[str]] = None) -> bool:
    pattern = _DEFAULT_TERMS_RE if terms is None else compile_terms(terms)
    return pattern.search(sentence) is not None


def extract_policy_sentences(
    normalized: str,
    terms: Optional[Sequence[str]] = None,
    min_length: int = 20,
) -> List[str]:
    """Sentences of normalized text that mention at least one policy term."""
    pattern = _DEFAULT_TERMS_RE if terms is None else compile_terms(terms)
    return [s for s in split_sentences(normalized, min_length) if pattern.search(s)]
