"""
Boilerplate and navigation pattern sets.

A PatternSet is the swappable strategy the normalizer and the structural
detector use to strip page chrome. The defaults are generic help-center
furniture; site-specific copy belongs in a JSON pattern file loaded with
load_pattern_set().
"""

import functools
import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Tuple

# Compiled rules kept across all loaded pattern sets.
PATTERN_CACHE_SIZE = 512


@dataclass(frozen=True)
class PatternRule:
    """A single regex substitution. Rules must never lengthen the text."""

    pattern: str
    replacement: str = ""
    name: str = ""

    def compiled(self) -> "re.Pattern[str]":
        return _compile(self.pattern)

    def apply(self, text: str) -> str:
        return self.compiled().sub(self.replacement, text)


@functools.lru_cache(maxsize=PATTERN_CACHE_SIZE)
def _compile(pattern: str) -> "re.Pattern[str]":
    # Rules run again on already lowercased text, so matching is always case-insensitive.
    return re.compile(pattern, re.IGNORECASE)


MONTHS = (
    r"(?:january|february|march|april|may|june|july|august|september|"
    r"october|november|december|jan|feb|mar|apr|jun|jul|aug|sep|sept|oct|nov|dec)"
)

_LABEL = r"[\w&'’()-]+(?:[^\S\n]+[\w&'’()-]+){0,3}"
_SEPARATOR = r"[^\S\n]*(?:>|›|»|→)[^\S\n]*"

# A line made only of two or more short labels joined by path separators.
BREADCRUMB_PATTERN = r"^[^\S\n]*" + _LABEL + r"(?:" + _SEPARATOR + _LABEL + r")+[^\S\n]*$"
BREADCRUMB_RE = re.compile(BREADCRUMB_PATTERN, re.IGNORECASE | re.MULTILINE)


def strip_breadcrumbs(content: str) -> str:
    """
    Blank out breadcrumb lines of raw, line-structured text.

    Single-line text is returned unchanged: once line breaks are gone a
    breadcrumb can no longer be told apart from prose such as "age > 18".
    """
    if "\n" not in content:
        return content
    return BREADCRUMB_RE.sub(" ", content)


DEFAULT_BOILERPLATE: Tuple[PatternRule, ...] = (
    PatternRule(r"skip to (?:main )?content", name="skip-link"),
    PatternRule(r"give feedback about this article[\s\S]*$", name="feedback-footer"),
    PatternRule(r"choose a section to give feedback[\s\S]*$", name="feedback-picker"),
    PatternRule(r"was this (?:article )?helpful\?[\s\S]*$", name="helpful-footer"),
    PatternRule(r"need more help\?[\s\S]*$", name="more-help-footer"),
    PatternRule(r"post to the help community[\s\S]*$", name="community-footer"),
    PatternRule(r"tell us more and we'll help you get there[\s\S]*$", name="survey-footer"),
    PatternRule(r"for subtitles in your language[\s\S]*?choose your language\.", name="subtitle-hint"),
    PatternRule(r"select the settings icon[\s\S]*?choose your language\.", name="settings-hint"),
    # Timestamps and cache-busting fragments
    PatternRule(
        r"\b\d{1,2}/\d{1,2}/\d{4}[\s,]*\d{1,2}:\d{2}(?::\d{2})?(?:\s*[ap]m)?",
        name="timestamp",
    ),
    PatternRule(r"[?&](?:visit_id|utm_[a-z]+|hl|ref|cb|_)=[^&\s]*", name="query-fragment"),
    PatternRule(r"\bvisit_id=[^&\s]*", name="visit-id"),
    # Dates are genericized rather than dropped so sentence shape survives.
    PatternRule(
        r"\b(?:note:\s*)?starting\s+(?:on\s+)?" + MONTHS + r"\.?\s+\d{1,2},?\s+\d{4}",
        replacement="starting [date]",
        name="starting-date",
    ),
    PatternRule(
        r"\blast (?:updated|modified|reviewed):?\s+" + MONTHS + r"\.?\s+\d{1,2},?\s+\d{4}",
        replacement="last updated [date]",
        name="last-updated",
    ),
)

DEFAULT_NAVIGATION: Tuple[PatternRule, ...] = (
    PatternRule(r"give feedback[\s\S]*?article", name="feedback-link"),
    PatternRule(r"was this helpful\?", name="helpful-prompt"),
    PatternRule(r"need more help\?", name="more-help-prompt"),
    PatternRule(r"post to the help community", name="community-link"),
    PatternRule(r"get answers from community members", name="community-hint"),
    PatternRule(r"contact us", name="contact-link"),
    PatternRule(r"tell us more[\s\S]*?there", name="survey-prompt"),
    PatternRule(r"(?:sign in|sign out|privacy policy|terms of service|send feedback)", name="chrome-links"),
    PatternRule(r"table of contents|on this page|back to top", name="page-nav"),
)


@dataclass(frozen=True)
class PatternSet:
    """
    Ordered rule lists.

    boilerplate rules are applied by the content normalizer; the structural
    detector applies boilerplate followed by the more aggressive navigation
    rules.
    """

    name: str = "default"
    boilerplate: Tuple[PatternRule, ...] = DEFAULT_BOILERPLATE
    navigation: Tuple[PatternRule, ...] = DEFAULT_NAVIGATION

    @property
    def structural(self) -> Tuple[PatternRule, ...]:
        return self.boilerplate + self.navigation

    def extend(self, boilerplate: Iterable[PatternRule] = (), navigation: Iterable[PatternRule] = (),
               name: str = "") -> "PatternSet":
        """Return a new set with extra rules appended after the existing ones."""
        return PatternSet(
            name=name or self.name,
            boilerplate=self.boilerplate + tuple(boilerplate),
            navigation=self.navigation + tuple(navigation),
        )


DEFAULT_PATTERNS = PatternSet()


def _parse_rules(raw: List, section: str) -> List[PatternRule]:
    rules = []
    for i, item in enumerate(raw):
        if isinstance(item, str):
            rule = PatternRule(pattern=item)
        elif isinstance(item, dict) and isinstance(item.get("pattern"), str):
            rule = PatternRule(
                pattern=item["pattern"],
                replacement=item.get("replacement", ""),
                name=item.get("name", ""),
            )
        else:
            raise ValueError(f"{section}[{i}] must be a regex string or an object with 'pattern'")
        try:
            rule.compiled()
        except re.error as e:
            raise ValueError(f"{section}[{i}] is not a valid regex: {e}") from e
        rules.append(rule)
    return rules


def load_pattern_set(path: Path, extend_defaults: bool = True) -> PatternSet:
    """
    Load a pattern set from a JSON file.

    Expected shape::

        {"name": "merchant-center",
         "extends_defaults": true,
         "boilerplate": ["regex", {"pattern": "...", "replacement": "...", "name": "..."}],
         "navigation": ["regex"]}

    Raises:
        ValueError: If the file is malformed or a pattern does not compile
    """
    with path.open("r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Pattern file is not valid JSON: {path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Pattern file must contain a JSON object: {path}")

    boilerplate = _parse_rules(data.get("boilerplate", []), "boilerplate")
    navigation = _parse_rules(data.get("navigation", []), "navigation")
    name = data.get("name") or path.stem

    if data.get("extends_defaults", extend_defaults):
        return DEFAULT_PATTERNS.extend(boilerplate, navigation, name=name)
    return PatternSet(name=name, boilerplate=tuple(boilerplate), navigation=tuple(navigation))
