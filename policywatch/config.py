"""
Engine configuration.

Every threshold the classifier uses is a named field here so operators can
retune per monitored source, either in code through with_overrides() or
through POLICYWATCH_* environment variables read by from_env().
"""

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Mapping, Optional, Tuple

from .critical import CRITICAL_TERMS
from .hashing import SUPPORTED_WIDTHS
from .patterns import DEFAULT_PATTERNS, PatternSet, load_pattern_set
from .relevance import POLICY_TERMS
from .similarity import Similarity, get_similarity

ENV_PREFIX = "POLICYWATCH_"


@dataclass(frozen=True)
class EngineConfig:
    # Structural detector
    structural_similarity_threshold: float = 0.90
    min_core_token_length: int = 3
    empty_core_is_structural: bool = False

    # Sentence matching
    sentence_match_threshold: float = 0.7
    strict_match_threshold: float = 0.8
    real_change_similarity_cutoff: float = 0.80
    min_sentence_length: int = 20
    similarity_strategy: str = "phrase_weighted"

    # Magnitude bands (exclusive lower bounds)
    major_change_threshold: int = 20
    moderate_change_threshold: int = 10
    minor_change_threshold: int = 5

    hash_bits: int = 32

    patterns: PatternSet = DEFAULT_PATTERNS
    policy_terms: Tuple[str, ...] = POLICY_TERMS
    critical_terms: Tuple[str, ...] = CRITICAL_TERMS

    def __post_init__(self):
        for name in (
            "structural_similarity_threshold",
            "sentence_match_threshold",
            "strict_match_threshold",
            "real_change_similarity_cutoff",
        ):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be between 0 and 1, got {value}")
        if not (self.major_change_threshold >= self.moderate_change_threshold
                >= self.minor_change_threshold >= 0):
            raise ValueError("Magnitude bands must satisfy major >= moderate >= minor >= 0")
        get_similarity(self.similarity_strategy)
        if self.hash_bits not in SUPPORTED_WIDTHS:
            raise ValueError(f"hash_bits must be one of {SUPPORTED_WIDTHS}, got {self.hash_bits}")

    @property
    def similarity(self) -> Similarity:
        return get_similarity(self.similarity_strategy)

    def with_overrides(self, **overrides) -> "EngineConfig":
        return replace(self, **overrides)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        """
        Build a config from POLICYWATCH_<FIELD> variables.

        POLICYWATCH_PATTERNS_FILE points at a JSON pattern set (see
        patterns.load_pattern_set). Unset variables keep their defaults.

        Raises:
            ValueError: On values that do not parse or fail validation
        """
        environ = os.environ if environ is None else environ
        overrides = {}
        for f in fields(cls):
            if f.name in ("patterns", "policy_terms", "critical_terms"):
                continue
            raw = environ.get(ENV_PREFIX + f.name.upper())
            if raw is None or raw.strip() == "":
                continue
            overrides[f.name] = _parse_value(f.name, f.default, raw.strip())

        patterns_file = environ.get(ENV_PREFIX + "PATTERNS_FILE")
        if patterns_file:
            overrides["patterns"] = load_pattern_set(Path(patterns_file))

        return cls(**overrides)


def _parse_value(name: str, default, raw: str):
    try:
        if isinstance(default, bool):
            lowered = raw.lower()
            if lowered in ("1", "true", "yes", "on"):
                return True
            if lowered in ("0", "false", "no", "off"):
                return False
            raise ValueError(raw)
        if isinstance(default, int):
            return int(raw)
        if isinstance(default, float):
            return float(raw)
    except ValueError:
        raise ValueError(f"Invalid value for {ENV_PREFIX}{name.upper()}: {raw!r}") from None
    return raw


DEFAULT_CONFIG = EngineConfig()
