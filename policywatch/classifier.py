"""
Change classifier.

Combines hash equality, first sighting, the structural verdict, the policy
change magnitude, the critical term scan and the real-change verifier into
one ChangeAssessment.

Precedence:
    1. no previous snapshot            -> NEW_POLICY
    2. equal hashes                    -> NO_CHANGE
    3. structural-only                 -> CRITICAL_POLICY_IN_STRUCTURAL when critical
                                          terms changed and the verifier confirms,
                                          else STRUCTURAL_ONLY
    4. magnitude bands                 -> MAJOR_ADDITION / MODERATE_CHANGE / MINOR_MODIFICATION
    5. small, critical, confirmed      -> CRITICAL_MINOR_CHANGE
    6. small, critical, not confirmed  -> STRUCTURAL_WITH_KEYWORDS
    7. small, nothing critical         -> FORMATTING_ONLY

assess() never raises: a fault in any stage yields UNCLASSIFIED with
has_changes=True so a possible real change still reaches a human.
"""

import logging
from typing import Any, Mapping, NamedTuple, Optional, Union

from .config import DEFAULT_CONFIG, EngineConfig
from .critical import contains_critical_changes
from .differ import policy_change_magnitude, real_policy_change_confirmed
from .hashing import content_hash
from .models import ChangeAssessment, ChangeSignals, Snapshot, Tier
from .normalize import normalize_content
from .structural import is_structural_only

log = logging.getLogger(__name__)

SnapshotLike = Union[Snapshot, Mapping[str, Any]]


class Verdict(NamedTuple):
    tier: Tier
    has_changes: bool
    skip_notification: bool
    description: str


def classify(signals: ChangeSignals, config: EngineConfig = DEFAULT_CONFIG) -> Verdict:
    """Pure decision table for a snapshot pair whose hashes differ."""
    if signals.structural_only:
        if signals.critical_terms and signals.policy_change_confirmed:
            return Verdict(
                Tier.CRITICAL_POLICY_IN_STRUCTURAL, True, False,
                "Critical policy changes detected within structural updates",
            )
        return Verdict(
            Tier.STRUCTURAL_ONLY, False, True,
            "Only website navigation or structural changes detected",
        )

    m = signals.magnitude
    if m > config.major_change_threshold:
        return Verdict(
            Tier.MAJOR_ADDITION, True, False,
            f"Significant policy changes detected ({m} policy-relevant changes)",
        )
    if m > config.moderate_change_threshold:
        return Verdict(
            Tier.MODERATE_CHANGE, True, False,
            f"Moderate policy updates detected ({m} policy changes)",
        )
    if m > config.minor_change_threshold:
        return Verdict(
            Tier.MINOR_MODIFICATION, True, False,
            f"Minor policy modifications detected ({m} policy changes)",
        )

    if signals.critical_terms:
        if signals.policy_change_confirmed:
            return Verdict(
                Tier.CRITICAL_MINOR_CHANGE, True, False,
                "Minor changes detected but contain critical policy terms",
            )
        return Verdict(
            Tier.STRUCTURAL_WITH_KEYWORDS, False, True,
            "Critical terms appear in changed text but policy content is unchanged",
        )

    return Verdict(
        Tier.FORMATTING_ONLY, False, True,
        "Only formatting or insignificant changes detected",
    )


def collect_signals(previous: str, current: str, config: EngineConfig = DEFAULT_CONFIG) -> ChangeSignals:
    """Run the detectors over two raw extractions."""
    similarity = config.similarity

    structural = is_structural_only(
        previous,
        current,
        threshold=config.structural_similarity_threshold,
        patterns=config.patterns,
        min_length=config.min_core_token_length,
        empty_is_structural=config.empty_core_is_structural,
    )

    critical = contains_critical_changes(
        previous,
        current,
        threshold=config.strict_match_threshold,
        similarity=similarity,
        terms=config.critical_terms,
        min_length=config.min_sentence_length,
    )

    prev_norm = normalize_content(previous, config.patterns)
    curr_norm = normalize_content(current, config.patterns)

    magnitude = 0
    if not structural:
        magnitude = policy_change_magnitude(
            prev_norm,
            curr_norm,
            threshold=config.sentence_match_threshold,
            similarity=similarity,
            terms=config.policy_terms,
            min_length=config.min_sentence_length,
        )

    confirmed = False
    if critical:
        confirmed = real_policy_change_confirmed(
            prev_norm,
            curr_norm,
            cutoff=config.real_change_similarity_cutoff,
            terms=config.policy_terms,
            min_length=config.min_sentence_length,
            min_token_length=config.min_core_token_length,
        )

    return ChangeSignals(
        structural_only=structural,
        critical_terms=critical,
        magnitude=magnitude,
        policy_change_confirmed=confirmed,
    )


def _as_snapshot(value: Optional[SnapshotLike], role: str) -> Optional[Snapshot]:
    if value is None or isinstance(value, Snapshot):
        return value
    if isinstance(value, Mapping):
        return Snapshot.from_dict(value)
    raise TypeError(f"{role} snapshot must be a Snapshot or a mapping, got {type(value).__name__}")


def _as_text(value: Any, role: str) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if value is not None:
        log.warning("Non-string %s content (%s) treated as empty", role, type(value).__name__)
    return ""


def _hash_of(snapshot: Snapshot, text: str, bits: int) -> str:
    return snapshot.content_hash or content_hash(text, bits)


def _assess(previous: Optional[SnapshotLike], current: SnapshotLike, config: EngineConfig) -> ChangeAssessment:
    curr = _as_snapshot(current, "current")
    if curr is None:
        raise TypeError("current snapshot is required")
    prev = _as_snapshot(previous, "previous")

    curr_text = _as_text(curr.content, "current")
    curr_hash = _hash_of(curr, curr_text, config.hash_bits)

    if prev is None:
        log.debug("First sighting of %s", curr.url)
        return ChangeAssessment(
            is_new=True,
            has_changes=False,
            tier=Tier.NEW_POLICY,
            description=f"New policy detected: {curr.title or curr.url}",
            skip_notification=True,
            current_hash=curr_hash,
            url=curr.url,
            title=curr.title,
        )

    prev_text = _as_text(prev.content, "previous")
    prev_hash = _hash_of(prev, prev_text, config.hash_bits)

    if prev_hash == curr_hash:
        return ChangeAssessment(
            is_new=False,
            has_changes=False,
            tier=Tier.NO_CHANGE,
            description="No changes detected",
            skip_notification=True,
            previous_hash=prev_hash,
            current_hash=curr_hash,
            url=curr.url,
            title=curr.title,
        )

    signals = collect_signals(prev_text, curr_text, config)
    verdict = classify(signals, config)
    log.debug(
        "Classified %s as %s (structural=%s critical=%s magnitude=%d confirmed=%s)",
        curr.url, verdict.tier.value, signals.structural_only, signals.critical_terms,
        signals.magnitude, signals.policy_change_confirmed,
    )

    return ChangeAssessment(
        is_new=False,
        has_changes=verdict.has_changes,
        tier=verdict.tier,
        description=verdict.description,
        skip_notification=verdict.skip_notification,
        magnitude=signals.magnitude,
        previous_hash=prev_hash,
        current_hash=curr_hash,
        url=curr.url,
        title=curr.title,
    )


def assess(
    previous: Optional[SnapshotLike],
    current: SnapshotLike,
    config: Optional[EngineConfig] = None,
) -> ChangeAssessment:
    """
    Compare the last persisted snapshot of a document with the current one.

    Args:
        previous: Last persisted snapshot, or None on first sighting
        current: Freshly extracted snapshot
        config: Thresholds and vocabularies (default: EngineConfig())

    Returns:
        A ChangeAssessment; never raises
    """
    config = config or DEFAULT_CONFIG
    try:
        return _assess(previous, current, config)
    except Exception as e:
        url = getattr(current, "url", None)
        if url is None and isinstance(current, Mapping):
            url = current.get("url")
        log.error("Change assessment failed for %s: %s: %s", url, type(e).__name__, e)
        return ChangeAssessment(
            is_new=False,
            has_changes=True,
            tier=Tier.UNCLASSIFIED,
            description=f"Change could not be classified ({type(e).__name__}); review manually",
            skip_notification=False,
            url=url if isinstance(url, str) else "",
        )
