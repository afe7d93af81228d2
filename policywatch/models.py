from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from .hashing import content_hash


class Tier(Enum):
    NEW_POLICY = "NEW_POLICY"
    NO_CHANGE = "NO_CHANGE"
    STRUCTURAL_ONLY = "STRUCTURAL_ONLY"
    CRITICAL_POLICY_IN_STRUCTURAL = "CRITICAL_POLICY_IN_STRUCTURAL"
    MAJOR_ADDITION = "MAJOR_ADDITION"
    MODERATE_CHANGE = "MODERATE_CHANGE"
    MINOR_MODIFICATION = "MINOR_MODIFICATION"
    CRITICAL_MINOR_CHANGE = "CRITICAL_MINOR_CHANGE"
    STRUCTURAL_WITH_KEYWORDS = "STRUCTURAL_WITH_KEYWORDS"
    FORMATTING_ONLY = "FORMATTING_ONLY"
    UNCLASSIFIED = "UNCLASSIFIED"

    @property
    def severity(self) -> int:
        """Ordering used for reporting; a larger magnitude never lowers it."""
        return _SEVERITY[self]


_SEVERITY = {
    Tier.NEW_POLICY: 0,
    Tier.NO_CHANGE: 0,
    Tier.STRUCTURAL_ONLY: 0,
    Tier.FORMATTING_ONLY: 0,
    Tier.STRUCTURAL_WITH_KEYWORDS: 1,
    Tier.CRITICAL_POLICY_IN_STRUCTURAL: 2,
    Tier.CRITICAL_MINOR_CHANGE: 2,
    Tier.MINOR_MODIFICATION: 3,
    Tier.MODERATE_CHANGE: 4,
    Tier.MAJOR_ADDITION: 5,
    Tier.UNCLASSIFIED: 5,
}


@dataclass(frozen=True)
class Snapshot:
    """
    A text extraction of a monitored document at a point in time.

    Snapshots are owned by the snapshot store; the engine only reads them.
    """

    url: str
    content: str = ""
    title: str = ""
    content_hash: str = ""
    last_modified: Optional[str] = None
    extracted_at: Optional[str] = None

    @classmethod
    def capture(cls, url: str, content: str, title: str = "", last_modified: Optional[str] = None,
                bits: int = 32) -> "Snapshot":
        """Build a snapshot from freshly extracted text, hashing it and stamping the time."""
        return cls(
            url=url,
            content=content,
            title=title,
            content_hash=content_hash(content, bits),
            last_modified=last_modified,
            extracted_at=datetime.now().isoformat(),
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Snapshot":
        return cls(
            url=data.get("url") or "",
            content=data.get("content", ""),
            title=data.get("title") or "",
            content_hash=data.get("content_hash") or "",
            last_modified=data.get("last_modified"),
            extracted_at=data.get("extracted_at"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ChangeSignals:
    """Inputs of the classification table after hash and first-sighting checks."""

    structural_only: bool
    critical_terms: bool
    magnitude: int = 0
    policy_change_confirmed: bool = False


@dataclass(frozen=True)
class ChangeAssessment:
    is_new: bool
    has_changes: bool
    tier: Tier
    description: str
    skip_notification: bool
    magnitude: int = 0
    previous_hash: Optional[str] = None
    current_hash: Optional[str] = None
    url: str = ""
    title: str = ""

    @property
    def should_persist(self) -> bool:
        """Snapshot store contract: replace the stored snapshot only on change or first sighting."""
        return self.has_changes or self.is_new

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["tier"] = self.tier.value
        return data
