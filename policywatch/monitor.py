"""
Monitoring pipeline around the change engine.

For each freshly extracted snapshot: look up the last persisted snapshot for
its URL, assess the pair, and persist the new snapshot only when the
assessment reports a change or a first sighting. Snapshots of one URL must be
fed in chronological order; different URLs are independent.
"""

import json
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from .classifier import assess
from .config import DEFAULT_CONFIG, EngineConfig
from .hashing import content_hash
from .logger import get_logger
from .models import Snapshot
from .schema import looks_like_missing_page, validate_snapshot

logger = get_logger()


def _prepare(snapshot: Union[Snapshot, Mapping[str, Any]], config: EngineConfig) -> Snapshot:
    if not isinstance(snapshot, Snapshot):
        snapshot = Snapshot.from_dict(snapshot)
    if not snapshot.content_hash and isinstance(snapshot.content, str):
        snapshot = replace(snapshot, content_hash=content_hash(snapshot.content, config.hash_bits))
    if not snapshot.extracted_at:
        snapshot = replace(snapshot, extracted_at=datetime.now().isoformat())
    return snapshot


def ingest_snapshot(
    snapshot: Union[Snapshot, Mapping[str, Any]],
    store,
    config: Optional[EngineConfig] = None,
) -> Dict[str, Any]:
    """
    Assess one snapshot against the store and apply the persistence contract.

    Args:
        snapshot: Current extraction (Snapshot or dict)
        store: Object with load_previous(url) and save(snapshot)
        config: Engine configuration

    Returns:
        Dict with url, status (new, updated, retained, dead, validation_error),
        notify flag and the assessment as a dict
    """
    config = config or DEFAULT_CONFIG

    if not isinstance(snapshot, Snapshot):
        errors = validate_snapshot(snapshot)
        if errors:
            logger.warning("Snapshot failed validation", errors=errors)
            url = snapshot.get("url") if isinstance(snapshot, Mapping) else None
            return {"url": url, "status": "validation_error", "errors": errors, "notify": False}

    current = _prepare(snapshot, config)
    previous = store.load_previous(current.url)

    if previous is None and looks_like_missing_page(current.content):
        logger.warning("Refusing to baseline a missing page", url=current.url)
        return {"url": current.url, "status": "dead", "notify": False, "assessment": None}

    assessment = assess(previous, current, config)

    if assessment.should_persist:
        status = store.save(current)
    else:
        status = "retained"

    notify = assessment.has_changes and not assessment.is_new and not assessment.skip_notification

    logger.record_assessment(assessment.tier.value, notify)
    logger.record_snapshot(status)
    logger.info(
        f"[{status}] {current.url}: {assessment.tier.value}",
        magnitude=assessment.magnitude,
        notify=notify,
    )

    return {
        "url": current.url,
        "status": status,
        "notify": notify,
        "assessment": assessment.to_dict(),
        "checked_at": datetime.now().isoformat(),
    }


def monitor_snapshots(
    snapshots: Iterable[Union[Snapshot, Mapping[str, Any]]],
    store,
    config: Optional[EngineConfig] = None,
) -> List[Dict[str, Any]]:
    """Ingest snapshots in order. A failing URL is logged and recorded, never fatal."""
    results = []
    for snapshot in snapshots:
        url = snapshot.url if isinstance(snapshot, Snapshot) else (
            snapshot.get("url") if isinstance(snapshot, Mapping) else None
        )
        try:
            results.append(ingest_snapshot(snapshot, store, config))
        except Exception as e:
            logger.record_error(type(e).__name__)
            logger.error("Failed to process snapshot", url=url, error=str(e))
            results.append({"url": url, "status": "error", "error": str(e), "notify": False})
    return results


def build_report(results: List[Dict[str, Any]]) -> Dict[str, Any]:
    tiers: Dict[str, int] = {}
    for r in results:
        assessment = r.get("assessment")
        if assessment:
            tiers[assessment["tier"]] = tiers.get(assessment["tier"], 0) + 1

    def _flag(r, key):
        return bool(r.get("assessment") and r["assessment"].get(key))

    new_policies = sum(1 for r in results if _flag(r, "is_new"))
    modified = sum(1 for r in results if _flag(r, "has_changes"))
    notifications = sum(1 for r in results if r.get("notify"))
    assessed = sum(1 for r in results if r.get("assessment"))

    return {
        "timestamp": datetime.now().isoformat(),
        "summary": {
            "total_checked": len(results),
            "changes_detected": new_policies + modified,
            "new_policies": new_policies,
            "modified_policies": modified,
            "notifications": notifications,
            "suppressed": assessed - notifications,
            "failed": sum(1 for r in results if r.get("status") in ("error", "validation_error", "dead")),
        },
        "tiers": tiers,
        "results": results,
    }


def save_report(report: Dict[str, Any], reports_dir: Path) -> Path:
    reports_dir.mkdir(parents=True, exist_ok=True)
    report_path = reports_dir / f"report-{datetime.now().strftime('%Y-%m-%d')}.json"
    with report_path.open("w", encoding="utf-8") as f:
        json.dump(report, f, indent=2, ensure_ascii=False)
    return report_path
