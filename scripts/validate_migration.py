#!/usr/bin/env python3
"""
Check that the SQLite snapshot database holds the same snapshots as a JSON store.

Usage:
    python scripts/validate_migration.py --json data/snapshots.json --db data/snapshots.db
"""

import argparse
import sys
from pathlib import Path
from typing import List, Tuple

sys.path.insert(0, str(Path(__file__).parent.parent))

from policywatch.database import SqlSnapshotStore
from policywatch.models import Snapshot
from policywatch.storage import load_store

COMPARED_FIELDS = ("title", "content", "last_modified", "extracted_at")


def _differences(expected: Snapshot, actual: Snapshot) -> List[str]:
    fields = [f for f in COMPARED_FIELDS if getattr(expected, f) != getattr(actual, f)]
    # JSON snapshots written before hashing have no stored hash.
    if expected.content_hash and expected.content_hash != actual.content_hash:
        fields.append("content_hash")
    return fields


def validate(json_path: Path, db_path: Path) -> bool:
    expected = {
        url: Snapshot.from_dict({**data, "url": url})
        for url, data in load_store(json_path).get("snapshots", {}).items()
    }
    actual = {s["url"]: Snapshot.from_dict(s) for s in SqlSnapshotStore(db_path).all()}
    print(f"JSON: {len(expected)} snapshots, DB: {len(actual)} snapshots")

    missing = sorted(set(expected) - set(actual))
    extra = sorted(set(actual) - set(expected))
    mismatches: List[Tuple[str, str]] = []
    for url in set(expected) & set(actual):
        mismatches.extend((url, f) for f in _differences(expected[url], actual[url]))

    for label, items in (("MISSING from DB", missing), ("EXTRA in DB", extra)):
        if items:
            print(f"❌ {label}: {len(items)}")
            for url in items[:5]:
                print(f"   - {url}")

    if mismatches:
        print(f"❌ DATA MISMATCHES: {len(mismatches)} field differences")
        for url, field in sorted(mismatches)[:5]:
            print(f"   - {url}: {field}")

    if missing or extra or mismatches:
        return False
    print("✅ All snapshots validated successfully!")
    return True


def main():
    parser = argparse.ArgumentParser(description="Validate migration from JSON to database")
    parser.add_argument("--json", type=Path, default=Path("data/snapshots.json"), help="Path to JSON store file")
    parser.add_argument("--db", type=Path, default=Path("data/snapshots.db"), help="Path to SQLite database file")
    args = parser.parse_args()

    for path, label in ((args.json, "JSON file"), (args.db, "Database file")):
        if not path.exists():
            print(f"❌ {label} not found: {path}")
            sys.exit(1)

    sys.exit(0 if validate(args.json, args.db) else 1)


if __name__ == "__main__":
    main()
