#!/usr/bin/env python3
"""
Copy a JSON snapshot store into the SQLite snapshot database.

Snapshots already present in the database are left alone, so the script can
be re-run after a partial migration.

Usage:
    python scripts/migrate_json_to_db.py --json data/snapshots.json --db data/snapshots.db
"""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from policywatch.database import SnapshotRecord, get_session, init_database
from policywatch.hashing import content_hash
from policywatch.models import Snapshot
from policywatch.storage import load_store

PREVIEW = 5


def _to_record(snapshot: Snapshot) -> SnapshotRecord:
    return SnapshotRecord(
        url=snapshot.url,
        title=snapshot.title,
        content=snapshot.content,
        content_hash=snapshot.content_hash or content_hash(snapshot.content),
        last_modified=snapshot.last_modified,
        extracted_at=snapshot.extracted_at,
    )


def migrate(json_path: Path, db_path: Path, dry_run: bool = False):
    """
    Insert every JSON snapshot missing from the database.

    Returns True when the batch committed, False when the commit failed,
    and None for a dry run.
    """
    records = load_store(json_path).get("snapshots", {})
    print(f"Found {len(records)} snapshots in {json_path}")

    if dry_run:
        print("\n[DRY RUN] Would migrate:")
        for url, data in list(records.items())[:PREVIEW]:
            print(f"  - {url}: {data.get('title')}")
        if len(records) > PREVIEW:
            print(f"  ... and {len(records) - PREVIEW} more")
        return None

    init_database(db_path)
    session = get_session(db_path)
    counts = {"migrated": 0, "skipped": 0}

    try:
        known = {url for (url,) in session.query(SnapshotRecord.url).all()}
        for url, data in records.items():
            if not isinstance(data.get("content"), str) or url in known:
                print(f"⚠️  Skipping {url}")
                counts["skipped"] += 1
                continue
            session.add(_to_record(Snapshot.from_dict({**data, "url": url})))
            known.add(url)
            counts["migrated"] += 1
        session.commit()
    except Exception as e:
        session.rollback()
        print(f"❌ Migration failed: {e}")
        return False
    finally:
        session.close()

    print(f"\n✅ Migrated {counts['migrated']}, skipped {counts['skipped']}")
    return True


def main():
    parser = argparse.ArgumentParser(description="Migrate snapshots from JSON to database")
    parser.add_argument("--json", type=Path, default=Path("data/snapshots.json"), help="Path to JSON store file")
    parser.add_argument("--db", type=Path, default=Path("data/snapshots.db"), help="Path to SQLite database file")
    parser.add_argument("--dry-run", action="store_true", help="Show what would be migrated without writing")
    args = parser.parse_args()

    if not args.json.exists():
        print(f"❌ JSON file not found: {args.json}")
        sys.exit(1)

    ok = migrate(args.json, args.db, dry_run=args.dry_run)
    sys.exit(1 if ok is False else 0)


if __name__ == "__main__":
    main()
