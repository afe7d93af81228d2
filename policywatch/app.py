import argparse
import json
from pathlib import Path

from . import __version__
from .classifier import assess
from .config import EngineConfig
from .database import SqlSnapshotStore
from .env import load_env
from .hashing import content_hash
from .logger import get_logger
from .models import Snapshot
from .monitor import build_report, ingest_snapshot, monitor_snapshots, save_report
from .patterns import load_pattern_set
from .schema import validate_snapshot
from .storage import JsonSnapshotStore


def load_config(args: argparse.Namespace) -> EngineConfig:
    try:
        config = EngineConfig.from_env()
        if getattr(args, "patterns", None):
            config = config.with_overrides(patterns=load_pattern_set(Path(args.patterns)))
    except (ValueError, OSError) as e:
        raise SystemExit(f"Invalid configuration: {e}")
    return config


def open_store(args: argparse.Namespace):
    if getattr(args, "db", None):
        return SqlSnapshotStore(Path(args.db))
    return JsonSnapshotStore(Path(args.store))


def read_json(path: Path):
    if not path.exists():
        raise SystemExit(f"Input file not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise SystemExit(f"Invalid JSON in {path}: {e}")


def read_snapshot(path: Path, url: str = "") -> Snapshot:
    """A .json file is a snapshot object; anything else is raw extracted text."""
    if path.suffix.lower() == ".json":
        return Snapshot.from_dict(read_json(path))
    if not path.exists():
        raise SystemExit(f"Input file not found: {path}")
    text = path.read_text(encoding="utf-8", errors="replace")
    return Snapshot(url=url or path.resolve().as_uri(), content=text)


def cmd_assess(args: argparse.Namespace) -> None:
    config = load_config(args)
    previous = read_snapshot(Path(args.previous), args.url) if args.previous else None
    current = read_snapshot(Path(args.current), args.url)
    assessment = assess(previous, current, config)
    print(json.dumps(assessment.to_dict(), indent=2))


def cmd_hash(args: argparse.Namespace) -> None:
    path = Path(args.input)
    if not path.exists():
        raise SystemExit(f"Input file not found: {path}")
    print(content_hash(path.read_text(encoding="utf-8", errors="replace"), args.bits))


def cmd_validate(args: argparse.Namespace) -> None:
    data = read_json(Path(args.input))
    errors = validate_snapshot(data)
    if errors:
        print("Invalid:")
        for e in errors:
            print(f" - {e}")
        raise SystemExit(2)
    print("Valid")


def cmd_ingest(args: argparse.Namespace) -> None:
    config = load_config(args)
    data = read_json(Path(args.input))
    outcome = ingest_snapshot(data, open_store(args), config)
    print(f"URL: {outcome['url']}")
    print(f"Status: {outcome['status']}")
    if outcome.get("errors"):
        for e in outcome["errors"]:
            print(f" - {e}")
    if outcome.get("assessment"):
        print(f"Tier: {outcome['assessment']['tier']}")
        print(f"Notify: {'yes' if outcome['notify'] else 'no'}")


def cmd_scan(args: argparse.Namespace) -> None:
    config = load_config(args)
    input_dir = Path(args.input_dir)
    if not input_dir.is_dir():
        raise SystemExit(f"Input directory not found: {input_dir}")

    snapshots = []
    for path in sorted(input_dir.glob("*.json")):
        try:
            snapshots.append(read_json(path))
        except SystemExit as e:
            print(f"[error] {path} -> {e}")

    # Oldest extraction first so each URL is compared with its last persisted snapshot.
    snapshots.sort(key=lambda s: (s.get("extracted_at") or "") if isinstance(s, dict) else "")

    results = monitor_snapshots(snapshots, open_store(args), config)
    for r in results:
        tier = r["assessment"]["tier"] if r.get("assessment") else "-"
        flag = " [notify]" if r.get("notify") else ""
        print(f"[{r['status']}] {r['url']} {tier}{flag}")

    report = build_report(results)
    summary = report["summary"]
    print(
        f"Done. checked={summary['total_checked']} new={summary['new_policies']} "
        f"modified={summary['modified_policies']} notifications={summary['notifications']} "
        f"failed={summary['failed']}"
    )
    if args.reports:
        path = save_report(report, Path(args.reports))
        print(f"Report saved: {path}")
    get_logger().log_metrics_summary()


def cmd_list(args: argparse.Namespace) -> None:
    if not getattr(args, "db", None) and not Path(args.store).exists():
        print(f"Store not found: {args.store}")
        return
    snapshots = open_store(args).all()
    if not snapshots:
        print("No snapshots in store.")
        return
    print(f"Found {len(snapshots)} snapshots:\n")
    for snap in snapshots:
        print(f"URL: {snap.get('url')}")
        print(f"  Title: {snap.get('title')}")
        print(f"  Hash: {snap.get('content_hash')}")
        print(f"  Extracted: {snap.get('extracted_at')}")
        print()


def cmd_stats(args: argparse.Namespace) -> None:
    stats = SqlSnapshotStore(Path(args.db)).stats()
    print(f"Snapshots: {stats['total']}")
    print(f"Updated in last 24h: {stats['recently_updated']}")


def _add_store_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--store", default="data/snapshots.json", help="Path to JSON snapshot store (default: data/snapshots.json)")
    p.add_argument("--db", help="Path to SQLite snapshot database (overrides --store)")


def main():
    # Load .env if present (POLICYWATCH_* thresholds, pattern file)
    load_env()
    parser = argparse.ArgumentParser(prog="policywatch", description="Policy page change significance engine")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--patterns", help="JSON pattern file with site-specific boilerplate rules")

    subparsers = parser.add_subparsers(dest="command")
    ass = subparsers.add_parser("assess", help="Compare two extractions and print the assessment")
    ass.add_argument("--previous", help="Previous snapshot (.json) or text file; omit for a first sighting")
    ass.add_argument("--current", required=True, help="Current snapshot (.json) or text file")
    ass.add_argument("--url", default="", help="URL to use for plain text inputs")
    ass.set_defaults(func=cmd_assess)

    hsh = subparsers.add_parser("hash", help="Print the content hash of a text file")
    hsh.add_argument("--input", required=True, help="Path to text file")
    hsh.add_argument("--bits", type=int, choices=[32, 64], default=32, help="Hash width (default 32)")
    hsh.set_defaults(func=cmd_hash)

    val = subparsers.add_parser("validate", help="Validate a snapshot JSON")
    val.add_argument("--input", required=True, help="Path to snapshot JSON")
    val.set_defaults(func=cmd_validate)

    ing = subparsers.add_parser("ingest", help="Assess one snapshot against the store and persist it if changed")
    ing.add_argument("--input", required=True, help="Path to snapshot JSON")
    _add_store_args(ing)
    ing.set_defaults(func=cmd_ingest)

    scn = subparsers.add_parser("scan", help="Ingest every snapshot JSON in a directory and build a report")
    scn.add_argument("--input-dir", required=True, help="Directory of snapshot JSON files")
    scn.add_argument("--reports", help="Directory to write report-YYYY-MM-DD.json into")
    _add_store_args(scn)
    scn.set_defaults(func=cmd_scan)

    lst = subparsers.add_parser("list", help="List stored snapshots")
    _add_store_args(lst)
    lst.set_defaults(func=cmd_list)

    sts = subparsers.add_parser("stats", help="Show snapshot database statistics")
    sts.add_argument("--db", required=True, help="Path to SQLite snapshot database")
    sts.set_defaults(func=cmd_stats)

    args = parser.parse_args()

    if args.version:
        print(__version__)
        return

    if hasattr(args, "func"):
        args.func(args)
        return

    parser.print_help()


if __name__ == "__main__":
    main()
