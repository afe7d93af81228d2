import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from .models import Snapshot


def load_store(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {"snapshots": {}}
    try:
        with path.open("r", encoding="utf-8") as f:
            content = f.read().strip()
            if not content:
                return {"snapshots": {}}
            return json.loads(content)
    except (json.JSONDecodeError, IOError):
        return {"snapshots": {}}


def save_store(path: Path, store: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(store, f, indent=2, ensure_ascii=False)


class JsonSnapshotStore:
    """
    Last persisted snapshot per URL, kept in one JSON file.

    The file is re-read on every call so several runs can share it in turn.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def load_previous(self, url: str) -> Optional[Snapshot]:
        record = load_store(self.path).get("snapshots", {}).get(url)
        if record is None:
            return None
        return Snapshot.from_dict(record)

    def save(self, snapshot: Snapshot) -> str:
        """Replace the stored snapshot for its URL. Returns 'new' or 'updated'."""
        store = load_store(self.path)
        snapshots = store.setdefault("snapshots", {})
        status = "updated" if snapshot.url in snapshots else "new"
        record = snapshot.to_dict()
        record["snapshot_date"] = datetime.now().isoformat()
        snapshots[snapshot.url] = record
        save_store(self.path, store)
        return status

    def all(self) -> List[Dict[str, Any]]:
        return list(load_store(self.path).get("snapshots", {}).values())
