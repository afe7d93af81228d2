"""
Database schema and connection management.

Uses SQLite with SQLAlchemy for snapshot storage, one row per monitored URL.
"""

from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, List, Optional
from sqlalchemy import create_engine, Column, String, Text, DateTime
from sqlalchemy.orm import declarative_base, sessionmaker

from .models import Snapshot

Base = declarative_base()


class SnapshotRecord(Base):
    """Last persisted snapshot of a policy page."""

    __tablename__ = "policy_snapshots"

    url = Column(String, primary_key=True)
    title = Column(String, nullable=False, default="")
    content = Column(Text, nullable=False, default="")
    content_hash = Column(String, nullable=False)
    last_modified = Column(String, nullable=True)
    extracted_at = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    def to_snapshot(self) -> Snapshot:
        return Snapshot(
            url=self.url,
            title=self.title or "",
            content=self.content or "",
            content_hash=self.content_hash,
            last_modified=self.last_modified,
            extracted_at=self.extracted_at,
        )


def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)


def get_session(db_path: Path):
    """
    Get database session.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy session
    """
    engine = create_engine(f"sqlite:///{db_path}")
    Session = sessionmaker(bind=engine)
    return Session()


def snapshot_stats(session, now: Optional[datetime] = None) -> Dict[str, int]:
    """Total stored snapshots and how many were replaced in the last 24 hours."""
    now = now or datetime.now()
    total = session.query(SnapshotRecord).count()
    recent = session.query(SnapshotRecord).filter(
        SnapshotRecord.updated_at >= now - timedelta(hours=24)
    ).count()
    return {"total": total, "recently_updated": recent}


class SqlSnapshotStore:
    """Snapshot store backed by SQLite. Same interface as JsonSnapshotStore."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        init_database(self.db_path)

    def load_previous(self, url: str) -> Optional[Snapshot]:
        session = get_session(self.db_path)
        try:
            record = session.query(SnapshotRecord).filter_by(url=url).first()
            return record.to_snapshot() if record else None
        finally:
            session.close()

    def save(self, snapshot: Snapshot) -> str:
        """Upsert the snapshot for its URL. Returns 'new' or 'updated'."""
        session = get_session(self.db_path)
        try:
            record = session.query(SnapshotRecord).filter_by(url=snapshot.url).first()
            status = "updated" if record else "new"
            if record is None:
                record = SnapshotRecord(url=snapshot.url)
                session.add(record)
            record.title = snapshot.title or ""
            record.content = snapshot.content if isinstance(snapshot.content, str) else ""
            record.content_hash = snapshot.content_hash
            record.last_modified = snapshot.last_modified
            record.extracted_at = snapshot.extracted_at
            session.commit()
            return status
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def all(self) -> List[Dict]:
        session = get_session(self.db_path)
        try:
            return [r.to_snapshot().to_dict() for r in session.query(SnapshotRecord).all()]
        finally:
            session.close()

    def stats(self) -> Dict[str, int]:
        session = get_session(self.db_path)
        try:
            return snapshot_stats(session)
        finally:
            session.close()
