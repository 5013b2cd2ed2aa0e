"""
Ingestion — write one leaderboard capture as a Sync record plus snapshot rows.

The Sync row is flushed before any XBLTotal row that references it, and every
row of a run shares the same folder_date/data_date stamp.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from leaderboard.config import LEADERBOARD_ID
from leaderboard.database import get_session
from leaderboard.models.leaderboard_entry import INSTANT_FORMAT, LeaderboardEntry
from leaderboard.models.sync import Sync

logger = logging.getLogger('services.ingest')

ENTRY_FIELDS = [
    'rank',
    'name',
    'first_place_finishes',
    'second_place_finishes',
    'third_place_finishes',
    'races_completed',
    'kudos_rank',
    'kudos',
]


def start_sync(session, started_at: Optional[datetime] = None, sync_id: Optional[str] = None) -> Sync:
    """Create and flush the Sync record for a new ingestion run."""
    sync = Sync(
        sync_id=sync_id or str(uuid.uuid4()),
        sync_date=started_at or datetime.now(timezone.utc),
    )
    session.add(sync)
    session.flush()
    return sync


def persist_snapshot_rows(session, sync: Sync, entries: List[Dict],
                          leaderboard_id: int = LEADERBOARD_ID,
                          captured_at: Optional[datetime] = None) -> int:
    """Add one XBLTotal row per parsed entry under the given sync. Returns the count."""
    stamp = (captured_at or datetime.now(timezone.utc)).strftime(INSTANT_FORMAT)
    rows = [
        LeaderboardEntry(
            leaderboard_id=leaderboard_id,
            folder_date=stamp,
            data_date=stamp,
            sync_id=sync.sync_id,
            **{f: entry.get(f) for f in ENTRY_FIELDS},
        )
        for entry in entries
    ]
    session.add_all(rows)
    return len(rows)


def record_leaderboard_snapshot(entries: List[Dict], leaderboard_id: int = LEADERBOARD_ID,
                                captured_at: Optional[datetime] = None) -> Optional[str]:
    """
    Persist one capture in a single transaction.

    Returns the new sync_id, or None if there was nothing to write. Storage
    errors are logged and re-raised after rollback.
    """
    if not entries:
        logger.warning("No leaderboard entries to record")
        return None

    session = get_session()
    try:
        sync = start_sync(session, started_at=captured_at)
        count = persist_snapshot_rows(session, sync, entries,
                                      leaderboard_id=leaderboard_id, captured_at=captured_at)
        session.commit()
        logger.info("Recorded %d entries for leaderboard %s (sync %s)", count, leaderboard_id, sync.sync_id[:8])
        return sync.sync_id
    except Exception:
        session.rollback()
        logger.error("Failed to record leaderboard snapshot", exc_info=True)
        raise
    finally:
        session.close()
