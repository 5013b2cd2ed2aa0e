#!/usr/bin/env python3
"""
Seed leaderboard history for verifying the API locally.

Creates a few days of captures covering the key query scenarios:
  1. Several syncs in the real-named XBLTotal table (latest sync = top-N scope)
  2. Two captures on the same day (daily series keeps the later one)
  3. A duplicate player inside one capture hour (bucket dedup)
  4. A generic-named XBLTotal1 table without a sync column (field1..field12)

Usage:
    python scripts/seed_test_data.py          # seed all scenarios
    python scripts/seed_test_data.py --clear  # wipe seeded data first

Requires: DATABASE_URL set (or defaults to sqlite:///xbltotal.db).
"""
import sys
import os
import argparse
import uuid
from datetime import datetime, timedelta, timezone

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import text

from leaderboard import create_app
from leaderboard.database import get_session, engine, Base
from leaderboard.models.leaderboard_entry import INSTANT_FORMAT, LeaderboardEntry
from leaderboard.models.sync import Sync
from leaderboard.services.ingest import persist_snapshot_rows, start_sync


# ── Fake players ─────────────────────────────────────────────────────────────

PLAYERS = [
    {'name': 'Turbo Tess',    'kudos': 18200, 'races': 410},
    {'name': 'Drift King',    'kudos': 16950, 'races': 388},
    {'name': 'NitroNick',     'kudos': 15400, 'races': 352},
    {'name': 'Apex Annie',    'kudos': 13010, 'races': 301},
    {'name': 'Slipstream',    'kudos': 11875, 'races': 290},
    {'name': 'Clutch Carla',  'kudos': 9960,  'races': 244},
    {'name': 'Gridlock Greg', 'kudos': 8420,  'races': 198},
    {'name': 'Hairpin Hal',   'kudos': 7030,  'races': 176},
]

SEED_PREFIX = 'seed-'
GENERIC_TABLE = 'XBLTotal1'


def _entries(day_offset):
    """Leaderboard entries for a capture day_offset days after the first one."""
    entries = []
    for i, p in enumerate(PLAYERS):
        kudos = p['kudos'] + day_offset * (250 - i * 20)
        entries.append({
            'rank': i + 1,
            'name': p['name'],
            'first_place_finishes': max(0, 40 - i * 4 + day_offset),
            'second_place_finishes': max(0, 35 - i * 3),
            'third_place_finishes': max(0, 30 - i * 2),
            'races_completed': p['races'] + day_offset * 5,
            'kudos_rank': i + 1,
            'kudos': kudos,
        })
    return entries


def seed_syncs(session, days=5):
    """One sync per day, plus a second capture on the last day."""
    start = datetime.now(timezone.utc).replace(minute=0, second=0, microsecond=0) - timedelta(days=days)
    for offset in range(days):
        captured_at = start + timedelta(days=offset)
        sync = start_sync(session, started_at=captured_at, sync_id=SEED_PREFIX + str(uuid.uuid4()))
        persist_snapshot_rows(session, sync, _entries(offset), captured_at=captured_at)
        session.flush()
        print(f'  [1] Sync {sync.sync_id[:13]} at {captured_at.strftime(INSTANT_FORMAT)}')

    late = start + timedelta(days=days - 1, hours=6)
    sync = start_sync(session, started_at=late, sync_id=SEED_PREFIX + str(uuid.uuid4()))
    entries = _entries(days)
    persist_snapshot_rows(session, sync, entries, captured_at=late)
    print(f'  [2] Same-day capture at {late.strftime(INSTANT_FORMAT)}')

    # Repeat the leader inside the same hour with a later stamp
    dup = dict(entries[0], kudos=entries[0]['kudos'] + 5)
    persist_snapshot_rows(session, sync, [dup], captured_at=late + timedelta(minutes=20))
    print(f'  [3] Duplicate {dup["name"]} in bucket {late.strftime(INSTANT_FORMAT)[:13]}')
    return start


def seed_generic_table(session, start):
    """Older history imported with positional columns and no sync column."""
    columns = ', '.join(f'field{i} TEXT' for i in range(1, 13))
    session.execute(text(f'CREATE TABLE IF NOT EXISTS "{GENERIC_TABLE}" ({columns})'))
    for back in range(1, 4):
        stamp = (start - timedelta(days=back)).strftime(INSTANT_FORMAT)
        for i, p in enumerate(PLAYERS[:4]):
            session.execute(
                text(f'INSERT INTO "{GENERIC_TABLE}" (field3, field4, field10, field11, field12) '
                     f'VALUES (:rank, :name, :kudos, :stamp, :stamp)'),
                {'rank': i + 1, 'name': p['name'], 'kudos': p['kudos'] - back * 300, 'stamp': stamp},
            )
    print(f'  [4] {GENERIC_TABLE}: 3 older days for {len(PLAYERS[:4])} players')


# ── Clear / Main ─────────────────────────────────────────────────────────────

def clear_seeded_data(session):
    """Remove seeded syncs, their rows, and the generic table."""
    sync_ids = [s.sync_id for s in session.query(Sync).filter(Sync.sync_id.like(f'{SEED_PREFIX}%')).all()]
    if not sync_ids:
        print('No seeded data found.')
        return

    deleted_rows = session.query(LeaderboardEntry).filter(
        LeaderboardEntry.sync_id.in_(sync_ids)
    ).delete(synchronize_session=False)
    deleted_syncs = session.query(Sync).filter(Sync.sync_id.in_(sync_ids)).delete(synchronize_session=False)
    session.execute(text(f'DROP TABLE IF EXISTS "{GENERIC_TABLE}"'))
    session.commit()

    print(f'Cleared {deleted_syncs} syncs, {deleted_rows} rows, and {GENERIC_TABLE}.')


def main():
    parser = argparse.ArgumentParser(description='Seed leaderboard history for local verification')
    parser.add_argument('--clear', action='store_true', help='Clear seeded data before (or instead of) seeding')
    parser.add_argument('--clear-only', action='store_true', help='Only clear, do not re-seed')
    parser.add_argument('--days', type=int, default=5, help='Number of daily syncs to create')
    args = parser.parse_args()

    app = create_app()
    with app.app_context():
        Base.metadata.create_all(engine)

        session = get_session()
        try:
            if args.clear or args.clear_only:
                clear_seeded_data(session)
                if args.clear_only:
                    return

            print('Seeding leaderboard history...')
            start = seed_syncs(session, days=args.days)
            seed_generic_table(session, start)
            session.commit()
            print('\nDone! Try http://localhost:3000/api2/xbltotal/chart')

        except Exception as e:
            session.rollback()
            print(f'Error: {e}')
            raise
        finally:
            session.close()


if __name__ == '__main__':
    main()
