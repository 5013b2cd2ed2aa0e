#!/usr/bin/env python3
"""
Capture the current leaderboard once and store it as a new sync.

Usage:
    python scripts/ingest_leaderboard.py
    python scripts/ingest_leaderboard.py --url https://... --leaderboard-id 1

Meant to run from cron every few hours. Requires DATABASE_URL
(defaults to sqlite:///xbltotal.db).
"""
import sys
import os
import argparse

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from leaderboard.config import LEADERBOARD_ID, LEADERBOARD_URL
from leaderboard.database import Base, engine
from leaderboard.logging_config import configure_logging
from leaderboard.models import leaderboard_entry, sync  # noqa: F401  (register tables)
from leaderboard.services.scraper import run_ingestion


def main():
    parser = argparse.ArgumentParser(description='Capture one leaderboard snapshot')
    parser.add_argument('--url', default=LEADERBOARD_URL, help='Leaderboard page URL')
    parser.add_argument('--leaderboard-id', type=int, default=LEADERBOARD_ID)
    parser.add_argument('--skip-create', action='store_true', help='Do not create missing tables')
    args = parser.parse_args()

    configure_logging()
    if not args.skip_create:
        Base.metadata.create_all(engine)

    sync_id = run_ingestion(url=args.url, leaderboard_id=args.leaderboard_id)
    if sync_id is None:
        print('No entries found; nothing recorded.')
        return 1
    print(f'Recorded sync {sync_id}')
    return 0


if __name__ == '__main__':
    sys.exit(main())
