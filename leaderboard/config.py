"""
Centralized configuration — env vars and query defaults.
"""
import os


def _csv(value):
    return [part.strip() for part in (value or '').split(',') if part.strip()]


# ── Logging ──────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_FORMAT = os.getenv('LOG_FORMAT', 'text')

# ── Database ─────────────────────────────────────────────────────────────────
DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///xbltotal.db')

# ── Snapshot tables ──────────────────────────────────────────────────────────
# Every query probes these; missing tables or columns are skipped, not errors.
SNAPSHOT_TABLES = _csv(os.getenv('SNAPSHOT_TABLES', 'XBLTotal,XBLTotal1,XBLTotal2,XBLTotal3'))

# Tables imported with positional column names (field1..field13)
GENERIC_FIELD_TABLES = set(_csv(os.getenv('GENERIC_FIELD_TABLES', 'XBLTotal1,XBLTotal2,XBLTotal3')))

SYNC_TABLE = 'Sync'

# ── Query defaults ───────────────────────────────────────────────────────────
TOP_N = int(os.getenv('TOP_N', '10'))
CHART_METRIC = os.getenv('CHART_METRIC', 'kudos')

# ── Ingestion ────────────────────────────────────────────────────────────────
LEADERBOARD_URL = os.getenv('LEADERBOARD_URL', 'https://insignia.live/games/4d53004b')
LEADERBOARD_ID = int(os.getenv('LEADERBOARD_ID', '1'))
SCRAPE_TIMEOUT = int(os.getenv('SCRAPE_TIMEOUT', '30'))
