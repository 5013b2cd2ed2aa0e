"""
Ranking queries — latest sync, top-N, filtered listings, closest-time snapshots.

Every query discovers participating tables through the schema adapter and
reads them through one UNION ALL projection. Nothing is cached between calls.
"""
import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional

from sqlalchemy import text

from leaderboard.config import CHART_METRIC, SYNC_TABLE, TOP_N
from leaderboard.models.sync import Sync
from leaderboard.services.dedup import dedupe_by_identity
from leaderboard.services.projection import build_union_projection
from leaderboard.services.schema import (
    SNAPSHOT_FIELDS,
    describe_tables,
    quote_identifier,
    table_exists,
    validate_identifier,
)
from leaderboard.services.time_resolver import (
    closest_instant,
    parse_target_instant,
    resolve_closest_bucket,
)

logger = logging.getLogger('services.rankings')


@dataclass
class RankedEntity:
    name: str
    value: Optional[float]


def to_number(value) -> Optional[float]:
    """Numeric view of a stored counter. Generic tables may hold text."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else None
    try:
        num = float(str(value).strip())
    except ValueError:
        return None
    if not math.isfinite(num):
        return None
    return int(num) if num.is_integer() else num


def get_latest_sync_id(session) -> Optional[str]:
    """sync_id of the most recent ingestion run, or None if there are none."""
    if not table_exists(session, SYNC_TABLE):
        return None
    row = session.query(Sync.sync_id).order_by(Sync.sync_date.desc()).first()
    return row.sync_id if row else None


# ── Top-N ────────────────────────────────────────────────────────────────────

def select_top_n(session, metric: str = CHART_METRIC, n: int = TOP_N, tables=None) -> List[RankedEntity]:
    """
    Top n players by metric in the latest sync.

    Tables carrying sync_id only contribute rows of the latest sync; tables
    without sync_id can't be scoped and contribute all their rows. A player
    seen in several tables counts once, at its highest value. Ties keep
    first-seen order.
    """
    validate_identifier(metric)
    if n <= 0:
        return []

    descriptors = describe_tables(session, ['name', 'sync_id', metric], tables=tables)
    dialect = session.get_bind().dialect
    projection = build_union_projection(
        descriptors,
        fields=['name', metric],
        required=['name', metric],
        dialect=dialect,
        scope={'sync_id': 'sync_id'},
    )
    if projection is None:
        logger.info("No tables available for top %d query on %s", n, metric)
        return []

    latest_sync_id = get_latest_sync_id(session)
    rows = session.execute(
        text(f'SELECT name, {quote_identifier(metric, dialect)} AS value FROM ({projection.sql}) AS snapshots'),
        {'sync_id': latest_sync_id or ''},
    ).all()

    best: Dict[str, Optional[float]] = {}
    for name, value in rows:
        if name is None or name == '':
            continue
        value = to_number(value)
        if name not in best:
            best[name] = value
        elif value is not None and (best[name] is None or value > best[name]):
            best[name] = value

    ranked = sorted(best.items(), key=lambda item: (item[1] is None, -(item[1] or 0)))
    top = [RankedEntity(name=name, value=value) for name, value in ranked[:n]]
    logger.info("Top %d by %s: %d players from %s", n, metric, len(top), ', '.join(projection.tables))
    return top


# ── Listings ─────────────────────────────────────────────────────────────────

def list_snapshot_rows(
    session,
    name: str = None,
    sync_id: str = None,
    folder_date: str = None,
    data_date: str = None,
    include_all: bool = False,
    tables=None,
) -> List[Dict]:
    """
    Snapshot rows across all tables, normalized to the logical field set.

    Scoping: an explicit sync_id wins; otherwise, with no date filter and
    include_all unset, rows come from the latest sync. Date filters keep only
    rows stamped with the stored instant closest to the (padded) target.
    """
    params = {}
    conditions = []

    scope_sync = sync_id
    if not scope_sync and not folder_date and not data_date and not include_all:
        scope_sync = get_latest_sync_id(session)

    # Pad/validate targets before touching the database
    folder_target = parse_target_instant(folder_date) if folder_date else None
    data_target = parse_target_instant(data_date) if data_date else None

    required = ['name', 'sync_id'] if scope_sync else ['name']
    descriptors = describe_tables(session, SNAPSHOT_FIELDS, tables=tables)
    dialect = session.get_bind().dialect
    projection = build_union_projection(descriptors, SNAPSHOT_FIELDS, required, dialect)
    if projection is None:
        return []

    if scope_sync:
        conditions.append('sync_id = :sync_id')
        params['sync_id'] = scope_sync
    if name:
        conditions.append('name LIKE :name')
        params['name'] = f'%{name}%'

    for field, target in (('folder_date', folder_target), ('data_date', data_target)):
        if target is None:
            continue
        closest = closest_instant(session, field, target, tables=tables)
        if closest is not None:
            conditions.append(f'{quote_identifier(field, dialect)} = :{field}')
            params[field] = closest

    sql = f'SELECT * FROM ({projection.sql}) AS snapshots'
    if conditions:
        sql += ' WHERE ' + ' AND '.join(conditions)

    rows = [dict(row) for row in session.execute(text(sql), params).mappings().all()]
    logger.info("Listed %d snapshot rows from %s", len(rows), ', '.join(projection.tables))
    return rows


def get_snapshot_at(session, target, tables=None) -> Optional[List[Dict]]:
    """
    Leaderboard as captured in the hour bucket closest to target.

    Returns None when nothing has been captured yet; otherwise the bucket's
    rows, one per player (latest capture wins).
    """
    bucket = resolve_closest_bucket(session, target, tables=tables)
    if bucket is None:
        return None

    descriptors = describe_tables(session, SNAPSHOT_FIELDS, tables=tables)
    dialect = session.get_bind().dialect
    projection = build_union_projection(descriptors, SNAPSHOT_FIELDS, ['name', 'folder_date'], dialect)
    if projection is None:
        return []

    rows = session.execute(
        text(f'SELECT * FROM ({projection.sql}) AS snapshots WHERE folder_date LIKE :pattern'),
        {'pattern': bucket + '%'},
    ).mappings().all()

    deduped = dedupe_by_identity([dict(row) for row in rows])
    logger.info("Bucket %s: %d rows, %d after dedup", bucket, len(rows), len(deduped))
    return deduped


def list_capture_days(session, tables=None) -> List[str]:
    """Distinct capture days (YYYY-MM-DD) across all tables, newest first."""
    descriptors = describe_tables(session, ['folder_date'], tables=tables)
    dialect = session.get_bind().dialect
    projection = build_union_projection(descriptors, ['folder_date'], ['folder_date'], dialect)
    if projection is None:
        return []

    rows = session.execute(text(
        f'SELECT DISTINCT SUBSTR(folder_date, 1, 10) AS day FROM ({projection.sql}) AS snapshots '
        f'WHERE folder_date IS NOT NULL ORDER BY day DESC'
    )).scalars().all()
    return [day for day in rows if day]
