"""
Time resolver — partial timestamps → canonical instants → nearest hour bucket.

Accepted targets (URL-encoded or not):
    2024-11-26            → 2024-11-26 12:00:00  (bare date means midday)
    2024-11-26 17         → 2024-11-26 17:00:00
    2024-11-26 17:55      → 2024-11-26 17:55:00
    2024-11-26 17:55:21   → unchanged

A stored capture instant in the same hour as the target always wins, even if
an instant in a neighbouring hour is arithmetically closer. Only when the
target hour is empty does the resolver fall back to absolute distance.
"""
import logging
import re
from datetime import datetime, timezone
from typing import Iterable, Optional
from urllib.parse import unquote

from sqlalchemy import text

from leaderboard.errors import MalformedTimestampError
from leaderboard.models.leaderboard_entry import INSTANT_FORMAT
from leaderboard.services.projection import build_union_projection
from leaderboard.services.schema import describe_tables, quote_identifier

logger = logging.getLogger('services.time_resolver')

_PADDING = [
    (re.compile(r'^\d{4}-\d{2}-\d{2}$'), ' 12:00:00'),
    (re.compile(r'^\d{4}-\d{2}-\d{2} \d{2}$'), ':00:00'),
    (re.compile(r'^\d{4}-\d{2}-\d{2} \d{2}:\d{2}$'), ':00'),
    (re.compile(r'^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$'), ''),
]

HOUR_KEY_LENGTH = len('YYYY-MM-DD HH')


def parse_target_instant(raw: str) -> datetime:
    """Pad a partial timestamp to a full instant. Raises MalformedTimestampError."""
    if not isinstance(raw, str):
        raise MalformedTimestampError(raw)
    value = unquote(raw).strip()
    for pattern, suffix in _PADDING:
        if pattern.match(value):
            try:
                return datetime.strptime(value + suffix, INSTANT_FORMAT)
            except ValueError:
                raise MalformedTimestampError(raw) from None
    raise MalformedTimestampError(raw)


def parse_instant(value) -> Optional[datetime]:
    """Best-effort parse of a stored instant; None if absent or unparseable."""
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        value = str(value).strip()
        if not value:
            return None
        try:
            dt = datetime.fromisoformat(value.replace('Z', '+00:00'))
        except ValueError:
            return None
    # Compare everything as naive UTC
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def hour_key(instant: datetime) -> str:
    return instant.strftime(INSTANT_FORMAT)[:HOUR_KEY_LENGTH]


def nearest_instant(candidates: Iterable, target: datetime):
    """
    Candidate value closest to target by absolute difference.

    Ties keep the first candidate seen. Unparseable values are ignored.
    """
    target = parse_instant(target)
    best = None
    best_diff = None
    for value in candidates:
        instant = parse_instant(value)
        if instant is None:
            continue
        diff = abs((instant - target).total_seconds())
        if best_diff is None or diff < best_diff:
            best, best_diff = value, diff
    return best


def _instant_pool(session, logical_field: str, tables=None):
    """UNION of one instant field across every table that records it."""
    descriptors = describe_tables(session, [logical_field], tables=tables)
    dialect = session.get_bind().dialect
    return build_union_projection(descriptors, [logical_field], [logical_field], dialect), dialect


def closest_instant(session, logical_field: str, target: datetime, tables=None):
    """Stored value of an instant field nearest to target, pooled across tables."""
    target = parse_instant(target)
    projection, dialect = _instant_pool(session, logical_field, tables=tables)
    if projection is None:
        return None
    col = quote_identifier(logical_field, dialect)
    rows = session.execute(text(
        f'SELECT {col} FROM ({projection.sql}) AS pool WHERE {col} IS NOT NULL'
    )).scalars().all()
    return nearest_instant(rows, target)


def resolve_closest_bucket(session, target, tables=None) -> Optional[str]:
    """
    Hour bucket ('YYYY-MM-DD HH') of the capture instant closest to target.

    target may be a partial timestamp string or a datetime. Returns None when
    no capture instant has been stored yet.
    """
    # Aware datetimes are compared as naive UTC, like stored instants
    instant = parse_instant(target) if isinstance(target, datetime) else parse_target_instant(target)
    candidate = hour_key(instant)

    projection, dialect = _instant_pool(session, 'folder_date', tables=tables)
    if projection is None:
        logger.info("No table records folder_date — nothing to resolve")
        return None

    col = quote_identifier('folder_date', dialect)
    exact = session.execute(
        text(f'SELECT {col} FROM ({projection.sql}) AS pool WHERE {col} LIKE :pattern LIMIT 1'),
        {'pattern': candidate + '%'},
    ).scalar()
    if exact is not None:
        return str(exact)[:HOUR_KEY_LENGTH]

    nearest = closest_instant(session, 'folder_date', instant, tables=tables)
    if nearest is None:
        return None
    bucket = str(nearest)[:HOUR_KEY_LENGTH]
    logger.info("No capture in hour %s, using nearest bucket %s", candidate, bucket)
    return bucket
