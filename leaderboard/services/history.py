"""
History aggregator — one point per player per calendar day.

For each (trimmed name, day) the latest capture of that day wins. Names are
matched by trimmed string equality only, so different spellings or casing of
the same player stay separate series.
"""
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from sqlalchemy import bindparam, text

from leaderboard.config import CHART_METRIC
from leaderboard.services.projection import build_union_projection
from leaderboard.services.rankings import to_number
from leaderboard.services.schema import describe_tables, quote_identifier, validate_identifier
from leaderboard.services.time_resolver import parse_instant

logger = logging.getLogger('services.history')


@dataclass
class SeriesPoint:
    date: str
    value: Optional[float]


def build_daily_series(session, entity_keys: Iterable[str], metric: str = CHART_METRIC,
                       tables=None) -> Dict[str, List[SeriesPoint]]:
    """
    Map each player to its (day, metric) points, ordered by day.

    Players with no qualifying rows are absent from the result.
    """
    validate_identifier(metric)
    keys = []
    for key in entity_keys:
        trimmed = (key or '').strip()
        if trimmed and trimmed not in keys:
            keys.append(trimmed)
    if not keys:
        return {}

    descriptors = describe_tables(session, ['name', 'folder_date', metric], tables=tables)
    dialect = session.get_bind().dialect
    projection = build_union_projection(
        descriptors,
        fields=['folder_date', 'name', metric],
        required=['name', 'folder_date', metric],
        dialect=dialect,
    )
    if projection is None:
        logger.info("No tables available for %s history", metric)
        return {}

    query = text(
        f'SELECT folder_date, name, {quote_identifier(metric, dialect)} AS value '
        f'FROM ({projection.sql}) AS snapshots '
        f'WHERE folder_date IS NOT NULL AND name IS NOT NULL AND TRIM(name) IN :names'
    ).bindparams(bindparam('names', expanding=True))
    rows = session.execute(query, {'names': keys}).all()

    # (name, day) -> (captured_at, value); strictly later captures replace
    latest = {}
    for folder_date, name, value in rows:
        name = str(name).strip()
        captured_at = parse_instant(folder_date)
        if not name or captured_at is None:
            continue
        slot = (name, captured_at.date().isoformat())
        current = latest.get(slot)
        if current is None or captured_at > current[0]:
            latest[slot] = (captured_at, value)

    series: Dict[str, List[SeriesPoint]] = {}
    for key in keys:
        days = sorted(day for (name, day) in latest if name == key)
        if not days:
            continue
        series[key] = [SeriesPoint(date=day, value=to_number(latest[(key, day)][1])) for day in days]

    logger.info("Built %s history for %d of %d players from %s",
                metric, len(series), len(keys), ', '.join(projection.tables))
    return series
