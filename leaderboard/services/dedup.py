"""
Dedup resolver — collapse repeated players inside one resolved hour bucket.
"""
from datetime import timezone
from typing import Dict, List, Optional

from leaderboard.services.time_resolver import parse_instant


def _instant_value(value) -> Optional[float]:
    """Seconds since epoch for a stored instant; numbers are taken as-is."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    instant = parse_instant(value)
    if instant is None:
        return None
    return instant.replace(tzinfo=timezone.utc).timestamp()


def dedupe_by_identity(rows: List[Dict], key: str = 'name', instant: str = 'folder_date') -> List[Dict]:
    """
    Keep one row per identity: the one with the latest capture instant.

    Ties, or rows without a usable instant, keep whichever came first.
    Rows with a null/empty identity are dropped. Output keeps first-seen order.
    """
    kept: Dict[str, Dict] = {}
    for row in rows:
        identity = row.get(key)
        if identity is None or identity == '':
            continue

        existing = kept.get(identity)
        if existing is None:
            kept[identity] = row
            continue

        current_at = _instant_value(row.get(instant))
        existing_at = _instant_value(existing.get(instant))
        if current_at is not None and (existing_at is None or current_at > existing_at):
            kept[identity] = row

    return list(kept.values())
