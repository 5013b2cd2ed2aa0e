"""
Leaderboard page fetch + parse.

Reads the striped ranking table from the leaderboard page. Columns, in order:
rank, name, 1st/2nd/3rd place finishes, races completed, kudos rank, kudos.
"""
import logging
from typing import Dict, List, Optional

import requests
from bs4 import BeautifulSoup

from leaderboard.config import LEADERBOARD_ID, LEADERBOARD_URL, SCRAPE_TIMEOUT
from leaderboard.services.ingest import ENTRY_FIELDS, record_leaderboard_snapshot

logger = logging.getLogger('services.scraper')


def _to_int(text: str) -> int:
    try:
        return int(text.strip())
    except (TypeError, ValueError):
        return 0


def parse_leaderboard_table(html: str) -> List[Dict]:
    """Parse `table.table-striped` rows into entry dicts. Short rows are skipped."""
    soup = BeautifulSoup(html or '', 'html.parser')
    entries = []
    for tr in soup.select('table.table-striped tbody tr'):
        cells = [td.get_text(strip=True) for td in tr.find_all('td')]
        if len(cells) < len(ENTRY_FIELDS):
            continue
        entry = {field: _to_int(cell) for field, cell in zip(ENTRY_FIELDS, cells)}
        entry['name'] = cells[1]
        entries.append(entry)
    return entries


def fetch_leaderboard_html(url: str = LEADERBOARD_URL, timeout: int = SCRAPE_TIMEOUT) -> str:
    """GET the leaderboard page. Raises requests.HTTPError on non-2xx."""
    resp = requests.get(url, timeout=timeout)
    resp.raise_for_status()
    return resp.text


def run_ingestion(url: str = LEADERBOARD_URL, leaderboard_id: int = LEADERBOARD_ID) -> Optional[str]:
    """Fetch, parse and record one capture. Returns the sync_id or None."""
    html = fetch_leaderboard_html(url)
    entries = parse_leaderboard_table(html)
    logger.info("Parsed %d entries from %s", len(entries), url)
    return record_leaderboard_snapshot(entries, leaderboard_id=leaderboard_id)
