"""
Rankings API — latest / closest-time lookups, top-N and daily series.

Thin wrappers: each handler owns a session, calls one service, and maps
results to HTTP. No data → 404, bad input → 400, storage errors → 500.
"""
import logging
from flask import Blueprint, jsonify, request

from leaderboard.config import CHART_METRIC, TOP_N
from leaderboard.database import get_session
from leaderboard.errors import LeaderboardError
from leaderboard.services.history import build_daily_series
from leaderboard.services.rankings import (
    get_snapshot_at,
    list_capture_days,
    list_snapshot_rows,
    select_top_n,
)

logger = logging.getLogger('routes.rankings')

bp = Blueprint('rankings', __name__)


def _limit_arg():
    raw = request.args.get('limit')
    if raw is None:
        return TOP_N
    try:
        limit = int(raw)
    except ValueError:
        raise LeaderboardError('limit must be a positive integer') from None
    if limit <= 0:
        raise LeaderboardError('limit must be a positive integer')
    return limit


@bp.route('/api2/xbltotal')
def list_rows():
    """Latest-sync leaderboard, or a filtered listing."""
    session = get_session()
    try:
        rows = list_snapshot_rows(
            session,
            name=request.args.get('name'),
            sync_id=request.args.get('sync_id'),
            folder_date=request.args.get('folder_date'),
            data_date=request.args.get('data_date'),
            include_all=request.args.get('all') == 'true',
        )
        return jsonify(rows)
    except LeaderboardError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        logger.exception("Listing failed")
        return jsonify({'error': str(e)}), 500
    finally:
        session.close()


@bp.route('/api2/xbltotal/dates')
def list_dates():
    """Every day with at least one capture, newest first."""
    session = get_session()
    try:
        return jsonify(list_capture_days(session))
    except Exception as e:
        logger.exception("Date listing failed")
        return jsonify({'error': str(e)}), 500
    finally:
        session.close()


@bp.route('/api2/xbltotal/top')
def top_players():
    """Top-N players of the latest sync by a metric."""
    metric = request.args.get('metric', CHART_METRIC)
    session = get_session()
    try:
        top = select_top_n(session, metric=metric, n=_limit_arg())
        return jsonify([{'name': entity.name, metric: entity.value} for entity in top])
    except LeaderboardError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        logger.exception("Top-N query failed")
        return jsonify({'error': str(e)}), 500
    finally:
        session.close()


@bp.route('/api2/xbltotal/chart')
def chart_data():
    """Daily history (one point per player per day) for the current top-N."""
    metric = request.args.get('metric', CHART_METRIC)
    session = get_session()
    try:
        top = select_top_n(session, metric=metric, n=_limit_arg())
        if not top:
            return jsonify({})

        series = build_daily_series(session, [entity.name for entity in top], metric=metric)
        chart = {
            name: [{'date': point.date, metric: point.value or 0} for point in points]
            for name, points in series.items()
        }
        logger.info("Returning chart data for %d players", len(chart))
        return jsonify(chart)
    except LeaderboardError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        logger.exception("Chart query failed")
        return jsonify({'error': str(e)}), 500
    finally:
        session.close()


@bp.route('/api2/xbltotal/<path:date>')
def snapshot_at(date):
    """Leaderboard from the capture hour closest to the requested time."""
    session = get_session()
    try:
        rows = get_snapshot_at(session, date)
        if not rows:
            return jsonify({'error': 'No data found for the specified date'}), 404
        return jsonify(rows)
    except LeaderboardError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        logger.exception("Snapshot lookup failed for %s", date)
        return jsonify({'error': str(e)}), 500
    finally:
        session.close()
