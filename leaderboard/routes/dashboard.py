"""
Dashboard routes — service index and health check.
"""
from flask import Blueprint, jsonify

bp = Blueprint('dashboard', __name__)


@bp.route('/')
def index():
    """List the available endpoints."""
    return jsonify({
        'service': 'leaderboard-history',
        'endpoints': [
            '/api2/xbltotal',
            '/api2/xbltotal/dates',
            '/api2/xbltotal/top',
            '/api2/xbltotal/chart',
            '/api2/xbltotal/<date>',
        ],
    })


@bp.route('/health')
def health_check():
    """Health check endpoint."""
    return jsonify({"status": "healthy"}), 200
