"""
Flask application factory.

Creates and configures the app, registers all blueprints.
"""
import importlib

from flask import Flask


def create_app():
    """Create and configure the Flask application."""
    from leaderboard.logging_config import configure_logging

    app = Flask(__name__)

    configure_logging(app)

    app.json.sort_keys = False

    from leaderboard.routes.dashboard import bp as dashboard_bp
    from leaderboard.routes.rankings import bp as rankings_bp

    app.register_blueprint(dashboard_bp)
    app.register_blueprint(rankings_bp)

    # Register mapped tables on Base.metadata. Schema creation is left to the
    # ingestion side (scripts/ingest_leaderboard.py) or existing databases.
    importlib.import_module('leaderboard.models.sync')
    importlib.import_module('leaderboard.models.leaderboard_entry')

    return app
