"""Shared test fixtures."""
import pytest
from unittest.mock import patch
from sqlalchemy import text
from sqlalchemy.orm import sessionmaker

from leaderboard.database import Base, make_engine

GENERIC_COLUMNS = [f'field{i}' for i in range(1, 14)]


@pytest.fixture
def db_engine():
    """In-memory SQLite engine with the mapped schema (Sync, XBLTotal) created."""
    engine = make_engine('sqlite:///:memory:')
    import leaderboard.models.sync
    import leaderboard.models.leaderboard_entry
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    """SQLAlchemy session bound to in-memory SQLite. Rolls back after each test."""
    Session = sessionmaker(bind=db_engine)
    session = Session()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def make_table(db_session):
    """Factory fixture — create an unmapped snapshot table and insert rows.

    columns defaults to the positional field1..field13 layout. Rows are dicts
    keyed by physical column name.
    """
    def _make(name, columns=None, rows=()):
        columns = columns or GENERIC_COLUMNS
        ddl = ', '.join(f'"{c}" TEXT' for c in columns)
        db_session.execute(text(f'CREATE TABLE "{name}" ({ddl})'))
        for row in rows:
            cols = ', '.join(f'"{c}"' for c in row)
            params = ', '.join(f':{c}' for c in row)
            db_session.execute(text(f'INSERT INTO "{name}" ({cols}) VALUES ({params})'), row)
        db_session.commit()
    return _make


@pytest.fixture
def add_entry(db_session):
    """Factory fixture — insert one XBLTotal row."""
    from leaderboard.models.leaderboard_entry import LeaderboardEntry

    def _add(name, kudos=0, folder_date='2024-11-26 17:00:00', sync_id=None, data_date=None, **extra):
        entry = LeaderboardEntry(
            name=name,
            kudos=kudos,
            folder_date=folder_date,
            data_date=data_date or folder_date,
            sync_id=sync_id,
            **extra,
        )
        db_session.add(entry)
        db_session.commit()
        return entry
    return _add


@pytest.fixture
def add_sync(db_session):
    """Factory fixture — insert one Sync row."""
    from datetime import datetime
    from leaderboard.models.sync import Sync

    def _add(sync_id, sync_date):
        if isinstance(sync_date, str):
            sync_date = datetime.fromisoformat(sync_date)
        sync = Sync(sync_id=sync_id, sync_date=sync_date)
        db_session.add(sync)
        db_session.commit()
        return sync
    return _add


@pytest.fixture
def app():
    """Flask test app."""
    from leaderboard import create_app
    app = create_app()
    app.config['TESTING'] = True
    yield app


@pytest.fixture
def client(app, db_session):
    """Flask test client with route sessions pointed at the test DB.

    close() is disabled so handlers closing their session in `finally`
    don't invalidate the shared test session.
    """
    _real_close = db_session.close
    db_session.close = lambda: None
    with patch('leaderboard.routes.rankings.get_session', return_value=db_session):
        with app.test_client() as c:
            yield c
    db_session.close = _real_close
