"""
Fixtures for SQLite-specific integration tests.
"""
import pytest
from sqlfacade import DB


@pytest.fixture
def idle_db(sqlite_settings, recording_logger):
    """Facade with settings but no connection yet."""
    db = DB(sqlite_settings, logger=recording_logger)
    yield db
    db.close_connection()
