"""
SQLite-specific strategy implementation.

SQLite stores text as UTF-8 natively, so no encoding setup is needed.
The `dbname` setting is the database file path (or `:memory:`); host,
user and password are accepted but unused.
"""
import logging
import sqlite3
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa
from sqlfacade.strategy.base import DatabaseStrategy, register_strategy

if TYPE_CHECKING:
    from sqlfacade.options import DatabaseOptions

logger = logging.getLogger(__name__)


@register_strategy('sqlite')
class SQLiteStrategy(DatabaseStrategy):
    """SQLite-specific operations.
    """

    last_insert_id_sql = 'SELECT last_insert_rowid()'

    @property
    def dialect_name(self) -> str:
        """Return the dialect identifier for SQLite."""
        return 'sqlite'

    def build_connection_url(self, options: 'DatabaseOptions') -> sa.URL:
        """Build the SQLAlchemy connection URL for SQLite."""
        return sa.URL.create(drivername='sqlite', database=options.database)

    def get_engine_kwargs(self, options: 'DatabaseOptions') -> dict[str, Any]:
        """Return SQLAlchemy create_engine kwargs for SQLite."""
        connect_args: dict[str, Any] = {
            'detect_types': sqlite3.PARSE_DECLTYPES | sqlite3.PARSE_COLNAMES
        }
        if options.timeout:
            connect_args['timeout'] = options.timeout
        return {'connect_args': connect_args}

    def configure_connection(self, sa_connection: sa.engine.Connection,
                             options: 'DatabaseOptions') -> None:
        """Configure connection settings for SQLite.
        """
        sa_connection.exec_driver_sql('PRAGMA foreign_keys = ON')

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return required options for SQLite connections."""
        return ['database']
