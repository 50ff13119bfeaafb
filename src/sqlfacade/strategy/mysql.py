"""
MySQL-specific strategy implementation.

Sessions are opened through pymysql with the connection character set
forced to utf8mb4, so text is exchanged as UTF-8 whatever the server
default is. The id of the last insert is read with LAST_INSERT_ID(),
which is scoped to the current session.
"""
import logging
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa
from sqlfacade.strategy.base import DatabaseStrategy, register_strategy

if TYPE_CHECKING:
    from sqlfacade.options import DatabaseOptions

logger = logging.getLogger(__name__)

# utf8 in MySQL is the 3-byte subset; utf8mb4 is real UTF-8
MYSQL_CHARSETS = {'utf8': 'utf8mb4', 'utf-8': 'utf8mb4'}


@register_strategy('mysql')
class MySQLStrategy(DatabaseStrategy):
    """MySQL-specific operations.
    """

    last_insert_id_sql = 'SELECT LAST_INSERT_ID()'

    @property
    def dialect_name(self) -> str:
        """Return the dialect identifier for MySQL."""
        return 'mysql'

    def build_connection_url(self, options: 'DatabaseOptions') -> sa.URL:
        """Build the SQLAlchemy connection URL for MySQL."""
        charset = options.charset.lower()
        return sa.URL.create(
            drivername='mysql+pymysql',
            username=options.username,
            password=options.password,
            host=options.hostname,
            port=options.port or None,
            database=options.database,
            query={'charset': MYSQL_CHARSETS.get(charset, charset)},
        )

    def get_engine_kwargs(self, options: 'DatabaseOptions') -> dict[str, Any]:
        """Return SQLAlchemy create_engine kwargs for MySQL."""
        if options.timeout:
            return {'connect_args': {'connect_timeout': options.timeout}}
        return {}

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return required options for MySQL connections."""
        return ['hostname', 'username', 'database']
