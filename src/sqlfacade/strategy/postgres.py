"""
PostgreSQL-specific strategy implementation.

Sessions are opened through psycopg with `client_encoding` set from the
configured charset. The id of the last insert comes from lastval(), which
fails when no sequence has been used in the session yet; that case is
reported as no id.
"""
import logging
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa
from sqlfacade.strategy.base import DatabaseStrategy, register_strategy

if TYPE_CHECKING:
    from sqlfacade.options import DatabaseOptions

logger = logging.getLogger(__name__)


@register_strategy('postgresql')
class PostgresStrategy(DatabaseStrategy):
    """PostgreSQL-specific operations.
    """

    last_insert_id_sql = 'SELECT lastval()'

    @property
    def dialect_name(self) -> str:
        """Return the dialect identifier for PostgreSQL."""
        return 'postgresql'

    def build_connection_url(self, options: 'DatabaseOptions') -> sa.URL:
        """Build the SQLAlchemy connection URL for PostgreSQL."""
        query = {}
        if options.timeout:
            query['connect_timeout'] = str(options.timeout)

        return sa.URL.create(
            drivername='postgresql+psycopg',
            username=options.username,
            password=options.password,
            host=options.hostname,
            port=options.port or None,
            database=options.database,
            query=query,
        )

    def get_engine_kwargs(self, options: 'DatabaseOptions') -> dict[str, Any]:
        """Return SQLAlchemy create_engine kwargs for PostgreSQL."""
        return {'connect_args': {'client_encoding': options.charset}}

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return required options for PostgreSQL connections."""
        return ['hostname', 'username', 'database']
