"""
Base strategy interface for dialect-specific behaviour.

The facade itself only speaks SQLAlchemy `text()` statements with named
`:param` markers. What differs between databases is how a session is
opened (URL, encoding, driver arguments), how it is configured once open,
and how the id of the most recent insert is retrieved. Each concrete
strategy covers those three concerns for one dialect.
"""
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa

if TYPE_CHECKING:
    from sqlfacade.options import DatabaseOptions

logger = logging.getLogger(__name__)

# Registry of dialect name -> strategy class
# Defined here to avoid circular imports (concrete strategies import from base)
_STRATEGY_REGISTRY: dict[str, type['DatabaseStrategy']] = {}


def register_strategy(dialect: str):
    """Decorator to register a strategy class for a dialect.

    Usage:
        @register_strategy('mysql')
        class MySQLStrategy(DatabaseStrategy):
            ...
    """
    def decorator(cls: type['DatabaseStrategy']) -> type['DatabaseStrategy']:
        _STRATEGY_REGISTRY[dialect] = cls
        return cls
    return decorator


class DatabaseStrategy(ABC):
    """Base class for dialect-specific operations.
    """

    # SQL returning the id generated by the last insert on this session
    last_insert_id_sql: str = ''

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """Return the dialect identifier."""

    @abstractmethod
    def build_connection_url(self, options: 'DatabaseOptions') -> sa.URL:
        """Build the SQLAlchemy connection URL.

        Args:
            options: Resolved connection options

        Returns
            sqlalchemy.URL for `create_engine`
        """

    def get_engine_kwargs(self, options: 'DatabaseOptions') -> dict[str, Any]:
        """Return extra `create_engine` kwargs (driver connect args).
        """
        return {}

    def configure_connection(self, sa_connection: sa.engine.Connection,
                             options: 'DatabaseOptions') -> None:
        """Apply session settings right after the connection is opened.

        Default does nothing; encoding is normally handled by connect args.
        """

    def last_insert_id(self, sa_connection: sa.engine.Connection) -> Any:
        """Return the id generated by the most recent insert on this session.

        Returns None when the database reports no such id.
        """
        try:
            value = sa_connection.exec_driver_sql(self.last_insert_id_sql).scalar()
        except sa.exc.DBAPIError as err:
            logger.debug(f'No last insert id available: {err}')
            return None
        if not value:
            return None
        return value

    @classmethod
    @abstractmethod
    def get_required_options(cls) -> list[str]:
        """Return list of required option field names for this dialect.

        Returns
            List of field names that must have non-None/non-empty values
        """

    @classmethod
    def validate_options(cls, options: 'DatabaseOptions') -> None:
        """Validate options for this dialect.

        Args:
            options: DatabaseOptions to validate

        Raises
            ValueError: If any required field is None or empty
        """
        for field in cls.get_required_options():
            if not getattr(options, field):
                raise ValueError(f'field {field} cannot be None or empty')
