"""
Database connection handling with SQLAlchemy.

This module provides:
1. `create_url_from_options()` / `create_engine_for_options()` turning
   `DatabaseOptions` into a SQLAlchemy engine through the dialect strategy
2. The `ConnectionManager` class owning the single live connection of a
   facade, with lazy connect, explicit close and implicit reconnect

Engines use `NullPool`: closing the connection really closes the session.
Sessions run in autocommit, driver errors surface as exceptions, and
parameters are always bound by the driver, never interpolated client side.
"""
import logging
import pathlib
from collections.abc import Callable
from typing import Any

import sqlalchemy as sa
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool
from sqlfacade.config import ConfigSource
from sqlfacade.exceptions import ConfigError, ConnectError, DbConnectionError
from sqlfacade.logs import default_logger
from sqlfacade.options import DatabaseOptions
from sqlfacade.strategy import DatabaseStrategy, get_strategy

__all__ = [
    'ConnectionManager',
    'create_url_from_options',
    'create_engine_for_options',
]

logger = logging.getLogger(__name__)


def create_url_from_options(options: DatabaseOptions) -> sa.URL:
    """Convert DatabaseOptions to SQLAlchemy URL.
    """
    return get_strategy(options.drivername).build_connection_url(options)


def create_engine_for_options(options: DatabaseOptions,
                              engine_factory: Callable[..., Engine] = sa.create_engine,
                              **kwargs: Any) -> Engine:
    """Create an unpooled SQLAlchemy engine for the given options.
    """
    strategy = get_strategy(options.drivername)
    engine_kwargs: dict[str, Any] = {'echo': False, 'poolclass': NullPool}
    engine_kwargs.update(strategy.get_engine_kwargs(options))
    engine_kwargs.update(kwargs)

    engine = engine_factory(create_url_from_options(options), **engine_kwargs)
    logger.debug(f'Created new engine for {options.drivername}')
    return engine


class ConnectionManager:
    """Owns one database session and the settings it was opened from.

    `connected` is true exactly when a live SQLAlchemy connection is held.
    Failed connects leave the manager disconnected.
    """

    def __init__(self, config_file: str | pathlib.Path | None = None,
                 logger: Any = None,
                 engine_factory: Callable[..., Engine] = sa.create_engine) -> None:
        self.config_file = config_file
        self.logger = logger or default_logger()
        self.engine_factory = engine_factory
        self.engine: Engine | None = None
        self.sa_connection: sa.engine.Connection | None = None
        self.options: DatabaseOptions | None = None
        self.config_name: str | None = None
        self.from_settings = False
        self.calls = 0
        self.time = 0.0

    @property
    def connected(self) -> bool:
        return self.sa_connection is not None and not self.sa_connection.closed

    @property
    def strategy(self) -> DatabaseStrategy | None:
        if self.options is None:
            return None
        return get_strategy(self.options.drivername)

    @property
    def dialect(self) -> str | None:
        """Return the dialect name ('mysql', 'postgresql' or 'sqlite')."""
        return self.options.drivername if self.options else None

    def set_config_file(self, path: str | pathlib.Path) -> None:
        """Record where settings are read from. No I/O happens here."""
        self.config_file = path

    def connect(self, config_name: str | None = None) -> None:
        """Resolve a settings section and open a session with it.

        Without a name the first section of the settings file is used.

        Raises
            ConfigError: Settings cannot be read or the section is unusable
            ConnectError: The driver cannot open a session
        """
        self.close()
        try:
            if self.config_file is None:
                raise ConfigError('Check DB INI. No settings file has been set')
            name, options = ConfigSource(self.config_file).options(config_name)
        except ConfigError as err:
            self.logger.critical(str(err))
            raise
        self.connect_options(options, name)
        self.from_settings = True

    def connect_options(self, options: DatabaseOptions, name: str | None = None) -> None:
        """Open a session from already resolved options.

        Raises
            ConnectError: The driver cannot open a session
        """
        self.close()
        strategy = get_strategy(options.drivername)
        engine = None
        sa_connection = None
        try:
            engine = create_engine_for_options(options, self.engine_factory)
            sa_connection = engine.connect().execution_options(isolation_level='AUTOCOMMIT')
            strategy.configure_connection(sa_connection, options)
        except (sa.exc.SQLAlchemyError, *DbConnectionError) as err:
            self.logger.critical(str(err))
            if sa_connection is not None:
                sa_connection.close()
            if engine is not None:
                engine.dispose()
            raise ConnectError(f'Cannot connect to {options}: {err}') from err

        self.engine = engine
        self.sa_connection = sa_connection
        self.options = options
        self.config_name = name
        self.from_settings = False
        logger.debug(f'Connected to {options} using settings {name!r}')

    def close(self) -> None:
        """Drop the session. The next statement reconnects implicitly.
        """
        if self.sa_connection is not None:
            try:
                if not self.sa_connection.closed:
                    self.sa_connection.close()
            finally:
                if self.engine is not None:
                    self.engine.dispose()
                logger.debug(f'Connection closed: {self.calls} queries in {self.time:.2f}s'
                             f' (avg: {self.time/max(1, self.calls):.3f}s per query)')
        self.sa_connection = None
        self.engine = None

    def ensure_connected(self) -> sa.engine.Connection:
        """Return the live connection, connecting first if needed.

        Reconnects the way the last connection was opened: with the same
        options when they were given in code, else with the last chosen
        settings section (the first section when none was chosen yet).
        """
        if not self.connected:
            if self.options is not None and not self.from_settings:
                self.connect_options(self.options, self.config_name)
            else:
                self.connect(self.config_name)
        return self.sa_connection

    def addcall(self, elapsed: float) -> None:
        """Track execution statistics
        """
        self.time += elapsed
        self.calls += 1

    def last_insert_id(self) -> Any | None:
        """Id generated by the most recent insert, None when not connected.
        """
        if not self.connected:
            return None
        return self.strategy.last_insert_id(self.sa_connection)

