"""
The `DB` facade.

One object that
- keeps one database connection, opened lazily from a settings file
- collects named bind parameters for the next statement
- runs raw SQL and returns rows, a row, a column, a scalar or a count

    db = DB('settings.ini')
    db.connect('db1')
    db.set_bind_parameters([('firstname', 'John'), ('age', '19', 'INT')])
    people = db.query('SELECT * FROM persons WHERE firstname = :firstname AND age = :age')
    ages = db.column('SELECT age FROM persons')
    changed = db.query('UPDATE persons SET firstname = :f WHERE id = :id', {'f': 'Johnny', 'id': 1})

Failures raise `ConfigError`, `ConnectError` or `StatementError` after one
critical entry on the instance logger.
"""
import logging
import pathlib
from collections.abc import Callable, Iterable, Mapping
from typing import Any, Self

import sqlalchemy as sa
from sqlalchemy.engine import Engine
from sqlfacade.connection import ConnectionManager
from sqlfacade.exceptions import ConfigError
from sqlfacade.logs import default_logger, file_logger
from sqlfacade.options import DatabaseOptions
from sqlfacade.params import Binding, ParameterBinder
from sqlfacade.query import Params, QueryExecutor
from sqlfacade.results import FetchMode, first_column, first_value
from sqlfacade.results import shape_result, shape_row

__all__ = [
    'DB',
    'connect',
]

logger = logging.getLogger(__name__)


class DB:
    """Light-weight facade around a single database connection.
    """

    def __init__(self, config_file: str | pathlib.Path | None = None,
                 logger: Any = None,
                 engine_factory: Callable[..., Engine] = sa.create_engine) -> None:
        self._logger = logger or default_logger()
        self.manager = ConnectionManager(config_file, self._logger, engine_factory)
        self.binder = ParameterBinder(self._logger)
        self.executor = QueryExecutor(self.manager, self.binder, self._logger)

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        self.close_connection()

    def __repr__(self) -> str:
        state = 'connected' if self.connected else 'disconnected'
        return f'<DB {self.config_name or "-"} {state}>'

    # settings and logging

    @property
    def logger(self) -> Any:
        return self._logger

    def set_logger(self, logger: Any) -> None:
        """Send failure and status messages to `logger`.

        Any object with `info`, `warning` and `critical` methods will do;
        None restores the package logger.
        """
        logger = logger or default_logger()
        self._logger = logger
        self.manager.logger = logger
        self.binder.logger = logger
        self.executor.logger = logger
        logger.info('Logging started successfully for sqlfacade.DB')

    def set_log_location(self, directory: str | pathlib.Path = './',
                         level: int | str = 'info') -> None:
        """Log to a dated file `log_<YYYY-MM-DD>.txt` in `directory`."""
        self.set_logger(file_logger(directory, level))

    def set_config_file(self, path: str | pathlib.Path) -> None:
        """Set the settings file to read connection sections from."""
        self.manager.set_config_file(path)

    # connection

    @property
    def connected(self) -> bool:
        return self.manager.connected

    @property
    def config_name(self) -> str | None:
        """Name of the settings section of the current (or last) connection."""
        return self.manager.config_name

    @property
    def dialect(self) -> str | None:
        return self.manager.dialect

    def connect(self, config_name: str | None = None) -> None:
        """Connect using a named settings section, or the first one.
        """
        self.manager.connect(config_name)

    def connect_options(self, options: DatabaseOptions | Mapping[str, Any]) -> None:
        """Connect from options given in code instead of a settings file.

        A mapping uses the settings file keys (`host`, `dbname`, ...).

        Raises
            ConfigError: The mapping holds invalid values
            ConnectError: The driver cannot open a session
        """
        if not isinstance(options, DatabaseOptions):
            try:
                options = DatabaseOptions.from_section(options)
            except ValueError as err:
                self._logger.critical(f'Invalid connection options: {err}')
                raise ConfigError(f'Invalid connection options: {err}') from err
        self.manager.connect_options(options)

    def close_connection(self) -> None:
        """Close the connection; the next statement reconnects."""
        self.manager.close()

    # parameters

    @property
    def pending_parameters(self) -> tuple[Binding, ...]:
        return self.binder.pending

    def bind(self, name: str, value: Any) -> None:
        """Bind one value to `:name` for the next statement."""
        self.binder.bind(name, value)

    def bind_more(self, params: Mapping[str, Any]) -> None:
        """Bind name/value pairs, unless parameters are already pending."""
        self.binder.bind_more(params)

    def set_bind_parameters(self, params: Iterable[Any]) -> None:
        """Bind `(name, value)` or `(name, value, type)` items, unless parameters are already pending."""
        self.binder.set_bind_parameters(params)

    # statements

    def _fetch_mode(self, fetch_mode: FetchMode | str | None) -> FetchMode:
        try:
            return FetchMode.parse(fetch_mode)
        except ValueError:
            self.binder.clear()
            raise

    def query(self, sql: str, params: Params = None,
              fetch_mode: FetchMode | str = FetchMode.ASSOC) -> Any:
        """Run a statement and return a result shaped by its verb.

        Returns
            select/show: all rows in `fetch_mode` shape
            insert/update/delete: number of affected rows
            anything else: None
        """
        mode = self._fetch_mode(fetch_mode)
        result, verb = self.executor.execute(sql, params)
        if result is None:
            return None
        return self.executor.fetch(result, shape_result, verb, mode, self._logger)

    def column(self, sql: str, params: Params = None) -> list[Any]:
        """Return the first column of every row."""
        result, _ = self.executor.execute(sql, params)
        if result is None:
            return []
        return self.executor.fetch(result, first_column)

    def row(self, sql: str, params: Params = None,
            fetch_mode: FetchMode | str = FetchMode.ASSOC) -> Any | None:
        """Return the first row, or None if there is none."""
        mode = self._fetch_mode(fetch_mode)
        if mode.is_frame:
            self.binder.clear()
            raise ValueError(f'Fetch mode {mode.name} shapes whole results, not single rows')
        result, _ = self.executor.execute(sql, params)
        if result is None:
            return None
        return self.executor.fetch(result, shape_row, mode)

    def single(self, sql: str, params: Params = None) -> Any | None:
        """Return the first column of the first row, or None."""
        result, _ = self.executor.execute(sql, params)
        if result is None:
            return None
        return self.executor.fetch(result, first_value)

    def last_insert_id(self) -> Any | None:
        """Id generated by the most recent insert on this connection."""
        return self.manager.last_insert_id()


def connect(config_file: str | pathlib.Path, config_name: str | None = None,
            logger: Any = None) -> DB:
    """Return a connected `DB` for a settings file section.

    Raises
        ConfigError: Settings cannot be read or the section is unusable
        ConnectError: The driver cannot open a session
    """
    db = DB(config_file, logger=logger)
    db.connect(config_name)
    return db
