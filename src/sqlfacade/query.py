"""
Statement execution.

`QueryExecutor.execute` runs one statement through the pipeline

1. ensure the connection is open
2. prepare the SQL as a SQLAlchemy `text()` statement
3. merge inline parameters into the pending bindings
4. bind every pending binding by name
5. execute
6. clear the pending bindings, whatever happened

and hands back the live result together with the statement verb. Driver
failures in steps 2-5 are logged as critical (the SQL itself at info) and
raised as `StatementError`. Rows are then read through `fetch`, which
treats driver failures while stepping rows the same way.
"""
import logging
import time
from collections.abc import Callable, Iterable, Mapping
from functools import wraps
from typing import Any

import sqlalchemy as sa
from sqlfacade.connection import ConnectionManager
from sqlfacade.exceptions import StatementError
from sqlfacade.logs import default_logger
from sqlfacade.params import ParameterBinder
from sqlfacade.results import StatementVerb, statement_verb

__all__ = [
    'QueryExecutor',
    'dumpsql',
]

logger = logging.getLogger(__name__)

Params = Mapping[str, Any] | Iterable[Any] | None


def dumpsql(func):
    """Decorator for logging SQL statements, bindings and timing."""
    @wraps(func)
    def wrapper(self, connection: Any, sql: str, *args: Any, **kwargs: Any):
        start = time.time()
        logger.debug(f'SQL:\n{sql}\nargs: {args}')
        try:
            result = func(self, connection, sql, *args, **kwargs)
            logger.debug(f'Bound {len(self.binder)} parameters')
            return result
        finally:
            elapsed = time.time() - start
            self.manager.addcall(elapsed)
            logger.debug(f'Query time: {elapsed:.4f}s')
    return wrapper


class QueryExecutor:
    """Prepares, binds and executes statements on a managed connection.

    Holds the most recently executed statement in `statement`; it is
    cleared when a statement fails.
    """

    def __init__(self, manager: ConnectionManager, binder: ParameterBinder,
                 logger: Any = None) -> None:
        self.manager = manager
        self.binder = binder
        self.logger = logger or default_logger()
        self.statement: sa.TextClause | None = None

    def execute(self, sql: str, params: Params = None) -> tuple[sa.CursorResult | None, StatementVerb]:
        """Run a statement.

        Returns
            `(result, verb)`; result is None when the SQL is empty

        Raises
            ConfigError, ConnectError: When connecting first fails
            StatementError: When preparing, binding or executing fails
        """
        sql = sql.strip()
        verb = statement_verb(sql)
        try:
            if not sql:
                self.statement = None
                self.logger.warning('No query given')
                return None, verb
            connection = self.manager.ensure_connected()
            return self._run(connection, sql, params), verb
        finally:
            self.binder.clear()

    @dumpsql
    def _run(self, connection: sa.engine.Connection, sql: str, params: Params) -> sa.CursorResult:
        try:
            statement = sa.text(sql)
            self.binder.add(params)
            statement = self.binder.apply(statement)
            result = connection.execute(statement)
        except (sa.exc.SQLAlchemyError, ValueError, TypeError) as err:
            raise self._failed(err, sql) from err
        self.statement = statement
        return result

    def fetch(self, result: sa.CursorResult, shaper: Callable[..., Any], *args: Any) -> Any:
        """Read a result through `shaper(result, *args)`.

        Rows may still be stepped by the driver here, so fetch errors are
        handled like execution errors.

        Raises
            StatementError: When the driver fails while rows are read
        """
        try:
            return shaper(result, *args)
        except sa.exc.SQLAlchemyError as err:
            sql = str(self.statement) if self.statement is not None else None
            raise self._failed(err, sql) from err

    def _failed(self, err: Exception, sql: str | None) -> StatementError:
        self.statement = None
        self.logger.critical(str(err))
        self.logger.info(f'SQL: {sql}')
        if isinstance(err, sa.exc.DBAPIError) and err.connection_invalidated:
            self.manager.close()
        return StatementError(str(err), sql)
