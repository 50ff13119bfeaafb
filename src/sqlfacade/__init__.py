"""
Single-connection database facade over SQLAlchemy for MySQL, PostgreSQL and SQLite.

Statements are raw SQL with `:name` bind parameters; results are shaped by
the statement verb:

    import sqlfacade

    db = sqlfacade.connect('settings.ini', 'db1')
    rows = db.query('SELECT * FROM orders WHERE id = :id', [('id', '7', 'INT')])
    count = db.query('DELETE FROM sessions WHERE expired = :e', {'e': 1})
"""
__version__ = '0.1.0'

import logging

from sqlfacade.client import DB, connect
from sqlfacade.config import ConfigSource
from sqlfacade.exceptions import ConfigError, ConnectError, DatabaseError
from sqlfacade.exceptions import DbConnectionError, IntegrityError
from sqlfacade.exceptions import ProgrammingError, StatementError
from sqlfacade.options import DatabaseOptions
from sqlfacade.params import BindType, TypedBinding, UntypedBinding
from sqlfacade.results import FetchMode, StatementVerb, statement_verb

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    'DB',
    'connect',
    'ConfigSource',
    'DatabaseOptions',
    'BindType',
    'UntypedBinding',
    'TypedBinding',
    'FetchMode',
    'StatementVerb',
    'statement_verb',
    'DatabaseError',
    'ConfigError',
    'ConnectError',
    'StatementError',
    'DbConnectionError',
    'IntegrityError',
    'ProgrammingError',
]
