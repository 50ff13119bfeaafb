"""
Database-specific exception classes.
"""
import sqlite3

import psycopg
import pymysql
import sqlalchemy as sa


class DatabaseError(Exception):
    """Base class for all sqlfacade errors.
    """


class ConfigError(DatabaseError):
    """Settings file missing or unreadable, or a section is missing or under-specified.
    """


class ConnectError(DatabaseError):
    """Error establishing a database session.
    """


class StatementError(DatabaseError):
    """Error preparing, binding or executing a statement.
    """

    def __init__(self, message: str, sql: str | None = None) -> None:
        super().__init__(message)
        self.sql = sql


DbConnectionError = (
    psycopg.OperationalError,
    psycopg.InterfaceError,
    pymysql.err.OperationalError,
    pymysql.err.InterfaceError,
    sqlite3.OperationalError,
    sqlite3.InterfaceError,
    sa.exc.OperationalError,
    sa.exc.InterfaceError,
    ConnectError,
    )

ProgrammingError = (
    psycopg.ProgrammingError,
    psycopg.DatabaseError,
    pymysql.err.ProgrammingError,
    pymysql.err.DatabaseError,
    sqlite3.ProgrammingError,
    sqlite3.DatabaseError,
    sa.exc.SQLAlchemyError,
    StatementError,
    )

IntegrityError = (
    psycopg.IntegrityError,
    pymysql.err.IntegrityError,
    sqlite3.IntegrityError,
    sa.exc.IntegrityError,
    )
