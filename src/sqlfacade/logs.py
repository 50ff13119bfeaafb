"""Logging setup for the facade.

Each `DB` instance reports connection and statement failures through a
logger object. By default that is the package logger, which carries a
NullHandler so nothing is printed unless the application configures
logging. `file_logger` builds a logger writing one dated file per day,
used by `DB.set_log_location`.
"""
import datetime
import logging
import os
import pathlib

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
LOG_DATEFMT = '%Y-%m-%d %H:%M:%S'

PACKAGE_LOGGER = 'sqlfacade'


def default_logger() -> logging.Logger:
    """Return the package logger used when no logger is injected."""
    return logging.getLogger(PACKAGE_LOGGER)


def resolve_level(level: int | str) -> int:
    """Map a level name (`'info'`, `'WARNING'`) or number to a logging level.
    """
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ValueError(f'Unknown log level: {level}')
    return value


def file_logger(directory: str | pathlib.Path = './', level: int | str = 'info',
                name: str | None = None) -> logging.Logger:
    """Return a logger writing to `<directory>/log_<YYYY-MM-DD>.txt`.

    The directory is created if needed. Calling again for the same
    directory reuses the logger without stacking handlers.
    """
    directory = pathlib.Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    log_file = directory / f'log_{datetime.date.today():%Y-%m-%d}.txt'

    logger = logging.getLogger(name or f'{PACKAGE_LOGGER}.file.{directory.resolve()}')
    logger.setLevel(resolve_level(level))
    if not any(isinstance(h, logging.FileHandler) and h.baseFilename == os.path.abspath(log_file)
               for h in logger.handlers):
        handler = logging.FileHandler(log_file, encoding='utf-8')
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
        logger.addHandler(handler)
    return logger
