"""Logging setup tests."""
import datetime
import logging

import pytest
from sqlfacade import DB
from sqlfacade.logs import PACKAGE_LOGGER, default_logger, file_logger
from sqlfacade.logs import resolve_level


def _today_log(directory):
    return directory / f'log_{datetime.date.today():%Y-%m-%d}.txt'


def _close_handlers(logger):
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def test_default_logger_is_package_logger():
    logger = default_logger()
    assert logger.name == PACKAGE_LOGGER
    assert any(isinstance(h, logging.NullHandler) for h in logger.handlers)


@pytest.mark.parametrize(('level', 'expected'), [
    ('info', logging.INFO),
    ('WARNING', logging.WARNING),
    (logging.DEBUG, logging.DEBUG),
])
def test_resolve_level(level, expected):
    assert resolve_level(level) == expected


def test_resolve_level_unknown():
    with pytest.raises(ValueError, match='Unknown log level'):
        resolve_level('loud')


def test_file_logger_writes_dated_file(tmp_path):
    directory = tmp_path / 'logs'
    logger = file_logger(directory)
    try:
        logger.info('hello')
        for handler in logger.handlers:
            handler.flush()
        assert '[INFO]' in _today_log(directory).read_text(encoding='utf-8')
        assert 'hello' in _today_log(directory).read_text(encoding='utf-8')
    finally:
        _close_handlers(logger)


def test_file_logger_does_not_stack_handlers(tmp_path):
    logger = file_logger(tmp_path)
    try:
        assert file_logger(tmp_path) is logger
        assert len(logger.handlers) == 1
    finally:
        _close_handlers(logger)


def test_set_log_location(tmp_path):
    db = DB()
    db.set_log_location(tmp_path, 'info')
    try:
        for handler in db.logger.handlers:
            handler.flush()
        content = _today_log(tmp_path).read_text(encoding='utf-8')
        assert 'Logging started successfully for sqlfacade.DB' in content
    finally:
        _close_handlers(db.logger)


def test_set_logger_reaches_components(recording_logger):
    db = DB()
    db.set_logger(recording_logger)
    assert db.manager.logger is recording_logger
    assert db.binder.logger is recording_logger
    assert db.executor.logger is recording_logger
    assert recording_logger.messages('info') == ['Logging started successfully for sqlfacade.DB']


def test_set_logger_none_restores_default(recording_logger):
    db = DB(logger=recording_logger)
    db.set_logger(None)
    assert db.logger is default_logger()
    assert db.manager.logger is default_logger()
    assert db.binder.logger is default_logger()
    assert db.executor.logger is default_logger()


if __name__ == '__main__':
    __import__('pytest').main([__file__])
