"""
Settings file handling.

A settings file is an INI document with one section per database:

    [db1]
    driver = mysql
    host = localhost
    dbname = shop
    user = shop
    password = secret

Sections are looked up by name; without a name the first declared section
is used. A file may start with a `;<?php return; ?>` style guard line, it is
read as a comment.
"""
import configparser
import logging
import pathlib

from sqlfacade.exceptions import ConfigError
from sqlfacade.options import REQUIRED_SETTINGS, DatabaseOptions

__all__ = [
    'ConfigSource',
]

logger = logging.getLogger(__name__)


class ConfigSource:
    """Named connection settings read from one INI file.
    """

    def __init__(self, path: str | pathlib.Path) -> None:
        self.path = pathlib.Path(path)

    def read(self) -> configparser.ConfigParser:
        """Parse the file.

        Raises
            ConfigError: If the file is missing, unparsable or has no sections
        """
        parser = configparser.ConfigParser(interpolation=None)
        try:
            found = parser.read(self.path, encoding='utf-8')
        except (configparser.Error, UnicodeDecodeError) as err:
            raise ConfigError(
                f'Caught exception while attempting to process DB settings INI file: {err}') from err
        if not found:
            raise ConfigError(f'Check DB INI. Settings file {self.path} cannot be read')
        if not parser.sections():
            raise ConfigError(f'Check DB INI. No settings found in {self.path}')
        return parser

    def resolve(self, name: str | None = None) -> tuple[str, dict[str, str]]:
        """Return `(section name, settings)` for a named or the first section.

        Raises
            ConfigError: If the section does not exist or lacks a required key
        """
        parser = self.read()
        if name is None:
            name = parser.sections()[0]
            logger.debug(f'No configuration name given, using first section {name!r}')
        elif not parser.has_section(name):
            raise ConfigError(
                f'Check DB INI. There are no settings given for requested DB "{name}"')

        settings = dict(parser.items(name))
        missing = [key for key in REQUIRED_SETTINGS if key not in settings]
        if missing:
            raise ConfigError(
                f'Check DB INI. Not enough parameters to make DB connection with settings "{name}"'
                f' (missing {", ".join(missing)})')
        return name, settings

    def options(self, name: str | None = None) -> tuple[str, DatabaseOptions]:
        """Resolve a section into validated `DatabaseOptions`.

        Raises
            ConfigError: If the section cannot be resolved or holds invalid values
        """
        name, settings = self.resolve(name)
        try:
            return name, DatabaseOptions.from_section(settings)
        except ValueError as err:
            raise ConfigError(f'Check DB INI. Invalid settings for "{name}": {err}') from err
