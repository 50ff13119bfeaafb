from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from sqlfacade.strategy import get_available_dialects, get_strategy_class
from sqlfacade.strategy import is_supported_dialect

from libb import ConfigOptions

__all__ = [
    'DatabaseOptions',
    'REQUIRED_SETTINGS',
]

# Keys every settings section must carry, whatever the driver
REQUIRED_SETTINGS = ('host', 'dbname', 'user', 'password')


@dataclass
class DatabaseOptions(ConfigOptions):
    """Options

    supported driver names: `mysql`, `postgresql`, `sqlite`

    - charset: session encoding forced on connect (default: utf8)
    - timeout: driver connect timeout in seconds, 0 leaves the driver default
    """
    drivername: str = 'mysql'
    hostname: str = None
    username: str = None
    password: str = None
    database: str = None
    port: int = 0
    timeout: int = 0
    charset: str = 'utf8'

    def __post_init__(self):
        if not is_supported_dialect(self.drivername):
            available = get_available_dialects()
            raise ValueError(f'drivername must be one of: {available}')
        self.port = int(self.port or 0)
        self.timeout = int(self.timeout or 0)
        strategy_cls = get_strategy_class(self.drivername)
        strategy_cls.validate_options(self)

    @classmethod
    def from_section(cls, section: Mapping[str, Any]) -> 'DatabaseOptions':
        """Build options from one settings section.

        Section keys follow the settings file naming (`host`, `dbname`,
        `user`, `password`, optional `driver`, `port`, `timeout`, `charset`).
        """
        return cls(
            drivername=section.get('driver') or 'mysql',
            hostname=section.get('host'),
            username=section.get('user'),
            password=section.get('password'),
            database=section.get('dbname'),
            port=section.get('port') or 0,
            timeout=section.get('timeout') or 0,
            charset=section.get('charset') or 'utf8',
        )

    def __str__(self) -> str:
        return (f'{self.drivername}://{self.username}@{self.hostname}'
                f'{":" + str(self.port) if self.port else ""}/{self.database}')
