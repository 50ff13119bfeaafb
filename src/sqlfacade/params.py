"""
Named bind parameters.

Parameters are collected on the facade between statements and attached to
the next statement by name. A binding is either untyped, bound as a string
like the driver's default parameter type, or typed, carrying a `BindType`
hint that selects the SQLAlchemy type (and coerces the value to match it):

    >>> b = UntypedBinding('id', 42)
    >>> b.placeholder
    ':id'
    >>> b.bind_value
    '42'
    >>> TypedBinding(':id', '42', BindType.parse('PDO::PARAM_INT')).bind_value
    42

The pending set is filled once per statement: `bind_more` and
`set_bind_parameters` do nothing while bindings are already pending, so a
statement is never bound twice. `bind` always appends.
"""
import enum
import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

import sqlalchemy as sa
from sqlfacade.logs import default_logger

__all__ = [
    'BindType',
    'Binding',
    'UntypedBinding',
    'TypedBinding',
    'ParameterBinder',
    'to_binding',
]

logger = logging.getLogger(__name__)

PARAM_MARKER = ':'

_TRUE_STRINGS = {'1', 'true', 't', 'yes', 'y', 'on'}


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def _to_bytes(value: Any) -> bytes:
    if isinstance(value, str):
        return value.encode('utf-8')
    return bytes(value)


class BindType(enum.Enum):
    """Bind type hints.
    """
    STR = 'str'
    INT = 'int'
    BOOL = 'bool'
    NULL = 'null'
    LOB = 'lob'

    @classmethod
    def parse(cls, hint: 'BindType | str') -> 'BindType':
        """Parse a hint such as `'INT'`, `'int_type'`, `'PDO::PARAM_INT'`.

        Raises
            ValueError: If the hint names no known type
        """
        if isinstance(hint, cls):
            return hint
        if not isinstance(hint, str):
            raise ValueError(f'Bind type hint must be a string, got {type(hint).__name__}')
        key = hint.strip().upper()
        key = key.removeprefix('PDO::').removeprefix('PARAM_').removesuffix('_TYPE')
        key = _ALIASES.get(key, key)
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f'Unknown bind type hint: {hint!r}') from None

    def sa_type(self) -> sa.types.TypeEngine:
        """SQLAlchemy type used for binding."""
        return {
            BindType.STR: sa.String,
            BindType.INT: sa.Integer,
            BindType.BOOL: sa.Boolean,
            BindType.NULL: sa.types.NullType,
            BindType.LOB: sa.LargeBinary,
        }[self]()

    def coerce(self, value: Any) -> Any:
        """Convert a value to the Python type matching this hint."""
        if value is None or self is BindType.NULL:
            return None
        if self is BindType.INT:
            return int(value)
        if self is BindType.BOOL:
            return _to_bool(value)
        if self is BindType.LOB:
            return _to_bytes(value)
        return str(value)


_ALIASES = {
    'STRING': 'STR',
    'TEXT': 'STR',
    'INTEGER': 'INT',
    'BOOLEAN': 'BOOL',
    'BLOB': 'LOB',
    'BINARY': 'LOB',
}


def _bare_name(name: Any) -> str:
    if not isinstance(name, str):
        raise ValueError(f'Bind parameter name must be a string, got {type(name).__name__}')
    bare = name.strip().removeprefix(PARAM_MARKER)
    if not bare:
        raise ValueError('Bind parameter name cannot be empty')
    return bare


@dataclass(frozen=True)
class UntypedBinding:
    """A named value bound with the default (string) type."""
    name: str
    value: Any

    def __post_init__(self):
        object.__setattr__(self, 'name', _bare_name(self.name))

    @property
    def placeholder(self) -> str:
        return f'{PARAM_MARKER}{self.name}'

    @property
    def bind_value(self) -> str | None:
        return BindType.STR.coerce(self.value)

    def bindparam(self) -> sa.BindParameter:
        return sa.bindparam(self.name, self.bind_value, type_=BindType.STR.sa_type())


@dataclass(frozen=True)
class TypedBinding:
    """A named value bound with an explicit `BindType`."""
    name: str
    value: Any
    kind: BindType

    def __post_init__(self):
        object.__setattr__(self, 'name', _bare_name(self.name))
        object.__setattr__(self, 'kind', BindType.parse(self.kind))

    @property
    def placeholder(self) -> str:
        return f'{PARAM_MARKER}{self.name}'

    @property
    def bind_value(self) -> Any:
        return self.kind.coerce(self.value)

    def bindparam(self) -> sa.BindParameter:
        return sa.bindparam(self.name, self.bind_value, type_=self.kind.sa_type())


Binding = Union[UntypedBinding, TypedBinding]


def to_binding(item: Any) -> Binding:
    """Turn a `(name, value)` or `(name, value, type)` item into a binding.

    Raises
        ValueError: If the item has another shape, an empty name or an unknown type
    """
    if isinstance(item, (UntypedBinding, TypedBinding)):
        return item
    if isinstance(item, (str, bytes)) or not isinstance(item, Sequence):
        raise ValueError(f'Bind parameter must be a 2- or 3-item sequence, got {item!r}')
    if len(item) == 2:
        return UntypedBinding(item[0], item[1])
    if len(item) == 3:
        return TypedBinding(item[0], item[1], item[2])
    raise ValueError(f'Bind parameter must have 2 or 3 items, got {len(item)}')


class ParameterBinder:
    """Pending bindings for the next statement.
    """

    def __init__(self, logger: Any = None) -> None:
        self._pending: list[Binding] = []
        self.logger = logger or default_logger()

    def __len__(self) -> int:
        return len(self._pending)

    def __iter__(self) -> Iterator[Binding]:
        return iter(self._pending)

    @property
    def pending(self) -> tuple[Binding, ...]:
        return tuple(self._pending)

    def clear(self) -> None:
        self._pending = []

    def bind(self, name: str, value: Any) -> None:
        """Add one untyped binding.
        """
        self._pending.append(UntypedBinding(name, value))

    def bind_more(self, params: Mapping[str, Any]) -> None:
        """Bind each name/value pair in key order, unless bindings are pending.
        """
        if self._pending:
            logger.debug(f'Ignoring {len(params)} parameters, {len(self._pending)} already pending')
            return
        for name, value in params.items():
            self.bind(name, value)

    def set_bind_parameters(self, params: Iterable[Any]) -> None:
        """Add 2-item (untyped) or 3-item (typed) bindings, unless bindings are pending.

        A malformed item stops the call: items before it stay bound, the rest
        are dropped.
        """
        if self._pending:
            logger.debug(f'Ignoring bind parameters, {len(self._pending)} already pending')
            return
        for item in params:
            try:
                binding = to_binding(item)
            except ValueError as err:
                self.logger.warning(f'Illegal bind parameter, remaining parameters dropped: {err}')
                return
            self._pending.append(binding)

    def add(self, params: Mapping[str, Any] | Iterable[Any] | None) -> None:
        """Merge inline statement parameters using the rules above."""
        if not params:
            return
        if isinstance(params, Mapping):
            self.bind_more(params)
        else:
            self.set_bind_parameters(params)

    def apply(self, statement: sa.TextClause) -> sa.TextClause:
        """Attach the pending bindings to a statement by name.
        """
        if not self._pending:
            return statement
        return statement.bindparams(*[binding.bindparam() for binding in self._pending])


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
