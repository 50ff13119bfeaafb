"""
Result shaping.

Turns an executed statement into what the caller gets back:

- read statements (select, show): all rows, shaped per `FetchMode`
- write statements (insert, update, delete): the affected-row count
- anything else: None

Row shapes follow the usual fetch modes: `ASSOC` (dict by column name,
the default), `NUM` (tuple), `BOTH` (dict keyed by name and position),
`OBJ` (attrdict), and the whole-result modes `FRAME` (pandas DataFrame)
and `ARROW` (DataFrame with pyarrow-backed dtypes).
"""
import enum
import logging
from collections.abc import Sequence
from typing import Any

import pandas as pd
import pyarrow as pa
import sqlalchemy as sa

from libb import attrdict

__all__ = [
    'FetchMode',
    'StatementVerb',
    'statement_verb',
    'shape_result',
    'shape_rows',
    'shape_row',
    'first_column',
    'first_value',
    'pandas_numpy_data_loader',
    'pandas_pyarrow_data_loader',
]

logger = logging.getLogger(__name__)


class StatementVerb(enum.Enum):
    READ = 'read'
    WRITE = 'write'
    UNKNOWN = 'unknown'


READ_VERBS = frozenset({'select', 'show'})
WRITE_VERBS = frozenset({'insert', 'update', 'delete'})


def statement_verb(sql: str) -> StatementVerb:
    """Classify SQL by its first word.

    >>> statement_verb('  SELECT * FROM t')
    <StatementVerb.READ: 'read'>
    >>> statement_verb('Delete from t')
    <StatementVerb.WRITE: 'write'>
    >>> statement_verb('')
    <StatementVerb.UNKNOWN: 'unknown'>
    """
    tokens = sql.strip().split(maxsplit=1)
    verb = tokens[0].lower() if tokens else ''
    if verb in READ_VERBS:
        return StatementVerb.READ
    if verb in WRITE_VERBS:
        return StatementVerb.WRITE
    return StatementVerb.UNKNOWN


class FetchMode(enum.Enum):
    ASSOC = 'assoc'
    NUM = 'num'
    BOTH = 'both'
    OBJ = 'obj'
    FRAME = 'frame'
    ARROW = 'arrow'

    @classmethod
    def parse(cls, mode: 'FetchMode | str | None') -> 'FetchMode':
        """Accept a member, a name (`'num'`) or a PDO name (`'PDO::FETCH_NUM'`).

        Raises
            ValueError: If the mode is unknown
        """
        if mode is None:
            return cls.ASSOC
        if isinstance(mode, cls):
            return mode
        key = str(mode).strip().upper().removeprefix('PDO::').removeprefix('FETCH_')
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f'Unknown fetch mode: {mode!r}') from None

    @property
    def is_frame(self) -> bool:
        return self in {FetchMode.FRAME, FetchMode.ARROW}


def _empty_dataframe(columns: Sequence[str]) -> pd.DataFrame:
    """Create empty DataFrame with column names preserved."""
    return pd.DataFrame(columns=list(columns))


def pandas_numpy_data_loader(data: list[dict], columns: Sequence[str]) -> pd.DataFrame:
    """Standard pandas DataFrame loader using NumPy.

    Always returns a DataFrame, never None, with columns preserved for empty results.
    """
    if not data:
        return _empty_dataframe(columns)
    return pd.DataFrame.from_records(data, columns=list(columns))


def pandas_pyarrow_data_loader(data: list[dict], columns: Sequence[str]) -> pd.DataFrame:
    """PyArrow-based pandas DataFrame loader.

    Always returns a DataFrame, never None, with columns preserved for empty results.
    """
    if not data:
        return _empty_dataframe(columns)
    names = list(columns)
    columns_data = [[row[col] for row in data] for col in names]
    return pa.table(columns_data, names=names).to_pandas(types_mapper=pd.ArrowDtype)


def _shape(row: sa.Row, keys: list[str], mode: FetchMode) -> Any:
    if mode is FetchMode.NUM:
        return tuple(row)
    record = dict(zip(keys, row))
    if mode is FetchMode.BOTH:
        record.update(enumerate(row))
    elif mode is FetchMode.OBJ:
        return attrdict(record)
    return record


def shape_rows(result: sa.CursorResult, mode: FetchMode = FetchMode.ASSOC) -> list[Any] | pd.DataFrame:
    """Fetch all rows of a result in the requested shape."""
    if not result.returns_rows:
        return _empty_dataframe([]) if mode.is_frame else []
    keys = list(result.keys())
    rows = result.all()
    if mode is FetchMode.FRAME:
        return pandas_numpy_data_loader([dict(zip(keys, row)) for row in rows], keys)
    if mode is FetchMode.ARROW:
        return pandas_pyarrow_data_loader([dict(zip(keys, row)) for row in rows], keys)
    logger.debug(f'Fetched {len(rows)} rows')
    return [_shape(row, keys, mode) for row in rows]


def shape_row(result: sa.CursorResult, mode: FetchMode = FetchMode.ASSOC) -> Any | None:
    """Fetch the first row in the requested shape, or None."""
    if mode.is_frame:
        raise ValueError(f'Fetch mode {mode.name} shapes whole results, not single rows')
    if not result.returns_rows:
        return None
    keys = list(result.keys())
    row = result.first()
    if row is None:
        return None
    return _shape(row, keys, mode)


def first_column(result: sa.CursorResult) -> list[Any]:
    """Values of the first column across all rows."""
    if not result.returns_rows:
        return []
    return [row[0] for row in result.all()]


def first_value(result: sa.CursorResult) -> Any | None:
    """First column of the first row, or None."""
    if not result.returns_rows:
        return None
    row = result.first()
    if row is None:
        return None
    return row[0]


def shape_result(result: sa.CursorResult, verb: StatementVerb,
                 mode: FetchMode = FetchMode.ASSOC, log: Any = None) -> Any:
    """Dispatch on the statement verb.

    read -> rows, write -> affected-row count, unknown -> None.
    """
    if verb is StatementVerb.READ:
        return shape_rows(result, mode)
    if verb is StatementVerb.WRITE:
        return max(result.rowcount, 0)
    result.close()
    (log or logger).warning('Unknown query type, no result returned')
    return None


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
