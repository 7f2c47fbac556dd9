# gdp_decomposer_src/alignment_utils.py

"""
Temporal alignment of several time-indexed sources into one wide table.

An aligned table is a plain DataFrame with one key column (timestamps, one row
per distinct key, sorted) and any number of named numeric value columns.
Absent cells are NaN; rows are only dropped when the join policy says so.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Union

import pandas as pd
from pandas.api.types import is_datetime64_any_dtype, is_numeric_dtype

from .config_utils import get_config_value
from .errors import EmptyInputError, SchemaError

logger = logging.getLogger(__name__)

MERGE_POLICIES = ("inner", "left", "outer")

Source = Union[pd.Series, pd.DataFrame]


def _source_label(source: Source, position: int) -> str:
    name = getattr(source, "name", None)
    if isinstance(source, pd.Series) and name is not None:
        return str(name)
    if isinstance(source, pd.DataFrame):
        cols = [str(c) for c in source.columns]
        return f"table#{position}[{', '.join(cols)}]"
    return f"source#{position}"


def as_table(source: Source, key: str = "date", label: Optional[str] = None) -> pd.DataFrame:
    """
    Convert a Series or DataFrame into aligned-table form.

    - A Series becomes a two-column frame: ``key`` (from its index) and one
      value column named after the series.
    - A DataFrame keeps its columns; if it has no ``key`` column but carries a
      DatetimeIndex, that index becomes the key column.

    The result is a new frame sorted by key with a fresh RangeIndex.
    """
    label = label or _source_label(source, 0)

    if isinstance(source, pd.Series):
        if source.name is None:
            raise SchemaError(f"Series input {label} has no name to use as column", sources=(label,))
        if source.name == key:
            raise SchemaError(f"Series '{source.name}' clashes with the key column name", columns=(key,), sources=(label,))
        frame = pd.DataFrame({key: source.index, str(source.name): source.to_numpy()})
    elif isinstance(source, pd.DataFrame):
        if key in source.columns:
            frame = source.reset_index(drop=True).copy()
        elif isinstance(source.index, pd.DatetimeIndex):
            frame = source.copy()
            frame.insert(0, key, source.index)
            frame = frame.reset_index(drop=True)
        else:
            raise SchemaError(f"Input {label} has no '{key}' column or DatetimeIndex", columns=(key,), sources=(label,))
    else:
        raise TypeError(f"Unsupported source type for {label}: {type(source).__name__}")

    if frame[key].isna().any():
        raise SchemaError(f"Input {label} has missing values in key column '{key}'", columns=(key,), sources=(label,))
    if frame[key].duplicated().any():
        dupes = frame.loc[frame[key].duplicated(), key].tolist()
        raise SchemaError(f"Input {label} has duplicate keys: {dupes}", columns=(key,), sources=(label,))

    return frame.sort_values(key).reset_index(drop=True)


def value_columns(table: pd.DataFrame, key: str = "date") -> List[str]:
    return [c for c in table.columns if c != key]


def _check_numeric(table: pd.DataFrame, key: str, label: str, passthrough: Sequence[str]) -> None:
    for col in value_columns(table, key):
        if col in passthrough:
            continue
        if not is_numeric_dtype(table[col]) or table[col].dtype == bool:
            raise SchemaError(
                f"Column '{col}' of {label} is not numeric (dtype {table[col].dtype}); "
                "declare it as passthrough or convert it upstream",
                columns=(col,),
                sources=(label,),
            )


def merge(tables: Sequence[Source],
          key: Optional[str] = None,
          how: Optional[str] = None,
          primary: int = 0,
          passthrough: Iterable[str] = ()) -> pd.DataFrame:
    """
    Merge two or more time-indexed sources on a shared timestamp key.

    Parameters
    ----------
    tables : Sequence[pd.Series | pd.DataFrame]
        Sources to merge. Series contribute one column named after the series.
    key : str, optional
        Name of the timestamp key column (default from ``alignment.key``).
    how : {'inner', 'left', 'outer'}, optional
        Join policy (default from ``alignment.merge_how``):
        - 'inner': only keys present in every source
        - 'left': exactly the keys of the primary source
        - 'outer': union of all keys
    primary : int, default 0
        Position of the primary source in ``tables`` for 'left' joins. The
        primary's columns come first in the output.
    passthrough : Iterable[str]
        Non-numeric value columns that may pass through untouched.

    Returns
    -------
    pd.DataFrame
        Aligned table sorted by key with one row per distinct key.

    Raises
    ------
    EmptyInputError
        If any source has zero rows.
    SchemaError
        If two sources declare the same value column, or a source is missing
        the key, has duplicate keys, or has non-numeric value columns.
    ValueError
        For fewer than two sources, an unknown policy, or a bad ``primary``.
    """
    key = key or get_config_value("alignment.key", "date")
    how = how or get_config_value("alignment.merge_how", "left")
    passthrough = tuple(passthrough)

    if how not in MERGE_POLICIES:
        raise ValueError(f"Unknown join policy '{how}'. Must be one of: {MERGE_POLICIES}")
    if len(tables) < 2:
        raise ValueError("merge requires at least two sources")
    if not 0 <= primary < len(tables):
        raise ValueError(f"primary={primary} is out of range for {len(tables)} sources")

    labels = [_source_label(t, i) for i, t in enumerate(tables)]
    for source, label in zip(tables, labels):
        if len(source) == 0:
            raise EmptyInputError(f"Input {label} has zero rows", source=label)

    frames = [as_table(t, key, label) for t, label in zip(tables, labels)]
    for frame, label in zip(frames, labels):
        _check_numeric(frame, key, label, passthrough)

    # Column ownership across sources; any repeat is ambiguous
    owner = {}
    for frame, label in zip(frames, labels):
        for col in value_columns(frame, key):
            if col in owner:
                raise SchemaError(
                    f"Column '{col}' is declared by both {owner[col]} and {label}",
                    columns=(col,),
                    sources=(owner[col], label),
                )
            owner[col] = label

    key_dtypes = {str(f[key].dtype) for f in frames}
    if len(key_dtypes) > 1 and not all(is_datetime64_any_dtype(f[key]) for f in frames):
        raise SchemaError(f"Key column '{key}' has incompatible types across inputs: {sorted(key_dtypes)}", columns=(key,))

    order = [primary] + [i for i in range(len(frames)) if i != primary]
    result = frames[order[0]]
    for i in order[1:]:
        result = pd.merge(result, frames[i], on=key, how=how, sort=False)

    result = result.sort_values(key).reset_index(drop=True)

    logger.debug(
        "Merged %d inputs (%s, primary=%s) into %d rows x %d columns",
        len(frames), how, labels[primary], len(result), len(result.columns) - 1,
    )
    return result


def earliest_starting(series_list: Sequence[pd.Series]) -> int:
    """
    Position of the series whose first valid observation is earliest.

    Ties resolve to the first series given. Series with no valid observation
    never win.
    """
    best: Optional[int] = None
    best_start = None
    for i, s in enumerate(series_list):
        start = s.first_valid_index()
        if start is None:
            continue
        if best_start is None or start < best_start:
            best, best_start = i, start
    if best is None:
        raise EmptyInputError("No series has a valid observation", source=None)
    return best
