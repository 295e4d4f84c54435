"""
Ingestion contract for format adapters.

An adapter hands over, per column, the raw text values, an optional name
and an optional DataType hint. Without a hint the DataType is sniffed from
the first SAMPLE_SIZE values: the first of i64, f64, bool, string for which
every sampled value parses wins.
"""

from __future__ import annotations
import math
import re
import warnings
from itertools import islice

from .column import Column
from .errors import ParseWarning
from .errors import PyFrameTypeError
from .table import Table
from .typing import DataType
from .typing import as_dtype
from .typing import float32
from .typing import int32
from .typing import strref


SAMPLE_SIZE = 10

_INT_RE = re.compile(r"[+-]?[0-9]+\Z")
_BOOL_WORDS = {"true": True, "false": False}

# Tags tried, in order, when sniffing a column
_SNIFF_ORDER = (DataType.I64, DataType.F64, DataType.BOOL)


def _parse_int(text: str) -> int:
    if not _INT_RE.match(text):
        raise ValueError(f"invalid integer literal: {text!r}")
    return int(text)


def _parse_float(text: str) -> float:
    # float() also accepts digit separators; raw numeric text does not
    if "_" in text:
        raise ValueError(f"invalid float literal: {text!r}")
    return float(text)


def _parse_bool(text: str) -> bool:
    try:
        return _BOOL_WORDS[text.lower()]
    except KeyError:
        raise ValueError(f"invalid boolean literal: {text!r}") from None


_PARSERS = {
    DataType.I64: _parse_int,
    DataType.I32: lambda text: int32(_parse_int(text)),
    DataType.F64: _parse_float,
    DataType.F32: lambda text: float32(_parse_float(text)),
    DataType.BOOL: _parse_bool,
    DataType.STRING: str,
    DataType.STR: strref,
}


def _parser_for(dtype: DataType):
    parser = _PARSERS.get(dtype)
    if parser is None:
        raise PyFrameTypeError(f"Cannot parse raw values into a {dtype.label} column")
    return parser


def missing_value(dtype: DataType):
    """Stand-in for a value that failed to parse."""
    if dtype.is_float:
        return math.nan
    if dtype.is_integer:
        return 0
    if dtype is DataType.BOOL:
        return False
    return ""


def _parses(parser, text: str) -> bool:
    try:
        parser(text)
    except ValueError:
        return False
    return True


def infer_dtype(raw, sample_size: int = SAMPLE_SIZE) -> DataType:
    """
    Sniff the DataType of a column of raw text values.

    Only the first ``sample_size`` values are examined. Integers are I64,
    decimals F64, ``true``/``false`` (any case) BOOL; anything else, and an
    empty sample, is STRING.
    """
    sample = [str(value).strip() for value in islice(raw, sample_size)]
    if not sample:
        return DataType.STRING
    for dtype in _SNIFF_ORDER:
        parser = _PARSERS[dtype]
        if all(_parses(parser, text) for text in sample):
            return dtype
    return DataType.STRING


def parse_values(raw, dtype) -> list:
    """
    Convert raw text values to ``dtype`` scalars.

    Values that do not parse become missing_value(dtype) and are reported
    with a single ParseWarning.
    """
    dtype = as_dtype(dtype)
    parser = _parser_for(dtype)
    out = []
    failed = 0
    for value in raw:
        text = str(value)
        if not dtype.is_text:
            text = text.strip()
        try:
            out.append(parser(text))
        except ValueError:
            failed += 1
            out.append(missing_value(dtype))
    if failed:
        warnings.warn(
            f"{failed} of {len(out)} values could not be parsed as {dtype.label} "
            f"and were replaced with {missing_value(dtype)!r}",
            ParseWarning,
            stacklevel=2
        )
    return out


def column_from_raw(raw, name=None, dtype=None, index=None, sample_size: int = SAMPLE_SIZE) -> Column:
    """Typed Column from raw text values, sniffing the DataType when no hint is given."""
    raw = list(raw)
    dtype = infer_dtype(raw, sample_size) if dtype is None else as_dtype(dtype)
    values = parse_values(raw, dtype)
    if name is None:
        return Column(values, index=index, dtype=dtype)
    return Column(values, name=str(name), index=index, dtype=dtype)


def table_from_raw(columns, sample_size: int = SAMPLE_SIZE) -> Table:
    """
    Table from raw columns.

    ``columns`` is a ``{name: raw}`` mapping or a sequence of ``(name, raw)``
    / ``(name, raw, hint)`` tuples. The first column fixes the row count;
    a later column of another length raises PyFrameLengthError.
    """
    if isinstance(columns, dict):
        specs = [(name, raw, None) for name, raw in columns.items()]
    else:
        specs = [tuple(spec) if len(spec) == 3 else (spec[0], spec[1], None) for spec in columns]

    table = Table()
    for position, (name, raw, hint) in enumerate(specs):
        if name is None:
            name = str(position)
        table.add_column(column_from_raw(raw, name, hint, sample_size=sample_size))
    return table
