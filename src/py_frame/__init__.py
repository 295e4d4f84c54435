"""
py-frame: a typed, column-oriented table engine in pure Python

A Table holds named, equal-length columns. Every column carries a DataType
tag (f64, f32, i64, i32, bool, string, str), columns are stored grouped by
tag, and bulk operations name the tag they work on.

Main classes:
    - Column: named, labelled, homogeneous 1-D array
    - Table: columns of equal length, presented in insertion order
    - DataType: the closed set of column element tags

Type-specific Column subclasses (auto-created):
    - _FloatColumn, _IntColumn, _BoolColumn, _StringColumn

Zero external dependencies - pure Python stdlib only.
"""

from .column import Column, _FloatColumn, _IntColumn, _BoolColumn, _StringColumn
from .table import Table
from .block import Block
from .store import BlockStore
from .typing import DataType, float32, int32, strref, tag_of, as_dtype
from .ingest import infer_dtype, column_from_raw, table_from_raw
from .errors import (
	PyFrameError,
	PyFrameKeyError,
	PyFrameValueError,
	PyFrameTypeError,
	PyFrameIndexError,
	PyFrameLengthError,
	PyFrameNameError,
	PyFrameLabelError,
	PyFrameInvariantError,
	EmptyInputError,
	UnsupportedColumnWarning,
	ParseWarning,
)

__version__ = "0.1.0"
__all__ = [
	"Column",
	"Table",
	"Block",
	"BlockStore",
	"DataType",
	"float32",
	"int32",
	"strref",
	"tag_of",
	"as_dtype",
	"infer_dtype",
	"column_from_raw",
	"table_from_raw",
	"PyFrameError",
	"PyFrameKeyError",
	"PyFrameValueError",
	"PyFrameTypeError",
	"PyFrameIndexError",
	"PyFrameLengthError",
	"PyFrameNameError",
	"PyFrameLabelError",
	"PyFrameInvariantError",
	"EmptyInputError",
	"UnsupportedColumnWarning",
	"ParseWarning",
]
