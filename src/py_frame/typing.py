"""
DataType tags for py-frame columns.

Tag design:
  - DataType is a closed enum: one member per supported scalar kind,
    plus OBJECT for anything the engine cannot operate on
  - tag_of() maps a scalar to its tag by exact type identity
  - The 32-bit and borrowed-string kinds are carried by small scalar
    subclasses (float32, int32, strref) so that a value always knows
    its own tag
  - Conversions are explicit: validate_scalar() for writes, can_widen()
    for whole-column as_type()
"""

from __future__ import annotations
from array import array
from enum import Enum
from typing import Any

from .errors import PyFrameTypeError
from .errors import PyFrameValueError


INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


class float32(float):
    """Single precision float. Rounded through ``array('f')`` on construction."""
    __slots__ = ()

    def __new__(cls, value=0.0):
        return super().__new__(cls, array('f', [float(value)])[0])

    def __repr__(self):
        return f"float32({float.__repr__(self)})"


class int32(int):
    """Signed 32-bit integer."""
    __slots__ = ()

    def __new__(cls, value=0):
        v = int(value)
        if not INT32_MIN <= v <= INT32_MAX:
            raise PyFrameValueError(f"{v} does not fit in a 32-bit integer")
        return super().__new__(cls, v)

    def __repr__(self):
        return f"int32({int.__repr__(self)})"


class strref(str):
    """A borrowed string: text referenced from a source rather than owned by the column."""
    __slots__ = ()


class DataType(Enum):
    """
    Tag identifying the scalar kind a Column holds.

    Attributes
    ----------
    label : str
        Short display label (``f64``, ``i32``, ``string`` ...)
    kind : type
        Python scalar type carried by the column elements
    typecode : str or None
        ``array.array`` typecode used for storage, None for list storage
    is_numeric : bool
        True for the four float/int tags

    Examples
    --------
    >>> tag_of(1.5)
    <f64>
    >>> tag_of(int32(3))
    <i32>
    >>> DataType.I64.label
    'i64'
    """

    F64 = ("f64", float, "d", True)
    F32 = ("f32", float32, "f", True)
    I64 = ("i64", int, "q", True)
    I32 = ("i32", int32, "i", True)
    STRING = ("string", str, None, False)
    STR = ("str", strref, None, False)
    BOOL = ("bool", bool, "B", False)
    OBJECT = ("object", object, None, False)

    def __init__(self, label, kind, typecode, is_numeric):
        self.label = label
        self.kind = kind
        self.typecode = typecode
        self.is_numeric = is_numeric

    def __repr__(self):
        return f"<{self.label}>"

    def __str__(self):
        return self.label

    @property
    def is_float(self) -> bool:
        return self is DataType.F64 or self is DataType.F32

    @property
    def is_integer(self) -> bool:
        return self is DataType.I64 or self is DataType.I32

    @property
    def is_text(self) -> bool:
        return self is DataType.STRING or self is DataType.STR

    def box(self, raw: Any) -> Any:
        """Rebuild the tag's scalar kind from a raw storage element."""
        if self is DataType.BOOL:
            return bool(raw)
        if self is DataType.F32:
            return float.__new__(float32, raw)
        if self is DataType.I32:
            return int.__new__(int32, raw)
        return raw


# Exact type -> tag. Types are distinct, so lookup order cannot matter.
_TAG_BY_TYPE = {
    member.kind: member for member in DataType if member is not DataType.OBJECT
}


def tag_of(value: Any) -> DataType:
    """
    Return the DataType of a scalar.

    Uses exact type identity: ``bool`` is BOOL (never I64), ``float32`` is F32
    (never F64). Anything unrecognised is OBJECT; there is no failure path.
    """
    return _TAG_BY_TYPE.get(type(value), DataType.OBJECT)


def as_dtype(spec: Any) -> DataType:
    """Normalise a DataType, a Python scalar type or a label string to a DataType."""
    if isinstance(spec, DataType):
        return spec
    if isinstance(spec, str):
        text = spec.strip()
        for member in DataType:
            if text == member.label or text.upper() == member.name:
                return member
        raise PyFrameTypeError(f"Unknown dtype label '{spec}'")
    if isinstance(spec, type):
        if spec is object:
            return DataType.OBJECT
        tag = _TAG_BY_TYPE.get(spec)
        if tag is not None:
            return tag
    raise PyFrameTypeError(f"Cannot interpret {spec!r} as a DataType")


_INTEGER_KINDS = (int, int32, bool)
_FLOAT_KINDS = (float, float32) + _INTEGER_KINDS
_TEXT_KINDS = (str, strref)


def validate_scalar(value: Any, dtype: DataType) -> Any:
    """
    Check a value against ``dtype`` and return it boxed as the tag's scalar kind.

    Lossless numeric widening is accepted (bool/int into integer or float tags,
    any float into a float tag). Everything else raises PyFrameTypeError.
    """
    kind = type(value)
    if dtype is DataType.OBJECT:
        return value
    if dtype is DataType.F64:
        if kind in _FLOAT_KINDS:
            return float(value)
    elif dtype is DataType.F32:
        if kind in _FLOAT_KINDS:
            return float32(value)
    elif dtype is DataType.I64:
        if kind in _INTEGER_KINDS:
            if not INT64_MIN <= value <= INT64_MAX:
                raise PyFrameValueError(f"{value} does not fit in a 64-bit integer")
            return int(value)
    elif dtype is DataType.I32:
        if kind in _INTEGER_KINDS:
            return int32(value)
    elif dtype is DataType.BOOL:
        if kind is bool:
            return value
    elif dtype is DataType.STRING:
        if kind in _TEXT_KINDS:
            return str(value)
    elif dtype is DataType.STR:
        if kind in _TEXT_KINDS:
            return strref(value)
    raise PyFrameTypeError(
        f"Cannot store {kind.__name__} value {value!r} in a {dtype.label} column"
    )


_NUMERIC_RANK = {
    DataType.I32: 0,
    DataType.I64: 1,
    DataType.F32: 2,
    DataType.F64: 3,
}


def promote(a: DataType, b: DataType) -> DataType:
    """
    Result tag of a binary numeric operation between tags ``a`` and ``b``.

    Ladder: i32 < i64 < f32 < f64. Mixing i64 with f32 gives f64.
    """
    if not (a.is_numeric and b.is_numeric):
        raise PyFrameTypeError(f"No numeric promotion between {a.label} and {b.label}")
    if a is b:
        return a
    if {a, b} == {DataType.I64, DataType.F32}:
        return DataType.F64
    return a if _NUMERIC_RANK[a] > _NUMERIC_RANK[b] else b


_WIDENING = {
    DataType.I32: {DataType.I32, DataType.I64, DataType.F32, DataType.F64},
    DataType.I64: {DataType.I64, DataType.F64},
    DataType.F32: {DataType.F32, DataType.F64},
    DataType.F64: {DataType.F64},
    DataType.BOOL: {DataType.BOOL, DataType.I32, DataType.I64},
    DataType.STRING: {DataType.STRING, DataType.STR},
    DataType.STR: {DataType.STR, DataType.STRING},
    DataType.OBJECT: {DataType.OBJECT},
}


def can_widen(src: DataType, dst: DataType) -> bool:
    """True if every value of ``src`` converts to ``dst`` without a failure path."""
    return dst in _WIDENING[src]
