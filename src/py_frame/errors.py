class PyFrameError(Exception):
    """Base exception for py-frame library."""
    pass


class PyFrameKeyError(PyFrameError, KeyError):
    """Raised when a column name or row label is missing."""
    pass


class PyFrameTypeError(PyFrameError, TypeError):
    """Raised when a value or column does not fit the requested DataType."""
    pass


class PyFrameValueError(PyFrameError, ValueError):
    """Raised for invalid argument values."""
    pass


class PyFrameIndexError(PyFrameError, IndexError):
    """Raised for out-of-range positions and row counts."""
    pass


class PyFrameLengthError(PyFrameValueError):
    """Raised when two arrays that must line up have different lengths."""

    def __init__(self, expected, actual, message=None):
        self.expected = expected
        self.actual = actual
        if message is None:
            message = f"Arrays must be of same length. Expected {expected}, got {actual}"
        super().__init__(message)


class PyFrameNameError(PyFrameValueError):
    """Raised when a column name collision cannot be resolved by renumbering."""

    def __init__(self, name):
        self.name = name
        super().__init__(f"Column name '{name}' already in table")


class PyFrameLabelError(PyFrameValueError):
    """Raised when a relabelling would break label integrity."""
    pass


class EmptyInputError(PyFrameValueError):
    """Raised when a reduction receives too few values."""
    pass


class PyFrameInvariantError(PyFrameError, AssertionError):
    """Raised on internal consistency violations (programmer error).

    The library never catches this itself.
    """
    pass


class UnsupportedColumnWarning(UserWarning):
    """Issued when a column of an unsupported element type is dropped."""
    pass


class ParseWarning(UserWarning):
    """Issued when raw values could not be parsed and were replaced by a default."""
    pass
