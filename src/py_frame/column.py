import math
import operator
import re
import warnings

from array import array
from collections import Counter
from itertools import accumulate

from . import stats
from .display import MAX_HEAD_ROWS
from .display import render_column
from .display import render_grid
from .errors import EmptyInputError
from .errors import PyFrameIndexError
from .errors import PyFrameInvariantError
from .errors import PyFrameKeyError
from .errors import PyFrameLabelError
from .errors import PyFrameLengthError
from .errors import PyFrameTypeError
from .errors import PyFrameValueError
from .naming import DEFAULT_COLUMN_NAME
from .naming import create_index
from .typing import DataType
from .typing import as_dtype
from .typing import can_widen
from .typing import promote
from .typing import tag_of
from .typing import validate_scalar


_DTYPE_BY_TYPECODE = {
	member.typecode: member for member in DataType if member.typecode is not None
}


def _class_for(dtype):
	if dtype.is_float:
		return _FloatColumn
	if dtype.is_integer:
		return _IntColumn
	if dtype is DataType.BOOL:
		return _BoolColumn
	if dtype.is_text:
		return _StringColumn
	return Column


def _new_storage(dtype, items):
	if dtype.typecode is None:
		return list(items)
	return array(dtype.typecode, items)


def _wrap(data, dtype, name, index):
	"""Build a Column around already-validated storage (no copy, no checks)."""
	instance = object.__new__(_class_for(dtype))
	instance._dtype = dtype
	instance._data = data
	instance._name = name
	instance._index = index
	return instance


def _is_nan(x):
	return isinstance(x, float) and math.isnan(x)


def _ieee_truediv(a, b):
	"""True division with IEEE-754 results for a zero divisor (inf, -inf or NaN)."""
	if b == 0:
		if a == 0 or _is_nan(a):
			return math.nan
		return math.copysign(math.inf, a) * math.copysign(1.0, b)
	return a / b


def _as_values(other):
	if isinstance(other, Column):
		return other.to_list()
	return list(other)


# ============================================================
# Main class
# ============================================================

class Column():
	""" Named, labelled, homogeneous 1-D array with a single DataType """
	_dtype = None
	_data = None
	_name = None
	_index = None

	def __new__(cls, values=(), name=DEFAULT_COLUMN_NAME, index=None, dtype=None):
		"""
		Decide which typed Column subclass to create.

		The tag comes from ``dtype`` when given, else from the first value.
		An empty column without a dtype is F64.
		"""
		# Materialize iterators once so __init__ sees the same values
		if isinstance(values, Column):
			values = values.to_list()
		elif not isinstance(values, (list, tuple, array)):
			values = list(values)

		if dtype is not None:
			dtype = as_dtype(dtype)
		elif isinstance(values, array) and values.typecode in _DTYPE_BY_TYPECODE:
			dtype = _DTYPE_BY_TYPECODE[values.typecode]
		elif len(values):
			dtype = tag_of(values[0])
		else:
			dtype = DataType.F64

		instance = super(Column, _class_for(dtype)).__new__(_class_for(dtype))
		instance._dtype = dtype
		instance._pending = values
		return instance


	def __init__(self, values=(), name=DEFAULT_COLUMN_NAME, index=None, dtype=None):
		values = self.__dict__.pop('_pending', values)
		self._name = name
		self._data = _new_storage(self._dtype, (validate_scalar(v, self._dtype) for v in values))
		if index is None:
			self._index = create_index(len(self._data))
		else:
			self._index = self._checked_labels(index)


	@classmethod
	def from_array(cls, arr, name=DEFAULT_COLUMN_NAME, index=None):
		"""Column backed by a copy of an ``array.array``; the typecode picks the tag."""
		dtype = _DTYPE_BY_TYPECODE.get(arr.typecode)
		if dtype is None:
			raise PyFrameTypeError(f"Unsupported array typecode '{arr.typecode}'")
		column = _wrap(array(dtype.typecode, arr), dtype, name, None)
		column._index = create_index(len(arr)) if index is None else column._checked_labels(index)
		return column


	@classmethod
	def from_mapping(cls, mapping, index=None, dtype=None):
		"""Column from ``{name: values}``. The mapping must hold exactly one key."""
		if len(mapping) != 1:
			raise PyFrameValueError(
				f"Expected a mapping of length 1, found a mapping of length {len(mapping)} (multiple keys)"
			)
		(name, values), = mapping.items()
		return Column(values, name=name, index=index, dtype=dtype)


	@classmethod
	def from_pairs(cls, pairs, name=DEFAULT_COLUMN_NAME, dtype=None):
		"""Column from ``(label, value)`` pairs; the labels become the index."""
		pairs = list(pairs)
		labels = [label for label, _ in pairs]
		values = [value for _, value in pairs]
		return Column(values, name=name, index=labels, dtype=dtype)


	def __reduce__(self):
		# copy and pickle rebuild the typed subclass directly; __new__ would re-infer the tag
		return (_wrap, (self._data, self._dtype, self._name, self._index))


	def _checked_labels(self, labels):
		labels = [str(label) for label in labels]
		if len(labels) != len(self._data):
			raise PyFrameInvariantError(
				f"Index has {len(labels)} labels but the column holds {len(self._data)} values"
			)
		return labels

	#-----------------------------------------------------
	# Attributes
	#-----------------------------------------------------

	@property
	def name(self):
		return self._name

	@property
	def dtype(self) -> DataType:
		return self._dtype

	@property
	def index(self):
		return list(self._index)

	@property
	def values(self):
		return self.to_list()

	def schema(self):
		"""Get the DataType of this column."""
		return self._dtype

	def set_name(self, name):
		self._name = name

	def rename(self, name):
		"""Copy of this column under a new name."""
		column = self.copy()
		column._name = name
		return column

	def copy(self):
		"""Deep copy: new backing storage and new labels."""
		return _wrap(self._data[:], self._dtype, self._name, list(self._index))

	def __len__(self):
		return len(self._data)

	def is_empty(self):
		return len(self._data) == 0

	def __iter__(self):
		box = self._dtype.box
		for raw in self._data:
			yield box(raw)

	def to_list(self):
		return list(self)

	def __repr__(self):
		return render_column(self._name, self._dtype, self._index, self._data)

	def __eq__(self, other):
		"""Columns are equal when name, labels, dtype and values all match."""
		if not isinstance(other, Column):
			return NotImplemented
		return (
			self._name == other._name
			and self._dtype is other._dtype
			and self._index == other._index
			and self._data == other._data
		)

	__hash__ = None

	def equals(self, other):
		"""True if ``other`` holds the same values, ignoring name and labels."""
		if isinstance(other, Column):
			return self.to_list() == other.to_list()
		return self.to_list() == list(other)

	def __bool__(self):
		"""
		Truthiness is non-emptiness.

		Warns for boolean columns, where ``if column:`` is usually meant as
		``column.any()`` or ``column.all()``.
		"""
		non_empty = len(self._data) > 0
		if non_empty and self._dtype is DataType.BOOL:
			warnings.warn(
				"Column is being used in a boolean context (e.g., 'if column:'). "
				"This checks for emptiness (len > 0), not element-wise truth. "
				"Use .any() or .all() for element-wise checks.",
				stacklevel=2
			)
		return non_empty

	#-----------------------------------------------------
	# Element access
	#-----------------------------------------------------

	def _position(self, key):
		if isinstance(key, str):
			try:
				return self._index.index(key)
			except ValueError:
				raise PyFrameKeyError(f"Label '{key}' not found in column '{self._name}'") from None
		if isinstance(key, int) and not isinstance(key, bool):
			n = len(self._data)
			if not -n <= key < n:
				raise PyFrameIndexError(f"Position {key} out of range for column of length {n}")
			return key % n
		raise PyFrameTypeError(f"Column indices must be int, str or slice, not {type(key).__name__}")

	def __getitem__(self, key):
		if isinstance(key, slice):
			return _wrap(self._data[key], self._dtype, self._name, self._index[key])
		return self._dtype.box(self._data[self._position(key)])

	def __setitem__(self, key, value):
		self._data[self._position(key)] = validate_scalar(value, self._dtype)

	def at(self, label):
		"""Value at row label ``label`` (first match)."""
		return self._dtype.box(self._data[self._position(str(label))])

	def get(self, position):
		"""Value at ``position``, or None when out of range."""
		n = len(self._data)
		if not -n <= position < n:
			return None
		return self._dtype.box(self._data[position])

	def item(self):
		"""The single value of a length-1 column."""
		if len(self._data) != 1:
			raise PyFrameValueError(f"item() requires a column of length 1, got {len(self._data)}")
		return self._dtype.box(self._data[0])

	#-----------------------------------------------------
	# Presentation
	#-----------------------------------------------------

	def _check_rows(self, n):
		if n < 0 or n > len(self._data):
			raise PyFrameIndexError(
				f"Cannot show {n} rows of column '{self._name}' with {len(self._data)} rows"
			)

	def _print_rows(self, positions, file):
		lines = render_grid(self._index, [(self._name, self._dtype, self._data)], positions)
		print("\n".join(lines), file=file)

	def head(self, n=MAX_HEAD_ROWS, file=None):
		"""Print the first ``n`` rows."""
		self._check_rows(n)
		self._print_rows(list(range(n)), file)

	def tail(self, n=MAX_HEAD_ROWS, file=None):
		"""Print the last ``n`` rows."""
		self._check_rows(n)
		size = len(self._data)
		self._print_rows(list(range(size - n, size)), file)

	#-----------------------------------------------------
	# Elementwise
	#-----------------------------------------------------

	def _like(self, values, dtype=None):
		"""New column with this column's name and labels."""
		return Column(values, name=self._name, index=self._index,
			dtype=self._dtype if dtype is None else dtype)

	def apply(self, func):
		"""Map ``func`` over the values. Results must fit this column's dtype."""
		return self._like([func(v) for v in self])

	def apply_inplace(self, func):
		self._data = self._like([func(v) for v in self])._data

	def transform(self, func, dtype=None):
		"""Map ``func`` over the values; the result dtype comes from ``dtype`` or the first result."""
		results = [func(v) for v in self]
		if dtype is None and not results:
			dtype = self._dtype
		return Column(results, name=self._name, index=self._index, dtype=dtype)

	def mask(self, value, cond):
		"""Replace every value for which ``cond(value)`` is true with ``value``."""
		return self._like([value if cond(v) else v for v in self])

	def mask_inplace(self, value, cond):
		self._data = self.mask(value, cond)._data

	def clip(self, lower=None, upper=None):
		"""Limit values to ``[lower, upper]``. A None bound is open."""
		def _clip(v):
			if lower is not None and v < lower:
				return lower
			if upper is not None and v > upper:
				return upper
			return v
		return self._like([_clip(v) for v in self])

	def between(self, left, right, inclusive=True):
		"""Boolean column: ``left <= v <= right`` (strict when not inclusive)."""
		if inclusive:
			flags = [left <= v <= right for v in self]
		else:
			flags = [left < v < right for v in self]
		return Column(flags, name=self._name, index=self._index, dtype=DataType.BOOL)

	def as_type(self, dtype):
		"""Convert to ``dtype``. Only widening and identity conversions are allowed."""
		dtype = as_dtype(dtype)
		if not can_widen(self._dtype, dtype):
			raise PyFrameTypeError(f"Cannot convert a {self._dtype.label} column to {dtype.label}")
		return self._like(self.to_list(), dtype)

	#-----------------------------------------------------
	# Combination & arithmetic
	#-----------------------------------------------------

	def _check_same_length(self, other):
		if len(other) != len(self._data):
			raise PyFrameLengthError(len(self._data), len(other))

	def combine(self, other, func):
		"""Pairwise ``func(a, b)`` over two equal-length columns. Keeps this column's name."""
		self._check_same_length(other)
		return self._like([func(a, b) for a, b in zip(self, other)])

	def _scalar_result_dtype(self, scalar):
		tag = tag_of(scalar)
		if tag is DataType.BOOL or tag.is_integer:
			return self._dtype
		if tag.is_float:
			return self._dtype if self._dtype.is_float else DataType.F64
		raise PyFrameTypeError(
			f"Unsupported operand type for {self._dtype.label} column: '{type(scalar).__name__}'"
		)

	def _elementwise_operation(self, other, op_func, op_symbol, reflected=False):
		"""Column (op) column or column (op) scalar for numeric columns."""
		if not self._dtype.is_numeric:
			raise PyFrameTypeError(
				f"Unsupported operand type(s) for '{op_symbol}': '{self._dtype.label}' column"
			)
		if isinstance(other, Column):
			self._check_same_length(other)
			result_dtype = promote(self._dtype, other._dtype)
			pairs = zip(self._data, other._data)
		else:
			result_dtype = self._scalar_result_dtype(other)
			pairs = ((x, other) for x in self._data)

		truediv = op_func is operator.truediv
		if truediv:
			op_func = _ieee_truediv
		if reflected:
			results = [op_func(b, a) for a, b in pairs]
		else:
			results = [op_func(a, b) for a, b in pairs]

		if truediv and result_dtype.is_integer:
			result_dtype = DataType.F64
		elif result_dtype.is_integer and any(type(r) is float for r in results):
			result_dtype = DataType.F64
		return self._like(results, result_dtype)

	def __add__(self, other):
		return self._elementwise_operation(other, operator.add, '+')

	def __sub__(self, other):
		return self._elementwise_operation(other, operator.sub, '-')

	def __mul__(self, other):
		return self._elementwise_operation(other, operator.mul, '*')

	def __truediv__(self, other):
		return self._elementwise_operation(other, operator.truediv, '/')

	def __floordiv__(self, other):
		return self._elementwise_operation(other, operator.floordiv, '//')

	def __mod__(self, other):
		return self._elementwise_operation(other, operator.mod, '%')

	def __pow__(self, other):
		return self._elementwise_operation(other, operator.pow, '**')

	def __radd__(self, other):
		return self._elementwise_operation(other, operator.add, '+', reflected=True)

	def __rsub__(self, other):
		return self._elementwise_operation(other, operator.sub, '-', reflected=True)

	def __rmul__(self, other):
		return self._elementwise_operation(other, operator.mul, '*', reflected=True)

	def __rtruediv__(self, other):
		return self._elementwise_operation(other, operator.truediv, '/', reflected=True)

	def __rfloordiv__(self, other):
		return self._elementwise_operation(other, operator.floordiv, '//', reflected=True)

	def __rmod__(self, other):
		return self._elementwise_operation(other, operator.mod, '%', reflected=True)

	def __rpow__(self, other):
		return self._elementwise_operation(other, operator.pow, '**', reflected=True)

	def __neg__(self):
		if not self._dtype.is_numeric:
			raise PyFrameTypeError(f"Bad operand type for unary -: '{self._dtype.label}' column")
		return self._like([-v for v in self])

	def __abs__(self):
		if not self._dtype.is_numeric:
			raise PyFrameTypeError(f"Bad operand type for abs(): '{self._dtype.label}' column")
		return self._like([abs(v) for v in self])

	#-----------------------------------------------------
	# Set-like
	#-----------------------------------------------------

	def duplicated(self):
		"""Boolean column marking values already seen earlier in the column."""
		seen = set()
		flags = []
		for v in self:
			flags.append(v in seen)
			seen.add(v)
		return Column(flags, name=self._name, index=self._index, dtype=DataType.BOOL)

	def unique(self):
		"""Distinct values as a set (no order)."""
		return set(self)

	#-----------------------------------------------------
	# Labels
	#-----------------------------------------------------

	def reindex(self, labels, verify_integrity=False):
		"""
		Replace the row labels in place.

		With ``verify_integrity`` the old and new label sets must have the
		same number of distinct labels.
		"""
		labels = self._checked_labels(labels)
		if verify_integrity and len(set(labels)) != len(set(self._index)):
			raise PyFrameLabelError(
				f"New labels have {len(set(labels))} distinct values, "
				f"current labels have {len(set(self._index))}"
			)
		self._index = labels

	def set_index(self, labels):
		self.reindex(labels)

	def add_prefix(self, prefix):
		self._index = [f"{prefix}{label}" for label in self._index]

	def add_suffix(self, suffix):
		self._index = [f"{label}{suffix}" for label in self._index]

	def _keep_positions(self, positions):
		data = _new_storage(self._dtype, (self._data[p] for p in positions))
		return _wrap(data, self._dtype, self._name, [self._index[p] for p in positions])

	def drop(self, labels):
		"""New column without the rows whose label is in ``labels``."""
		if isinstance(labels, str):
			labels = [labels]
		targets = {str(label) for label in labels}
		missing = targets.difference(self._index)
		if missing:
			raise PyFrameKeyError(f"Labels not found in column '{self._name}': {sorted(missing)}")
		return self._keep_positions([p for p, label in enumerate(self._index) if label not in targets])

	def drop_inplace(self, labels):
		dropped = self.drop(labels)
		self._data = dropped._data
		self._index = dropped._index

	def append(self, other, ignore_index=False, verify_integrity=False):
		"""
		New column holding this column's values followed by ``other``'s.

		Always reallocates. ``ignore_index`` renumbers the labels;
		``verify_integrity`` rejects duplicate labels in the result.
		"""
		if other._dtype is not self._dtype:
			raise PyFrameTypeError(
				f"Cannot append a {other._dtype.label} column to a {self._dtype.label} column"
			)
		data = self._data + other._data
		if ignore_index:
			labels = create_index(len(data))
		else:
			labels = self._index + other._index
		if verify_integrity and len(set(labels)) != len(labels):
			dupes = sorted(label for label, count in Counter(labels).items() if count > 1)
			raise PyFrameLabelError(f"Appended column has duplicate labels: {dupes}")
		return _wrap(data, self._dtype, self._name, labels)

	def filter_by_func(self, predicate):
		"""Rows whose label satisfies ``predicate``."""
		return self._keep_positions([p for p, label in enumerate(self._index) if predicate(label)])

	def filter_by_regex(self, pattern):
		"""Rows whose label matches the regular expression ``pattern`` (``re.search``)."""
		regex = re.compile(pattern)
		return self.filter_by_func(lambda label: regex.search(label) is not None)


# ============================================================
# Typed subclasses
# ============================================================

class _NumericColumn(Column):
	"""Reductions and running operations shared by float and int columns."""

	def _box(self, value):
		return self._dtype.box(value)

	def sum(self):
		if self._dtype.is_float:
			return math.fsum(self._data)
		return sum(self._data)

	def mean(self):
		return stats.mean(self._data)

	def variance(self, ddof=1):
		"""Sample variance (``ddof=1``)."""
		return stats.variance(self._data, ddof)

	def pvariance(self):
		return stats.pvariance(self._data)

	def stdev(self, ddof=1):
		return stats.stdev(self._data, ddof)

	def pstdev(self):
		return stats.pstdev(self._data)

	def skewness(self):
		return stats.skewness(self._data)

	def kurtosis(self):
		return stats.kurtosis(self._data)

	def central_moment(self, order):
		return stats.central_moment(self._data, order)

	def central_moments(self, order):
		return stats.central_moments(self._data, order)

	def geometric_mean(self):
		return stats.geometric_mean(self._data)

	def harmonic_mean(self):
		return stats.harmonic_mean(self._data)

	def weighted_mean(self, weights):
		return stats.weighted_mean(self._data, _as_values(weights))

	def weighted_sum(self, weights):
		return stats.weighted_sum(self._data, _as_values(weights))

	def quantile(self, q, interpolation="nearest"):
		return stats.quantile(self._data, q, interpolation)

	def median(self):
		return stats.median(self._data)

	def min(self):
		return self._box(stats.minimum(self._data))

	def max(self):
		return self._box(stats.maximum(self._data))

	def argmin(self):
		return stats.argmin(self._data)

	def argmax(self):
		return stats.argmax(self._data)

	def min_skipnan(self):
		return self._box(stats.min_skipnan(self._data))

	def max_skipnan(self):
		return self._box(stats.max_skipnan(self._data))

	def argmin_skipnan(self):
		return stats.argmin_skipnan(self._data)

	def argmax_skipnan(self):
		return stats.argmax_skipnan(self._data)

	def cov(self, other, ddof=1):
		return stats.cov(self._data, _as_values(other), ddof)

	def corr(self, other):
		return stats.corr(self._data, _as_values(other))

	def all(self):
		"""True if every value is non-zero."""
		return all(v != 0 for v in self._data)

	def any(self):
		return any(v != 0 for v in self._data)

	def count(self):
		"""Number of non-NaN values."""
		return sum(1 for v in self._data if not _is_nan(v))

	def _running(self, func):
		# NaN positions stay NaN and do not reset the running value
		out = []
		current = None
		for v in self._data:
			if _is_nan(v):
				out.append(v)
				continue
			current = v if current is None else func(current, v)
			out.append(current)
		return self._like(out)

	def cum_sum(self):
		return self._running(operator.add)

	def cum_prod(self):
		return self._running(operator.mul)

	def cum_max(self):
		return self._running(max)

	def cum_min(self):
		return self._running(min)

	def _shifted(self, periods, func):
		n = len(self._data)
		out = []
		for i, v in enumerate(self._data):
			j = i - periods
			out.append(func(v, self._data[j]) if 0 <= j < n else math.nan)
		return Column(out, name=self._name, index=self._index, dtype=DataType.F64)

	def diff(self, periods=1):
		"""F64 column of ``x[i] - x[i - periods]``; positions without a partner are NaN."""
		return self._shifted(periods, lambda cur, prev: float(cur - prev))

	def pct_change(self, periods=1):
		"""F64 column of ``x[i] / x[i - periods] - 1``; a zero base gives NaN."""
		return self._shifted(periods, lambda cur, prev: cur / prev - 1 if prev != 0 else math.nan)

	def dot(self, other):
		values = _as_values(other)
		self._check_same_length(values)
		products = [a * b for a, b in zip(self._data, values)]
		if self._dtype.is_float or any(type(p) is float for p in products):
			return math.fsum(products)
		return sum(products)

	def describe(self):
		"""F64 summary column: count, mean, stdev, pstdev, min, quartiles, max."""
		clean = stats.drop_nan(self._data)
		if not clean:
			raise EmptyInputError(f"describe() of column '{self._name}' with no values")
		spread = len(clean) > 1
		summary = {
			"count": float(len(clean)),
			"mean": stats.mean(clean),
			"stdev": stats.stdev(clean) if spread else math.nan,
			"pstdev": stats.pstdev(clean),
			"min": float(min(clean)),
			"25%": float(stats.quantile(clean, 0.25)),
			"50%": float(stats.quantile(clean, 0.5)),
			"75%": float(stats.quantile(clean, 0.75)),
			"max": float(max(clean)),
		}
		return Column(list(summary.values()), name=self._name, index=list(summary), dtype=DataType.F64)


class _FloatColumn(_NumericColumn):

	def isnull(self):
		return Column([_is_nan(v) for v in self._data], name=self._name,
			index=self._index, dtype=DataType.BOOL)

	def notna(self):
		return Column([not _is_nan(v) for v in self._data], name=self._name,
			index=self._index, dtype=DataType.BOOL)

	def fillna(self, value):
		"""Replace NaN with ``value``."""
		return self.mask(value, _is_nan)

	def fillna_inplace(self, value):
		self.mask_inplace(value, _is_nan)

	def dropna(self):
		"""New column without the NaN rows (their labels go too)."""
		return self._keep_positions([p for p, v in enumerate(self._data) if not _is_nan(v)])

	def round(self, ndigits=0):
		return self._like([v if _is_nan(v) else round(v, ndigits) for v in self._data])

	def first_valid_index(self):
		"""Label of the first non-NaN value, or None."""
		for label, v in zip(self._index, self._data):
			if not _is_nan(v):
				return label
		return None


class _IntColumn(_NumericColumn):
	pass


class _BoolColumn(Column):

	def all(self):
		return all(self._data)

	def any(self):
		return any(self._data)

	def count(self):
		"""Number of values (booleans are never missing)."""
		return len(self._data)

	def sum(self):
		"""Number of True values."""
		return sum(self._data)

	def __invert__(self):
		return self._like([not v for v in self])


class _StringColumn(Column):

	def lower(self):
		return self._like([s.lower() for s in self._data])

	def upper(self):
		return self._like([s.upper() for s in self._data])

	def describe(self):
		"""String summary column: count, unique, top (most frequent) and freq."""
		if not self._data:
			raise EmptyInputError(f"describe() of empty column '{self._name}'")
		top, freq = Counter(self._data).most_common(1)[0]
		summary = {
			"count": str(len(self._data)),
			"unique": str(len(set(self._data))),
			"top": str(top),
			"freq": str(freq),
		}
		return Column(list(summary.values()), name=self._name, index=list(summary), dtype=DataType.STRING)
