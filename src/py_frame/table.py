import operator

from .block import _check_axis
from .column import Column
from .display import MAX_HEAD_ROWS
from .display import render_html
from .display import render_text
from .errors import PyFrameIndexError
from .errors import PyFrameKeyError
from .errors import PyFrameLengthError
from .errors import PyFrameTypeError
from .naming import attribute_map
from .store import BlockStore
from .typing import DataType
from .typing import as_dtype


def _missing_col_error(name, context="Table"):
	return PyFrameKeyError(f"Column '{name}' not found in {context}")


def _as_name_list(names):
	if isinstance(names, str):
		return [names]
	return list(names)


class _RowView:
	"""Lightweight view of one table row with attribute and name access."""
	__slots__ = ('_values', '_positions', '_attrs', '_label', '_row')

	def __init__(self, values, positions, attrs, label, row):
		# values: one list per column, shared by every row view of an iteration
		self._values = values
		self._positions = positions
		self._attrs = attrs
		self._label = label
		self._row = row

	@property
	def label(self):
		return self._label

	def __getattr__(self, attr):
		"""Access column values by sanitized attribute name."""
		name = self._attrs.get(attr)
		if name is None:
			raise AttributeError(f"Row has no attribute '{attr}'")
		return self._values[self._positions[name]][self._row]

	def __getitem__(self, key):
		"""Access column values by position or column name."""
		if isinstance(key, int):
			return self._values[key][self._row]
		if isinstance(key, str):
			position = self._positions.get(key)
			if position is None:
				raise _missing_col_error(key, "row")
			return self._values[position][self._row]
		raise PyFrameTypeError(f"Row indices must be int or str, not {type(key).__name__}")

	def __iter__(self):
		row = self._row
		for values in self._values:
			yield values[row]

	def __len__(self):
		return len(self._values)

	def to_dict(self):
		return {name: self._values[pos][self._row] for name, pos in self._positions.items()}

	def __repr__(self):
		values = [repr(values[self._row]) for values in self._values]
		return f"Row({self._label}: {', '.join(values)})"


class Table():
	"""
	Named, equal-length, typed columns.

	Columns are stored grouped by DataType and shown in insertion order.
	Typed bulk operations name their target DataType explicitly; columns
	of any other type are left out of the operation.
	"""

	def __init__(self, initial=None):
		"""
		Build a table from ``{name: values}`` (insertion order) or from a list
		of Columns. Columns passed in are copied, never adopted.
		"""
		self._store = BlockStore()
		if initial is None:
			return
		if isinstance(initial, dict):
			for name, values in initial.items():
				if isinstance(values, Column):
					column = values.rename(str(name))
				else:
					column = Column(values, name=str(name))
				self._store.add_column(column)
			return
		for column in initial:
			if not isinstance(column, Column):
				raise PyFrameTypeError(
					f"Table expects a dict or a list of Columns, got an item of type {type(column).__name__}"
				)
			self.add_column(column)

	@classmethod
	def _from_store(cls, store):
		table = cls.__new__(cls)
		table._store = store
		return table

	@classmethod
	def from_dict(cls, mapping, sort_keys=False):
		"""Table from ``{name: values}``; ``sort_keys`` orders columns by name."""
		keys = sorted(mapping) if sort_keys else list(mapping)
		return cls({key: mapping[key] for key in keys})

	@classmethod
	def from_rows(cls, rows):
		"""Table from row-major data; columns are named ``"0"``, ``"1"``, ..."""
		rows = [list(row) for row in rows]
		table = cls()
		if not rows:
			return table
		width = len(rows[0])
		for row in rows:
			if len(row) != width:
				raise PyFrameLengthError(width, len(row),
					f"All rows must have the same number of values. Expected {width}, got {len(row)}")
		for values in zip(*rows):
			table.add_column(Column(list(values)), preserve_name=False)
		return table

	@classmethod
	def from_columns(cls, columns, preserve_names=True):
		table = cls()
		for column in columns:
			table.add_column(column, preserve_name=preserve_names)
		return table

	#-----------------------------------------------------
	# Insertion & lookup
	#-----------------------------------------------------

	def add_column(self, column, preserve_name=True):
		"""
		Insert a copy of ``column`` and return the name it was stored under.

		A name collision (or ``preserve_name=False``) renames the column to the
		current column count. Unsupported columns are dropped with a warning
		and None is returned.
		"""
		return self._store.add_column(column.copy(), preserve_name)

	def get(self, name, dtype):
		"""Copy of column ``name`` if it is stored as ``dtype``, else None."""
		column = self._store.get(name, dtype)
		return None if column is None else column.copy()

	def column(self, name, dtype=None):
		"""Copy of column ``name``.

		Raises PyFrameKeyError if absent and PyFrameTypeError if ``dtype`` is
		given and does not match.
		"""
		return self._store.column(name, dtype).copy()

	def __getitem__(self, key):
		if isinstance(key, str):
			return self.column(key)
		if isinstance(key, (list, tuple)):
			return self.select(key)
		raise PyFrameTypeError(f"Table keys must be a column name or a list of names, not {type(key).__name__}")

	def __getattr__(self, attr):
		if attr.startswith('_'):
			raise AttributeError(attr)
		name = attribute_map(self._store.names).get(attr)
		if name is None:
			raise AttributeError(f"Table has no column or attribute '{attr}'")
		return self.column(name)

	def __dir__(self):
		return list(super().__dir__()) + list(attribute_map(self._store.names))

	def __contains__(self, name):
		return name in self._store

	def __len__(self):
		return self._store.nrows

	@property
	def shape(self):
		return (self._store.nrows, self._store.ncols)

	@property
	def index(self):
		return self._store.index

	def column_names(self):
		return self._store.names

	def columns(self):
		"""Copies of all columns in presentation order."""
		return [column.copy() for column in self._store.iter_columns()]

	def dtypes(self):
		"""Snapshot of name -> DataType."""
		return self._store.dtypes()

	def __iter__(self):
		"""Iterate over rows as lightweight row views."""
		names = self._store.names
		values = [column.to_list() for column in self._store.iter_columns()]
		positions = {name: i for i, name in enumerate(names)}
		attrs = attribute_map(names)
		index = self._store.index
		for row in range(self._store.nrows):
			yield _RowView(values, positions, attrs, index[row], row)

	def clone(self):
		"""Deep copy. Unsupported columns are not carried over."""
		return Table._from_store(self._store.copy())

	copy = clone

	#-----------------------------------------------------
	# Typed bulk operations
	#-----------------------------------------------------

	def _rebuild(self, replacements):
		"""New table in presentation order, swapping in ``replacements`` by name."""
		store = BlockStore()
		for column in self._store.iter_columns():
			replacement = replacements.get(column.name)
			store.add_column(column.copy() if replacement is None else replacement)
		return Table._from_store(store)

	def apply(self, dtype, func, axis="columns"):
		"""
		Reduce the ``dtype`` columns with ``func`` into one Column.

		``axis="columns"`` gives one value per column, ``axis="rows"`` one per
		row. Returns None when the table has no ``dtype`` columns.
		"""
		block = self._store.block(dtype)
		if block is None:
			return None
		return block.apply(func, axis)

	def apply_map(self, dtype, func):
		"""New table with ``func`` applied to every value of the ``dtype`` columns."""
		block = self._store.block(dtype)
		if block is None:
			return self.clone()
		return self._rebuild({column.name: column for column in block.apply_map(func)})

	def par_apply_map(self, dtype, func, max_workers=None):
		"""apply_map with the ``dtype`` columns mapped on worker threads."""
		block = self._store.block(dtype)
		if block is None:
			return self.clone()
		return self._rebuild({column.name: column for column in block.par_apply(func, max_workers)})

	def apply_map_inplace(self, dtype, func):
		block = self._store.block(dtype)
		if block is not None:
			block.apply_inplace(func)

	def transform(self, dtype, func, axis="columns", out_dtype=None, parallel=False, max_workers=None):
		"""
		New table built from the ``dtype`` columns by a list-to-list ``func``.

		Only the transformed columns are returned. None when the table has no
		``dtype`` columns.
		"""
		_check_axis(axis)
		block = self._store.block(dtype)
		if block is None:
			return None
		result = block.transform(func, axis, out_dtype, parallel, max_workers)
		store = BlockStore()
		for column in result:
			store.add_column(column)
		return Table._from_store(store)

	def mask(self, dtype, value, cond):
		"""New table where ``dtype`` values satisfying ``cond`` become ``value``."""
		table = self.clone()
		table.mask_inplace(dtype, value, cond)
		return table

	def mask_inplace(self, dtype, value, cond):
		block = self._store.block(dtype)
		if block is not None:
			block.mask_inplace(value, cond)

	def as_type(self, src, dst):
		"""New table with every ``src`` column widened to ``dst``."""
		block = self._store.block(src)
		if block is None:
			return self.clone()
		return self._rebuild({column.name: column for column in block.as_type(dst)})

	def to_matrix(self, dtype):
		"""Row-major list of lists of the ``dtype`` columns, or None."""
		block = self._store.block(dtype)
		if block is None:
			return None
		return block.to_rows()

	def at(self, column, label, dtype=None):
		return self._store.column(column, dtype).at(label)

	def assign(self, key, new_name, func, dtype=None):
		"""New table with ``func`` applied to column ``key`` and stored as ``new_name``."""
		table = self.clone()
		table.assign_inplace(key, new_name, func, dtype)
		return table

	def assign_inplace(self, key, new_name, func, dtype=None):
		source = self._store.column(key, dtype)
		result = source.transform(func)
		result.set_name(new_name)
		return self._store.add_column(result)

	def combine(self, other, dtype, func):
		"""
		Pairwise ``func`` over the ``dtype`` columns whose name exists as
		``dtype`` in both tables. Other columns are left out.
		"""
		dtype = as_dtype(dtype)
		store = BlockStore()
		for column in self._store.iter_columns():
			if column.dtype is not dtype:
				continue
			partner = other._store.get(column.name, dtype)
			if partner is not None:
				store.add_column(column.combine(partner, func))
		return Table._from_store(store)

	#-----------------------------------------------------
	# Column management
	#-----------------------------------------------------

	def drop(self, labels):
		"""New table without the rows whose label is in ``labels``.

		Every column drops the same rows; the row count and labels follow.
		"""
		if self._store.is_empty():
			return self.clone()
		targets = {str(label) for label in _as_name_list(labels)}
		missing = targets.difference(self._store.index)
		if missing:
			raise PyFrameKeyError(f"Labels not found in Table: {sorted(missing)}")
		store = BlockStore()
		for column in self._store.iter_columns():
			store.add_column(column.drop(targets))
		return Table._from_store(store)

	def drop_inplace(self, labels):
		# build first so a failure leaves the table untouched
		self._store = self.drop(labels)._store

	def drop_columns(self, names):
		table = self.clone()
		table.drop_columns_inplace(names)
		return table

	def drop_columns_inplace(self, names):
		names = _as_name_list(names)
		for name in names:
			if name not in self._store:
				raise _missing_col_error(name)
		for name in names:
			self._store.remove(name)

	def pop(self, name):
		"""Remove column ``name`` and return it."""
		if name not in self._store:
			raise _missing_col_error(name)
		return self._store.remove(name)

	def column_at(self, position, dtype=None):
		"""Copy of the column at ``position`` in presentation order."""
		names = self._store.names
		if not -len(names) <= position < len(names):
			raise PyFrameIndexError(f"No column at position {position} in a table with {len(names)} columns")
		return self.column(names[position], dtype)

	def rename_column(self, old, new):
		self._store.rename(old, new)

	def select(self, names):
		"""New table with copies of ``names`` in the given order."""
		store = BlockStore()
		for name in _as_name_list(names):
			store.add_column(self._store.column(name).copy())
		return Table._from_store(store)

	#-----------------------------------------------------
	# Arithmetic
	#-----------------------------------------------------

	def _elementwise_operation(self, other, op_func, op_symbol, reflected=False):
		"""
		Table (op) Table keeps the numeric columns present under the same name
		and DataType on both sides. Table (op) scalar applies to every numeric
		column.
		"""
		store = BlockStore()
		for column in self._store.iter_columns():
			if not column.dtype.is_numeric:
				continue
			if isinstance(other, Table):
				partner = other._store.get(column.name, column.dtype)
				if partner is None:
					continue
				store.add_column(column._elementwise_operation(partner, op_func, op_symbol))
			else:
				store.add_column(column._elementwise_operation(other, op_func, op_symbol, reflected))
		return Table._from_store(store)

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

	def __radd__(self, other):
		return self._elementwise_operation(other, operator.add, '+', reflected=True)

	def __rsub__(self, other):
		return self._elementwise_operation(other, operator.sub, '-', reflected=True)

	def __rmul__(self, other):
		return self._elementwise_operation(other, operator.mul, '*', reflected=True)

	def __rtruediv__(self, other):
		return self._elementwise_operation(other, operator.truediv, '/', reflected=True)

	#-----------------------------------------------------
	# Statistics
	#-----------------------------------------------------

	def _numeric_columns(self, dtype=None):
		if dtype is None:
			return [column for column in self._store.iter_columns() if column.dtype.is_numeric]
		dtype = as_dtype(dtype)
		if not dtype.is_numeric:
			raise PyFrameTypeError(f"Statistics need a numeric dtype, not {dtype.label}")
		block = self._store.block(dtype)
		return list(block) if block is not None else []

	def _reduce(self, method, *args, dtype=None):
		columns = self._numeric_columns(dtype)
		return Column(
			[float(getattr(column, method)(*args)) for column in columns],
			name=method,
			index=[column.name for column in columns],
			dtype=DataType.F64,
		)

	def sum(self, dtype=None):
		return self._reduce("sum", dtype=dtype)

	def mean(self, dtype=None):
		return self._reduce("mean", dtype=dtype)

	def min(self, dtype=None):
		return self._reduce("min", dtype=dtype)

	def max(self, dtype=None):
		return self._reduce("max", dtype=dtype)

	def variance(self, dtype=None):
		return self._reduce("variance", dtype=dtype)

	def pvariance(self, dtype=None):
		return self._reduce("pvariance", dtype=dtype)

	def stdev(self, dtype=None):
		return self._reduce("stdev", dtype=dtype)

	def pstdev(self, dtype=None):
		return self._reduce("pstdev", dtype=dtype)

	def skewness(self, dtype=None):
		return self._reduce("skewness", dtype=dtype)

	def kurtosis(self, dtype=None):
		return self._reduce("kurtosis", dtype=dtype)

	def geometric_mean(self, dtype=None):
		return self._reduce("geometric_mean", dtype=dtype)

	def central_moment(self, order, dtype=None):
		return self._reduce("central_moment", order, dtype=dtype)

	def quantile(self, q, interpolation="nearest", dtype=None):
		return self._reduce("quantile", q, interpolation, dtype=dtype)

	def _per_column(self, method, result_dtype, dtype=None):
		columns = self._numeric_columns(dtype)
		return Column(
			[getattr(column, method)() for column in columns],
			name=method,
			index=[column.name for column in columns],
			dtype=result_dtype,
		)

	def count(self, dtype=None):
		"""Number of non-NaN values in each numeric column."""
		return self._per_column("count", DataType.I64, dtype)

	def all(self, dtype=None):
		"""Whether every value of each numeric column is non-zero."""
		return self._per_column("all", DataType.BOOL, dtype)

	def any(self, dtype=None):
		return self._per_column("any", DataType.BOOL, dtype)

	def _running(self, method, dtype=None):
		store = BlockStore()
		for column in self._numeric_columns(dtype):
			store.add_column(getattr(column, method)())
		return Table._from_store(store)

	def cum_sum(self, dtype=None):
		"""Table of running sums of the numeric columns; NaN positions stay NaN."""
		return self._running("cum_sum", dtype)

	def cum_prod(self, dtype=None):
		return self._running("cum_prod", dtype)

	def cum_min(self, dtype=None):
		return self._running("cum_min", dtype)

	def cum_max(self, dtype=None):
		return self._running("cum_max", dtype)

	def _pairwise(self, method, *args):
		columns = self._numeric_columns()
		names = [column.name for column in columns]
		store = BlockStore()
		for right in columns:
			values = [getattr(left, method)(right, *args) for left in columns]
			store.add_column(Column(values, name=right.name, index=names, dtype=DataType.F64))
		return Table._from_store(store)

	def cov(self, ddof=1):
		"""Covariance table over the numeric columns."""
		return self._pairwise("cov", ddof)

	def corr(self):
		"""Pearson correlation table over the numeric columns."""
		return self._pairwise("corr")

	def describe(self):
		"""Summary rows (count, mean, stdev, ...) for every numeric column."""
		return Table.from_columns(column.describe() for column in self._numeric_columns())

	#-----------------------------------------------------
	# Presentation
	#-----------------------------------------------------

	def _grid_columns(self):
		return [(column.name, column.dtype, column._data) for column in self._store.iter_columns()]

	def _check_rows(self, n):
		if n < 0 or n > self._store.nrows:
			raise PyFrameIndexError(f"Cannot show {n} rows of a table with {self._store.nrows} rows")

	def _head_positions(self, n):
		self._check_rows(n)
		return list(range(n))

	def _tail_positions(self, n):
		self._check_rows(n)
		return list(range(self._store.nrows - n, self._store.nrows))

	def head(self, n=MAX_HEAD_ROWS, file=None):
		"""Print the first ``n`` rows to ``file`` (stdout by default)."""
		positions = self._head_positions(n)
		print(render_text(self._store.index, self._grid_columns(), positions, summary=False), file=file)

	def tail(self, n=MAX_HEAD_ROWS, file=None):
		"""Print the last ``n`` rows to ``file`` (stdout by default)."""
		positions = self._tail_positions(n)
		print(render_text(self._store.index, self._grid_columns(), positions, summary=False), file=file)

	def head_html(self, n=MAX_HEAD_ROWS):
		return render_html(self._store.index, self._grid_columns(), self._head_positions(n))

	def tail_html(self, n=MAX_HEAD_ROWS):
		return render_html(self._store.index, self._grid_columns(), self._tail_positions(n))

	def _repr_html_(self):
		return render_html(self._store.index, self._grid_columns(), show_types=True)

	def __str__(self):
		return render_text(self._store.index, self._grid_columns())

	def __repr__(self):
		return render_text(self._store.index, self._grid_columns(), debug=True)
