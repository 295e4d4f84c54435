"""Block: the group of all columns that share one DataType."""

from concurrent.futures import ThreadPoolExecutor

from .column import Column
from .errors import PyFrameInvariantError
from .errors import PyFrameKeyError
from .errors import PyFrameTypeError
from .errors import PyFrameValueError
from .naming import DEFAULT_COLUMN_NAME
from .typing import DataType
from .typing import as_dtype


AXES = ("rows", "columns")


def _check_axis(axis):
	if axis not in AXES:
		raise PyFrameValueError(f"axis must be 'rows' or 'columns', not {axis!r}")
	return axis


def _parallel_map(func, items, max_workers=None):
	"""Map ``func`` over ``items`` on a thread pool; results keep input order."""
	if not items:
		return []
	with ThreadPoolExecutor(max_workers=max_workers) as executor:
		return list(executor.map(func, items))


class Block():
	"""
	Ordered group of equal-length columns with one DataType.

	Each column belongs to exactly one Block. Cross-block length equality is
	the store's job; a Block only checks its own columns against each other.
	"""

	def __init__(self, dtype):
		self._dtype = as_dtype(dtype)
		self._columns = []
		self._names = []

	@property
	def dtype(self) -> DataType:
		return self._dtype

	@property
	def names(self):
		return list(self._names)

	@property
	def nrows(self):
		return len(self._columns[0]) if self._columns else 0

	def __len__(self):
		"""Number of columns."""
		return len(self._columns)

	def __iter__(self):
		return iter(self._columns)

	def __repr__(self):
		return f"Block({self._dtype!r}, columns={self._names})"

	def push(self, column):
		"""Append a column. A tag or length mismatch is a programmer error."""
		if column.dtype is not self._dtype:
			raise PyFrameInvariantError(
				f"Cannot push a {column.dtype.label} column into a {self._dtype.label} block"
			)
		if self._columns and len(column) != self.nrows:
			raise PyFrameInvariantError(
				f"Block columns have length {self.nrows}, pushed column has length {len(column)}"
			)
		self._columns.append(column)
		self._names.append(column.name)

	def column(self, name):
		"""The column called ``name``, or None."""
		try:
			return self._columns[self._names.index(name)]
		except ValueError:
			return None

	def get(self, position):
		return self._columns[position]

	def remove(self, name):
		"""Take the column called ``name`` out of the block and return it."""
		try:
			position = self._names.index(name)
		except ValueError:
			raise PyFrameKeyError(f"Column '{name}' not found in {self._dtype.label} block") from None
		del self._names[position]
		return self._columns.pop(position)

	def rename(self, old, new):
		position = self._names.index(old)
		self._names[position] = new
		self._columns[position].set_name(new)

	def value_at(self, column_position, row):
		return self._columns[column_position][row]

	def to_rows(self):
		"""Row-major list of lists; one entry per row, columns in block order."""
		return [list(row) for row in zip(*(column.to_list() for column in self._columns))]

	def copy(self):
		block = Block(self._dtype)
		for column in self._columns:
			block.push(column.copy())
		return block

	def _rebuilt(self, columns):
		block = Block(columns[0].dtype if columns else self._dtype)
		for column in columns:
			block.push(column)
		return block

	#-----------------------------------------------------
	# Bulk operations
	#-----------------------------------------------------

	def apply(self, func, axis="columns", dtype=None, name=DEFAULT_COLUMN_NAME):
		"""
		Reduce along an axis into one Column.

		``axis="rows"`` calls ``func`` on each row (a list holding one value per
		column) and yields a column of length nrows. ``axis="columns"`` calls
		``func`` on each column's values and yields a column labelled by
		column name.
		"""
		if _check_axis(axis) == "rows":
			index = self._columns[0].index if self._columns else []
			results = [func(row) for row in self.to_rows()]
			return Column(results, name=name, index=index, dtype=dtype)
		results = [func(column.to_list()) for column in self._columns]
		return Column(results, name=name, index=self._names, dtype=dtype)

	def apply_map(self, func):
		"""New block with ``func`` applied to every value."""
		return self._rebuilt([column.apply(func) for column in self._columns])

	def par_apply(self, func, max_workers=None):
		"""Like apply_map, but each column is mapped on its own worker thread."""
		return self._rebuilt(_parallel_map(lambda column: column.apply(func), self._columns, max_workers))

	def apply_inplace(self, func):
		# Compute everything first so a failing func leaves the block untouched
		mapped = [column.apply(func) for column in self._columns]
		for column, result in zip(self._columns, mapped):
			column._data = result._data

	def transform(self, func, axis="columns", dtype=None, parallel=False, max_workers=None):
		"""
		New block from a list-to-list ``func``.

		Column-wise, ``func`` maps each column's values (optionally on a
		thread pool). Row-wise, ``func`` maps each row and the output rows are
		reassembled into columns; rows always run sequentially.
		"""
		if not self._columns:
			return Block(self._dtype if dtype is None else dtype)

		if _check_axis(axis) == "columns":
			def _one(column):
				return Column(list(func(column.to_list())), name=column.name, dtype=dtype)
			if parallel:
				columns = _parallel_map(_one, self._columns, max_workers)
			else:
				columns = [_one(column) for column in self._columns]
			lengths = {len(column) for column in columns}
			if len(lengths) > 1:
				raise PyFrameInvariantError(f"transform produced columns of different lengths: {sorted(lengths)}")
			if lengths == {self.nrows}:
				for column, source in zip(columns, self._columns):
					column.reindex(source.index)
			return self._rebuilt(self._unify(columns))

		rows = [list(func(row)) for row in self.to_rows()]
		width = len(self._columns)
		if any(len(row) != width for row in rows):
			raise PyFrameInvariantError(f"Row-wise transform must return {width} values per row")
		index = self._columns[0].index
		values = list(zip(*rows)) if rows else [[] for _ in range(width)]
		columns = [
			Column(list(vals), name=name, index=index, dtype=dtype)
			for name, vals in zip(self._names, values)
		]
		return self._rebuilt(self._unify(columns))

	def _unify(self, columns):
		tags = {column.dtype for column in columns}
		if len(tags) > 1:
			raise PyFrameTypeError(
				f"transform produced mixed dtypes: {', '.join(sorted(t.label for t in tags))}"
			)
		return columns

	def as_type(self, dtype):
		"""New block with every column converted to ``dtype`` (widening only)."""
		dtype = as_dtype(dtype)
		block = Block(dtype)
		for column in self._columns:
			block.push(column.as_type(dtype))
		return block

	def mask_inplace(self, value, cond):
		masked = [column.mask(value, cond) for column in self._columns]
		for column, result in zip(self._columns, masked):
			column._data = result._data
