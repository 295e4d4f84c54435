"""
BlockStore: heterogeneous column storage keyed by DataType.

The store owns every column. Columns live in one Block per DataType; a
name -> DataType map finds a column's block without scanning, and a
separate list keeps presentation (insertion) order.
"""

from __future__ import annotations
import warnings

from .block import Block
from .errors import PyFrameKeyError
from .errors import PyFrameLengthError
from .errors import PyFrameNameError
from .errors import PyFrameTypeError
from .errors import UnsupportedColumnWarning
from .typing import DataType
from .typing import as_dtype


class BlockStore():
	""" Owner of all columns of a table, grouped by DataType """

	def __init__(self):
		self._blocks: dict[DataType, Block] = {}
		self._dtypes: dict[str, DataType] = {}
		self._order: list[str] = []
		self._nrows = 0
		self._index: list[str] = []

	@property
	def names(self):
		return list(self._order)

	@property
	def index(self):
		return list(self._index)

	@property
	def nrows(self):
		return self._nrows

	@property
	def ncols(self):
		return len(self._order)

	def __len__(self):
		return self._nrows

	def __contains__(self, name):
		return name in self._dtypes

	def is_empty(self):
		return not self._order

	def add_column(self, column, preserve_name=True):
		"""
		Insert ``column`` (taking ownership) and return its final name.

		Steps, in order:
		  1. a non-empty store rejects a column of a different length
		  2. OBJECT columns are dropped with a warning (returns None)
		  3. a colliding name (or ``preserve_name=False``) is replaced by the
		     current column count; if that collides too, insertion fails
		  4. an empty store adopts the column's length and labels
		  5. the column joins the block of its DataType
		Every check runs before any state changes, so a rejected insertion
		leaves the store as it was.
		"""
		if self._order and len(column) != self._nrows:
			raise PyFrameLengthError(self._nrows, len(column))

		if column.dtype is DataType.OBJECT:
			warnings.warn(
				f"Column '{column.name}' holds unsupported values and was dropped",
				UnsupportedColumnWarning,
				stacklevel=3
			)
			return None

		name = column.name
		if name in self._dtypes or not preserve_name:
			name = str(len(self._order))
			if name in self._dtypes:
				raise PyFrameNameError(name)

		if not self._order:
			self._nrows = len(column)
			self._index = column.index

		column.set_name(name)
		block = self._blocks.get(column.dtype)
		if block is None:
			block = self._blocks[column.dtype] = Block(column.dtype)
		block.push(column)
		self._order.append(name)
		self._dtypes[name] = column.dtype
		return name

	def get(self, name, dtype):
		"""The column ``name`` if it is stored under ``dtype``, else None.

		A missing name and a type mismatch give the same answer; use
		column() to tell them apart.
		"""
		stored = self._dtypes.get(name)
		if stored is None or stored is not as_dtype(dtype):
			return None
		return self._blocks[stored].column(name)

	def column(self, name, dtype=None):
		"""The column ``name``; raises on absence or (when given) a dtype mismatch."""
		stored = self._dtypes.get(name)
		if stored is None:
			raise PyFrameKeyError(f"Column '{name}' not found")
		if dtype is not None and stored is not as_dtype(dtype):
			raise PyFrameTypeError(
				f"Column '{name}' holds {stored.label}, not {as_dtype(dtype).label}"
			)
		return self._blocks[stored].column(name)

	def block(self, dtype):
		"""The Block for ``dtype``, or None when no such columns exist."""
		block = self._blocks.get(as_dtype(dtype))
		if block is None or not len(block):
			return None
		return block

	def blocks(self):
		return [block for block in self._blocks.values() if len(block)]

	def dtypes(self):
		"""Snapshot of name -> DataType in presentation order."""
		return {name: self._dtypes[name] for name in self._order}

	def iter_columns(self):
		"""Columns in presentation order."""
		for name in self._order:
			yield self._blocks[self._dtypes[name]].column(name)

	def remove(self, name):
		"""Remove and return the column ``name``.

		Removing the last column leaves the row count and labels in place
		until the next insertion replaces them.
		"""
		dtype = self._dtypes.get(name)
		if dtype is None:
			raise PyFrameKeyError(f"Column '{name}' not found")
		column = self._blocks[dtype].remove(name)
		del self._dtypes[name]
		self._order.remove(name)
		return column

	def rename(self, old, new):
		dtype = self._dtypes.get(old)
		if dtype is None:
			raise PyFrameKeyError(f"Column '{old}' not found")
		if new == old:
			return
		if new in self._dtypes:
			raise PyFrameNameError(new)
		self._blocks[dtype].rename(old, new)
		del self._dtypes[old]
		self._dtypes[new] = dtype
		self._order[self._order.index(old)] = new

	def value_at(self, name, row):
		return self.column(name)[row]

	def copy(self):
		"""Deep copy, re-inserting cloned columns in presentation order."""
		store = BlockStore()
		for column in self.iter_columns():
			if column.dtype is not DataType.OBJECT:
				store.add_column(column.copy())
		if store.is_empty():
			store._nrows = self._nrows
			store._index = list(self._index)
		return store
