"""Text and HTML rendering for Column and Table."""

from __future__ import annotations
import html
import math
from typing import List

from .typing import DataType


# More than TRUNCATE_ABOVE rows are shown as the first and last MAX_HEAD_ROWS
MAX_HEAD_ROWS = 5
TRUNCATE_ABOVE = 10
FLOAT_PRECISION = 3
MAX_STRING_WIDTH = 30
# Row count from which str(table) appends a "[R rows x C columns]" line
SUMMARY_THRESHOLD = 50

ELLIPSIS = "..."


def preview_positions(nrows: int) -> list:
	"""Row positions to render; None marks the ellipsis row."""
	if nrows > TRUNCATE_ABOVE:
		return list(range(MAX_HEAD_ROWS)) + [None] + list(range(nrows - MAX_HEAD_ROWS, nrows))
	return list(range(nrows))


def format_value(value, dtype: DataType) -> str:
	"""One cell of output."""
	if dtype.is_float:
		if math.isnan(value):
			return "NaN"
		return f"{value:.{FLOAT_PRECISION}f}"
	if dtype is DataType.BOOL:
		return str(bool(value))
	if dtype.is_text or dtype is DataType.OBJECT:
		text = str(value)
		if len(text) > MAX_STRING_WIDTH:
			return text[:MAX_STRING_WIDTH - len(ELLIPSIS)] + ELLIPSIS
		return text
	return str(value)


def _needs_quoting(name: str) -> bool:
	return name == "" or name != name.strip()


def _header_text(name) -> str:
	name = str(name)
	return repr(name) if _needs_quoting(name) else name


def _pad(cells: List[str], right: bool) -> List[str]:
	width = max(len(c) for c in cells) if cells else 0
	if right:
		return [c.rjust(width) for c in cells]
	return [c.ljust(width) for c in cells]


def render_grid(index, columns, positions, show_types=False) -> List[str]:
	"""Lay out a grid of rows.

	``columns`` is a list of ``(name, dtype, values)`` triples where ``values``
	supports positional indexing. Numeric columns are right-aligned.
	"""
	header_rows = 2 if show_types else 1
	labels = [""] * header_rows + [ELLIPSIS if p is None else str(index[p]) for p in positions]
	blocks = [_pad(labels, right=False)]

	for name, dtype, values in columns:
		cells = [_header_text(name)]
		if show_types:
			cells.append(repr(dtype))
		cells.extend(ELLIPSIS if p is None else format_value(values[p], dtype) for p in positions)
		blocks.append(_pad(cells, right=dtype.is_numeric))

	return ["  ".join(row).rstrip() for row in zip(*blocks)]


def table_footer(nrows: int, dtypes) -> str:
	dtypes = list(dtypes)
	if not dtypes:
		return f"# {nrows}×0 table"
	return f"# {nrows}×{len(dtypes)} table <{', '.join(d.label for d in dtypes)}>"


def render_text(index, columns, positions=None, debug=False, summary=True) -> str:
	"""Grid for ``str(table)`` (plain) and ``repr(table)`` (debug, with a types row)."""
	nrows = len(index)
	if positions is None:
		positions = preview_positions(nrows)
	lines = render_grid(index, columns, positions, show_types=debug)

	if debug:
		lines.append("")
		lines.append(table_footer(nrows, (dtype for _, dtype, _ in columns)))
	elif summary and nrows >= SUMMARY_THRESHOLD:
		lines.append("")
		lines.append(f"[{nrows} rows x {len(columns)} columns]")
	return "\n".join(lines)


def render_column(name, dtype: DataType, index, values) -> str:
	"""Pretty repr for a single Column."""
	nrows = len(index)
	lines = render_grid(index, [(name, dtype, values)], preview_positions(nrows))
	lines.append("")
	lines.append(f"# {nrows} element column <{dtype.label}>")
	return "\n".join(lines)


def render_html(index, columns, positions=None, show_types=False) -> str:
	"""HTML table for notebook front ends."""
	nrows = len(index)
	if positions is None:
		positions = preview_positions(nrows)

	out = ['<table class="py-frame">', "<thead>", "<tr><th></th>"]
	out.extend(f"<th>{html.escape(str(name))}</th>" for name, _, _ in columns)
	out.append("</tr>")
	if show_types:
		out.append("<tr><th></th>")
		out.extend(f"<th>{html.escape(dtype.label)}</th>" for _, dtype, _ in columns)
		out.append("</tr>")
	out.append("</thead>")

	out.append("<tbody>")
	for p in positions:
		if p is None:
			out.append("<tr><th>...</th>" + "<td>...</td>" * len(columns) + "</tr>")
			continue
		cells = "".join(
			f"<td>{html.escape(format_value(values[p], dtype))}</td>"
			for _, dtype, values in columns
		)
		out.append(f"<tr><th>{html.escape(str(index[p]))}</th>{cells}</tr>")
	out.append("</tbody>")
	out.append("</table>")
	out.append(f"<p>{nrows} rows × {len(columns)} columns</p>")
	return "\n".join(out)
