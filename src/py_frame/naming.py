"""Row-label generation and column-name handling for attribute access."""

from __future__ import annotations
import keyword
import re


DEFAULT_COLUMN_NAME = "column"


def create_index(length: int, prefix: str = "", suffix: str = "") -> list[str]:
	"""Default row labels: ``prefix + position + suffix`` for each position."""
	return [f"{prefix}{i}{suffix}" for i in range(length)]


def attribute_name(name) -> str | None:
	"""Identifier under which a column is reachable as ``table.<attr>``.

	Lowercases, collapses runs of non-word characters to ``_``, trims
	underscores, prefixes a leading digit with ``c`` and suffixes Python
	keywords with ``_``. Returns None when nothing usable is left.
	"""
	text = re.sub(r'\W+', '_', str(name).strip().lower()).strip('_')
	if not text:
		return None
	if text[0].isdigit():
		text = "c" + text
	if keyword.iskeyword(text):
		text += "_"
	return text


def _next_free(base: str, taken) -> str:
	if base not in taken:
		return base
	n = 2
	while f"{base}_{n}" in taken:
		n += 1
	return f"{base}_{n}"


def attribute_map(names) -> dict[str, str]:
	"""Map attribute identifiers to column names, first come first served."""
	mapping = {}
	for name in names:
		attr = attribute_name(name)
		if attr is None:
			continue
		mapping[_next_free(attr, mapping)] = name
	return mapping
