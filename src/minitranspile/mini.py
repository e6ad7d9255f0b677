"""
Leaf locations for mini-notation.

Mini-notation is the compact rhythm grammar found inside pattern strings:
``"bd*2 [hh sd] <c3 e3>(3,8)"``. For highlighting, only the leaves matter: the
words that produce events (``bd``, ``hh``, ``sd``, ``c3``, ``e3``). Operator
arguments (``*2``, ``/4``, ``@3``, ``!2``, ``%4``, ``?0.5``), Euclid arguments
``(3,8)``, rests (``~`` and ``-``) and elongation marks (``_``) are skipped.

The scanner is lenient: unknown characters are ignored and
unbalanced brackets simply end at the close of the text. It never raises.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import NamedTuple, TypeAlias


class MiniLocation(NamedTuple):
	"""A [start, end) character span of one leaf in the original source."""

	start: int
	end: int


# Registered sub-language handlers may nest locations.
Location: TypeAlias = "MiniLocation | Sequence[Location]"

_STEP_PUNCT = frozenset("~-#.^_")
_MODIFIERS = frozenset("*/!@%?")
_OPEN_TO_CLOSE = {"[": "]", "<": ">", "{": "}", "(": ")"}
_REST_WORDS = frozenset({"~", "-"})


def _is_step(ch: str) -> bool:
	return ch.isalnum() or ch in _STEP_PUNCT


def _scan_word(code: str, i: int) -> int:
	"""End index of the word starting at `i`. `bd:3` counts as one word."""
	n = len(code)
	while i < n:
		ch = code[i]
		if _is_step(ch):
			i += 1
		elif ch == ":" and i + 1 < n and _is_step(code[i + 1]):
			i += 1
		else:
			break
	return i


def _skip_group(code: str, i: int) -> int:
	"""Index just past the bracket group opening at `i`."""
	stack = [_OPEN_TO_CLOSE[code[i]]]
	i += 1
	n = len(code)
	while i < n and stack:
		ch = code[i]
		if ch in _OPEN_TO_CLOSE:
			stack.append(_OPEN_TO_CLOSE[ch])
		elif ch == stack[-1]:
			stack.pop()
		i += 1
	return i


def _is_leaf(word: str) -> bool:
	if word in _REST_WORDS:
		return False
	# "." separates feet, "_" elongates the previous step
	return bool(word.strip("._"))


def get_leaf_locations(code: str, offset: int = 0) -> list[MiniLocation]:
	"""Locations of the leaves of `code`, shifted by `offset`.

	`code` is expected to include its delimiter, e.g. ``'"bd hh"'`` with
	`offset` pointing at the opening quote in the host source.
	"""
	locations: list[MiniLocation] = []
	n = len(code)
	i = 0
	while i < n:
		ch = code[i]
		if _is_step(ch):
			end = _scan_word(code, i)
			if _is_leaf(code[i:end]):
				locations.append(MiniLocation(offset + i, offset + end))
			i = end
		elif ch in _MODIFIERS:
			i += 1
			if i < n and _is_step(code[i]):
				i = _scan_word(code, i)
			elif i < n and code[i] in _OPEN_TO_CLOSE:
				i = _skip_group(code, i)
		elif ch == "(":
			# Euclid arguments: bd(3,8,2)
			i = _skip_group(code, i)
		else:
			i += 1
	return locations


def quoted_regions(code: str) -> list[tuple[int, int]]:
	"""[start, end) spans of the double-quoted regions of `code`, quotes excluded.

	An unterminated final quote extends to the end of `code`.
	"""
	regions: list[tuple[int, int]] = []
	opened: int | None = None
	for i, ch in enumerate(code):
		if ch != '"':
			continue
		if opened is None:
			opened = i + 1
		else:
			regions.append((opened, i))
			opened = None
	if opened is not None:
		regions.append((opened, len(code)))
	return regions


def get_tidal_locations(code: str, offset: int = 0) -> list[MiniLocation]:
	"""Leaf locations of every quoted pattern inside a tidal-style program."""
	locations: list[MiniLocation] = []
	for start, end in quoted_regions(code):
		pattern = code[start:end]
		locations.extend(get_leaf_locations(f'"{pattern}"', offset + start - 1))
	return locations


def normalize_locations(locations: Sequence[object]) -> list[Location]:
	"""Turn [start, end] pairs from a sub-language handler into MiniLocations.

	Nested groups keep their nesting.
	"""
	result: list[Location] = []
	for item in locations:
		if isinstance(item, MiniLocation):
			result.append(item)
		elif isinstance(item, dict) and "start" in item and "end" in item:
			result.append(MiniLocation(int(item["start"]), int(item["end"])))
		elif (
			isinstance(item, Sequence)
			and not isinstance(item, str)
			and len(item) == 2
			and all(isinstance(v, int) and not isinstance(v, bool) for v in item)
		):
			result.append(MiniLocation(item[0], item[1]))
		elif isinstance(item, Sequence) and not isinstance(item, str):
			result.append(normalize_locations(item))
		else:
			raise TypeError(f"Invalid mini location: {item!r}")
	return result


__all__ = [
	"Location",
	"MiniLocation",
	"get_leaf_locations",
	"get_tidal_locations",
	"normalize_locations",
	"quoted_regions",
]
