"""
Host source parsing.

Wraps a tree-sitter JavaScript parse of the program text and translates
tree-sitter byte positions into character offsets of the original `str`,
which is the only position unit exposed to callers.
"""

from __future__ import annotations

import logging
import re
from functools import cache
from typing import Any, Final

from tree_sitter import Language, Node, Parser, Tree
from tree_sitter_language_pack import get_language

from minitranspile.errors import TranspileSyntaxError

logger = logging.getLogger(__name__)

# Returned by literal_value() for anything that is not a plain literal
NOT_LITERAL: Final = object()

# Extras that may appear anywhere in the tree
TRIVIA_KINDS: frozenset[str] = frozenset({"comment", "hash_bang_line", "html_comment"})

_ESCAPE = re.compile(
	r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|[0-7]{1,3}|\r\n|[\s\S])"
)
_SIMPLE_ESCAPES: dict[str, str] = {
	"n": "\n",
	"t": "\t",
	"r": "\r",
	"b": "\b",
	"f": "\f",
	"v": "\v",
	"\n": "",
	"\r": "",
	"\r\n": "",
	"\u2028": "",
	"\u2029": "",
}


@cache
def _language() -> Language:
	return get_language("javascript")


def _unescape_match(match: re.Match[str]) -> str:
	seq = match.group(1)
	if seq in _SIMPLE_ESCAPES:
		return _SIMPLE_ESCAPES[seq]
	if seq.startswith("u{"):
		return chr(int(seq[2:-1], 16))
	if seq[0] in "ux" and len(seq) > 1:
		return chr(int(seq[1:], 16))
	if seq[0] in "01234567":
		return chr(int(seq, 8))
	return seq


def unescape(raw: str) -> str:
	"""Cook the body of a string literal (without its quotes)."""
	if "\\" not in raw:
		return raw
	cooked = _ESCAPE.sub(_unescape_match, raw)
	# Join surrogate pairs written as two \u escapes
	return cooked.encode("utf-16", "surrogatepass").decode("utf-16", "surrogatepass")


def parse_number(text: str) -> int | float:
	"""Parse a numeric literal: 1, 0.5, .5, 1e3, 0x1f, 1_000, 10n."""
	text = text.replace("_", "")
	if text.endswith("n"):
		return int(text[:-1], 0)
	lowered = text.lower()
	if lowered.startswith(("0x", "0o", "0b")):
		return int(text, 0)
	try:
		return int(text)
	except ValueError:
		return float(text)


class SourceText:
	"""Program text plus its syntax tree.

	All public positions are character offsets into `text`.
	"""

	__slots__: tuple[str, ...] = ("text", "data", "tree", "_char_at")

	text: str
	data: bytes
	tree: Tree
	_char_at: list[int] | None

	def __init__(self, text: str) -> None:
		self.text = text
		self.data = text.encode("utf-8")
		self._char_at = None
		parser = Parser()
		parser.language = _language()
		self.tree = parser.parse(self.data)

	@classmethod
	def parse(cls, text: str) -> SourceText:
		"""Parse `text`, raising TranspileSyntaxError if it is malformed."""
		source = cls(text)
		source.check_syntax()
		return source

	@property
	def root(self) -> Node:
		return self.tree.root_node

	# --- Positions -----------------------------------------------------------

	def offset(self, byte: int) -> int:
		"""Convert a byte position into a character offset."""
		if len(self.data) == len(self.text):
			return byte
		if self._char_at is None:
			char_at = [0] * (len(self.data) + 1)
			pos = 0
			for index, ch in enumerate(self.text):
				width = len(ch.encode("utf-8"))
				for k in range(width):
					char_at[pos + k] = index
				pos += width
			char_at[pos] = len(self.text)
			self._char_at = char_at
		return self._char_at[byte]

	def start(self, node: Node) -> int:
		return self.offset(node.start_byte)

	def end(self, node: Node) -> int:
		return self.offset(node.end_byte)

	def line_column(self, offset: int) -> tuple[int, int]:
		line = self.text.count("\n", 0, offset) + 1
		column = offset - (self.text.rfind("\n", 0, offset) + 1)
		return line, column

	# --- Text ----------------------------------------------------------------

	def slice(self, start_byte: int, end_byte: int) -> str:
		return self.data[start_byte:end_byte].decode("utf-8")

	def text_of(self, node: Node) -> str:
		return self.slice(node.start_byte, node.end_byte)

	def string_value(self, node: Node) -> str:
		"""Cooked value of a string literal node."""
		return unescape(self.slice(node.start_byte + 1, node.end_byte - 1))

	def template_raw(self, node: Node) -> tuple[str, int]:
		"""Raw text of a template's first quasi and the offset just past the backtick."""
		end = node.end_byte - 1
		for child in node.named_children:
			if child.type == "template_substitution":
				end = child.start_byte
				break
		return self.slice(node.start_byte + 1, end), self.offset(node.start_byte + 1)

	def literal_value(self, node: Node) -> Any:
		"""Value of a plain literal node, or NOT_LITERAL."""
		kind = node.type
		if kind == "string":
			return self.string_value(node)
		if kind == "number":
			return parse_number(self.text_of(node))
		if kind == "true":
			return True
		if kind == "false":
			return False
		if kind == "null":
			return None
		if kind == "unary_expression":
			operator = node.child_by_field_name("operator")
			argument = node.child_by_field_name("argument")
			if (
				operator is not None
				and argument is not None
				and argument.type == "number"
				and self.text_of(operator) in ("-", "+")
			):
				value = parse_number(self.text_of(argument))
				return -value if self.text_of(operator) == "-" else value
		return NOT_LITERAL

	def arguments(self, call: Node) -> list[Node]:
		"""Argument expressions of a call, comments excluded."""
		args = call.child_by_field_name("arguments")
		if args is None or args.type != "arguments":
			return []
		return [a for a in args.named_children if a.type not in TRIVIA_KINDS]

	# --- Errors --------------------------------------------------------------

	def check_syntax(self) -> None:
		root = self.root
		if not root.has_error:
			return
		bad = _first_error(root) or root
		offset = self.offset(bad.start_byte)
		line, column = self.line_column(offset)
		if bad.is_missing:
			message = f"Missing {bad.type!r}"
		else:
			snippet = self.text_of(bad).strip().splitlines()
			token = snippet[0][:20] if snippet else ""
			message = f"Unexpected token {token!r}" if token else "Unexpected end of input"
		logger.debug("Syntax error at offset %d: %s", offset, message)
		raise TranspileSyntaxError(message, offset=offset, line=line, column=column)


def _first_error(node: Node) -> Node | None:
	"""First ERROR or missing node in document order."""
	stack = [node]
	while stack:
		current = stack.pop()
		if current.type == "ERROR" or current.is_missing:
			return current
		broken = [c for c in current.children if c.has_error or c.is_missing]
		stack.extend(reversed(broken))
	return None


def first_expression(node: Node) -> Node | None:
	"""First named, non-trivia child of `node` (e.g. the expression of a statement)."""
	for child in node.named_children:
		if child.type not in TRIVIA_KINDS:
			return child
	return None


def same_node(a: Node | None, b: Node | None) -> bool:
	if a is None or b is None:
		return False
	return (a.type, a.start_byte, a.end_byte) == (b.type, b.start_byte, b.end_byte)


__all__ = [
	"NOT_LITERAL",
	"TRIVIA_KINDS",
	"SourceText",
	"first_expression",
	"parse_number",
	"same_node",
	"unescape",
]
