from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import override

# =============================================================================
# Base classes
# =============================================================================


class Node(ABC):
	"""Base class for output nodes."""

	__slots__: tuple[str, ...] = ()

	@abstractmethod
	def emit(self, out: list[str]) -> None:
		"""Emit this node as host-language code into the output buffer."""


class ExprNode(Node, ABC):
	"""Base class for expression nodes."""

	__slots__: tuple[str, ...] = ()

	def precedence(self) -> int:
		"""Operator precedence (higher = binds tighter). Default: primary (20)."""
		return 20


class StmtNode(Node, ABC):
	"""Base class for statement nodes."""

	__slots__: tuple[str, ...] = ()


# =============================================================================
# Pass-through nodes
# =============================================================================

# Host syntax kinds that can be used as the object of a member access or as a
# callee without parentheses.
PRIMARY_KINDS: frozenset[str] = frozenset(
	{
		"identifier",
		"this",
		"super",
		"call_expression",
		"member_expression",
		"subscript_expression",
		"parenthesized_expression",
		"array",
		"object",
		"string",
		"template_string",
		"regex",
		"true",
		"false",
		"null",
		"undefined",
	}
)


@dataclass(slots=True)
class Verbatim(ExprNode):
	"""A host syntax subtree reproduced from the original source.

	Parts alternate between source text (everything between two rewritten
	children, including whitespace and comments) and child nodes. `kind` is the
	host grammar node type and drives precedence.
	"""

	kind: str
	parts: Sequence[str | Node]

	@override
	def precedence(self) -> int:
		return 20 if self.kind in PRIMARY_KINDS else 0

	@override
	def emit(self, out: list[str]) -> None:
		# Nested Verbatim parts are flattened with a stack: untouched source can
		# nest far deeper than the Python stack allows.
		stack = [iter(self.parts)]
		while stack:
			part = next(stack[-1], None)
			if part is None:
				stack.pop()
			elif isinstance(part, str):
				out.append(part)
			elif isinstance(part, Verbatim):
				stack.append(iter(part.parts))
			elif isinstance(part, ExprNode):
				# Rewritten child spliced into untouched syntax
				_emit_primary(part, out)
			else:
				part.emit(out)


@dataclass(slots=True)
class Program(Node):
	"""Top-level program: source trivia interleaved with statements."""

	parts: Sequence[str | Node]

	@override
	def emit(self, out: list[str]) -> None:
		for part in self.parts:
			if isinstance(part, str):
				out.append(part)
			else:
				part.emit(out)


# =============================================================================
# Expression Nodes
# =============================================================================


@dataclass(slots=True)
class Identifier(ExprNode):
	"""Identifier: m, silence, sliderWithID"""

	name: str

	@override
	def emit(self, out: list[str]) -> None:
		out.append(self.name)


@dataclass(slots=True)
class Literal(ExprNode):
	"""Literal: 42, "bd sd" """

	value: int | str

	@override
	def emit(self, out: list[str]) -> None:
		if isinstance(self.value, str):
			out.append('"')
			out.append(_escape_string(self.value))
			out.append('"')
		else:
			out.append(str(self.value))


@dataclass(slots=True)
class Member(ExprNode):
	"""Member access: obj.prop"""

	obj: ExprNode
	prop: str

	@override
	def emit(self, out: list[str]) -> None:
		_emit_primary(self.obj, out)
		out.append(".")
		out.append(self.prop)


@dataclass(slots=True)
class Call(ExprNode):
	"""Function call: fn(args)"""

	callee: ExprNode
	args: Sequence[ExprNode]

	@override
	def emit(self, out: list[str]) -> None:
		_emit_primary(self.callee, out)
		out.append("(")
		for i, a in enumerate(self.args):
			if i > 0:
				out.append(", ")
			a.emit(out)
		out.append(")")


@dataclass(slots=True)
class Await(ExprNode):
	"""Await expression: await x"""

	operand: ExprNode

	@override
	def precedence(self) -> int:
		return _PRECEDENCE["await"]

	@override
	def emit(self, out: list[str]) -> None:
		out.append("await ")
		if self.operand.precedence() < self.precedence():
			out.append("(")
			self.operand.emit(out)
			out.append(")")
		else:
			self.operand.emit(out)


@dataclass(slots=True)
class Arrow(ExprNode):
	"""Arrow function without parameters: () => expr, async () => { ... }"""

	body: ExprNode | Block
	is_async: bool = False

	@override
	def precedence(self) -> int:
		return _PRECEDENCE["=>"]

	@override
	def emit(self, out: list[str]) -> None:
		if self.is_async:
			out.append("async ")
		out.append("() => ")
		self.body.emit(out)


# =============================================================================
# Statement Nodes
# =============================================================================


@dataclass(slots=True)
class Return(StmtNode):
	"""Return statement: return expr;"""

	value: ExprNode

	@override
	def emit(self, out: list[str]) -> None:
		out.append("return ")
		self.value.emit(out)
		out.append(";")


@dataclass(slots=True)
class ExprStmt(StmtNode):
	"""Expression statement: expr;"""

	expr: ExprNode

	@override
	def emit(self, out: list[str]) -> None:
		self.expr.emit(out)
		out.append(";")


@dataclass(slots=True)
class Block(StmtNode):
	"""Block: { ... } - a sequence of statements."""

	body: Sequence[Node]

	@override
	def emit(self, out: list[str]) -> None:
		out.append("{\n")
		for stmt in self.body:
			stmt.emit(out)
			out.append("\n")
		out.append("}")


# =============================================================================
# Emit logic
# =============================================================================


def emit(node: Node) -> str:
	"""Emit a node as host-language code."""
	out: list[str] = []
	node.emit(out)
	return "".join(out)


# Operator precedence table (higher = binds tighter)
_PRECEDENCE: dict[str, int] = {
	"await": 17,
	"=>": 2,
}


def _escape_string(s: str) -> str:
	"""Escape for double-quoted string literals."""
	return (
		s.replace("\\", "\\\\")
		.replace('"', '\\"')
		.replace("\n", "\\n")
		.replace("\r", "\\r")
		.replace("\t", "\\t")
		.replace("\b", "\\b")
		.replace("\f", "\\f")
		.replace("\v", "\\v")
		.replace("\x00", "\\x00")
		.replace("\u2028", "\\u2028")
		.replace("\u2029", "\\u2029")
	)


def _emit_primary(node: ExprNode, out: list[str]) -> None:
	"""Emit with parens if not primary precedence."""
	if node.precedence() < 20:
		out.append("(")
		node.emit(out)
		out.append(")")
	else:
		node.emit(out)


__all__ = [
	"Arrow",
	"Await",
	"Block",
	"Call",
	"ExprNode",
	"ExprStmt",
	"Identifier",
	"Literal",
	"Member",
	"Node",
	"PRIMARY_KINDS",
	"Program",
	"Return",
	"StmtNode",
	"Verbatim",
	"emit",
]
