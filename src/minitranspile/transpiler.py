"""
Live-coding source -> runnable source transpiler.

One pre-order walk over the host syntax tree. Each node is classified (see
`minitranspile.classify`); matched nodes are replaced by output nodes, every
other node is reproduced verbatim around its (possibly rewritten) children.
While walking, the transpiler records:

- mini locations: source spans of the leaves of every pattern literal, used
  by the editor to highlight what is currently sounding
- widgets: descriptors of sliders, toggles, radios and chained widget
  methods, used by the editor to render controls at the right offsets

After the walk, the last top-level expression becomes the return value.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields, replace
from typing import Any

from tree_sitter import Node as HostNode

from minitranspile.classify import TIDAL_TAG, Rule, classify
from minitranspile.errors import ProgramShapeError, TranspileError
from minitranspile.mini import (
	Location,
	get_leaf_locations,
	get_tidal_locations,
	normalize_locations,
)
from minitranspile.nodes import (
	Arrow,
	Await,
	Block,
	Call,
	ExprNode,
	ExprStmt,
	Identifier,
	Literal,
	Member,
	Node,
	Program,
	Return,
	Verbatim,
	emit,
)
from minitranspile.registry import DEFAULT_REGISTRY, MINILANG, Registry
from minitranspile.source import TRIVIA_KINDS, SourceText, first_expression
from minitranspile.widgets import (
	NATIVE_WIDGETS,
	Argument,
	Widget,
	method_widget,
	widget_id,
)

logger = logging.getLogger(__name__)

# Default pattern constructor: m(value, offset)
PATTERN_FN = "m"
# Emitted when the program has no statements
SILENCE = "silence"
# Chaining method used by the label sugar: `x: expr` -> `expr.p("x")`
LABEL_METHOD = "p"

# Absolute URLs (sample banks, remote files) are never pattern notation
_URL = re.compile(r"\b[a-zA-Z][a-zA-Z0-9+.\-]*://|^\s*github:")


def is_url(value: str) -> bool:
	return "http://" in value or "https://" in value or bool(_URL.search(value))


# Keys accepted by TranspileOptions.from_mapping() besides the field names
_OPTION_ALIASES: dict[str, str] = {
	"wrapAsync": "wrap_async",
	"addReturn": "add_return",
	"emitMiniLocations": "emit_locations",
	"emitLocations": "emit_locations",
	"emitWidgets": "emit_widgets",
	"callerId": "caller_id",
	"id": "caller_id",
}


@dataclass(slots=True, frozen=True)
class TranspileOptions:
	"""Per-call options.

	wrap_async: wrap the program in an immediately invoked async arrow
	add_return: turn the last top-level expression into a return statement
	emit_locations: collect mini locations (and return them with the widgets)
	emit_widgets: collect widget descriptors
	caller_id: namespace for chained widget method IDs, e.g. an editor id
	"""

	wrap_async: bool = False
	add_return: bool = True
	emit_locations: bool = True
	emit_widgets: bool = True
	caller_id: str | None = None

	@classmethod
	def from_mapping(cls, options: Mapping[str, Any]) -> TranspileOptions:
		names = {f.name for f in fields(cls)}
		kwargs: dict[str, Any] = {}
		for key, value in options.items():
			name = _OPTION_ALIASES.get(key, key)
			if name not in names:
				raise TypeError(f"Unknown transpile option {key!r}")
			kwargs[name] = value
		return cls(**kwargs)


@dataclass(slots=True)
class TransformResult:
	output: str
	mini_locations: list[Location] | None = None
	widgets: list[Widget] | None = None

	def to_json(self) -> dict[str, Any]:
		out: dict[str, Any] = {"output": self.output}
		if self.mini_locations is not None:
			out["miniLocations"] = _locations_json(self.mini_locations)
		if self.widgets is not None:
			out["widgets"] = [w.to_json() for w in self.widgets]
		return out


def _locations_json(locations: list[Location]) -> list[Any]:
	return [
		list(loc) if isinstance(loc, tuple) else _locations_json(list(loc))
		for loc in locations
	]


@dataclass(slots=True)
class _Frame:
	"""An untouched host node whose children are being walked."""

	node: HostNode
	children: list[HostNode]
	cursor: int
	index: int = 0
	parts: list[str | Node] = field(default_factory=list)


@dataclass(slots=True)
class Transpiler:
	"""Single-use walker over one parsed program."""

	source: SourceText
	options: TranspileOptions = field(default_factory=TranspileOptions)
	registry: Registry = field(default_factory=lambda: DEFAULT_REGISTRY)
	mini_locations: list[Location] = field(default_factory=list)
	widgets: list[Widget] = field(default_factory=list)
	_method_counts: dict[str, int] = field(default_factory=dict)

	# --- Entrypoint ---------------------------------------------------------

	def transpile(self) -> TransformResult:
		program = self.finalize(self.emit_program(self.source.root))
		output = emit(program)
		if not self.options.emit_locations:
			return TransformResult(output)
		return TransformResult(output, self.mini_locations, self.widgets)

	# --- Walk ---------------------------------------------------------------

	def emit_program(self, root: HostNode) -> Program:
		parts: list[str | Node] = []
		cursor = 0
		for child in root.named_children:
			if child.start_byte > cursor:
				parts.append(self.source.slice(cursor, child.start_byte))
			if child.type in TRIVIA_KINDS:
				parts.append(self.source.text_of(child))
			elif child.type == "expression_statement":
				parts.append(self.emit_statement(child))
			else:
				parts.append(self.visit(child, root))
			cursor = child.end_byte
		if cursor < len(self.source.data):
			parts.append(self.source.slice(cursor, len(self.source.data)))
		return Program(parts)

	def emit_statement(self, node: HostNode) -> Node:
		expr = first_expression(node)
		if expr is None:
			return self.verbatim(node)
		return ExprStmt(self.visit_expr(expr, node))

	def visit(self, node: HostNode, parent: HostNode | None) -> Node:
		rule = classify(node, parent, self.source, self.registry)
		if rule is Rule.NONE:
			return self.verbatim(node)
		return self.rewrite(rule, node)

	def visit_expr(self, node: HostNode, parent: HostNode | None) -> ExprNode:
		result = self.visit(node, parent)
		assert isinstance(result, ExprNode), node.type
		return result

	def rewrite(self, rule: Rule, node: HostNode) -> Node:
		logger.debug("%s at %d: %s", rule.name, self.source.start(node), node.type)
		return _REWRITERS[rule](self, node)

	def verbatim(self, node: HostNode) -> Verbatim:
		"""Reproduce `node` from source, visiting its children.

		Untouched subtrees are walked with an explicit stack, so the depth of a
		method chain or an operator sequence is not bounded by the Python stack.
		"""
		stack = [_Frame(node, node.named_children, node.start_byte)]
		while True:
			frame = stack[-1]
			if frame.index < len(frame.children):
				child = frame.children[frame.index]
				frame.index += 1
				if child.start_byte > frame.cursor:
					frame.parts.append(self.source.slice(frame.cursor, child.start_byte))
				frame.cursor = child.end_byte
				rule = classify(child, frame.node, self.source, self.registry)
				if rule is Rule.NONE:
					stack.append(_Frame(child, child.named_children, child.start_byte))
				else:
					frame.parts.append(self.rewrite(rule, child))
				continue
			if frame.cursor < frame.node.end_byte:
				frame.parts.append(self.source.slice(frame.cursor, frame.node.end_byte))
			result = Verbatim(frame.node.type, frame.parts)
			stack.pop()
			if not stack:
				return result
			stack[-1].parts.append(result)

	def untouched(self, node: HostNode) -> Verbatim:
		"""Reproduce `node` from source without visiting anything below it."""
		return Verbatim(node.type, [self.source.text_of(node)])

	def visit_arguments(self, node: HostNode) -> list[ExprNode]:
		args = node.child_by_field_name("arguments")
		return [self.visit_expr(arg, args) for arg in self.source.arguments(node)]

	# --- Sub-languages ------------------------------------------------------

	def rewrite_sub_language(self, node: HostNode) -> ExprNode:
		tag = self.source.text_of(node.child_by_field_name("function"))
		language = self.registry.sub_language(tag)
		assert language is not None
		raw, offset = self.source.template_raw(node.child_by_field_name("arguments"))
		if self.options.emit_locations:
			locations = language.get_locations(raw, offset)
			self.mini_locations.extend(normalize_locations(locations))
		return Call(Identifier(tag), [Literal(raw), Literal(offset)])

	def rewrite_tidal(self, node: HostNode) -> ExprNode:
		raw, offset = self.source.template_raw(node.child_by_field_name("arguments"))
		if self.options.emit_locations:
			self.mini_locations.extend(get_tidal_locations(raw, offset))
		return Call(Identifier(TIDAL_TAG), [Literal(raw), Literal(offset)])

	# --- Pattern literals ---------------------------------------------------

	def rewrite_template(self, node: HostNode) -> ExprNode:
		raw, _ = self.source.template_raw(node)
		return self.rewrite_pattern(node, raw)

	def rewrite_string(self, node: HostNode) -> ExprNode:
		return self.rewrite_pattern(node, self.source.string_value(node))

	def rewrite_pattern(self, node: HostNode, value: str) -> ExprNode:
		if is_url(value):
			logger.debug("Skipping URL literal at %d", self.source.start(node))
			return self.untouched(node)
		start = self.source.start(node)
		minilang = self.registry.sub_language(MINILANG)
		if self.options.emit_locations:
			if minilang is not None:
				locations = minilang.get_locations(f"[{value}]", start)
				self.mini_locations.extend(normalize_locations(locations))
			else:
				self.mini_locations.extend(get_leaf_locations(f'"{value}"', start))
		name = minilang.name if minilang is not None and minilang.name else PATTERN_FN
		return Call(Identifier(name), [Literal(value), Literal(start)])

	# --- Widgets ------------------------------------------------------------

	def _argument(self, node: HostNode) -> Argument:
		return Argument(
			raw=self.source.text_of(node),
			start=self.source.start(node),
			end=self.source.end(node),
			value=self.source.literal_value(node),
		)

	def rewrite_native_widget(self, node: HostNode) -> ExprNode:
		kind = self.source.text_of(node.child_by_field_name("function"))
		args = self.source.arguments(node)
		if not args:
			logger.debug("%s() without a value at %d", kind, self.source.start(node))
			return self.verbatim(node)
		factory, callee = NATIVE_WIDGETS[kind]
		widget = factory([self._argument(arg) for arg in args])
		if self.options.emit_widgets:
			self.widgets.append(widget)
		args_out = self.visit_arguments(node)
		return Call(Identifier(callee), [Literal(widget.id), *args_out])

	def rewrite_widget_method(self, node: HostNode) -> ExprNode:
		callee = node.child_by_field_name("function")
		method = self.source.text_of(callee.child_by_field_name("property"))
		index = self._method_counts.get(method, 0)
		self._method_counts[method] = index + 1
		widget = method_widget(
			method, index, self.source.end(node), self.options.caller_id
		)
		if self.options.emit_widgets:
			self.widgets.append(widget)
		callee_out = self.visit_expr(callee, node)
		id_ = widget_id(method, index, self.options.caller_id)
		return Call(callee_out, [Literal(id_), *self.visit_arguments(node)])

	# --- Control-flow sugar -------------------------------------------------

	def rewrite_bare_samples(self, node: HostNode) -> ExprNode:
		return Await(self.verbatim(node))

	def rewrite_label(self, node: HostNode) -> ExprStmt:
		label = self.source.text_of(node.child_by_field_name("label"))
		body = node.child_by_field_name("body")
		expression = first_expression(body)
		assert expression is not None
		expr = self.visit_expr(expression, body)
		return ExprStmt(Call(Member(expr, LABEL_METHOD), [Literal(label)]))

	# --- Finalize -----------------------------------------------------------

	def finalize(self, program: Program) -> Program:
		parts = list(program.parts)
		statements = [i for i, part in enumerate(parts) if not isinstance(part, str)]
		if not statements:
			logger.warning("empty body -> fallback to %s", SILENCE)
			if parts and not parts[-1].endswith("\n"):
				parts.append("\n")
			parts.append(ExprStmt(Identifier(SILENCE)))
			statements = [len(parts) - 1]
		last = parts[statements[-1]]
		if not isinstance(last, ExprStmt):
			kind = last.kind if isinstance(last, Verbatim) else type(last).__name__
			raise ProgramShapeError(
				f"The last statement must be an expression, got {kind}"
			)
		if self.options.add_return:
			parts[statements[-1]] = Return(last.expr)
		if self.options.wrap_async:
			body = Block([Program(parts)])
			return Program([Call(Arrow(body, is_async=True), [])])
		return Program(parts)


_REWRITERS: dict[Rule, Callable[[Transpiler, HostNode], Node]] = {
	Rule.SUB_LANGUAGE: Transpiler.rewrite_sub_language,
	Rule.TIDAL: Transpiler.rewrite_tidal,
	Rule.TEMPLATE: Transpiler.rewrite_template,
	Rule.STRING: Transpiler.rewrite_string,
	Rule.SLIDER: Transpiler.rewrite_native_widget,
	Rule.TOGGLE: Transpiler.rewrite_native_widget,
	Rule.RADIO: Transpiler.rewrite_native_widget,
	Rule.WIDGET_METHOD: Transpiler.rewrite_widget_method,
	Rule.BARE_SAMPLES: Transpiler.rewrite_bare_samples,
	Rule.LABEL: Transpiler.rewrite_label,
}


def transpile(
	source: str,
	options: TranspileOptions | Mapping[str, Any] | None = None,
	*,
	registry: Registry | None = None,
	**overrides: Any,
) -> TransformResult:
	"""Transpile live-coding source into runnable source.

	Raises TranspileSyntaxError when the source does not parse,
	ProgramShapeError when the last statement is not an expression and
	TranspileError when rewritten nodes nest too deeply.
	"""
	if options is None:
		opts = TranspileOptions()
	elif isinstance(options, TranspileOptions):
		opts = options
	else:
		opts = TranspileOptions.from_mapping(options)
	if overrides:
		opts = replace(opts, **overrides)
	parsed = SourceText.parse(source)
	transpiler = Transpiler(
		parsed, opts, registry if registry is not None else DEFAULT_REGISTRY
	)
	try:
		return transpiler.transpile()
	except RecursionError as exc:
		# Nested rewrites (widgets inside widgets) still recurse
		raise TranspileError("Program is nested too deeply to transpile") from exc


__all__ = [
	"LABEL_METHOD",
	"PATTERN_FN",
	"SILENCE",
	"TransformResult",
	"TranspileOptions",
	"Transpiler",
	"is_url",
	"transpile",
]
