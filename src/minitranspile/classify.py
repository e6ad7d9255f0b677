"""
Literal classifier.

Decides, for one host syntax node and its parent, which rewrite applies. The
rules are checked in a fixed order and the first match wins:

1. tagged template whose tag is a registered sub-language
2. ``tidal`...``` tagged template
3. untagged template literal
4. double-quoted string literal
5. (shared pattern extraction for 3 and 4, see the transpiler)
6. ``slider(...)``
7. ``toggle(...)``
8. ``radio(...)``
9. ``expr.method(...)`` for a registered widget method
10. bare ``samples(...)`` outside an ``await``
11. labeled expression statement ``name: expr``
"""

from __future__ import annotations

from enum import Enum, auto

from tree_sitter import Node

from minitranspile.registry import Registry
from minitranspile.source import SourceText, first_expression, same_node

TIDAL_TAG = "tidal"
SAMPLES = "samples"


class Rule(Enum):
	NONE = auto()
	SUB_LANGUAGE = auto()
	TIDAL = auto()
	TEMPLATE = auto()
	STRING = auto()
	SLIDER = auto()
	TOGGLE = auto()
	RADIO = auto()
	WIDGET_METHOD = auto()
	BARE_SAMPLES = auto()
	LABEL = auto()


_NATIVE_WIDGET_RULES: dict[str, Rule] = {
	"slider": Rule.SLIDER,
	"toggle": Rule.TOGGLE,
	"radio": Rule.RADIO,
}


def is_tagged_template(node: Node, parent: Node | None) -> bool:
	"""True if `node` is the template of a tagged template expression."""
	if parent is None or parent.type != "call_expression":
		return False
	return same_node(parent.child_by_field_name("arguments"), node)


def _is_awaited(node: Node) -> bool:
	parent = node.parent
	while parent is not None and parent.type == "parenthesized_expression":
		parent = parent.parent
	return parent is not None and parent.type == "await_expression"


# Parent kind -> field holding a property name, which may be written as a string
_PROPERTY_NAME_FIELDS: dict[str, str] = {
	"pair": "key",
	"pair_pattern": "key",
	"method_definition": "name",
	"field_definition": "property",
	"public_field_definition": "property",
}


def _holds_string_syntax(node: Node, parent: Node | None) -> bool:
	"""Strings the grammar requires to stay strings: property names, specifiers."""
	if parent is None:
		return False
	name_field = _PROPERTY_NAME_FIELDS.get(parent.type)
	if name_field is not None:
		return same_node(parent.child_by_field_name(name_field), node)
	return parent.type in {
		"import_statement",
		"jsx_attribute",
		"export_statement",
		"import_attribute",
		"import_specifier",
		"export_specifier",
		"namespace_export",
		"namespace_import",
	}


def _classify_call(
	node: Node, parent: Node | None, source: SourceText, registry: Registry
) -> Rule:
	callee = node.child_by_field_name("function")
	args = node.child_by_field_name("arguments")
	if callee is None or args is None:
		return Rule.NONE

	if args.type == "template_string":
		if callee.type != "identifier":
			return Rule.NONE
		tag = source.text_of(callee)
		if registry.has_sub_language(tag):
			return Rule.SUB_LANGUAGE
		if tag == TIDAL_TAG:
			return Rule.TIDAL
		return Rule.NONE

	if callee.type == "identifier":
		name = source.text_of(callee)
		if name in _NATIVE_WIDGET_RULES:
			return _NATIVE_WIDGET_RULES[name]
		if name == SAMPLES and not _is_awaited(node):
			return Rule.BARE_SAMPLES
		return Rule.NONE

	if callee.type == "member_expression":
		prop = callee.child_by_field_name("property")
		if prop is not None and registry.is_widget_method(source.text_of(prop)):
			return Rule.WIDGET_METHOD

	return Rule.NONE


def classify(
	node: Node, parent: Node | None, source: SourceText, registry: Registry
) -> Rule:
	kind = node.type
	if kind == "call_expression":
		return _classify_call(node, parent, source, registry)
	if kind == "template_string":
		return Rule.NONE if is_tagged_template(node, parent) else Rule.TEMPLATE
	if kind == "string":
		if source.data[node.start_byte : node.start_byte + 1] != b'"':
			return Rule.NONE
		return Rule.NONE if _holds_string_syntax(node, parent) else Rule.STRING
	if kind == "labeled_statement":
		body = node.child_by_field_name("body")
		if (
			body is not None
			and body.type == "expression_statement"
			and first_expression(body) is not None
		):
			return Rule.LABEL
	return Rule.NONE


__all__ = ["SAMPLES", "TIDAL_TAG", "Rule", "classify", "is_tagged_template"]
