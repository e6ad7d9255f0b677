"""
Sub-language and widget-method registry.

A `Registry` owns the two append-only tables the transpiler reads:

- sub-languages, keyed by template tag: ``mondo`...``` is handed to the
  handler registered under ``"mondo"``
- widget method names: ``expr._scope()`` is treated as a widget when
  ``"_scope"`` has been registered

Modules contributing either register once at startup through the module level
functions, which write to the process-wide default registry. `transpile()`
accepts an explicit registry so tests and embedders can stay isolated.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, TypeAlias

logger = logging.getLogger(__name__)

# Reserved key of the generic pattern handler used for plain pattern strings
MINILANG = "minilang"

LocationsFn: TypeAlias = Callable[[str, int], Sequence[Any]]


@dataclass(slots=True, frozen=True)
class SubLanguage:
	"""A tagged-template notation and its location extractor.

	`get_locations(code, offset)` returns the leaf locations of `code`, where
	`offset` is the character offset of `code` in the host source. `name`, when
	set on the ``minilang`` entry, replaces the default pattern constructor.
	"""

	tag: str
	get_locations: LocationsFn
	name: str | None = None


class Registry:
	"""Append-only tables of sub-languages and widget method names."""

	__slots__: tuple[str, ...] = ("_languages", "_widget_methods")

	_languages: dict[str, SubLanguage]
	_widget_methods: dict[str, None]

	def __init__(self) -> None:
		self._languages = {}
		self._widget_methods = {}

	def register_sub_language(
		self, tag: str, config: SubLanguage | Mapping[str, Any]
	) -> SubLanguage:
		"""Register (or silently replace) the handler for `tag`."""
		if isinstance(config, SubLanguage):
			language = config
			if config.tag != tag:
				language = SubLanguage(tag, config.get_locations, config.name)
		else:
			get_locations = config.get("get_locations", config.get("getLocations"))
			if not callable(get_locations):
				raise TypeError(
					f"Sub-language {tag!r} needs a callable get_locations(code, offset)"
				)
			language = SubLanguage(tag, get_locations, config.get("name"))
		if tag in self._languages:
			logger.debug("Replacing sub-language %r", tag)
		self._languages[tag] = language
		return language

	def register_widget_method(self, name: str) -> None:
		self._widget_methods[name] = None

	def sub_language(self, tag: str) -> SubLanguage | None:
		return self._languages.get(tag)

	def has_sub_language(self, tag: str) -> bool:
		return tag in self._languages

	def is_widget_method(self, name: str) -> bool:
		return name in self._widget_methods

	@property
	def sub_languages(self) -> list[str]:
		return list(self._languages)

	@property
	def widget_methods(self) -> list[str]:
		return list(self._widget_methods)

	def clear(self) -> None:
		self._languages.clear()
		self._widget_methods.clear()


DEFAULT_REGISTRY = Registry()


def register_sub_language(tag: str, config: SubLanguage | Mapping[str, Any]) -> SubLanguage:
	"""Register a tagged-template sub-language on the default registry."""
	return DEFAULT_REGISTRY.register_sub_language(tag, config)


def register_widget_method(name: str) -> None:
	"""Register a chainable widget-producing method on the default registry."""
	DEFAULT_REGISTRY.register_widget_method(name)


def clear_registry() -> None:
	"""Reset the default registry."""
	DEFAULT_REGISTRY.clear()


__all__ = [
	"DEFAULT_REGISTRY",
	"MINILANG",
	"LocationsFn",
	"Registry",
	"SubLanguage",
	"clear_registry",
	"register_sub_language",
	"register_widget_method",
]
