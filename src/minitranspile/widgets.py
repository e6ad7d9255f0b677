"""Widget descriptors and widget IDs."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from minitranspile.source import NOT_LITERAL


@dataclass(slots=True, frozen=True)
class Argument:
	"""One call argument as seen by widget extraction."""

	raw: str
	start: int
	end: int
	value: Any = NOT_LITERAL

	@property
	def is_literal(self) -> bool:
		return self.value is not NOT_LITERAL

	def value_or(self, default: Any) -> Any:
		return self.value if self.is_literal else default


@dataclass(slots=True, frozen=True)
class Widget:
	"""An interactive control bound to one literal in the source.

	`value` is the raw literal text, never the evaluated value, so the editor
	can write it back losslessly.
	"""

	type: str
	to: int
	from_: int | None = None
	value: str | None = None
	options: tuple[Any, ...] | None = None
	min: Any = None
	max: Any = None
	step: Any = None
	id: str | None = None
	index: int | None = None

	def to_json(self) -> dict[str, Any]:
		"""Editor-facing dict: `from_` becomes `from`, absent keys are dropped."""
		out: dict[str, Any] = {}
		if self.from_ is not None:
			out["from"] = self.from_
		out["to"] = self.to
		out["type"] = self.type
		if self.value is not None:
			out["value"] = self.value
		if self.options is not None:
			out["options"] = list(self.options)
		for key in ("min", "max", "step", "id", "index"):
			value = getattr(self, key)
			if value is not None:
				out[key] = value
		return out


def native_widget_id(kind: str, start: int) -> str:
	"""ID of a slider/toggle/radio: tied to the start of its first argument."""
	return f"{kind}_{start}"


def widget_id(type: str, index: int, caller_id: str | None = None) -> str:
	"""ID of a chained widget method call.

	Positional rather than offset based: editing unrelated code does not
	change it, so per-widget resources keyed by ID are reused.
	"""
	return f"{caller_id or ''}_widget_{type}_{index}"


def slider_widget(args: Sequence[Argument]) -> Widget:
	first = args[0]
	min_ = args[1].value_or(0) if len(args) > 1 else 0
	max_ = args[2].value_or(1) if len(args) > 2 else 1
	step = args[3].value_or(None) if len(args) > 3 else None
	return Widget(
		type="slider",
		from_=first.start,
		to=first.end,
		value=first.raw,
		min=min_,
		max=max_,
		step=step,
		id=native_widget_id("slider", first.start),
	)


def toggle_widget(args: Sequence[Argument]) -> Widget:
	first = args[0]
	return Widget(
		type="toggle",
		from_=first.start,
		to=first.end,
		value=first.raw,
		id=native_widget_id("toggle", first.start),
	)


def radio_widget(args: Sequence[Argument]) -> Widget:
	first = args[0]
	options = tuple(
		arg.value if arg.is_literal and arg.value is not None else arg.raw
		for arg in args
	)
	return Widget(
		type="radio",
		from_=first.start,
		to=first.end,
		value=first.raw,
		options=options,
		id=native_widget_id("radio", first.start),
	)


def method_widget(
	method: str, index: int, end: int, caller_id: str | None = None
) -> Widget:
	"""Descriptor of a chained widget method call.

	`id` holds the caller id, so `widget_id(w.type, w.index, w.id)` rebuilds the
	ID passed to the call.
	"""
	return Widget(type=method, to=end, index=index, id=caller_id)


# Natively recognized widget constructors -> (descriptor factory, ID-aware callee)
NATIVE_WIDGETS: dict[str, tuple[Callable[[Sequence[Argument]], Widget], str]] = {
	"slider": (slider_widget, "sliderWithID"),
	"toggle": (toggle_widget, "toggleWithID"),
	"radio": (radio_widget, "radioWithID"),
}


__all__ = [
	"NATIVE_WIDGETS",
	"Argument",
	"Widget",
	"method_widget",
	"native_widget_id",
	"radio_widget",
	"slider_widget",
	"toggle_widget",
	"widget_id",
]
