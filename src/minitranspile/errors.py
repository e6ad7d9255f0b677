from __future__ import annotations


class TranspileError(Exception):
	"""Error during transpilation."""


class TranspileSyntaxError(TranspileError):
	"""The host source could not be parsed.

	Carries the character offset of the first offending token together with
	its 1-based line and 0-based column, so an editor can point at it.
	"""

	offset: int
	line: int
	column: int

	def __init__(self, message: str, *, offset: int, line: int, column: int) -> None:
		super().__init__(f"{message} ({line}:{column})")
		self.offset = offset
		self.line = line
		self.column = column


class ProgramShapeError(TranspileError):
	"""The last top-level statement is not an expression statement."""


__all__ = ["ProgramShapeError", "TranspileError", "TranspileSyntaxError"]
