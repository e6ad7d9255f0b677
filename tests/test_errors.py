import pytest
from minitranspile import ProgramShapeError, TranspileError, TranspileSyntaxError, transpile


def test_syntax_error_position():
	with pytest.raises(TranspileSyntaxError) as info:
		transpile('s("bd");\nnote(]')
	err = info.value
	assert isinstance(err, TranspileError)
	assert err.line == 2
	assert err.offset >= 9
	assert f"({err.line}:{err.column})" in str(err)


def test_program_shape_error_is_transpile_error():
	with pytest.raises(TranspileError):
		transpile("function f() {}")


def test_program_shape_error_message():
	with pytest.raises(ProgramShapeError, match="must be an expression"):
		transpile('s("bd")\nif (x) { y() }')
