"""Tests for host source parsing helpers."""

import pytest
from minitranspile.errors import TranspileSyntaxError
from minitranspile.source import NOT_LITERAL, SourceText, parse_number, unescape


class TestUnescape:
	def test_plain(self):
		assert unescape("bd sd") == "bd sd"

	def test_simple_escapes(self):
		assert unescape(r"a\nb\tc\"d") == 'a\nb\tc"d'

	def test_unicode_escapes(self):
		assert unescape(r"A\x42\u{43}") == "ABC"

	def test_surrogate_pair(self):
		assert unescape(r"\ud83d\ude00") == "\U0001f600"

	def test_line_continuation(self):
		assert unescape("a\\\nb") == "ab"


class TestParseNumber:
	@pytest.mark.parametrize(
		"text,expected",
		[
			("1", 1),
			("0.5", 0.5),
			(".5", 0.5),
			("1e3", 1000.0),
			("0x1f", 31),
			("0b101", 5),
			("1_000", 1000),
			("10n", 10),
		],
	)
	def test_parse(self, text: str, expected: float):
		assert parse_number(text) == expected


class TestSourceText:
	def test_offsets_are_characters(self):
		source = SourceText.parse('s("é")\ns("bd")')
		stmt = source.root.named_children[1]
		assert source.start(stmt) == 7
		assert source.text_of(stmt) == 's("bd")'

	def test_line_column(self):
		source = SourceText.parse("a\nbc")
		assert source.line_column(3) == (2, 1)

	def test_literal_value(self):
		source = SourceText.parse('f("a", 1, -2, true, null, x)')
		call = source.root.named_children[0].named_children[0]
		values = [source.literal_value(a) for a in source.arguments(call)]
		assert values == ["a", 1, -2, True, None, NOT_LITERAL]

	def test_arguments_skip_comments(self):
		source = SourceText.parse("f(1 /* one */, 2)")
		call = source.root.named_children[0].named_children[0]
		assert [source.text_of(a) for a in source.arguments(call)] == ["1", "2"]

	def test_syntax_error(self):
		with pytest.raises(TranspileSyntaxError) as info:
			SourceText.parse("s(\n)))")
		assert info.value.line >= 1
		assert info.value.offset >= 0
