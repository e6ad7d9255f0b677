import json
from pathlib import Path

import pytest
from minitranspile.cli import cli
from minitranspile.env import ENV_MINITRANSPILE_CALLER_ID
from minitranspile.registry import register_widget_method
from typer.testing import CliRunner

runner = CliRunner()


def test_transpile_file(tmp_path: Path):
	file = tmp_path / "pattern.js"
	file.write_text('s("bd sd")', encoding="utf-8")
	result = runner.invoke(cli, ["transpile", str(file)])
	assert result.exit_code == 0
	assert result.stdout.strip() == 'return s(m("bd sd", 2));'


def test_transpile_stdin_json():
	result = runner.invoke(cli, ["transpile", "-", "--json"], input='s(slider(0.5))')
	assert result.exit_code == 0
	data = json.loads(result.stdout)
	assert data["output"] == 'return s(sliderWithID("slider_9", 0.5));'
	assert data["miniLocations"] == []
	assert data["widgets"][0]["id"] == "slider_9"


def test_transpile_flags():
	result = runner.invoke(
		cli, ["transpile", "-", "--no-return", "--wrap-async"], input='s("bd")'
	)
	assert result.exit_code == 0
	assert result.stdout.strip() == '(async () => {\ns(m("bd", 2));\n})()'


def test_transpile_no_locations_json():
	result = runner.invoke(
		cli, ["transpile", "-", "--json", "--no-locations"], input='s("bd")'
	)
	assert result.exit_code == 0
	assert json.loads(result.stdout) == {"output": 'return s(m("bd", 2));'}


def test_caller_id_from_environment(monkeypatch: pytest.MonkeyPatch):
	monkeypatch.setenv(ENV_MINITRANSPILE_CALLER_ID, "ed")
	register_widget_method("_scope")
	result = runner.invoke(cli, ["transpile", "-"], input="a._scope()")
	assert result.exit_code == 0
	assert result.stdout.strip() == 'return a._scope("ed_widget__scope_0");'


def test_caller_id_option_wins(monkeypatch: pytest.MonkeyPatch):
	monkeypatch.setenv(ENV_MINITRANSPILE_CALLER_ID, "ed")
	register_widget_method("_scope")
	result = runner.invoke(cli, ["transpile", "-", "--id", "cli"], input="a._scope()")
	assert result.stdout.strip() == 'return a._scope("cli_widget__scope_0");'


def test_missing_file(tmp_path: Path):
	result = runner.invoke(cli, ["transpile", str(tmp_path / "nope.js")])
	assert result.exit_code == 1


def test_syntax_error_exit_code():
	result = runner.invoke(cli, ["transpile", "-"], input='s("bd"')
	assert result.exit_code == 1


def test_shape_error_exit_code():
	result = runner.invoke(cli, ["transpile", "-"], input="let x = 1")
	assert result.exit_code == 1


def test_locations():
	result = runner.invoke(cli, ["locations", "bd sd"])
	assert result.exit_code == 0
	assert json.loads(result.stdout) == [[1, 3], [4, 6]]


def test_locations_offset():
	result = runner.invoke(cli, ["locations", "bd*2 hh", "--offset", "10"])
	assert json.loads(result.stdout) == [[11, 13], [16, 18]]


def test_long_chain():
	code = 's("bd")' + ".fast(2)" * 300
	result = runner.invoke(cli, ["transpile", "-"], input=code)
	assert result.exit_code == 0
	assert result.stdout.strip() == 'return s(m("bd", 2))' + ".fast(2)" * 300 + ";"


def test_too_deep_exit_code():
	code = "slider(" * 1000 + "1" + ")" * 1000
	result = runner.invoke(cli, ["transpile", "-"], input=code)
	assert result.exit_code == 1
	assert not isinstance(result.exception, RecursionError)
