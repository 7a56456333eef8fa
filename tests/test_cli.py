"""
Tests for the command-line interface.
"""

import io
import json
import logging

import pytest

from robot_dsl.__main__ import main


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("ROBOT_DSL_CONFIG", "ROBOT_DSL_SCOPING", "ROBOT_DSL_VALUE_STORAGE",
                 "ROBOT_DSL_ERROR_POLICY", "ROBOT_DSL_INTEGER_LITERALS"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def script(tmp_path):
    def write(source, name="script.dsl"):
        path = tmp_path / name
        path.write_text(source, encoding="utf-8")
        return str(path)
    return write


class TestRun:
    """Test the run command."""

    def test_run_prints(self, script, capsys):
        assert main(["run", script('global x = 42; speak x;')]) == 0
        assert capsys.readouterr().out == "42\n"

    def test_run_reads_stdin(self, script, capsys, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO("Ann\n"))
        assert main(["run", script('input n; speak "hi " + n;')]) == 0
        assert capsys.readouterr().out == "hi Ann\n"

    def test_exit_status_zero(self, script, capsys):
        assert main(["run", script('loop { speak "x"; exit; }')]) == 0
        assert capsys.readouterr().out == "x\n"

    def test_runtime_error(self, script, capsys):
        assert main(["run", script("speak ghost;")]) == 1
        captured = capsys.readouterr()
        assert "E401" in captured.err
        assert "speak ghost;" in captured.err

    def test_parse_error(self, script, capsys):
        assert main(["run", script("speak 1")]) == 1
        assert "E102" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        assert main(["run", str(tmp_path / "absent.dsl")]) == 1
        assert "File not found" in capsys.readouterr().err

    def test_legacy_flag(self, script, capsys):
        path = script("{ global t = 1; } speak t;")
        assert main(["run", path]) == 1
        capsys.readouterr()
        assert main(["run", path, "--legacy"]) == 0
        assert capsys.readouterr().out == "1\n"

    def test_scoping_flag(self, script, capsys):
        assert main(["run", script("x = 5; speak x;"), "--scoping", "merge"]) == 0
        assert capsys.readouterr().out == "5\n"

    def test_continue_on_error(self, script, capsys):
        path = script('speak ghost; speak "after";')
        assert main(["run", path, "--continue-on-error"]) == 1
        captured = capsys.readouterr()
        assert captured.out == "after\n"
        assert "E401" in captured.err
        assert "1 error(s)" in captured.err

    def test_config_file(self, script, tmp_path, capsys):
        config = tmp_path / "robot.yaml"
        config.write_text("scoping: merge\n")
        assert main(["run", script("{ global t = 2; } speak t;"), "--config", str(config)]) == 0
        assert capsys.readouterr().out == "2\n"

    def test_bad_config(self, script, tmp_path, capsys):
        config = tmp_path / "robot.yaml"
        config.write_text("speed: fast\n")
        assert main(["run", script("exit;"), "--config", str(config)]) == 1
        assert "unknown configuration key" in capsys.readouterr().err

    def test_env_config(self, script, capsys, monkeypatch):
        monkeypatch.setenv("ROBOT_DSL_INTEGER_LITERALS", "false")
        assert main(["run", script("speak 42;")]) == 1
        assert "E001" in capsys.readouterr().err


class TestCheck:
    """Test the check command."""

    def test_check_ok(self, script, capsys):
        assert main(["check", script("speak 1; exit;")]) == 0
        assert "2 statement(s)" in capsys.readouterr().out

    def test_check_does_not_run(self, script, capsys):
        assert main(["check", script("speak ghost;")]) == 0
        assert "ghost" not in capsys.readouterr().out

    def test_check_error(self, script, capsys):
        assert main(["check", script("fn f() {}")]) == 1
        assert "E103" in capsys.readouterr().err

    def test_check_json_ok(self, script, capsys):
        """--json reports the statement count and no diagnostics."""
        path = script("speak 1; exit;")
        assert main(["check", path, "--json"]) == 0
        report = json.loads(capsys.readouterr().out)
        assert report["file"] == path
        assert report["statements"] == 2
        assert report["error_count"] == 0
        assert report["diagnostics"] == []

    def test_check_json_error(self, script, capsys):
        """--json carries the code and range of a syntax error."""
        assert main(["check", script("speak 1;\nspeak @;"), "--json"]) == 1
        report = json.loads(capsys.readouterr().out)
        assert report["error_count"] == 1
        diag = report["diagnostics"][0]
        assert diag["code"] == "E001"
        assert diag["severity"] == "error"
        assert diag["range"]["start"] == {"line": 2, "column": 7, "offset": 15}


class TestTokensAndAst:
    """Test the tokens and ast commands."""

    def test_tokens(self, script, capsys):
        assert main(["tokens", script("speak 1.5;")]) == 0
        assert capsys.readouterr().out.splitlines() == [
            "0..5 SPEAK",
            "6..9 NUMBER(1.5)",
            "9..10 SEMICOLON",
        ]

    def test_tokens_error(self, script, capsys):
        assert main(["tokens", script("speak @;")]) == 1
        captured = capsys.readouterr()
        assert captured.out == "0..5 SPEAK\n"
        assert "E001" in captured.err

    def test_ast(self, script, capsys):
        assert main(["ast", script('speak "hi";')]) == 0
        out = capsys.readouterr().out
        assert out.splitlines()[0] == "Speak"
        assert "value: 'hi'" in out

    def test_verbose_logging(self, script, capsys):
        package_logger = logging.getLogger("robot_dsl")
        handlers, level = list(package_logger.handlers), package_logger.level
        try:
            assert main(["-v", "run", script("{ exit; }")]) == 0
        finally:
            for handler in package_logger.handlers[len(handlers):]:
                package_logger.removeHandler(handler)
            package_logger.setLevel(level)
        assert "push scope" in capsys.readouterr().err
