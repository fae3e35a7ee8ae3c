"""Tests for the output formatting system.

Covers:
- OutputFormat resolution (auto -> rich/plain based on TTY)
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline
- Quiet and verbose modes
- JSON and plain rendering of responses, tables and snippets
- Global instance management and convenience functions
"""

from __future__ import annotations

import json

import pytest

from openapi_ui import output as output_module
from openapi_ui.output import (
    OutputFormat,
    OutputManager,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)


# ------------------------------------------------------------------ #
# Fixtures
# ------------------------------------------------------------------ #


@pytest.fixture()
def non_tty(monkeypatch):
    """Patch stdout.isatty() to return False."""
    monkeypatch.setattr("openapi_ui.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    """Patch stdout.isatty() to return True."""
    monkeypatch.setattr("openapi_ui.output._is_tty", lambda: True)


@pytest.fixture()
def color_env(monkeypatch):
    """Remove colour-disabling environment variables."""
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.setenv("TERM", "xterm-256color")


# ------------------------------------------------------------------ #
# OutputFormat resolution
# ------------------------------------------------------------------ #


class TestOutputFormatResolution:
    def test_auto_resolves_to_plain_when_not_tty(self, non_tty):
        assert OutputManager().format == OutputFormat.PLAIN

    def test_auto_resolves_to_rich_when_tty(self, tty, color_env):
        assert OutputManager().format == OutputFormat.RICH

    def test_auto_resolves_to_plain_when_tty_but_no_color(self, tty, color_env):
        assert OutputManager(no_color=True).format == OutputFormat.PLAIN

    def test_explicit_json_stays_json(self, tty, color_env):
        assert OutputManager(format=OutputFormat.JSON).format == OutputFormat.JSON

    def test_explicit_rich_stays_rich(self, non_tty):
        assert OutputManager(format=OutputFormat.RICH).format == OutputFormat.RICH


class TestColorDisabling:
    def test_no_color_env_any_value(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb_disables_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_normal_term_keeps_color(self, color_env):
        assert _should_disable_color() is False

    def test_no_color_env_forces_plain_diagnostics(self, capfd, non_tty, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "1")
        OutputManager(format=OutputFormat.PLAIN).error("broken")
        assert capfd.readouterr().err == "Error: broken\n"


# ------------------------------------------------------------------ #
# stdout / stderr discipline
# ------------------------------------------------------------------ #


class TestStdoutStderrDiscipline:
    """Data goes to stdout, diagnostics go to stderr."""

    def test_print_data_goes_to_stdout(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).print_data("hello world")
        captured = capfd.readouterr()
        assert captured.out == "hello world\n"
        assert captured.err == ""

    @pytest.mark.parametrize(
        ("method", "expected"),
        [
            ("info", "note\n"),
            ("warning", "Warning: note\n"),
            ("error", "Error: note\n"),
        ],
    )
    def test_diagnostics_go_to_stderr(self, capfd, non_tty, method, expected):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        getattr(mgr, method)("note")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert captured.err == expected

    def test_rich_diagnostics_go_to_stderr(self, capfd, non_tty, color_env):
        OutputManager(format=OutputFormat.PLAIN).warning("be careful")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "be careful" in captured.err


class TestQuietAndVerbose:
    def test_quiet_suppresses_info(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        mgr.info("a")
        assert capfd.readouterr().err == ""
        assert mgr.is_quiet

    def test_quiet_keeps_warning_and_error(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        mgr.warning("w")
        mgr.error("e")
        assert capfd.readouterr().err == "Warning: w\nError: e\n"

    def test_quiet_keeps_stdout_data(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True).print_data("data")
        assert capfd.readouterr().out == "data\n"

    def test_debug_hidden_by_default(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).debug("hidden")
        assert capfd.readouterr().err == ""

    def test_debug_shown_with_verbose(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, verbose=True)
        mgr.debug("details")
        assert capfd.readouterr().err == "[debug] details\n"
        assert mgr.is_verbose


# ------------------------------------------------------------------ #
# Data rendering
# ------------------------------------------------------------------ #


class TestFormatResponse:
    def test_json_dict(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON).format_response({"name": "Ada", "tags": ["x"]})
        out = capfd.readouterr().out
        assert json.loads(out) == {"name": "Ada", "tags": ["x"]}
        assert out.startswith("{\n  ")

    def test_json_bytes_are_decoded(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON).format_response(b"raw")
        assert json.loads(capfd.readouterr().out) == "raw"

    def test_json_keeps_unicode(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON).format_response({"city": "Zürich"})
        assert "Zürich" in capfd.readouterr().out

    def test_plain_dict(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).format_response(
            {"title": "User Service", "servers": ["https://api.example.com"]}
        )
        assert capfd.readouterr().out == (
            'title\tUser Service\nservers\t["https://api.example.com"]\n'
        )

    def test_plain_list_of_dicts(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).format_response(
            [{"id": 1, "name": "Ada"}, {"id": 2, "name": "Alan"}]
        )
        assert capfd.readouterr().out == "1\tAda\n2\tAlan\n"

    def test_plain_scalar(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).format_response(42)
        assert capfd.readouterr().out == "42\n"

    def test_rich_dict(self, capfd, non_tty):
        OutputManager(format=OutputFormat.RICH, no_color=True).format_response({"name": "Ada"})
        out = capfd.readouterr().out
        assert '"name"' in out
        assert '"Ada"' in out


class TestPrintTable:
    HEADERS = ["ID", "Method"]
    ROWS = [["listUsers", "GET"], ["createUser", "POST"]]

    def test_json(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON).print_table(self.HEADERS, self.ROWS)
        assert json.loads(capfd.readouterr().out) == [
            {"ID": "listUsers", "Method": "GET"},
            {"ID": "createUser", "Method": "POST"},
        ]

    def test_plain(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).print_table(self.HEADERS, self.ROWS)
        assert capfd.readouterr().out == "ID\tMethod\nlistUsers\tGET\ncreateUser\tPOST\n"

    def test_rich(self, capfd, non_tty):
        OutputManager(format=OutputFormat.RICH, no_color=True).print_table(
            self.HEADERS, self.ROWS, title="Endpoints"
        )
        out = capfd.readouterr().out
        assert "Endpoints" in out
        assert "createUser" in out


class TestPrintCode:
    def test_json(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON).print_code("curl -X GET", "curl")
        assert json.loads(capfd.readouterr().out) == {"language": "curl", "code": "curl -X GET"}

    def test_plain_is_raw(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).print_code("print(1)", "python")
        assert capfd.readouterr().out == "print(1)\n"

    def test_rich(self, capfd, non_tty):
        OutputManager(format=OutputFormat.RICH, no_color=True).print_code("package main", "go")
        assert "package main" in capfd.readouterr().out


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #


class TestGlobalInstance:
    def test_get_output_creates_default(self, non_tty):
        reset_output()
        first = get_output()
        assert get_output() is first

    def test_set_output(self):
        mgr = OutputManager(format=OutputFormat.JSON)
        set_output(mgr)
        assert get_output() is mgr

    def test_convenience_functions(self, capfd, non_tty):
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True, verbose=True))
        output_module.info("i")
        output_module.warning("w")
        output_module.error("e")
        output_module.debug("d")
        assert capfd.readouterr().err == "i\nWarning: w\nError: e\n[debug] d\n"
