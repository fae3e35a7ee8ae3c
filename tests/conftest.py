"""Shared test fixtures for openapi-ui.

Provides reusable fixtures for loading spec fixtures, isolating config
environments, managing output state, and running CLI commands. These
fixtures are discovered by pytest and available to all test modules
without explicit imports.
"""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path
from typing import Any

import pytest

from openapi_ui.models import ParsedApiSpec
from openapi_ui.output import OutputFormat, OutputManager, reset_output, set_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When CliRunner redirects those streams and the test
    finishes, the cached references become stale. Resetting forces a
    fresh manager on next use.
    """
    yield
    reset_output()


@pytest.fixture(autouse=True)
def _reset_library_logger() -> None:
    """Drop handlers the CLI's --verbose setup attaches to ``openapi_ui``."""
    yield
    logger = logging.getLogger("openapi_ui")
    logger.handlers = []
    logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Spec fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def users_api_raw() -> dict[str, Any]:
    """Load the raw User Service spec dict."""
    with open(FIXTURES_DIR / "users_api.json") as f:
        return json.load(f)


@pytest.fixture
def users_api(users_api_raw: dict[str, Any]) -> ParsedApiSpec:
    """Normalized User Service spec."""
    from openapi_ui.parser import normalize

    return normalize(users_api_raw)


@pytest.fixture
def minimal_raw() -> dict[str, Any]:
    """The smallest useful document: one GET endpoint."""
    return {
        "openapi": "3.0.0",
        "info": {"title": "Minimal", "version": "1.0.0"},
        "paths": {
            "/users": {
                "get": {
                    "operationId": "listUsers",
                    "responses": {"200": {"description": "OK"}},
                }
            }
        },
    }


@pytest.fixture
def spec_file(tmp_path: Path) -> Path:
    """A copy of the User Service spec in tmp_path."""
    path = tmp_path / "users_api.json"
    shutil.copy(FIXTURES_DIR / "users_api.json", path)
    return path


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_CONFIG_HOME (and HOME, for non-XDG platforms) at
    tmp_path, clears all OPENAPI_UI_* environment variables, and changes
    the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("HOME", str(tmp_path / "home"))

    for var in [
        "OPENAPI_UI_SPEC",
        "OPENAPI_UI_BASE_URL",
        "OPENAPI_UI_CACHE_TTL",
        "OPENAPI_UI_RETRIES",
        "OPENAPI_UI_RETRY_DELAY",
        "OPENAPI_UI_TIMEOUT",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def json_output() -> OutputManager:
    """Install a JSON-format OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.JSON)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
