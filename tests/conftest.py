"""Shared test fixtures for ghactivity.

Provides isolated config/cache directories, a controllable clock for TTL
tests, output-state management, canned GitHub payloads, and a CLI runner.
These fixtures are automatically discovered by pytest and available to all
test modules without explicit imports.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import pytest

from ghactivity.output import OutputFormat, OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.  The package logger is restored as well,
    since configure_logging() binds it to those same streams.
    """
    yield
    reset_output()
    logger = logging.getLogger("ghactivity")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------


class FakeClock:
    """Callable clock whose time only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    """A fake UTC clock starting at 2024-01-01 12:00."""
    return FakeClock(datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc))


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Forces XDG path resolution, points XDG_CONFIG_HOME, XDG_CACHE_HOME,
    and XDG_DATA_HOME at subdirectories of tmp_path, clears all
    GHACTIVITY_* environment variables, and changes the working directory
    to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("ghactivity.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in [
        "GHACTIVITY_BASE_URL",
        "GHACTIVITY_CACHE_TTL",
        "GHACTIVITY_NO_CACHE",
        "NO_COLOR",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager for the test."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True, no_color=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# Canned GitHub payloads
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_events() -> list[dict[str, Any]]:
    """A small events feed covering every rendered type plus an unknown one."""
    return [
        {
            "type": "PushEvent",
            "repo": {"name": "alice/tools"},
            "payload": {"commits": [{"sha": "a1"}, {"sha": "b2"}]},
        },
        {
            "type": "IssuesEvent",
            "repo": {"name": "alice/tools"},
            "payload": {"action": "opened"},
        },
        {"type": "WatchEvent", "repo": {"name": "psf/requests"}, "payload": {}},
        {"type": "ForkEvent", "repo": {"name": "pallets/flask"}, "payload": {}},
        {"type": "GollumEvent", "repo": {"name": "alice/wiki"}, "payload": {}},
    ]


@pytest.fixture
def sample_user() -> dict[str, Any]:
    return {
        "login": "alice",
        "name": "Alice Liddell",
        "company": None,
        "location": "Oxford",
        "public_repos": 12,
        "followers": 40,
        "following": 3,
        "created_at": "2015-03-01T10:00:00Z",
        "html_url": "https://github.com/alice",
    }


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
