"""Shared fixtures for cost-katana tests."""

from __future__ import annotations

import io
from pathlib import Path

import pytest
from rich.console import Console

from cost_katana.cli.console import KATANA_THEME, reset_console
from tests.fakes import FakeEndpoint, scripted_reader


@pytest.fixture
def console_buffer() -> tuple[Console, io.StringIO]:
    """A themed console writing to an in-memory buffer."""
    buffer = io.StringIO()
    console = Console(file=buffer, theme=KATANA_THEME, width=120, color_system=None)
    return console, buffer


@pytest.fixture
def config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the config store at a temp dir and clear environment overrides."""
    monkeypatch.setenv("COST_KATANA_CONFIG_DIR", str(tmp_path))
    for var in ("COST_KATANA_API_KEY", "COST_KATANA_BASE_URL", "COST_KATANA_DEFAULT_MODEL"):
        monkeypatch.delenv(var, raising=False)
    return tmp_path


@pytest.fixture(autouse=True)
def fresh_console():
    """Each test gets a new console singleton."""
    reset_console()
    yield
    reset_console()


@pytest.fixture
def make_endpoint():
    """Factory for FakeEndpoint instances."""
    return FakeEndpoint


@pytest.fixture
def make_reader():
    """Factory for scripted input readers."""
    return scripted_reader
