"""Shared test fixtures for specnext.

Provides reusable fixtures for loading fixture documents, building Schema
Dictionaries, creating isolated config environments, and managing output
state. These fixtures are automatically discovered by pytest.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import pytest

from specnext.document import extract_schema_dictionary
from specnext.output import OutputFormat, OutputManager, reset_output, set_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches sys.stdout/sys.stderr at creation time, and
    capsys swaps those streams per test.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Raw document fixtures (plain dicts loaded from JSON files)
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_30_raw() -> dict[str, Any]:
    """Load the raw petstore 3.0 document."""
    with open(FIXTURES_DIR / "petstore_3.0.json") as f:
        return json.load(f)


@pytest.fixture
def swagger_20_raw() -> dict[str, Any]:
    """Load the raw Swagger 2.0 document."""
    with open(FIXTURES_DIR / "swagger_2.0.json") as f:
        return json.load(f)


# ---------------------------------------------------------------------------
# Schema Dictionary fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_schemas(petstore_30_raw: dict[str, Any]) -> dict[str, Any]:
    """``components.schemas`` of the petstore document."""
    return extract_schema_dictionary(petstore_30_raw)


@pytest.fixture
def swagger_schemas(swagger_20_raw: dict[str, Any]) -> dict[str, Any]:
    """``definitions`` of the Swagger 2.0 document."""
    return extract_schema_dictionary(swagger_20_raw)


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_CONFIG_HOME at tmp_path, clears every SPECNEXT_* variable,
    and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setattr("specnext.config._is_xdg_platform", lambda: True)

    for var in list(os.environ):
        if var.startswith("SPECNEXT_"):
            monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def plain_output() -> OutputManager:
    """Install a PLAIN-format OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def json_output() -> OutputManager:
    """Install a JSON-format OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.JSON, no_color=True)
    set_output(output)
    yield output
    reset_output()
