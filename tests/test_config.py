"""Tests for specnext.config: XDG paths, atomic writes, env overrides, precedence."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from specnext.config import (
    _atomic_write,
    env_overrides,
    get_config_dir,
    load_global_config,
    load_project_config,
    resolve_config,
    save_global_config,
)
from specnext.exceptions import ConfigError
from specnext.exit_codes import EXIT_CONFIG_ERROR
from specnext.models import EngineConfig


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_json(path: Path, data: Any) -> None:
    """Write a dict as JSON to *path*, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


# ---------------------------------------------------------------------------
# XDG path resolution
# ---------------------------------------------------------------------------


class TestConfigDir:
    """Config directory on XDG and non-XDG platforms."""

    def test_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("specnext.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_config_dir()
        assert result == tmp_path / ".config" / "specnext"
        assert result.is_dir()

    def test_xdg_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        custom = tmp_path / "custom_config"
        monkeypatch.setattr("specnext.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(custom))

        assert get_config_dir() == custom / "specnext"

    def test_fallback(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("specnext.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_config_dir()
        assert result == tmp_path / ".specnext"
        assert result.is_dir()


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


class TestAtomicWrite:
    """Temp-file-then-rename writes."""

    def test_writes_content(self, tmp_path: Path) -> None:
        target = tmp_path / "nested" / "out.json"
        _atomic_write(target, '{"a": 1}')
        assert target.read_text(encoding="utf-8") == '{"a": 1}'

    def test_no_temp_files_left(self, tmp_path: Path) -> None:
        target = tmp_path / "out.json"
        _atomic_write(target, "first")
        _atomic_write(target, "second")
        assert [p.name for p in tmp_path.iterdir()] == ["out.json"]
        assert target.read_text(encoding="utf-8") == "second"


# ---------------------------------------------------------------------------
# Global and project config files
# ---------------------------------------------------------------------------


class TestConfigFiles:
    """Loading and saving the JSON config files."""

    def test_defaults_without_file(self, isolated_config: Path) -> None:
        assert load_global_config() == EngineConfig()

    def test_save_and_load(self, isolated_config: Path) -> None:
        path = save_global_config(EngineConfig(strict_references=True))
        assert path == isolated_config / "config" / "specnext" / "config.json"
        assert load_global_config().strict_references is True

    def test_invalid_json(self, isolated_config: Path) -> None:
        (isolated_config / "config" / "specnext").mkdir(parents=True)
        (isolated_config / "config" / "specnext" / "config.json").write_text("{nope", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid global config") as exc_info:
            load_global_config()
        assert exc_info.value.exit_code == EXIT_CONFIG_ERROR

    def test_not_an_object(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "config" / "specnext" / "config.json", [1, 2])
        with pytest.raises(ConfigError, match="expected a JSON object"):
            load_global_config()

    def test_failed_validation(self, isolated_config: Path) -> None:
        _write_json(
            isolated_config / "config" / "specnext" / "config.json",
            {"forms": {"multiline_threshold": "long"}},
        )
        with pytest.raises(ConfigError):
            load_global_config()

    def test_project_config(self, isolated_config: Path) -> None:
        assert load_project_config() is None
        _write_json(isolated_config / "specnext.json", {"validation": {"strict": True}})
        assert load_project_config() == {"validation": {"strict": True}}

    def test_project_config_explicit_dir(self, tmp_path: Path) -> None:
        _write_json(tmp_path / "api" / "specnext.json", {"strict_references": True})
        assert load_project_config(tmp_path / "api") == {"strict_references": True}


# ---------------------------------------------------------------------------
# Environment variables
# ---------------------------------------------------------------------------


class TestEnvOverrides:
    """SPECNEXT_* variables become nested overrides."""

    def test_parsed_values(self) -> None:
        environ = {
            "SPECNEXT_STRICT_REFERENCES": "true",
            "SPECNEXT_VALIDATION_STRICT": "no",
            "SPECNEXT_MOCK_SEED": "42",
            "SPECNEXT_INT64_TYPE": "number",
            "SPECNEXT_UI_EXTENSION": "",
            "UNRELATED": "1",
        }
        assert env_overrides(environ) == {
            "strict_references": True,
            "types": {"int64_type": "number"},
            "validation": {"strict": False},
            "mock": {"seed": 42},
        }

    def test_bad_boolean(self) -> None:
        with pytest.raises(ConfigError, match="SPECNEXT_VALIDATION_COERCE"):
            env_overrides({"SPECNEXT_VALIDATION_COERCE": "maybe"})

    def test_bad_integer(self) -> None:
        with pytest.raises(ConfigError, match="SPECNEXT_MULTILINE_THRESHOLD"):
            env_overrides({"SPECNEXT_MULTILINE_THRESHOLD": "wide"})


# ---------------------------------------------------------------------------
# Precedence
# ---------------------------------------------------------------------------


class TestResolveConfig:
    """overrides > env > project > global > defaults."""

    def test_defaults(self, isolated_config: Path) -> None:
        config = resolve_config()
        assert config.strict_references is False
        assert config.types.int64_type == "bigint"
        assert config.forms.multiline_threshold == 255

    def test_layers(self, isolated_config: Path) -> None:
        save_global_config(
            EngineConfig.model_validate(
                {"types": {"int64_type": "number", "binary_type": "File"}, "mock": {"max_depth": 3}}
            )
        )
        _write_json(isolated_config / "specnext.json", {"types": {"int64_type": "string"}})

        config = resolve_config(environ={})
        assert config.types.int64_type == "string"
        assert config.types.binary_type == "File"
        assert config.mock.max_depth == 3

        config = resolve_config(environ={"SPECNEXT_INT64_TYPE": "bigint"})
        assert config.types.int64_type == "bigint"

        config = resolve_config(
            overrides={"types": {"int64_type": "number"}},
            environ={"SPECNEXT_INT64_TYPE": "bigint"},
        )
        assert config.types.int64_type == "number"
        assert config.types.binary_type == "File"

    def test_reads_process_environment(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SPECNEXT_STRICT_REFERENCES", "1")
        assert resolve_config().strict_references is True

    def test_unknown_keys_kept(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "specnext.json", {"outputDir": "generated"})
        assert resolve_config(environ={}).model_extra == {"outputDir": "generated"}

    def test_invalid_merged_result(self, isolated_config: Path) -> None:
        with pytest.raises(ConfigError, match="Invalid configuration"):
            resolve_config(overrides={"mock": {"max_depth": 0}}, environ={})
