from __future__ import annotations

import json

import pytest

import config


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    for name in ("READING_CONFIG_PATH", "READING_SECTION_LENGTH_MS", "READING_MAX_WORKERS", "READING_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config, "_default_config_candidates", lambda: [tmp_path / "reading_config.json"])
    return tmp_path


def test_defaults_without_file() -> None:
    app_config, resolved_path = config.load_config()
    assert resolved_path is None
    assert app_config.calculation.section_length_ms == 400.0
    assert app_config.calculation.max_workers == 1
    assert app_config.logging.level == "WARNING"


def test_file_is_found_and_loaded(isolated_config) -> None:
    config_path = isolated_config / "reading_config.json"
    config_path.write_text(json.dumps({"calculation": {"section_length_ms": 250}, "logging": {"level": "debug"}}), encoding="utf-8")

    app_config, resolved_path = config.load_config()

    assert resolved_path == config_path
    assert app_config.calculation.section_length_ms == 250.0
    assert app_config.logging.level == "DEBUG"


def test_explicit_path_from_environment(isolated_config, monkeypatch) -> None:
    config_path = isolated_config / "elsewhere.json"
    config_path.write_text(json.dumps({"calculation": {"max_workers": 3}}), encoding="utf-8")
    monkeypatch.setenv("READING_CONFIG_PATH", str(config_path))

    app_config, resolved_path = config.load_config()

    assert resolved_path == config_path
    assert app_config.calculation.max_workers == 3


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("READING_SECTION_LENGTH_MS", "300")
    monkeypatch.setenv("READING_MAX_WORKERS", "8")
    monkeypatch.setenv("READING_LOG_LEVEL", "info")

    app_config, _resolved_path = config.load_config()

    assert app_config.calculation.section_length_ms == 300.0
    assert app_config.calculation.max_workers == 8
    assert app_config.logging.level == "INFO"


def test_unparseable_override_is_ignored(monkeypatch) -> None:
    monkeypatch.setenv("READING_MAX_WORKERS", "many")
    app_config, _resolved_path = config.load_config()
    assert app_config.calculation.max_workers == 1


def test_invalid_values_are_reported(isolated_config) -> None:
    config_path = isolated_config / "reading_config.json"
    config_path.write_text(json.dumps({"calculation": {"section_length_ms": 0}}), encoding="utf-8")
    with pytest.raises(ValueError, match="validation failed"):
        config.load_config()

    config_path.write_text(json.dumps({"logging": {"level": "chatty"}}), encoding="utf-8")
    with pytest.raises(ValueError):
        config.load_config()


def test_invalid_json_is_reported(isolated_config) -> None:
    config_path = isolated_config / "reading_config.json"
    config_path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError, match="not valid JSON"):
        config.load_config(config_path)

    config_path.write_text("[]", encoding="utf-8")
    with pytest.raises(ValueError, match="JSON object"):
        config.load_config(config_path)
