"""
config.py

Typed configuration loading and validation for the reading difficulty calculator.

Design goals
- Load at most one UTF-8 JSON config file
- Validate with pydantic (defaults included)
- Support environment variable overrides
- No other I/O beyond reading the config file (no directory creation)

Config file location
- If READING_CONFIG_PATH is set, that file is used.
- Otherwise these paths are searched in order and the first one that exists is used:
  1) ./reading_config.json (current working directory)
  2) <user config dir>/ReadingDifficulty/reading_config.json
- If none exists the defaults are used.

Example config file (reading_config.json)
{
  "calculation": {
    "section_length_ms": 400,
    "max_workers": 4
  },
  "logging": {
    "level": "INFO"
  }
}
"""

from __future__ import annotations

import json
import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from platformdirs import user_config_dir
from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class CalculationConfig(BaseModel):
    section_length_ms: float = Field(default=400.0, gt=0, description="Length of one strain peak section.")
    max_workers: int = Field(default=1, ge=1, description="Worker threads used when evaluating several configurations.")


class LoggingConfig(BaseModel):
    level: str = Field(default="WARNING", description="DEBUG, INFO, WARNING, ERROR or CRITICAL")

    @field_validator("level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        normalized = (value or "").strip().upper()
        if normalized not in _LOG_LEVELS:
            raise ValueError("level must be one of: " + ", ".join(_LOG_LEVELS))
        return normalized


class AppConfig(BaseModel):
    calculation: CalculationConfig = Field(default_factory=CalculationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _default_config_candidates() -> List[Path]:
    config_directory = Path(user_config_dir("ReadingDifficulty", "ReadingDifficulty"))
    return [
        Path.cwd() / "reading_config.json",
        config_directory / "reading_config.json",
    ]


def _resolve_config_path() -> Optional[Path]:
    explicit_path_text = os.environ.get("READING_CONFIG_PATH", "").strip()
    if explicit_path_text:
        return Path(explicit_path_text)

    for candidate_path in _default_config_candidates():
        if candidate_path.exists():
            return candidate_path

    return None


def _read_json_file_utf8(config_path: Path) -> Dict[str, Any]:
    try:
        raw_text = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise
    except OSError as exception:
        raise OSError(f"Failed to read config file: {config_path}. Error: {exception}") from exception

    try:
        parsed = json.loads(raw_text)
    except json.JSONDecodeError as exception:
        raise ValueError(f"Config file is not valid JSON: {config_path}. Error: {exception}") from exception

    if not isinstance(parsed, dict):
        raise ValueError(f"Config file root must be a JSON object: {config_path}")

    return parsed


def _apply_environment_overrides(config_dict: Dict[str, Any]) -> Dict[str, Any]:
    """
    Environment overrides are optional. The config file is the primary source of truth.

    Override variables:
    - READING_SECTION_LENGTH_MS
    - READING_MAX_WORKERS
    - READING_LOG_LEVEL
    """
    def ensure_nested(config_root: Dict[str, Any], section_name: str) -> Dict[str, Any]:
        section = config_root.get(section_name)
        if isinstance(section, dict):
            section = dict(section)
        else:
            section = {}
        config_root[section_name] = section
        return section

    updated_config = dict(config_dict)

    calculation_section = ensure_nested(updated_config, "calculation")
    logging_section = ensure_nested(updated_config, "logging")

    def override_string(env_name: str, target_dict: Dict[str, Any], key_name: str) -> None:
        value_text = os.environ.get(env_name, "")
        if value_text.strip():
            target_dict[key_name] = value_text.strip()

    def override_int(env_name: str, target_dict: Dict[str, Any], key_name: str) -> None:
        value_text = os.environ.get(env_name, "").strip()
        if not value_text:
            return
        try:
            target_dict[key_name] = int(value_text)
        except ValueError:
            logger.warning("Ignoring %s=%r, not an integer", env_name, value_text)

    def override_float(env_name: str, target_dict: Dict[str, Any], key_name: str) -> None:
        value_text = os.environ.get(env_name, "").strip()
        if not value_text:
            return
        try:
            target_dict[key_name] = float(value_text)
        except ValueError:
            logger.warning("Ignoring %s=%r, not a number", env_name, value_text)

    override_float("READING_SECTION_LENGTH_MS", calculation_section, "section_length_ms")
    override_int("READING_MAX_WORKERS", calculation_section, "max_workers")
    override_string("READING_LOG_LEVEL", logging_section, "level")

    return updated_config


def load_config(config_path: Optional[Path] = None) -> Tuple[AppConfig, Optional[Path]]:
    resolved_path = config_path if config_path is not None else _resolve_config_path()
    if resolved_path is None:
        logger.debug("No config file found, using defaults")
        json_dict: Dict[str, Any] = {}
    else:
        json_dict = _read_json_file_utf8(resolved_path)
    json_dict = _apply_environment_overrides(json_dict)

    try:
        config = AppConfig.model_validate(json_dict)
    except ValidationError as exception:
        source_text = str(resolved_path) if resolved_path is not None else "defaults"
        raise ValueError(f"Config validation failed for {source_text}:\n{exception}") from exception

    return config, resolved_path


@lru_cache(maxsize=1)
def get_config() -> Tuple[AppConfig, Optional[Path]]:
    return load_config()


def main() -> int:
    try:
        config, resolved_path = load_config()
    except Exception as exception:
        error_payload = {"ok": False, "error": str(exception)}
        print(json.dumps(error_payload, ensure_ascii=False, indent=2))
        return 2

    output_payload = {
        "ok": True,
        "config_path": str(resolved_path) if resolved_path is not None else None,
        "config": config.model_dump(),
    }
    print(json.dumps(output_payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
