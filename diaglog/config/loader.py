from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

from diaglog.log import logger
from diaglog.severity import Severity

DEFAULT_LOG_DIR = Path.home() / ".diaglog"

# Environment variable -> settings field
_ENV_OVERRIDES = {
    "DIAGLOG_LOG_DIR": "log_dir",
    "DIAGLOG_APP_NAME": "app_name",
    "DIAGLOG_LEVEL": "level",
    "DIAGLOG_FLUSH_LEVEL": "flush_level",
    "DIAGLOG_DEBUG_ASSERT_BREAK": "debug_assert_break",
    "DIAGLOG_DEBUG_ASSERTIONS_FATAL": "debug_assertions_fatal",
}


class LogSettings(BaseModel):
    """Validated logging configuration."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    log_dir: Path | None = None
    app_name: str = Field(default="app", min_length=1, max_length=128)
    level: Severity = Severity.WARNING
    flush_level: Severity = Severity.CRITICAL
    debug_assert_break: bool = False
    # Re-raise debug assertions as FATAL when no break is requested.
    debug_assertions_fatal: bool = False
    # Write every non-critical message to the file; only the console is gated.
    capture_all_to_file: bool = False
    capture_warnings: bool = True
    max_backups: int = Field(default=10, ge=1, le=100)
    encoding: str | None = None
    sub_channel_prefix: str = Field(default="CDBG", max_length=64)
    debug_assert_prefix: str = Field(default="DEBUG ASSERT", min_length=1, max_length=64)

    @field_validator("level", "flush_level", mode="before")
    @classmethod
    def _parse_level(cls, value):
        if isinstance(value, str):
            return Severity.from_name(value)
        return value

    @field_validator("app_name")
    @classmethod
    def _plain_file_name(cls, value: str) -> str:
        if "/" in value or "\\" in value or value in (".", ".."):
            raise ValueError("app_name must be a plain file name")
        return value

    @property
    def log_file_name(self) -> str:
        return f"{self.app_name}.log"

    def resolved_log_dir(self) -> Path:
        return self.log_dir if self.log_dir is not None else DEFAULT_LOG_DIR


def load_settings(path: str | Path | None = None, env: Mapping[str, str] | None = None) -> LogSettings:
    """Build settings from defaults.json, an optional JSON file and the environment.

    Later sources win. An unreadable or malformed file is ignored.
    """
    data = _load_defaults()
    if path is not None:
        override = _load_file(Path(path))
        if override:
            data.update(override)
    data.update(_env_overrides(os.environ if env is None else env))
    return LogSettings(**data)


def _load_defaults() -> dict:
    try:
        defaults_path = Path(__file__).parent / "defaults.json"
        with open(defaults_path, "r") as f:
            return _strip_private(json.load(f))
    except Exception:
        logger.warning("Failed to load defaults.json, using built-in settings")
        return {}


def _load_file(path: Path) -> dict | None:
    try:
        with open(path, "r") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            logger.debug("Settings file %s is not a JSON object, ignoring", path)
            return None
        return _strip_private(data)
    except Exception:
        logger.debug("Failed to load settings file %s", path)
        return None


def _env_overrides(env: Mapping[str, str]) -> dict:
    result = {}
    for var, field in _ENV_OVERRIDES.items():
        value = env.get(var)
        if value is None or value == "":
            continue
        result[field] = value
    return result


def _strip_private(data: dict) -> dict:
    return {k: v for k, v in data.items() if not k.startswith("_")}

