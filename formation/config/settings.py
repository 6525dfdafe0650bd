"""Settings loading for providers and occupancy display."""

from __future__ import annotations

import os
from pathlib import Path

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from formation.parsing.models import OccupancyDisplay

SETTINGS_PATH_ENV = "FORMATION_SETTINGS_PATH"
API_KEY_ENV = "FORMATION_API_KEY"


class AppSettings(BaseModel):
    """Provider endpoints, occupancy lookup limits and the occupancy display table."""

    model_config = ConfigDict(extra="forbid")

    formation_api_url: str
    occupancy_base_url: str
    request_timeout_seconds: float = Field(default=15.0, gt=0)
    occupancy_cache_hours: float = Field(default=24.0, ge=0)
    max_forecast_days: int = Field(default=3, ge=0)
    operator_mapping: dict[str, str] = Field(default_factory=dict)
    occupancy_visualization: dict[str, OccupancyDisplay] = Field(default_factory=dict)


def load_settings(path: Path | None = None) -> AppSettings:
    """Load and validate settings from YAML.

    Resolution order: explicit ``path``, then ``FORMATION_SETTINGS_PATH``, then the
    packaged ``settings.yaml``.
    """

    settings_path = path or _path_from_env() or Path(__file__).with_name("settings.yaml")

    try:
        raw = yaml.safe_load(settings_path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ValueError(f"Settings file not found: {settings_path}") from exc
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in settings file: {settings_path}") from exc

    if not isinstance(raw, dict):
        raise ValueError(f"Settings file must contain a mapping: {settings_path}")

    try:
        return AppSettings.model_validate(_normalize_operator_keys(raw))
    except ValidationError as exc:
        raise ValueError(f"Invalid settings schema: {settings_path}") from exc


def api_key_from_env() -> str | None:
    raw = os.getenv(API_KEY_ENV, "").strip()
    return raw or None


def _path_from_env() -> Path | None:
    raw = os.getenv(SETTINGS_PATH_ENV, "").strip()
    return Path(raw).expanduser() if raw else None


def _normalize_operator_keys(raw: dict[object, object]) -> dict[object, object]:
    # YAML reads unquoted numeric operator codes as ints.
    normalized = dict(raw)
    mapping = normalized.get("operator_mapping")
    if isinstance(mapping, dict):
        normalized["operator_mapping"] = {
            str(key): str(value) for key, value in mapping.items()
        }
    return normalized
