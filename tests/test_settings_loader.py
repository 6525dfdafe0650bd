from __future__ import annotations

from pathlib import Path

import pytest

from formation.config.settings import api_key_from_env, load_settings


def test_load_packaged_settings() -> None:
    settings = load_settings()

    assert settings.formation_api_url.endswith("/formations_full")
    assert settings.operator_mapping["SBBP"] == "11"
    assert settings.operator_mapping["82"] == "82"
    assert settings.max_forecast_days == 3
    assert set(settings.occupancy_visualization) == {"LOW", "MEDIUM", "HIGH"}
    assert settings.occupancy_visualization["MEDIUM"].icon == "utilization-medium"


def test_load_settings_from_env_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    settings_path = tmp_path / "settings.yaml"
    settings_path.write_text(
        "\n".join(
            [
                "formation_api_url: https://formation.test/v1",
                "occupancy_base_url: https://occupancy.test",
                "operator_mapping:",
                "  11: 11",
                "  SBBP: 11",
            ]
        ),
        encoding="utf-8",
    )
    monkeypatch.setenv("FORMATION_SETTINGS_PATH", str(settings_path))

    settings = load_settings()

    assert settings.formation_api_url == "https://formation.test/v1"
    assert settings.operator_mapping == {"11": "11", "SBBP": "11"}
    assert settings.occupancy_visualization == {}


def test_load_settings_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="not found"):
        load_settings(tmp_path / "missing.yaml")


def test_load_settings_invalid_yaml(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.yaml"
    settings_path.write_text("formation_api_url: [unclosed", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid YAML"):
        load_settings(settings_path)


def test_load_settings_requires_mapping(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.yaml"
    settings_path.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ValueError, match="mapping"):
        load_settings(settings_path)


def test_load_settings_rejects_unknown_keys(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.yaml"
    settings_path.write_text(
        "formation_api_url: a\noccupancy_base_url: b\nunexpected: 1\n", encoding="utf-8"
    )

    with pytest.raises(ValueError, match="Invalid settings schema"):
        load_settings(settings_path)


def test_api_key_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FORMATION_API_KEY", "  token  ")
    assert api_key_from_env() == "token"

    monkeypatch.setenv("FORMATION_API_KEY", " ")
    assert api_key_from_env() is None
