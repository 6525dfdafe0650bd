from __future__ import annotations

import json
from datetime import date
from typing import Any

import httpx
import pytest
from typer.testing import CliRunner

import apps.cli.main as cli_main
from apps.cli.main import app
from formation.providers.formation_client import FormationClient
from formation.providers.occupancy_client import OccupancyClient

runner = CliRunner()

_ARGS = [
    "fetch",
    "--evu",
    "SBBP",
    "--operation-date",
    "2026-10-19",
    "--train-number",
    "712",
]


def _install_clients(
    monkeypatch: pytest.MonkeyPatch,
    formation_handler: Any,
    occupancy_handler: Any | None = None,
) -> None:
    def _build_clients(settings: Any) -> tuple[FormationClient, OccupancyClient]:
        formation_client = FormationClient(
            api_url=settings.formation_api_url,
            api_key=None,
            client=httpx.Client(transport=httpx.MockTransport(formation_handler)),
        )
        occupancy_client = OccupancyClient(
            base_url=settings.occupancy_base_url,
            operator_mapping=settings.operator_mapping,
            client=httpx.Client(
                transport=httpx.MockTransport(
                    occupancy_handler or (lambda request: httpx.Response(404))
                )
            ),
            today=lambda: date(2026, 10, 19),
        )
        return formation_client, occupancy_client

    monkeypatch.setattr(cli_main, "_build_clients", _build_clients)


def test_cli_fetch_human_output(
    monkeypatch: pytest.MonkeyPatch,
    formation_payload: dict[str, Any],
    operator_occupancy_payload: dict[str, Any],
) -> None:
    _install_clients(
        monkeypatch,
        lambda request: httpx.Response(200, json=formation_payload),
        lambda request: httpx.Response(200, json=operator_occupancy_payload),
    )

    result = runner.invoke(app, _ARGS)

    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert lines[0] == "train=712 date=2026-10-19 evu=11"
    assert lines[1] == "stop[1/3]=Zürich HB track=31"
    assert lines[2] == "travel_direction=left has_sectors=True"
    assert any("occupancy=1st:Low occupancy expected" in line for line in lines)


def test_cli_fetch_json_output_with_stop_index(
    monkeypatch: pytest.MonkeyPatch, formation_payload: dict[str, Any]
) -> None:
    _install_clients(monkeypatch, lambda request: httpx.Response(200, json=formation_payload))

    result = runner.invoke(app, [*_ARGS, "--stop-index", "2", "--output", "json"])

    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload["current_stop"] == "Bern"
    assert [section["sector"] for section in payload["sections"]] == ["D", "C"]


def test_cli_fetch_formation_api_error_exits_2(monkeypatch: pytest.MonkeyPatch) -> None:
    _install_clients(monkeypatch, lambda request: httpx.Response(404))

    result = runner.invoke(app, _ARGS)

    assert result.exit_code == 2
    assert "ERROR: formation API error (status=404)" in result.output


def test_cli_fetch_without_formation_exits_1(
    monkeypatch: pytest.MonkeyPatch, formation_payload: dict[str, Any]
) -> None:
    formation_payload["formationsAtScheduledStops"] = []
    _install_clients(monkeypatch, lambda request: httpx.Response(200, json=formation_payload))

    result = runner.invoke(app, _ARGS)

    assert result.exit_code == 1
    assert "no stop of this train carries formation data" in result.output


def test_cli_fetch_rejects_invalid_date() -> None:
    result = runner.invoke(
        app,
        ["fetch", "--evu", "SBBP", "--operation-date", "19.10.2026", "--train-number", "712"],
    )

    assert result.exit_code == 1
    assert "--operation-date must be formatted as YYYY-MM-DD" in result.output


def test_cli_fetch_rejects_non_numeric_train_number() -> None:
    result = runner.invoke(
        app,
        ["fetch", "--evu", "SBBP", "--operation-date", "2026-10-19", "--train-number", "IC1"],
    )

    assert result.exit_code == 1
    assert "--train-number must be numeric" in result.output
