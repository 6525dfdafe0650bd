"""Typer CLI entrypoint for train-formation."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Annotated, Literal, cast

import typer

from apps.cli.format_human import render_sections, render_visualization
from formation.config.settings import AppSettings, api_key_from_env, load_settings
from formation.orchestrator.pipeline import search_formation
from formation.parsing.direction import determine_travel_direction
from formation.parsing.parser import parse_formation_string
from formation.parsing.sectors import has_sectors
from formation.providers.formation_client import FormationClient
from formation.providers.occupancy_client import OccupancyClient
from formation.utils.errors import FormationApiError

app = typer.Typer(help="Train formation CLI", rich_markup_mode=None)
OutputMode = Literal["human", "json"]


@app.callback()
def cli_callback() -> None:
    """CLI root callback to keep `formation parse` as explicit command form."""


@app.command("parse")
def parse_command(
    formation_string: Annotated[str, typer.Argument(help="Formation short string to parse.")],
    sectors: Annotated[
        str | None,
        typer.Option(
            "--sectors",
            help="Comma-separated sectors of the first vehicle, used for travel direction.",
        ),
    ] = None,
    output: Annotated[str, typer.Option()] = "human",
) -> None:
    """Parse one formation string offline and print its sections."""

    output_typed = _validate_output(output)

    try:
        sections = parse_formation_string(formation_string)
        travel_direction = determine_travel_direction(
            formation_string, sectors, sections=sections
        )
    except Exception as exc:  # noqa: BLE001
        typer.echo(f"ERROR: {type(exc).__name__}: {exc}")
        raise typer.Exit(code=1) from exc

    string_has_sectors = has_sectors(formation_string)
    if output_typed == "json":
        payload = {
            "has_sectors": string_has_sectors,
            "travel_direction": travel_direction,
            "sections": [section.model_dump(mode="json") for section in sections],
        }
        typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        typer.echo(
            render_sections(
                sections,
                travel_direction=travel_direction,
                has_sectors=string_has_sectors,
            )
        )
    raise typer.Exit(code=0)


@app.command("fetch")
def fetch_command(
    evu: Annotated[str, typer.Option(..., help="Operator code, e.g. SBBP.")],
    operation_date: Annotated[str, typer.Option(..., help="Operation date as YYYY-MM-DD.")],
    train_number: Annotated[str, typer.Option(...)],
    stop_index: Annotated[int, typer.Option(min=0)] = 0,
    settings_path: Annotated[
        Path | None,
        typer.Option("--settings", exists=True, dir_okay=False, file_okay=True),
    ] = None,
    output: Annotated[str, typer.Option()] = "human",
) -> None:
    """Fetch a train's formation from the API and print the selected stop."""

    output_typed = _validate_output(output)

    try:
        parsed_date = date.fromisoformat(operation_date.strip())
    except ValueError:
        typer.echo("ERROR: --operation-date must be formatted as YYYY-MM-DD.")
        raise typer.Exit(code=1) from None

    if not train_number.strip().isdigit():
        typer.echo("ERROR: --train-number must be numeric.")
        raise typer.Exit(code=1)

    failure_stage = "load_settings"
    try:
        settings = load_settings(settings_path)
        failure_stage = "fetch_formation"
        formation_client, occupancy_client = _build_clients(settings)
        try:
            visualization = search_formation(
                formation_client,
                occupancy_client,
                settings.occupancy_visualization,
                evu=evu.strip(),
                operation_date=parsed_date,
                train_number=train_number.strip(),
                stop_index=stop_index,
            )
        finally:
            formation_client.close()
            occupancy_client.close()
    except FormationApiError as exc:
        typer.echo(f"ERROR: formation API error (status={exc.status_code}): {exc.message}")
        raise typer.Exit(code=2) from exc
    except Exception as exc:  # noqa: BLE001
        typer.echo(f"ERROR({failure_stage}): {type(exc).__name__}: {exc}")
        raise typer.Exit(code=1) from exc

    if visualization is None:
        typer.echo("ERROR: no stop of this train carries formation data.")
        raise typer.Exit(code=1)

    if output_typed == "json":
        typer.echo(
            json.dumps(visualization.model_dump(mode="json"), ensure_ascii=False, indent=2)
        )
    else:
        typer.echo(render_visualization(visualization))
    raise typer.Exit(code=0)


def _validate_output(output: str) -> OutputMode:
    normalized = output.lower().strip()
    if normalized not in {"human", "json"}:
        typer.echo("ERROR: --output must be one of: human, json.")
        raise typer.Exit(code=1)
    return cast(OutputMode, normalized)


def _build_clients(settings: AppSettings) -> tuple[FormationClient, OccupancyClient]:
    formation_client = FormationClient(
        api_url=settings.formation_api_url,
        api_key=api_key_from_env(),
        timeout_seconds=settings.request_timeout_seconds,
    )
    occupancy_client = OccupancyClient(
        base_url=settings.occupancy_base_url,
        operator_mapping=settings.operator_mapping,
        cache_hours=settings.occupancy_cache_hours,
        max_forecast_days=settings.max_forecast_days,
        timeout_seconds=settings.request_timeout_seconds,
    )
    return formation_client, occupancy_client


def main() -> None:
    """Console script entrypoint."""

    app()


if __name__ == "__main__":
    main()
