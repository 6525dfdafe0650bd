"""Orchestration: fetch formation -> fetch occupancy -> parse -> merge."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date

from formation.occupancy.merger import merge_occupancy
from formation.occupancy.models import TrainOccupancy
from formation.orchestrator.models import StopSummary, TrainVisualization
from formation.parsing.direction import determine_travel_direction
from formation.parsing.models import OccupancyDisplay, TravelDirection
from formation.parsing.parser import parse_formation_string
from formation.parsing.sectors import has_sectors
from formation.providers.formation_client import FormationClient
from formation.providers.models import FormationAtScheduledStop, FormationResponse
from formation.providers.occupancy_client import OccupancyClient

logger = logging.getLogger("formation.pipeline")


def search_formation(
    formation_client: FormationClient,
    occupancy_client: OccupancyClient | None,
    visualization: Mapping[str, OccupancyDisplay],
    *,
    evu: str,
    operation_date: date | str,
    train_number: str,
    stop_index: int = 0,
) -> TrainVisualization | None:
    """Run one search end to end; formation API errors propagate to the caller."""

    response = formation_client.get_formation(evu, operation_date, train_number)

    occupancy: TrainOccupancy | None = None
    if occupancy_client is not None:
        occupancy = occupancy_client.get_train_occupancy(
            response.train_meta_information.to_code,
            str(response.train_meta_information.train_number),
            response.journey_meta_information.operation_date,
        )

    return build_visualization(response, occupancy, visualization, stop_index=stop_index)


def build_visualization(
    response: FormationResponse,
    occupancy: TrainOccupancy | None,
    visualization: Mapping[str, OccupancyDisplay],
    *,
    stop_index: int = 0,
) -> TrainVisualization | None:
    """Build the visualization for one selected stop.

    Only stops with a non-blank formation string are listed. ``stop_index`` indexes that
    filtered list; 0 selects the first named stop and an out-of-range index falls back
    to 0. Returns None when no stop carries a formation string.
    """

    formation_stops = [
        stop
        for stop in response.formations_at_scheduled_stops
        if (stop.formation_short.formation_short_string or "").strip()
    ]
    if not formation_stops:
        logger.debug("No stop of train %s carries a formation string", _train_number(response))
        return None

    stops = [_summarize_stop(response, stop) for stop in formation_stops]
    selected_index = _select_stop_index(stops, stop_index)
    selected = formation_stops[selected_index]
    current_stop = stops[selected_index]

    sections = parse_formation_string(selected.formation_short.formation_short_string)
    merge_occupancy(sections, occupancy, current_stop.name, visualization)

    return TrainVisualization(
        train_number=_train_number(response),
        operation_date=response.journey_meta_information.operation_date,
        evu=response.train_meta_information.to_code,
        current_stop=selected.scheduled_stop.stop_point.name,
        current_stop_index=selected_index,
        stops=stops,
        sections=sections,
    )


def _summarize_stop(response: FormationResponse, stop: FormationAtScheduledStop) -> StopSummary:
    formation_string = stop.formation_short.formation_short_string or ""
    scheduled = stop.scheduled_stop
    return StopSummary(
        name=scheduled.stop_point.name,
        uic=scheduled.stop_point.uic,
        arrival_time=scheduled.stop_time.arrival_time,
        departure_time=scheduled.stop_time.departure_time,
        track=scheduled.track,
        has_sectors=has_sectors(formation_string),
        travel_direction=_travel_direction_for_stop(response, stop),
    )


def _travel_direction_for_stop(
    response: FormationResponse, stop: FormationAtScheduledStop
) -> TravelDirection:
    if not response.formations or not response.formations[0].formation_vehicles:
        return "unknown"

    first_vehicle = response.formations[0].formation_vehicles[0]
    stop_uic = stop.scheduled_stop.stop_point.uic
    for vehicle_stop in first_vehicle.formation_vehicle_at_scheduled_stops:
        if vehicle_stop.stop_point.uic == stop_uic:
            return determine_travel_direction(
                stop.formation_short.formation_short_string, vehicle_stop.sectors
            )
    return "unknown"


def _select_stop_index(stops: list[StopSummary], stop_index: int) -> int:
    selected = stop_index
    if stop_index == 0:
        for index, stop in enumerate(stops):
            if stop.name is not None:
                selected = index
                break
    if selected < 0 or selected >= len(stops):
        selected = 0
    return selected


def _train_number(response: FormationResponse) -> str:
    return str(response.train_meta_information.train_number)
