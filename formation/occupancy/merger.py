"""Overlay occupancy forecasts onto parsed wagons for the current stop."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from formation.occupancy.models import FareClass, OccupancySection, TrainOccupancy
from formation.parsing.models import OccupancyDisplay, TrainSection

logger = logging.getLogger("formation.occupancy")


def get_occupancy_visualization(
    occupancy: TrainOccupancy | None,
    fare_class: FareClass,
    from_station: str,
    to_station: str,
    visualization: Mapping[str, OccupancyDisplay],
) -> OccupancyDisplay | None:
    """Look up the display entry for one fare class on one station pair."""

    if occupancy is None:
        return None

    section = next(
        (
            item
            for item in occupancy.sections
            if item.departure_station_name == from_station
            and item.destination_station_name == to_station
        ),
        None,
    )
    if section is None:
        return None

    expected = next(
        (item for item in section.expected_departure_occupancies if item.fare_class == fare_class),
        None,
    )
    if expected is None:
        return None

    return visualization.get(expected.occupancy_level)


def find_departure_section(
    occupancy: TrainOccupancy | None, station_name: str | None
) -> OccupancySection | None:
    if occupancy is None or not station_name:
        return None
    for section in occupancy.sections:
        if section.departure_station_name == station_name:
            return section
    return None


def merge_occupancy(
    sections: list[TrainSection],
    occupancy: TrainOccupancy | None,
    current_stop_name: str | None,
    visualization: Mapping[str, OccupancyDisplay],
) -> list[TrainSection]:
    """Attach first/second class occupancy to wagons departing ``current_stop_name``.

    Only wagons carrying a class receive that class's decoration. Any missing piece of
    data leaves the wagons untouched.
    """

    departure = find_departure_section(occupancy, current_stop_name)
    if departure is None or current_stop_name is None:
        logger.debug("No occupancy section departs from %r", current_stop_name)
        return sections

    destination = departure.destination_station_name
    first_class = get_occupancy_visualization(
        occupancy, "FIRST", current_stop_name, destination, visualization
    )
    second_class = get_occupancy_visualization(
        occupancy, "SECOND", current_stop_name, destination, visualization
    )

    for section in sections:
        for wagon in section.wagons:
            if "1" in wagon.classes and first_class is not None:
                wagon.first_class_occupancy = first_class
            if "2" in wagon.classes and second_class is not None:
                wagon.second_class_occupancy = second_class

    return sections
