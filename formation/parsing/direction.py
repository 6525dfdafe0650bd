"""Travel direction inference from sector order and the leading vehicle's sectors."""

from __future__ import annotations

from formation.parsing.models import TrainSection, TravelDirection
from formation.parsing.parser import parse_formation_string


def visual_sector_order(sections: list[TrainSection]) -> list[str]:
    """Sector labels in left-to-right string order, skipping the unlabeled sector."""

    return [section.sector for section in sections if section.sector.strip()]


def split_vehicle_sectors(vehicle_sectors: str | None) -> set[str]:
    if not vehicle_sectors:
        return set()
    return {sector.strip() for sector in vehicle_sectors.split(",") if sector.strip()}


def determine_travel_direction(
    formation_string: str | None,
    vehicle_sectors: str | None,
    *,
    sections: list[TrainSection] | None = None,
) -> TravelDirection:
    """Infer whether the first formation vehicle sits at the left or right edge.

    ``vehicle_sectors`` is the comma-separated sector field of the first formation
    vehicle at this stop; a vehicle spanning several sectors matches if any of them is
    an edge sector. Pass already parsed ``sections`` to skip reparsing.
    """

    if not formation_string or not formation_string.strip():
        return "unknown"

    if sections is None:
        sections = parse_formation_string(formation_string)
    visual_sectors = visual_sector_order(sections)
    if not visual_sectors:
        return "unknown"

    sectors = split_vehicle_sectors(vehicle_sectors)
    if not sectors:
        return "unknown"

    if visual_sectors[0] in sectors:
        return "left"
    if visual_sectors[-1] in sectors:
        return "right"
    return "unknown"
