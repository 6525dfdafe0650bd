"""Human-readable formation rendering for CLI output."""

from __future__ import annotations

from formation.orchestrator.models import TrainVisualization
from formation.parsing.models import TrainSection, TrainWagon, TravelDirection


def render_sections(
    sections: list[TrainSection],
    *,
    travel_direction: TravelDirection,
    has_sectors: bool,
) -> str:
    """Render one line per wagon, grouped under a header per section."""

    lines: list[str] = []
    lines.append(f"travel_direction={travel_direction} has_sectors={has_sectors}")
    if not sections:
        lines.append("sections: none")
        return "\n".join(lines)

    for section in sections:
        lines.append(f"section {section.sector or '-'}:")
        for wagon in section.wagons:
            lines.append(f"  {_render_wagon(wagon)}")
    return "\n".join(lines)


def render_visualization(visualization: TrainVisualization) -> str:
    """Render the selected stop of a fetched train followed by its sections."""

    current = visualization.stops[visualization.current_stop_index]
    lines: list[str] = []
    lines.append(
        f"train={visualization.train_number} date={visualization.operation_date} "
        f"evu={visualization.evu}"
    )
    lines.append(
        f"stop[{visualization.current_stop_index}/{len(visualization.stops)}]="
        f"{visualization.current_stop or 'unknown'} track={current.track or '-'}"
    )
    lines.append(
        render_sections(
            visualization.sections,
            travel_direction=current.travel_direction,
            has_sectors=current.has_sectors,
        )
    )
    return "\n".join(lines)


def _render_wagon(wagon: TrainWagon) -> str:
    parts = [f"{wagon.position:>3}", wagon.type_label]
    if wagon.number:
        parts.append(f"#{wagon.number}")
    if wagon.classes:
        parts.append(f"classes={'/'.join(wagon.classes)}")
    if wagon.attributes:
        parts.append(f"attrs={','.join(attribute.code for attribute in wagon.attributes)}")
    if wagon.status_codes:
        parts.append(f"status={','.join(wagon.status_codes)}")

    access = _access_marker(wagon)
    if access:
        parts.append(access)

    occupancy = [
        f"{label}:{display.label}"
        for label, display in (
            ("1st", wagon.first_class_occupancy),
            ("2nd", wagon.second_class_occupancy),
        )
        if display is not None
    ]
    if occupancy:
        parts.append(f"occupancy={'; '.join(occupancy)}")
    return " ".join(parts)


def _access_marker(wagon: TrainWagon) -> str:
    if wagon.no_access_to_previous and wagon.no_access_to_next:
        return "|closed both|"
    if wagon.no_access_to_previous:
        return "|closed prev|"
    if wagon.no_access_to_next:
        return "|closed next|"
    return ""
