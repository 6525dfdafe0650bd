"""Formation string parser: segmentation, group extraction, assembly and stitching.

Parsing is pure and never raises for malformed input; unusable text degrades to
fewer (or no) wagons.
"""

from __future__ import annotations

import logging
import re

from formation.parsing.groups import parse_vehicle_group
from formation.parsing.models import TrainSection
from formation.parsing.sectors import SectorWagonMap, has_sectors, iter_sector_segments
from formation.parsing.stitcher import stitch_sections
from formation.parsing.tokenizer import find_bracket_span, is_potential_wagon_token
from formation.parsing.vehicle import decode_vehicle_token

logger = logging.getLogger("formation.parser")

_LOOSE_TOKEN_SPLIT_RE = re.compile(r"[,\\]")
_DEFAULT_SECTOR = ""


def parse_formation_string(formation_string: str | None) -> list[TrainSection]:
    """Parse one stop's formation string into stitched train sections."""

    if not formation_string or not formation_string.strip():
        logger.debug("Empty formation string received")
        return []

    logger.debug("Parsing formation string: %s", formation_string)
    sector_map = SectorWagonMap()
    position = 0

    if has_sectors(formation_string):
        current_sector = _DEFAULT_SECTOR
        for segment in iter_sector_segments(formation_string):
            if segment.sector is not None:
                current_sector = segment.sector
                sector_map.touch(current_sector)
            position = process_segment(segment.body, current_sector, position, sector_map)
    elif find_bracket_span(formation_string, "[", "]") is not None:
        position = process_segment(formation_string, _DEFAULT_SECTOR, position, sector_map)
    else:
        # No brackets at all: the raw string is one implicit vehicle group.
        group = parse_vehicle_group(formation_string, _DEFAULT_SECTOR, position)
        sector_map.extend(_DEFAULT_SECTOR, group.wagons)
        position = group.next_position

    sections = sector_map.to_sections()
    logger.debug(
        "Parsed %d section(s) over %d provisional position(s): %s",
        len(sections),
        position,
        ", ".join(f"{section.sector or '-'}={len(section.wagons)}" for section in sections),
    )
    return stitch_sections(sections)


def process_segment(
    segment: str, sector: str, position: int, sector_map: SectorWagonMap
) -> int:
    """Parse every bracket group and loose token of one segment into ``sector_map``.

    Returns the provisional position after the segment.
    """

    remaining = segment
    while True:
        span = find_bracket_span(remaining, "[", "]")
        if span is None:
            break
        start, end = span
        group = parse_vehicle_group(remaining[start + 1 : end], sector, position)
        if group.wagons:
            sector_map.extend(sector, group.wagons)
            position = group.next_position
        else:
            logger.debug("No wagons found in bracket group of sector %r", sector)
        remaining = remaining[:start] + remaining[end + 1 :]

    for raw_token in _LOOSE_TOKEN_SPLIT_RE.split(remaining):
        token = raw_token.strip()
        if not token:
            continue
        if token == "F":
            # Fictitious wagons only reserve a slot.
            position += 1
            continue
        if not is_potential_wagon_token(token):
            logger.debug("Ignoring non-wagon token: %s", token)
            continue
        wagon = decode_vehicle_token(token, sector, position)
        if wagon is not None:
            sector_map.append(sector, wagon)
            position += 1

    return position
