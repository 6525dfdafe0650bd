"""Vehicle group parsing for the content of one ``[...]`` bracket group."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from formation.parsing.attributes import resolve_attribute_list
from formation.parsing.models import TrainWagon, WagonAttribute
from formation.parsing.tokenizer import tokenize
from formation.parsing.vehicle import decode_vehicle_token

logger = logging.getLogger("formation.parser")

_GROUP_SUFFIX_RE = re.compile(r"[)\]](?::\d+)?(?:#([A-Z;]+))?$")
_GROUP_CLOSES_AT_END_RE = re.compile(r"\)(?::\d+)?(?:#[A-Z;]+)?$")
_PARENTHESIZED_SPAN_RE = re.compile(r"\(.*?\)")
_SECTOR_RE = re.compile(r"@([A-Z])")


@dataclass
class GroupParseResult:
    """Wagons decoded from one group plus the advanced provisional position."""

    wagons: list[TrainWagon] = field(default_factory=list)
    next_position: int = 0


def parse_vehicle_group(group_content: str, sector: str, start_position: int) -> GroupParseResult:
    """Decode the inner text of one bracket group into wagons.

    Rules:
    - A trailing ``)``/``]`` suffix ``[:digits][#CODE;CODE]`` carries group attributes that
      go to the last real (non-fictitious) wagon only.
    - When the content holds a parenthesized span, the first wagon loses passage to the
      previous coach only if the content opens with ``(``, and the last wagon loses passage
      to the next coach only if the content closes with ``)``.
    - ``@X`` tokens switch the sector for the wagons that follow within the group.

    Positions assigned here are provisional; stitching renumbers the whole train.
    """

    result = GroupParseResult(next_position=start_position)
    tokens = tokenize(group_content)
    group_attributes = _group_attributes(group_content)
    current_sector = sector
    last_vehicle_index: int | None = None

    for token in tokens:
        if token.kind == "sector":
            match = _SECTOR_RE.search(token.value)
            if match:
                current_sector = match.group(1)
            continue

        if token.kind not in {"vehicle", "fictitious_wagon"}:
            if token.kind == "unknown":
                logger.debug("Ignoring non-wagon token in group: %s", token.value)
            continue

        wagon = decode_vehicle_token(token.value, current_sector, result.next_position)
        if wagon is None:
            continue
        result.next_position += 1
        if token.kind == "vehicle":
            last_vehicle_index = len(result.wagons)
        result.wagons.append(wagon)

    if not result.wagons:
        return result

    if group_attributes and last_vehicle_index is not None:
        last_real_wagon = result.wagons[last_vehicle_index]
        for attribute in group_attributes:
            last_real_wagon.add_attribute(attribute)

    if _PARENTHESIZED_SPAN_RE.search(group_content):
        stripped = group_content.strip()
        if stripped.startswith("("):
            result.wagons[0].no_access_to_previous = True
        if _GROUP_CLOSES_AT_END_RE.search(stripped):
            result.wagons[-1].no_access_to_next = True

    return result


def _group_attributes(group_content: str) -> list[WagonAttribute]:
    match = _GROUP_SUFFIX_RE.search(group_content.strip())
    if match is None or not match.group(1):
        return []
    return resolve_attribute_list(match.group(1))
