"""Sector segmentation and first-seen-order sector accumulation."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field

from formation.parsing.models import TrainSection, TrainWagon

_ESCAPED_SECTOR_RE = re.compile(r"\\@[A-Z]")
_SECTOR_SPLIT_RE = re.compile(r"(?=@[A-Z])")
_SECTOR_MARKER_RE = re.compile(r"@([A-Z])")


@dataclass(frozen=True)
class SectorSegment:
    """Segment text with its sector marker removed.

    ``sector`` is None when the segment carries no marker and the previously active
    sector should stay in effect.
    """

    sector: str | None
    body: str


def has_sectors(formation_string: str) -> bool:
    """Return True when the string uses ``@`` sector notation (plain or ``\\@X`` escaped)."""

    return "@" in formation_string or _ESCAPED_SECTOR_RE.search(formation_string) is not None


def iter_sector_segments(formation_string: str) -> Iterator[SectorSegment]:
    """Yield non-blank segments split before every ``@<LETTER>`` marker, in string order."""

    for segment in _SECTOR_SPLIT_RE.split(formation_string):
        if not segment.strip():
            continue
        match = _SECTOR_MARKER_RE.search(segment)
        if match is None:
            yield SectorSegment(sector=None, body=segment)
            continue
        yield SectorSegment(sector=match.group(1), body=segment[match.end() :])


@dataclass
class SectorWagonMap:
    """Insertion-ordered sector label -> wagons accumulation.

    A sector seen again later in the string appends to its first entry instead of
    opening a new section.
    """

    _wagons_by_sector: dict[str, list[TrainWagon]] = field(default_factory=dict)

    def touch(self, sector: str) -> None:
        """Register ``sector`` in first-seen order without adding wagons."""

        self._wagons_by_sector.setdefault(sector, [])

    def extend(self, sector: str, wagons: list[TrainWagon]) -> None:
        self._wagons_by_sector.setdefault(sector, []).extend(wagons)

    def append(self, sector: str, wagon: TrainWagon) -> None:
        self._wagons_by_sector.setdefault(sector, []).append(wagon)

    def sectors(self) -> list[str]:
        return list(self._wagons_by_sector)

    def to_sections(self) -> list[TrainSection]:
        """Assemble non-empty accumulations into sections, keeping first-seen order."""

        return [
            TrainSection(sector=sector, wagons=list(wagons))
            for sector, wagons in self._wagons_by_sector.items()
            if wagons
        ]
