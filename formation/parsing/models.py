"""Data models for formation string parsing and the wagon/section output model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

TokenKind = Literal[
    "sector",
    "fictitious_wagon",
    "bracket_open",
    "bracket_close",
    "paren_open",
    "paren_close",
    "comma",
    "backslash",
    "vehicle",
    "unknown",
]

WagonType = Literal[
    "locomotive",
    "first-class",
    "second-class",
    "first-and-second-class",
    "couchette",
    "sleeper",
    "restaurant",
    "restaurant-first",
    "restaurant-second",
    "baggage",
    "classless",
    "parked",
    "wagon",
]

WagonClass = Literal["1", "2"]

WagonStatus = Literal[
    "Closed",
    "Group boarding",
    "Reserved for transit",
    "Open but unserviced",
]

TravelDirection = Literal["left", "right", "unknown"]

STATUS_CLOSED: WagonStatus = "Closed"
STATUS_GROUP_BOARDING: WagonStatus = "Group boarding"
STATUS_RESERVED_FOR_TRANSIT: WagonStatus = "Reserved for transit"
STATUS_UNSERVICED: WagonStatus = "Open but unserviced"


@dataclass(frozen=True)
class Token:
    """One lexical unit of a formation string.

    ``position`` is only meaningful inside the tokenization call that produced it.
    """

    kind: TokenKind
    value: str
    position: int


class WagonAttribute(BaseModel):
    """Passenger-facing wagon facility, deduplicated per wagon by ``code``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    code: str
    label: str
    icon: str


class OccupancyDisplay(BaseModel):
    """Occupancy forecast decoration attached to a wagon class."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    icon: str
    label: str


class TrainWagon(BaseModel):
    """One physical vehicle of the train, in final train order after stitching."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    position: int
    number: str = ""
    type: WagonType = "wagon"
    type_label: str = "Coach"
    classes: list[WagonClass] = Field(default_factory=list)
    attributes: list[WagonAttribute] = Field(default_factory=list)
    status_codes: list[WagonStatus] = Field(default_factory=list)
    no_access_to_previous: bool = False
    no_access_to_next: bool = False
    no_access_message: str | None = None
    sector: str = ""
    first_class_occupancy: OccupancyDisplay | None = None
    second_class_occupancy: OccupancyDisplay | None = None

    @property
    def is_locomotive(self) -> bool:
        return self.type == "locomotive"

    def add_attribute(self, attribute: WagonAttribute) -> None:
        """Append ``attribute`` unless one with the same code is already present."""

        if any(existing.code == attribute.code for existing in self.attributes):
            return
        self.attributes = [*self.attributes, attribute]


class TrainSection(BaseModel):
    """Wagons stopping at one platform sector (``""`` when the string has no sectors)."""

    model_config = ConfigDict(extra="forbid")

    sector: str
    wagons: list[TrainWagon] = Field(default_factory=list)
