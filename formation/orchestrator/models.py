"""Visualization output models handed to the rendering layer."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from formation.parsing.models import TrainSection, TravelDirection


class StopSummary(BaseModel):
    """One scheduled stop that carries a formation string."""

    model_config = ConfigDict(extra="forbid")

    name: str | None
    uic: int | str | None
    arrival_time: str | None = None
    departure_time: str | None = None
    track: str | None = None
    has_sectors: bool
    travel_direction: TravelDirection = "unknown"


class TrainVisualization(BaseModel):
    """Parsed formation of one train at the selected stop."""

    model_config = ConfigDict(extra="forbid")

    train_number: str
    operation_date: str
    evu: str
    current_stop: str | None
    current_stop_index: int
    stops: list[StopSummary] = Field(default_factory=list)
    sections: list[TrainSection] = Field(default_factory=list)
