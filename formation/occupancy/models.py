"""Occupancy forecast data models (pre-processed per-operator daily datasets)."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

FareClass = Literal["FIRST", "SECOND"]


class _OccupancyModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ExpectedOccupancy(_OccupancyModel):
    fare_class: str = Field(alias="fareClass")
    occupancy_level: str = Field(alias="occupancyLevel")


class OccupancySection(_OccupancyModel):
    """Forecast for one directional station pair of a train run."""

    departure_station_name: str = Field(alias="departureStationName")
    destination_station_name: str = Field(alias="destinationStationName")
    expected_departure_occupancies: list[ExpectedOccupancy] = Field(
        default_factory=list, alias="expectedDepartureOccupancies"
    )


class TrainOccupancy(_OccupancyModel):
    train_number: str = Field(default="", alias="trainNumber")
    sections: list[OccupancySection] = Field(default_factory=list)


class OperatorOccupancy(_OccupancyModel):
    """All train forecasts of one operator for one operation date."""

    trains: list[TrainOccupancy] = Field(default_factory=list)
