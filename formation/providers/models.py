"""Response models for the formation API (only the fields the engine consumes)."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _ApiModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class StopPoint(_ApiModel):
    name: str | None = None
    uic: int | str | None = None


class StopTime(_ApiModel):
    arrival_time: str | None = Field(default=None, alias="arrivalTime")
    departure_time: str | None = Field(default=None, alias="departureTime")


class ScheduledStop(_ApiModel):
    stop_point: StopPoint = Field(alias="stopPoint")
    stop_time: StopTime = Field(default_factory=StopTime, alias="stopTime")
    track: str | None = None


class FormationShort(_ApiModel):
    formation_short_string: str | None = Field(default=None, alias="formationShortString")


class FormationAtScheduledStop(_ApiModel):
    scheduled_stop: ScheduledStop = Field(alias="scheduledStop")
    formation_short: FormationShort = Field(
        default_factory=FormationShort, alias="formationShort"
    )


class FormationVehicleAtScheduledStop(_ApiModel):
    stop_point: StopPoint = Field(alias="stopPoint")
    sectors: str | None = None


class FormationVehicle(_ApiModel):
    formation_vehicle_at_scheduled_stops: list[FormationVehicleAtScheduledStop] = Field(
        default_factory=list, alias="formationVehicleAtScheduledStops"
    )


class Formation(_ApiModel):
    formation_vehicles: list[FormationVehicle] = Field(
        default_factory=list, alias="formationVehicles"
    )


class TrainMetaInformation(_ApiModel):
    train_number: int | str = Field(alias="trainNumber")
    to_code: str = Field(alias="toCode")


class JourneyMetaInformation(_ApiModel):
    operation_date: str = Field(alias="operationDate")


class FormationResponse(_ApiModel):
    """Payload of ``formations_full`` for one train run."""

    train_meta_information: TrainMetaInformation = Field(alias="trainMetaInformation")
    journey_meta_information: JourneyMetaInformation = Field(alias="journeyMetaInformation")
    formations_at_scheduled_stops: list[FormationAtScheduledStop] = Field(
        default_factory=list, alias="formationsAtScheduledStops"
    )
    formations: list[Formation] = Field(default_factory=list)
