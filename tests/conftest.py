from __future__ import annotations

import copy
from typing import Any

import pytest

_FORMATION_PAYLOAD: dict[str, Any] = {
    "trainMetaInformation": {"trainNumber": 712, "toCode": "11"},
    "journeyMetaInformation": {"operationDate": "2026-10-19"},
    "formationsAtScheduledStops": [
        {
            "scheduledStop": {
                "stopPoint": {"name": None, "uic": 8500000},
                "stopTime": {},
            },
            "formationShort": {"formationShortString": "@A[1:10]"},
        },
        {
            "scheduledStop": {
                "stopPoint": {"name": "Zürich HB", "uic": 8503000},
                "stopTime": {"departureTime": "2026-10-19T08:02:00"},
                "track": "31",
            },
            "formationShort": {"formationShortString": "@A[LK,1:10]@B[2:20,(2:21)]"},
        },
        {
            "scheduledStop": {
                "stopPoint": {"name": "Olten", "uic": 8500218},
                "stopTime": {"arrivalTime": "2026-10-19T08:31:00"},
            },
            "formationShort": {"formationShortString": ""},
        },
        {
            "scheduledStop": {
                "stopPoint": {"name": "Bern", "uic": 8507000},
                "stopTime": {"arrivalTime": "2026-10-19T08:58:00"},
                "track": "7",
            },
            "formationShort": {"formationShortString": "@D[2:21,2:20]@C[1:10,LK]"},
        },
    ],
    "formations": [
        {
            "formationVehicles": [
                {
                    "formationVehicleAtScheduledStops": [
                        {"stopPoint": {"uic": 8503000}, "sectors": "A"},
                        {"stopPoint": {"uic": 8507000}, "sectors": "C"},
                    ]
                }
            ]
        }
    ],
}

_TRAIN_OCCUPANCY: dict[str, Any] = {
    "trainNumber": "712",
    "sections": [
        {
            "departureStationName": "Zürich HB",
            "destinationStationName": "Bern",
            "expectedDepartureOccupancies": [
                {"fareClass": "FIRST", "occupancyLevel": "LOW"},
                {"fareClass": "SECOND", "occupancyLevel": "HIGH"},
            ],
        }
    ],
}


@pytest.fixture
def formation_payload() -> dict[str, Any]:
    return copy.deepcopy(_FORMATION_PAYLOAD)


@pytest.fixture
def train_occupancy_payload() -> dict[str, Any]:
    return copy.deepcopy(_TRAIN_OCCUPANCY)


@pytest.fixture
def operator_occupancy_payload() -> dict[str, Any]:
    return {"trains": [{"trainNumber": "1234", "sections": []}, copy.deepcopy(_TRAIN_OCCUPANCY)]}
