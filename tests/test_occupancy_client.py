from __future__ import annotations

from datetime import date
from typing import Any

import httpx
import pytest

from formation.occupancy.lookup import (
    find_train_occupancy,
    is_forecast_date,
    normalize_train_number,
    resolve_operator_id,
)
from formation.occupancy.models import OperatorOccupancy
from formation.providers.occupancy_client import OccupancyClient

_TODAY = date(2026, 10, 19)
_MAPPING = {"11": "11", "SBBP": "11", "BLS": "33"}


def _client(
    handler: Any, *, clock: Any = None, cache_hours: float = 24.0
) -> OccupancyClient:
    kwargs: dict[str, Any] = {}
    if clock is not None:
        kwargs["clock"] = clock
    return OccupancyClient(
        base_url="http://occupancy.test/data/",
        operator_mapping=_MAPPING,
        cache_hours=cache_hours,
        client=httpx.Client(transport=httpx.MockTransport(handler)),
        today=lambda: _TODAY,
        **kwargs,
    )


def test_normalize_train_number() -> None:
    assert normalize_train_number("IC 0712") == "712"
    assert normalize_train_number("712") == "712"
    assert normalize_train_number("abc") == "abc"


def test_find_train_occupancy_matches_normalized_number(
    operator_occupancy_payload: dict[str, Any],
) -> None:
    data = OperatorOccupancy.model_validate(operator_occupancy_payload)

    found = find_train_occupancy(data, "0712")

    assert found is not None
    assert found.train_number == "712"
    assert find_train_occupancy(data, "999") is None


def test_resolve_operator_id() -> None:
    assert resolve_operator_id("SBBP", _MAPPING) == "11"
    assert resolve_operator_id(" BLS ", _MAPPING) == "33"
    assert resolve_operator_id("XYZ", _MAPPING) is None


def test_is_forecast_date_window() -> None:
    assert is_forecast_date(_TODAY, today=_TODAY, max_forecast_days=3)
    assert is_forecast_date(date(2026, 10, 22), today=_TODAY, max_forecast_days=3)
    assert not is_forecast_date(date(2026, 10, 23), today=_TODAY, max_forecast_days=3)
    assert not is_forecast_date(date(2026, 10, 18), today=_TODAY, max_forecast_days=3)


def test_get_train_occupancy_fetches_operator_dataset(
    operator_occupancy_payload: dict[str, Any],
) -> None:
    requested: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        return httpx.Response(200, json=operator_occupancy_payload)

    client = _client(handler)

    occupancy = client.get_train_occupancy("SBBP", "712", "2026-10-19")

    assert occupancy is not None
    assert occupancy.sections[0].departure_station_name == "Zürich HB"
    assert requested == ["http://occupancy.test/data/2026-10-19/operator-11.json"]


def test_get_train_occupancy_caches_dataset_per_operator_and_date(
    operator_occupancy_payload: dict[str, Any],
) -> None:
    calls = 0
    now = [0.0]

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(200, json=operator_occupancy_payload)

    client = _client(handler, clock=lambda: now[0], cache_hours=1)

    client.get_train_occupancy("SBBP", "712", date(2026, 10, 19))
    client.get_train_occupancy("11", "1234", date(2026, 10, 19))
    assert calls == 1

    now[0] = 3601.0
    client.get_train_occupancy("SBBP", "712", date(2026, 10, 19))
    assert calls == 2


def test_get_train_occupancy_skips_unmapped_operator_and_out_of_window_date() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    client = _client(handler)

    assert client.get_train_occupancy("XYZ", "712", _TODAY) is None
    assert client.get_train_occupancy("SBBP", "712", date(2026, 11, 30)) is None
    assert client.get_train_occupancy("SBBP", "712", "not-a-date") is None


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(404),
        httpx.Response(500),
        httpx.Response(200, content=b"not json"),
        httpx.Response(200, json=[1, 2, 3]),
    ],
)
def test_get_train_occupancy_failures_return_none(response: httpx.Response) -> None:
    client = _client(lambda request: response)

    assert client.get_train_occupancy("SBBP", "712", _TODAY) is None


def test_get_train_occupancy_transport_error_returns_none() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)

    assert client.get_train_occupancy("SBBP", "712", _TODAY) is None


def test_get_train_occupancy_unknown_train_returns_none(
    operator_occupancy_payload: dict[str, Any],
) -> None:
    client = _client(lambda request: httpx.Response(200, json=operator_occupancy_payload))

    assert client.get_train_occupancy("SBBP", "999", _TODAY) is None
