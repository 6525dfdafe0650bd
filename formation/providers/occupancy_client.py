"""Loader for pre-processed per-operator occupancy forecasts.

Occupancy is optional decoration: every failure path returns None instead of raising.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import date

import httpx
from pydantic import ValidationError

from formation.occupancy.lookup import (
    find_train_occupancy,
    is_forecast_date,
    resolve_operator_id,
)
from formation.occupancy.models import OperatorOccupancy, TrainOccupancy

logger = logging.getLogger("formation.occupancy")


@dataclass
class _CacheEntry:
    data: OperatorOccupancy
    stored_at: float


class OccupancyClient:
    """Fetch and cache operator datasets, then pick one train's forecast."""

    def __init__(
        self,
        *,
        base_url: str,
        operator_mapping: Mapping[str, str],
        cache_hours: float = 24.0,
        max_forecast_days: int = 3,
        timeout_seconds: float = 15.0,
        client: httpx.Client | None = None,
        today: Callable[[], date] = date.today,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._operator_mapping = operator_mapping
        self._cache_seconds = cache_hours * 3600
        self._max_forecast_days = max_forecast_days
        self._client = client or httpx.Client(timeout=timeout_seconds)
        self._owns_client = client is None
        self._today = today
        self._clock = clock
        self._cache: dict[str, _CacheEntry] = {}

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> OccupancyClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def get_train_occupancy(
        self, operator: str, train_number: str, operation_date: date | str
    ) -> TrainOccupancy | None:
        operator_id = resolve_operator_id(operator, self._operator_mapping)
        if operator_id is None:
            logger.debug("Occupancy data not available for operator: %s", operator)
            return None

        parsed_date = _parse_date(operation_date)
        if parsed_date is None or not is_forecast_date(
            parsed_date, today=self._today(), max_forecast_days=self._max_forecast_days
        ):
            logger.debug("Occupancy data not available for date: %s", operation_date)
            return None

        dataset = self._load_dataset(operator_id, parsed_date)
        if dataset is None:
            return None
        return find_train_occupancy(dataset, train_number)

    def _load_dataset(self, operator_id: str, operation_date: date) -> OperatorOccupancy | None:
        formatted_date = operation_date.isoformat()
        cache_key = f"{operator_id}_{formatted_date}"
        cached = self._cache.get(cache_key)
        if cached is not None and self._clock() - cached.stored_at < self._cache_seconds:
            return cached.data

        url = f"{self._base_url}/{formatted_date}/operator-{operator_id}.json"
        try:
            response = self._client.get(url)
        except httpx.HTTPError as exc:
            logger.warning("Error fetching occupancy data from %s: %s", url, exc)
            return None

        if response.status_code == 404:
            logger.debug(
                "No occupancy data available for operator=%s date=%s", operator_id, formatted_date
            )
            return None
        if response.status_code != 200:
            logger.warning(
                "Error fetching occupancy data from %s: HTTP %s", url, response.status_code
            )
            return None

        try:
            data = OperatorOccupancy.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            logger.warning("Unreadable occupancy data at %s: %s", url, exc)
            return None

        self._cache[cache_key] = _CacheEntry(data=data, stored_at=self._clock())
        return data


def _parse_date(value: date | str) -> date | None:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None
