"""HTTP client for the OpenTransportData formation API."""

from __future__ import annotations

import logging
from datetime import date

import httpx
from pydantic import ValidationError

from formation.providers.models import FormationResponse
from formation.utils.errors import FormationApiError

logger = logging.getLogger("formation.providers")


class FormationClient:
    """Fetch ``formations_full`` payloads; failures surface as ``FormationApiError``."""

    def __init__(
        self,
        *,
        api_url: str,
        api_key: str | None,
        timeout_seconds: float = 15.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._api_url = api_url
        self._api_key = api_key
        self._client = client or httpx.Client(timeout=timeout_seconds)
        self._owns_client = client is None

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> FormationClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def get_formation(
        self,
        evu: str,
        operation_date: date | str,
        train_number: str,
        *,
        include_operational_stops: bool = False,
    ) -> FormationResponse:
        params = {
            "evu": evu,
            "operationDate": _format_date(operation_date),
            "trainNumber": str(train_number),
            "includeOperationalStops": "true" if include_operational_stops else "false",
        }
        headers = {"Authorization": f"Bearer {self._api_key}"} if self._api_key else {}

        try:
            response = self._client.get(self._api_url, params=params, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("Formation API request failed: %s", exc)
            raise FormationApiError.unexpected(str(exc)) from exc

        if response.status_code != 200:
            logger.error(
                "Formation API returned HTTP %s for evu=%s train=%s",
                response.status_code,
                evu,
                train_number,
            )
            raise FormationApiError.from_status(response.status_code, response.reason_phrase)

        try:
            return FormationResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            logger.error("Formation API returned an unreadable payload: %s", exc)
            raise FormationApiError.unexpected("invalid formation payload") from exc


def _format_date(value: date | str) -> str:
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d")
    return value
