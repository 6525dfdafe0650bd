"""FastAPI wrapper for the formation parsing engine."""

from __future__ import annotations

import importlib.metadata
import json
import logging
import os
import threading
import time
import uuid
from datetime import date
from functools import partial
from typing import Annotated, Any, get_args

import anyio
from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from formation.config.settings import AppSettings, api_key_from_env, load_settings
from formation.orchestrator.pipeline import search_formation
from formation.parsing.attributes import ATTRIBUTE_TABLE, WAGON_TYPE_LABELS
from formation.parsing.direction import determine_travel_direction
from formation.parsing.models import TrainSection, TravelDirection, WagonStatus
from formation.parsing.parser import parse_formation_string
from formation.parsing.sectors import has_sectors
from formation.providers.formation_client import FormationClient
from formation.providers.occupancy_client import OccupancyClient
from formation.utils.errors import FormationApiError

app = FastAPI(title="train-formation API", version="0.1.0")
logger = logging.getLogger("formation.api")

_REQUEST_ID_HEADER = "X-Formation-Request-Id"

_occupancy_client_lock = threading.Lock()
_occupancy_client_cache: OccupancyClient | None = None
_occupancy_client_key: tuple[Any, ...] | None = None


class ParseRequest(BaseModel):
    """Body of ``POST /v1/parse``."""

    model_config = ConfigDict(extra="forbid")

    formation_string: str = Field(max_length=4096)
    vehicle_sectors: str | None = None


class ParseResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    has_sectors: bool
    travel_direction: TravelDirection
    sections: list[TrainSection]


class ApiRequestError(Exception):
    def __init__(
        self,
        *,
        status_code: int,
        error_code: str,
        message: str,
        detail: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code
        self.message = message
        self.detail = detail or {}


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """Ensure every response has a request id header."""

    request_id = uuid.uuid4().hex
    request.state.request_id = request_id
    try:
        response = await call_next(request)
    except Exception:  # noqa: BLE001
        _log_event(
            logging.ERROR,
            "error",
            request_id,
            error_code="INTERNAL_ERROR",
            status_code=500,
            failure_stage="middleware",
        )
        response = _error_response(
            status_code=500,
            error_code="INTERNAL_ERROR",
            message="internal server error",
            request_id=request_id,
            detail={"path": request.url.path},
        )
    response.headers.setdefault(_REQUEST_ID_HEADER, request_id)
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    request_id = _request_id_from_request(request)
    errors = [
        {"loc": [str(part) for part in error.get("loc", ())], "msg": error.get("msg", "")}
        for error in exc.errors()
    ]
    _log_event(
        logging.ERROR,
        "error",
        request_id,
        error_code="INVALID_ARGUMENT",
        status_code=422,
        failure_stage="validate_inputs",
    )
    return _error_response(
        status_code=422,
        error_code="INVALID_ARGUMENT",
        message="invalid request",
        request_id=request_id,
        detail={"errors": errors},
    )


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    """Liveness endpoint."""

    return {"status": "ok"}


@app.get("/v1/meta")
async def meta_v1(request: Request) -> JSONResponse:
    """Vocabulary of the output model for rendering clients."""

    request_id = _request_id_from_request(request)
    if not _meta_enabled():
        return _error_response(
            status_code=404,
            error_code="NOT_FOUND",
            message="meta endpoint is disabled",
            request_id=request_id,
            detail={"path": request.url.path},
        )

    payload = {
        "wagon_types": dict(WAGON_TYPE_LABELS),
        "attribute_codes": {
            code: attribute.model_dump() for code, attribute in ATTRIBUTE_TABLE.items()
        },
        "status_codes": list(get_args(WagonStatus)),
        "travel_directions": list(get_args(TravelDirection)),
        "version": _package_version(),
    }
    return JSONResponse(
        status_code=200,
        headers={_REQUEST_ID_HEADER: request_id},
        content=payload,
    )


@app.post("/v1/parse", response_model=None)
async def parse_v1(request: Request, body: ParseRequest) -> JSONResponse:
    """Parse one formation string and infer the travel direction."""

    request_started = time.perf_counter()
    request_id = _request_id_from_request(request)
    _log_event(
        logging.INFO,
        "start",
        request_id,
        endpoint="parse",
        formation_length=len(body.formation_string),
        vehicle_sectors_provided=body.vehicle_sectors is not None,
    )

    sections = parse_formation_string(body.formation_string)
    payload = ParseResponse(
        has_sectors=has_sectors(body.formation_string),
        travel_direction=determine_travel_direction(
            body.formation_string, body.vehicle_sectors, sections=sections
        ),
        sections=sections,
    )

    total_ms = _elapsed_ms(request_started)
    _log_event(
        logging.INFO,
        "done",
        request_id,
        endpoint="parse",
        outcome="ok",
        status_code=200,
        section_count=len(sections),
        wagon_count=sum(len(section.wagons) for section in sections),
        timing={"total_ms": total_ms},
    )
    return JSONResponse(
        status_code=200,
        headers={_REQUEST_ID_HEADER: request_id},
        content=payload.model_dump(mode="json"),
    )


@app.get("/v1/formation", response_model=None)
async def formation_v1(
    request: Request,
    evu: Annotated[str, Query(min_length=1)],
    operation_date: Annotated[date, Query()],
    train_number: Annotated[str, Query(pattern=r"^[0-9]+$")],
    stop_index: Annotated[int, Query(ge=0)] = 0,
) -> JSONResponse:
    """Fetch a train's formation, merge occupancy and return the selected stop."""

    request_started = time.perf_counter()
    request_id = _request_id_from_request(request)
    failure_stage = "init"

    try:
        failure_stage = "load_settings"
        settings = _load_settings_with_api_error()

        _log_event(
            logging.INFO,
            "start",
            request_id,
            endpoint="formation",
            evu=evu,
            operation_date=operation_date.isoformat(),
            train_number=train_number,
            stop_index=stop_index,
        )

        failure_stage = "fetch_formation"
        formation_client = _build_formation_client(settings)
        occupancy_client = _get_occupancy_client(settings)
        try:
            # Blocking provider I/O runs in a worker thread.
            visualization = await anyio.to_thread.run_sync(
                partial(
                    search_formation,
                    formation_client,
                    occupancy_client,
                    settings.occupancy_visualization,
                    evu=evu,
                    operation_date=operation_date,
                    train_number=train_number,
                    stop_index=stop_index,
                )
            )
        finally:
            formation_client.close()

        if visualization is None:
            raise ApiRequestError(
                status_code=404,
                error_code="NO_FORMATION",
                message="no stop of this train carries formation data",
                detail={"evu": evu, "train_number": train_number},
            )

        total_ms = _elapsed_ms(request_started)
        _log_event(
            logging.INFO,
            "done",
            request_id,
            endpoint="formation",
            outcome="ok",
            status_code=200,
            current_stop=visualization.current_stop,
            timing={"total_ms": total_ms},
        )
        return JSONResponse(
            status_code=200,
            headers={_REQUEST_ID_HEADER: request_id},
            content=visualization.model_dump(mode="json"),
        )
    except FormationApiError as exc:
        _log_event(
            logging.ERROR,
            "error",
            request_id,
            endpoint="formation",
            outcome="provider_error",
            error_code="FORMATION_API_ERROR",
            status_code=exc.status_code,
            failure_stage=failure_stage,
            timing={"total_ms": _elapsed_ms(request_started)},
        )
        return _error_response(
            status_code=exc.status_code,
            error_code="FORMATION_API_ERROR",
            message=exc.message,
            request_id=request_id,
            detail={"technical_details": exc.technical_details},
        )
    except ApiRequestError as exc:
        _log_event(
            logging.ERROR,
            "error",
            request_id,
            endpoint="formation",
            outcome="rejected",
            error_code=exc.error_code,
            status_code=exc.status_code,
            failure_stage=failure_stage,
            timing={"total_ms": _elapsed_ms(request_started)},
        )
        return _error_response(
            status_code=exc.status_code,
            error_code=exc.error_code,
            message=exc.message,
            request_id=request_id,
            detail=exc.detail,
        )


def _build_formation_client(settings: AppSettings) -> FormationClient:
    return FormationClient(
        api_url=settings.formation_api_url,
        api_key=api_key_from_env(),
        timeout_seconds=settings.request_timeout_seconds,
    )


def _build_occupancy_client(settings: AppSettings) -> OccupancyClient:
    return OccupancyClient(
        base_url=settings.occupancy_base_url,
        operator_mapping=settings.operator_mapping,
        cache_hours=settings.occupancy_cache_hours,
        max_forecast_days=settings.max_forecast_days,
        timeout_seconds=settings.request_timeout_seconds,
    )


def _get_occupancy_client(settings: AppSettings) -> OccupancyClient:
    """Return the process-wide occupancy client, rebuilt when its settings change."""

    global _occupancy_client_cache, _occupancy_client_key

    key = (
        settings.occupancy_base_url,
        tuple(sorted(settings.operator_mapping.items())),
        settings.occupancy_cache_hours,
        settings.max_forecast_days,
        settings.request_timeout_seconds,
    )
    with _occupancy_client_lock:
        if _occupancy_client_cache is None or _occupancy_client_key != key:
            _occupancy_client_cache = _build_occupancy_client(settings)
            _occupancy_client_key = key
        return _occupancy_client_cache


def _load_settings_with_api_error() -> AppSettings:
    try:
        return load_settings()
    except ValueError as exc:
        raise ApiRequestError(
            status_code=500,
            error_code="INVALID_SETTINGS",
            message=str(exc),
        ) from exc


def _request_id_from_request(request: Request) -> str:
    request_id = getattr(request.state, "request_id", None)
    if isinstance(request_id, str) and request_id:
        return request_id
    generated = uuid.uuid4().hex
    request.state.request_id = generated
    return generated


def _meta_enabled() -> bool:
    raw = os.getenv("FORMATION_ENABLE_META", "1").strip().lower()
    return raw not in {"0", "false", "off", "no"}


def _package_version() -> str:
    try:
        return importlib.metadata.version("train-formation")
    except importlib.metadata.PackageNotFoundError:
        return app.version


def _error_response(
    *,
    status_code: int,
    error_code: str,
    message: str,
    request_id: str,
    detail: dict[str, Any] | None = None,
) -> JSONResponse:
    payload_detail = dict(detail or {})
    payload_detail["request_id"] = request_id

    return JSONResponse(
        status_code=status_code,
        headers={_REQUEST_ID_HEADER: request_id},
        content={
            "error_code": error_code,
            "message": message,
            "detail": payload_detail,
        },
    )


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _dump_json(payload: dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=str)


def _log_event(level: int, event: str, request_id: str, **fields: Any) -> None:
    payload = {
        "event": event,
        "request_id": request_id,
        **fields,
    }
    logger.log(level, _dump_json(payload))
