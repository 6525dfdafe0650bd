"""Helpers to locate a train's forecast inside an operator's daily dataset."""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import date, timedelta

from formation.occupancy.models import OperatorOccupancy, TrainOccupancy

_TRAIN_PREFIX_RE = re.compile(r"^[A-Za-z\s]+")


def normalize_train_number(train_number: str) -> str:
    """Drop a category prefix and leading zeros (``"IC 0712"`` -> ``"712"``)."""

    numeric_part = _TRAIN_PREFIX_RE.sub("", train_number.strip())
    try:
        return str(int(numeric_part))
    except ValueError:
        return train_number


def find_train_occupancy(data: OperatorOccupancy, train_number: str) -> TrainOccupancy | None:
    wanted = normalize_train_number(train_number)
    for train in data.trains:
        if normalize_train_number(train.train_number) == wanted:
            return train
    return None


def resolve_operator_id(operator: str, operator_mapping: Mapping[str, str]) -> str | None:
    """Map an operator code (``SBBP``, ``11``...) to the dataset's numeric id."""

    return operator_mapping.get(operator.strip())


def is_forecast_date(operation_date: date, *, today: date, max_forecast_days: int) -> bool:
    """Forecasts exist from today up to ``max_forecast_days`` ahead, inclusive."""

    return today <= operation_date <= today + timedelta(days=max_forecast_days)
