"""Decoder for single vehicle tokens.

Every decision function here is total: an unresolved type falls back to ``wagon``,
and a missing number, class or attribute simply stays empty.
"""

from __future__ import annotations

import re

from formation.parsing.attributes import (
    COUCHETTE_ATTRIBUTE,
    FAMILY_ZONE_ATTRIBUTE,
    RESTAURANT_ATTRIBUTE,
    SLEEPER_ATTRIBUTE,
    WAGON_TYPE_CODES,
    resolve_attribute_list,
    type_label,
)
from formation.parsing.models import (
    STATUS_CLOSED,
    STATUS_GROUP_BOARDING,
    STATUS_RESERVED_FOR_TRANSIT,
    STATUS_UNSERVICED,
    TrainWagon,
    WagonAttribute,
    WagonClass,
    WagonStatus,
    WagonType,
)

_LEADING_STATUS_RE = re.compile(r"^[-=>%]+")
_OFFER_LIST_RE = re.compile(r"#([A-Z;]+)")
_ORDINAL_RES = (
    re.compile(r"[,:](\d{1,3})(?:[:#)\]]|$)"),
    re.compile(r"(\d{1,3}):(\d{1,3})"),
)
_CLASS_WITH_ORDINAL_RE = re.compile(r"^([12])(?::|\):|,:|@:)(\d+)")
_CLASS_END = r"(?:[:#,@)\]]|$)"
_CLASS_PATTERNS: dict[WagonClass, tuple[re.Pattern[str], ...]] = {
    "1": (
        re.compile(rf"^1{_CLASS_END}"),
        re.compile(rf"^12{_CLASS_END}"),
        re.compile(rf"[,@]1{_CLASS_END}"),
        re.compile(rf"\(1{_CLASS_END}"),
    ),
    "2": (
        re.compile(rf"^2{_CLASS_END}"),
        re.compile(rf"^12{_CLASS_END}"),
        re.compile(rf"[,@]2{_CLASS_END}"),
        re.compile(rf"\(2{_CLASS_END}"),
    ),
}
_TYPE_PREFIX_RES: tuple[tuple[re.Pattern[str], WagonType], ...] = tuple(
    (re.compile(rf"^{re.escape(code)}(?:[:#,]|$)"), wagon_type)
    for code, wagon_type in WAGON_TYPE_CODES
)
_RESTAURANT_CODES = ("WR", "W1", "W2")


def decode_vehicle_token(token: str, sector: str, position: int) -> TrainWagon | None:
    """Decode one vehicle token into a wagon; blank tokens yield None."""

    if not token or not token.strip():
        return None

    token = token.strip()
    status_codes = parse_wagon_status(token)
    with_parentheses = strip_status_sigils(token)
    clean = strip_status_sigils(_strip_parentheses(with_parentheses))

    wagon_type = determine_wagon_type(clean)
    return TrainWagon(
        position=position,
        number=extract_ordinal_number(clean) or "",
        type=wagon_type,
        type_label=type_label(wagon_type),
        classes=determine_wagon_classes(with_parentheses),
        attributes=parse_wagon_attributes(clean, status_codes),
        status_codes=status_codes,
        no_access_to_previous=with_parentheses.startswith("(") or token.startswith("("),
        no_access_to_next=with_parentheses.endswith(")") or token.endswith(")"),
        sector=sector,
    )


def parse_wagon_status(token: str) -> list[WagonStatus]:
    """Detect status sigils; ``Closed`` suppresses the other three."""

    if token.startswith("-") or "(-" in token or "@-" in token:
        return [STATUS_CLOSED]

    statuses: list[WagonStatus] = []
    if ">" in token:
        statuses.append(STATUS_GROUP_BOARDING)
    if "=" in token:
        statuses.append(STATUS_RESERVED_FOR_TRANSIT)
    if "%" in token:
        statuses.append(STATUS_UNSERVICED)
    return statuses


def strip_status_sigils(token: str) -> str:
    return _LEADING_STATUS_RE.sub("", token)


def determine_wagon_type(token: str) -> WagonType:
    """Match type codes by exact prefix first, then by containment, else ``wagon``."""

    for pattern, wagon_type in _TYPE_PREFIX_RES:
        if pattern.search(token):
            return wagon_type

    for code, wagon_type in WAGON_TYPE_CODES:
        if code in token:
            return wagon_type

    return "wagon"


def extract_ordinal_number(token: str) -> str | None:
    """Return the printed car number (``:N`` or the second half of ``N:M``)."""

    for pattern in _ORDINAL_RES:
        match = pattern.search(token)
        if match:
            return match.group(match.lastindex or 1)
    return None


def determine_wagon_classes(token: str) -> list[WagonClass]:
    """Return the service classes carried by a wagon, ascending."""

    if _is_family_car(token):
        return ["2"]

    clean = strip_status_sigils(_strip_parentheses(strip_status_sigils(token)))

    explicit = _CLASS_WITH_ORDINAL_RE.search(clean)
    if explicit:
        return [explicit.group(1)]  # type: ignore[list-item]

    type_part = _type_part(clean)
    if "WR" in type_part:
        return ["2"]
    if "W1" in type_part:
        return ["1"]
    if "W2" in type_part:
        return ["2"]

    return [
        wagon_class
        for wagon_class, patterns in _CLASS_PATTERNS.items()
        if any(pattern.search(clean) for pattern in patterns)
    ]


def parse_wagon_attributes(token: str, status_codes: list[WagonStatus]) -> list[WagonAttribute]:
    """Collect implicit (type-derived) and explicit (``#CODE;CODE``) attributes."""

    attributes: list[WagonAttribute] = []
    type_part = _type_part(token)
    if _is_family_car(token):
        attributes.append(FAMILY_ZONE_ATTRIBUTE)
    if "WL" in type_part:
        attributes.append(SLEEPER_ATTRIBUTE)
    if "CC" in type_part:
        attributes.append(COUCHETTE_ATTRIBUTE)
    if (
        any(code in type_part for code in _RESTAURANT_CODES)
        and STATUS_UNSERVICED not in status_codes
    ):
        attributes.append(RESTAURANT_ATTRIBUTE)

    offer_match = _OFFER_LIST_RE.search(token)
    if offer_match is None:
        return attributes

    seen = {attribute.code for attribute in attributes}
    for attribute in resolve_attribute_list(offer_match.group(1)):
        if attribute.code not in seen:
            attributes.append(attribute)
            seen.add(attribute.code)
    return attributes


def _type_part(token: str) -> str:
    # Offer codes after ``#`` (e.g. ``#FZ``) describe facilities, not the vehicle type.
    return token.split("#", 1)[0]


def _is_family_car(token: str) -> bool:
    type_part = _type_part(token)
    return "FA" in type_part or "FZ" in type_part


def _strip_parentheses(token: str) -> str:
    if token.startswith("("):
        token = token[1:]
    if token.endswith(")"):
        token = token[:-1]
    return token
