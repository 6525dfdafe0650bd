"""Closed lookup tables for wagon attributes and wagon types."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from formation.parsing.models import WagonAttribute, WagonType

ATTRIBUTE_TABLE: Mapping[str, WagonAttribute] = MappingProxyType(
    {
        "BHP": WagonAttribute(code="BHP", label="Wheelchair Spaces", icon="wheelchair"),
        "BZ": WagonAttribute(code="BZ", label="Business Zone", icon="business"),
        "FZ": WagonAttribute(code="FZ", label="Family Zone", icon="family"),
        "KW": WagonAttribute(code="KW", label="Stroller Platform", icon="stroller"),
        "NF": WagonAttribute(code="NF", label="Low Floor Access", icon="accessible"),
        "VH": WagonAttribute(code="VH", label="Bike Hooks", icon="bicycle"),
        "VR": WagonAttribute(
            code="VR", label="Bike Hooks Reservation Required", icon="bicycle-reserved"
        ),
        "WL": WagonAttribute(code="WL", label="Sleeping compartments", icon="sleep"),
        "CC": WagonAttribute(code="CC", label="Couchette", icon="couchette"),
    }
)

# Injected from the wagon type code rather than an explicit ``#`` offer list.
FAMILY_ZONE_ATTRIBUTE = ATTRIBUTE_TABLE["FZ"]
SLEEPER_ATTRIBUTE = ATTRIBUTE_TABLE["WL"]
COUCHETTE_ATTRIBUTE = WagonAttribute(code="CC", label="Couchette Compartments", icon="couchette")
RESTAURANT_ATTRIBUTE = WagonAttribute(code="WR", label="Restaurant", icon="restaurant")

# Ordered: prefix and substring matching both walk this table front to back.
WAGON_TYPE_CODES: tuple[tuple[str, WagonType], ...] = (
    ("LK", "locomotive"),
    ("1", "first-class"),
    ("2", "second-class"),
    ("12", "first-and-second-class"),
    ("CC", "couchette"),
    ("FA", "second-class"),
    ("FZ", "second-class"),
    ("WL", "sleeper"),
    ("WR", "restaurant"),
    ("W1", "restaurant-first"),
    ("W2", "restaurant-second"),
    ("D", "baggage"),
    ("K", "classless"),
    ("X", "parked"),
)

WAGON_TYPE_LABELS: Mapping[WagonType, str] = MappingProxyType(
    {
        "locomotive": "Locomotive",
        "first-class": "1st Class Coach",
        "second-class": "2nd Class Coach",
        "first-and-second-class": "1st & 2nd Class Coach",
        "couchette": "Couchette Compartments",
        "sleeper": "Sleeping compartments",
        "restaurant": "2nd Class Coach",
        "restaurant-first": "1st Class Coach",
        "restaurant-second": "2nd Class Coach",
        "baggage": "Baggage Car",
        "classless": "Classless Coach",
        "parked": "Parked Vehicle",
        "wagon": "Coach",
    }
)

# Codes whose presence makes a free-text token a wagon candidate.
POTENTIAL_WAGON_CODES: tuple[str, ...] = (
    "1",
    "2",
    "12",
    "CC",
    "FA",
    "FZ",
    "WL",
    "WR",
    "W1",
    "W2",
    "LK",
    "D",
    "K",
    "X",
)


def resolve_attribute(code: str) -> WagonAttribute | None:
    """Return the attribute registered for ``code``; unknown codes resolve to None."""

    return ATTRIBUTE_TABLE.get(code.strip())


def resolve_attribute_list(offer_list: str) -> list[WagonAttribute]:
    """Resolve a ``;``-separated offer list, dropping unknown codes and duplicates."""

    resolved: list[WagonAttribute] = []
    seen: set[str] = set()
    for code in offer_list.split(";"):
        attribute = resolve_attribute(code)
        if attribute is None or attribute.code in seen:
            continue
        resolved.append(attribute)
        seen.add(attribute.code)
    return resolved


def type_label(wagon_type: WagonType) -> str:
    return WAGON_TYPE_LABELS.get(wagon_type, "Coach")
