"""Cross-section stitching: global positions and passage flags for the whole train."""

from __future__ import annotations

from formation.parsing.models import TrainSection, TrainWagon

NO_PASSAGE_TO_PREVIOUS = "No passage to previous coach"
NO_PASSAGE_TO_NEXT = "No passage to next coach"


def stitch_sections(sections: list[TrainSection]) -> list[TrainSection]:
    """Finalize parsed sections in place and return the retained ones.

    Passes, in order:
    1. Drop empty sections, renumber every wagon by its index in train order and clear
       locomotive status codes.
    2. For each adjacent pair, a locomotive on either side clears both facing flags;
       otherwise a flag on either side is mirrored onto the other.
    3. Locomotives lose all passage flags; every flagged wagon without a message gets the
       default message, and unflagged wagons carry none.
    """

    retained = [section for section in sections if section.wagons]
    wagons = [wagon for section in retained for wagon in section.wagons]

    for index, wagon in enumerate(wagons):
        wagon.position = index
        if wagon.is_locomotive:
            wagon.status_codes = []

    for previous, current in zip(wagons, wagons[1:]):
        _link_pair(previous, current)

    for wagon in wagons:
        _apply_message(wagon)

    return retained


def _link_pair(previous: TrainWagon, current: TrainWagon) -> None:
    if previous.is_locomotive or current.is_locomotive:
        previous.no_access_to_next = False
        current.no_access_to_previous = False
        return

    if previous.no_access_to_next or current.no_access_to_previous:
        previous.no_access_to_next = True
        current.no_access_to_previous = True


def _apply_message(wagon: TrainWagon) -> None:
    if wagon.is_locomotive:
        wagon.no_access_to_previous = False
        wagon.no_access_to_next = False
        wagon.no_access_message = None
        return

    if not (wagon.no_access_to_previous or wagon.no_access_to_next):
        wagon.no_access_message = None
        return

    if wagon.no_access_message is None:
        wagon.no_access_message = (
            NO_PASSAGE_TO_NEXT if wagon.no_access_to_next else NO_PASSAGE_TO_PREVIOUS
        )
