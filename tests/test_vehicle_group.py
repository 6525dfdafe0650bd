from __future__ import annotations

from formation.parsing.groups import parse_vehicle_group


def test_group_assigns_consecutive_positions() -> None:
    result = parse_vehicle_group("LK,1:12,2:34", "", 4)

    assert [wagon.position for wagon in result.wagons] == [4, 5, 6]
    assert result.next_position == 7
    assert [wagon.type for wagon in result.wagons] == [
        "locomotive",
        "first-class",
        "second-class",
    ]


def test_group_attributes_go_to_last_wagon_only() -> None:
    result = parse_vehicle_group("(1:10,2:20)#BHP;VH", "A", 0)

    first, last = result.wagons
    assert first.attributes == []
    assert [attribute.code for attribute in last.attributes] == ["BHP", "VH"]


def test_group_attributes_skip_trailing_fictitious_wagon() -> None:
    result = parse_vehicle_group("(1:10,F)#VH", "A", 0)

    real, fictitious = result.wagons
    assert [attribute.code for attribute in real.attributes] == ["VH"]
    assert fictitious.attributes == []


def test_group_parenthesized_content_closes_both_ends() -> None:
    result = parse_vehicle_group("(1:10,2:20)", "", 0)

    first, last = result.wagons
    assert first.no_access_to_previous
    assert not first.no_access_to_next
    assert not last.no_access_to_previous
    assert last.no_access_to_next


def test_group_closing_paren_with_suffix_still_closes_next() -> None:
    result = parse_vehicle_group("1:10,(2:20):5#NF", "", 0)

    first, last = result.wagons
    assert not first.no_access_to_previous
    assert last.no_access_to_next


def test_group_inline_sector_switches_following_wagons() -> None:
    result = parse_vehicle_group("1:10,@B,2:20", "A", 0)

    assert [wagon.sector for wagon in result.wagons] == ["A", "B"]


def test_group_skips_unknown_tokens() -> None:
    result = parse_vehicle_group("abc,1:3", "", 0)

    assert len(result.wagons) == 1
    assert result.wagons[0].number == "3"


def test_empty_group_keeps_start_position() -> None:
    result = parse_vehicle_group("", "A", 3)

    assert result.wagons == []
    assert result.next_position == 3
