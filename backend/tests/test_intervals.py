from datetime import date

import pytest

from app.core.exceptions import InvalidInterval, SlotConflict
from app.services.intervals import find_conflict, overlaps, validate_against_day, validate_sequence
from app.services.slots import BreakContent, Interval, PeriodContent, SlotScope, TimeSlot
from app.services.time_parser import parse_time

DAY = date(2026, 10, 19)


def span(start: str, end: str) -> Interval:
    return Interval(parse_time(start), parse_time(end))


def slot(slot_id: str, number: int, start: str, end: str, *, is_break: bool = False) -> TimeSlot:
    return TimeSlot(
        id=slot_id,
        scope=SlotScope("SCH1", "class-7a", DAY, number),
        interval=span(start, end),
        content=BreakContent("Break") if is_break else PeriodContent("math", "t-1"),
    )


def test_touching_intervals_do_not_overlap():
    assert not overlaps(span("0900", "0940"), span("0940", "1020"))
    assert not overlaps(span("0940", "1020"), span("0900", "0940"))


@pytest.mark.parametrize(
    ("first", "second", "expected"),
    [
        (("0900", "1000"), ("0930", "1030"), True),
        (("0900", "1000"), ("0915", "0945"), True),
        (("0900", "1000"), ("0900", "1000"), True),
        (("0900", "1000"), ("1000", "1100"), False),
        (("0900", "1000"), ("1100", "1200"), False),
        (("0800", "1200"), ("0900", "0910"), True),
    ],
)
def test_overlap_is_symmetric(first, second, expected):
    a = span(*first)
    b = span(*second)
    assert overlaps(a, b) is expected
    assert overlaps(b, a) is expected


def test_validate_against_day_rejects_non_positive_interval_before_overlap_check():
    day = [slot("s1", 1, "0900", "0940")]

    with pytest.raises(InvalidInterval):
        validate_against_day(span("0920", "0920"), day)
    with pytest.raises(InvalidInterval) as excinfo:
        validate_against_day(span("1000", "0930"), [])

    assert excinfo.value.details == {"kind": "InvalidInterval", "start": "10:00:00", "end": "09:30:00"}


def test_validate_against_day_reports_first_conflicting_slot():
    day = [
        slot("s1", 1, "0900", "0940"),
        slot("s2", 2, "0940", "1020"),
        slot("s3", 3, "1020", "1100"),
    ]

    with pytest.raises(SlotConflict) as excinfo:
        validate_against_day(span("1000", "1030"), day)

    details = excinfo.value.details
    assert excinfo.value.status_code == 409
    assert details["kind"] == "Conflict"
    assert details["conflicting_slot_id"] == "s2"
    assert details["period_number"] == 2


def test_back_to_back_slot_is_accepted():
    day = [slot("s1", 1, "0900", "0940")]
    validate_against_day(span("0940", "1020"), day)


def test_editing_a_slot_does_not_conflict_with_itself():
    day = [slot("s1", 1, "0900", "0940"), slot("s2", 2, "0940", "1020")]

    validate_against_day(span("0900", "0940"), day, exclude_id="s1")

    with pytest.raises(SlotConflict):
        validate_against_day(span("0900", "0950"), day, exclude_id="s1")


def test_excluded_period_numbers_are_skipped():
    day = [slot("s1", 1, "0900", "0940"), slot("b1", 2, "0940", "0955", is_break=True)]

    assert find_conflict(span("0930", "1000"), day, exclude_periods=[1, 2]) is None
    assert find_conflict(span("0930", "1000"), day, exclude_periods=[1]).id == "b1"


def test_validate_sequence_catches_overlap_inside_new_slots():
    validate_sequence([slot(None, 1, "0900", "0940"), slot(None, 2, "0940", "1020")])

    with pytest.raises(SlotConflict):
        validate_sequence([slot(None, 1, "0900", "0940"), slot(None, 2, "0930", "1020")])
