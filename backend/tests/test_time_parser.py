import pytest

from app.core.exceptions import InvalidFormat, InvalidHour, InvalidMinutes, TimeParseError
from app.services.time_parser import TimeOfDay, from_minutes, parse_field, parse_time


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("9", "09:00:00"),
        ("09", "09:00:00"),
        ("930", "09:30:00"),
        ("1230", "12:30:00"),
        ("0830", "08:30:00"),
        ("1330", "13:30:00"),
        ("2p", "14:00:00"),
        ("1p", "13:00:00"),
        ("12p", "12:00:00"),
        ("12a", "00:00:00"),
        ("9a", "09:00:00"),
        ("930P", "21:30:00"),
        ("p930", "21:30:00"),
        ("1145am", "11:45:00"),
        ("12:30 pm", "12:30:00"),
        ("9:30", "09:30:00"),
        ("9.30", "09:30:00"),
        ("09:30:00", "09:30:00"),
        ("  7 ", "07:00:00"),
        ("0", "00:00:00"),
        ("2359", "23:59:00"),
    ],
)
def test_parse_time_shorthand(raw, expected):
    assert parse_time(raw).canonical == expected


def test_canonical_form_parses_back_to_same_value_for_whole_clock():
    for hour in range(24):
        for minute in range(60):
            value = TimeOfDay(hour, minute)
            assert parse_time(value.canonical) == value


@pytest.mark.parametrize("raw", ["99", "61", "24", "2400", "12345", "24:00"])
def test_hour_out_of_range_is_invalid_hour(raw):
    with pytest.raises(InvalidHour):
        parse_time(raw)


@pytest.mark.parametrize("raw", ["960", "1299", "9:75", "1260p"])
def test_minutes_out_of_range_is_invalid_minutes(raw):
    with pytest.raises(InvalidMinutes):
        parse_time(raw)


@pytest.mark.parametrize("raw", ["", "   ", None, "abc", "am", "9x", "9:", "9:30:00:00", "9ap", "9m", "123:45"])
def test_empty_or_non_numeric_is_invalid_format(raw):
    with pytest.raises(InvalidFormat):
        parse_time(raw)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("13p", TimeOfDay(13, 0)),
        ("25p", TimeOfDay(13, 0)),
        ("2500p", TimeOfDay(13, 0)),
        ("99a", TimeOfDay(3, 0)),
        ("2430a", TimeOfDay(0, 30)),
    ],
)
def test_marker_folds_hour_before_range_check(raw, expected):
    assert parse_time(raw) == expected


def test_parse_errors_carry_kind_and_raw_text():
    with pytest.raises(TimeParseError) as excinfo:
        parse_time("99")

    assert excinfo.value.details["kind"] == "InvalidHour"
    assert excinfo.value.details["raw"] == "99"
    assert excinfo.value.status_code == 422


def test_parse_field_tags_the_offending_field():
    with pytest.raises(InvalidMinutes) as excinfo:
        parse_field("975", "end_time")

    assert excinfo.value.details["field"] == "end_time"
    assert excinfo.value.details["kind"] == "InvalidMinutes"


def test_time_of_day_arithmetic():
    start = parse_time("1135")
    assert start.minutes == 11 * 60 + 35
    assert start.plus_minutes(40).canonical == "12:15:00"
    assert from_minutes(0) == TimeOfDay(0, 0)

    with pytest.raises(InvalidHour):
        parse_time("2350").plus_minutes(15)


def test_time_of_day_rejects_out_of_range_construction():
    with pytest.raises(InvalidHour):
        TimeOfDay(24, 0)
    with pytest.raises(InvalidMinutes):
        TimeOfDay(9, 60)
