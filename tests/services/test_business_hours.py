from datetime import datetime
from zoneinfo import ZoneInfo
from pos_aggregator.models.clover_schemas import CloverOpeningHours
from pos_aggregator.models.shop_models import BusinessHoursInfo, BusinessHoursPeriod
from pos_aggregator.models.square_schemas import SquareBusinessHoursPeriod
from pos_aggregator.services.business_hours import (
    build_clover_hours,
    build_square_hours,
    closing_time,
    day_code,
    format_display_time,
    is_open_at,
    is_time_in_period,
    local_now,
    minutes_to_time,
    normalize_time,
    opening_time,
)

# 2024-06-05 is a Wednesday
WEDNESDAY_NOON = datetime(2024, 6, 5, 12, 0)


def period(start, end):
    return BusinessHoursPeriod(start_time=start, end_time=end)


def test_normalize_time():
    assert normalize_time("07:00:00") == "07:00"
    assert normalize_time("7:5") == "07:05"
    assert normalize_time("25:00") is None
    assert normalize_time("noon") is None
    assert normalize_time(None) is None


def test_minutes_to_time_clamps_end_of_day():
    assert minutes_to_time(0) == "00:00"
    assert minutes_to_time(450) == "07:30"
    assert minutes_to_time(1440) == "23:59"


def test_day_code():
    assert day_code(WEDNESDAY_NOON) == "WED"
    assert day_code(datetime(2024, 6, 9)) == "SUN"


def test_period_boundaries_are_inclusive():
    p = period("07:00", "15:00")
    assert is_time_in_period("07:00", p)
    assert is_time_in_period("15:00", p)
    assert not is_time_in_period("15:01", p)


def test_midnight_spanning_period():
    p = period("22:00", "02:00")
    assert p.spans_midnight
    assert is_time_in_period("23:30", p)
    assert is_time_in_period("01:00", p)
    assert not is_time_in_period("12:00", p)


def test_is_open_at_uses_today_only():
    info = BusinessHoursInfo(weekly_hours={"WED": [period("07:00", "15:00")]})
    assert is_open_at(info, WEDNESDAY_NOON)
    assert not is_open_at(info, datetime(2024, 6, 6, 12, 0))


def test_closing_time_compares_numerically():
    info = BusinessHoursInfo(
        weekly_hours={"WED": [period("07:00", "11:00"), period("17:00", "01:00"), period("12:00", "16:00")]}
    )
    assert closing_time(info, WEDNESDAY_NOON) == "01:00"
    assert opening_time(info, WEDNESDAY_NOON) == "07:00"


def test_closing_time_closed_today():
    info = BusinessHoursInfo(weekly_hours={"MON": [period("07:00", "15:00")]})
    assert closing_time(info, WEDNESDAY_NOON) is None
    assert opening_time(info, WEDNESDAY_NOON) is None


def test_build_square_hours():
    periods = [
        SquareBusinessHoursPeriod(day_of_week="WED", start_local_time="13:00:00", end_local_time="18:00:00"),
        SquareBusinessHoursPeriod(day_of_week="WED", start_local_time="07:00:00", end_local_time="11:00:00"),
        SquareBusinessHoursPeriod(day_of_week="THU", start_local_time="bad", end_local_time="18:00:00"),
    ]

    info = build_square_hours(periods, WEDNESDAY_NOON)

    assert list(info.weekly_hours) == ["WED"]
    assert [p.start_time for p in info.weekly_hours["WED"]] == ["07:00", "13:00"]
    # Between the two windows
    assert info.is_currently_open is False


def test_build_square_hours_empty():
    assert build_square_hours([], WEDNESDAY_NOON) is None


def test_build_clover_hours_merges_entries():
    entries = [
        CloverOpeningHours.model_validate({"wednesday": {"elements": [{"start": 420, "end": 900}]}}),
        CloverOpeningHours.model_validate({"wednesday": {"elements": [{"start": 1020, "end": 1440}]},
                                           "sunday": {"elements": []}}),
    ]

    info = build_clover_hours(entries, WEDNESDAY_NOON)

    assert info.weekly_hours == {"WED": [period("07:00", "15:00"), period("17:00", "23:59")]}
    assert info.is_currently_open is True


def test_build_clover_hours_empty():
    assert build_clover_hours([CloverOpeningHours()], WEDNESDAY_NOON) is None


def test_local_now_unknown_timezone_falls_back(mock_settings):
    now = datetime(2024, 6, 5, 12, 0, tzinfo=ZoneInfo("UTC"))
    assert local_now("Not/AZone", now).utcoffset().total_seconds() == 0
    assert local_now("America/Chicago", now).hour == 7


def test_format_display_time():
    assert format_display_time("00:15") == "12:15 AM"
    assert format_display_time("13:30") == "1:30 PM"
    assert format_display_time("12:00") == "12:00 PM"
