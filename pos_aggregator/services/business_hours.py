"""
Business Hours Evaluator: vendor schedules -> BusinessHoursInfo, and
open/closed checks against a local wall-clock time.

All times are ``HH:MM`` strings in the shop's local time. A period whose
start is later than its end spans midnight.
"""
from datetime import datetime
from typing import Dict, Iterable, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from pos_aggregator.models.clover_schemas import CloverDayHours, CloverOpeningHours
from pos_aggregator.models.shop_models import DAY_CODES, BusinessHoursInfo, BusinessHoursPeriod
from pos_aggregator.models.square_schemas import SquareBusinessHoursPeriod
from pos_aggregator.utils.config import settings
import logging

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60

CLOVER_DAY_FIELDS = {
    "SUN": "sunday",
    "MON": "monday",
    "TUE": "tuesday",
    "WED": "wednesday",
    "THU": "thursday",
    "FRI": "friday",
    "SAT": "saturday",
}


def normalize_time(value: Optional[str]) -> Optional[str]:
    """Reduce ``HH:MM[:SS]`` to ``HH:MM``. Returns None for unparseable input."""
    if not value:
        return None
    parts = value.strip().split(":")
    if len(parts) < 2:
        return None
    try:
        hours, minutes = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    if not (0 <= hours < 24 and 0 <= minutes < 60):
        return None
    return f"{hours:02d}:{minutes:02d}"


def minutes_to_time(minutes: int) -> str:
    """Minutes since midnight -> ``HH:MM``. End-of-day values clamp to 23:59."""
    minutes = max(0, min(minutes, MINUTES_PER_DAY - 1))
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def time_to_minutes(value: str) -> int:
    hours, minutes = value.split(":")[:2]
    return int(hours) * 60 + int(minutes)


def day_code(now: datetime) -> str:
    # datetime.weekday() is Monday=0; codes start at Sunday
    return DAY_CODES[(now.weekday() + 1) % 7]


def local_now(tz_name: Optional[str] = None, now: Optional[datetime] = None) -> datetime:
    """Current time in ``tz_name`` (or the default shop timezone)."""
    try:
        tz = ZoneInfo(tz_name or settings.DEFAULT_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone {tz_name!r}, using {settings.DEFAULT_TIMEZONE}")
        tz = ZoneInfo(settings.DEFAULT_TIMEZONE)
    if now is None:
        return datetime.now(tz)
    if now.tzinfo is None:
        return now.replace(tzinfo=tz)
    return now.astimezone(tz)


def is_time_in_period(current: str, period: BusinessHoursPeriod) -> bool:
    """Closed-interval check; midnight-spanning periods match either side of midnight."""
    if period.spans_midnight:
        return current >= period.start_time or current <= period.end_time
    return period.start_time <= current <= period.end_time


def is_open_at(info: BusinessHoursInfo, now: datetime) -> bool:
    current = now.strftime("%H:%M")
    return any(is_time_in_period(current, p) for p in info.periods_for(day_code(now)))


def closing_time(info: BusinessHoursInfo, now: datetime) -> Optional[str]:
    """Latest end time among today's periods, or None when closed all day.

    Compared numerically; an end that falls after midnight ranks as the
    following day so it beats any same-day end.
    """
    periods = info.periods_for(day_code(now))
    if not periods:
        return None

    def rank(period: BusinessHoursPeriod) -> int:
        end = time_to_minutes(period.end_time)
        return end + MINUTES_PER_DAY if period.spans_midnight else end

    return max(periods, key=rank).end_time


def opening_time(info: BusinessHoursInfo, now: datetime) -> Optional[str]:
    periods = info.periods_for(day_code(now))
    if not periods:
        return None
    return min(periods, key=lambda p: time_to_minutes(p.start_time)).start_time


def _sorted_weekly(weekly: Dict[str, List[BusinessHoursPeriod]]) -> Dict[str, List[BusinessHoursPeriod]]:
    return {
        code: sorted(weekly[code], key=lambda p: time_to_minutes(p.start_time))
        for code in DAY_CODES
        if weekly.get(code)
    }


def build_square_hours(
    periods: Iterable[SquareBusinessHoursPeriod],
    now: datetime,
) -> Optional[BusinessHoursInfo]:
    """Square ``business_hours.periods`` -> BusinessHoursInfo. None when empty."""
    weekly: Dict[str, List[BusinessHoursPeriod]] = {}
    for period in periods:
        code = (period.day_of_week or "").upper()[:3]
        start = normalize_time(period.start_local_time)
        end = normalize_time(period.end_local_time)
        if code not in DAY_CODES or start is None or end is None:
            logger.debug(f"Skipping unusable Square period: {period}")
            continue
        weekly.setdefault(code, []).append(BusinessHoursPeriod(start_time=start, end_time=end))

    if not weekly:
        return None
    info = BusinessHoursInfo(weekly_hours=_sorted_weekly(weekly))
    return info.model_copy(update={"is_currently_open": is_open_at(info, now)})


def _clover_day_periods(day: Optional[CloverDayHours]) -> List[BusinessHoursPeriod]:
    if day is None:
        return []
    return [
        BusinessHoursPeriod(start_time=minutes_to_time(slot.start), end_time=minutes_to_time(slot.end))
        for slot in day.elements or []
    ]


def build_clover_hours(
    opening_hours: Iterable[CloverOpeningHours],
    now: datetime,
) -> Optional[BusinessHoursInfo]:
    """Clover ``opening_hours`` entries -> BusinessHoursInfo. None when empty.

    Slots are minutes since midnight. Multiple entries are merged per day.
    """
    weekly: Dict[str, List[BusinessHoursPeriod]] = {}
    for entry in opening_hours:
        for code, field in CLOVER_DAY_FIELDS.items():
            periods = _clover_day_periods(getattr(entry, field))
            if periods:
                weekly.setdefault(code, []).extend(periods)

    if not weekly:
        return None
    info = BusinessHoursInfo(weekly_hours=_sorted_weekly(weekly))
    return info.model_copy(update={"is_currently_open": is_open_at(info, now)})


def format_display_time(value: str) -> str:
    """``13:30`` -> ``1:30 PM``."""
    minutes = time_to_minutes(value)
    hours, mins = divmod(minutes, 60)
    suffix = "AM" if hours < 12 else "PM"
    return f"{hours % 12 or 12}:{mins:02d} {suffix}"
