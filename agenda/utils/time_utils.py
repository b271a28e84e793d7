# agenda/utils/time_utils.py
"""
Time helpers for the scheduling core.

Time-of-day values travel as "HH:MM" strings in documents and as integer
minute-of-day (0-1439) inside the engine. Bookings and blocks carry absolute
epoch milliseconds that are projected onto a business's local calendar day.
"""
import re
import time as time_module
from datetime import date, datetime, time, timedelta
from typing import Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from agenda.core.exceptions import ValidationError

MINUTES_PER_DAY = 24 * 60
MS_PER_MINUTE = 60_000

_HHMM_RE = re.compile(r"^(\d{2}):(\d{2})$")


def parse_hhmm(value: str) -> int:
    """Convert "HH:MM" to minute-of-day, rejecting anything outside 00:00-23:59"""
    match = _HHMM_RE.match(str(value or "").strip())
    if not match:
        raise ValidationError(f"Invalid time of day: {value!r}", {"value": value})
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValidationError(f"Invalid time of day: {value!r}", {"value": value})
    return hours * 60 + minutes


def format_minutes(minute_of_day: int) -> str:
    return f"{minute_of_day // 60:02d}:{minute_of_day % 60:02d}"


def parse_date(value) -> date:
    """Accept a date or a YYYY-MM-DD string"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise ValidationError(f"Invalid calendar date: {value!r}", {"value": value})


def day_of_week(day: date) -> int:
    """0=Sunday ... 6=Saturday"""
    return (day.weekday() + 1) % 7


def get_zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"Unknown timezone: {name!r}", {"timezone": name})


def local_midnight(day: date, tz: ZoneInfo) -> datetime:
    return datetime.combine(day, time(0, 0), tzinfo=tz)


def to_epoch_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def day_bounds_ms(day: date, tz: ZoneInfo) -> Tuple[int, int]:
    """[start, end) of the local calendar day in epoch milliseconds"""
    start = local_midnight(day, tz)
    end = local_midnight(day + timedelta(days=1), tz)
    return to_epoch_ms(start), to_epoch_ms(end)


def minute_to_epoch_ms(day: date, minute_of_day: int, tz: ZoneInfo) -> int:
    moment = datetime.combine(day, time(minute_of_day // 60, minute_of_day % 60), tzinfo=tz)
    return to_epoch_ms(moment)


def epoch_ms_to_day_offset(epoch_ms: int, day: date, tz: ZoneInfo, round_up: bool = False) -> int:
    """
    Minutes between local midnight of `day` and `epoch_ms`.

    Can be negative or exceed a day for intervals that cross midnight.
    Starts are floored and ends ceiled so a partial minute still counts as busy.
    """
    delta_ms = epoch_ms - to_epoch_ms(local_midnight(day, tz))
    if round_up:
        return -(-delta_ms // MS_PER_MINUTE)
    return delta_ms // MS_PER_MINUTE


def epoch_ms_to_local_date(epoch_ms: int, tz: ZoneInfo) -> date:
    return datetime.fromtimestamp(epoch_ms / 1000, tz=tz).date()


def now_ms() -> int:
    return int(time_module.time() * 1000)
