# rollcall/core/clock.py
import re
from datetime import date, datetime
from typing import Iterable, List, Union
from zoneinfo import ZoneInfo

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
_BY_LOWER = {name.lower(): name for name in WEEKDAYS}


def weekday_name(day: date) -> str:
    # Independent of the process locale, unlike strftime("%A")
    return WEEKDAYS[day.weekday()]


def parse_weekdays(value: Union[str, Iterable[str], None]) -> List[str]:
    """Canonical weekday names from a list or a "Monday;Friday" string.

    Raises ValueError naming the first entry that is not a weekday.
    """
    if value is None:
        return []
    if isinstance(value, str):
        value = re.split(r"[;,]", value)

    days = []
    for raw in value:
        name = (raw or "").strip()
        if not name:
            continue
        canonical = _BY_LOWER.get(name.lower())
        if canonical is None:
            raise ValueError(f"Unknown weekday '{name}'")
        if canonical not in days:
            days.append(canonical)
    return days


class Clock:
    """Decides what "today" is, in the configured time zone."""

    def __init__(self, tz_name: str = "UTC"):
        self.tz = ZoneInfo(tz_name)

    def now(self) -> datetime:
        """Naive local wall time, the form timestamps are stored in."""
        return datetime.now(self.tz).replace(tzinfo=None)

    def today(self) -> date:
        return self.now().date()

    def weekday(self) -> str:
        return weekday_name(self.today())


class FixedClock(Clock):
    """Clock pinned to one instant; used by tests and replay tooling."""

    def __init__(self, instant: datetime):
        super().__init__("UTC")
        self.instant = instant

    def now(self) -> datetime:
        return self.instant

    def advance_to(self, instant: datetime) -> None:
        self.instant = instant
