"""Resolution of optional ``from``/``to`` query inputs into concrete date windows."""

import calendar
import enum
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterator

from eventdesk.clock import Clock
from eventdesk.config import get_settings
from eventdesk.errors import InvalidDateError, ValidationError

settings = get_settings()

WINDOW_DAYS = 30


class RangePolicy(str, enum.Enum):
    """Default window applied when ``from``/``to`` are omitted."""

    ALL_TIME = "all_time"
    LAST_30_DAYS = "last_30_days"
    NEXT_30_DAYS = "next_30_days"
    MONTH_TO_DATE = "month_to_date"


@dataclass(frozen=True)
class TimeRange:
    """Inclusive window from the start of one day to the end of another."""

    start: datetime
    end: datetime

    @property
    def start_date(self) -> date:
        return self.start.date()

    @property
    def end_date(self) -> date:
        return self.end.date()

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end

    def includes_future(self, now: datetime) -> bool:
        """True when the window reaches past the end of today."""
        return self.end > end_of_day(now.date())

    def days(self) -> Iterator[date]:
        """Iterate over every calendar day in the window."""
        current = self.start_date
        while current <= self.end_date:
            yield current
            current += timedelta(days=1)


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, time.max)


def parse_date(value: str) -> date:
    """
    Parse a ``YYYY-MM-DD`` or ISO-8601 datetime string to a calendar day.

    Raises:
        InvalidDateError: If the value is not a valid date.
    """
    text = value.strip()
    if not text:
        raise InvalidDateError(value)
    try:
        if len(text) == 10:
            return date.fromisoformat(text)
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        raise InvalidDateError(value)


def day_range(day: date) -> TimeRange:
    """Window covering a single day."""
    return TimeRange(start_of_day(day), end_of_day(day))


def week_range(day: date) -> TimeRange:
    """Monday-to-Sunday window containing ``day``."""
    monday = day - timedelta(days=day.weekday())
    return TimeRange(start_of_day(monday), end_of_day(monday + timedelta(days=6)))


def month_range(day: date) -> TimeRange:
    """Window covering the calendar month containing ``day``."""
    last_day = calendar.monthrange(day.year, day.month)[1]
    return TimeRange(
        start_of_day(day.replace(day=1)),
        end_of_day(day.replace(day=last_day)),
    )


def days_in_month(day: date) -> int:
    return calendar.monthrange(day.year, day.month)[1]


def _default_bounds(
    policy: RangePolicy,
    today: date,
    has_from: bool,
    has_to: bool,
) -> tuple[date, date]:
    if policy is RangePolicy.ALL_TIME:
        return date(settings.ALL_TIME_FLOOR_YEAR, 1, 1), today

    if policy is RangePolicy.MONTH_TO_DATE:
        return today.replace(day=1), today

    # 30 day windows only shift when neither side was supplied
    if has_from or has_to:
        return today, today
    if policy is RangePolicy.LAST_30_DAYS:
        return today - timedelta(days=WINDOW_DAYS), today
    return today, today + timedelta(days=WINDOW_DAYS)


def resolve(
    from_: str | None,
    to: str | None,
    policy: RangePolicy,
    clock: Clock,
) -> TimeRange:
    """
    Resolve optional query inputs into a concrete window.

    Args:
        from_: Optional start date string
        to: Optional end date string
        policy: Defaults applied to missing inputs
        clock: Source of "today"

    Returns:
        Window from 00:00:00 of the start day to 23:59:59.999999 of the end day.

    Raises:
        InvalidDateError: If either input cannot be parsed
        ValidationError: If the start falls after the end
    """
    from_ = from_ or None
    to = to or None

    default_start, default_end = _default_bounds(
        policy, clock.today(), from_ is not None, to is not None
    )
    start = parse_date(from_) if from_ is not None else default_start
    end = parse_date(to) if to is not None else default_end

    if start > end:
        raise ValidationError(
            f"Start date {start.isoformat()} is after end date {end.isoformat()}"
        )

    return TimeRange(start_of_day(start), end_of_day(end))
