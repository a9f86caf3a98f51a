"""
Deterministic synthetic values for occupancy and utilization gaps.

Reports fall back to these values when a real figure is exactly zero (or,
for utilization, when the day lies in the future). Every value is derived
from a 32-bit rolling string hash of ``<label>-<YYYY-MM-DD>``, so the same
inputs produce the same output in every process and on every run.
"""

import enum
import struct
from dataclasses import dataclass
from datetime import date, datetime

INT32_MAX = 2**31 - 1

OCCUPANCY_BOUNDS = (10.0, 85.0)
UTILIZATION_LABEL = "utilization"


def to_int32(value: int) -> int:
    """Wrap an integer to the signed 32-bit range."""
    value &= 0xFFFFFFFF
    if value & 0x80000000:
        return value - 0x100000000
    return value


def _utf16_code_units(text: str) -> tuple[int, ...]:
    data = text.encode("utf-16-le", "surrogatepass")
    return struct.unpack(f"<{len(data) // 2}H", data)


def string_hash(text: str) -> int:
    """
    Rolling polynomial hash ``h = h * 31 + unit`` over UTF-16 code units.

    The accumulator is wrapped to a signed 32-bit integer after every step.
    """
    h = 0
    for unit in _utf16_code_units(text):
        h = to_int32(h * 31 + unit)
    return h


def seed_for(label: str, day: date) -> str:
    return f"{label}-{day.isoformat()}"


def normalized_hash(seed: str) -> float:
    """Map a seed to [0, 1]; ``|-2**31|`` is clamped to 1."""
    return min(1.0, abs(string_hash(seed)) / INT32_MAX)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


@dataclass(frozen=True)
class SyntheticContext:
    """Calendar biases applied on top of the hash-derived jitter."""

    now: datetime
    weekday_base: float
    weekend_base: float
    future_weekday_base: float
    future_weekend_base: float
    month_weight: float = 15.0
    jitter: float = 10.0
    proximity_days: int = 30
    proximity_boost: float = 10.0

    def base_for(self, day: date) -> float:
        weekend = day.weekday() >= 5
        if day > self.now.date():
            return self.future_weekend_base if weekend else self.future_weekday_base
        return self.weekend_base if weekend else self.weekday_base

    def proximity_for(self, day: date) -> float:
        """Extra bias for future days, largest for the nearest ones."""
        days_ahead = (day - self.now.date()).days
        if days_ahead <= 0 or days_ahead > self.proximity_days:
            return 0.0
        return self.proximity_boost * (1 - days_ahead / self.proximity_days)


def synthetic_value(
    label: str,
    day: date,
    low: float,
    high: float,
    context: SyntheticContext | None = None,
) -> float:
    """
    Reproducible value in ``[low, high]`` for a label and a day.

    Without a context the normalized hash is mapped linearly into the
    bounds. With a context the value is a calendar-biased base plus jitter,
    clamped to the bounds.
    """
    n = normalized_hash(seed_for(label, day))
    if context is None:
        return low + n * (high - low)

    value = (
        context.base_for(day)
        + day.day / 31 * context.month_weight
        + n * context.jitter
        - context.jitter / 2
        + context.proximity_for(day)
    )
    return clamp(value, low, high)


def occupancy_or_synthetic(real: float, event_name: str, event_day: date) -> float:
    """Return the real occupancy, or a synthetic one in [10, 85] when it is exactly 0."""
    if real != 0:
        return real
    low, high = OCCUPANCY_BOUNDS
    return synthetic_value(event_name, event_day, low, high)


class UtilizationVariant(enum.Enum):
    """Bounds and biases for utilization backfill."""

    # Persisted records read back on the utilization endpoint
    RECORDED = (30.0, 79.0, 40.0, 60.0, 50.0, 65.0)
    # Value-only records for days that have no schedules at all
    FORECAST = (20.0, 75.0, 30.0, 50.0, 45.0, 60.0)

    @property
    def bounds(self) -> tuple[float, float]:
        return self.value[0], self.value[1]

    def context(self, now: datetime) -> SyntheticContext:
        _, _, weekday, weekend, future_weekday, future_weekend = self.value
        return SyntheticContext(
            now=now,
            weekday_base=weekday,
            weekend_base=weekend,
            future_weekday_base=future_weekday,
            future_weekend_base=future_weekend,
        )


def needs_utilization_backfill(real: float, day: date, now: datetime) -> bool:
    return real == 0 or day > now.date()


def synthetic_utilization(
    day: date,
    now: datetime,
    variant: UtilizationVariant = UtilizationVariant.RECORDED,
) -> float:
    low, high = variant.bounds
    return synthetic_value(UTILIZATION_LABEL, day, low, high, variant.context(now))


def utilization_or_synthetic(
    real: float,
    day: date,
    now: datetime,
    variant: UtilizationVariant = UtilizationVariant.RECORDED,
) -> tuple[float, bool]:
    """
    Return ``(value, synthesized)`` for a utilization percentage.

    The real value is kept unless it is exactly 0 or the day is after today.
    """
    if not needs_utilization_backfill(real, day, now):
        return real, False
    return synthetic_utilization(day, now, variant), True
