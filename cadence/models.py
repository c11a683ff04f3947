"""
Fixed-field records shared by every component.

Records are frozen dataclasses: a computation never mutates its inputs and
always returns new instances. Bounded fields are clamped on construction so
the [0, 100] invariants hold no matter which component built the record.
"""

import math
from dataclasses import dataclass
from datetime import date
from enum import Enum


class ValidationError(ValueError):
    """Malformed assessment input. Raised before any partial result is built."""


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Round halves toward +inf: floor(x + 0.5)."""
    return int(math.floor(value + 0.5))


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class CapacityState(Enum):
    """Daily-disposition labels of the 10-question assessment, with ordinal weights."""

    MAXIMIZED = 4
    RESERVED = 3
    INDULGENT = 2
    FATIGUED = 1

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def parse(cls, raw) -> "CapacityState":
        """Accept a member or its label ("Maximized", "reserved", ...)."""
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, str):
            try:
                return cls[raw.strip().upper()]
            except KeyError:
                pass
        raise ValidationError(f"Invalid capacity state: {raw!r}")


class Trend(str, Enum):
    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


class Impact(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


# ---------------------------------------------------------------------------
# Scores
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EPCScores:
    """Energy / Purpose / Connection, each an integer in [0, 100]."""

    energy: int
    purpose: int
    connection: int

    def __post_init__(self):
        for name in ("energy", "purpose", "connection"):
            object.__setattr__(self, name, round_half_up(clamp(getattr(self, name))))

    def as_dict(self) -> dict:
        return {"energy": self.energy, "purpose": self.purpose, "connection": self.connection}


# Symmetric cap on each score delta
ADJUSTMENT_CAPS = {
    "energy_adjustment": 20,
    "purpose_adjustment": 15,
    "connection_adjustment": 15,
}


@dataclass(frozen=True)
class BiometricAdjustment:
    """Signed score deltas, capped at ±20 / ±15 / ±15."""

    energy_adjustment: int = 0
    purpose_adjustment: int = 0
    connection_adjustment: int = 0

    def __post_init__(self):
        for name, cap in ADJUSTMENT_CAPS.items():
            value = round_half_up(clamp(getattr(self, name), -cap, cap))
            object.__setattr__(self, name, value)


# ---------------------------------------------------------------------------
# Forecast
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ForecastConfidence:
    score: int
    data_quality: str
    days_available: int
    variance: float
    standard_deviation: float


@dataclass(frozen=True)
class ForecastResult:
    forecast: list
    trend: Trend
    confidence: ForecastConfidence


@dataclass(frozen=True)
class ForecastDay:
    """One projected day with its 90% band; uncertainty is the band width."""

    offset: int
    target_date: date
    value: float
    high: float
    low: float

    @property
    def uncertainty(self) -> float:
        return self.high - self.low


# ---------------------------------------------------------------------------
# Intraday series
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BurnoutDataPoint:
    """A minute sample. has_data=True marks a real sample (an anchor)."""

    value: float
    has_data: bool
    hour: int = 0
    minute: int = 0
    label: str = ""

    @property
    def minute_of_day(self) -> int:
        return self.hour * 60 + self.minute


@dataclass(frozen=True)
class BiometricSnapshot:
    """
    Raw health reading as delivered by a device health API or its mock.

    Labels follow the health API vocabulary: sleep/air quality are one of
    Poor/Fair/Good/Excellent, mood one of Very Unpleasant..Very Pleasant.
    Stress is a 1-10 rating.
    """

    hours_slept: float = 7.0
    sleep_quality: str = "Good"
    move_percentage: float = 60.0
    exercise_percentage: float = 50.0
    hrv: float = 35.0
    mood: str = "Neutral"
    stress_rating: float = 5.0
    mindfulness_minutes: float = 0.0
    air_quality: str = "Good"


@dataclass(frozen=True)
class BiometricPattern:
    heart_rate_variability: float
    sleep_quality: float
    activity_level: float
    stress_level: float
    time_of_day: float


# ---------------------------------------------------------------------------
# Influence cards
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class InfluenceCard:
    title: str
    value: str
    impact: Impact
    description: str
    weight: int
