"""
Biometric boundary: raw health snapshots in, bounded numbers out.

The engine never talks to a device health API directly. It awaits a
BiometricSource once per batch and converts the snapshot into either EPC
score deltas (compute_biometric_adjustment) or the per-minute
BiometricPattern consumed by the gap interpolator.

A failing source is not an error here: inputs fall back to neutral
defaults and the failure is logged.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Protocol

from cadence.config import BiometricDefaults
from cadence.models import (
    BiometricAdjustment,
    BiometricPattern,
    BiometricSnapshot,
    clamp,
    round_half_up,
)

logger = logging.getLogger(__name__)


SLEEP_QUALITY_SCORES = {"Excellent": 90.0, "Good": 75.0, "Fair": 50.0, "Poor": 25.0}


# ---------------------------------------------------------------------------
# Source contract
# ---------------------------------------------------------------------------

class BiometricSource(Protocol):
    async def fetch(self) -> BiometricSnapshot: ...


class StaticBiometricSource:
    """Serves a fixed snapshot. Stands in for the device API in demos and tests."""

    def __init__(self, snapshot: BiometricSnapshot | None = None):
        self.snapshot = snapshot or BiometricSnapshot()

    async def fetch(self) -> BiometricSnapshot:
        return self.snapshot


# ---------------------------------------------------------------------------
# Score adjustments
# ---------------------------------------------------------------------------

def compute_biometric_adjustment(snapshot: BiometricSnapshot) -> BiometricAdjustment:
    """
    Convert a health snapshot into EPC score deltas.

    Sleep drives Energy; activity rings feed Energy and Purpose; mood,
    stress and mindfulness shift Purpose and Connection. The result is
    capped at ±20 / ±15 / ±15 by BiometricAdjustment itself.
    """
    energy = purpose = connection = 0

    if snapshot.hours_slept >= 8:
        energy += 10
    elif snapshot.hours_slept >= 7:
        energy += 5
    elif snapshot.hours_slept <= 6:
        energy -= 8

    energy += {"Excellent": 8, "Good": 4, "Fair": 0, "Poor": -6}.get(snapshot.sleep_quality, 0)

    move = snapshot.move_percentage
    if move >= 100:
        energy += 8
        purpose += 3
    elif move >= 75:
        energy += 5
        purpose += 2
    elif move <= 25:
        energy -= 5
        purpose -= 2

    if snapshot.exercise_percentage >= 100:
        energy += 6
        purpose += 4

    if snapshot.hrv >= 40:
        energy += 5
    elif snapshot.hrv <= 25:
        energy -= 4

    mood_shift = {
        "Very Pleasant": (8, 6),
        "Pleasant": (4, 3),
        "Unpleasant": (-4, -3),
        "Very Unpleasant": (-8, -6),
    }.get(snapshot.mood, (0, 0))
    purpose += mood_shift[0]
    connection += mood_shift[1]

    if snapshot.stress_rating >= 8:
        energy -= 6
        purpose -= 4
        connection -= 3
    elif snapshot.stress_rating <= 3:
        energy += 4
        purpose += 2
        connection += 2

    if snapshot.mindfulness_minutes >= 20:
        purpose += 6
        connection += 4
    elif snapshot.mindfulness_minutes >= 10:
        purpose += 3
        connection += 2

    if snapshot.air_quality == "Hazardous":
        energy -= 3
    elif snapshot.air_quality == "Good":
        energy += 2

    return BiometricAdjustment(
        energy_adjustment=energy,
        purpose_adjustment=purpose,
        connection_adjustment=connection,
    )


# ---------------------------------------------------------------------------
# Interpolation inputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BiometricInputs:
    """Normalized day-level inputs: sleep 0-100, activity 0-300, stress 0-100."""

    sleep_quality: float
    activity_level: float
    stress_level: float


def neutral_inputs(defaults: BiometricDefaults | None = None) -> BiometricInputs:
    d = defaults or BiometricDefaults()
    return BiometricInputs(d.sleep_quality, d.activity_level, d.stress_level)


def normalize_snapshot(
    snapshot: BiometricSnapshot,
    defaults: BiometricDefaults | None = None,
) -> BiometricInputs:
    d = defaults or BiometricDefaults()
    sleep = SLEEP_QUALITY_SCORES.get(snapshot.sleep_quality, d.sleep_quality)
    activity = clamp(snapshot.move_percentage, 0.0, d.activity_cap)
    stress = float(round_half_up(snapshot.stress_rating / 10 * 100))
    return BiometricInputs(sleep, activity, stress)


async def read_biometric_inputs(
    source: Optional[BiometricSource],
    defaults: BiometricDefaults | None = None,
) -> BiometricInputs:
    """
    Await one snapshot from the source and normalize it.

    Never raises: a missing source or any failure while fetching or reading
    the snapshot yields neutral defaults (sleep 70, activity 60, stress 50).
    """
    if source is None:
        return neutral_inputs(defaults)
    try:
        snapshot = await source.fetch()
        return normalize_snapshot(snapshot, defaults)
    except Exception:
        logger.warning("Biometric source unavailable, using neutral defaults", exc_info=True)
        return neutral_inputs(defaults)


def derive_biometric_pattern(inputs: BiometricInputs, hour: int, minute: float) -> BiometricPattern:
    """
    Build the biometric pattern for one minute of the day.

    HRV follows a 24h sinusoid around 60 (amplitude 20), nudged up or down
    by sleep quality relative to 70.
    """
    time_of_day = hour + minute / 60
    hrv_curve = math.sin(time_of_day / 24 * 2 * math.pi) * 20 + 60
    hrv = clamp(hrv_curve + (inputs.sleep_quality - 70) * 0.5)
    return BiometricPattern(
        heart_rate_variability=hrv,
        sleep_quality=inputs.sleep_quality,
        activity_level=inputs.activity_level,
        stress_level=inputs.stress_level,
        time_of_day=time_of_day,
    )
