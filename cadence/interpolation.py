"""
Intraday gap filling for the burnout series.

A day is a sequence of minute points; points with has_data=True are real
samples (anchors) and are returned untouched. Every other point gets a
value from the biometric burnout model:

    between two anchors   linear-by-time baseline, blended toward the
                          biometric value by the smoothing factor
    outside the anchors   biometric value seeded by the nearest anchor
    no anchors at all     the series is returned as-is

The biometric source is awaited once per call.
"""

import math
from dataclasses import replace
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from cadence.biometrics import (
    BiometricInputs,
    BiometricSource,
    derive_biometric_pattern,
    read_biometric_inputs,
)
from cadence.config import BiometricWeights, CadenceConfig, InterpolationConfig
from cadence.models import BiometricPattern, BurnoutDataPoint, clamp


# ---------------------------------------------------------------------------
# Circadian pattern
# ---------------------------------------------------------------------------

def natural_energy_pattern(hour: int, minute: float) -> float:
    """
    Signed burnout contribution of the time of day (negative = more energy).

        06-10  half sinusoid, 0 down to -15 at 08:00 and back to 0 (morning rise)
        10-14  -15 (peak)
        14-16  half sinusoid, -15 up to -5 at 15:00 and back (afternoon dip)
        16-20  -5
        20-06  linear ramp from +5 to +15 across the night
    """
    t = hour + minute / 60

    if 6 <= t <= 10:
        return -15 * math.sin((t - 6) / 4 * math.pi)
    if 10 < t <= 14:
        return -15.0
    if 14 < t <= 16:
        return -15 + 10 * math.sin((t - 14) / 2 * math.pi)
    if 16 < t <= 20:
        return -5.0

    night = t - 20 if t > 20 else t + 4
    return 5 + 10 * (night / 10)


# ---------------------------------------------------------------------------
# Biometric model
# ---------------------------------------------------------------------------

def calculate_biometric_burnout(
    pattern: BiometricPattern,
    baseline: float,
    config: InterpolationConfig,
    weights: BiometricWeights | None = None,
) -> float:
    """Baseline shifted by weighted biometric influences and the circadian pattern."""
    w = weights or BiometricWeights()
    prediction = baseline

    if config.biometric_weight > 0:
        hrv = (pattern.heart_rate_variability - w.hrv_center) * w.hrv_coeff
        sleep = (pattern.sleep_quality - w.sleep_center) * w.sleep_coeff
        # Moderate activity helps; deviation either way costs
        activity = -abs(pattern.activity_level - w.optimal_activity) * w.activity_coeff
        stress = (pattern.stress_level - w.stress_center) * w.stress_coeff
        prediction += (hrv + sleep + activity + stress) * config.biometric_weight

    if config.natural_patterns:
        hour = math.floor(pattern.time_of_day)
        minute = (pattern.time_of_day % 1) * 60
        prediction += natural_energy_pattern(hour, minute) * w.natural_pattern_weight

    return clamp(prediction)


# ---------------------------------------------------------------------------
# Gap filling
# ---------------------------------------------------------------------------

def points_to_frame(points: Sequence[BurnoutDataPoint]) -> pd.DataFrame:
    df = pd.DataFrame(
        {
            "value": [p.value for p in points],
            "has_data": [bool(p.has_data) for p in points],
            "hour": [p.hour for p in points],
            "minute": [p.minute for p in points],
        }
    )
    df["minute_of_day"] = df["hour"] * 60 + df["minute"]
    return df


def fill_frame(
    df: pd.DataFrame,
    inputs: BiometricInputs,
    config: InterpolationConfig,
    weights: BiometricWeights | None = None,
) -> pd.Series:
    """
    Compute a value for every row. Anchor rows keep their own value.

    Bracketing anchors are found by forward/backward filling anchor minutes
    and values across the gap rows.
    """
    anchors = df["has_data"]
    anchor_minute = df["minute_of_day"].where(anchors).astype(np.float64)
    anchor_value = df["value"].where(anchors).astype(np.float64)

    prev_minute, next_minute = anchor_minute.ffill(), anchor_minute.bfill()
    prev_value, next_value = anchor_value.ffill(), anchor_value.bfill()
    bracketed = prev_value.notna() & next_value.notna()

    span = (next_minute - prev_minute).where(lambda s: s > 0)
    progress = ((df["minute_of_day"] - prev_minute) / span).fillna(0.0)
    linear = prev_value + (next_value - prev_value) * progress

    # Outside the anchors: seed from the nearest anchor on either side
    baseline = linear.where(bracketed, prev_value.fillna(next_value))

    biometric = pd.Series(
        [
            calculate_biometric_burnout(
                derive_biometric_pattern(inputs, hour, minute), base, config, weights
            )
            for hour, minute, base in zip(df["hour"], df["minute"], baseline)
        ],
        index=df.index,
        dtype=np.float64,
    )

    if config.preserve_anchors:
        blended = linear + (biometric - linear) * config.smoothing_factor
    else:
        blended = biometric

    filled = blended.where(bracketed, biometric)
    filled = np.floor(filled * 10 + 0.5) / 10
    return filled.where(~anchors, df["value"])


async def fill_gaps(
    points: Sequence[BurnoutDataPoint],
    config: InterpolationConfig | None = None,
    source: Optional[BiometricSource] = None,
    cfg: CadenceConfig | None = None,
) -> List[BurnoutDataPoint]:
    """
    Reconstruct a dense series from sparse anchors.

    Output has the same length and order as the input. Anchors are the
    very same objects that were passed in.
    """
    cfg = cfg or CadenceConfig()
    config = config or cfg.interpolation

    if not any(p.has_data for p in points):
        return list(points)

    inputs = await read_biometric_inputs(source, cfg.biometric_defaults)
    df = points_to_frame(points)
    values = fill_frame(df, inputs, config, cfg.biometric_weights)

    return [
        point if point.has_data else replace(point, value=float(value), has_data=False)
        for point, value in zip(points, values)
    ]
