"""
Forecast simulation: auto-regressive projection of the burnout metric.

Each future day d = 1..horizon sums five additive effects on top of the
previous day's (clamped) value:

    trend effect      diminishing push in the trend's direction
    behavior effect   fatigue perpetuation and streak compounding
    recovery effect   asymmetric recovery/fatigue plus a pull toward 50
    jitter            bounded noise scaled by history volatility
    calendar effect   weekend / Monday / Friday adjustments

Randomness comes from an injected numpy Generator. When none is supplied,
the generator is seeded from a hash of the inputs, so identical inputs
always produce identical forecasts. The calendar reads an injected `today`.
"""

import hashlib
import json
import logging
import math
from datetime import date, timedelta
from numbers import Real
from typing import List, Optional, Sequence, Tuple

import numpy as np

from cadence.config import CadenceConfig, CalendarEffects, ForecastParams
from cadence.models import (
    ForecastConfidence,
    ForecastDay,
    ForecastResult,
    Trend,
    clamp,
    round_half_up,
)
from cadence.trend import analyze_trend, calculate_volatility

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Input hygiene
# ---------------------------------------------------------------------------

def _is_valid(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return math.isfinite(value) and 0 <= value <= 100


def _sanitize(
    current_value: float,
    history: Sequence[float],
    fp: ForecastParams,
) -> Tuple[float, List[float]]:
    if not _is_valid(current_value):
        logger.warning("Invalid current value %r, using baseline %s", current_value, fp.baseline)
        current_value = fp.baseline

    valid = [float(v) for v in history if _is_valid(v)]
    if len(valid) != len(history):
        logger.warning(
            "Filtered invalid history values: %d of %d kept", len(valid), len(history)
        )
    return float(current_value), valid


def _seeded_rng(current_value: float, history: Sequence[float], horizon: int) -> np.random.Generator:
    """Generator seeded from the inputs themselves: same inputs, same jitter."""
    payload = json.dumps([current_value, list(history), horizon]).encode("utf-8")
    seed = int.from_bytes(hashlib.sha256(payload).digest()[:8], "big")
    return np.random.default_rng(seed)


# ---------------------------------------------------------------------------
# Confidence
# ---------------------------------------------------------------------------

def calculate_confidence(
    history: Sequence[float],
    current_value: float,
    cfg: CadenceConfig | None = None,
) -> ForecastConfidence:
    """
    Confidence reflects how much history backs the forecast.

    score = round(min(n / 7, 1) * 100) for n history points, and 0 below the
    minimum history length. The spread is the population std of the
    history plus the current value.
    """
    cfg = cfg or CadenceConfig()
    fp = cfg.forecast
    q = cfg.quality
    n = len(history)

    if n < fp.min_history:
        return ForecastConfidence(
            score=0, data_quality="poor", days_available=n,
            variance=0.0, standard_deviation=0.0,
        )

    score = round_half_up(min(n / fp.optimal_history_days, 1.0) * 100)
    std = calculate_volatility(list(history) + [current_value], cfg.volatility)

    if score >= q.excellent_score and std < q.excellent_std:
        quality = "excellent"
    elif score >= q.good_score and std < q.good_std:
        quality = "good"
    elif score >= q.fair_score:
        quality = "fair"
    else:
        quality = "poor"

    return ForecastConfidence(
        score=score,
        data_quality=quality,
        days_available=n,
        variance=round(std * std, 2),
        standard_deviation=round(std, 2),
    )


# ---------------------------------------------------------------------------
# Daily effects
# ---------------------------------------------------------------------------

def trend_effect(trend: Trend, day: int, fp: ForecastParams, rng: np.random.Generator) -> float:
    multiplier = fp.trend_decay ** (day - 1)
    if trend is Trend.IMPROVING:
        return fp.improving_effect * multiplier
    if trend is Trend.DECLINING:
        return fp.declining_effect * multiplier
    return (rng.random() - 0.5) * fp.stable_drift * multiplier


def behavior_effect(value: float, day: int, series: Sequence[float], fp: ForecastParams) -> float:
    """High burnout perpetuates, the floor is unstable, streaks compound."""
    effect = 0.0
    if value > fp.high_level:
        effect += fp.high_base + fp.high_per_day * day
    if value < fp.low_level:
        effect += fp.low_base + fp.low_per_day * day

    recent = series[-fp.streak_window:]
    high_days = sum(1 for v in recent if v > fp.high_streak_level)
    if high_days >= fp.streak_min_days:
        effect += fp.high_streak_step * high_days

    low_days = sum(1 for v in recent if v < fp.low_streak_level)
    if low_days >= fp.streak_min_days:
        effect += fp.low_streak_step * low_days

    return effect


def recovery_effect(value: float, day: int, trend: Trend, fp: ForecastParams) -> float:
    """Recovery decelerates faster than fatigue; everything drifts toward baseline."""
    effect = 0.0
    if trend is Trend.IMPROVING:
        effect = fp.recovery_effect * fp.recovery_decay ** (day - 1)
    elif trend is Trend.DECLINING:
        effect = fp.fatigue_effect * fp.fatigue_decay ** (day - 1)
    return effect + (fp.baseline - value) * fp.baseline_pull


def calendar_effect(target: date, c: CalendarEffects) -> float:
    weekday = target.weekday()
    if weekday >= 5:
        return c.weekend
    if weekday == 0:
        return c.monday
    if weekday == 4:
        return c.friday
    return 0.0


# ---------------------------------------------------------------------------
# Forecast
# ---------------------------------------------------------------------------

def generate_forecast(
    current_value: float,
    history: Sequence[float] = (),
    horizon: Optional[int] = None,
    cfg: CadenceConfig | None = None,
    today: Optional[date] = None,
    rng: Optional[np.random.Generator] = None,
) -> ForecastResult:
    """
    Project `horizon` future daily values from the current value and history.

    With fewer than two valid history points there is no trend signal: the
    forecast is flat at the current value, trend is stable and confidence 0.
    """
    cfg = cfg or CadenceConfig()
    fp = cfg.forecast
    horizon = fp.horizon if horizon is None else horizon
    if horizon < 0:
        raise ValueError(f"Horizon must be non-negative, got {horizon}")

    current_value, valid = _sanitize(current_value, history, fp)
    confidence = calculate_confidence(valid, current_value, cfg)

    if len(valid) < fp.min_history:
        return ForecastResult(
            forecast=[current_value] * horizon,
            trend=Trend.STABLE,
            confidence=confidence,
        )

    trend = analyze_trend(valid, current_value, cfg)
    volatility = calculate_volatility(valid, cfg.volatility)
    today = today or date.today()
    if rng is None:
        rng = _seeded_rng(current_value, valid, horizon)

    series = valid + [current_value]
    forecast: List[float] = []
    value = current_value

    for day in range(1, horizon + 1):
        step = trend_effect(trend, day, fp, rng)
        step += behavior_effect(value, day, series, fp)
        step += recovery_effect(value, day, trend, fp)
        step += (rng.random() - 0.5) * volatility * fp.jitter_scale
        step += calendar_effect(today + timedelta(days=day), cfg.calendar)

        value = clamp(value + step)
        forecast.append(value)
        series.append(value)

    return ForecastResult(forecast=forecast, trend=trend, confidence=confidence)


# ---------------------------------------------------------------------------
# Bands and day records
# ---------------------------------------------------------------------------

def generate_confidence_intervals(
    forecast: Sequence[float],
    volatility: float,
    z: float = 1.645,
) -> Tuple[List[float], List[float]]:
    """90% band around each forecast value, clamped to [0, 100]. Returns (high, low)."""
    half_width = volatility * z
    values = np.asarray(forecast, dtype=np.float64)
    high = np.clip(values + half_width, 0, 100)
    low = np.clip(values - half_width, 0, 100)
    return high.tolist(), low.tolist()


def build_forecast_days(
    current_value: float,
    result: ForecastResult,
    history: Sequence[float],
    today: Optional[date] = None,
    cfg: CadenceConfig | None = None,
) -> List[ForecastDay]:
    """Day 0 (today, at the current value) followed by one record per forecast day."""
    cfg = cfg or CadenceConfig()
    today = today or date.today()
    volatility = calculate_volatility(
        [v for v in history if _is_valid(v)], cfg.volatility
    )

    values = [clamp(current_value)] + list(result.forecast)
    high, low = generate_confidence_intervals(values, volatility, cfg.forecast.interval_z)

    return [
        ForecastDay(
            offset=offset,
            target_date=today + timedelta(days=offset),
            value=round(value, 1),
            high=round(h, 1),
            low=round(l, 1),
        )
        for offset, (value, h, l) in enumerate(zip(values, high, low))
    ]


# ---------------------------------------------------------------------------
# Health-influenced forecast
# ---------------------------------------------------------------------------

def _health_adjustment(trend: Trend, index: int, effect: tuple) -> float:
    improving, improving_decay, declining, declining_decay = effect
    if trend is Trend.IMPROVING:
        return improving * improving_decay ** index
    if trend is Trend.DECLINING:
        return declining * declining_decay ** index
    return 0.0


def generate_health_influenced_forecast(
    current_value: float,
    history: Sequence[float],
    sleep_trend: Trend,
    activity_trend: Trend,
    mood_trend: Trend,
    horizon: Optional[int] = None,
    cfg: CadenceConfig | None = None,
    today: Optional[date] = None,
    rng: Optional[np.random.Generator] = None,
) -> ForecastResult:
    """
    Base forecast shifted by the direction of sleep, activity and mood.

    Declining health trends push burnout up, improving ones pull it down;
    each influence decays geometrically across the horizon.
    """
    cfg = cfg or CadenceConfig()
    ht = cfg.health_trends
    base = generate_forecast(current_value, history, horizon, cfg, today, rng)

    adjusted = []
    for index, value in enumerate(base.forecast):
        shift = (
            _health_adjustment(Trend(sleep_trend), index, ht.sleep)
            + _health_adjustment(Trend(activity_trend), index, ht.activity)
            + _health_adjustment(Trend(mood_trend), index, ht.mood)
        )
        adjusted.append(clamp(value + shift))

    return ForecastResult(forecast=adjusted, trend=base.trend, confidence=base.confidence)
