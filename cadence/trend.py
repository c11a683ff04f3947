"""
Trend and volatility of the burnout history.

All functions are pure transforms over a history sequence (most recent
last). A rising burnout slope means the user is declining.
"""

from typing import Sequence

import numpy as np

from cadence.config import CadenceConfig, TrendThresholds, VolatilityParams
from cadence.models import Trend


# ---------------------------------------------------------------------------
# OLS primitive
# ---------------------------------------------------------------------------

def _ols_slope(y: np.ndarray) -> float:
    """
    Ordinary least-squares slope for evenly-spaced data.

    Uses the closed-form solution:  slope = Σ(x_c · y_c) / Σ(x_c²)
    where x_c and y_c are mean-centered. Algebraically identical to
    (n·Σxy − Σx·Σy) / (n·Σx² − (Σx)²) over x = 0..n-1.
    """
    n = len(y)
    if n < 2:
        return 0.0
    x = np.arange(n, dtype=np.float64)
    x_c = x - x.mean()
    y_c = y - y.mean()
    denom = np.dot(x_c, x_c)
    if denom == 0.0:
        return 0.0
    return float(np.dot(x_c, y_c) / denom)


# ---------------------------------------------------------------------------
# Trend classification
# ---------------------------------------------------------------------------

def classify_slope(slope: float, t: TrendThresholds) -> Trend:
    """Map a burnout slope to a trend label."""
    if slope > t.declining_slope:
        return Trend.DECLINING
    if slope < t.improving_slope:
        return Trend.IMPROVING
    return Trend.STABLE


def recent_slope(history: Sequence[float], current_value: float, t: TrendThresholds) -> float:
    """OLS slope over the last `window` history values followed by the current value."""
    tail = list(history)[-t.window:] if t.window > 0 else []
    values = np.asarray(tail + [current_value], dtype=np.float64)
    return _ols_slope(values)


def analyze_trend(
    history: Sequence[float],
    current_value: float,
    cfg: CadenceConfig | None = None,
) -> Trend:
    """Classify recent direction; fewer than two history points is always stable."""
    t = (cfg or CadenceConfig()).trend
    if len(history) < t.min_data_points:
        return Trend.STABLE
    return classify_slope(recent_slope(history, current_value, t), t)


# ---------------------------------------------------------------------------
# Volatility
# ---------------------------------------------------------------------------

def population_std(values: Sequence[float]) -> float:
    """Population std (ddof=0): the actual dispersion of what we observed."""
    if len(values) == 0:
        return 0.0
    return float(np.std(np.asarray(values, dtype=np.float64), ddof=0))


def calculate_volatility(
    history: Sequence[float],
    params: VolatilityParams | None = None,
) -> float:
    """Population std of the full history, capped; a default when under two points."""
    v = params or VolatilityParams()
    if len(history) < 2:
        return v.default
    return min(population_std(history), v.cap)
