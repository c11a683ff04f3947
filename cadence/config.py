"""
Centralized configuration for all thresholds, weights, and rule constants.

Every tunable constant lives here. Components receive a CadenceConfig (or
one of its sections) explicitly; nothing reads global state.
"""

from dataclasses import dataclass, field


# ---------------------------------------------------------------------------
# Assessment scoring
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ScoringParams:
    """Answer counts, question windows, and scale bounds for assessments."""

    likert_answers: int = 5
    likert_min: int = 1
    likert_max: int = 5

    capacity_answers: int = 10
    # Slice bounds into the 10-question capacity assessment
    capacity_energy: tuple = (0, 4)
    capacity_purpose: tuple = (4, 7)
    capacity_connection: tuple = (7, 10)

    score_max: int = 100


@dataclass(frozen=True)
class RiskBands:
    """Upper bounds (inclusive) for burnout risk levels."""

    low: int = 30
    moderate: int = 60


# ---------------------------------------------------------------------------
# Trend classification
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TrendThresholds:
    """Slope thresholds for labeling direction of the burnout metric."""

    # Positive slope means burnout is rising, i.e. the user is declining
    declining_slope: float = 2.0
    improving_slope: float = -2.0
    window: int = 3
    min_data_points: int = 2


@dataclass(frozen=True)
class VolatilityParams:
    """Fallback and cap for the population standard deviation of history."""

    default: float = 5.0
    cap: float = 15.0


# ---------------------------------------------------------------------------
# Forecast simulation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ForecastParams:
    """Coefficients for the auto-regressive daily forecast."""

    horizon: int = 6
    baseline: float = 50.0
    min_history: int = 2
    optimal_history_days: int = 7

    # Trend effect
    trend_decay: float = 0.8
    improving_effect: float = -1.5
    declining_effect: float = 2.0
    stable_drift: float = 1.0

    # Behavioral compounding
    high_level: float = 70.0
    high_base: float = 1.0
    high_per_day: float = 0.3
    low_level: float = 20.0
    low_base: float = 0.8
    low_per_day: float = 0.2
    streak_window: int = 3
    streak_min_days: int = 2
    high_streak_level: float = 65.0
    high_streak_step: float = 0.8
    low_streak_level: float = 35.0
    low_streak_step: float = 0.5

    # Recovery / fatigue asymmetry
    recovery_effect: float = -0.8
    recovery_decay: float = 0.7
    fatigue_effect: float = 1.2
    fatigue_decay: float = 0.9
    baseline_pull: float = 0.05

    # Jitter
    jitter_scale: float = 0.3

    # 90% interval half-width multiplier
    interval_z: float = 1.645


@dataclass(frozen=True)
class CalendarEffects:
    """Additive burnout effects for the forecast day's weekday and month."""

    weekend: float = -2.0
    monday: float = 1.5
    friday: float = -0.5
    winter_months: tuple = (12, 1, 2)


@dataclass(frozen=True)
class ConfidenceQuality:
    """Score and deviation bounds for the data-quality label."""

    excellent_score: float = 85.0
    excellent_std: float = 5.0
    good_score: float = 70.0
    good_std: float = 8.0
    fair_score: float = 50.0


@dataclass(frozen=True)
class HealthTrendEffects:
    """
    Day-indexed adjustments for the health-influenced forecast.

    Each entry is (improving_amount, improving_decay, declining_amount,
    declining_decay); effect on day i is amount * decay**i.
    """

    sleep: tuple = (-1.5, 0.8, 2.0, 0.9)
    activity: tuple = (-1.0, 0.9, 1.2, 0.85)
    mood: tuple = (-0.8, 0.85, 1.5, 0.9)


# ---------------------------------------------------------------------------
# Intraday interpolation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class InterpolationConfig:
    """Options recognized by the gap interpolator."""

    smoothing_factor: float = 0.8
    biometric_weight: float = 0.6
    natural_patterns: bool = True
    preserve_anchors: bool = True

    def __post_init__(self):
        for name in ("smoothing_factor", "biometric_weight"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {value}")


@dataclass(frozen=True)
class BiometricDefaults:
    """Neutral inputs used when the biometric source is unavailable."""

    sleep_quality: float = 70.0
    activity_level: float = 60.0
    stress_level: float = 50.0
    activity_cap: float = 300.0


@dataclass(frozen=True)
class BiometricWeights:
    """Coefficients of the biometric burnout model."""

    hrv_center: float = 50.0
    hrv_coeff: float = -0.3
    sleep_center: float = 70.0
    sleep_coeff: float = -0.2
    optimal_activity: float = 60.0
    activity_coeff: float = 0.1
    stress_center: float = 30.0
    stress_coeff: float = 0.25
    natural_pattern_weight: float = 0.5


# ---------------------------------------------------------------------------
# Influence ranking
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class InfluenceParams:
    """Inclusion thresholds and weights for influence cards."""

    max_cards: int = 5
    near_term_days: int = 2
    long_term_days: int = 7

    current_high: float = 70.0
    current_low: float = 30.0
    current_weight_today: int = 40
    current_weight_near: int = 25

    epc_cards: int = 2
    epc_low: float = 40.0
    epc_high: float = 70.0
    epc_near_weight: int = 30
    epc_near_step: int = 5
    epc_far_weight: int = 20
    epc_far_step: int = 3

    trend_min_history: int = 3
    trend_slope: float = 5.0
    trend_weight_long: int = 25
    trend_weight_near: int = 20

    weekend_weight: int = 15
    monday_weight: int = 20
    winter_weight: int = 10

    confidence_cutoff: int = 70
    confidence_high: int = 80
    confidence_low: int = 50
    confidence_weight_long: int = 15
    confidence_weight_near: int = 10

    uncertainty_threshold: float = 15.0
    uncertainty_weight: int = 20

    recovery_drop: float = 5.0
    recovery_weight: int = 15


# ---------------------------------------------------------------------------
# Top-level config aggregate
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CadenceConfig:
    """Complete engine configuration. Pass to any entry point to override defaults."""

    scoring: ScoringParams = field(default_factory=ScoringParams)
    risk: RiskBands = field(default_factory=RiskBands)
    trend: TrendThresholds = field(default_factory=TrendThresholds)
    volatility: VolatilityParams = field(default_factory=VolatilityParams)
    forecast: ForecastParams = field(default_factory=ForecastParams)
    calendar: CalendarEffects = field(default_factory=CalendarEffects)
    quality: ConfidenceQuality = field(default_factory=ConfidenceQuality)
    health_trends: HealthTrendEffects = field(default_factory=HealthTrendEffects)
    interpolation: InterpolationConfig = field(default_factory=InterpolationConfig)
    biometric_defaults: BiometricDefaults = field(default_factory=BiometricDefaults)
    biometric_weights: BiometricWeights = field(default_factory=BiometricWeights)
    influence: InfluenceParams = field(default_factory=InfluenceParams)
