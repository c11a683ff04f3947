"""
Assessment scoring: transforms questionnaire answers into [0, 100] EPC scores.

Single-assessment functions validate and fail fast with ValidationError.
compute_assessment_frame is the batch counterpart: a pure column transform
over a DataFrame of dated assessments, used to derive burnout history.
"""

from collections import Counter
from numbers import Real
from typing import Dict, List, Sequence

import numpy as np
import pandas as pd

from cadence.config import CadenceConfig, RiskBands, ScoringParams
from cadence.models import (
    BiometricAdjustment,
    CapacityState,
    EPCScores,
    ValidationError,
    clamp,
    round_half_up,
)


ANSWER_COLUMNS = ("q1", "q2", "q3", "q4", "q5")

# Question indices per pillar in the 5-question assessment
LIKERT_WINDOWS = {
    "energy": (0, 2),
    "purpose": (2, 4),
    "connection": (4, 5),
}


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def _validate_likert(answers: Sequence, s: ScoringParams) -> List[float]:
    if len(answers) != s.likert_answers:
        raise ValidationError(
            f"Expected exactly {s.likert_answers} answers, got {len(answers)}"
        )
    for answer in answers:
        if isinstance(answer, bool) or not isinstance(answer, Real):
            raise ValidationError(f"Answer must be numeric, got {answer!r}")
        if not float(answer).is_integer():
            raise ValidationError(f"Answer must be a whole number, got {answer}")
        if not s.likert_min <= answer <= s.likert_max:
            raise ValidationError(
                f"All answers must be between {s.likert_min} and {s.likert_max}, got {answer}"
            )
    return [float(a) for a in answers]


def _parse_capacity(answers: Sequence, s: ScoringParams) -> List[CapacityState]:
    if len(answers) != s.capacity_answers:
        raise ValidationError(
            f"Expected exactly {s.capacity_answers} answers, got {len(answers)}"
        )
    return [CapacityState.parse(a) for a in answers]


def _rescale(average: float, scale_min: float, scale_max: float, top: int) -> int:
    return round_half_up((average - scale_min) / (scale_max - scale_min) * top)


# ---------------------------------------------------------------------------
# Single assessments
# ---------------------------------------------------------------------------

def compute_scores(answers: Sequence, cfg: CadenceConfig | None = None) -> EPCScores:
    """
    Score the 5-question assessment.

    Q1-Q2 -> Energy, Q3-Q4 -> Purpose, Q5 -> Connection. Each window's mean
    on the 1..5 scale is mapped linearly onto 0..100.
    """
    s = (cfg or CadenceConfig()).scoring
    values = _validate_likert(answers, s)

    pillars: Dict[str, int] = {}
    for name, (start, stop) in LIKERT_WINDOWS.items():
        window = values[start:stop]
        pillars[name] = _rescale(
            sum(window) / len(window), s.likert_min, s.likert_max, s.score_max
        )
    return EPCScores(**pillars)


def compute_scores_from_capacity_assessment(
    answers: Sequence,
    cfg: CadenceConfig | None = None,
) -> EPCScores:
    """
    Score the 10-question capacity assessment.

    Labels map to ordinal weights (Maximized=4 ... Fatigued=1); questions
    1-4 feed Energy, 5-7 Purpose, 8-10 Connection. Means on the 1..4 scale
    are mapped onto 0..100.
    """
    s = (cfg or CadenceConfig()).scoring
    weights = [state.value for state in _parse_capacity(answers, s)]

    windows = {
        "energy": s.capacity_energy,
        "purpose": s.capacity_purpose,
        "connection": s.capacity_connection,
    }
    low = min(state.value for state in CapacityState)
    high = max(state.value for state in CapacityState)

    pillars: Dict[str, int] = {}
    for name, (start, stop) in windows.items():
        window = weights[start:stop]
        pillars[name] = _rescale(sum(window) / len(window), low, high, s.score_max)
    return EPCScores(**pillars)


def dominant_capacity_state(
    answers: Sequence,
    cfg: CadenceConfig | None = None,
) -> CapacityState:
    """Most frequent label; on a tie, the label answered first wins."""
    s = (cfg or CadenceConfig()).scoring
    states = _parse_capacity(answers, s)
    # Counter preserves first-insertion order, and max() keeps the first maximum
    counts = Counter(states)
    return max(counts, key=counts.get)


def apply_biometric_overlay(
    scores: EPCScores,
    adjustment: BiometricAdjustment,
) -> EPCScores:
    """Return a new EPCScores with each delta added and clamped to [0, 100]."""
    return EPCScores(
        energy=scores.energy + adjustment.energy_adjustment,
        purpose=scores.purpose + adjustment.purpose_adjustment,
        connection=scores.connection + adjustment.connection_adjustment,
    )


# ---------------------------------------------------------------------------
# Burnout conversion
# ---------------------------------------------------------------------------

def calculate_burnout(scores: EPCScores) -> int:
    """Burnout is the inverse of the mean EPC score: 100 - mean(E, P, C)."""
    average = (scores.energy + scores.purpose + scores.connection) / 3
    return round_half_up(clamp(100 - average))


def burnout_risk_level(burnout: float, bands: RiskBands | None = None) -> Dict[str, str]:
    """Map a burnout percentage to a Low / Moderate / High label with advice."""
    b = bands or RiskBands()
    if burnout <= b.low:
        return {
            "level": "Low",
            "description": "You're managing stress well and maintaining good balance.",
        }
    if burnout <= b.moderate:
        return {
            "level": "Moderate",
            "description": "Some signs of stress. Consider taking breaks and focusing on self-care.",
        }
    return {
        "level": "High",
        "description": "High stress levels detected. Priority should be on recovery and rest.",
    }


def weakest_pillar(scores: EPCScores) -> str:
    """Lowest-scoring pillar; energy wins ties, then purpose."""
    if scores.energy <= scores.purpose and scores.energy <= scores.connection:
        return "energy"
    if scores.purpose <= scores.connection:
        return "purpose"
    return "connection"


# ---------------------------------------------------------------------------
# Batch scoring
# ---------------------------------------------------------------------------

def compute_assessment_frame(df: pd.DataFrame, cfg: CadenceConfig) -> pd.DataFrame:
    """
    Score every assessment row in one pass.

    Expects answer columns q1..q5. Appends energy, purpose, connection and
    burnout columns. Rows with any out-of-range or fractional answer raise
    ValidationError.
    """
    s = cfg.scoring

    missing = set(ANSWER_COLUMNS) - set(df.columns)
    if missing:
        raise ValidationError(f"Missing answer columns: {sorted(missing)}")

    answers = df[list(ANSWER_COLUMNS)].astype(np.float64)
    out_of_range = (answers < s.likert_min) | (answers > s.likert_max) | answers.isna()
    out_of_range |= (answers % 1) != 0
    if out_of_range.to_numpy().any():
        bad_rows = df.index[out_of_range.any(axis=1)].tolist()
        raise ValidationError(f"Answers out of range in rows: {bad_rows}")

    span = s.likert_max - s.likert_min
    for name, (start, stop) in LIKERT_WINDOWS.items():
        cols = list(ANSWER_COLUMNS[start:stop])
        mean = answers[cols].mean(axis=1)
        df[name] = np.floor((mean - s.likert_min) / span * s.score_max + 0.5).astype(int)

    epc_mean = df[["energy", "purpose", "connection"]].mean(axis=1)
    df["burnout"] = np.clip(np.floor(100 - epc_mean + 0.5), 0, 100).astype(int)

    return df
