"""
Pipeline orchestration: load → score → forecast → explain → report.

This is the only module with I/O (file loading, report formatting).
All analytical logic is delegated to scoring, biometrics, forecast,
influences and interpolation.

Payload shape (JSON object):
    answers            five 1-5 answers                  ┐
    capacity_answers   ten capacity state labels         ├ exactly one is required
    assessments        [{"date", "answers"}, ...]        ┘
    history            prior burnout values, oldest first    (optional);
                       all of them precede any dated assessment
    current_value      today's burnout; derived from scores when absent
    biometrics         BiometricSnapshot fields, applied as a score overlay
    horizon            number of forecast days (default from config)
    forecast_day       day offset to explain (default 0 = today)
"""

import json
from dataclasses import asdict
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from cadence.biometrics import BiometricSource, compute_biometric_adjustment
from cadence.config import CadenceConfig, InterpolationConfig
from cadence.forecast import build_forecast_days, generate_forecast
from cadence.influences import rank_influences
from cadence.interpolation import fill_gaps
from cadence.models import (
    BiometricSnapshot,
    BurnoutDataPoint,
    EPCScores,
    ValidationError,
)
from cadence.scoring import (
    ANSWER_COLUMNS,
    apply_biometric_overlay,
    burnout_risk_level,
    calculate_burnout,
    compute_assessment_frame,
    compute_scores,
    compute_scores_from_capacity_assessment,
    dominant_capacity_state,
    weakest_pillar,
)


# ---------------------------------------------------------------------------
# Data loading (CLI mode only)
# ---------------------------------------------------------------------------

ANSWER_KEYS = ("answers", "capacity_answers", "assessments")


def _validate_payload(data) -> Dict:
    if not data:
        raise ValueError("Input data cannot be empty")
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    if not any(key in data for key in ANSWER_KEYS):
        raise ValueError(f"Missing required keys: one of {ANSWER_KEYS}")
    return data


def load_data(filepath: Union[str, Path]) -> Dict:
    """Load and validate an assessment payload from a JSON file."""
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")

    with open(path, "r") as f:
        data = json.load(f)

    return _validate_payload(data)


def assessment_frame(rows: Sequence[Dict], cfg: CadenceConfig) -> pd.DataFrame:
    """Dated assessment rows → scored DataFrame, oldest first."""
    df = pd.DataFrame(list(rows))
    if "date" not in df.columns or "answers" not in df.columns:
        raise ValidationError("Each assessment needs 'date' and 'answers'")

    lengths = df["answers"].map(len)
    if (lengths != len(ANSWER_COLUMNS)).any():
        raise ValidationError(f"Each assessment needs exactly {len(ANSWER_COLUMNS)} answers")

    answers = pd.DataFrame(df["answers"].tolist(), columns=list(ANSWER_COLUMNS), index=df.index)
    df = pd.concat([df.drop(columns=["answers"]), answers], axis=1)

    df["date"] = pd.to_datetime(df["date"])
    df.sort_values("date", inplace=True)
    df.reset_index(drop=True, inplace=True)
    return compute_assessment_frame(df, cfg)


# ---------------------------------------------------------------------------
# Core analysis (PURE FUNCTION — NO FILE I/O)
# ---------------------------------------------------------------------------

def _score_payload(data: Dict, cfg: CadenceConfig):
    """Returns (scores, dominant_state, derived_history)."""
    if "assessments" in data:
        df = assessment_frame(data["assessments"], cfg)
        latest = df.iloc[-1]
        scores = EPCScores(
            energy=int(latest["energy"]),
            purpose=int(latest["purpose"]),
            connection=int(latest["connection"]),
        )
        return scores, None, df["burnout"].iloc[:-1].astype(float).tolist()

    if "capacity_answers" in data:
        answers = data["capacity_answers"]
        scores = compute_scores_from_capacity_assessment(answers, cfg)
        return scores, dominant_capacity_state(answers, cfg).label, []

    return compute_scores(data["answers"], cfg), None, []


def _analyze_payload(
    data: Dict,
    cfg: CadenceConfig,
    today: date,
    rng: Optional[np.random.Generator],
) -> Dict:
    # Stage 1: Score
    scores, dominant, derived_history = _score_payload(data, cfg)

    adjustment = None
    if data.get("biometrics"):
        adjustment = compute_biometric_adjustment(BiometricSnapshot(**data["biometrics"]))
        scores = apply_biometric_overlay(scores, adjustment)

    # Stage 2: Current level
    # Explicit history predates the assessments it is combined with
    history: List[float] = list(data.get("history", [])) + derived_history
    current_value = data.get("current_value")
    if current_value is None:
        current_value = calculate_burnout(scores)

    # Stage 3: Forecast
    result = generate_forecast(
        current_value, history, data.get("horizon"), cfg, today=today, rng=rng
    )
    days = build_forecast_days(current_value, result, history, today, cfg)

    # Stage 4: Explain the selected day
    forecast_day = int(data.get("forecast_day", 0))
    selected = days[forecast_day] if 0 <= forecast_day < len(days) else None
    cards = rank_influences(
        scores, current_value, result.confidence, history, forecast_day, selected, cfg
    )

    return {
        "scores": scores.as_dict(),
        "dominant_state": dominant,
        "adjustment": asdict(adjustment) if adjustment else None,
        "current_value": round(float(current_value), 1),
        "risk_level": burnout_risk_level(current_value, cfg.risk)["level"],
        "weakest_pillar": weakest_pillar(scores),
        "trend": result.trend.value,
        "forecast": [round(v, 1) for v in result.forecast],
        "confidence": asdict(result.confidence),
        "forecast_days": [
            {
                "offset": d.offset,
                "date": d.target_date.isoformat(),
                "value": d.value,
                "high": d.high,
                "low": d.low,
                "uncertainty": round(d.uncertainty, 1),
            }
            for d in days
        ],
        "forecast_day": forecast_day,
        "influences": [
            {**asdict(card), "impact": card.impact.value} for card in cards
        ],
    }


# ---------------------------------------------------------------------------
# Public Entry Points
# ---------------------------------------------------------------------------

def analyze(
    filepath: Union[str, Path],
    cfg: CadenceConfig | None = None,
    today: date | None = None,
) -> Dict:
    """
    CLI-compatible entry point.
    Reads JSON file and runs analysis.
    """
    if cfg is None:
        cfg = CadenceConfig()

    data = load_data(filepath)
    return _analyze_payload(data, cfg, today or date.today(), None)


def analyze_data(
    data: Dict,
    cfg: CadenceConfig | None = None,
    today: date | None = None,
    rng: np.random.Generator | None = None,
) -> Dict:
    """
    Backend / UI integration entry point.

    Accepts the payload dict directly.
    No file system usage.
    """
    if cfg is None:
        cfg = CadenceConfig()

    return _analyze_payload(_validate_payload(data), cfg, today or date.today(), rng)


async def reconstruct_intraday(
    rows: Sequence[Dict],
    config: InterpolationConfig | None = None,
    source: BiometricSource | None = None,
    cfg: CadenceConfig | None = None,
) -> List[Dict]:
    """Fill an intraday series given as dict rows; returns dict rows of the same length."""
    points = [BurnoutDataPoint(**row) for row in rows]
    filled = await fill_gaps(points, config, source, cfg)
    return [asdict(point) for point in filled]


# ---------------------------------------------------------------------------
# Report generation
# ---------------------------------------------------------------------------

def generate_report(result: Dict) -> str:
    """Format the analysis result as a human-readable text report."""
    s = result["scores"]
    c = result["confidence"]

    lines = [
        "CADENCE CAPACITY REPORT",
        "=" * 58,
        "",
        f"  Energy / Purpose / Connection : {s['energy']} / {s['purpose']} / {s['connection']}",
        f"  Weakest Pillar      : {result['weakest_pillar'].title()}",
    ]
    if result["dominant_state"]:
        lines.append(f"  Capacity State      : {result['dominant_state']}")
    lines += [
        f"  Current Burnout     : {result['current_value']}% ({result['risk_level']} risk)",
        f"  Trend               : {result['trend'].title()}",
        f"  Confidence          : {c['score']}% ({c['data_quality']}, {c['days_available']} days,"
        f" std {c['standard_deviation']})",
        "",
        "  Forecast:",
    ]

    for day in result["forecast_days"]:
        label = "Today" if day["offset"] == 0 else f"+{day['offset']}d"
        lines.append(
            f"    {label:6s} {day['date']} : {day['value']:5.1f}%"
            f"  (range {day['low']:.1f} - {day['high']:.1f})"
        )

    if result["influences"]:
        lines.append("")
        lines.append(f"  Influences (day {result['forecast_day']}):")
        markers = {"positive": "+", "negative": "-", "neutral": "="}
        for card in result["influences"]:
            lines.append(
                f"    [{markers[card['impact']]}] {card['title']:22s} {card['value']:>14s}"
                f"  w={card['weight']}"
            )

    lines.append("")
    lines.append("=" * 58)
    return "\n".join(lines)
