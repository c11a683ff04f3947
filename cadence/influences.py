"""
Influence ranking: explains a forecasted day with at most five cards.

Each rule inspects the inputs and contributes zero or more candidate
cards with a fixed or computed weight. The candidate pool is then sorted
by weight (descending, stable) and truncated. Rules are independent and
side-effect free; adding a factor means adding a rule to INFLUENCE_RULES.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from cadence.config import CadenceConfig, InfluenceParams
from cadence.models import (
    EPCScores,
    ForecastConfidence,
    ForecastDay,
    Impact,
    InfluenceCard,
    round_half_up,
)


@dataclass(frozen=True)
class InfluenceContext:
    """Everything a rule may look at, bundled once per ranking call."""

    scores: EPCScores
    current_value: float
    confidence_score: int
    history: Sequence[float]
    day_offset: int
    selected_day: Optional[ForecastDay]
    params: InfluenceParams
    winter_months: tuple

    @property
    def is_today(self) -> bool:
        return self.day_offset == 0

    @property
    def is_near_term(self) -> bool:
        return self.day_offset <= self.params.near_term_days

    @property
    def is_long_term(self) -> bool:
        return self.day_offset >= self.params.long_term_days


def _signed_percent(value: float) -> str:
    rounded = round_half_up(value)
    return f"+{rounded}%" if value > 0 else f"{rounded}%"


def _horizon_phrase(day_offset: int) -> str:
    return "current" if day_offset == 0 else f"{day_offset}-day"


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

def current_level_card(ctx: InfluenceContext) -> List[InfluenceCard]:
    p = ctx.params
    if not (ctx.is_today or ctx.is_near_term):
        return []

    level = ctx.current_value
    if level > p.current_high:
        impact, today_text = Impact.NEGATIVE, "High burnout suggests continued stress"
    elif level < p.current_low:
        impact, today_text = Impact.POSITIVE, "Low burnout indicates good recovery potential"
    else:
        impact, today_text = Impact.NEUTRAL, "Moderate burnout with mixed signals"

    shown = round_half_up(level)
    return [InfluenceCard(
        title="Current Burnout" if ctx.is_today else "Starting Point",
        value=f"{shown}%",
        impact=impact,
        description=today_text if ctx.is_today else f"Starting from {shown}% burnout level",
        weight=p.current_weight_today if ctx.is_today else p.current_weight_near,
    )]


def _epc_description(name: str, value: float, day_offset: int, p: InfluenceParams) -> str:
    if day_offset > 0:
        when = f" in {day_offset} day{'s' if day_offset > 1 else ''}"
    else:
        when = " now"
    if value < p.epc_low:
        return f"{name} is low{when}, suggesting fatigue accumulation"
    if value > p.epc_high:
        return f"{name} is strong{when}, supporting resilience"
    return f"{name} is moderate{when}, providing stability"


def epc_cards(ctx: InfluenceContext) -> List[InfluenceCard]:
    """The sub-scores furthest from 50, most extreme first."""
    p = ctx.params
    pillars = [
        ("Energy", ctx.scores.energy),
        ("Purpose", ctx.scores.purpose),
        ("Connection", ctx.scores.connection),
    ]
    extreme = sorted(pillars, key=lambda item: abs(50 - item[1]), reverse=True)

    cards = []
    for rank, (name, value) in enumerate(extreme[: p.epc_cards]):
        if value < p.epc_low:
            impact = Impact.NEGATIVE
        elif value > p.epc_high:
            impact = Impact.POSITIVE
        else:
            impact = Impact.NEUTRAL

        if ctx.is_near_term:
            weight = p.epc_near_weight - rank * p.epc_near_step
        else:
            weight = p.epc_far_weight - rank * p.epc_far_step

        cards.append(InfluenceCard(
            title=name,
            value=f"{round_half_up(value)}%",
            impact=impact,
            description=_epc_description(name, value, ctx.day_offset, p),
            weight=weight,
        ))
    return cards


def trend_card(ctx: InfluenceContext) -> List[InfluenceCard]:
    p = ctx.params
    if len(ctx.history) < p.trend_min_history:
        return []
    if not (ctx.is_long_term or ctx.is_near_term):
        return []

    recent = list(ctx.history)[-3:]
    slope = (recent[-1] - recent[0]) / len(recent)

    if slope > p.trend_slope:
        impact = Impact.NEGATIVE
        description = f"Rising trend of +{round_half_up(slope)}% per day continues"
    elif slope < -p.trend_slope:
        impact = Impact.POSITIVE
        description = f"Improving trend of {round_half_up(slope)}% per day continues"
    else:
        impact = Impact.NEUTRAL
        description = "Stable burnout levels with minimal change"

    return [InfluenceCard(
        title="Historical Pattern" if ctx.is_long_term else "Recent Trend",
        value=_signed_percent(slope),
        impact=impact,
        description=description,
        weight=p.trend_weight_long if ctx.is_long_term else p.trend_weight_near,
    )]


def calendar_cards(ctx: InfluenceContext) -> List[InfluenceCard]:
    p = ctx.params
    if ctx.selected_day is None:
        return []

    target = ctx.selected_day.target_date
    cards = []

    weekday = target.weekday()
    if weekday >= 5:
        cards.append(InfluenceCard(
            title="Weekend Effect",
            value="Recovery",
            impact=Impact.POSITIVE,
            description="Weekends typically provide recovery opportunities",
            weight=p.weekend_weight,
        ))
    elif weekday == 0:
        cards.append(InfluenceCard(
            title="Monday Effect",
            value="Stress",
            impact=Impact.NEGATIVE,
            description="Mondays often bring increased work stress",
            weight=p.monday_weight,
        ))

    if target.month in ctx.winter_months:
        cards.append(InfluenceCard(
            title="Winter Season",
            value="Higher Risk",
            impact=Impact.NEGATIVE,
            description="Winter months often increase burnout risk",
            weight=p.winter_weight,
        ))
    return cards


def confidence_card(ctx: InfluenceContext) -> List[InfluenceCard]:
    p = ctx.params
    score = ctx.confidence_score
    if not (ctx.is_long_term or score < p.confidence_cutoff):
        return []

    phrase = _horizon_phrase(ctx.day_offset)
    if score > p.confidence_high:
        impact = Impact.POSITIVE
        description = f"High confidence in {phrase} prediction"
    elif score < p.confidence_low:
        impact = Impact.NEGATIVE
        description = f"Low confidence - {phrase} prediction uncertain"
    else:
        impact = Impact.NEUTRAL
        description = f"Moderate confidence in {phrase} forecast"

    return [InfluenceCard(
        title="Prediction Confidence",
        value=f"{score}%",
        impact=impact,
        description=description,
        weight=p.confidence_weight_long if ctx.is_long_term else p.confidence_weight_near,
    )]


def uncertainty_card(ctx: InfluenceContext) -> List[InfluenceCard]:
    p = ctx.params
    if ctx.selected_day is None or ctx.selected_day.uncertainty <= p.uncertainty_threshold:
        return []
    return [InfluenceCard(
        title="High Uncertainty",
        value=f"{round_half_up(ctx.selected_day.uncertainty)}% range",
        impact=Impact.NEGATIVE,
        description="Large prediction range indicates unstable patterns",
        weight=p.uncertainty_weight,
    )]


def recovery_card(ctx: InfluenceContext) -> List[InfluenceCard]:
    p = ctx.params
    if len(ctx.history) < 2:
        return []
    previous, latest = ctx.history[-2], ctx.history[-1]
    drop = previous - latest
    if drop <= p.recovery_drop:
        return []
    return [InfluenceCard(
        title="Recovery Momentum",
        value=f"-{round_half_up(drop)}%",
        impact=Impact.POSITIVE,
        description="Recent improvement suggests continued recovery",
        weight=p.recovery_weight,
    )]


INFLUENCE_RULES: tuple[Callable[[InfluenceContext], List[InfluenceCard]], ...] = (
    current_level_card,
    epc_cards,
    trend_card,
    calendar_cards,
    confidence_card,
    uncertainty_card,
    recovery_card,
)


# ---------------------------------------------------------------------------
# Ranking
# ---------------------------------------------------------------------------

def _confidence_score(confidence) -> int:
    if isinstance(confidence, ForecastConfidence):
        return confidence.score
    if isinstance(confidence, dict):
        return int(confidence["score"])
    return int(confidence)


def rank_influences(
    scores: Optional[EPCScores],
    current_value: float,
    confidence,
    history: Sequence[float],
    day_offset: int = 0,
    selected_day: Optional[ForecastDay] = None,
    cfg: CadenceConfig | None = None,
) -> List[InfluenceCard]:
    """
    Run every rule and keep the heaviest cards.

    `confidence` may be a ForecastConfidence, a mapping with a "score" key,
    or a bare score. Without EPC scores there is nothing to explain, so a
    single "Limited Data" card is returned.
    """
    cfg = cfg or CadenceConfig()
    p = cfg.influence

    if scores is None:
        return [InfluenceCard(
            title="Limited Data",
            value="Insufficient",
            impact=Impact.NEUTRAL,
            description="Need more EPC assessments for accurate forecasting",
            weight=0,
        )]

    ctx = InfluenceContext(
        scores=scores,
        current_value=current_value,
        confidence_score=_confidence_score(confidence),
        history=list(history),
        day_offset=day_offset,
        selected_day=selected_day,
        params=p,
        winter_months=cfg.calendar.winter_months,
    )

    candidates: List[InfluenceCard] = []
    for rule in INFLUENCE_RULES:
        candidates.extend(rule(ctx))

    candidates.sort(key=lambda card: card.weight, reverse=True)
    return candidates[: p.max_cards]
