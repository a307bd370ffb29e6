import math

from atbat_predictor.domain.outcome import AtBatOutcome, OutcomeCategory, is_scorable, outcome_category
from atbat_predictor.domain.prediction import PointsBreakdown

_A = AtBatOutcome
_C = OutcomeCategory

_DEFAULT_BASE_POINTS = 1
_DEFAULT_MULTIPLIER = 1.0

# Rarer outcomes score higher.
BASE_POINTS: dict[AtBatOutcome, int] = {
    _A.HOME_RUN: 15,
    _A.TRIPLE: 12,
    _A.DOUBLE: 8,
    _A.SINGLE: 4,
    _A.WALK: 3,
    _A.INTENT_WALK: 3,
    _A.STRIKEOUT: 2,
    _A.STRIKE_OUT: 2,
    _A.STRIKEOUT_DOUBLE_PLAY: 2,
    _A.STRIKEOUT_TRIPLE_PLAY: 2,
    _A.HIT_BY_PITCH: 2,
}

RISK_MULTIPLIERS: dict[AtBatOutcome, float] = {
    _A.HOME_RUN: 1.5,
    _A.TRIPLE: 1.5,
    _A.DOUBLE: 1.25,
}

CATEGORY_POINTS: dict[OutcomeCategory, int] = {
    _C.HIT: 3,
    _C.WALK: 2,
    _C.STRIKEOUT: 2,
    _C.SACRIFICE: 2,
    _C.HIT_BY_PITCH: 2,
    _C.OUT: 1,
    _C.ERROR: 1,
    _C.BASERUNNING: 0,
    _C.ADMINISTRATIVE: 0,
    _C.UNKNOWN: 0,
}

# (minimum streak, bonus), highest threshold first.
STREAK_BONUS_STEPS: tuple[tuple[int, int], ...] = (
    (10, 10),
    (7, 7),
    (5, 5),
    (3, 3),
    (2, 1),
)


def base_points(outcome: AtBatOutcome) -> int:
    if not is_scorable(outcome):
        return 0
    return BASE_POINTS.get(outcome, _DEFAULT_BASE_POINTS)


def risk_multiplier(outcome: AtBatOutcome) -> float:
    return RISK_MULTIPLIERS.get(outcome, _DEFAULT_MULTIPLIER)


def category_points(category: OutcomeCategory) -> int:
    return CATEGORY_POINTS[category]


def streak_bonus(streak: int) -> int:
    """Bonus for a correct prediction that brings the user's streak to ``streak``."""
    for minimum, bonus in STREAK_BONUS_STEPS:
        if streak >= minimum:
            return bonus
    return 0


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def exact_points(outcome: AtBatOutcome) -> int:
    return _round_half_up(base_points(outcome) * risk_multiplier(outcome))


def score(
    predicted_outcome: AtBatOutcome,
    predicted_category: OutcomeCategory | None,
    actual_outcome: AtBatOutcome,
    current_streak: int = 0,
) -> PointsBreakdown:
    """Score one prediction against the actual outcome.

    ``current_streak`` is the user's streak before this prediction. Correct
    predictions (exact or category) earn a streak bonus for the streak they
    extend to; misses earn nothing.
    """
    actual_category = outcome_category(actual_outcome)
    is_exact = predicted_outcome == actual_outcome
    is_category_correct = predicted_category is not None and predicted_category == actual_category

    if is_exact:
        points = exact_points(actual_outcome)
    elif is_category_correct:
        points = category_points(actual_category)
    else:
        points = 0

    bonus = 0
    if is_exact or is_category_correct:
        bonus = streak_bonus(max(current_streak, 0) + 1)

    return PointsBreakdown(
        points=points,
        is_exact=is_exact,
        is_category_correct=is_category_correct,
        streak_bonus=bonus,
    )
