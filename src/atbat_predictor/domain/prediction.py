from dataclasses import dataclass

from atbat_predictor.domain.outcome import AtBatOutcome, OutcomeCategory


@dataclass(frozen=True)
class Prediction:
    user_id: str
    game_pk: int
    at_bat_index: int
    outcome: AtBatOutcome
    created_at: str
    category: OutcomeCategory | None = None
    id: int | None = None
    actual_outcome: AtBatOutcome | None = None
    actual_category: OutcomeCategory | None = None
    is_exact: bool | None = None
    is_category_correct: bool | None = None
    is_correct: bool | None = None
    is_void: bool = False
    points_earned: int = 0
    streak_count: int = 0
    streak_bonus: int = 0
    resolved_at: str | None = None

    @property
    def is_resolved(self) -> bool:
        return self.resolved_at is not None


@dataclass(frozen=True)
class PointsBreakdown:
    points: int
    is_exact: bool
    is_category_correct: bool
    streak_bonus: int

    @property
    def is_correct(self) -> bool:
        return self.is_exact or self.is_category_correct

    @property
    def total(self) -> int:
        return self.points + self.streak_bonus


@dataclass(frozen=True)
class Resolution:
    """Resolution fields computed for one pending prediction."""

    prediction_id: int
    user_id: str
    game_pk: int
    at_bat_index: int
    actual_outcome: AtBatOutcome
    actual_category: OutcomeCategory
    is_exact: bool
    is_category_correct: bool
    is_correct: bool
    points_earned: int
    streak_count: int
    streak_bonus: int
    resolved_at: str
    is_void: bool = False


@dataclass(frozen=True)
class PredictionStats:
    total: int
    correct: int
    exact: int
    category_only: int
    accuracy: float
    current_streak: int
    best_streak: int
    total_points: int
