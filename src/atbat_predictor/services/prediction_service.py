import logging
from collections.abc import Callable
from datetime import datetime, timezone

from atbat_predictor.domain.outcome import (
    NON_SCORABLE_CATEGORIES,
    AtBatOutcome,
    OutcomeCategory,
    outcome_category,
)
from atbat_predictor.domain.play import Play
from atbat_predictor.domain.prediction import Prediction, PredictionStats
from atbat_predictor.exceptions import InvalidPredictionError, PredictionLockedError
from atbat_predictor.repos.protocols import PredictionRepo

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PredictionService:
    def __init__(
        self,
        prediction_repo: PredictionRepo,
        *,
        max_balls: int = 2,
        max_strikes: int = 2,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._repo = prediction_repo
        self._max_balls = max_balls
        self._max_strikes = max_strikes
        self._clock = clock

    def submit(
        self,
        user_id: str,
        game_pk: int,
        at_bat_index: int,
        outcome: AtBatOutcome | str,
        category: OutcomeCategory | str | None = None,
        *,
        play: Play | None = None,
    ) -> Prediction:
        """Record a user's prediction for an at-bat.

        When *play* (the at-bat as currently seen in the live feed) is given,
        the prediction is refused once the play has a result or its count has
        reached the ball/strike threshold. Raises InvalidPredictionError,
        PredictionLockedError, or PredictionConflictError for a duplicate.
        """
        predicted = _parse_outcome(outcome)
        outcome_cat = outcome_category(predicted)
        if outcome_cat in NON_SCORABLE_CATEGORIES:
            raise InvalidPredictionError(f"{predicted.value} cannot be predicted")

        predicted_category = _parse_category(category) if category is not None else outcome_cat
        if predicted_category in NON_SCORABLE_CATEGORIES:
            raise InvalidPredictionError(f"category {predicted_category.value} cannot be predicted")
        if predicted_category != outcome_cat:
            raise InvalidPredictionError(
                f"{predicted.value} is in category {outcome_cat.value}, not {predicted_category.value}"
            )

        if play is not None:
            if play.at_bat_index != at_bat_index:
                raise InvalidPredictionError(
                    f"play {play.at_bat_index} does not match at-bat {at_bat_index}"
                )
            if play.is_completed:
                raise PredictionLockedError(game_pk, at_bat_index, "at-bat already completed")
            if play.count.is_too_advanced(self._max_balls, self._max_strikes):
                raise PredictionLockedError(game_pk, at_bat_index, f"count is {play.count}")

        prediction = Prediction(
            user_id=user_id,
            game_pk=game_pk,
            at_bat_index=at_bat_index,
            outcome=predicted,
            category=predicted_category,
            created_at=self._clock().isoformat(),
        )
        prediction_id = self._repo.insert(prediction)
        logger.info(
            "User %s predicted %s for game %d at-bat %d", user_id, predicted.value, game_pk, at_bat_index
        )
        stored = self._repo.get_by_id(prediction_id)
        return stored if stored is not None else prediction

    def user_stats(self, user_id: str) -> PredictionStats:
        resolved = [p for p in self._repo.get_by_user(user_id) if p.is_resolved and not p.is_void]
        resolved.sort(key=lambda p: (p.resolved_at or "", p.game_pk, p.at_bat_index))

        correct = exact = 0
        run = best = 0
        for prediction in resolved:
            if prediction.is_correct:
                correct += 1
                run += 1
                best = max(best, run)
            else:
                run = 0
            if prediction.is_exact:
                exact += 1

        total = len(resolved)
        return PredictionStats(
            total=total,
            correct=correct,
            exact=exact,
            category_only=correct - exact,
            accuracy=round(correct / total * 100, 1) if total else 0.0,
            current_streak=run,
            best_streak=best,
            total_points=sum(p.points_earned for p in resolved),
        )


def _parse_outcome(value: AtBatOutcome | str) -> AtBatOutcome:
    try:
        return AtBatOutcome(value)
    except ValueError:
        raise InvalidPredictionError(f"Unknown outcome: {value}") from None


def _parse_category(value: OutcomeCategory | str) -> OutcomeCategory:
    try:
        return OutcomeCategory(value)
    except ValueError:
        raise InvalidPredictionError(f"Unknown category: {value}") from None
