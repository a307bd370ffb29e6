from atbat_predictor.repos.protocols import PredictionRepo

MIN_STREAK_WINDOW = 20


class StreakTracker:
    """Counts a user's consecutive correct predictions, most recent first."""

    def __init__(self, prediction_repo: PredictionRepo, *, window: int = MIN_STREAK_WINDOW) -> None:
        if window < MIN_STREAK_WINDOW:
            raise ValueError(f"streak window must be at least {MIN_STREAK_WINDOW}, got {window}")
        self._repo = prediction_repo
        self._window = window

    def current_streak(self, user_id: str) -> int:
        history = self._repo.get_recent_resolved(user_id, limit=self._window)
        streak = 0
        for prediction in history:
            if prediction.is_void:
                continue
            if not prediction.is_correct:
                break
            streak += 1
        return streak
