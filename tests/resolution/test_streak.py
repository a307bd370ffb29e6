from dataclasses import replace

import pytest

from atbat_predictor.domain.outcome import AtBatOutcome
from atbat_predictor.domain.prediction import Prediction
from atbat_predictor.resolution.streak import StreakTracker
from tests.fakes.repos import FakePredictionRepo
from tests.helpers import make_prediction


def _resolved(at_bat_index: int, *, correct: bool, void: bool = False, user_id: str = "alice") -> Prediction:
    return replace(
        make_prediction(user_id, at_bat_index=at_bat_index),
        actual_outcome=AtBatOutcome.SINGLE,
        is_correct=correct and not void,
        is_void=void,
        resolved_at=f"2026-07-04T18:{at_bat_index:02d}:00.000000+00:00",
    )


class TestStreakTracker:
    def test_no_history(self) -> None:
        assert StreakTracker(FakePredictionRepo()).current_streak("alice") == 0

    def test_counts_from_most_recent(self) -> None:
        repo = FakePredictionRepo(
            [
                _resolved(0, correct=True),
                _resolved(1, correct=False),
                _resolved(2, correct=True),
                _resolved(3, correct=True),
            ]
        )
        assert StreakTracker(repo).current_streak("alice") == 2

    def test_latest_miss_resets(self) -> None:
        repo = FakePredictionRepo([_resolved(0, correct=True), _resolved(1, correct=False)])
        assert StreakTracker(repo).current_streak("alice") == 0

    def test_void_rows_are_skipped(self) -> None:
        repo = FakePredictionRepo(
            [_resolved(0, correct=True), _resolved(1, correct=True, void=True), _resolved(2, correct=True)]
        )
        assert StreakTracker(repo).current_streak("alice") == 2

    def test_unresolved_rows_ignored(self) -> None:
        repo = FakePredictionRepo([_resolved(0, correct=True), make_prediction("alice", at_bat_index=1)])
        assert StreakTracker(repo).current_streak("alice") == 1

    def test_other_users_ignored(self) -> None:
        repo = FakePredictionRepo([_resolved(0, correct=True), _resolved(1, correct=False, user_id="bob")])
        assert StreakTracker(repo).current_streak("alice") == 1

    def test_streak_capped_by_window(self) -> None:
        repo = FakePredictionRepo([_resolved(i, correct=True) for i in range(30)])
        assert StreakTracker(repo, window=25).current_streak("alice") == 25

    def test_window_below_minimum_rejected(self) -> None:
        with pytest.raises(ValueError, match="at least 20"):
            StreakTracker(FakePredictionRepo(), window=10)
