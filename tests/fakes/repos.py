import threading
from collections.abc import Sequence
from dataclasses import replace

from atbat_predictor.domain.play import Game
from atbat_predictor.domain.prediction import Prediction, Resolution
from atbat_predictor.domain.sync_log import GameSnapshot, ResolutionLog, SyncLog
from atbat_predictor.repos.errors import PredictionConflictError


def _apply(prediction: Prediction, resolution: Resolution) -> Prediction:
    return replace(
        prediction,
        actual_outcome=resolution.actual_outcome,
        actual_category=resolution.actual_category,
        is_exact=resolution.is_exact,
        is_category_correct=resolution.is_category_correct,
        is_correct=resolution.is_correct,
        is_void=resolution.is_void,
        points_earned=resolution.points_earned,
        streak_count=resolution.streak_count,
        streak_bonus=resolution.streak_bonus,
        resolved_at=resolution.resolved_at,
    )


class FakePredictionRepo:
    """In-memory prediction store with the same conditional-write semantics as the SQLite repo."""

    def __init__(self, predictions: list[Prediction] | None = None) -> None:
        self._lock = threading.Lock()
        self._rows: dict[int, Prediction] = {}
        self._next_id = 1
        self.batch_error: Exception | None = None
        self.resolve_errors: list[Exception] = []
        self.read_error: Exception | None = None
        self.resolve_calls = 0
        self.batch_calls = 0
        for prediction in predictions or []:
            self.insert(prediction)

    def insert(self, prediction: Prediction) -> int:
        with self._lock:
            for row in self._rows.values():
                if (row.user_id, row.game_pk, row.at_bat_index) == (
                    prediction.user_id,
                    prediction.game_pk,
                    prediction.at_bat_index,
                ):
                    raise PredictionConflictError(prediction.user_id, prediction.game_pk, prediction.at_bat_index)
            prediction_id = prediction.id if prediction.id is not None else self._next_id
            self._next_id = max(self._next_id, prediction_id) + 1
            self._rows[prediction_id] = replace(prediction, id=prediction_id)
            return prediction_id

    def get_by_id(self, prediction_id: int) -> Prediction | None:
        with self._lock:
            return self._rows.get(prediction_id)

    def get_by_at_bat(self, game_pk: int, at_bat_index: int) -> list[Prediction]:
        if self.read_error is not None:
            raise self.read_error
        with self._lock:
            return [p for p in self._rows.values() if p.game_pk == game_pk and p.at_bat_index == at_bat_index]

    def get_for_user_at_bat(self, user_id: str, game_pk: int, at_bat_index: int) -> Prediction | None:
        with self._lock:
            return next(
                (
                    p
                    for p in self._rows.values()
                    if p.user_id == user_id and p.game_pk == game_pk and p.at_bat_index == at_bat_index
                ),
                None,
            )

    def get_by_user(self, user_id: str, game_pk: int | None = None) -> list[Prediction]:
        with self._lock:
            rows = [p for p in self._rows.values() if p.user_id == user_id]
        if game_pk is not None:
            rows = [p for p in rows if p.game_pk == game_pk]
        return sorted(rows, key=lambda p: (p.game_pk, p.at_bat_index))

    def get_recent_resolved(self, user_id: str, limit: int = 20) -> list[Prediction]:
        with self._lock:
            rows = [p for p in self._rows.values() if p.user_id == user_id and p.resolved_at is not None]
        rows.sort(key=lambda p: (p.resolved_at or "", p.game_pk, p.at_bat_index), reverse=True)
        return rows[:limit]

    def get_resolved_at_bat_indices(self, game_pk: int) -> set[int]:
        with self._lock:
            by_index: dict[int, list[Prediction]] = {}
            for p in self._rows.values():
                if p.game_pk == game_pk:
                    by_index.setdefault(p.at_bat_index, []).append(p)
        return {idx for idx, rows in by_index.items() if all(p.is_resolved for p in rows)}

    def resolve(self, resolution: Resolution) -> bool:
        self.resolve_calls += 1
        if self.resolve_errors:
            raise self.resolve_errors.pop(0)
        with self._lock:
            return self._write(resolution)

    def resolve_batch(self, resolutions: Sequence[Resolution]) -> set[int]:
        self.batch_calls += 1
        if self.batch_error is not None:
            raise self.batch_error
        with self._lock:
            return {r.prediction_id for r in resolutions if self._write(r)}

    def _write(self, resolution: Resolution) -> bool:
        current = self._rows.get(resolution.prediction_id)
        if current is None or current.resolved_at is not None or current.at_bat_index != resolution.at_bat_index:
            return False
        self._rows[resolution.prediction_id] = _apply(current, resolution)
        return True

    def all(self) -> list[Prediction]:
        with self._lock:
            return sorted(self._rows.values(), key=lambda p: p.id or 0)


class FakeSyncLogRepo:
    def __init__(self) -> None:
        self.logs: list[SyncLog] = []
        self.error: Exception | None = None

    def insert(self, log: SyncLog) -> int:
        if self.error is not None:
            raise self.error
        self.logs.append(replace(log, id=len(self.logs) + 1))
        return len(self.logs)

    def get_recent(self, limit: int = 20) -> list[SyncLog]:
        return list(reversed(self.logs))[:limit]


class FakeResolutionLogRepo:
    def __init__(self) -> None:
        self.logs: list[ResolutionLog] = []

    def insert(self, log: ResolutionLog) -> int:
        self.logs.append(replace(log, id=len(self.logs) + 1))
        return len(self.logs)

    def get_by_game(self, game_pk: int) -> list[ResolutionLog]:
        return [log for log in self.logs if log.game_pk == game_pk]


class FakeGameStateRepo:
    def __init__(self) -> None:
        self.snapshots: dict[int, GameSnapshot] = {}
        self.error: Exception | None = None

    def upsert(self, snapshot: GameSnapshot) -> None:
        if self.error is not None:
            raise self.error
        self.snapshots[snapshot.game_pk] = snapshot

    def get(self, game_pk: int) -> GameSnapshot | None:
        return self.snapshots.get(game_pk)

    def get_latest(self) -> GameSnapshot | None:
        if not self.snapshots:
            return None
        return max(self.snapshots.values(), key=lambda s: s.updated_at)


class FakeGameSource:
    def __init__(self, game: Game | None = None, error: Exception | None = None) -> None:
        self.game = game
        self.error = error
        self.calls = 0

    def fetch_current_game(self) -> Game | None:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.game

    def fetch_game(self, game_pk: int) -> Game:
        self.calls += 1
        if self.error is not None:
            raise self.error
        if self.game is None or self.game.game_pk != game_pk:
            raise ValueError(f"unknown game {game_pk}")
        return self.game


class RecordingNotifier:
    def __init__(self, error: Exception | None = None) -> None:
        self.events: list[tuple[int, int]] = []
        self.error = error

    def predictions_changed(self, game_pk: int, at_bat_index: int) -> None:
        if self.error is not None:
            raise self.error
        self.events.append((game_pk, at_bat_index))
