from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from atbat_predictor.domain.prediction import Prediction, Resolution
from atbat_predictor.domain.sync_log import GameSnapshot, ResolutionLog, SyncLog


@runtime_checkable
class PredictionRepo(Protocol):
    def insert(self, prediction: Prediction) -> int: ...

    def get_by_id(self, prediction_id: int) -> Prediction | None: ...

    def get_by_at_bat(self, game_pk: int, at_bat_index: int) -> list[Prediction]: ...

    def get_for_user_at_bat(self, user_id: str, game_pk: int, at_bat_index: int) -> Prediction | None: ...

    def get_by_user(self, user_id: str, game_pk: int | None = None) -> list[Prediction]: ...

    def get_recent_resolved(self, user_id: str, limit: int = 20) -> list[Prediction]: ...

    def get_resolved_at_bat_indices(self, game_pk: int) -> set[int]: ...

    def resolve(self, resolution: Resolution) -> bool: ...

    def resolve_batch(self, resolutions: Sequence[Resolution]) -> set[int]: ...


@runtime_checkable
class SyncLogRepo(Protocol):
    def insert(self, log: SyncLog) -> int: ...

    def get_recent(self, limit: int = 20) -> list[SyncLog]: ...


@runtime_checkable
class ResolutionLogRepo(Protocol):
    def insert(self, log: ResolutionLog) -> int: ...

    def get_by_game(self, game_pk: int) -> list[ResolutionLog]: ...


@runtime_checkable
class GameStateRepo(Protocol):
    def upsert(self, snapshot: GameSnapshot) -> None: ...

    def get(self, game_pk: int) -> GameSnapshot | None: ...

    def get_latest(self) -> GameSnapshot | None: ...
