from dataclasses import dataclass


@dataclass(frozen=True)
class AtBatError:
    message: str


@dataclass(frozen=True)
class ResolutionError(AtBatError):
    game_pk: int
    at_bat_index: int


@dataclass(frozen=True)
class ConsistencyError(ResolutionError):
    """Predictions fetched for an at-bat carry a different at-bat index."""

    mismatched_prediction_ids: tuple[int | None, ...] = ()


@dataclass(frozen=True)
class StorageError(ResolutionError):
    pass


@dataclass(frozen=True)
class SyncError(AtBatError):
    stage: str
    game_pk: int | None = None
