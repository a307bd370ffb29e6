from dataclasses import dataclass
from enum import StrEnum


class SyncTrigger(StrEnum):
    PERIODIC = "periodic"
    MANUAL = "manual"


class SyncPassType(StrEnum):
    GAME_STATE = "game_state"
    LIVE_RESOLUTION = "live_resolution"


@dataclass(frozen=True)
class SyncLog:
    trigger: SyncTrigger
    pass_type: SyncPassType
    status: str
    started_at: str
    finished_at: str
    duration_ms: int
    game_pk: int | None = None
    predictions_resolved: int = 0
    points_awarded: int = 0
    error_message: str | None = None
    id: int | None = None


@dataclass(frozen=True)
class ResolutionLog:
    game_pk: int
    at_bat_index: int
    outcome: str
    predictions_resolved: int
    points_awarded: int
    duration_ms: int
    created_at: str
    id: int | None = None


@dataclass(frozen=True)
class GameSnapshot:
    game_pk: int
    is_live: bool
    abstract_state: str | None
    detailed_state: str | None
    current_at_bat_index: int | None
    play_count: int
    updated_at: str
