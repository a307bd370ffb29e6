import logging
import threading
import time
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timezone

from atbat_predictor.domain.errors import SyncError
from atbat_predictor.domain.play import Game
from atbat_predictor.domain.sync_log import GameSnapshot, SyncLog, SyncPassType, SyncTrigger
from atbat_predictor.repos.protocols import GameStateRepo, SyncLogRepo
from atbat_predictor.resolution.orchestrator import ResolutionOrchestrator
from atbat_predictor.sources.protocols import GameSource

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 10.0


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def snapshot_of(game: Game, updated_at: str) -> GameSnapshot:
    current = game.current_play()
    if current is not None:
        current_index: int | None = current.at_bat_index
    else:
        completed = game.completed_plays()
        current_index = completed[-1].at_bat_index if completed else None
    return GameSnapshot(
        game_pk=game.game_pk,
        is_live=game.is_live,
        abstract_state=game.status.abstract_state,
        detailed_state=game.status.detailed_state,
        current_at_bat_index=current_index,
        play_count=len(game.plays),
        updated_at=updated_at,
    )


class SyncScheduler:
    """Runs sync passes on a fixed interval and on demand.

    Only one pass runs at a time; a tick or trigger arriving while a pass is
    in flight is skipped, not queued. Every pass that runs is recorded in the
    sync log, and no failure stops the background loop.
    """

    def __init__(
        self,
        source: GameSource,
        orchestrator: ResolutionOrchestrator,
        sync_log_repo: SyncLogRepo,
        game_state_repo: GameStateRepo,
        *,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")
        self._source = source
        self._orchestrator = orchestrator
        self._sync_log_repo = sync_log_repo
        self._game_state_repo = game_state_repo
        self._interval = interval_seconds
        self._clock = clock
        self._pass_lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def trigger(self) -> SyncLog | None:
        return self.run_pass(SyncTrigger.MANUAL)

    def run_pass(self, trigger: SyncTrigger) -> SyncLog | None:
        """Run one pass unless another is in flight. Returns the recorded log, or None when skipped."""
        if not self._pass_lock.acquire(blocking=False):
            logger.info("Sync pass already in progress; skipping %s trigger", trigger.value)
            return None
        try:
            return self._run(trigger)
        finally:
            self._pass_lock.release()

    def start(self) -> None:
        if self.is_running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="atbat-sync", daemon=True)
        self._thread.start()
        logger.info("Sync scheduler started (every %.1fs)", self._interval)

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("Sync scheduler stopped")

    def _loop(self) -> None:
        while not self._stop.is_set():
            try:
                self.run_pass(SyncTrigger.PERIODIC)
            except Exception:
                logger.exception("Unexpected error in sync pass")
            self._stop.wait(self._interval)

    def _run(self, trigger: SyncTrigger) -> SyncLog:
        started_at = self._clock().isoformat()
        t0 = time.perf_counter()

        def record(
            pass_type: SyncPassType,
            status: str,
            *,
            game_pk: int | None = None,
            predictions_resolved: int = 0,
            points_awarded: int = 0,
            error_message: str | None = None,
        ) -> SyncLog:
            log = SyncLog(
                trigger=trigger,
                pass_type=pass_type,
                status=status,
                started_at=started_at,
                finished_at=self._clock().isoformat(),
                duration_ms=int((time.perf_counter() - t0) * 1000),
                game_pk=game_pk,
                predictions_resolved=predictions_resolved,
                points_awarded=points_awarded,
                error_message=error_message,
            )
            try:
                log_id = self._sync_log_repo.insert(log)
            except Exception as exc:
                logger.error("Failed to record sync pass: %s", exc)
                return log
            return replace(log, id=log_id)

        try:
            game = self._source.fetch_current_game()
        except Exception as exc:
            error = SyncError(message=f"fetch failed: {exc}", stage="fetch")
            logger.error("Game fetch failed (%s sync): %s", trigger.value, exc)
            return record(SyncPassType.GAME_STATE, "error", error_message=error.message)

        if game is None:
            logger.debug("No current game")
            return record(SyncPassType.GAME_STATE, "success")

        snapshot_error = self._store_snapshot(game)
        if not game.is_live:
            if snapshot_error is not None:
                return record(
                    SyncPassType.GAME_STATE, "error", game_pk=game.game_pk, error_message=snapshot_error.message
                )
            return record(SyncPassType.GAME_STATE, "success", game_pk=game.game_pk)

        summary = self._orchestrator.resolve_all_completed(game)
        messages = [e.message for e in summary.errors]
        if snapshot_error is not None:
            messages.insert(0, snapshot_error.message)
        if summary.predictions_resolved:
            logger.info(
                "Sync resolved %d prediction(s) for game %d (%d points)",
                summary.predictions_resolved,
                game.game_pk,
                summary.points_awarded,
            )
        if messages:
            logger.error("Sync pass for game %d finished with %d error(s)", game.game_pk, len(messages))
        return record(
            SyncPassType.LIVE_RESOLUTION,
            "error" if messages else "success",
            game_pk=game.game_pk,
            predictions_resolved=summary.predictions_resolved,
            points_awarded=summary.points_awarded,
            error_message="; ".join(messages) or None,
        )

    def _store_snapshot(self, game: Game) -> SyncError | None:
        try:
            self._game_state_repo.upsert(snapshot_of(game, self._clock().isoformat()))
        except Exception as exc:
            logger.warning("Failed to cache state of game %d: %s", game.game_pk, exc)
            return SyncError(message=f"game state not cached: {exc}", stage="game_state", game_pk=game.game_pk)
        return None
