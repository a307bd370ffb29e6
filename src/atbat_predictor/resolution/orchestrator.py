"""Resolve pending predictions against completed plays, exactly once.

Resolution is triggered from many places at once (the sync loop, manual
triggers, direct calls), so every step is safe to repeat: the in-process
cache skips at-bats already known resolved, each at-bat is re-checked
against the store before work is done, and every write is conditional on
``resolved_at`` still being unset. Whichever writer lands first wins; later
writers see the row as already resolved.
"""

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone

from tenacity import RetryCallState, Retrying, stop_after_attempt, wait_exponential

from atbat_predictor.domain.errors import ConsistencyError, ResolutionError, StorageError
from atbat_predictor.domain.outcome import AtBatOutcome, is_scorable, outcome_category
from atbat_predictor.domain.play import Game
from atbat_predictor.domain.prediction import Prediction, Resolution
from atbat_predictor.domain.result import Err, Ok, Result
from atbat_predictor.domain.sync_log import ResolutionLog
from atbat_predictor.notifications.protocols import NotificationSink
from atbat_predictor.repos.protocols import PredictionRepo, ResolutionLogRepo
from atbat_predictor.resolution.cache import ResolutionCache
from atbat_predictor.resolution.classifier import OutcomeClassifier
from atbat_predictor.resolution.scoring import score
from atbat_predictor.resolution.streak import StreakTracker

logger = logging.getLogger(__name__)

DEFAULT_RETRY_ATTEMPTS = 3
DEFAULT_RETRY_BASE_DELAY = 0.5


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AtBatResolution:
    game_pk: int
    at_bat_index: int
    actual_outcome: AtBatOutcome
    resolved: int = 0
    already_resolved: int = 0
    failed: tuple[int, ...] = ()
    points_awarded: int = 0
    is_void: bool = False

    @property
    def is_complete(self) -> bool:
        return not self.failed


@dataclass(frozen=True)
class ResolutionSummary:
    game_pk: int
    at_bats_checked: int = 0
    at_bats_resolved: int = 0
    predictions_resolved: int = 0
    points_awarded: int = 0
    unclassified: tuple[int, ...] = ()
    errors: tuple[ResolutionError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors


class ResolutionOrchestrator:
    def __init__(
        self,
        prediction_repo: PredictionRepo,
        *,
        classifier: OutcomeClassifier | None = None,
        streaks: StreakTracker | None = None,
        cache: ResolutionCache | None = None,
        notifier: NotificationSink | None = None,
        resolution_log_repo: ResolutionLogRepo | None = None,
        retry_attempts: int = DEFAULT_RETRY_ATTEMPTS,
        retry_base_delay: float = DEFAULT_RETRY_BASE_DELAY,
        clock: Callable[[], datetime] = _utc_now,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if retry_attempts < 1:
            raise ValueError(f"retry_attempts must be at least 1, got {retry_attempts}")
        self._repo = prediction_repo
        self._classifier = classifier or OutcomeClassifier()
        self._streaks = streaks or StreakTracker(prediction_repo)
        self._cache = cache if cache is not None else ResolutionCache()
        self._notifier = notifier
        self._resolution_log_repo = resolution_log_repo
        self._retry_attempts = retry_attempts
        self._retry_base_delay = retry_base_delay
        self._clock = clock
        self._sleep = sleep

    @property
    def cache(self) -> ResolutionCache:
        return self._cache

    @property
    def classifier(self) -> OutcomeClassifier:
        return self._classifier

    def resolve_at_bat(
        self, game_pk: int, at_bat_index: int, actual_outcome: AtBatOutcome
    ) -> Result[AtBatResolution, ResolutionError]:
        t0 = time.perf_counter()
        try:
            predictions = self._repo.get_by_at_bat(game_pk, at_bat_index)
        except Exception as exc:
            logger.error("Failed to load predictions for game %d at-bat %d: %s", game_pk, at_bat_index, exc)
            return Err(StorageError(message=str(exc), game_pk=game_pk, at_bat_index=at_bat_index))

        mismatched = tuple(
            p.id for p in predictions if p.at_bat_index != at_bat_index or p.game_pk != game_pk
        )
        if mismatched:
            logger.critical(
                "Predictions %s returned for game %d at-bat %d belong to a different at-bat; nothing written",
                list(mismatched),
                game_pk,
                at_bat_index,
            )
            return Err(
                ConsistencyError(
                    message=f"{len(mismatched)} prediction(s) do not match at-bat {at_bat_index}",
                    game_pk=game_pk,
                    at_bat_index=at_bat_index,
                    mismatched_prediction_ids=mismatched,
                )
            )

        void = not is_scorable(actual_outcome)
        pending = [p for p in predictions if not p.is_resolved]
        if not pending:
            self._cache.mark(game_pk, at_bat_index)
            return Ok(
                AtBatResolution(
                    game_pk=game_pk,
                    at_bat_index=at_bat_index,
                    actual_outcome=actual_outcome,
                    already_resolved=len(predictions),
                    is_void=void,
                )
            )

        resolved_at = self._clock().isoformat(timespec="microseconds")
        try:
            resolutions = [self._build_resolution(p, actual_outcome, resolved_at) for p in pending]
        except Exception as exc:
            logger.error("Failed to read streaks for game %d at-bat %d: %s", game_pk, at_bat_index, exc)
            return Err(StorageError(message=str(exc), game_pk=game_pk, at_bat_index=at_bat_index))

        written, failed = self._write(game_pk, at_bat_index, resolutions)
        points = sum(r.points_earned for r in resolutions if r.prediction_id in written)
        outcome = AtBatResolution(
            game_pk=game_pk,
            at_bat_index=at_bat_index,
            actual_outcome=actual_outcome,
            resolved=len(written),
            already_resolved=len(predictions) - len(written) - len(failed),
            failed=tuple(failed),
            points_awarded=points,
            is_void=void,
        )

        if not failed:
            self._cache.mark(game_pk, at_bat_index)
        if written:
            logger.info(
                "Resolved %d prediction(s) for game %d at-bat %d as %s (%d points)",
                len(written),
                game_pk,
                at_bat_index,
                actual_outcome.value,
                points,
            )
            self._notify(game_pk, at_bat_index)
            self._record(outcome, int((time.perf_counter() - t0) * 1000))
        return Ok(outcome)

    def resolve_all_completed(self, game: Game) -> ResolutionSummary:
        """Resolve every completed play of *game*, lowest at-bat index first.

        A completed at-bat with no predictions is cached like a resolved one, so
        a prediction stored for it afterwards (late insert, or one submitted
        without the live check) waits until the cache is cleared or the process
        restarts.
        """
        game_pk = game.game_pk
        self._warm(game_pk)

        checked = resolved_at_bats = predictions_resolved = points = 0
        unclassified: list[int] = []
        errors: list[ResolutionError] = []

        for play in game.completed_plays():
            idx = play.at_bat_index
            if self._cache.contains(game_pk, idx):
                continue
            checked += 1
            try:
                existing = self._repo.get_by_at_bat(game_pk, idx)
            except Exception as exc:
                logger.error("Failed to re-check game %d at-bat %d: %s", game_pk, idx, exc)
                errors.append(StorageError(message=str(exc), game_pk=game_pk, at_bat_index=idx))
                continue
            if all(p.is_resolved for p in existing):
                self._cache.mark(game_pk, idx)
                continue

            classification = self._classifier.classify(play.result, key=(game_pk, idx))
            if classification.outcome is None:
                logger.warning("Completed play %d of game %d has no classifiable result", idx, game_pk)
                unclassified.append(idx)
                continue

            match self.resolve_at_bat(game_pk, idx, classification.outcome):
                case Ok(AtBatResolution() as resolution):
                    if resolution.resolved:
                        resolved_at_bats += 1
                    predictions_resolved += resolution.resolved
                    points += resolution.points_awarded
                    if resolution.failed:
                        errors.append(
                            StorageError(
                                message=f"{len(resolution.failed)} prediction(s) left unresolved",
                                game_pk=game_pk,
                                at_bat_index=idx,
                            )
                        )
                case Err(error):
                    errors.append(error)

        return ResolutionSummary(
            game_pk=game_pk,
            at_bats_checked=checked,
            at_bats_resolved=resolved_at_bats,
            predictions_resolved=predictions_resolved,
            points_awarded=points,
            unclassified=tuple(unclassified),
            errors=tuple(errors),
        )

    def _warm(self, game_pk: int) -> None:
        if self._cache.is_warm(game_pk):
            return
        try:
            indices = self._repo.get_resolved_at_bat_indices(game_pk)
        except Exception as exc:
            # Stay cold; every completed at-bat gets re-checked instead.
            logger.warning("Could not warm resolution cache for game %d: %s", game_pk, exc)
            return
        self._cache.warm(game_pk, indices)
        logger.debug("Warmed resolution cache for game %d with %d at-bat(s)", game_pk, len(indices))

    def _build_resolution(self, prediction: Prediction, actual: AtBatOutcome, resolved_at: str) -> Resolution:
        assert prediction.id is not None
        current_streak = self._streaks.current_streak(prediction.user_id)
        actual_category = outcome_category(actual)
        if not is_scorable(actual):
            return Resolution(
                prediction_id=prediction.id,
                user_id=prediction.user_id,
                game_pk=prediction.game_pk,
                at_bat_index=prediction.at_bat_index,
                actual_outcome=actual,
                actual_category=actual_category,
                is_exact=False,
                is_category_correct=False,
                is_correct=False,
                points_earned=0,
                streak_count=current_streak,
                streak_bonus=0,
                resolved_at=resolved_at,
                is_void=True,
            )
        breakdown = score(prediction.outcome, prediction.category, actual, current_streak)
        return Resolution(
            prediction_id=prediction.id,
            user_id=prediction.user_id,
            game_pk=prediction.game_pk,
            at_bat_index=prediction.at_bat_index,
            actual_outcome=actual,
            actual_category=actual_category,
            is_exact=breakdown.is_exact,
            is_category_correct=breakdown.is_category_correct,
            is_correct=breakdown.is_correct,
            points_earned=breakdown.total,
            streak_count=current_streak + 1 if breakdown.is_correct else 0,
            streak_bonus=breakdown.streak_bonus,
            resolved_at=resolved_at,
        )

    def _write(
        self, game_pk: int, at_bat_index: int, resolutions: Sequence[Resolution]
    ) -> tuple[set[int], list[int]]:
        """Batch write, falling back to per-prediction writes. Returns (written ids, failed ids)."""
        try:
            return self._repo.resolve_batch(resolutions), []
        except Exception as exc:
            logger.warning(
                "Batch write failed for game %d at-bat %d, writing %d prediction(s) individually: %s",
                game_pk,
                at_bat_index,
                len(resolutions),
                exc,
            )

        written: set[int] = set()
        failed: list[int] = []
        for resolution in resolutions:
            try:
                if self._write_one(resolution):
                    written.add(resolution.prediction_id)
            except Exception as exc:
                logger.error(
                    "Giving up on prediction %d (game %d at-bat %d) after %d attempts: %s",
                    resolution.prediction_id,
                    game_pk,
                    at_bat_index,
                    self._retry_attempts,
                    exc,
                )
                failed.append(resolution.prediction_id)
        return written, failed

    def _write_one(self, resolution: Resolution) -> bool:
        retrying = Retrying(
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential(multiplier=self._retry_base_delay, exp_base=2),
            before_sleep=_log_retry,
            sleep=self._sleep,
            reraise=True,
        )
        for attempt in retrying:
            with attempt:
                current = self._repo.get_by_id(resolution.prediction_id)
                if current is None or current.is_resolved:
                    return False
                return self._repo.resolve(resolution)
        return False

    def _notify(self, game_pk: int, at_bat_index: int) -> None:
        if self._notifier is None:
            return
        try:
            self._notifier.predictions_changed(game_pk, at_bat_index)
        except Exception as exc:
            logger.warning("Notification failed for game %d at-bat %d: %s", game_pk, at_bat_index, exc)

    def _record(self, resolution: AtBatResolution, duration_ms: int) -> None:
        if self._resolution_log_repo is None:
            return
        log = ResolutionLog(
            game_pk=resolution.game_pk,
            at_bat_index=resolution.at_bat_index,
            outcome=resolution.actual_outcome.value,
            predictions_resolved=resolution.resolved,
            points_awarded=resolution.points_awarded,
            duration_ms=duration_ms,
            created_at=self._clock().isoformat(),
        )
        try:
            self._resolution_log_repo.insert(log)
        except Exception as exc:
            logger.warning(
                "Failed to record resolution log for game %d at-bat %d: %s", log.game_pk, log.at_bat_index, exc
            )


def _log_retry(retry_state: RetryCallState) -> None:
    logger.warning("Retrying resolution write (attempt %d): %s", retry_state.attempt_number, retry_state.outcome)
