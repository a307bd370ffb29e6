from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from atbat_predictor.config import AppSettings
from atbat_predictor.db.pool import ConnectionPool
from atbat_predictor.notifications.notifiers import LoggingNotifier, WebhookNotifier
from atbat_predictor.notifications.protocols import NotificationSink
from atbat_predictor.repos.game_state_repo import SqliteGameStateRepo
from atbat_predictor.repos.prediction_repo import SqlitePredictionRepo
from atbat_predictor.repos.resolution_log_repo import SqliteResolutionLogRepo
from atbat_predictor.repos.sync_log_repo import SqliteSyncLogRepo
from atbat_predictor.resolution.cache import ResolutionCache
from atbat_predictor.resolution.classifier import OutcomeClassifier, UnmappedEventCounter
from atbat_predictor.resolution.orchestrator import ResolutionOrchestrator
from atbat_predictor.resolution.streak import StreakTracker
from atbat_predictor.services.prediction_service import PredictionService
from atbat_predictor.sources.mlb_game_source import MLBGameSource
from atbat_predictor.sync.scheduler import SyncScheduler


@dataclass(frozen=True)
class AppContext:
    settings: AppSettings
    pool: ConnectionPool
    prediction_repo: SqlitePredictionRepo
    sync_log_repo: SqliteSyncLogRepo
    resolution_log_repo: SqliteResolutionLogRepo
    game_state_repo: SqliteGameStateRepo
    source: MLBGameSource
    orchestrator: ResolutionOrchestrator
    scheduler: SyncScheduler
    predictions: PredictionService


def build_notifier(settings: AppSettings) -> NotificationSink:
    if settings.webhook_url:
        return WebhookNotifier(settings.webhook_url)
    return LoggingNotifier()


@contextmanager
def build_app_context(settings: AppSettings) -> Iterator[AppContext]:
    """Composition root shared by every CLI command."""
    pool = ConnectionPool(settings.db_path, size=settings.db_pool_size, checkout_timeout=settings.db_timeout)
    source = MLBGameSource(
        base_url=settings.mlb_base_url,
        team_id=settings.mlb_team_id,
        timeout=settings.mlb_timeout,
    )
    notifier = build_notifier(settings)
    try:
        prediction_repo = SqlitePredictionRepo(pool)
        resolution_log_repo = SqliteResolutionLogRepo(pool)
        sync_log_repo = SqliteSyncLogRepo(pool)
        game_state_repo = SqliteGameStateRepo(pool)
        orchestrator = ResolutionOrchestrator(
            prediction_repo,
            classifier=OutcomeClassifier(UnmappedEventCounter()),
            streaks=StreakTracker(prediction_repo, window=settings.streak_window),
            cache=ResolutionCache(),
            notifier=notifier,
            resolution_log_repo=resolution_log_repo,
            retry_attempts=settings.retry_attempts,
            retry_base_delay=settings.retry_base_delay,
        )
        yield AppContext(
            settings=settings,
            pool=pool,
            prediction_repo=prediction_repo,
            sync_log_repo=sync_log_repo,
            resolution_log_repo=resolution_log_repo,
            game_state_repo=game_state_repo,
            source=source,
            orchestrator=orchestrator,
            scheduler=SyncScheduler(
                source,
                orchestrator,
                sync_log_repo,
                game_state_repo,
                interval_seconds=settings.sync_interval_seconds,
            ),
            predictions=PredictionService(
                prediction_repo,
                max_balls=settings.max_balls,
                max_strikes=settings.max_strikes,
            ),
        )
    finally:
        if isinstance(notifier, WebhookNotifier):
            notifier.close()
        source.close()
        pool.close_all()
