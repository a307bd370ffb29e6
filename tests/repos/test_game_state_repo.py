from dataclasses import replace

from atbat_predictor.db.pool import ConnectionPool
from atbat_predictor.domain.sync_log import GameSnapshot
from atbat_predictor.repos.game_state_repo import SqliteGameStateRepo

SNAPSHOT = GameSnapshot(
    game_pk=745000,
    is_live=True,
    abstract_state="Live",
    detailed_state="In Progress",
    current_at_bat_index=12,
    play_count=13,
    updated_at="2026-07-04T18:00:00+00:00",
)


class TestSqliteGameStateRepo:
    def test_upsert_and_get(self, pool: ConnectionPool) -> None:
        repo = SqliteGameStateRepo(pool)
        repo.upsert(SNAPSHOT)
        assert repo.get(745000) == SNAPSHOT

    def test_upsert_replaces_existing(self, pool: ConnectionPool) -> None:
        repo = SqliteGameStateRepo(pool)
        repo.upsert(SNAPSHOT)
        final = replace(
            SNAPSHOT,
            is_live=False,
            abstract_state="Final",
            detailed_state="Final",
            play_count=78,
            updated_at="2026-07-04T21:10:00+00:00",
        )
        repo.upsert(final)
        assert repo.get(745000) == final

    def test_get_missing(self, pool: ConnectionPool) -> None:
        assert SqliteGameStateRepo(pool).get(1) is None

    def test_get_latest(self, pool: ConnectionPool) -> None:
        repo = SqliteGameStateRepo(pool)
        assert repo.get_latest() is None
        repo.upsert(SNAPSHOT)
        later = replace(SNAPSHOT, game_pk=745001, updated_at="2026-07-05T18:00:00+00:00")
        repo.upsert(later)
        assert repo.get_latest() == later
