import sqlite3

from atbat_predictor.db.pool import ConnectionPool
from atbat_predictor.domain.sync_log import GameSnapshot


class SqliteGameStateRepo:
    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def upsert(self, snapshot: GameSnapshot) -> None:
        with self._pool.connection() as conn:
            conn.execute(
                """INSERT INTO game_state
                       (game_pk, is_live, abstract_state, detailed_state, current_at_bat_index,
                        play_count, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?)
                   ON CONFLICT(game_pk) DO UPDATE SET
                       is_live = excluded.is_live,
                       abstract_state = excluded.abstract_state,
                       detailed_state = excluded.detailed_state,
                       current_at_bat_index = excluded.current_at_bat_index,
                       play_count = excluded.play_count,
                       updated_at = excluded.updated_at""",
                (
                    snapshot.game_pk,
                    int(snapshot.is_live),
                    snapshot.abstract_state,
                    snapshot.detailed_state,
                    snapshot.current_at_bat_index,
                    snapshot.play_count,
                    snapshot.updated_at,
                ),
            )
            conn.commit()

    def get(self, game_pk: int) -> GameSnapshot | None:
        with self._pool.connection() as conn:
            row = conn.execute("SELECT * FROM game_state WHERE game_pk = ?", (game_pk,)).fetchone()
        return self._row_to_snapshot(row) if row else None

    def get_latest(self) -> GameSnapshot | None:
        with self._pool.connection() as conn:
            row = conn.execute("SELECT * FROM game_state ORDER BY updated_at DESC LIMIT 1").fetchone()
        return self._row_to_snapshot(row) if row else None

    @staticmethod
    def _row_to_snapshot(row: sqlite3.Row) -> GameSnapshot:
        return GameSnapshot(
            game_pk=row["game_pk"],
            is_live=bool(row["is_live"]),
            abstract_state=row["abstract_state"],
            detailed_state=row["detailed_state"],
            current_at_bat_index=row["current_at_bat_index"],
            play_count=row["play_count"],
            updated_at=row["updated_at"],
        )
