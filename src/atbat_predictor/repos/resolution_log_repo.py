import sqlite3

from atbat_predictor.db.pool import ConnectionPool
from atbat_predictor.domain.sync_log import ResolutionLog


class SqliteResolutionLogRepo:
    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def insert(self, log: ResolutionLog) -> int:
        with self._pool.connection() as conn:
            cursor = conn.execute(
                """INSERT INTO resolution_log
                       (game_pk, at_bat_index, outcome, predictions_resolved, points_awarded,
                        duration_ms, created_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?)""",
                (
                    log.game_pk,
                    log.at_bat_index,
                    log.outcome,
                    log.predictions_resolved,
                    log.points_awarded,
                    log.duration_ms,
                    log.created_at,
                ),
            )
            conn.commit()
            return cursor.lastrowid  # type: ignore[return-value]

    def get_by_game(self, game_pk: int) -> list[ResolutionLog]:
        with self._pool.connection() as conn:
            rows = conn.execute(
                "SELECT * FROM resolution_log WHERE game_pk = ? ORDER BY at_bat_index, id",
                (game_pk,),
            ).fetchall()
        return [self._row_to_log(row) for row in rows]

    @staticmethod
    def _row_to_log(row: sqlite3.Row) -> ResolutionLog:
        return ResolutionLog(
            id=row["id"],
            game_pk=row["game_pk"],
            at_bat_index=row["at_bat_index"],
            outcome=row["outcome"],
            predictions_resolved=row["predictions_resolved"],
            points_awarded=row["points_awarded"],
            duration_ms=row["duration_ms"],
            created_at=row["created_at"],
        )
