import sqlite3

from atbat_predictor.db.pool import ConnectionPool
from atbat_predictor.domain.sync_log import SyncLog, SyncPassType, SyncTrigger


class SqliteSyncLogRepo:
    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def insert(self, log: SyncLog) -> int:
        with self._pool.connection() as conn:
            cursor = conn.execute(
                """INSERT INTO sync_log
                       (trigger, pass_type, game_pk, status, started_at, finished_at,
                        duration_ms, predictions_resolved, points_awarded, error_message)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    log.trigger.value,
                    log.pass_type.value,
                    log.game_pk,
                    log.status,
                    log.started_at,
                    log.finished_at,
                    log.duration_ms,
                    log.predictions_resolved,
                    log.points_awarded,
                    log.error_message,
                ),
            )
            conn.commit()
            return cursor.lastrowid  # type: ignore[return-value]

    def get_recent(self, limit: int = 20) -> list[SyncLog]:
        with self._pool.connection() as conn:
            rows = conn.execute("SELECT * FROM sync_log ORDER BY id DESC LIMIT ?", (limit,)).fetchall()
        return [self._row_to_log(row) for row in rows]

    @staticmethod
    def _row_to_log(row: sqlite3.Row) -> SyncLog:
        return SyncLog(
            id=row["id"],
            trigger=SyncTrigger(row["trigger"]),
            pass_type=SyncPassType(row["pass_type"]),
            game_pk=row["game_pk"],
            status=row["status"],
            started_at=row["started_at"],
            finished_at=row["finished_at"],
            duration_ms=row["duration_ms"],
            predictions_resolved=row["predictions_resolved"],
            points_awarded=row["points_awarded"],
            error_message=row["error_message"],
        )
