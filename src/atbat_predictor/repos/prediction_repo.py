import sqlite3
from collections.abc import Sequence

from atbat_predictor.db.pool import ConnectionPool
from atbat_predictor.domain.outcome import AtBatOutcome, OutcomeCategory
from atbat_predictor.domain.prediction import Prediction, Resolution
from atbat_predictor.repos.errors import PredictionConflictError

_RESOLVE_SQL = """UPDATE at_bat_predictions
       SET actual_outcome = ?, actual_category = ?, is_exact = ?, is_category_correct = ?,
           is_correct = ?, is_void = ?, points_earned = ?, streak_count = ?, streak_bonus = ?,
           resolved_at = ?
     WHERE id = ? AND at_bat_index = ? AND resolved_at IS NULL"""


class SqlitePredictionRepo:
    """Prediction store. Resolution writes only touch rows whose ``resolved_at`` is still NULL."""

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def insert(self, prediction: Prediction) -> int:
        with self._pool.connection() as conn:
            try:
                cursor = conn.execute(
                    """INSERT INTO at_bat_predictions
                           (user_id, game_pk, at_bat_index, predicted_outcome, predicted_category, created_at)
                       VALUES (?, ?, ?, ?, ?, ?)""",
                    (
                        prediction.user_id,
                        prediction.game_pk,
                        prediction.at_bat_index,
                        prediction.outcome.value,
                        prediction.category.value if prediction.category is not None else None,
                        prediction.created_at,
                    ),
                )
            except sqlite3.IntegrityError:
                raise PredictionConflictError(prediction.user_id, prediction.game_pk, prediction.at_bat_index)
            conn.commit()
            return cursor.lastrowid  # type: ignore[return-value]

    def get_by_id(self, prediction_id: int) -> Prediction | None:
        with self._pool.connection() as conn:
            row = conn.execute("SELECT * FROM at_bat_predictions WHERE id = ?", (prediction_id,)).fetchone()
        return self._row_to_prediction(row) if row else None

    def get_by_at_bat(self, game_pk: int, at_bat_index: int) -> list[Prediction]:
        with self._pool.connection() as conn:
            rows = conn.execute(
                "SELECT * FROM at_bat_predictions WHERE game_pk = ? AND at_bat_index = ? ORDER BY id",
                (game_pk, at_bat_index),
            ).fetchall()
        return [self._row_to_prediction(row) for row in rows]

    def get_for_user_at_bat(self, user_id: str, game_pk: int, at_bat_index: int) -> Prediction | None:
        with self._pool.connection() as conn:
            row = conn.execute(
                "SELECT * FROM at_bat_predictions WHERE user_id = ? AND game_pk = ? AND at_bat_index = ?",
                (user_id, game_pk, at_bat_index),
            ).fetchone()
        return self._row_to_prediction(row) if row else None

    def get_by_user(self, user_id: str, game_pk: int | None = None) -> list[Prediction]:
        sql = "SELECT * FROM at_bat_predictions WHERE user_id = ?"
        params: list[object] = [user_id]
        if game_pk is not None:
            sql += " AND game_pk = ?"
            params.append(game_pk)
        sql += " ORDER BY game_pk, at_bat_index"
        with self._pool.connection() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [self._row_to_prediction(row) for row in rows]

    def get_recent_resolved(self, user_id: str, limit: int = 20) -> list[Prediction]:
        """Most recently resolved predictions first; same-instant ties go to the later at-bat."""
        with self._pool.connection() as conn:
            rows = conn.execute(
                """SELECT * FROM at_bat_predictions
                    WHERE user_id = ? AND resolved_at IS NOT NULL
                    ORDER BY resolved_at DESC, game_pk DESC, at_bat_index DESC
                    LIMIT ?""",
                (user_id, limit),
            ).fetchall()
        return [self._row_to_prediction(row) for row in rows]

    def get_resolved_at_bat_indices(self, game_pk: int) -> set[int]:
        """At-bats of the game that have predictions and no unresolved ones left."""
        with self._pool.connection() as conn:
            rows = conn.execute(
                """SELECT at_bat_index FROM at_bat_predictions
                    WHERE game_pk = ?
                    GROUP BY at_bat_index
                   HAVING SUM(CASE WHEN resolved_at IS NULL THEN 1 ELSE 0 END) = 0""",
                (game_pk,),
            ).fetchall()
        return {row["at_bat_index"] for row in rows}

    def resolve(self, resolution: Resolution) -> bool:
        """Write one resolution. Returns False when the prediction was already resolved."""
        with self._pool.connection() as conn:
            cursor = conn.execute(_RESOLVE_SQL, self._resolution_params(resolution))
            conn.commit()
            return cursor.rowcount == 1

    def resolve_batch(self, resolutions: Sequence[Resolution]) -> set[int]:
        """Write all resolutions in one transaction; returns the ids actually written."""
        written: set[int] = set()
        with self._pool.connection() as conn:
            for resolution in resolutions:
                cursor = conn.execute(_RESOLVE_SQL, self._resolution_params(resolution))
                if cursor.rowcount == 1:
                    written.add(resolution.prediction_id)
            conn.commit()
        return written

    @staticmethod
    def _resolution_params(resolution: Resolution) -> tuple[object, ...]:
        return (
            resolution.actual_outcome.value,
            resolution.actual_category.value,
            int(resolution.is_exact),
            int(resolution.is_category_correct),
            int(resolution.is_correct),
            int(resolution.is_void),
            resolution.points_earned,
            resolution.streak_count,
            resolution.streak_bonus,
            resolution.resolved_at,
            resolution.prediction_id,
            resolution.at_bat_index,
        )

    @staticmethod
    def _row_to_prediction(row: sqlite3.Row) -> Prediction:
        return Prediction(
            id=row["id"],
            user_id=row["user_id"],
            game_pk=row["game_pk"],
            at_bat_index=row["at_bat_index"],
            outcome=AtBatOutcome(row["predicted_outcome"]),
            category=OutcomeCategory(row["predicted_category"]) if row["predicted_category"] else None,
            created_at=row["created_at"],
            actual_outcome=AtBatOutcome(row["actual_outcome"]) if row["actual_outcome"] else None,
            actual_category=OutcomeCategory(row["actual_category"]) if row["actual_category"] else None,
            is_exact=_optional_bool(row["is_exact"]),
            is_category_correct=_optional_bool(row["is_category_correct"]),
            is_correct=_optional_bool(row["is_correct"]),
            is_void=bool(row["is_void"]),
            points_earned=row["points_earned"],
            streak_count=row["streak_count"],
            streak_bonus=row["streak_bonus"],
            resolved_at=row["resolved_at"],
        )


def _optional_bool(value: int | None) -> bool | None:
    return None if value is None else bool(value)
