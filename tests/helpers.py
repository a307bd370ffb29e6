from datetime import datetime, timedelta, timezone
from typing import Any

from atbat_predictor.domain.outcome import AtBatOutcome, OutcomeCategory, outcome_category
from atbat_predictor.domain.play import Game, GameStatus, Play, PlayCount, PlayResult
from atbat_predictor.domain.prediction import Prediction

LIVE = GameStatus(abstract_state="Live", detailed_state="In Progress", coded_state="I")
FINAL = GameStatus(abstract_state="Final", detailed_state="Final", coded_state="F")


class TickingClock:
    """Returns a strictly increasing UTC time, one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self._now = start or datetime(2026, 7, 4, 18, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self._now += timedelta(seconds=1)
        return self._now


def make_prediction(
    user_id: str = "alice",
    *,
    game_pk: int = 745000,
    at_bat_index: int = 0,
    outcome: AtBatOutcome = AtBatOutcome.SINGLE,
    category: OutcomeCategory | None = None,
    prediction_id: int | None = None,
) -> Prediction:
    return Prediction(
        id=prediction_id,
        user_id=user_id,
        game_pk=game_pk,
        at_bat_index=at_bat_index,
        outcome=outcome,
        category=category if category is not None else outcome_category(outcome),
        created_at="2026-07-04T17:00:00+00:00",
    )


def make_play(
    at_bat_index: int,
    event_type: str | None = None,
    *,
    event: str | None = None,
    type: str | None = None,
    description: str | None = None,
    balls: int = 0,
    strikes: int = 0,
) -> Play:
    if event_type is None and event is None and type is None and description is None:
        type = "atBat"
    return Play(
        at_bat_index=at_bat_index,
        result=PlayResult(type=type, event=event, event_type=event_type, description=description),
        count=PlayCount(balls=balls, strikes=strikes),
    )


def make_game(*plays: Play, game_pk: int = 745000, status: GameStatus = LIVE) -> Game:
    return Game(game_pk=game_pk, status=status, plays=tuple(plays))


def feed_play(
    at_bat_index: int,
    *,
    event_type: str | None = None,
    event: str | None = None,
    type: str = "atBat",
    description: str | None = None,
    balls: int = 0,
    strikes: int = 0,
) -> dict[str, Any]:
    result: dict[str, Any] = {"type": type}
    if event_type is not None:
        result["eventType"] = event_type
    if event is not None:
        result["event"] = event
    if description is not None:
        result["description"] = description
    return {
        "about": {"atBatIndex": at_bat_index, "isComplete": event_type is not None},
        "result": result,
        "count": {"balls": balls, "strikes": strikes, "outs": 0},
        "matchup": {
            "batter": {"id": 592450, "fullName": "Aaron Judge"},
            "pitcher": {"id": 605483, "fullName": "Blake Snell"},
        },
    }


def live_feed(*plays: dict[str, Any], game_pk: int = 745000, abstract_state: str = "Live") -> dict[str, Any]:
    detailed = "In Progress" if abstract_state == "Live" else abstract_state
    return {
        "gamePk": game_pk,
        "gameData": {
            "status": {
                "abstractGameState": abstract_state,
                "detailedState": detailed,
                "codedGameState": "I" if abstract_state == "Live" else "F",
            }
        },
        "liveData": {"plays": {"allPlays": list(plays)}},
    }
