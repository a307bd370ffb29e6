"""Game and play records as seen by the resolution engine.

The upstream live feed is loosely shaped: any of the result fields may be
missing, and the feed's own ``isComplete`` flag is not trusted. These types
normalise a feed payload into optional-field records and expose the
"completed" rule the engine relies on: a play is complete once its result
carries a real event rather than the in-progress placeholder.
"""

from dataclasses import dataclass, field
from typing import Any

_PLACEHOLDER_EVENTS = frozenset({"", "at_bat", "atbat"})


def _is_real_event(value: str | None) -> bool:
    return value is not None and value.strip().lower() not in _PLACEHOLDER_EVENTS


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class PlayResult:
    type: str | None = None
    event: str | None = None
    event_type: str | None = None
    description: str | None = None

    @property
    def has_event(self) -> bool:
        if _is_real_event(self.event_type) or _is_real_event(self.event):
            return True
        return self.event_type is None and self.event is None and _is_real_event(self.type)


@dataclass(frozen=True)
class PlayCount:
    balls: int = 0
    strikes: int = 0
    outs: int = 0

    def is_too_advanced(self, max_balls: int = 2, max_strikes: int = 2) -> bool:
        return self.balls >= max_balls or self.strikes >= max_strikes

    def __str__(self) -> str:
        return f"{self.balls}-{self.strikes}"


@dataclass(frozen=True)
class Matchup:
    batter_id: int | None = None
    batter_name: str | None = None
    pitcher_id: int | None = None
    pitcher_name: str | None = None


@dataclass(frozen=True)
class Play:
    at_bat_index: int
    result: PlayResult = field(default_factory=PlayResult)
    count: PlayCount = field(default_factory=PlayCount)
    matchup: Matchup = field(default_factory=Matchup)

    @property
    def is_completed(self) -> bool:
        return self.result.has_event


@dataclass(frozen=True)
class GameStatus:
    abstract_state: str | None = None
    detailed_state: str | None = None
    coded_state: str | None = None

    @property
    def is_live(self) -> bool:
        return (
            self.abstract_state == "Live"
            or self.detailed_state in ("In Progress", "Warmup")
            or self.coded_state == "I"
        )


@dataclass(frozen=True)
class Game:
    game_pk: int
    status: GameStatus = field(default_factory=GameStatus)
    plays: tuple[Play, ...] = ()

    @property
    def is_live(self) -> bool:
        return self.status.is_live

    def completed_plays(self) -> list[Play]:
        """Completed plays in ascending at-bat order."""
        return sorted((p for p in self.plays if p.is_completed), key=lambda p: p.at_bat_index)

    def current_play(self) -> Play | None:
        """The latest play that has not produced a result yet, if any."""
        pending = [p for p in self.plays if not p.is_completed]
        if not pending:
            return None
        return max(pending, key=lambda p: p.at_bat_index)


def play_from_feed(raw: dict[str, Any]) -> Play | None:
    about = raw.get("about") or {}
    at_bat_index = about.get("atBatIndex")
    if at_bat_index is None:
        return None
    result = raw.get("result") or {}
    count = raw.get("count") or {}
    matchup = raw.get("matchup") or {}
    batter = matchup.get("batter") or {}
    pitcher = matchup.get("pitcher") or {}
    return Play(
        at_bat_index=int(at_bat_index),
        result=PlayResult(
            type=_optional_str(result.get("type")),
            event=_optional_str(result.get("event")),
            event_type=_optional_str(result.get("eventType")),
            description=_optional_str(result.get("description")),
        ),
        count=PlayCount(
            balls=int(count.get("balls") or 0),
            strikes=int(count.get("strikes") or 0),
            outs=int(count.get("outs") or 0),
        ),
        matchup=Matchup(
            batter_id=batter.get("id"),
            batter_name=batter.get("fullName"),
            pitcher_id=pitcher.get("id"),
            pitcher_name=pitcher.get("fullName"),
        ),
    )


def game_from_feed(feed: dict[str, Any]) -> Game:
    """Build a Game from an MLB live feed payload (``/api/v1.1/game/{pk}/feed/live``)."""
    game_data = feed.get("gameData") or {}
    game_pk = feed.get("gamePk") or (game_data.get("game") or {}).get("pk")
    if game_pk is None:
        raise ValueError("Feed payload has no gamePk")
    raw_status = game_data.get("status") or feed.get("status") or {}
    all_plays = ((feed.get("liveData") or {}).get("plays") or {}).get("allPlays") or []
    plays = tuple(p for p in (play_from_feed(raw) for raw in all_plays) if p is not None)
    return Game(
        game_pk=int(game_pk),
        status=GameStatus(
            abstract_state=raw_status.get("abstractGameState"),
            detailed_state=raw_status.get("detailedState"),
            coded_state=raw_status.get("codedGameState"),
        ),
        plays=plays,
    )
