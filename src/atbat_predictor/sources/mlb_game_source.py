import datetime
import logging
from collections.abc import Callable
from typing import Any

import httpx
from tenacity import RetryCallState, retry, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from atbat_predictor.domain.play import Game, GameStatus, game_from_feed

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://statsapi.mlb.com"
DEFAULT_TEAM_ID = 136
DEFAULT_TIMEOUT = 10.0


def _log_retry(retry_state: RetryCallState) -> None:
    logger.warning("Retrying MLB API request (attempt %d): %s", retry_state.attempt_number, retry_state.outcome)


_DEFAULT_RETRY = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential_jitter(initial=1, max=10),
    retry=retry_if_exception_type((httpx.TransportError, httpx.HTTPStatusError)),
    before_sleep=_log_retry,
    reraise=True,
)


class MLBGameSource:
    """Today's game for one team, read from the MLB Stats API live feed."""

    def __init__(
        self,
        client: httpx.Client | None = None,
        retry: Callable[[Callable[..., Any]], Callable[..., Any]] = _DEFAULT_RETRY,
        *,
        base_url: str = DEFAULT_BASE_URL,
        team_id: int = DEFAULT_TEAM_ID,
        timeout: float = DEFAULT_TIMEOUT,
        today: Callable[[], datetime.date] = datetime.date.today,
    ) -> None:
        self._client = client or httpx.Client(timeout=httpx.Timeout(timeout, connect=5.0))
        self._get_with_retry = retry(self._do_get)
        self._base_url = base_url.rstrip("/")
        self._team_id = team_id
        self._today = today

    def _do_get(self, url: str, params: dict[str, Any] | None = None) -> httpx.Response:
        response = self._client.get(url, params=params)
        response.raise_for_status()
        return response

    def fetch_schedule(self, date: datetime.date | None = None) -> list[dict[str, Any]]:
        """Games scheduled for the team on *date* (today by default)."""
        day = date or self._today()
        url = f"{self._base_url}/api/v1/schedule"
        logger.debug("GET %s team=%d date=%s", url, self._team_id, day)
        response = self._get_with_retry(url, {"sportId": 1, "teamId": self._team_id, "date": day.isoformat()})
        games: list[dict[str, Any]] = []
        for entry in response.json().get("dates", []):
            games.extend(entry.get("games", []))
        return games

    def fetch_current_game(self) -> Game | None:
        games = self.fetch_schedule()
        if not games:
            logger.info("No game scheduled today for team %d", self._team_id)
            return None
        return self.fetch_game(int(_pick_game(games)["gamePk"]))

    def fetch_game(self, game_pk: int) -> Game:
        url = f"{self._base_url}/api/v1.1/game/{game_pk}/feed/live"
        logger.debug("GET %s", url)
        game = game_from_feed(self._get_with_retry(url).json())
        logger.debug("Game %d: %d plays, live=%s", game.game_pk, len(game.plays), game.is_live)
        return game

    def close(self) -> None:
        self._client.close()


def _pick_game(games: list[dict[str, Any]]) -> dict[str, Any]:
    # Doubleheaders: prefer whichever game is in progress.
    for game in games:
        status = game.get("status") or {}
        if GameStatus(
            abstract_state=status.get("abstractGameState"),
            detailed_state=status.get("detailedState"),
            coded_state=status.get("codedGameState"),
        ).is_live:
            return game
    return games[0]
