from typing import Protocol, runtime_checkable

from atbat_predictor.domain.play import Game


@runtime_checkable
class GameSource(Protocol):
    def fetch_current_game(self) -> Game | None: ...

    def fetch_game(self, game_pk: int) -> Game: ...
