class AtBatException(Exception):
    """Base class for errors raised to callers of the prediction services."""


class InvalidPredictionError(AtBatException):
    pass


class PredictionLockedError(AtBatException):
    def __init__(self, game_pk: int, at_bat_index: int, reason: str) -> None:
        self.game_pk = game_pk
        self.at_bat_index = at_bat_index
        self.reason = reason
        super().__init__(f"Predictions are closed for game {game_pk} at-bat {at_bat_index}: {reason}")


class ConfigurationError(AtBatException):
    pass
