from atbat_predictor.exceptions import AtBatException


class PredictionConflictError(AtBatException):
    def __init__(self, user_id: str, game_pk: int, at_bat_index: int) -> None:
        self.user_id = user_id
        self.game_pk = game_pk
        self.at_bat_index = at_bat_index
        super().__init__(
            f"User {user_id} already has a prediction for game {game_pk} at-bat {at_bat_index}"
        )
