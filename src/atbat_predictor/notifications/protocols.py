from typing import Protocol, runtime_checkable


@runtime_checkable
class NotificationSink(Protocol):
    def predictions_changed(self, game_pk: int, at_bat_index: int) -> None: ...
