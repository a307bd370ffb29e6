import threading
from collections.abc import Iterable


class ResolutionCache:
    """Per-process record of at-bats already known to be fully resolved.

    Purely an optimisation over the prediction store: dropping it at any time
    only costs extra store reads on the next pass. A game is *warm* once its
    resolved at-bats have been loaded from the store.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._resolved: dict[int, set[int]] = {}

    def is_warm(self, game_pk: int) -> bool:
        with self._lock:
            return game_pk in self._resolved

    def warm(self, game_pk: int, at_bat_indices: Iterable[int]) -> None:
        with self._lock:
            self._resolved.setdefault(game_pk, set()).update(at_bat_indices)

    def contains(self, game_pk: int, at_bat_index: int) -> bool:
        with self._lock:
            return at_bat_index in self._resolved.get(game_pk, ())

    def mark(self, game_pk: int, at_bat_index: int) -> None:
        with self._lock:
            self._resolved.setdefault(game_pk, set()).add(at_bat_index)

    def resolved_indices(self, game_pk: int) -> frozenset[int]:
        with self._lock:
            return frozenset(self._resolved.get(game_pk, ()))

    def drop(self, game_pk: int) -> None:
        with self._lock:
            self._resolved.pop(game_pk, None)

    def clear(self) -> None:
        with self._lock:
            self._resolved.clear()
