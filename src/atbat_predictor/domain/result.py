"""Success-or-error return values for operations that report failures instead of raising.

Resolution returns ``Ok(AtBatResolution)`` or ``Err(ResolutionError)`` so callers
running in a loop can ``match`` on the outcome and keep going.
"""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True, slots=True)
class Ok[T]:
    value: T

    @property
    def is_ok(self) -> Literal[True]:
        return True


@dataclass(frozen=True, slots=True)
class Err[E]:
    error: E

    @property
    def is_ok(self) -> Literal[False]:
        return False


type Result[T, E] = Ok[T] | Err[E]
