"""Map raw play results onto the canonical outcome taxonomy.

Signals are consulted in a fixed priority order and the first one present
decides the outcome:

1. ``event_type`` -- the feed's machine code (``"grounded_into_double_play"``)
2. ``event`` -- the human phrasing (``"Grounded Into DP"``)
3. ``type`` -- a generic result type (``"groundout"``)
4. ``description`` -- free text, matched against ordered substring patterns

A signal that is present but not in its table falls back to ``field_out`` and
is flagged as unmapped. A result with no signal at all is unclassifiable.
"""

import logging
import re
import threading
from collections import Counter
from dataclasses import dataclass
from enum import StrEnum

from atbat_predictor.domain.outcome import AtBatOutcome, OutcomeCategory, outcome_category
from atbat_predictor.domain.play import PlayResult

logger = logging.getLogger(__name__)

DEFAULT_OUTCOME = AtBatOutcome.FIELD_OUT

_A = AtBatOutcome


class ClassificationSource(StrEnum):
    EVENT_TYPE = "event_type"
    EVENT = "event"
    TYPE = "type"
    DESCRIPTION = "description"
    NONE = "none"


@dataclass(frozen=True)
class Classification:
    outcome: AtBatOutcome | None
    source: ClassificationSource
    unmapped: bool = False
    raw: str | None = None

    @property
    def is_classified(self) -> bool:
        return self.outcome is not None

    @property
    def category(self) -> OutcomeCategory | None:
        return outcome_category(self.outcome) if self.outcome is not None else None


def _normalize(value: str) -> str:
    return re.sub(r"[\s\-]+", " ", value.strip().lower())


def _code(value: str) -> str:
    return re.sub(r"[\s\-]+", "_", value.strip().lower())


EVENT_TYPE_OUTCOMES: dict[str, AtBatOutcome] = {
    **{o.value: o for o in AtBatOutcome if o is not AtBatOutcome.UNKNOWN},
    "intentional_walk": _A.INTENT_WALK,
    "error": _A.FIELD_ERROR,
    "catcher_interference": _A.CATCHER_INTERF,
    "ground_out": _A.FIELD_OUT,
    "fly_out": _A.FIELD_OUT,
    "pop_out": _A.FIELD_OUT,
    "line_out": _A.FIELD_OUT,
}

EVENT_OUTCOMES: dict[str, AtBatOutcome] = {
    _normalize(k): v
    for k, v in {
        "Single": _A.SINGLE,
        "Double": _A.DOUBLE,
        "Triple": _A.TRIPLE,
        "Home Run": _A.HOME_RUN,
        "Walk": _A.WALK,
        "Intent Walk": _A.INTENT_WALK,
        "Intentional Walk": _A.INTENT_WALK,
        "Hit By Pitch": _A.HIT_BY_PITCH,
        "Strikeout": _A.STRIKEOUT,
        "Strikeout Double Play": _A.STRIKEOUT_DOUBLE_PLAY,
        "Strikeout Triple Play": _A.STRIKEOUT_TRIPLE_PLAY,
        "Groundout": _A.FIELD_OUT,
        "Flyout": _A.FIELD_OUT,
        "Lineout": _A.FIELD_OUT,
        "Pop Out": _A.FIELD_OUT,
        "Bunt Groundout": _A.FIELD_OUT,
        "Bunt Pop Out": _A.FIELD_OUT,
        "Bunt Lineout": _A.FIELD_OUT,
        "Field Out": _A.FIELD_OUT,
        "Forceout": _A.FORCE_OUT,
        "Force Out": _A.FORCE_OUT,
        "Fielders Choice": _A.FIELDERS_CHOICE,
        "Fielder's Choice": _A.FIELDERS_CHOICE,
        "Fielders Choice Out": _A.FIELDERS_CHOICE_OUT,
        "Grounded Into DP": _A.GROUNDED_INTO_DOUBLE_PLAY,
        "Grounded Into TP": _A.GROUNDED_INTO_TRIPLE_PLAY,
        "Double Play": _A.DOUBLE_PLAY,
        "Triple Play": _A.TRIPLE_PLAY,
        "Sac Fly": _A.SAC_FLY,
        "Sacrifice Fly": _A.SAC_FLY,
        "Sac Bunt": _A.SAC_BUNT,
        "Sacrifice Bunt": _A.SAC_BUNT,
        "Sac Fly Double Play": _A.SAC_FLY_DOUBLE_PLAY,
        "Sac Bunt Double Play": _A.SAC_BUNT_DOUBLE_PLAY,
        "Field Error": _A.FIELD_ERROR,
        "Error": _A.FIELD_ERROR,
        "Catcher Interference": _A.CATCHER_INTERF,
        "Batter Interference": _A.BATTER_INTERFERENCE,
        "Fan Interference": _A.FAN_INTERFERENCE,
        "Pickoff 1B": _A.PICKOFF_1B,
        "Pickoff 2B": _A.PICKOFF_2B,
        "Pickoff 3B": _A.PICKOFF_3B,
        "Pickoff Error 1B": _A.PICKOFF_ERROR_1B,
        "Pickoff Error 2B": _A.PICKOFF_ERROR_2B,
        "Pickoff Error 3B": _A.PICKOFF_ERROR_3B,
        "Stolen Base 2B": _A.STOLEN_BASE_2B,
        "Stolen Base 3B": _A.STOLEN_BASE_3B,
        "Stolen Base Home": _A.STOLEN_BASE_HOME,
        "Caught Stealing 2B": _A.CAUGHT_STEALING_2B,
        "Caught Stealing 3B": _A.CAUGHT_STEALING_3B,
        "Caught Stealing Home": _A.CAUGHT_STEALING_HOME,
        "Pickoff Caught Stealing 2B": _A.PICKOFF_CAUGHT_STEALING_2B,
        "Pickoff Caught Stealing 3B": _A.PICKOFF_CAUGHT_STEALING_3B,
        "Pickoff Caught Stealing Home": _A.PICKOFF_CAUGHT_STEALING_HOME,
        "Wild Pitch": _A.WILD_PITCH,
        "Passed Ball": _A.PASSED_BALL,
        "Balk": _A.BALK,
        "Forced Balk": _A.FORCED_BALK,
        "Other Advance": _A.OTHER_ADVANCE,
        "Runner Double Play": _A.RUNNER_DOUBLE_PLAY,
        "Caught Stealing Double Play": _A.CS_DOUBLE_PLAY,
        "Defensive Indiff": _A.DEFENSIVE_INDIFF,
        "Runner Out": _A.OTHER_OUT,
        "Batter Timeout": _A.BATTER_TIMEOUT,
        "Mound Visit": _A.MOUND_VISIT,
        "No Pitch": _A.NO_PITCH,
        "Pitcher Step Off": _A.PITCHER_STEP_OFF,
        "Injury": _A.INJURY,
        "Ejection": _A.EJECTION,
        "Game Advisory": _A.GAME_ADVISORY,
        "Runner Placed On Base": _A.RUNNER_PLACED,
        "Pitching Substitution": _A.PITCHING_SUBSTITUTION,
        "Offensive Substitution": _A.OFFENSIVE_SUBSTITUTION,
        "Defensive Sub": _A.DEFENSIVE_SUBSTITUTION,
        "Defensive Substitution": _A.DEFENSIVE_SUBSTITUTION,
        "Defensive Switch": _A.DEFENSIVE_SWITCH,
        "Umpire Substitution": _A.UMPIRE_SUBSTITUTION,
        "Pitcher Switch": _A.PITCHER_SWITCH,
    }.items()
}

TYPE_OUTCOMES: dict[str, AtBatOutcome] = {
    "single": _A.SINGLE,
    "double": _A.DOUBLE,
    "triple": _A.TRIPLE,
    "home_run": _A.HOME_RUN,
    "walk": _A.WALK,
    "intent_walk": _A.INTENT_WALK,
    "hit_by_pitch": _A.HIT_BY_PITCH,
    "strikeout": _A.STRIKEOUT,
    "field_out": _A.FIELD_OUT,
    "groundout": _A.FIELD_OUT,
    "ground_out": _A.FIELD_OUT,
    "flyout": _A.FIELD_OUT,
    "fly_out": _A.FIELD_OUT,
    "popout": _A.FIELD_OUT,
    "pop_out": _A.FIELD_OUT,
    "lineout": _A.FIELD_OUT,
    "line_out": _A.FIELD_OUT,
    "force_out": _A.FORCE_OUT,
    "fielders_choice": _A.FIELDERS_CHOICE,
    "sac_fly": _A.SAC_FLY,
    "sac_bunt": _A.SAC_BUNT,
    "sacrifice": _A.SAC_FLY,
    "error": _A.FIELD_ERROR,
    "field_error": _A.FIELD_ERROR,
    "catcher_interference": _A.CATCHER_INTERF,
}

# Most specific phrasing first: compound descriptions ("grounds into a double
# play", "out on a sacrifice fly") must not fall through to a generic match.
DESCRIPTION_PATTERNS: tuple[tuple[tuple[str, ...], AtBatOutcome], ...] = (
    (("home run", "homers", "grand slam"), _A.HOME_RUN),
    (("strikeout triple play", "strike out triple play"), _A.STRIKEOUT_TRIPLE_PLAY),
    (("triple play",), _A.TRIPLE_PLAY),
    (("grounds into a double play", "grounds into double play", "grounded into double play"),
     _A.GROUNDED_INTO_DOUBLE_PLAY),
    (("sacrifice fly", "sac fly"), _A.SAC_FLY),
    (("sacrifice bunt", "sac bunt"), _A.SAC_BUNT),
    (("intentionally walks", "intentional walk"), _A.INTENT_WALK),
    (("hit by pitch", "hit by a pitch"), _A.HIT_BY_PITCH),
    (("catcher interference",), _A.CATCHER_INTERF),
    (("strikeout double play", "strike out double play"), _A.STRIKEOUT_DOUBLE_PLAY),
    (("strikes out", "strikeout", "struck out", "called out on strikes"), _A.STRIKEOUT),
    (("walks", "base on balls"), _A.WALK),
    (("fielder's choice", "fielders choice"), _A.FIELDERS_CHOICE),
    (("double play", "doubled off"), _A.DOUBLE_PLAY),
    (("triples", "triple"), _A.TRIPLE),
    (("doubles", "double"), _A.DOUBLE),
    (("singles", "single"), _A.SINGLE),
    (("force out", "forceout"), _A.FORCE_OUT),
    (
        ("grounds out", "flies out", "lines out", "pops out", "ground out", "fly out", "line out", "pop out",
         "groundout", "flyout", "lineout", "popout"),
        _A.FIELD_OUT,
    ),
    # Batter clause only; runners advancing on an error do not make it one.
    (
        ("reaches on a fielding error", "reaches on a throwing error", "reaches on a missed catch error",
         "reaches on an error", "safe on a fielding error", "safe on a throwing error", "safe on an error"),
        _A.FIELD_ERROR,
    ),
)


def parse_description(description: str) -> AtBatOutcome | None:
    text = description.lower()
    for needles, outcome in DESCRIPTION_PATTERNS:
        if any(needle in text for needle in needles):
            return outcome
    return None


def classify(result: PlayResult) -> Classification:
    """Classify a play result. Never raises; misses fall back to ``field_out``."""
    if result.event_type is not None:
        return _lookup(EVENT_TYPE_OUTCOMES.get(_code(result.event_type)), ClassificationSource.EVENT_TYPE,
                       result.event_type)
    if result.event is not None:
        return _lookup(EVENT_OUTCOMES.get(_normalize(result.event)), ClassificationSource.EVENT, result.event)
    if result.type is not None:
        return _lookup(TYPE_OUTCOMES.get(_code(result.type)), ClassificationSource.TYPE, result.type)
    if result.description is not None:
        return _lookup(parse_description(result.description), ClassificationSource.DESCRIPTION,
                       result.description)
    return Classification(outcome=None, source=ClassificationSource.NONE)


def _lookup(outcome: AtBatOutcome | None, source: ClassificationSource, raw: str) -> Classification:
    if outcome is None:
        return Classification(outcome=DEFAULT_OUTCOME, source=source, unmapped=True, raw=raw)
    return Classification(outcome=outcome, source=source, raw=raw)


class UnmappedEventCounter:
    """Thread-safe tally of raw signals that fell back to the default outcome.

    A play identified by *key* is counted once however often it is classified.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counts: Counter[tuple[str, str]] = Counter()
        self._seen: set[tuple[int, int]] = set()

    def record(self, source: ClassificationSource, raw: str | None, *, key: tuple[int, int] | None = None) -> bool:
        """Count one unmapped signal. Returns False if *key* was already counted."""
        with self._lock:
            if key is not None:
                if key in self._seen:
                    return False
                self._seen.add(key)
            self._counts[(source.value, raw or "")] += 1
            return True

    @property
    def total(self) -> int:
        with self._lock:
            return sum(self._counts.values())

    def snapshot(self) -> dict[tuple[str, str], int]:
        with self._lock:
            return dict(self._counts)


class OutcomeClassifier:
    def __init__(self, counter: UnmappedEventCounter | None = None) -> None:
        self._counter = counter or UnmappedEventCounter()

    @property
    def unmapped(self) -> UnmappedEventCounter:
        return self._counter

    def classify(self, result: PlayResult, *, key: tuple[int, int] | None = None) -> Classification:
        """Classify *result*; *key* is the play's ``(game_pk, at_bat_index)`` when known."""
        classification = classify(result)
        if classification.unmapped and self._counter.record(classification.source, classification.raw, key=key):
            logger.warning(
                "Unmapped %s %r; defaulting to %s",
                classification.source.value,
                classification.raw,
                DEFAULT_OUTCOME.value,
            )
        return classification
