from enum import StrEnum


class AtBatOutcome(StrEnum):
    # Hits
    SINGLE = "single"
    DOUBLE = "double"
    TRIPLE = "triple"
    HOME_RUN = "home_run"

    # Walks and hit by pitch
    WALK = "walk"
    INTENT_WALK = "intent_walk"
    HIT_BY_PITCH = "hit_by_pitch"

    # Strikeouts
    STRIKEOUT = "strikeout"
    STRIKE_OUT = "strike_out"
    STRIKEOUT_DOUBLE_PLAY = "strikeout_double_play"
    STRIKEOUT_TRIPLE_PLAY = "strikeout_triple_play"

    # Field outs
    FIELD_OUT = "field_out"
    FIELDERS_CHOICE = "fielders_choice"
    FIELDERS_CHOICE_OUT = "fielders_choice_out"
    FORCE_OUT = "force_out"
    GROUNDED_INTO_DOUBLE_PLAY = "grounded_into_double_play"
    GROUNDED_INTO_TRIPLE_PLAY = "grounded_into_triple_play"
    DOUBLE_PLAY = "double_play"
    TRIPLE_PLAY = "triple_play"

    # Sacrifices
    SAC_FLY = "sac_fly"
    SAC_BUNT = "sac_bunt"
    SAC_FLY_DOUBLE_PLAY = "sac_fly_double_play"
    SAC_BUNT_DOUBLE_PLAY = "sac_bunt_double_play"

    # Errors and interference
    FIELD_ERROR = "field_error"
    CATCHER_INTERF = "catcher_interf"
    BATTER_INTERFERENCE = "batter_interference"
    FAN_INTERFERENCE = "fan_interference"

    # Baserunning (never a plate-appearance result)
    PICKOFF_1B = "pickoff_1b"
    PICKOFF_2B = "pickoff_2b"
    PICKOFF_3B = "pickoff_3b"
    PICKOFF_ERROR_1B = "pickoff_error_1b"
    PICKOFF_ERROR_2B = "pickoff_error_2b"
    PICKOFF_ERROR_3B = "pickoff_error_3b"
    STOLEN_BASE = "stolen_base"
    STOLEN_BASE_2B = "stolen_base_2b"
    STOLEN_BASE_3B = "stolen_base_3b"
    STOLEN_BASE_HOME = "stolen_base_home"
    CAUGHT_STEALING = "caught_stealing"
    CAUGHT_STEALING_2B = "caught_stealing_2b"
    CAUGHT_STEALING_3B = "caught_stealing_3b"
    CAUGHT_STEALING_HOME = "caught_stealing_home"
    PICKOFF_CAUGHT_STEALING_2B = "pickoff_caught_stealing_2b"
    PICKOFF_CAUGHT_STEALING_3B = "pickoff_caught_stealing_3b"
    PICKOFF_CAUGHT_STEALING_HOME = "pickoff_caught_stealing_home"
    WILD_PITCH = "wild_pitch"
    PASSED_BALL = "passed_ball"
    BALK = "balk"
    FORCED_BALK = "forced_balk"
    OTHER_ADVANCE = "other_advance"
    RUNNER_DOUBLE_PLAY = "runner_double_play"
    CS_DOUBLE_PLAY = "cs_double_play"
    DEFENSIVE_INDIFF = "defensive_indiff"
    OTHER_OUT = "other_out"

    # Administrative
    BATTER_TIMEOUT = "batter_timeout"
    MOUND_VISIT = "mound_visit"
    NO_PITCH = "no_pitch"
    PITCHER_STEP_OFF = "pitcher_step_off"
    INJURY = "injury"
    EJECTION = "ejection"
    GAME_ADVISORY = "game_advisory"
    OS_RULING_PENDING_PRIOR = "os_ruling_pending_prior"
    OS_RULING_PENDING_PRIMARY = "os_ruling_pending_primary"
    AT_BAT_START = "at_bat_start"
    BATTER_TURN = "batter_turn"
    FIELDER_INTERFERENCE = "fielder_interference"
    RUNNER_INTERFERENCE = "runner_interference"
    RUNNER_PLACED = "runner_placed"
    PITCHING_SUBSTITUTION = "pitching_substitution"
    OFFENSIVE_SUBSTITUTION = "offensive_substitution"
    DEFENSIVE_SUBSTITUTION = "defensive_substitution"
    DEFENSIVE_SWITCH = "defensive_switch"
    UMPIRE_SUBSTITUTION = "umpire_substitution"
    PITCHER_SWITCH = "pitcher_switch"

    UNKNOWN = "unknown"


class OutcomeCategory(StrEnum):
    HIT = "hit"
    OUT = "out"
    WALK = "walk"
    STRIKEOUT = "strikeout"
    SACRIFICE = "sacrifice"
    ERROR = "error"
    HIT_BY_PITCH = "hit_by_pitch"
    BASERUNNING = "baserunning"
    ADMINISTRATIVE = "administrative"
    UNKNOWN = "unknown"


NON_SCORABLE_CATEGORIES: frozenset[OutcomeCategory] = frozenset(
    {OutcomeCategory.BASERUNNING, OutcomeCategory.ADMINISTRATIVE, OutcomeCategory.UNKNOWN}
)

_A = AtBatOutcome
_C = OutcomeCategory

_CATEGORY_MEMBERS: dict[OutcomeCategory, tuple[AtBatOutcome, ...]] = {
    _C.HIT: (_A.SINGLE, _A.DOUBLE, _A.TRIPLE, _A.HOME_RUN),
    _C.WALK: (_A.WALK, _A.INTENT_WALK),
    _C.HIT_BY_PITCH: (_A.HIT_BY_PITCH,),
    _C.STRIKEOUT: (_A.STRIKEOUT, _A.STRIKE_OUT, _A.STRIKEOUT_DOUBLE_PLAY, _A.STRIKEOUT_TRIPLE_PLAY),
    _C.OUT: (
        _A.FIELD_OUT,
        _A.FIELDERS_CHOICE,
        _A.FIELDERS_CHOICE_OUT,
        _A.FORCE_OUT,
        _A.GROUNDED_INTO_DOUBLE_PLAY,
        _A.GROUNDED_INTO_TRIPLE_PLAY,
        _A.DOUBLE_PLAY,
        _A.TRIPLE_PLAY,
    ),
    _C.SACRIFICE: (_A.SAC_FLY, _A.SAC_BUNT, _A.SAC_FLY_DOUBLE_PLAY, _A.SAC_BUNT_DOUBLE_PLAY),
    _C.ERROR: (_A.FIELD_ERROR, _A.CATCHER_INTERF, _A.BATTER_INTERFERENCE, _A.FAN_INTERFERENCE),
    _C.BASERUNNING: (
        _A.PICKOFF_1B,
        _A.PICKOFF_2B,
        _A.PICKOFF_3B,
        _A.PICKOFF_ERROR_1B,
        _A.PICKOFF_ERROR_2B,
        _A.PICKOFF_ERROR_3B,
        _A.STOLEN_BASE,
        _A.STOLEN_BASE_2B,
        _A.STOLEN_BASE_3B,
        _A.STOLEN_BASE_HOME,
        _A.CAUGHT_STEALING,
        _A.CAUGHT_STEALING_2B,
        _A.CAUGHT_STEALING_3B,
        _A.CAUGHT_STEALING_HOME,
        _A.WILD_PITCH,
        _A.PASSED_BALL,
        _A.BALK,
        _A.FORCED_BALK,
        _A.OTHER_ADVANCE,
        _A.RUNNER_DOUBLE_PLAY,
        _A.CS_DOUBLE_PLAY,
        _A.DEFENSIVE_INDIFF,
        _A.OTHER_OUT,
    ),
    _C.ADMINISTRATIVE: (
        _A.BATTER_TIMEOUT,
        _A.MOUND_VISIT,
        _A.NO_PITCH,
        _A.PITCHER_STEP_OFF,
        _A.INJURY,
        _A.EJECTION,
        _A.GAME_ADVISORY,
        _A.OS_RULING_PENDING_PRIOR,
        _A.OS_RULING_PENDING_PRIMARY,
        _A.AT_BAT_START,
        _A.BATTER_TURN,
        _A.FIELDER_INTERFERENCE,
        _A.RUNNER_INTERFERENCE,
        _A.RUNNER_PLACED,
        _A.PITCHING_SUBSTITUTION,
        _A.OFFENSIVE_SUBSTITUTION,
        _A.DEFENSIVE_SUBSTITUTION,
        _A.DEFENSIVE_SWITCH,
        _A.UMPIRE_SUBSTITUTION,
        _A.PITCHER_SWITCH,
        _A.PICKOFF_CAUGHT_STEALING_2B,
        _A.PICKOFF_CAUGHT_STEALING_3B,
        _A.PICKOFF_CAUGHT_STEALING_HOME,
    ),
    _C.UNKNOWN: (_A.UNKNOWN,),
}

OUTCOME_CATEGORIES: dict[AtBatOutcome, OutcomeCategory] = {
    outcome: category for category, outcomes in _CATEGORY_MEMBERS.items() for outcome in outcomes
}


def outcome_category(outcome: AtBatOutcome) -> OutcomeCategory:
    return OUTCOME_CATEGORIES[outcome]


def is_scorable(outcome: AtBatOutcome) -> bool:
    """True when the outcome ends a plate appearance and may be predicted."""
    return OUTCOME_CATEGORIES[outcome] not in NON_SCORABLE_CATEGORIES


def scorable_outcomes() -> list[AtBatOutcome]:
    return [o for o in AtBatOutcome if is_scorable(o)]
