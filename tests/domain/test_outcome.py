import pytest

from atbat_predictor.domain.outcome import (
    NON_SCORABLE_CATEGORIES,
    OUTCOME_CATEGORIES,
    AtBatOutcome,
    OutcomeCategory,
    is_scorable,
    outcome_category,
    scorable_outcomes,
)


class TestOutcomeCategory:
    def test_every_outcome_has_a_category(self) -> None:
        assert set(OUTCOME_CATEGORIES) == set(AtBatOutcome)

    def test_every_category_is_used(self) -> None:
        assert set(OUTCOME_CATEGORIES.values()) == set(OutcomeCategory)

    @pytest.mark.parametrize(
        ("outcome", "category"),
        [
            (AtBatOutcome.HOME_RUN, OutcomeCategory.HIT),
            (AtBatOutcome.SINGLE, OutcomeCategory.HIT),
            (AtBatOutcome.INTENT_WALK, OutcomeCategory.WALK),
            (AtBatOutcome.STRIKEOUT_DOUBLE_PLAY, OutcomeCategory.STRIKEOUT),
            (AtBatOutcome.GROUNDED_INTO_DOUBLE_PLAY, OutcomeCategory.OUT),
            (AtBatOutcome.FIELDERS_CHOICE, OutcomeCategory.OUT),
            (AtBatOutcome.SAC_FLY, OutcomeCategory.SACRIFICE),
            (AtBatOutcome.CATCHER_INTERF, OutcomeCategory.ERROR),
            (AtBatOutcome.HIT_BY_PITCH, OutcomeCategory.HIT_BY_PITCH),
            (AtBatOutcome.CAUGHT_STEALING_2B, OutcomeCategory.BASERUNNING),
            (AtBatOutcome.PICKOFF_CAUGHT_STEALING_2B, OutcomeCategory.ADMINISTRATIVE),
            (AtBatOutcome.MOUND_VISIT, OutcomeCategory.ADMINISTRATIVE),
            (AtBatOutcome.UNKNOWN, OutcomeCategory.UNKNOWN),
        ],
    )
    def test_lookup(self, outcome: AtBatOutcome, category: OutcomeCategory) -> None:
        assert outcome_category(outcome) == category

    def test_values_are_stable_strings(self) -> None:
        assert AtBatOutcome("home_run") is AtBatOutcome.HOME_RUN
        assert str(OutcomeCategory.HIT_BY_PITCH) == "hit_by_pitch"


class TestScorable:
    def test_non_scorable_categories(self) -> None:
        assert NON_SCORABLE_CATEGORIES == {
            OutcomeCategory.BASERUNNING,
            OutcomeCategory.ADMINISTRATIVE,
            OutcomeCategory.UNKNOWN,
        }

    def test_plate_appearance_outcomes_are_scorable(self) -> None:
        assert is_scorable(AtBatOutcome.DOUBLE)
        assert is_scorable(AtBatOutcome.SAC_BUNT)

    def test_baserunning_and_administrative_are_not(self) -> None:
        assert not is_scorable(AtBatOutcome.STOLEN_BASE_2B)
        assert not is_scorable(AtBatOutcome.PITCHING_SUBSTITUTION)
        assert not is_scorable(AtBatOutcome.UNKNOWN)

    def test_scorable_outcomes_excludes_non_scorable(self) -> None:
        outcomes = scorable_outcomes()
        assert AtBatOutcome.HOME_RUN in outcomes
        assert all(outcome_category(o) not in NON_SCORABLE_CATEGORIES for o in outcomes)
