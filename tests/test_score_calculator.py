"""Tests for window and daily score calculation."""

import pytest

from meal_windows.domain.scores import ScoreFactor
from meal_windows.domain.windows import MacroTargets
from meal_windows.services.score_calculator import ScoreCalculator, macro_score
from meal_windows.services.scoring import fallback_factors
from tests.conftest import DAY, at, make_meal, make_window


def _windows():
    return [
        make_window("breakfast", 8, 9),
        make_window("lunch", 12, 13),
        make_window("dinner", 18, 19),
    ]


@pytest.mark.parametrize(
    ("actual", "target", "expected"),
    [
        (100, 100, 100),
        (50, 100, 50),
        (150, 100, 50),
        (300, 100, 0),
        (0, 0, 100),
        (5, 0, 0),
    ],
)
def test_macro_score(actual: float, target: float, expected: int) -> None:
    assert macro_score(actual, target) == expected


def test_score_window_on_target() -> None:
    window = make_window("lunch", 12, 13)
    meal = make_meal("m1", at(12, 15), 600, protein=45, carbs=60, fat=20)

    score = ScoreCalculator().score_window(window, [meal], at(13, 30))

    assert score.score == 100
    assert score.insight == "On target"
    assert [factor.contribution for factor in score.factors] == [2.5] * 4
    assert score.factors[1].percentage_of_target == 100


def test_score_window_close_to_target() -> None:
    window = make_window("lunch", 12, 13)
    meal = make_meal("m1", at(12, 15), 480, protein=36, carbs=48, fat=16)

    score = ScoreCalculator().score_window(window, [meal], at(13, 30))

    assert score.score == 80
    assert score.insight == "Close to target"


def test_score_window_over_and_under() -> None:
    window = make_window("lunch", 12, 13)
    over = make_meal("m1", at(12, 15), 1000, protein=80, carbs=100, fat=40)
    under = make_meal("m2", at(12, 15), 400, protein=20, carbs=30, fat=8)
    calculator = ScoreCalculator()

    over_score = calculator.score_window(window, [over], at(13, 30))
    under_score = calculator.score_window(window, [under], at(13, 30))

    assert over_score.score == 22
    assert over_score.insight == "Over target"
    assert under_score.score == 50
    assert under_score.insight == "Under target"


def test_score_day_combines_factors() -> None:
    meals = [
        make_meal("m1", at(8, 30), 600, protein=45, carbs=60, fat=20, health_score=80),
        make_meal("m2", at(12, 30), 480, protein=36, carbs=48, fat=16, health_score=60),
    ]

    daily = ScoreCalculator().score_day(DAY, _windows(), meals, at(13, 30))

    assert daily is not None
    assert daily.window_scores == {"breakfast": 100, "lunch": 80}
    assert daily.breakdown is not None
    assert daily.breakdown.adherence == pytest.approx(20 / 3)
    assert daily.breakdown.quality == pytest.approx(7.0)
    assert daily.breakdown.timing == pytest.approx(20 / 3)
    assert daily.breakdown.consistency == pytest.approx(10 * (1 - 0.1 / 0.9))
    assert daily.score == 71
    assert daily.average_health_score == 70
    assert daily.completed_windows == 2
    assert daily.total_windows == 3
    assert daily.on_time_windows == 2


def test_score_day_without_scorable_windows() -> None:
    assert ScoreCalculator().score_day(DAY, _windows(), [], at(7)) is None


def test_score_day_defaults_and_late_meals() -> None:
    late = make_meal(
        "m1", at(10), 600, protein=45, carbs=60, fat=20, window_id="breakfast"
    )

    daily = ScoreCalculator().score_day(DAY, _windows(), [late], at(10, 30))

    assert daily is not None
    assert daily.breakdown is not None
    assert daily.breakdown.adherence == pytest.approx(10 / 3)
    assert daily.breakdown.quality == 5.0
    assert daily.breakdown.timing == 0.0
    assert daily.breakdown.consistency == 10.0
    assert daily.average_health_score is None


def test_score_day_reads_effective_targets() -> None:
    window = make_window("lunch", 12, 13).with_adjustment(
        480, MacroTargets(protein=36, carbs=48, fat=16), None
    )
    meal = make_meal("m1", at(12, 15), 480, protein=36, carbs=48, fat=16)

    daily = ScoreCalculator().score_day(DAY, [window], [meal], at(13, 30))

    assert daily is not None
    assert daily.window_scores == {"lunch": 100}


def test_adherence_counts_completed_windows_not_accuracy() -> None:
    windows = [make_window("breakfast", 8, 9), make_window("lunch", 12, 13)]
    meals = [
        make_meal("m1", at(8, 30), 1200, protein=90, carbs=120, fat=40),
        make_meal("m2", at(12, 30), 1200, protein=90, carbs=120, fat=40),
    ]

    daily = ScoreCalculator().score_day(DAY, windows, meals, at(13, 30))

    assert daily is not None
    assert daily.breakdown is not None
    assert daily.window_scores == {"breakfast": 0, "lunch": 0}
    assert daily.breakdown.adherence == 10.0
    assert daily.breakdown.adherence_detail == "2 of 2 windows completed"
    assert daily.breakdown.timing == 10.0
    assert fallback_factors(daily)[ScoreFactor.ADHERENCE] == (
        daily.breakdown.adherence
    )
