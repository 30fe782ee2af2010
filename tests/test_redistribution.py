"""Tests for baseline redistribution."""

import pytest

from meal_windows.domain.redistribution import RedistributionReason
from meal_windows.domain.windows import MacroTargets, NutritionGoal, WindowPurpose
from meal_windows.services.redistribution import (
    BaselineRedistributor,
    reason_for_remaining,
)
from tests.conftest import at, make_meal, make_profile, make_window


def _day_windows():
    return [
        make_window("breakfast", 8, 9, calories=800),
        make_window("lunch", 13, 14, calories=600),
        make_window("dinner", 18, 19, calories=600),
    ]


def test_redistribute_splits_remaining_budget_by_share() -> None:
    meals = [make_meal("m1", at(8, 30), 900, protein=60, carbs=90, fat=25)]

    result = BaselineRedistributor().redistribute(
        _day_windows(), meals, make_profile(), now=at(12)
    )

    breakfast, lunch, dinner = result
    assert breakfast.passthrough
    assert breakfast.adjusted_calories == 800
    for item in (lunch, dinner):
        assert not item.passthrough
        assert item.adjusted_calories == pytest.approx(550)
        assert item.adjusted_macros == MacroTargets(protein=45, carbs=55, fat=17.5)
        assert item.reason is None


def test_redistribute_preserves_input_order() -> None:
    windows = list(reversed(_day_windows()))

    result = BaselineRedistributor().redistribute(
        windows, [], make_profile(), now=at(12)
    )

    assert [item.window.id for item in result] == ["dinner", "lunch", "breakfast"]


def test_weight_loss_clamps_small_share_to_floor() -> None:
    windows = [
        make_window("lunch", 13, 14, calories=300, macros=MacroTargets(25, 30, 8)),
        make_window("dinner", 18, 19, calories=300, macros=MacroTargets(25, 30, 8)),
    ]
    profile = make_profile(
        NutritionGoal.WEIGHT_LOSS, calories=1000, protein=75, carbs=100, fat=33
    )
    meals = [make_meal("m1", at(8), 700, protein=50, carbs=70, fat=23)]

    result = BaselineRedistributor().redistribute(windows, meals, profile, now=at(12))

    for item in result:
        assert item.adjusted_calories == 200
        assert item.adjusted_macros.protein == pytest.approx(20)
        assert item.reason == RedistributionReason.overconsumption(50)


def test_muscle_gain_caps_calories() -> None:
    windows = [make_window("dinner", 18, 19, calories=600)]
    profile = make_profile(NutritionGoal.MUSCLE_GAIN, calories=2000)

    result = BaselineRedistributor().redistribute(windows, [], profile, now=at(12))

    assert result[0].adjusted_calories == pytest.approx(900)
    assert result[0].adjusted_macros.protein >= 45


def test_default_goal_caps_calories() -> None:
    windows = [make_window("dinner", 18, 19, calories=600)]

    result = BaselineRedistributor().redistribute(
        windows, [], make_profile(calories=2000), now=at(12)
    )

    assert result[0].adjusted_calories == pytest.approx(780)
    assert result[0].reason == RedistributionReason.underconsumption(233)


def test_no_clamp_keeps_proportions_and_conserves_budget() -> None:
    windows = [
        make_window("lunch", 13, 14, calories=400),
        make_window("dinner", 18, 19, calories=800),
    ]
    profile = make_profile(NutritionGoal.PERFORMANCE_FOCUS, calories=900)

    lunch, dinner = BaselineRedistributor().redistribute(
        windows, [], profile, now=at(12)
    )

    assert dinner.adjusted_calories / lunch.adjusted_calories == pytest.approx(2.0)
    assert lunch.adjusted_calories + dinner.adjusted_calories == pytest.approx(900)


def test_all_windows_past_pass_through() -> None:
    windows = _day_windows()

    result = BaselineRedistributor().redistribute(
        windows, [], make_profile(), now=at(23)
    )

    for item, window in zip(result, windows, strict=True):
        assert item.passthrough
        assert item.reason is None
        assert item.adjusted_calories == window.target_calories
        assert item.adjusted_macros == window.target_macros
        assert item.apply() is window


def test_zero_calorie_upcoming_windows_pass_through() -> None:
    windows = [make_window("snack", 15, 16, calories=0, macros=MacroTargets.zero())]

    result = BaselineRedistributor().redistribute(
        windows, [], make_profile(), now=at(12)
    )

    assert result[0].passthrough


def test_active_window_counts_as_upcoming() -> None:
    windows = [make_window("lunch", 12, 13, calories=600)]

    result = BaselineRedistributor().redistribute(
        windows, [], make_profile(NutritionGoal.PERFORMANCE_FOCUS), now=at(12, 30)
    )

    assert not result[0].passthrough
    assert result[0].adjusted_calories == pytest.approx(2000)


def test_reason_for_remaining_thresholds() -> None:
    assert reason_for_remaining(1500, 1000) == RedistributionReason.underconsumption(50)
    assert reason_for_remaining(-100, 1000) == RedistributionReason.overconsumption(110)
    assert reason_for_remaining(1200, 1000) is None
    assert reason_for_remaining(800, 1000) is None


def test_reason_for_remaining_truncates_percent() -> None:
    assert reason_for_remaining(1205.5, 1000) is None
    assert reason_for_remaining(785, 1000) == RedistributionReason.overconsumption(21)


def _workout_windows():
    return [
        make_window("breakfast", 8, 9, calories=800),
        make_window("pre", 13, 14, purpose=WindowPurpose.PRE_WORKOUT),
        make_window("post", 18, 19, purpose=WindowPurpose.POST_WORKOUT),
    ]


def test_performance_focus_keeps_workout_targets() -> None:
    meals = [make_meal("m1", at(8, 30), 1400, protein=120, carbs=180, fat=50)]
    profile = make_profile(NutritionGoal.PERFORMANCE_FOCUS)

    _, pre, post = BaselineRedistributor().redistribute(
        _workout_windows(), meals, profile, now=at(12)
    )

    assert pre.adjusted_calories == pytest.approx(300)
    assert pre.adjusted_macros.carbs == pytest.approx(60)
    assert pre.adjusted_macros.protein == pytest.approx(15)
    assert post.adjusted_calories == pytest.approx(300)
    assert post.adjusted_macros.protein == pytest.approx(45)
    assert post.adjusted_macros.carbs == pytest.approx(10)
    assert pre.reason == RedistributionReason.overconsumption(50)


def test_over_budget_day_propagates_negative_remaining() -> None:
    meals = [make_meal("m1", at(8, 30), 2300, protein=160, carbs=250, fat=70)]
    profile = make_profile(NutritionGoal.PERFORMANCE_FOCUS)

    _, lunch, dinner = BaselineRedistributor().redistribute(
        _day_windows(), meals, profile, now=at(12)
    )

    for item in (lunch, dinner):
        assert item.adjusted_calories == pytest.approx(-150)
        assert item.adjusted_macros == MacroTargets(protein=-5, carbs=-25, fat=-5)
        assert item.reason == RedistributionReason.overconsumption(125)
