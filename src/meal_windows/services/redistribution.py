"""Baseline redistribution of the remaining daily budget."""

import logging
from dataclasses import dataclass
from datetime import datetime

from meal_windows.domain.redistribution import RedistributedWindow, RedistributionReason
from meal_windows.domain.windows import (
    LoggedMeal,
    MacroTargets,
    MealWindow,
    NutritionGoal,
    UserProfile,
    WindowPurpose,
)
from meal_windows.services.macro_balancer import balance_macros

REASON_THRESHOLD_PERCENT = 20
MIN_WINDOW_CALORIES = 200.0
WEIGHT_LOSS_PROTEIN_FRACTION = 0.8
MUSCLE_GAIN_CALORIE_CAP = 1.5
DEFAULT_CALORIE_CAP = 1.3

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Remaining:
    calories: float
    protein: float
    carbs: float
    fat: float


@dataclass
class BaselineRedistributor:
    """Spread the remaining budget over upcoming windows by target share."""

    def redistribute(
        self,
        windows: list[MealWindow],
        meals: list[LoggedMeal],
        profile: UserProfile,
        now: datetime,
    ) -> list[RedistributedWindow]:
        """Return one entry per window, in input order."""
        remaining = _remaining_budget(meals, profile)
        upcoming = [window for window in windows if not window.is_past(now)]
        if not upcoming:
            return [RedistributedWindow.unchanged(window) for window in windows]

        total_upcoming = sum(window.target_calories for window in upcoming)
        if total_upcoming == 0:
            _logger.debug("Upcoming windows have no calorie target, passing through")
            return [RedistributedWindow.unchanged(window) for window in windows]

        reason = reason_for_remaining(remaining.calories, total_upcoming)
        _logger.debug(
            "Redistributing %.0f kcal over %s upcoming windows (reason=%s)",
            remaining.calories,
            len(upcoming),
            reason,
        )

        results: list[RedistributedWindow] = []
        for window in windows:
            if window.is_past(now):
                results.append(RedistributedWindow.unchanged(window))
                continue
            share = window.target_calories / total_upcoming
            calories, macros = _clamp_for_goal(
                window,
                profile.primary_goal,
                calories=remaining.calories * share,
                macros=MacroTargets(
                    protein=remaining.protein * share,
                    carbs=remaining.carbs * share,
                    fat=remaining.fat * share,
                ),
            )
            results.append(
                RedistributedWindow(
                    window=window,
                    adjusted_calories=calories,
                    adjusted_macros=balance_macros(calories, macros, window.purpose),
                    reason=reason,
                )
            )
        return results


def reason_for_remaining(
    remaining_calories: float, total_upcoming_calories: float
) -> RedistributionReason | None:
    """Derive the shared reason for a pass from the remaining budget.

    The percent difference is truncated toward zero before comparison.
    """
    percent_diff = int(
        (remaining_calories - total_upcoming_calories) * 100 / total_upcoming_calories
    )
    if percent_diff < -REASON_THRESHOLD_PERCENT:
        return RedistributionReason.overconsumption(abs(percent_diff))
    if percent_diff > REASON_THRESHOLD_PERCENT:
        return RedistributionReason.underconsumption(percent_diff)
    return None


def _remaining_budget(meals: list[LoggedMeal], profile: UserProfile) -> _Remaining:
    # Negative values are valid and mark an over-budget day.
    return _Remaining(
        calories=profile.daily_calories - sum(meal.calories for meal in meals),
        protein=profile.daily_protein - sum(meal.protein for meal in meals),
        carbs=profile.daily_carbs - sum(meal.carbs for meal in meals),
        fat=profile.daily_fat - sum(meal.fat for meal in meals),
    )


def _clamp_for_goal(
    window: MealWindow,
    goal: NutritionGoal,
    *,
    calories: float,
    macros: MacroTargets,
) -> tuple[float, MacroTargets]:
    protein = macros.protein
    carbs = macros.carbs
    target = window.target_macros

    if goal == NutritionGoal.WEIGHT_LOSS:
        calories = max(calories, MIN_WINDOW_CALORIES)
        protein = max(protein, target.protein * WEIGHT_LOSS_PROTEIN_FRACTION)
    elif goal == NutritionGoal.MUSCLE_GAIN:
        calories = min(calories, window.target_calories * MUSCLE_GAIN_CALORIE_CAP)
        protein = max(protein, target.protein)
    elif goal == NutritionGoal.PERFORMANCE_FOCUS:
        if window.purpose == WindowPurpose.PRE_WORKOUT:
            carbs = max(carbs, target.carbs)
        elif window.purpose == WindowPurpose.POST_WORKOUT:
            protein = max(protein, target.protein)
    else:
        calories = max(
            MIN_WINDOW_CALORIES,
            min(calories, window.target_calories * DEFAULT_CALORIE_CAP),
        )

    return calories, MacroTargets(protein=protein, carbs=carbs, fat=macros.fat)
