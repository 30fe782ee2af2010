"""Window and daily score calculation from a windows+meals snapshot."""

import logging
import statistics
from dataclasses import dataclass
from datetime import date, datetime

from meal_windows.domain.scores import (
    AdherenceFactor,
    DailyScore,
    DailyScoreBreakdown,
    MacroScoreBreakdown,
    WindowScore,
)
from meal_windows.domain.windows import LoggedMeal, MealWindow, meals_by_window
from meal_windows.services.scoring import factor_contribution

ADHERENCE_WEIGHT = 0.40
QUALITY_WEIGHT = 0.25
TIMING_WEIGHT = 0.20
CONSISTENCY_WEIGHT = 0.15
DEFAULT_QUALITY = 5.0

_logger = logging.getLogger(__name__)


def macro_score(actual: float, target: float) -> int:
    """Score 0-100 for how close an actual amount is to its target."""
    if target <= 0:
        return 100 if actual == 0 else 0
    return round(100 * max(0.0, 1.0 - abs(actual - target) / target))


def window_insight(score: int, calories: float, target_calories: float) -> str:
    if score >= 90:
        return "On target"
    if score >= 70:
        return "Close to target"
    if calories > target_calories:
        return "Over target"
    return "Under target"


@dataclass
class ScoreCalculator:
    def score_window(
        self, window: MealWindow, meals: list[LoggedMeal], now: datetime
    ) -> WindowScore:
        """Score one window against its effective targets."""
        calories = sum(meal.calories for meal in meals)
        protein = sum(meal.protein for meal in meals)
        carbs = sum(meal.carbs for meal in meals)
        fat = sum(meal.fat for meal in meals)
        targets = window.effective_macros

        breakdown = MacroScoreBreakdown(
            calorie_score=macro_score(calories, window.effective_calories),
            protein_score=macro_score(protein, targets.protein),
            carb_score=macro_score(carbs, targets.carbs),
            fat_score=macro_score(fat, targets.fat),
        )
        rows = (
            ("calories", calories, window.effective_calories, breakdown.calorie_score),
            ("protein", protein, targets.protein, breakdown.protein_score),
            ("carbs", carbs, targets.carbs, breakdown.carb_score),
            ("fat", fat, targets.fat, breakdown.fat_score),
        )
        factors = [
            AdherenceFactor(
                macro=name,
                actual=actual,
                target=target,
                contribution=factor_contribution(score / 10),
            )
            for name, actual, target, score in rows
        ]
        score = breakdown.weighted_average
        return WindowScore(
            window_id=window.id,
            score=score,
            breakdown=breakdown,
            factors=factors,
            insight=window_insight(score, calories, window.effective_calories),
            calculated_at=now,
        )

    def score_day(
        self,
        day: date,
        windows: list[MealWindow],
        meals: list[LoggedMeal],
        now: datetime,
    ) -> DailyScore | None:
        """Score a day; None when no window is past or has meals yet."""
        grouped = meals_by_window(meals, windows)
        scored = [
            window
            for window in windows
            if window.is_past(now) or grouped.get(window.id)
        ]
        if not scored:
            _logger.debug("No scorable windows for %s", day)
            return None

        window_scores = {
            window.id: self.score_window(window, grouped[window.id], now)
            for window in scored
        }
        with_meals = [window for window in windows if grouped.get(window.id)]
        on_time = [
            window
            for window in with_meals
            if all(
                window.buffered_contains(meal.timestamp)
                for meal in grouped[window.id]
            )
        ]
        health_scores = [
            meal.health_score for meal in meals if meal.health_score is not None
        ]
        if health_scores:
            average_health: int | None = round(statistics.fmean(health_scores))
            quality = statistics.fmean(health_scores) / 10
            quality_detail = f"Avg meal score {quality:.1f}"
        else:
            average_health = None
            quality = DEFAULT_QUALITY
            quality_detail = "No meal scores yet"

        adherence = len(with_meals) / len(windows) * 10
        timing = len(on_time) / len(windows) * 10
        consistency = _consistency(scored, grouped)

        breakdown = DailyScoreBreakdown(
            adherence=adherence,
            quality=quality,
            timing=timing,
            consistency=consistency,
            adherence_detail=f"{len(with_meals)} of {len(windows)} windows completed",
            quality_detail=quality_detail,
            timing_detail=f"{len(on_time)} of {len(windows)} windows eaten on time",
            consistency_detail="Calorie distribution",
        )
        internal = round(
            10
            * (
                ADHERENCE_WEIGHT * adherence
                + QUALITY_WEIGHT * quality
                + TIMING_WEIGHT * timing
                + CONSISTENCY_WEIGHT * consistency
            )
        )
        return DailyScore(
            day=day,
            score=internal,
            window_scores={
                window_id: item.score for window_id, item in window_scores.items()
            },
            average_health_score=average_health,
            completed_windows=len(with_meals),
            total_windows=len(windows),
            on_time_windows=sum(1 for window in with_meals if window.is_past(now)),
            calculated_at=now,
            breakdown=breakdown,
        )


def _consistency(
    windows: list[MealWindow], grouped: dict[str, list[LoggedMeal]]
) -> float:
    ratios = [
        sum(meal.calories for meal in grouped[window.id]) / window.effective_calories
        for window in windows
        if window.effective_calories > 0
    ]
    if len(ratios) < 2:
        return 10.0
    mean = statistics.fmean(ratios)
    if mean == 0:
        return 0.0
    variation = statistics.pstdev(ratios) / mean
    return max(0.0, min(10.0, 10.0 * (1.0 - variation)))
