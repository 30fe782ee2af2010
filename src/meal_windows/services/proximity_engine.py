"""Proximity-weighted advanced redistribution engine."""

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from meal_windows.domain.redistribution import (
    AdjustedWindow,
    ReasonKind,
    RedistributionConstraints,
    RedistributionResult,
    RedistributionTrigger,
    TriggerType,
)
from meal_windows.domain.windows import (
    LoggedMeal,
    MacroTargets,
    MealWindow,
    UserProfile,
    WindowPurpose,
    meals_by_window,
)
from meal_windows.services.explanations import educational_tip, explain

MIN_WEIGHT = 0.1
NEAR_TERM = timedelta(hours=1)

_PURPOSE_MODIFIERS = {
    WindowPurpose.PRE_WORKOUT: 0.8,
    WindowPurpose.POST_WORKOUT: 0.8,
    WindowPurpose.SLEEP_OPTIMIZATION: 0.5,
    WindowPurpose.METABOLIC_BOOST: 1.2,
}

_logger = logging.getLogger(__name__)


@dataclass
class ProximityEngine:
    """Shift a deviation onto the nearest upcoming windows first."""

    constraints: RedistributionConstraints

    def try_redistribute(  # noqa: PLR0913
        self,
        meal: LoggedMeal,
        window: MealWindow,
        windows: list[MealWindow],
        meals: list[LoggedMeal],
        profile: UserProfile,
        now: datetime,
    ) -> RedistributionResult | None:
        """Redistribute when the meal deviates past the configured threshold."""
        if not self.evaluate_trigger(meal, window):
            return None
        trigger = self.build_trigger(meal, window, now)
        _logger.info(
            "Proximity trigger %s for window %s (deviation=%.2f)",
            trigger.trigger_type.kind,
            window.id,
            trigger.deviation,
        )
        return self.calculate_redistribution(
            trigger, windows, meals, now, bedtime_hour=profile.bedtime_hour
        )

    def calculate_deviation(self, meal: LoggedMeal, window: MealWindow) -> float:
        """Return the signed deviation ratio; positive means over target."""
        target = window.effective_calories
        if target <= 0:
            return 0.0
        return (meal.calories - target) / target

    def evaluate_trigger(self, meal: LoggedMeal, window: MealWindow) -> bool:
        return abs(self.calculate_deviation(meal, window)) > (
            self.constraints.deviation_threshold
        )

    def build_trigger(
        self, meal: LoggedMeal, window: MealWindow, now: datetime
    ) -> RedistributionTrigger:
        deviation = self.calculate_deviation(meal, window)
        if deviation > 0:
            trigger_type = TriggerType.overconsumption(int(deviation * 100))
        else:
            trigger_type = TriggerType.underconsumption(int(abs(deviation) * 100))
        return RedistributionTrigger(
            window=window,
            trigger_type=trigger_type,
            deviation=deviation,
            consumed=meal.macros,
            evaluated_at=now,
        )

    def handle_missed_window(  # noqa: PLR0913
        self,
        window: MealWindow,
        windows: list[MealWindow],
        meals: list[LoggedMeal],
        profile: UserProfile,
        now: datetime,
    ) -> RedistributionResult | None:
        """Move a missed window's budget forward, or None when nothing can take it."""
        result = self.calculate_missed_window(
            window, windows, meals, now, bedtime_hour=profile.bedtime_hour
        )
        if not result.adjusted_windows:
            _logger.info(
                "Missed window %s not redistributed: %s", window.id, result.explanation
            )
            return None
        return result

    def calculate_missed_window(
        self,
        window: MealWindow,
        windows: list[MealWindow],
        meals: list[LoggedMeal],
        now: datetime,
        bedtime_hour: int = 22,
    ) -> RedistributionResult:
        """Move a fully missed window's budget onto the remaining windows."""
        trigger = RedistributionTrigger(
            window=window,
            trigger_type=TriggerType.missed_window(),
            deviation=-1.0,
            consumed=MacroTargets.zero(),
            evaluated_at=now,
        )
        return self.calculate_redistribution(
            trigger, windows, meals, now, bedtime_hour=bedtime_hour
        )

    def calculate_redistribution(  # noqa: PLR0913
        self,
        trigger: RedistributionTrigger,
        windows: list[MealWindow],
        meals: list[LoggedMeal],
        now: datetime,
        *,
        bedtime_hour: int = 22,
    ) -> RedistributionResult:
        """Distribute the trigger's deviation over eligible upcoming windows."""
        grouped = meals_by_window(meals, windows)
        upcoming = sorted(
            (
                window
                for window in windows
                if window.start > now and not grouped.get(window.id)
            ),
            key=lambda window: window.start,
        )
        if not upcoming:
            return _empty_result(
                trigger,
                "No upcoming windows available for redistribution.",
                tip=None,
                confidence=0.0,
            )

        eligible = self._filter_for_bedtime(upcoming, now, bedtime_hour)
        if not eligible:
            return _empty_result(
                trigger,
                "No windows available outside of bedtime buffer.",
                tip="Try to complete your meals earlier to avoid late-night eating.",
                confidence=0.5,
            )

        adjustment = _adjustment_needed(trigger)
        weights = _proximity_weights(eligible, now)
        adjusted = [
            self._adjust_window(window, weights[window.id], adjustment, trigger)
            for window in eligible
        ]
        result = RedistributionResult(
            adjusted_windows=adjusted,
            trigger_type=trigger.trigger_type,
            explanation="",
            educational_tip=educational_tip(trigger.trigger_type),
            confidence=_confidence(adjusted),
            total_redistributed=_total_redistributed(adjusted),
        )
        return replace(result, explanation=explain(result))

    def _filter_for_bedtime(
        self, windows: list[MealWindow], now: datetime, bedtime_hour: int
    ) -> list[MealWindow]:
        bedtime = now.replace(hour=bedtime_hour, minute=0, second=0, microsecond=0)
        if bedtime < now:
            bedtime += timedelta(days=1)
        cutoff = bedtime - timedelta(hours=self.constraints.bedtime_buffer_hours)
        return [
            window
            for window in windows
            if window.end <= cutoff or window.start < now + NEAR_TERM
        ]

    def _adjust_window(
        self,
        window: MealWindow,
        weight: float,
        adjustment: MacroTargets,
        trigger: RedistributionTrigger,
    ) -> AdjustedWindow:
        original = window.target_macros
        share = adjustment.scaled(weight)
        kind = trigger.trigger_type.kind
        if kind == ReasonKind.OVERCONSUMPTION:
            proposed = original.minus_floor_zero(share)
        elif kind in {ReasonKind.UNDERCONSUMPTION, ReasonKind.MISSED_WINDOW}:
            proposed = original + share
        else:
            proposed = original

        constrained = self._apply_constraints(proposed, original)
        ratio = constrained.calories / original.calories if original.calories else 1.0
        return AdjustedWindow(
            window_id=window.id,
            original_macros=original,
            adjusted_macros=constrained,
            adjustment_ratio=ratio,
            reason_text=_window_reason(kind, ratio),
        )

    def _apply_constraints(
        self, macros: MacroTargets, original: MacroTargets
    ) -> MacroTargets:
        limits = self.constraints
        calories = macros.calories
        if calories > 0 and calories > limits.max_calories_per_window:
            macros = macros.scaled(limits.max_calories_per_window / calories)
        elif calories > 0 and calories < limits.min_calories_per_window:
            macros = macros.scaled(limits.min_calories_per_window / calories)

        min_protein = original.protein * limits.min_protein_fraction
        return MacroTargets(
            protein=min(
                limits.max_protein_per_window, max(min_protein, macros.protein)
            ),
            carbs=min(limits.max_carbs_per_window, max(0.0, macros.carbs)),
            fat=min(limits.max_fat_per_window, max(0.0, macros.fat)),
        )


def _adjustment_needed(trigger: RedistributionTrigger) -> MacroTargets:
    target = trigger.window.effective_macros
    kind = trigger.trigger_type.kind
    if kind == ReasonKind.OVERCONSUMPTION:
        return trigger.consumed.minus_floor_zero(target)
    if kind == ReasonKind.UNDERCONSUMPTION:
        return target.minus_floor_zero(trigger.consumed)
    if kind == ReasonKind.MISSED_WINDOW:
        return target
    return MacroTargets.zero()


def _proximity_weights(windows: list[MealWindow], now: datetime) -> dict[str, float]:
    span = (windows[-1].end - windows[0].start).total_seconds()
    weights: dict[str, float] = {}
    for window in windows:
        if span > 0:
            proximity = 1.0 - (window.start - now).total_seconds() / span
        else:
            proximity = 1.0
        modifier = _PURPOSE_MODIFIERS.get(window.purpose, 1.0)
        weights[window.id] = max(MIN_WEIGHT, proximity * modifier)

    total = sum(weights.values())
    return {window_id: weight / total for window_id, weight in weights.items()}


def _window_reason(kind: ReasonKind, ratio: float) -> str:
    change = int(abs(ratio - 1.0) * 100)
    if kind == ReasonKind.OVERCONSUMPTION:
        return f"Reduced by {change}% due to earlier overconsumption"
    if kind == ReasonKind.UNDERCONSUMPTION:
        return f"Increased by {change}% to compensate for earlier deficit"
    if kind == ReasonKind.MISSED_WINDOW:
        return f"Increased by {change}% to account for missed window"
    return f"Adjusted by {change}%"


def _confidence(adjusted: list[AdjustedWindow]) -> float:
    if not adjusted:
        return 0.0
    mean_change = sum(abs(item.adjustment_ratio - 1.0) for item in adjusted) / len(
        adjusted
    )
    return max(0.5, min(1.0, 1.0 - mean_change))


def _total_redistributed(adjusted: list[AdjustedWindow]) -> MacroTargets:
    total = MacroTargets.zero()
    for item in adjusted:
        total = total + MacroTargets(
            protein=abs(item.adjusted_macros.protein - item.original_macros.protein),
            carbs=abs(item.adjusted_macros.carbs - item.original_macros.carbs),
            fat=abs(item.adjusted_macros.fat - item.original_macros.fat),
        )
    return total


def _empty_result(
    trigger: RedistributionTrigger,
    explanation: str,
    *,
    tip: str | None,
    confidence: float,
) -> RedistributionResult:
    return RedistributionResult(
        adjusted_windows=[],
        trigger_type=trigger.trigger_type,
        explanation=explanation,
        educational_tip=tip,
        confidence=confidence,
        total_redistributed=MacroTargets.zero(),
    )
