"""Route a redistribution pass through the advanced engine or the baseline."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from meal_windows.domain.redistribution import (
    RedistributedWindow,
    RedistributionOutcome,
    RedistributionResult,
)
from meal_windows.domain.windows import (
    LoggedMeal,
    MealWindow,
    UserProfile,
    meals_by_window,
    resolve_window,
)
from meal_windows.services.explanations import explain_adjustments, severity
from meal_windows.services.redistribution import BaselineRedistributor

_logger = logging.getLogger(__name__)


class AdvancedEngine(Protocol):
    """Optional engine that may take over a redistribution pass."""

    def try_redistribute(  # noqa: PLR0913
        self,
        meal: LoggedMeal,
        window: MealWindow,
        windows: list[MealWindow],
        meals: list[LoggedMeal],
        profile: UserProfile,
        now: datetime,
    ) -> RedistributionResult | None:
        """Return a result when the deviation crosses the threshold, else None."""

    def handle_missed_window(  # noqa: PLR0913
        self,
        window: MealWindow,
        windows: list[MealWindow],
        meals: list[LoggedMeal],
        profile: UserProfile,
        now: datetime,
    ) -> RedistributionResult | None:
        """Return a result moving a missed window's budget, else None."""


@dataclass
class DeviationDispatcher:
    """Decide which engine handles the most recent event of the day."""

    baseline: BaselineRedistributor
    engine: AdvancedEngine | None = None

    def apply(
        self,
        windows: list[MealWindow],
        meals: list[LoggedMeal],
        profile: UserProfile,
        now: datetime,
    ) -> list[RedistributedWindow]:
        """Return one redistributed entry per window."""
        return self.dispatch(windows, meals, profile, now).windows

    def dispatch(
        self,
        windows: list[MealWindow],
        meals: list[LoggedMeal],
        profile: UserProfile,
        now: datetime,
    ) -> RedistributionOutcome:
        """Redistribute and keep the engine's commentary when it took over."""
        result = self._consult_engine(windows, meals, profile, now)
        if result is None:
            return RedistributionOutcome(
                windows=self.baseline.redistribute(windows, meals, profile, now)
            )
        return RedistributionOutcome(
            windows=from_engine_result(result, windows),
            explanation=result.explanation,
            educational_tip=result.educational_tip,
            severity=severity(result.trigger_type),
            confidence=result.confidence,
            details=explain_adjustments(result.adjusted_windows),
        )

    def _consult_engine(
        self,
        windows: list[MealWindow],
        meals: list[LoggedMeal],
        profile: UserProfile,
        now: datetime,
    ) -> RedistributionResult | None:
        engine = self.engine
        if engine is None:
            return None
        meal = latest_meal(meals) if meals else None
        missed = latest_missed_window(windows, meals, now)
        if missed is not None and (meal is None or missed.end > meal.timestamp):
            return _ask_engine(
                f"missed window {missed.id}",
                lambda: engine.handle_missed_window(
                    missed, windows, meals, profile, now
                ),
            )
        if meal is None:
            return None
        window = resolve_window(meal, windows)
        if window is None:
            _logger.info("No window matches meal %s, using baseline", meal.id)
            return None
        return _ask_engine(
            f"meal {meal.id}",
            lambda: engine.try_redistribute(meal, window, windows, meals, profile, now),
        )


def _ask_engine(
    subject: str, call: Callable[[], RedistributionResult | None]
) -> RedistributionResult | None:
    try:
        result = call()
    except Exception:
        _logger.warning(
            "Advanced engine failed for %s, using baseline", subject, exc_info=True
        )
        return None
    if result is None:
        _logger.debug("Advanced engine declined %s", subject)
    return result


def latest_missed_window(
    windows: list[MealWindow], meals: list[LoggedMeal], now: datetime
) -> MealWindow | None:
    """Return the latest-ending past window with no meals, skipping fasted ones."""
    grouped = meals_by_window(meals, windows)
    missed = [
        window
        for window in windows
        if window.is_past(now) and not grouped.get(window.id) and not window.is_fasted
    ]
    if not missed:
        return None
    return max(missed, key=lambda window: window.end)


def latest_meal(meals: list[LoggedMeal]) -> LoggedMeal:
    """Return the most recently logged meal; later list entries win ties."""
    latest = meals[0]
    for meal in meals[1:]:
        if meal.timestamp >= latest.timestamp:
            latest = meal
    return latest


def from_engine_result(
    result: RedistributionResult, windows: list[MealWindow]
) -> list[RedistributedWindow]:
    """Convert advanced engine output into the shared redistribution shape."""
    reason = result.trigger_type.to_reason()
    adjustments = {item.window_id: item for item in result.adjusted_windows}
    redistributed: list[RedistributedWindow] = []
    for window in windows:
        adjustment = adjustments.get(window.id)
        if adjustment is None:
            redistributed.append(RedistributedWindow.unchanged(window))
            continue
        redistributed.append(
            RedistributedWindow(
                window=window,
                adjusted_calories=adjustment.adjusted_macros.calories,
                adjusted_macros=adjustment.adjusted_macros,
                reason=reason,
            )
        )
    return redistributed
