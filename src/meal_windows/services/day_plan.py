"""Day planning service: fetch a day, redistribute, write back, and score."""

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import Protocol

from meal_windows.domain.redistribution import (
    RedistributedWindow,
    RedistributionOutcome,
    RedistributionReason,
)
from meal_windows.domain.scores import DailyScore, ScoreSummary
from meal_windows.domain.windows import LoggedMeal, MealWindow, UserProfile
from meal_windows.services.dispatcher import DeviationDispatcher
from meal_windows.services.explanations import (
    RedistributionPattern,
    analyze_patterns,
)
from meal_windows.services.score_calculator import ScoreCalculator
from meal_windows.services.scoring import summarize_day

PATTERN_LOOKBACK_DAYS = 7

_logger = logging.getLogger(__name__)


class DayRepository(Protocol):
    """Persistence interface for a user's day plan."""

    def get_windows(self, day: date) -> list[MealWindow]:
        """Return the windows planned for a day, ordered by start."""

    def get_meals(self, day: date) -> list[LoggedMeal]:
        """Return meals logged on a day."""

    def get_profile(self) -> UserProfile | None:
        """Return the user's profile, if one exists."""

    def save_window(self, window: MealWindow) -> None:
        """Persist a window's adjusted values."""

    def save_meal(self, meal: LoggedMeal) -> None:
        """Persist a logged meal."""


@dataclass
class DayPlanService:
    """Coordinates persistence with redistribution and scoring."""

    repository: DayRepository
    dispatcher: DeviationDispatcher
    calculator: ScoreCalculator

    def get_windows(self, day: date) -> list[MealWindow]:
        return self.repository.get_windows(day)

    def get_profile(self) -> UserProfile | None:
        return self.repository.get_profile()

    def redistribute_day(self, day: date, now: datetime) -> RedistributionOutcome:
        """Run a redistribution pass and persist every adjusted window."""
        windows = self.repository.get_windows(day)
        profile = self.repository.get_profile()
        if profile is None:
            _logger.warning("No profile found, leaving %s windows unchanged", day)
            return RedistributionOutcome(
                windows=[RedistributedWindow.unchanged(window) for window in windows]
            )

        meals = self.repository.get_meals(day)
        outcome = self.dispatcher.dispatch(windows, meals, profile, now)
        saved = 0
        for item in outcome.windows:
            if item.passthrough:
                continue
            self.repository.save_window(item.apply())
            saved += 1
        _logger.info(
            "Redistributed %s: %s of %s windows updated", day, saved, len(windows)
        )
        return outcome

    def log_meal(self, meal: LoggedMeal, now: datetime) -> RedistributionOutcome:
        """Store a meal, then redistribute the day it belongs to."""
        self.repository.save_meal(meal)
        return self.redistribute_day(meal.timestamp.date(), now)

    def score_day(
        self, day: date, now: datetime
    ) -> tuple[DailyScore | None, ScoreSummary | None]:
        """Return the day's score and its display summary."""
        windows = self.repository.get_windows(day)
        meals = self.repository.get_meals(day)
        daily_score = self.calculator.score_day(day, windows, meals, now)
        summary = summarize_day(daily_score)
        if daily_score is not None and summary is not None:
            daily_score = replace(daily_score, insight=summary.insight)
        return daily_score, summary

    def detect_pattern(
        self, day: date, lookback_days: int = PATTERN_LOOKBACK_DAYS
    ) -> RedistributionPattern | None:
        """Look for a recurring redistribution pattern in the days up to ``day``."""
        reasons: list[RedistributionReason] = []
        for offset in range(lookback_days):
            for window in self.repository.get_windows(day - timedelta(days=offset)):
                if window.redistribution_reason is not None:
                    reasons.append(window.redistribution_reason)
        pattern = analyze_patterns(reasons)
        _logger.debug(
            "Pattern over %s reasons ending %s: %s", len(reasons), day, pattern
        )
        return pattern
