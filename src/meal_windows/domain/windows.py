"""Domain models for meal windows, logged meals, and user profiles."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from meal_windows.domain.redistribution import RedistributionReason

PROTEIN_KCAL_PER_G = 4
CARB_KCAL_PER_G = 4
FAT_KCAL_PER_G = 9


class WindowPurpose(StrEnum):
    """Semantic purpose of a meal window."""

    PRE_WORKOUT = "pre-workout"
    POST_WORKOUT = "post-workout"
    SUSTAINED_ENERGY = "sustained-energy"
    RECOVERY = "recovery"
    METABOLIC_BOOST = "metabolic-boost"
    SLEEP_OPTIMIZATION = "sleep-optimization"
    FOCUS_BOOST = "focus-boost"

    @property
    def display_name(self) -> str:
        """Human-readable purpose name."""
        if self in {WindowPurpose.PRE_WORKOUT, WindowPurpose.POST_WORKOUT}:
            return self.value.title()
        return self.value.replace("-", " ").title()


class Flexibility(StrEnum):
    """How strictly a window's time bounds are enforced."""

    STRICT = "strict"
    MODERATE = "moderate"
    FLEXIBLE = "flexible"

    @property
    def time_buffer(self) -> timedelta:
        """Grace period applied on both sides of the window."""
        return _TIME_BUFFERS[self]


_TIME_BUFFERS = {
    Flexibility.STRICT: timedelta(minutes=15),
    Flexibility.MODERATE: timedelta(minutes=30),
    Flexibility.FLEXIBLE: timedelta(hours=1),
}


class NutritionGoal(StrEnum):
    """Primary goal driving redistribution clamps."""

    WEIGHT_LOSS = "weight-loss"
    MUSCLE_GAIN = "muscle-gain"
    MAINTAIN_WEIGHT = "maintain-weight"
    PERFORMANCE_FOCUS = "performance-focus"
    BETTER_SLEEP = "better-sleep"
    OVERALL_WELLBEING = "overall-wellbeing"
    ATHLETIC_PERFORMANCE = "athletic-performance"


@dataclass(frozen=True)
class MacroTargets:
    """Protein, carb and fat grams."""

    protein: float
    carbs: float
    fat: float

    @classmethod
    def zero(cls) -> MacroTargets:
        return cls(protein=0.0, carbs=0.0, fat=0.0)

    @property
    def calories(self) -> float:
        """Calories derived from the fixed energy densities."""
        return (
            self.protein * PROTEIN_KCAL_PER_G
            + self.carbs * CARB_KCAL_PER_G
            + self.fat * FAT_KCAL_PER_G
        )

    def __add__(self, other: MacroTargets) -> MacroTargets:
        return MacroTargets(
            protein=self.protein + other.protein,
            carbs=self.carbs + other.carbs,
            fat=self.fat + other.fat,
        )

    def minus_floor_zero(self, other: MacroTargets) -> MacroTargets:
        """Subtract component-wise, never going below zero."""
        return MacroTargets(
            protein=max(0.0, self.protein - other.protein),
            carbs=max(0.0, self.carbs - other.carbs),
            fat=max(0.0, self.fat - other.fat),
        )

    def scaled(self, factor: float) -> MacroTargets:
        return MacroTargets(
            protein=self.protein * factor,
            carbs=self.carbs * factor,
            fat=self.fat * factor,
        )


@dataclass(frozen=True)
class MealWindow:
    """A time-boxed slice of the day with a calorie/macro target."""

    id: str
    name: str
    start: datetime
    end: datetime
    purpose: WindowPurpose
    flexibility: Flexibility
    target_calories: float
    target_macros: MacroTargets
    day: date
    adjusted_calories: float | None = None
    adjusted_macros: MacroTargets | None = None
    redistribution_reason: RedistributionReason | None = None
    is_fasted: bool = False

    def __post_init__(self) -> None:
        if self.end <= self.start:
            raise ValueError(f"Window {self.id} must end after it starts")

    @property
    def display_name(self) -> str:
        return self.name or self.purpose.display_name

    @property
    def effective_calories(self) -> float:
        """Adjusted calories when redistribution ran, else the target."""
        if self.adjusted_calories is not None:
            return self.adjusted_calories
        return self.target_calories

    @property
    def effective_macros(self) -> MacroTargets:
        """Adjusted macros when redistribution ran, else the target."""
        if self.adjusted_macros is not None:
            return self.adjusted_macros
        return self.target_macros

    def contains(self, timestamp: datetime) -> bool:
        return self.start <= timestamp <= self.end

    def buffered_contains(self, timestamp: datetime) -> bool:
        """Return True when the timestamp is inside the window's grace period."""
        buffer = self.flexibility.time_buffer
        return self.start - buffer <= timestamp <= self.end + buffer

    def is_past(self, now: datetime) -> bool:
        return now > self.end

    def with_adjustment(
        self,
        calories: float,
        macros: MacroTargets,
        reason: RedistributionReason | None,
    ) -> MealWindow:
        """Return a copy carrying redistribution output."""
        return replace(
            self,
            adjusted_calories=calories,
            adjusted_macros=macros,
            redistribution_reason=reason,
        )


@dataclass(frozen=True)
class LoggedMeal:
    """A consumption event."""

    id: str
    name: str
    timestamp: datetime
    calories: float
    protein: float
    carbs: float
    fat: float
    window_id: str | None = None
    health_score: int | None = None
    micronutrients: dict[str, float] = field(default_factory=dict)

    @property
    def macros(self) -> MacroTargets:
        return MacroTargets(protein=self.protein, carbs=self.carbs, fat=self.fat)


@dataclass(frozen=True)
class UserProfile:
    """Daily targets and goal for a user."""

    daily_calories: float
    daily_protein: float
    daily_carbs: float
    daily_fat: float
    primary_goal: NutritionGoal
    bedtime_hour: int = 22


def resolve_window(meal: LoggedMeal, windows: list[MealWindow]) -> MealWindow | None:
    """Return the window owning a meal, or None when no window matches."""
    if meal.window_id is not None:
        for window in windows:
            if window.id == meal.window_id:
                return window
    for window in windows:
        if window.contains(meal.timestamp):
            return window
    return None


def meals_by_window(
    meals: list[LoggedMeal], windows: list[MealWindow]
) -> dict[str, list[LoggedMeal]]:
    """Group meals by owning window id; unowned meals are dropped."""
    grouped: dict[str, list[LoggedMeal]] = {window.id: [] for window in windows}
    for meal in meals:
        window = resolve_window(meal, windows)
        if window is None:
            continue
        grouped[window.id].append(meal)
    return grouped
