"""Supabase repository for windows, meals, and the user profile."""

from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta

from supabase import Client

from meal_windows.domain.redistribution import RedistributionReason
from meal_windows.domain.windows import (
    Flexibility,
    LoggedMeal,
    MacroTargets,
    MealWindow,
    NutritionGoal,
    UserProfile,
    WindowPurpose,
)
from meal_windows.services.day_plan import DayRepository

_WINDOW_COLUMNS = (
    "id, name, day, start_at, end_at, purpose, flexibility, target_calories, "
    "target_protein, target_carbs, target_fat, adjusted_calories, adjusted_protein, "
    "adjusted_carbs, adjusted_fat, redistribution_reason, is_fasted"
)
_MEAL_COLUMNS = (
    "id, name, logged_at, calories, protein, carbs, fat, window_id, health_score, "
    "micronutrients"
)


@dataclass
class SupabaseDayRepository(DayRepository):
    """Supabase implementation for the day plan."""

    client: Client

    def get_windows(self, day: date) -> list[MealWindow]:
        response = (
            self.client.table("windows")
            .select(_WINDOW_COLUMNS)
            .eq("day", day.isoformat())
            .order("start_at", desc=False)
            .execute()
        )
        return [_parse_window(row) for row in response.data or []]

    def get_meals(self, day: date) -> list[LoggedMeal]:
        start = datetime.combine(day, time.min, tzinfo=UTC)
        end = start + timedelta(days=1)
        response = (
            self.client.table("meals")
            .select(_MEAL_COLUMNS)
            .gte("logged_at", start.isoformat())
            .lt("logged_at", end.isoformat())
            .order("logged_at", desc=False)
            .execute()
        )
        return [_parse_meal(row) for row in response.data or []]

    def get_profile(self) -> UserProfile | None:
        response = (
            self.client.table("profiles")
            .select(
                "daily_calories, daily_protein, daily_carbs, daily_fat, "
                "primary_goal, bedtime_hour"
            )
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return UserProfile(
            daily_calories=float(row["daily_calories"]),
            daily_protein=float(row["daily_protein"]),
            daily_carbs=float(row["daily_carbs"]),
            daily_fat=float(row["daily_fat"]),
            primary_goal=NutritionGoal(row["primary_goal"]),
            bedtime_hour=int(row.get("bedtime_hour") or 22),
        )

    def save_window(self, window: MealWindow) -> None:
        """Write a window's adjusted values and reason."""
        macros = window.adjusted_macros
        reason = window.redistribution_reason
        self.client.table("windows").update(
            {
                "adjusted_calories": window.adjusted_calories,
                "adjusted_protein": macros.protein if macros else None,
                "adjusted_carbs": macros.carbs if macros else None,
                "adjusted_fat": macros.fat if macros else None,
                "redistribution_reason": reason.to_dict() if reason else None,
            }
        ).eq("id", window.id).execute()

    def save_meal(self, meal: LoggedMeal) -> None:
        response = (
            self.client.table("meals")
            .insert(
                {
                    "id": meal.id,
                    "name": meal.name,
                    "logged_at": meal.timestamp.isoformat(),
                    "calories": meal.calories,
                    "protein": meal.protein,
                    "carbs": meal.carbs,
                    "fat": meal.fat,
                    "window_id": meal.window_id,
                    "health_score": meal.health_score,
                    "micronutrients": meal.micronutrients,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create meal")


def _parse_window(row: dict[str, object]) -> MealWindow:
    adjusted_macros = None
    if row.get("adjusted_protein") is not None:
        adjusted_macros = MacroTargets(
            protein=float(row["adjusted_protein"]),
            carbs=float(row.get("adjusted_carbs") or 0.0),
            fat=float(row.get("adjusted_fat") or 0.0),
        )
    adjusted_calories = row.get("adjusted_calories")
    reason = row.get("redistribution_reason")
    return MealWindow(
        id=str(row["id"]),
        name=str(row.get("name") or ""),
        start=datetime.fromisoformat(str(row["start_at"])),
        end=datetime.fromisoformat(str(row["end_at"])),
        purpose=WindowPurpose(row["purpose"]),
        flexibility=Flexibility(row.get("flexibility") or Flexibility.MODERATE),
        target_calories=float(row["target_calories"]),
        target_macros=MacroTargets(
            protein=float(row["target_protein"]),
            carbs=float(row["target_carbs"]),
            fat=float(row["target_fat"]),
        ),
        day=date.fromisoformat(str(row["day"])),
        adjusted_calories=(
            float(adjusted_calories) if adjusted_calories is not None else None
        ),
        adjusted_macros=adjusted_macros,
        redistribution_reason=(
            RedistributionReason.from_dict(reason) if isinstance(reason, dict) else None
        ),
        is_fasted=bool(row.get("is_fasted", False)),
    )


def _parse_meal(row: dict[str, object]) -> LoggedMeal:
    health_score = row.get("health_score")
    return LoggedMeal(
        id=str(row["id"]),
        name=str(row.get("name") or ""),
        timestamp=datetime.fromisoformat(str(row["logged_at"])),
        calories=float(row.get("calories", 0.0)),
        protein=float(row.get("protein", 0.0)),
        carbs=float(row.get("carbs", 0.0)),
        fat=float(row.get("fat", 0.0)),
        window_id=str(row["window_id"]) if row.get("window_id") else None,
        health_score=int(health_score) if health_score is not None else None,
        micronutrients=dict(row.get("micronutrients") or {}),
    )
