"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime

import pytest

from meal_windows.config import Settings
from meal_windows.containers import AppContainer
from meal_windows.domain.redistribution import RedistributionResult
from meal_windows.domain.windows import (
    Flexibility,
    LoggedMeal,
    MacroTargets,
    MealWindow,
    NutritionGoal,
    UserProfile,
    WindowPurpose,
)
from meal_windows.services.day_plan import DayPlanService, DayRepository
from meal_windows.services.dispatcher import AdvancedEngine, DeviationDispatcher
from meal_windows.services.recognition import (
    MealRecognitionClient,
    MealRecognitionService,
)
from meal_windows.services.redistribution import BaselineRedistributor
from meal_windows.services.score_calculator import ScoreCalculator

DAY = date(2026, 3, 2)


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 3, 2, hour, minute, tzinfo=UTC)


def make_window(  # noqa: PLR0913
    window_id: str,
    start_hour: int,
    end_hour: int,
    calories: float = 600,
    macros: MacroTargets | None = None,
    purpose: WindowPurpose = WindowPurpose.SUSTAINED_ENERGY,
    flexibility: Flexibility = Flexibility.MODERATE,
) -> MealWindow:
    return MealWindow(
        id=window_id,
        name=f"Window {window_id}",
        start=at(start_hour),
        end=at(end_hour),
        purpose=purpose,
        flexibility=flexibility,
        target_calories=calories,
        target_macros=macros or MacroTargets(protein=45, carbs=60, fat=20),
        day=DAY,
    )


def make_meal(  # noqa: PLR0913
    meal_id: str,
    timestamp: datetime,
    calories: float,
    protein: float = 0,
    carbs: float = 0,
    fat: float = 0,
    window_id: str | None = None,
    health_score: int | None = None,
) -> LoggedMeal:
    return LoggedMeal(
        id=meal_id,
        name=f"Meal {meal_id}",
        timestamp=timestamp,
        calories=calories,
        protein=protein,
        carbs=carbs,
        fat=fat,
        window_id=window_id,
        health_score=health_score,
    )


def make_profile(
    goal: NutritionGoal = NutritionGoal.MAINTAIN_WEIGHT,
    calories: float = 2000,
    protein: float = 150,
    carbs: float = 200,
    fat: float = 60,
) -> UserProfile:
    return UserProfile(
        daily_calories=calories,
        daily_protein=protein,
        daily_carbs=carbs,
        daily_fat=fat,
        primary_goal=goal,
    )


@dataclass
class InMemoryDayRepository(DayRepository):
    """In-memory day repository for tests."""

    windows: dict[str, MealWindow] = field(default_factory=dict)
    meals: list[LoggedMeal] = field(default_factory=list)
    profile: UserProfile | None = None
    saved_windows: list[MealWindow] = field(default_factory=list)

    def add_windows(self, *windows: MealWindow) -> None:
        for window in windows:
            self.windows[window.id] = window

    def get_windows(self, day: date) -> list[MealWindow]:
        return sorted(
            (window for window in self.windows.values() if window.day == day),
            key=lambda window: window.start,
        )

    def get_meals(self, day: date) -> list[LoggedMeal]:
        return [meal for meal in self.meals if meal.timestamp.date() == day]

    def get_profile(self) -> UserProfile | None:
        return self.profile

    def save_window(self, window: MealWindow) -> None:
        self.saved_windows.append(window)
        self.windows[window.id] = window

    def save_meal(self, meal: LoggedMeal) -> None:
        self.meals.append(meal)


@dataclass
class FakeEngine(AdvancedEngine):
    """Advanced engine returning a canned result."""

    result: RedistributionResult | None = None
    missed_result: RedistributionResult | None = None
    error: Exception | None = None
    calls: list[str] = field(default_factory=list)

    def try_redistribute(  # noqa: PLR0913
        self,
        meal: LoggedMeal,
        window: MealWindow,
        windows: list[MealWindow],
        meals: list[LoggedMeal],
        profile: UserProfile,
        now: datetime,
    ) -> RedistributionResult | None:
        self.calls.append(meal.id)
        if self.error is not None:
            raise self.error
        return self.result

    def handle_missed_window(  # noqa: PLR0913
        self,
        window: MealWindow,
        windows: list[MealWindow],
        meals: list[LoggedMeal],
        profile: UserProfile,
        now: datetime,
    ) -> RedistributionResult | None:
        self.calls.append(f"missed:{window.id}")
        if self.error is not None:
            raise self.error
        return self.missed_result


@dataclass
class FakeMealRecognitionClient(MealRecognitionClient):
    """Recognition client that returns canned data."""

    payload: dict[str, object] = field(
        default_factory=lambda: {
            "name": "Chicken rice bowl",
            "calories": 620.0,
            "protein_g": 45.0,
            "carbs_g": 70.0,
            "fat_g": 16.0,
            "health_score": 78,
            "micronutrients": [{"name": "iron", "amount": 3.2, "unit": "mg"}],
        }
    )
    requests: list[dict[str, object]] = field(default_factory=list)

    async def recognize(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        schema: dict[str, object],
        image_data_url: str | None = None,
        description: str | None = None,
    ) -> dict[str, object]:
        self.requests.append(
            {
                "model": model,
                "image_data_url": image_data_url,
                "description": description,
            }
        )
        return dict(self.payload)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        api_token="api-token",
        openai_api_key="openai-key",
    )


@pytest.fixture
def repository() -> InMemoryDayRepository:
    return InMemoryDayRepository()


@pytest.fixture
def day_plan_service(repository: InMemoryDayRepository) -> DayPlanService:
    return DayPlanService(
        repository=repository,
        dispatcher=DeviationDispatcher(baseline=BaselineRedistributor()),
        calculator=ScoreCalculator(),
    )


@pytest.fixture
def recognition_client() -> FakeMealRecognitionClient:
    return FakeMealRecognitionClient()


@pytest.fixture
def container(
    settings: Settings,
    day_plan_service: DayPlanService,
    recognition_client: FakeMealRecognitionClient,
) -> AppContainer:
    recognition_service = MealRecognitionService(
        client=recognition_client,
        model=settings.openai_model,
        reasoning_effort=settings.openai_reasoning_effort,
        store=settings.openai_store,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        day_plan_service=day_plan_service,
        recognition_service=recognition_service,
        close_resources=close_resources,
        clock=lambda: at(12, 30),
    )
