"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from supabase import create_client

from meal_windows.adapters.openai_meal_client import OpenAIMealClient
from meal_windows.adapters.supabase_day_repository import SupabaseDayRepository
from meal_windows.config import Settings, build_constraints
from meal_windows.services.day_plan import DayPlanService
from meal_windows.services.dispatcher import AdvancedEngine, DeviationDispatcher
from meal_windows.services.proximity_engine import ProximityEngine
from meal_windows.services.recognition import MealRecognitionService
from meal_windows.services.redistribution import BaselineRedistributor
from meal_windows.services.score_calculator import ScoreCalculator


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    day_plan_service: DayPlanService
    recognition_service: MealRecognitionService
    close_resources: Callable[[], Awaitable[None]]
    clock: Callable[[], datetime] = field(default=_utc_now)


def build_engine(settings: Settings) -> AdvancedEngine | None:
    """Return the configured advanced engine, or None when disabled."""
    if settings.advanced_engine == "none":
        return None
    return ProximityEngine(build_constraints(settings))


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    day_plan_service = DayPlanService(
        repository=SupabaseDayRepository(supabase_client),
        dispatcher=DeviationDispatcher(
            baseline=BaselineRedistributor(),
            engine=build_engine(resolved_settings),
        ),
        calculator=ScoreCalculator(),
    )
    openai_client = OpenAIMealClient.create(resolved_settings.openai_api_key)
    recognition_service = MealRecognitionService(
        client=openai_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )

    async def close_resources() -> None:
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        day_plan_service=day_plan_service,
        recognition_service=recognition_service,
        close_resources=close_resources,
    )
