"""Day plan endpoints with token auth."""

from __future__ import annotations

from datetime import date  # noqa: TC003
from typing import TYPE_CHECKING
from uuid import uuid4

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status

from meal_windows.api.models import (
    MealIn,
    PatternOut,
    RecognizeIn,
    RedistributionOut,
    ScoreOut,
    WindowOut,
)
from meal_windows.services.day_plan import PATTERN_LOOKBACK_DAYS
from meal_windows.services.recognition import to_logged_meal
from meal_windows.services.scoring import EMPTY_DAY_INSIGHT

if TYPE_CHECKING:
    from meal_windows.containers import AppContainer

router = APIRouter()


def _get_api_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.api_token


async def require_token(
    x_api_token: str | None = Header(default=None),
    api_token: str = Depends(_get_api_token),
) -> None:
    """Ensure requests include a valid API token."""
    if not x_api_token or x_api_token != api_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


def _container(request: Request) -> AppContainer:
    return request.app.state.container


@router.get("/days/{day}/windows", dependencies=[Depends(require_token)])
async def list_windows(day: date, request: Request) -> list[WindowOut]:
    """Return the day's windows with their effective allocation."""
    container = _container(request)
    windows = container.day_plan_service.get_windows(day)
    return [WindowOut.from_window(window) for window in windows]


@router.post("/days/{day}/redistribute", dependencies=[Depends(require_token)])
async def redistribute(day: date, request: Request) -> RedistributionOut:
    """Run a redistribution pass for the day."""
    container = _container(request)
    service = container.day_plan_service
    if service.get_profile() is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found"
        )
    outcome = service.redistribute_day(day, container.clock())
    return RedistributionOut.from_outcome(outcome)


@router.post("/meals", dependencies=[Depends(require_token)])
async def log_meal(payload: MealIn, request: Request) -> RedistributionOut:
    """Log a meal and return the redistributed windows for its day."""
    container = _container(request)
    service = container.day_plan_service
    if service.get_profile() is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found"
        )
    meal = payload.to_meal(str(uuid4()))
    return RedistributionOut.from_outcome(service.log_meal(meal, container.clock()))


@router.get("/days/{day}/score", dependencies=[Depends(require_token)])
async def day_score(day: date, request: Request) -> ScoreOut:
    """Return the day's score and display summary."""
    container = _container(request)
    score, summary = container.day_plan_service.score_day(day, container.clock())
    if score is None or summary is None:
        return ScoreOut(day=day, insight=EMPTY_DAY_INSIGHT)
    return ScoreOut.from_score(day, score, summary)


@router.get("/days/{day}/pattern", dependencies=[Depends(require_token)])
async def redistribution_pattern(
    day: date,
    request: Request,
    lookback_days: int = Query(default=PATTERN_LOOKBACK_DAYS, ge=1, le=31),
) -> PatternOut:
    """Report a recurring redistribution pattern over recent days."""
    container = _container(request)
    pattern = container.day_plan_service.detect_pattern(day, lookback_days)
    if pattern is None:
        return PatternOut(day=day, lookback_days=lookback_days)
    return PatternOut(
        day=day,
        lookback_days=lookback_days,
        pattern=pattern.value,
        message=pattern.educational_message,
        tip=pattern.tip,
    )


@router.post("/meals/recognize", dependencies=[Depends(require_token)])
async def recognize_meal(payload: RecognizeIn, request: Request) -> dict[str, object]:
    """Estimate a described meal, optionally logging it."""
    container = _container(request)
    try:
        recognized = await container.recognition_service.recognize_description(
            payload.description
        )
    except RuntimeError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc

    response: dict[str, object] = {"meal": recognized.model_dump()}
    if payload.log:
        now = container.clock()
        meal = to_logged_meal(
            recognized,
            timestamp=payload.timestamp or now,
            window_id=payload.window_id,
        )
        outcome = container.day_plan_service.log_meal(meal, now)
        response["meal_id"] = meal.id
        response["redistribution"] = RedistributionOut.from_outcome(
            outcome
        ).model_dump(mode="json")
    return response
