"""Pydantic request and response models for the HTTP API."""

from datetime import date, datetime

from pydantic import AwareDatetime, BaseModel, Field

from meal_windows.domain.redistribution import (
    RedistributedWindow,
    RedistributionOutcome,
    RedistributionReason,
)
from meal_windows.domain.scores import DailyScore, ScoreSummary
from meal_windows.domain.windows import LoggedMeal, MacroTargets, MealWindow


class MacrosOut(BaseModel):
    protein: float
    carbs: float
    fat: float
    calories: float

    @classmethod
    def from_macros(cls, macros: MacroTargets) -> "MacrosOut":
        return cls(
            protein=macros.protein,
            carbs=macros.carbs,
            fat=macros.fat,
            calories=macros.calories,
        )


class ReasonOut(BaseModel):
    kind: str
    percent: int | None = None
    label: str


class WindowOut(BaseModel):
    """A window with its effective allocation."""

    id: str
    name: str
    day: date
    start: datetime
    end: datetime
    purpose: str
    flexibility: str
    target_calories: float
    target_macros: MacrosOut
    effective_calories: float
    effective_macros: MacrosOut
    reason: ReasonOut | None = None
    is_fasted: bool = False

    @classmethod
    def from_window(cls, window: MealWindow) -> "WindowOut":
        reason = window.redistribution_reason
        return cls(
            id=window.id,
            name=window.display_name,
            day=window.day,
            start=window.start,
            end=window.end,
            purpose=window.purpose.value,
            flexibility=window.flexibility.value,
            target_calories=window.target_calories,
            target_macros=MacrosOut.from_macros(window.target_macros),
            effective_calories=window.effective_calories,
            effective_macros=MacrosOut.from_macros(window.effective_macros),
            reason=_reason_out(reason) if reason else None,
            is_fasted=window.is_fasted,
        )


def _reason_out(reason: RedistributionReason) -> ReasonOut:
    return ReasonOut(kind=reason.kind.value, percent=reason.percent, label=reason.label)


def windows_out(redistributed: list[RedistributedWindow]) -> list[WindowOut]:
    return [WindowOut.from_window(item.apply()) for item in redistributed]


class RedistributionOut(BaseModel):
    """Windows after a pass, with the explanation when the engine ran."""

    windows: list[WindowOut]
    explanation: str | None = None
    educational_tip: str | None = None
    severity: str | None = None
    confidence: float | None = None
    details: list[str] = Field(default_factory=list)

    @classmethod
    def from_outcome(cls, outcome: RedistributionOutcome) -> "RedistributionOut":
        return cls(
            windows=windows_out(outcome.windows),
            explanation=outcome.explanation,
            educational_tip=outcome.educational_tip,
            severity=outcome.severity.value if outcome.severity else None,
            confidence=outcome.confidence,
            details=outcome.details,
        )


class MealIn(BaseModel):
    """Payload for logging a meal."""

    id: str | None = None
    name: str
    timestamp: AwareDatetime
    calories: float = Field(ge=0.0)
    protein: float = Field(ge=0.0)
    carbs: float = Field(ge=0.0)
    fat: float = Field(ge=0.0)
    window_id: str | None = None
    health_score: int | None = Field(default=None, ge=0, le=100)
    micronutrients: dict[str, float] = Field(default_factory=dict)

    def to_meal(self, meal_id: str) -> LoggedMeal:
        return LoggedMeal(
            id=self.id or meal_id,
            name=self.name,
            timestamp=self.timestamp,
            calories=self.calories,
            protein=self.protein,
            carbs=self.carbs,
            fat=self.fat,
            window_id=self.window_id,
            health_score=self.health_score,
            micronutrients=self.micronutrients,
        )


class RecognizeIn(BaseModel):
    """Payload for recognizing a described meal."""

    description: str = Field(min_length=1)
    log: bool = False
    timestamp: AwareDatetime | None = None
    window_id: str | None = None


class FactorChipOut(BaseModel):
    factor: str
    label: str
    value: float


class ScoreOut(BaseModel):
    """Daily score with its display summary."""

    day: date
    internal_score: int | None = None
    display_score: float | None = None
    band: str | None = None
    factors: dict[str, float] = Field(default_factory=dict)
    chips: list[FactorChipOut] = Field(default_factory=list)
    weakest: str | None = None
    window_scores: dict[str, int] = Field(default_factory=dict)
    completed_windows: int = 0
    total_windows: int = 0
    insight: str

    @classmethod
    def from_score(
        cls, day: date, score: DailyScore, summary: ScoreSummary
    ) -> "ScoreOut":
        return cls(
            day=day,
            internal_score=score.score,
            display_score=summary.display_score,
            band=summary.band.value,
            factors={factor.value: value for factor, value in summary.factors.items()},
            chips=[
                FactorChipOut(
                    factor=chip.factor.value, label=chip.label, value=chip.value
                )
                for chip in summary.chips
            ],
            weakest=summary.weakest.value,
            window_scores=score.window_scores,
            completed_windows=score.completed_windows,
            total_windows=score.total_windows,
            insight=summary.insight,
        )


class PatternOut(BaseModel):
    day: date
    lookback_days: int
    pattern: str | None = None
    message: str | None = None
    tip: str | None = None
