"""Domain models for window and daily scores."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum


class ScoreBand(StrEnum):
    """Five fixed presentation bands on the 0-10 display scale."""

    EXCELLENT = "excellent"
    GOOD = "good"
    OKAY = "okay"
    POOR = "poor"
    NEEDS_WORK = "needs-work"

    @property
    def label(self) -> str:
        return self.value.replace("-", " ").title()


class ScoreFactor(StrEnum):
    """Daily sub-factors, in tie-break order."""

    ADHERENCE = "adherence"
    QUALITY = "quality"
    TIMING = "timing"
    CONSISTENCY = "consistency"

    @property
    def label(self) -> str:
        return self.value.title()

    @property
    def area(self) -> str:
        """Phrase used when this factor is the weakest area."""
        return _AREAS[self]


_AREAS = {
    ScoreFactor.ADHERENCE: "window adherence",
    ScoreFactor.QUALITY: "food quality",
    ScoreFactor.TIMING: "meal timing",
    ScoreFactor.CONSISTENCY: "consistency",
}


@dataclass(frozen=True)
class DailyScoreBreakdown:
    """Stored sub-scores for a day, each on a 0-10 scale."""

    adherence: float
    quality: float
    timing: float
    consistency: float
    adherence_detail: str = ""
    quality_detail: str = ""
    timing_detail: str = ""
    consistency_detail: str = ""

    def as_factors(self) -> dict[ScoreFactor, float]:
        return {
            ScoreFactor.ADHERENCE: self.adherence,
            ScoreFactor.QUALITY: self.quality,
            ScoreFactor.TIMING: self.timing,
            ScoreFactor.CONSISTENCY: self.consistency,
        }


@dataclass(frozen=True)
class MacroScoreBreakdown:
    """Per-macro adherence scores for a window, each 0-100."""

    calorie_score: int
    protein_score: int
    carb_score: int
    fat_score: int

    @property
    def weighted_average(self) -> int:
        return (
            self.calorie_score + self.protein_score + self.carb_score + self.fat_score
        ) // 4


@dataclass(frozen=True)
class AdherenceFactor:
    """How one macro matched its window target."""

    macro: str
    actual: float
    target: float
    contribution: float

    @property
    def percentage_of_target(self) -> int:
        if self.target <= 0:
            return 0
        return int(self.actual / self.target * 100)


@dataclass(frozen=True)
class WindowScore:
    """Adherence score for one window."""

    window_id: str
    score: int
    breakdown: MacroScoreBreakdown
    factors: list[AdherenceFactor]
    insight: str
    calculated_at: datetime


@dataclass(frozen=True)
class DailyScore:
    """Aggregate score for a day."""

    day: date
    score: int
    window_scores: dict[str, int]
    average_health_score: int | None
    completed_windows: int
    total_windows: int
    on_time_windows: int
    calculated_at: datetime
    breakdown: DailyScoreBreakdown | None = None
    insight: str | None = None


@dataclass(frozen=True)
class FactorChip:
    """Signed contribution of one sub-factor."""

    factor: ScoreFactor
    label: str
    value: float


@dataclass(frozen=True)
class ScoreSummary:
    """Display-ready view of a daily score."""

    display_score: float
    band: ScoreBand
    factors: dict[ScoreFactor, float]
    chips: list[FactorChip]
    weakest: ScoreFactor
    insight: str
