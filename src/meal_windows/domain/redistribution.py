"""Domain models for redistribution triggers, reasons, and results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

from meal_windows.domain.windows import MacroTargets, MealWindow


class ReasonKind(StrEnum):
    """Closed vocabulary shared by redistribution reasons and trigger types."""

    OVERCONSUMPTION = "overconsumption"
    UNDERCONSUMPTION = "underconsumption"
    MISSED_WINDOW = "missedWindow"
    EARLY_CONSUMPTION = "earlyConsumption"
    LATE_CONSUMPTION = "lateConsumption"

    @property
    def carries_percent(self) -> bool:
        return self in _PERCENT_KINDS


_PERCENT_KINDS = frozenset({ReasonKind.OVERCONSUMPTION, ReasonKind.UNDERCONSUMPTION})


class Severity(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def _check_payload(kind: ReasonKind, percent: int | None) -> None:
    if kind.carries_percent and percent is None:
        raise ValueError(f"{kind} requires a percent")
    if not kind.carries_percent and percent is not None:
        raise ValueError(f"{kind} does not take a percent")


@dataclass(frozen=True)
class RedistributionReason:
    """User-facing reason attached to a redistributed window."""

    kind: ReasonKind
    percent: int | None = None

    def __post_init__(self) -> None:
        _check_payload(self.kind, self.percent)

    @classmethod
    def overconsumption(cls, percent_over: int) -> RedistributionReason:
        return cls(ReasonKind.OVERCONSUMPTION, percent_over)

    @classmethod
    def underconsumption(cls, percent_under: int) -> RedistributionReason:
        return cls(ReasonKind.UNDERCONSUMPTION, percent_under)

    @classmethod
    def missed_window(cls) -> RedistributionReason:
        return cls(ReasonKind.MISSED_WINDOW)

    @classmethod
    def early_consumption(cls) -> RedistributionReason:
        return cls(ReasonKind.EARLY_CONSUMPTION)

    @classmethod
    def late_consumption(cls) -> RedistributionReason:
        return cls(ReasonKind.LATE_CONSUMPTION)

    @property
    def label(self) -> str:
        """Short display text."""
        if self.kind == ReasonKind.OVERCONSUMPTION:
            return f"{self.percent}% over plan"
        if self.kind == ReasonKind.UNDERCONSUMPTION:
            return f"{self.percent}% under plan"
        if self.kind == ReasonKind.MISSED_WINDOW:
            return "Missed window"
        if self.kind == ReasonKind.EARLY_CONSUMPTION:
            return "Ate early"
        return "Ate late"

    def to_dict(self) -> dict[str, object]:
        return {"kind": self.kind.value, "percent": self.percent}

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> RedistributionReason:
        percent = data.get("percent")
        return cls(
            kind=ReasonKind(str(data["kind"])),
            percent=int(percent) if isinstance(percent, int | float) else None,
        )


@dataclass(frozen=True)
class TriggerType:
    """Why the advanced engine evaluated a redistribution."""

    kind: ReasonKind
    percent: int | None = None

    def __post_init__(self) -> None:
        _check_payload(self.kind, self.percent)

    @classmethod
    def overconsumption(cls, percent_over: int) -> TriggerType:
        return cls(ReasonKind.OVERCONSUMPTION, percent_over)

    @classmethod
    def underconsumption(cls, percent_under: int) -> TriggerType:
        return cls(ReasonKind.UNDERCONSUMPTION, percent_under)

    @classmethod
    def missed_window(cls) -> TriggerType:
        return cls(ReasonKind.MISSED_WINDOW)

    def to_reason(self) -> RedistributionReason:
        """Translate into the reason vocabulary used by every engine."""
        return RedistributionReason(kind=self.kind, percent=self.percent)


@dataclass(frozen=True)
class RedistributionTrigger:
    """A transient decision event for the advanced engine."""

    window: MealWindow
    trigger_type: TriggerType
    deviation: float
    consumed: MacroTargets
    evaluated_at: datetime


@dataclass(frozen=True)
class RedistributionConstraints:
    """Policy knobs for the advanced engine."""

    deviation_threshold: float
    min_calories_per_window: float = 200
    max_calories_per_window: float = 1000
    min_protein_fraction: float = 0.7
    bedtime_buffer_hours: float = 3.0
    max_protein_per_window: float = 60
    max_carbs_per_window: float = 120
    max_fat_per_window: float = 50


@dataclass(frozen=True)
class RedistributedWindow:
    """One window's allocation after a redistribution pass."""

    window: MealWindow
    adjusted_calories: float
    adjusted_macros: MacroTargets
    reason: RedistributionReason | None = None
    passthrough: bool = False

    @classmethod
    def unchanged(cls, window: MealWindow) -> RedistributedWindow:
        """Pass a window through with effective values equal to its target."""
        return cls(
            window=window,
            adjusted_calories=window.target_calories,
            adjusted_macros=window.target_macros,
            reason=None,
            passthrough=True,
        )

    def apply(self) -> MealWindow:
        """Return the window carrying this allocation."""
        if self.passthrough:
            return self.window
        return self.window.with_adjustment(
            self.adjusted_calories, self.adjusted_macros, self.reason
        )


@dataclass(frozen=True)
class AdjustedWindow:
    """Advanced engine output for a single window."""

    window_id: str
    original_macros: MacroTargets
    adjusted_macros: MacroTargets
    adjustment_ratio: float
    reason_text: str


@dataclass(frozen=True)
class RedistributionResult:
    """Advanced engine output for a whole pass."""

    adjusted_windows: list[AdjustedWindow]
    trigger_type: TriggerType
    explanation: str
    educational_tip: str | None
    confidence: float
    total_redistributed: MacroTargets


@dataclass(frozen=True)
class RedistributionOutcome:
    """A whole pass with the commentary shown alongside it."""

    windows: list[RedistributedWindow]
    explanation: str | None = None
    educational_tip: str | None = None
    severity: Severity | None = None
    confidence: float | None = None
    details: list[str] = field(default_factory=list)
