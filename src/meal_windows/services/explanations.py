"""User-facing explanations for redistribution results."""

from collections.abc import Iterable
from enum import StrEnum

from meal_windows.domain.redistribution import (
    AdjustedWindow,
    ReasonKind,
    RedistributionReason,
    RedistributionResult,
    Severity,
    TriggerType,
)

HIGH_PERCENT = 50
MEDIUM_PERCENT = 25
MIN_PATTERN_HISTORY = 5


class RedistributionPattern(StrEnum):
    """Recurring redistribution behaviour detected over a history of reasons."""

    CONSISTENT_OVEREATING = "consistent-overeating"
    CONSISTENT_UNDEREATING = "consistent-undereating"
    FREQUENT_MISSED_WINDOWS = "frequent-missed-windows"

    @property
    def educational_message(self) -> str:
        return _PATTERN_MESSAGES[self]

    @property
    def tip(self) -> str:
        return _PATTERN_TIPS[self]


_PATTERN_MESSAGES = {
    RedistributionPattern.CONSISTENT_OVEREATING: (
        "You tend to eat more than planned. "
        "Consider adding more protein and fiber to feel fuller."
    ),
    RedistributionPattern.CONSISTENT_UNDEREATING: (
        "You often eat less than planned. "
        "Try setting meal reminders to stay on track."
    ),
    RedistributionPattern.FREQUENT_MISSED_WINDOWS: (
        "You miss meals frequently. "
        "Meal prep on weekends could help you stay consistent."
    ),
}

_PATTERN_TIPS = {
    RedistributionPattern.CONSISTENT_OVEREATING: (
        "Tip: You often eat more than planned. Consider having a protein-rich "
        "snack 30 minutes before to reduce hunger."
    ),
    RedistributionPattern.CONSISTENT_UNDEREATING: (
        "Tip: You're consistently eating less than planned. Let's adjust your "
        "targets to better match your natural appetite."
    ),
    RedistributionPattern.FREQUENT_MISSED_WINDOWS: (
        "Tip: Missing meals regularly? Try preparing meals in advance or "
        "setting reminders for your meal windows."
    ),
}


def explain(result: RedistributionResult) -> str:
    """Describe a redistribution result, graded by how far off the meal was."""
    trigger = result.trigger_type
    calories = round(result.total_redistributed.calories)
    percent = trigger.percent or 0

    if trigger.kind == ReasonKind.OVERCONSUMPTION:
        if percent > HIGH_PERCENT:
            return (
                f"You ate {percent}% more than planned ({calories} extra calories). "
                "I've significantly reduced your upcoming meals, with the biggest "
                "adjustment to your next window to help you stay on track."
            )
        if percent > MEDIUM_PERCENT:
            return (
                f"You ate {percent}% more than planned. I've reduced your upcoming "
                "meals proportionally, focusing on windows closer to now for "
                "gradual adjustment."
            )
        return (
            f"You went slightly over target by {percent}%. I've made minor "
            "adjustments to your next few meals to keep you balanced."
        )

    if trigger.kind == ReasonKind.UNDERCONSUMPTION:
        if percent > HIGH_PERCENT:
            return (
                f"You ate {percent}% less than planned ({calories} calories "
                "remaining). I've increased your upcoming meals to help you reach "
                "your daily goals, with more added to your next window."
            )
        if percent > MEDIUM_PERCENT:
            return (
                f"You ate {percent}% less than planned. I've increased your "
                "upcoming meals to help meet your targets, distributed based on "
                "proximity."
            )
        return (
            f"You're slightly under target by {percent}%. I've added a bit more "
            "to your upcoming meals to keep you on track."
        )

    if trigger.kind == ReasonKind.MISSED_WINDOW:
        count = len(result.adjusted_windows)
        if count > 1:
            return (
                "You missed a meal window. I've redistributed those calories and "
                f"nutrients across your {count} remaining windows to help you meet "
                "your daily goals."
            )
        return (
            "You missed a meal window. I've added those calories and nutrients to "
            "your next window to help you catch up."
        )

    if trigger.kind == ReasonKind.EARLY_CONSUMPTION:
        return (
            "I've adjusted your upcoming windows based on when you actually ate. "
            "This helps align your schedule with your natural eating patterns."
        )
    return (
        "Windows adjusted for late consumption. Your upcoming meals have been "
        "rebalanced to maintain your daily targets."
    )


def educational_tip(trigger: TriggerType) -> str | None:
    percent = trigger.percent or 0
    if trigger.kind == ReasonKind.OVERCONSUMPTION and percent > HIGH_PERCENT:
        return "Try adding more protein and fiber to feel fuller with smaller portions."
    if trigger.kind == ReasonKind.UNDERCONSUMPTION and percent > HIGH_PERCENT:
        return (
            "Consider setting meal reminders to help you stay on track with your "
            "nutrition timing."
        )
    if trigger.kind == ReasonKind.MISSED_WINDOW:
        return "Preparing meals in advance can help you avoid missing eating windows."
    return None


def severity(trigger: TriggerType) -> Severity:
    if trigger.kind in {ReasonKind.OVERCONSUMPTION, ReasonKind.UNDERCONSUMPTION}:
        percent = trigger.percent or 0
        if percent > HIGH_PERCENT:
            return Severity.HIGH
        if percent > MEDIUM_PERCENT:
            return Severity.MEDIUM
        return Severity.LOW
    if trigger.kind == ReasonKind.MISSED_WINDOW:
        return Severity.MEDIUM
    return Severity.LOW


def explain_adjustments(adjusted: Iterable[AdjustedWindow]) -> list[str]:
    """One line per adjusted window describing its calorie change."""
    lines: list[str] = []
    for item in adjusted:
        change = round(item.adjusted_macros.calories - item.original_macros.calories)
        if change > 0:
            summary = f"+{change} calories added"
        elif change < 0:
            summary = f"{change} calories removed"
        else:
            summary = "unchanged"
        lines.append(f"{item.window_id}: {summary} - {item.reason_text}")
    return lines


def analyze_patterns(
    reasons: list[RedistributionReason],
) -> RedistributionPattern | None:
    """Detect a dominant pattern once enough history has accumulated."""
    total = len(reasons)
    if total < MIN_PATTERN_HISTORY:
        return None

    over = sum(1 for reason in reasons if reason.kind == ReasonKind.OVERCONSUMPTION)
    under = sum(1 for reason in reasons if reason.kind == ReasonKind.UNDERCONSUMPTION)
    missed = sum(1 for reason in reasons if reason.kind == ReasonKind.MISSED_WINDOW)

    if over > total // 2:
        return RedistributionPattern.CONSISTENT_OVEREATING
    if under > total // 2:
        return RedistributionPattern.CONSISTENT_UNDEREATING
    if missed > total // 3:
        return RedistributionPattern.FREQUENT_MISSED_WINDOWS
    return None
