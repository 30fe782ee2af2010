"""Display transforms, fallback factors, and summaries for daily scores."""

from meal_windows.domain.scores import (
    DailyScore,
    FactorChip,
    ScoreBand,
    ScoreFactor,
    ScoreSummary,
)

NEUTRAL_SUB_SCORE = 5.0
# Placeholder kept until consistency can be derived from stored window data.
FALLBACK_CONSISTENCY = 6.5
EMPTY_DAY_INSIGHT = "Complete a meal window to start tracking your daily score."

_BAND_FLOORS = (
    (8.5, ScoreBand.EXCELLENT),
    (7.0, ScoreBand.GOOD),
    (5.0, ScoreBand.OKAY),
    (3.0, ScoreBand.POOR),
)


def display_score(internal: float) -> float:
    """Map an internal 0-100 score onto the 0-10 display scale."""
    return max(0.0, min(10.0, internal / 10.0))


def factor_contribution(sub_score: float) -> float:
    """Signed point delta for a 0-10 sub-score; 5.0 is neutral."""
    return (sub_score - NEUTRAL_SUB_SCORE) / 2.0


def score_band(display: float) -> ScoreBand:
    """Return the fixed display band for a 0-10 score."""
    for floor, band in _BAND_FLOORS:
        if display >= floor:
            return band
    return ScoreBand.NEEDS_WORK


def factor_chips(factors: dict[ScoreFactor, float]) -> list[FactorChip]:
    """Build one chip per factor from its signed contribution."""
    return [
        FactorChip(
            factor=factor,
            label=factor.label,
            value=factor_contribution(factors[factor]),
        )
        for factor in ScoreFactor
    ]


def fallback_factors(daily_score: DailyScore) -> dict[ScoreFactor, float]:
    """Derive the four sub-factors from raw counts when no breakdown is stored."""
    total = daily_score.total_windows
    if total > 0:
        adherence = daily_score.completed_windows / total * 10.0
        timing = daily_score.on_time_windows / total * 10.0
    else:
        adherence = 0.0
        timing = 0.0
    quality = (daily_score.average_health_score or 0) / 10.0
    return {
        ScoreFactor.ADHERENCE: adherence,
        ScoreFactor.QUALITY: quality,
        ScoreFactor.TIMING: timing,
        ScoreFactor.CONSISTENCY: FALLBACK_CONSISTENCY,
    }


def day_factors(daily_score: DailyScore) -> dict[ScoreFactor, float]:
    """Use the stored breakdown when present, otherwise the count fallback."""
    if daily_score.breakdown is not None:
        return daily_score.breakdown.as_factors()
    return fallback_factors(daily_score)


def weakest_factor(factors: dict[ScoreFactor, float]) -> ScoreFactor:
    """Lowest factor; ties go to the earliest in declaration order."""
    weakest = ScoreFactor.ADHERENCE
    for factor in ScoreFactor:
        if factors[factor] < factors[weakest]:
            weakest = factor
    return weakest


def daily_insight(
    display: float, weakest: ScoreFactor, completed: int, total: int
) -> str:
    if display >= 8.5:
        return (
            f"Outstanding day! You hit {completed} of {total} windows "
            "with excellent adherence."
        )
    if display >= 7.0:
        return (
            f"Great progress today. {completed} of {total} windows completed "
            "with good macro balance."
        )
    if display >= 5.0:
        return f"Solid effort today. Focus on {weakest.area} to improve your score."
    return f"Room to improve. {weakest.area.capitalize()} impacted your score the most."


def summarize_day(daily_score: DailyScore | None) -> ScoreSummary | None:
    """Build the display view of a day, or None when nothing has been scored."""
    if daily_score is None:
        return None
    display = display_score(daily_score.score)
    factors = day_factors(daily_score)
    weakest = weakest_factor(factors)
    return ScoreSummary(
        display_score=display,
        band=score_band(display),
        factors=factors,
        chips=factor_chips(factors),
        weakest=weakest,
        insight=daily_insight(
            display,
            weakest,
            daily_score.completed_windows,
            daily_score.total_windows,
        ),
    )
