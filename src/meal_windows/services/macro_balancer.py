"""Macro balancing against a calorie target."""

from dataclasses import replace

from meal_windows.domain.windows import MacroTargets, WindowPurpose

CALORIE_TOLERANCE = 50

# Minimum grams applied after scaling; never re-balanced against calories.
PURPOSE_FLOORS: dict[WindowPurpose, tuple[str, float]] = {
    WindowPurpose.PRE_WORKOUT: ("carbs", 30.0),
    WindowPurpose.POST_WORKOUT: ("protein", 30.0),
    WindowPurpose.FOCUS_BOOST: ("fat", 10.0),
}


def balance_macros(
    target_calories: float, macros: MacroTargets, purpose: WindowPurpose
) -> MacroTargets:
    """Scale macros so their derived calories match the target.

    Macros already within ``CALORIE_TOLERANCE`` of the target are returned
    unchanged, as are all-zero macros (nothing to scale). Otherwise every
    macro is scaled by ``target / current`` and the purpose floor is applied,
    which may leave the result above the target by the floor's adjustment.

    Mixed-sign input, as produced by an over-budget day whose goal clamp
    raised one macro, is scaled as is: the result hits the calorie target
    but can carry negative grams and inflate the positive macro.
    """
    current = macros.calories
    if abs(current - target_calories) <= CALORIE_TOLERANCE:
        return macros
    if current == 0:
        return macros

    scaled = macros.scaled(target_calories / current)
    return apply_purpose_floor(scaled, purpose)


def apply_purpose_floor(macros: MacroTargets, purpose: WindowPurpose) -> MacroTargets:
    """Clamp the purpose-specific macro up to its floor."""
    floor = PURPOSE_FLOORS.get(purpose)
    if floor is None:
        return macros
    name, minimum = floor
    current = getattr(macros, name)
    if current >= minimum:
        return macros
    return replace(macros, **{name: minimum})
