"""Step unlocking and checkout readiness derived from a selection."""

from golf_configurator.models.pydantic_models import BusinessRules, SelectionState, Step
from golf_configurator.rules.selection_rules import (
    DEFAULT_RULES,
    validate_club_selection,
    validate_grip_configuration,
    validate_shaft_configuration,
)


def shaft_satisfied(state: SelectionState) -> bool:
    """Return True when the shaft step does not block progress.

    The shaft is an optional upgrade: no brand means the stock shaft. Once a
    brand is chosen, flex and length must be chosen too.
    """
    if not state.shaft_brand:
        return True
    return validate_shaft_configuration(
        state.shaft_brand, state.shaft_flex, state.shaft_length
    ).valid


def max_unlocked_step(state: SelectionState, rules: BusinessRules = DEFAULT_RULES) -> Step:
    """Return the furthest step the user may navigate to.

    Unlocking:
        CLUB    always
        SHAFT   hand chosen and club selection valid
        GRIP    SHAFT unlocked and shaft satisfied
        REVIEW  GRIP unlocked and grip complete
    """
    if state.hand is None or not validate_club_selection(state.clubs, rules).valid:
        return Step.CLUB
    if not shaft_satisfied(state):
        return Step.SHAFT
    if not validate_grip_configuration(state.grip).valid:
        return Step.GRIP
    return Step.REVIEW


def can_checkout(state: SelectionState, rules: BusinessRules = DEFAULT_RULES) -> bool:
    """Return True when the selection may be submitted to the cart."""
    return (
        state.hand is not None
        and validate_club_selection(state.clubs, rules).valid
        and validate_grip_configuration(state.grip).valid
        and shaft_satisfied(state)
    )
