"""Selection rule modules."""

from golf_configurator.rules.selection_rules import (
    apply_club_selection_rules,
    apply_dependencies,
    is_club_locked,
    iron_set_type,
    validate_club_selection,
    validate_complete_configuration,
    validate_grip_configuration,
    validate_shaft_configuration,
)
from golf_configurator.rules.steps import can_checkout, max_unlocked_step, shaft_satisfied

__all__ = [
    "apply_club_selection_rules",
    "apply_dependencies",
    "can_checkout",
    "is_club_locked",
    "iron_set_type",
    "max_unlocked_step",
    "shaft_satisfied",
    "validate_club_selection",
    "validate_complete_configuration",
    "validate_grip_configuration",
    "validate_shaft_configuration",
]
