"""Selection rules for club, shaft and grip choices."""

import logging
from collections.abc import Iterable, Mapping, Sequence

from golf_configurator.models.pydantic_models import (
    BusinessRules,
    Club,
    GripSelection,
    SelectionState,
    ValidationResult,
)

logger = logging.getLogger(__name__)

DEFAULT_RULES = BusinessRules()

_VALID = ValidationResult(valid=True)


def _unique(club_ids: Iterable[str]) -> list[str]:
    """Drop duplicate ids, keeping first occurrence order."""
    return list(dict.fromkeys(club_ids))


def validate_club_selection(
    club_ids: Iterable[str],
    rules: BusinessRules = DEFAULT_RULES,
) -> ValidationResult:
    """Validate a club selection against the business rules.

    Checks, in order:
    1. At least min_club_count clubs
    2. At most max_club_count clubs
    3. Every required club present
    4. Every dependency of a selected club present (4-iron requires 5-iron)

    The first failing check determines the reason.

    Args:
        club_ids: Selected club ids.
        rules: Business rules to validate against.

    Returns:
        ValidationResult with the reason of the first failing check.

    Example:
        >>> validate_club_selection(["4"]).reason
        'Minimum 5 clubs required (missing required clubs: 6, 7, 8, 9, PW)'
    """
    selected = _unique(club_ids)
    missing_required = [c for c in rules.required_clubs if c not in selected]

    if len(selected) < rules.min_club_count:
        reason = f"Minimum {rules.min_club_count} clubs required"
        if missing_required:
            reason += f" (missing required clubs: {', '.join(missing_required)})"
        return ValidationResult(valid=False, reason=reason)

    if len(selected) > rules.max_club_count:
        return ValidationResult(
            valid=False, reason=f"Maximum {rules.max_club_count} clubs allowed"
        )

    if missing_required:
        noun = "club" if len(missing_required) == 1 else "clubs"
        return ValidationResult(
            valid=False,
            reason=f"Required {noun} {', '.join(missing_required)} missing",
        )

    for club_id in selected:
        for dependency in rules.dependencies.get(club_id, []):
            if dependency not in selected:
                return ValidationResult(
                    valid=False,
                    reason=f"Selecting {club_id}-iron requires {dependency}-iron",
                )

    return _VALID


def apply_dependencies(
    club_ids: Sequence[str],
    dependencies: Mapping[str, Sequence[str]],
) -> list[str]:
    """Append every missing dependency of the selected clubs.

    Dependencies are followed transitively; existing order is preserved and
    new ids are appended in discovery order.

    Args:
        club_ids: Current selection.
        dependencies: Dependency table (club id -> required club ids).

    Returns:
        New selection with all dependencies satisfied.
    """
    result = _unique(club_ids)
    index = 0
    while index < len(result):
        for dependency in dependencies.get(result[index], []):
            if dependency not in result:
                result.append(dependency)
        index += 1
    return result


def dependents_of(
    club_id: str,
    dependencies: Mapping[str, Sequence[str]],
) -> list[str]:
    """Return the clubs that require ``club_id``, transitively."""
    found: list[str] = []
    pending = [club_id]
    while pending:
        target = pending.pop()
        for candidate, required in dependencies.items():
            if target in required and candidate not in found and candidate != club_id:
                found.append(candidate)
                pending.append(candidate)
    return found


def apply_club_selection_rules(
    current_selection: Sequence[Club],
    added_club: Club,
    catalog: Sequence[Club],
    rules: BusinessRules = DEFAULT_RULES,
) -> list[Club]:
    """Add a club and auto-add any clubs it depends on.

    Args:
        current_selection: Currently selected clubs.
        added_club: Club being added.
        catalog: All available clubs, used to look up dependencies.
        rules: Business rules holding the dependency table.

    Returns:
        New club selection; the input is not modified.
    """
    new_selection = list(current_selection) + [added_club]
    selected_ids = [club.id for club in new_selection]
    by_id = {club.id: club for club in catalog}

    for club_id in apply_dependencies(selected_ids, rules.dependencies)[len(selected_ids):]:
        dependency_club = by_id.get(club_id)
        if dependency_club is not None:
            new_selection.append(dependency_club)
            logger.info("Auto-added %s (required with %s)", dependency_club.name, added_club.name)

    return new_selection


def is_club_locked(club_id: str, rules: BusinessRules = DEFAULT_RULES) -> bool:
    """Return True when the club is required and may never be removed."""
    return club_id in rules.required_clubs


def validate_shaft_configuration(
    brand: str | None,
    flex: str | None,
    length: str | None,
) -> ValidationResult:
    """Validate that brand, flex and length are all chosen."""
    if not brand:
        return ValidationResult(valid=False, reason="Shaft brand required")
    if not flex:
        return ValidationResult(valid=False, reason="Shaft flex required")
    if not length:
        return ValidationResult(valid=False, reason="Shaft length required")
    return _VALID


def validate_grip_configuration(grip: GripSelection | None) -> ValidationResult:
    """Validate that grip brand, model and size are all chosen."""
    if grip is None or not grip.brand:
        return ValidationResult(valid=False, reason="Grip brand required")
    if not grip.model:
        return ValidationResult(valid=False, reason="Grip model required")
    if not grip.size:
        return ValidationResult(valid=False, reason="Grip size required")
    return _VALID


def validate_complete_configuration(
    state: SelectionState,
    rules: BusinessRules = DEFAULT_RULES,
    require_shaft: bool = True,
) -> ValidationResult:
    """Validate a whole configuration before it goes to the cart.

    Runs hand, club, shaft and grip checks in that order and stops at the
    first failure.

    Args:
        state: Selection snapshot to validate.
        rules: Business rules for club validation.
        require_shaft: When False the shaft check is skipped (stock shaft).

    Returns:
        ValidationResult of the first failing section.
    """
    if state.hand is None:
        return ValidationResult(valid=False, reason="Hand selection required")

    club_result = validate_club_selection(state.clubs, rules)
    if not club_result.valid:
        return club_result

    if require_shaft:
        shaft_result = validate_shaft_configuration(
            state.shaft_brand, state.shaft_flex, state.shaft_length
        )
        if not shaft_result.valid:
            return shaft_result

    return validate_grip_configuration(state.grip)


def iron_set_type(club_ids: Iterable[str]) -> str:
    """Return the set size code for a club selection."""
    selected = set(club_ids)
    if "4" in selected:
        return "4-PW"
    if "5" in selected:
        return "5-PW"
    return "6-PW"
