"""Selection validation API endpoint."""

from fastapi import APIRouter

from golf_configurator.api.dependencies import ConfigDep
from golf_configurator.api.schemas import ValidateSelectionRequest, ValidateSelectionResponse
from golf_configurator.rules.selection_rules import validate_complete_configuration
from golf_configurator.state.store import derive

router = APIRouter()


@router.post("/validate", response_model=ValidateSelectionResponse)
async def validate_selection(
    request: ValidateSelectionRequest,
    config: ConfigDep,
) -> ValidateSelectionResponse:
    """Validate a complete selection.

    Runs the hand, club, shaft and grip checks in order and reports the
    first failure together with the derived step and checkout values.
    """
    state = request.state
    require_shaft = (
        request.require_shaft if request.require_shaft is not None else bool(state.shaft_brand)
    )
    result = validate_complete_configuration(state, config.rules, require_shaft=require_shaft)
    return ValidateSelectionResponse(
        valid=result.valid,
        reason=result.reason,
        derived=derive(state, config.rules),
    )
