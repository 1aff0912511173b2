"""API request and response schemas."""

from typing import Any

from pydantic import BaseModel, Field

from golf_configurator.models.pydantic_models import (
    BusinessRules,
    Club,
    DerivedState,
    GripCatalogEntry,
    MergeOperation,
    PurchaseOrderLine,
    SelectionState,
)


class CatalogResponse(BaseModel):
    """Club, shaft and grip catalog."""

    clubs: list[Club]
    shaft_brands: list[str]
    grips: dict[str, GripCatalogEntry]


class RulesResponse(BaseModel):
    """Business rules applied to selections."""

    rules: BusinessRules
    required_properties: list[str]


class ValidateSelectionRequest(BaseModel):
    """Selection to validate."""

    state: SelectionState
    require_shaft: bool | None = Field(
        None, description="Force the shaft check; defaults to whether a shaft brand is chosen"
    )


class ValidateSelectionResponse(BaseModel):
    """Validation outcome with derived values."""

    valid: bool
    reason: str | None = None
    derived: DerivedState


class TransformRequest(BaseModel):
    """Purchase-order lines to consolidate."""

    lines: list[PurchaseOrderLine]


class TransformResponse(BaseModel):
    """Merge operations, one per bundle."""

    operations: list[MergeOperation]
    count: int = Field(description="Number of merge operations")


class SessionActionRequest(BaseModel):
    """A store action to apply to a session."""

    action: str = Field(description="Action name, e.g. toggle_club")
    params: dict[str, Any] = Field(default_factory=dict)
