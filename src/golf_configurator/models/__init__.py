"""Data models for the golf configurator."""

from golf_configurator.models.pydantic_models import (
    BusinessRules,
    CartItem,
    CartSubmission,
    Club,
    ComponentType,
    DerivedState,
    GripSelection,
    Hand,
    MergeOperation,
    PurchaseOrderLine,
    SelectionState,
    Step,
)

__all__ = [
    "BusinessRules",
    "CartItem",
    "CartSubmission",
    "Club",
    "ComponentType",
    "DerivedState",
    "GripSelection",
    "Hand",
    "MergeOperation",
    "PurchaseOrderLine",
    "SelectionState",
    "Step",
]
