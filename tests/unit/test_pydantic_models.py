"""Unit tests for Pydantic models."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from golf_configurator.models.pydantic_models import (
    CartItem,
    GripSelection,
    Hand,
    MergeAttribute,
    MergeLine,
    MergeOperation,
    PurchaseOrderLine,
    SelectionState,
    Step,
)


class TestEnums:
    """Tests for Hand and Step."""

    def test_hand_values(self):
        assert Hand.LEFT.value == "Left"
        assert Hand.RIGHT.value == "Right"

    def test_steps_are_ordered(self):
        assert Step.CLUB < Step.SHAFT < Step.GRIP < Step.REVIEW
        assert Step(2) == Step.GRIP


class TestSelectionState:
    """Tests for SelectionState model."""

    def test_defaults(self):
        state = SelectionState()
        assert state.hand is None
        assert state.clubs == ("6", "7", "8", "9", "PW")
        assert state.shaft_length == "Standard"
        assert state.lie == "Standard"
        assert state.current_step == Step.CLUB
        assert state.is_loading is False

    def test_frozen(self):
        state = SelectionState()
        with pytest.raises(ValidationError):
            state.hand = Hand.LEFT  # type: ignore[misc]

    def test_json_round_trip(self):
        state = SelectionState(
            hand=Hand.LEFT,
            clubs=("6", "7", "8", "9", "PW", "5"),
            grip=GripSelection(brand="Winn", model="DriTac", size="Standard"),
            current_step=Step.GRIP,
        )
        assert SelectionState.model_validate_json(state.model_dump_json()) == state


class TestGripSelection:
    """Tests for GripSelection."""

    def test_display_skips_empty_parts(self):
        assert GripSelection(brand="Lamkin", model="UTx").display() == "Lamkin UTx"
        assert GripSelection().display() == ""


class TestCartItem:
    """Tests for CartItem."""

    def test_quantity_must_be_positive(self):
        with pytest.raises(ValidationError):
            CartItem(id="1", quantity=0)


class TestPurchaseOrderLine:
    """Tests for PurchaseOrderLine."""

    def test_wire_aliases(self):
        line = PurchaseOrderLine.model_validate(
            {"id": "A", "quantity": 2, "unitPrice": "10.50", "properties": {"bundleId": "b1"}}
        )
        assert line.unit_price == Decimal("10.50")
        assert line.metadata == {"bundleId": "b1"}
        assert line.currency == "GBP"

    def test_bundle_id(self):
        assert PurchaseOrderLine(id="A", quantity=1, unit_price=1).bundle_id is None
        blank = PurchaseOrderLine(id="A", quantity=1, unit_price=1, metadata={"bundleId": ""})
        assert blank.bundle_id is None

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            PurchaseOrderLine(id="A", quantity=1, unit_price=-1)


class TestMergeOperation:
    """Tests for MergeOperation."""

    def test_camel_case_dump(self):
        op = MergeOperation(
            lines=[MergeLine(line_id="A", quantity=1)],
            title="Custom Golf Iron Set - 6-PW",
            parent_variant_id="X",
            attributes=[MergeAttribute(key="Set Option", value="6-PW")],
            total_price=Decimal("100"),
        )
        data = op.model_dump(by_alias=True)
        assert data["parentVariantId"] == "X"
        assert data["totalPrice"] == Decimal("100")
        assert data["lines"] == [{"lineId": "A", "quantity": 1}]

    def test_accepts_camel_case_input(self):
        op = MergeOperation.model_validate(
            {"lines": [{"lineId": "A", "quantity": 1}], "title": "t", "parentVariantId": "X"}
        )
        assert op.parent_variant_id == "X"
        assert op.lines[0].line_id == "A"
