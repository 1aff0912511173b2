"""Pydantic models for data validation."""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Annotated, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


class Hand(str, Enum):
    """Hand preference for the iron set."""

    LEFT = "Left"
    RIGHT = "Right"


class ComponentType(str, Enum):
    """Role of a purchase-order line inside a bundle."""

    MAIN = "main"
    SHAFT = "shaft"


class Step(IntEnum):
    """Configurator steps, strictly ordered."""

    CLUB = 0
    SHAFT = 1
    GRIP = 2
    REVIEW = 3


class Club(BaseModel):
    """A single club in the iron catalog."""

    id: str = Field(..., description="Club identifier (e.g. '4', 'PW')")
    name: str
    type: str = Field("iron", description="iron or wedge")
    is_required: bool = False
    is_optional: bool = True

    model_config = ConfigDict(frozen=True)


class ValidationResult(BaseModel):
    """Outcome of a selection rule check."""

    valid: bool
    reason: str | None = None

    model_config = ConfigDict(frozen=True)


class BusinessRules(BaseModel):
    """Club and option rules applied to every selection."""

    min_club_count: int = Field(5, ge=1)
    max_club_count: int = Field(7, ge=1)
    required_clubs: list[str] = Field(
        default_factory=lambda: ["6", "7", "8", "9", "PW"],
        description="Clubs that can never be removed",
    )
    dependencies: dict[str, list[str]] = Field(
        default_factory=lambda: {"4": ["5"]},
        description="club id -> club ids it requires",
    )
    default_lie: str = "Standard"
    default_shaft_length: str = "Standard"
    lie_options: list[str] = Field(
        default_factory=lambda: ["Standard", "+1°", "+2°", "-1°", "-2°"]
    )
    shaft_lengths: list[str] = Field(
        default_factory=lambda: [
            '-2"', '-1.75"', '-1.5"', '-1.25"', '-1"', '-0.75"', '-0.5"', '-0.25"',
            "Standard",
            '+0.25"', '+0.5"', '+0.75"', '+1"', '+1.25"', '+1.5"', '+1.75"', '+2"',
        ]
    )

    model_config = ConfigDict(frozen=True)


class GripSelection(BaseModel):
    """Grip choice; brand, model and size travel together."""

    brand: str = ""
    model: str = ""
    size: str = ""

    model_config = ConfigDict(frozen=True)

    def display(self) -> str:
        """Return the grip as a single display string."""
        return " ".join(part for part in (self.brand, self.model, self.size) if part)


class GripCatalogEntry(BaseModel):
    """Models and sizes offered for one grip brand."""

    models: list[str] = Field(default_factory=list)
    sizes: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class SelectionState(BaseModel):
    """Immutable snapshot of the configurator selection."""

    hand: Hand | None = None
    clubs: tuple[str, ...] = ("6", "7", "8", "9", "PW")
    shaft_brand: str = ""
    shaft_flex: str = ""
    shaft_length: str = "Standard"
    grip: GripSelection | None = None
    lie: str = "Standard"
    current_step: Step = Step.CLUB
    error: str | None = None
    is_loading: bool = False

    model_config = ConfigDict(frozen=True)


class DerivedState(BaseModel):
    """Values recomputed from a SelectionState on every commit."""

    max_unlocked_step: Step = Step.CLUB
    can_checkout: bool = False
    iron_set_type: str = "6-PW"
    club_count: int = 0

    model_config = ConfigDict(frozen=True)


class StoredSelection(BaseModel):
    """Selection snapshot as persisted by the selection repository."""

    session_key: str
    version: str
    state: SelectionState
    saved_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductVariant(BaseModel):
    """A purchasable catalog variant resolved from the commerce platform."""

    id: str
    title: str | None = None
    price: Decimal | None = Field(None, ge=0)

    model_config = ConfigDict(frozen=True)


class CartItem(BaseModel):
    """One line of the submission request sent to the commerce platform."""

    id: str
    quantity: int = Field(..., ge=1)
    properties: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)


class CartSubmission(BaseModel):
    """Request body for the commerce platform's cart add endpoint."""

    items: list[CartItem] = Field(default_factory=list)


class PurchaseOrderLine(BaseModel):
    """A purchase-order line as seen by the consolidation transform."""

    id: str
    quantity: int = Field(..., ge=0)
    unit_price: Decimal = Field(
        ..., ge=0, validation_alias=AliasChoices("unit_price", "unitPrice")
    )
    currency: str = "GBP"
    metadata: dict[str, str] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("metadata", "properties"),
    )

    model_config = ConfigDict(frozen=True)

    @property
    def bundle_id(self) -> str | None:
        """Bundle id property, or None when absent or blank."""
        return self.metadata.get("bundleId") or None


class _LineMetadataBase(BaseModel):
    """Fields every bundle component line carries."""

    bundle_id: str = Field(..., min_length=1)
    parent_variant_id: str = Field(..., min_length=1)
    hand: str | None = None
    set_size: str | None = None
    club_list: list[str] | None = None

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class MainLineMetadata(_LineMetadataBase):
    """Metadata of the main iron set line."""

    component_type: Literal["main"] = "main"
    hand: str = Field(..., min_length=1)
    set_size: str = Field(..., min_length=1)
    grip: str | None = None
    lie: str | None = None


class ShaftLineMetadata(_LineMetadataBase):
    """Metadata of the shaft accessory line."""

    component_type: Literal["shaft"] = "shaft"
    shaft_brand: str = Field(..., min_length=1)
    shaft_flex: str | None = None
    shaft_length: str | None = None
    club_count: int | None = Field(None, ge=0)


LineMetadata = Annotated[
    MainLineMetadata | ShaftLineMetadata,
    Field(discriminator="component_type"),
]


class ParsedLine(BaseModel):
    """A purchase-order line with its metadata parsed into a tagged type."""

    line: PurchaseOrderLine
    metadata: LineMetadata

    model_config = ConfigDict(frozen=True)


class _WireModel(BaseModel):
    """Serializes with camelCase keys for the commerce platform."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class MergeLine(_WireModel):
    """A line reference inside a merge operation."""

    line_id: str
    quantity: int


class MergeAttribute(_WireModel):
    """Customer-facing key/value attribute of a merged bundle."""

    key: str
    value: str


class MergeOperation(_WireModel):
    """Instruction to merge a bundle's lines into its parent variant."""

    lines: list[MergeLine]
    title: str
    parent_variant_id: str
    attributes: list[MergeAttribute] = Field(default_factory=list)
    total_price: Decimal = Decimal("0")
    currency: str = "GBP"


class CheckoutResult(BaseModel):
    """Outcome of a successful cart submission."""

    bundle_id: str
    submission: CartSubmission
    submitted_at: datetime = Field(default_factory=utc_now)


class SessionSnapshot(BaseModel):
    """Selection and derived values of one configurator session."""

    session_key: str
    state: SelectionState
    derived: DerivedState
    applied: bool = Field(True, description="Whether the last action was accepted")
