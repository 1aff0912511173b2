"""Parsing and validation of bundle line properties.

Raw purchase-order lines carry string-valued properties. They are checked
and parsed exactly once, here, into MainLineMetadata or ShaftLineMetadata.
Missing values are never defaulted.
"""

import json
from collections.abc import Sequence

from pydantic import TypeAdapter, ValidationError

from golf_configurator.errors import InvalidBundleMetadata, MissingBundleMetadata
from golf_configurator.models.pydantic_models import (
    ComponentType,
    LineMetadata,
    ParsedLine,
    PurchaseOrderLine,
)

REQUIRED_PROPERTIES: tuple[str, ...] = (
    "bundleId",
    "parentVariantId",
    "componentType",
)

# Carried once per bundle, by its lead line
LEAD_PROPERTIES: tuple[str, ...] = ("hand", "setSize")

# Extra properties each component type must carry
COMPONENT_REQUIRED_PROPERTIES: dict[str, tuple[str, ...]] = {
    ComponentType.MAIN.value: LEAD_PROPERTIES,
    ComponentType.SHAFT.value: ("shaftBrand",),
}

_metadata_adapter: TypeAdapter[LineMetadata] = TypeAdapter(LineMetadata)


def missing_properties(line: PurchaseOrderLine, required: Sequence[str]) -> list[str]:
    """Return required property keys that are absent or blank on a line."""
    return [key for key in required if not line.metadata.get(key, "").strip()]


def decode_club_list(line_id: str, raw: str) -> list[str]:
    """Decode the JSON club list property.

    Raises:
        InvalidBundleMetadata: If the value is not a JSON array.
    """
    try:
        clubs = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InvalidBundleMetadata(line_id, f"clubList is not valid JSON: {raw}") from e
    if not isinstance(clubs, list):
        raise InvalidBundleMetadata(line_id, "clubList must be a JSON array")
    return [str(club) for club in clubs]


def parse_line(
    line: PurchaseOrderLine,
    required: Sequence[str] = REQUIRED_PROPERTIES,
) -> ParsedLine:
    """Validate a bundle line and parse its metadata into a tagged type.

    Args:
        line: Purchase-order line with a bundleId.
        required: Property keys every bundle line must carry.

    Returns:
        ParsedLine pairing the line with its typed metadata.

    Raises:
        MissingBundleMetadata: If any required property is missing.
        InvalidBundleMetadata: If a property is present but malformed.
    """
    missing = missing_properties(line, required)
    if missing:
        raise MissingBundleMetadata(line.id, missing)

    raw: dict[str, object] = dict(line.metadata)
    component_type = line.metadata.get("componentType", "")
    if component_type not in COMPONENT_REQUIRED_PROPERTIES:
        raise InvalidBundleMetadata(line.id, f"unknown componentType '{component_type}'")

    missing = missing_properties(line, COMPONENT_REQUIRED_PROPERTIES[component_type])
    if missing:
        raise MissingBundleMetadata(line.id, missing)

    if line.metadata.get("clubList"):
        raw["clubList"] = decode_club_list(line.id, line.metadata["clubList"])

    try:
        metadata = _metadata_adapter.validate_python(raw)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise InvalidBundleMetadata(line.id, f"invalid values for {fields}") from e

    return ParsedLine(line=line, metadata=metadata)


def lead_line(parsed: Sequence[ParsedLine]) -> ParsedLine:
    """Return the bundle's main line, or its first line when it has none."""
    for item in parsed:
        if item.metadata.component_type == ComponentType.MAIN.value:
            return item
    return parsed[0]


def check_lead_properties(
    parsed: Sequence[ParsedLine],
    required: Sequence[str] = LEAD_PROPERTIES,
) -> ParsedLine:
    """Check the bundle-wide properties on the group's lead line.

    Other lines of the group may omit them.

    Raises:
        MissingBundleMetadata: If the lead line lacks any of them.
    """
    lead = lead_line(parsed)
    missing = missing_properties(lead.line, required)
    if missing:
        raise MissingBundleMetadata(lead.line.id, missing)
    return lead
