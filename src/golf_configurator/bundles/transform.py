"""Consolidation of bundle purchase-order lines into merge operations."""

import logging
from collections.abc import Iterable, Mapping, Sequence
from decimal import Decimal
from typing import Any

from golf_configurator.bundles.metadata import check_lead_properties, lead_line, parse_line
from golf_configurator.config import ConfiguratorConfig, TitleTemplates
from golf_configurator.errors import InconsistentBundleError
from golf_configurator.models.pydantic_models import (
    BusinessRules,
    MainLineMetadata,
    MergeAttribute,
    MergeLine,
    MergeOperation,
    ParsedLine,
    PurchaseOrderLine,
    ShaftLineMetadata,
)

logger = logging.getLogger(__name__)


def group_lines_by_bundle(
    lines: Iterable[PurchaseOrderLine],
) -> dict[str, list[PurchaseOrderLine]]:
    """Group lines by bundleId in first-seen order.

    Lines without a bundleId are left out.
    """
    groups: dict[str, list[PurchaseOrderLine]] = {}
    for line in lines:
        bundle_id = line.bundle_id
        if bundle_id is None:
            logger.debug("Line %s has no bundleId, skipping", line.id)
            continue
        groups.setdefault(bundle_id, []).append(line)
    return groups


def calculate_bundle_price(group: Sequence[PurchaseOrderLine]) -> Decimal:
    """Sum unit price times quantity over a bundle's lines."""
    return sum((line.unit_price * line.quantity for line in group), Decimal("0"))


def _main_line(parsed: Sequence[ParsedLine]) -> MainLineMetadata | None:
    for item in parsed:
        if isinstance(item.metadata, MainLineMetadata):
            return item.metadata
    return None


def _shaft_line(parsed: Sequence[ParsedLine]) -> ShaftLineMetadata | None:
    for item in parsed:
        if isinstance(item.metadata, ShaftLineMetadata):
            return item.metadata
    return None


def shaft_display(shaft: ShaftLineMetadata) -> str:
    """Brand followed by flex, unless the brand text already names the flex."""
    if shaft.shaft_flex and shaft.shaft_flex not in shaft.shaft_brand:
        return f"{shaft.shaft_brand} {shaft.shaft_flex}"
    return shaft.shaft_brand


def compose_title(parsed: Sequence[ParsedLine], templates: TitleTemplates) -> str:
    """Build the merged line title from the set size and optional shaft."""
    set_size = lead_line(parsed).metadata.set_size
    shaft = _shaft_line(parsed)
    if shaft is None:
        return templates.base.format(set_size=set_size)
    return templates.with_shaft.format(set_size=set_size, shaft=shaft_display(shaft))


def compose_attributes(
    parsed: Sequence[ParsedLine],
    rules: BusinessRules,
) -> list[MergeAttribute]:
    """Build the ordered customer-facing attributes, skipping absent ones.

    Order: Set Option, Lie Angle, Shaft, Length, Grip. Length is shown only
    when it differs from the default length.
    """
    main = _main_line(parsed)
    shaft = _shaft_line(parsed)
    set_size = lead_line(parsed).metadata.set_size or ""

    attributes = [MergeAttribute(key="Set Option", value=set_size)]
    if main is not None and main.lie:
        attributes.append(MergeAttribute(key="Lie Angle", value=main.lie))
    if shaft is not None:
        attributes.append(MergeAttribute(key="Shaft", value=shaft_display(shaft)))
        if shaft.shaft_length and shaft.shaft_length != rules.default_shaft_length:
            attributes.append(MergeAttribute(key="Length", value=shaft.shaft_length))
    if main is not None and main.grip:
        attributes.append(MergeAttribute(key="Grip", value=main.grip))
    return attributes


def _common_value(bundle_id: str, values: list[str], label: str) -> str:
    distinct = list(dict.fromkeys(values))
    if len(distinct) != 1:
        raise InconsistentBundleError(
            bundle_id, f"lines disagree on {label}: {', '.join(distinct)}"
        )
    return distinct[0]


def build_merge_operation(
    bundle_id: str,
    group: Sequence[PurchaseOrderLine],
    config: ConfiguratorConfig,
) -> MergeOperation:
    """Validate one bundle group and build its merge operation.

    Raises:
        MissingBundleMetadata: If a line lacks a required property, or the
            lead line lacks hand or setSize.
        InvalidBundleMetadata: If a property is malformed.
        InconsistentBundleError: If lines disagree on parent variant or currency.
    """
    parsed = [parse_line(line, config.required_properties) for line in group]
    check_lead_properties(parsed)

    parent_variant_id = _common_value(
        bundle_id, [p.metadata.parent_variant_id for p in parsed], "parentVariantId"
    )
    currency = _common_value(bundle_id, [line.currency for line in group], "currency")

    total_price = calculate_bundle_price(group)
    title = compose_title(parsed, config.title_templates)
    attributes = compose_attributes(parsed, config.rules)

    logger.info(
        "Bundle %s: %d lines, title '%s', total %s %s",
        bundle_id, len(group), title, total_price, currency,
    )

    return MergeOperation(
        lines=[MergeLine(line_id=line.id, quantity=line.quantity) for line in group],
        title=title,
        parent_variant_id=parent_variant_id,
        attributes=attributes,
        total_price=total_price,
        currency=currency,
    )


def consolidate(
    lines: Iterable[PurchaseOrderLine | Mapping[str, Any]],
    config: ConfiguratorConfig | None = None,
) -> list[MergeOperation]:
    """Merge bundle lines into one operation per bundle.

    Algorithm:
    1. Group lines by bundleId (first-seen order); lines without one are dropped
    2. Validate and parse every line's metadata (no defaults); hand and
       setSize are read from the lead line (main line, else first line)
    3. Sum unit price times quantity
    4. Compose the title and display attributes
    5. Emit one merge operation per bundle with its common parent variant

    Any error aborts the whole call; no partial result is returned.

    Args:
        lines: Purchase-order lines, as models or raw mappings.
        config: Title templates, required properties and rules.

    Returns:
        Merge operations in first-seen bundle order.
    """
    config = config or ConfiguratorConfig()
    order_lines = [
        line if isinstance(line, PurchaseOrderLine) else PurchaseOrderLine.model_validate(line)
        for line in lines
    ]
    logger.info("Consolidating %d lines", len(order_lines))

    groups = group_lines_by_bundle(order_lines)
    logger.debug("Bundle groups: %s", list(groups))

    operations = [
        build_merge_operation(bundle_id, group, config) for bundle_id, group in groups.items()
    ]

    logger.info("Created %d merge operations", len(operations))
    return operations
