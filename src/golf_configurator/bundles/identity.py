"""Bundle id minting and cart line construction."""

import json
import secrets
import string
import time

from golf_configurator.models.pydantic_models import (
    BusinessRules,
    CartItem,
    CartSubmission,
    ComponentType,
    ProductVariant,
    SelectionState,
)
from golf_configurator.rules.selection_rules import DEFAULT_RULES, iron_set_type

BUNDLE_ID_PREFIX = "golf"
_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
_SUFFIX_LENGTH = 9


def generate_bundle_id() -> str:
    """Return a bundle id unique per checkout attempt.

    Format: ``golf-<epoch milliseconds>-<9 random chars>``.
    """
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(_SUFFIX_LENGTH))
    return f"{BUNDLE_ID_PREFIX}-{int(time.time() * 1000)}-{suffix}"


def _shared_properties(
    state: SelectionState,
    bundle_id: str,
    parent_variant_id: str,
    component_type: ComponentType,
) -> dict[str, str]:
    if state.hand is None:
        raise ValueError("Cannot build bundle lines without a hand selection")
    return {
        "bundleId": bundle_id,
        "parentVariantId": parent_variant_id,
        "componentType": component_type.value,
        "hand": state.hand.value,
        "setSize": iron_set_type(state.clubs),
        "clubList": json.dumps(list(state.clubs)),
    }


def build_lines(
    state: SelectionState,
    bundle_id: str,
    main_variant: ProductVariant,
    accessory_variant: ProductVariant | None = None,
    *,
    parent_variant_id: str,
    rules: BusinessRules = DEFAULT_RULES,
) -> list[CartItem]:
    """Build the cart lines for one configured bundle.

    The main line carries the set description (hand, set size, clubs, grip,
    lie). The shaft line is added only when a shaft brand is chosen and an
    accessory variant is given; its quantity is the club count. Both lines
    carry the same bundleId and parentVariantId.

    Args:
        state: Selection snapshot being submitted.
        bundle_id: Id from generate_bundle_id().
        main_variant: Iron set variant for the hand and set size.
        accessory_variant: Shaft variant for the chosen brand and flex.
        parent_variant_id: Variant the bundle is merged into at checkout.
        rules: Business rules (default lie and shaft length).

    Returns:
        List of CartItem, main line first.
    """
    main_properties = _shared_properties(state, bundle_id, parent_variant_id, ComponentType.MAIN)
    if state.grip is not None:
        main_properties["grip"] = state.grip.display()
    main_properties["lie"] = state.lie or rules.default_lie

    items = [CartItem(id=main_variant.id, quantity=1, properties=main_properties)]

    if accessory_variant is not None and state.shaft_brand:
        club_count = len(state.clubs)
        shaft_properties = _shared_properties(
            state, bundle_id, parent_variant_id, ComponentType.SHAFT
        )
        shaft_properties.update(
            {
                "shaftBrand": state.shaft_brand,
                "shaftFlex": state.shaft_flex,
                "shaftLength": state.shaft_length or rules.default_shaft_length,
                "clubCount": str(club_count),
            }
        )
        items.append(
            CartItem(id=accessory_variant.id, quantity=club_count, properties=shaft_properties)
        )

    return items


def build_submission(
    state: SelectionState,
    bundle_id: str,
    main_variant: ProductVariant,
    accessory_variant: ProductVariant | None = None,
    *,
    parent_variant_id: str,
    rules: BusinessRules = DEFAULT_RULES,
) -> CartSubmission:
    """Wrap build_lines() output in the cart add request shape."""
    return CartSubmission(
        items=build_lines(
            state,
            bundle_id,
            main_variant,
            accessory_variant,
            parent_variant_id=parent_variant_id,
            rules=rules,
        )
    )
