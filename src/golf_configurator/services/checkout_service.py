"""Service layer for submitting configured bundles to the commerce platform."""

import logging
from typing import Protocol

from golf_configurator.bundles.identity import build_submission, generate_bundle_id
from golf_configurator.config import ConfiguratorConfig
from golf_configurator.errors import ConfigurationIncomplete, SubmissionFailure
from golf_configurator.models.pydantic_models import (
    CartSubmission,
    CheckoutResult,
    DerivedState,
    Hand,
    ProductVariant,
    SelectionState,
)
from golf_configurator.rules.selection_rules import (
    iron_set_type,
    validate_complete_configuration,
)

logger = logging.getLogger(__name__)


class CommerceGateway(Protocol):
    """Commerce platform operations the checkout depends on."""

    async def find_iron_variant(self, set_size: str, hand: Hand) -> ProductVariant | None:
        """Return the iron set variant for a set size and hand."""
        ...

    async def find_shaft_variant(self, brand: str, flex: str) -> ProductVariant | None:
        """Return the shaft variant for a brand and flex."""
        ...

    async def get_parent_variant_id(self, set_size: str, hand: Hand) -> str:
        """Return the variant the bundle is merged into."""
        ...

    async def add_to_cart(self, submission: CartSubmission) -> None:
        """Submit the cart lines; raise on rejection."""
        ...


class CheckoutService:
    """Turns a complete selection into tagged cart lines and submits them.

    Instances are callable with ``(state, derived)`` so they can be passed
    directly to ``ConfigurationStore.submit``.
    """

    def __init__(self, gateway: CommerceGateway, config: ConfiguratorConfig | None = None) -> None:
        """Initialize with the commerce gateway.

        Args:
            gateway: Commerce platform collaborator.
            config: Catalog and business rules.
        """
        self._gateway = gateway
        self._config = config or ConfiguratorConfig()

    async def __call__(self, state: SelectionState, derived: DerivedState) -> CheckoutResult:
        return await self.checkout(state)

    async def checkout(self, state: SelectionState) -> CheckoutResult:
        """Validate, build and submit the bundle for a selection.

        A chosen shaft must be complete; with no shaft brand the set ships
        with the stock shaft and no shaft line is added.

        Args:
            state: Selection snapshot.

        Returns:
            CheckoutResult with the bundle id and submitted lines.

        Raises:
            ConfigurationIncomplete: If any section is incomplete.
            SubmissionFailure: If variants cannot be resolved or the cart rejects the lines.
        """
        validation = validate_complete_configuration(
            state, self._config.rules, require_shaft=bool(state.shaft_brand)
        )
        if not validation.valid:
            raise ConfigurationIncomplete("configuration", validation.reason or "incomplete")

        if state.hand is None:
            raise ConfigurationIncomplete("hand", "Hand selection required")
        set_size = iron_set_type(state.clubs)

        try:
            submission, bundle_id = await self._prepare(state, state.hand, set_size)
            await self._gateway.add_to_cart(submission)
        except SubmissionFailure:
            raise
        except Exception as e:
            logger.exception("Commerce gateway call failed")
            raise SubmissionFailure(str(e) or "Failed to add to cart") from e

        logger.info(
            "Submitted bundle %s (%s, %d lines)", bundle_id, set_size, len(submission.items)
        )
        return CheckoutResult(bundle_id=bundle_id, submission=submission)

    async def _prepare(
        self,
        state: SelectionState,
        hand: Hand,
        set_size: str,
    ) -> tuple[CartSubmission, str]:
        iron_variant = await self._gateway.find_iron_variant(set_size, hand)
        if iron_variant is None:
            raise SubmissionFailure(
                f"Iron variant not found for {set_size} {hand.value} handed set"
            )

        shaft_variant = None
        if state.shaft_brand:
            shaft_variant = await self._gateway.find_shaft_variant(
                state.shaft_brand, state.shaft_flex
            )
            if shaft_variant is None:
                raise SubmissionFailure(
                    f'No shaft variant found for brand "{state.shaft_brand}" '
                    f'with flex "{state.shaft_flex}"'
                )

        parent_variant_id = await self._gateway.get_parent_variant_id(set_size, hand)
        if not parent_variant_id:
            raise SubmissionFailure("Bundle parent variant is not configured")

        bundle_id = generate_bundle_id()
        submission = build_submission(
            state,
            bundle_id,
            iron_variant,
            shaft_variant,
            parent_variant_id=parent_variant_id,
            rules=self._config.rules,
        )
        return submission, bundle_id
