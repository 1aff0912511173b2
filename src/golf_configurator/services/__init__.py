"""Service layer for checkout and configurator sessions."""

from golf_configurator.services.checkout_service import CheckoutService, CommerceGateway
from golf_configurator.services.session_service import (
    SessionNotFoundError,
    SessionService,
    UnknownActionError,
)

__all__ = [
    "CheckoutService",
    "CommerceGateway",
    "SessionNotFoundError",
    "SessionService",
    "UnknownActionError",
]
