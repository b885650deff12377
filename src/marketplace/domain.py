"""Marketplace bounded context: users and their carts, per-farmer orders.

Handles the consumer's cart, checkout fan-out into one order per farmer,
and the farmer-side order lifecycle.
"""

from protean.domain import Domain

from marketplace.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

# Domain Composition Root
marketplace = Domain(name="marketplace")
