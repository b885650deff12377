"""Order lifecycle — farmer-side status updates."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.errors import NotFoundError
from marketplace.order.order import Order
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


@marketplace.command(part_of="Order")
class UpdateOrderStatus:
    order_id = String(required=True, max_length=30)  # human-readable, e.g. ORD-20251120-001
    farmer_id = Identifier(required=True)
    status = String(required=True, max_length=30)


@marketplace.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.find_for_farmer(command.order_id, command.farmer_id)
        if order is None:
            raise NotFoundError("Order not found")

        previous_status = order.status
        order.update_status(command.status)
        repo.add(order)

        logger.info(
            "Order status updated",
            order_id=order.order_id,
            farmer_id=str(command.farmer_id),
            previous_status=previous_status,
            status=order.status,
            payment_status=order.payment_status,
        )
        return str(order.id)
