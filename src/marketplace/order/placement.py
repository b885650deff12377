"""Order placement: turn a consumer's cart into one order per farmer.

Everything below runs inside a single command handler, so the orders, the
day's sequence counter and the emptied cart are committed together or not
at all.
"""

import json
import threading
from collections import OrderedDict

from protean import handle
from protean.exceptions import ExpectedVersionError, ValidationError
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from marketplace.config import get_settings
from marketplace.domain import marketplace
from marketplace.errors import ConflictError, EmptyCartError
from marketplace.identity.user import User
from marketplace.order.order import Order, PaymentMethod, ShippingAddress
from marketplace.order.sequence import OrderSequence, day_key, sequence_for
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

# Serialises placements within this process so each day's counter is read
# and incremented by one checkout at a time.
_placement_lock = threading.Lock()


@marketplace.command(part_of="Order")
class PlaceOrder:
    consumer_id = Identifier(required=True)
    shipping_address = Text(required=True)  # JSON: address dict
    payment_method = String(max_length=20, default=PaymentMethod.COD.value)
    delivery_charge = Float(default=0.0, min_value=0.0)


def group_by_farmer(lines):
    """Partition cart lines by farmer, keeping the order farmers first appear in."""
    groups = OrderedDict()
    for line in lines:
        groups.setdefault(str(line.farmer_id), []).append(line)
    return groups


def _check_lines(lines):
    incomplete = [str(line.product_id) for line in lines if not line.is_orderable]
    if incomplete:
        raise ValidationError({"cart": [f"Cart items are missing farmer or price details: {', '.join(incomplete)}"]})


def _check_payment_method(payment_method):
    if payment_method not in {method.value for method in PaymentMethod}:
        raise ValidationError({"payment_method": [f"Unsupported payment method: {payment_method}"]})


@marketplace.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        user_repo = current_domain.repository_for(User)
        consumer = user_repo.get(command.consumer_id)

        lines = list(consumer.cart_items)
        if not lines:
            raise EmptyCartError()

        shipping_address = (
            json.loads(command.shipping_address)
            if isinstance(command.shipping_address, str)
            else command.shipping_address
        )
        payment_method = command.payment_method or PaymentMethod.COD.value

        # Validate up front; nothing is written if any of these fail
        _check_lines(lines)
        _check_payment_method(payment_method)
        ShippingAddress(**shipping_address)

        sequence = sequence_for(day_key())
        orders = [
            Order.place(
                order_id=sequence.next_order_id(),
                consumer_id=consumer.id,
                farmer_id=farmer_id,
                lines=farmer_lines,
                shipping_address=shipping_address,
                payment_method=payment_method,
                delivery_charge=command.delivery_charge,
            )
            for farmer_id, farmer_lines in group_by_farmer(lines).items()
        ]

        order_repo = current_domain.repository_for(Order)
        for order in orders:
            order_repo.add(order)
        current_domain.repository_for(OrderSequence).add(sequence)

        consumer.clear_cart()
        user_repo.add(consumer)

        logger.info(
            "Orders placed",
            consumer_id=str(consumer.id),
            order_ids=[order.order_id for order in orders],
            farmer_count=len(orders),
        )
        return [str(order.id) for order in orders]


def _is_order_id_collision(exc):
    return isinstance(exc, ExpectedVersionError) or "order_id" in (getattr(exc, "messages", None) or {})


def place_order(consumer_id, shipping_address, payment_method=None, delivery_charge=0.0):
    """Place the consumer's cart and return the created orders.

    A collision on the order number (another process took it first) is retried
    with a fresh number; after ``ORDER_PLACEMENT_ATTEMPTS`` tries the checkout
    fails with ``ConflictError`` and the cart is left untouched.
    """
    attempts = get_settings().order_placement_attempts
    command = PlaceOrder(
        consumer_id=str(consumer_id),
        shipping_address=json.dumps(shipping_address),
        payment_method=payment_method or PaymentMethod.COD.value,
        delivery_charge=delivery_charge or 0.0,
    )

    for attempt in range(1, attempts + 1):
        try:
            with _placement_lock:
                order_ids = current_domain.process(command, asynchronous=False)
            break
        except (ValidationError, ExpectedVersionError) as exc:
            if not _is_order_id_collision(exc):
                raise
            logger.warning("Order number collision, retrying", consumer_id=str(consumer_id), attempt=attempt)
    else:
        raise ConflictError("Could not allocate an order number, please retry")

    repo = current_domain.repository_for(Order)
    return [repo.get(order_id) for order_id in order_ids]
