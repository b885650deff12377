"""Order aggregate, one farmer's share of a checkout.

A checkout fans out into one Order per farmer present in the cart. Items are
immutable snapshots of the cart lines, so later catalogue price changes never
touch historical orders.

State Machine:
    pending → confirmed → preparing → out_for_delivery → delivered
    cancelled (from any non-terminal state)

Farmers may move an order forward past intermediate states (pending straight
to delivered), never backwards. Reaching ``delivered`` always marks the
payment as collected.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from marketplace.domain import marketplace
from marketplace.order.events import OrderPlaced, OrderStatusChanged


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(Enum):
    COD = "cod"
    ONLINE = "online"


# Fulfilment progression; position decides what counts as "forward"
_PROGRESSION = [
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
]

TERMINAL_STATES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}


def allowed_transitions(current):
    """Statuses an order in ``current`` may move to."""
    if current in TERMINAL_STATES:
        return set()
    later = _PROGRESSION[_PROGRESSION.index(current) + 1 :]
    return set(later) | {OrderStatus.CANCELLED}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@marketplace.value_object(part_of="Order")
class ShippingAddress:
    """Delivery address captured at checkout; unaffected by later profile edits."""

    full_name = String(required=True, max_length=150)
    phone = String(required=True, max_length=20)
    address = String(required=True, max_length=255)
    area = String(max_length=150)
    city = String(required=True, max_length=100)
    pin_code = String(required=True, max_length=20)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@marketplace.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    name = String(max_length=255)
    price = Float(required=True, min_value=0.0)
    unit = String(max_length=50)
    quantity = Integer(required=True, min_value=1)
    image = String(max_length=1000)

    @property
    def subtotal(self):
        return self.price * self.quantity


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@marketplace.aggregate
class Order:
    order_id = String(required=True, max_length=30, unique=True)
    consumer_id = Identifier(required=True)
    farmer_id = Identifier(required=True)
    items = HasMany(OrderItem)
    total_amount = Float(required=True, min_value=0.0)
    delivery_charge = Float(default=0.0, min_value=0.0)
    shipping_address = ValueObject(ShippingAddress)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.COD.value)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        order_id,
        consumer_id,
        farmer_id,
        lines,
        shipping_address,
        payment_method=PaymentMethod.COD.value,
        delivery_charge=0.0,
    ):
        """Create a pending order for one farmer from that farmer's cart lines.

        Args:
            order_id: Human-readable number, e.g. ``ORD-20251120-001``.
            lines: Cart lines (or any objects with product_id, name, price,
                   unit, quantity, image) belonging to ``farmer_id``.
            shipping_address: Dict with full_name, phone, address, area, city, pin_code.
        """
        if not lines:
            raise ValidationError({"items": ["An order needs at least one item"]})

        now = datetime.now(UTC)
        order = cls(
            order_id=order_id,
            consumer_id=str(consumer_id),
            farmer_id=str(farmer_id),
            total_amount=sum(line.price * line.quantity for line in lines),
            delivery_charge=delivery_charge or 0.0,
            shipping_address=ShippingAddress(**shipping_address),
            status=OrderStatus.PENDING.value,
            payment_status=PaymentStatus.PENDING.value,
            payment_method=payment_method or PaymentMethod.COD.value,
            created_at=now,
            updated_at=now,
        )
        for line in lines:
            order.add_items(
                OrderItem(
                    product_id=str(line.product_id),
                    name=line.name,
                    price=line.price,
                    unit=line.unit,
                    quantity=line.quantity,
                    image=line.image,
                )
            )

        order.raise_(
            OrderPlaced(
                order_uuid=str(order.id),
                order_id=order.order_id,
                consumer_id=order.consumer_id,
                farmer_id=order.farmer_id,
                item_count=len(lines),
                total_amount=order.total_amount,
                delivery_charge=order.delivery_charge,
                payment_method=order.payment_method,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    @property
    def total_items(self):
        return sum(item.quantity for item in self.items)

    @property
    def grand_total(self):
        return self.total_amount + (self.delivery_charge or 0.0)

    @property
    def is_terminal(self):
        return OrderStatus(self.status) in TERMINAL_STATES

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def update_status(self, new_status):
        """Move the order to ``new_status``.

        Delivery always settles the payment, whatever the payment method or
        the previous payment status. No other transition touches payment.
        """
        try:
            target = OrderStatus(new_status)
        except ValueError as exc:
            raise ValidationError({"status": [f"Unknown order status: {new_status}"]}) from exc

        current = OrderStatus(self.status)
        if target not in allowed_transitions(current):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target.value}"]})

        previous_payment_status = self.payment_status
        self.status = target.value
        if target == OrderStatus.DELIVERED:
            self.payment_status = PaymentStatus.PAID.value

        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_uuid=str(self.id),
                order_id=self.order_id,
                farmer_id=self.farmer_id,
                previous_status=current.value,
                new_status=target.value,
                previous_payment_status=previous_payment_status,
                payment_status=self.payment_status,
                changed_at=now,
            )
        )
