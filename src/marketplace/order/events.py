"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Order")
class OrderPlaced:
    """A farmer's share of a checkout was recorded as a pending order."""

    __version__ = 1

    order_uuid = Identifier(required=True)
    order_id = String(required=True)  # human-readable number
    consumer_id = Identifier(required=True)
    farmer_id = Identifier(required=True)
    item_count = Integer(required=True)
    total_amount = Float(required=True)
    delivery_charge = Float()
    payment_method = String(required=True)
    placed_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderStatusChanged:
    """The owning farmer moved an order along its lifecycle."""

    __version__ = 1

    order_uuid = Identifier(required=True)
    order_id = String(required=True)
    farmer_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    previous_payment_status = String()
    payment_status = String(required=True)
    changed_at = DateTime(required=True)
