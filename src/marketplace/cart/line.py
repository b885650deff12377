"""Cart line entity: one product a user intends to buy, with its price snapshot."""

from protean.fields import Float, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.entity(part_of="User")
class CartLine:
    """A product in a user's cart.

    ``name``, ``price``, ``unit`` and ``image`` are copied from the product when
    it is added, so the line keeps the price the consumer saw. Lines created by
    a bare quantity update carry only ``product_id`` and ``quantity``.
    """

    product_id = Identifier(required=True)
    farmer_id = Identifier()
    name = String(max_length=255)
    price = Float(min_value=0.0)
    unit = String(max_length=50)
    quantity = Integer(required=True, min_value=1, default=1)
    image = String(max_length=1000)

    @property
    def subtotal(self):
        return (self.price or 0.0) * self.quantity

    @property
    def is_orderable(self):
        """A line can only become an order item once it knows its farmer and price."""
        return bool(self.farmer_id) and self.price is not None
