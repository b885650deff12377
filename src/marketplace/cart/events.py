"""Domain events for the cart lines embedded in the User aggregate."""

from protean.fields import Identifier, Integer

from marketplace.domain import marketplace


@marketplace.event(part_of="User")
class CartItemAdded:
    """A product was added to the cart, or its quantity was increased."""

    __version__ = 1

    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    farmer_id = Identifier()
    quantity = Integer(required=True)  # amount added
    line_quantity = Integer(required=True)  # quantity on the line afterwards


@marketplace.event(part_of="User")
class CartQuantityUpdated:
    """The quantity of a cart line was set to a new value."""

    __version__ = 1

    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    previous_quantity = Integer()  # absent when the update created the line
    new_quantity = Integer(required=True)


@marketplace.event(part_of="User")
class CartItemRemoved:
    """A line was removed from the cart."""

    __version__ = 1

    user_id = Identifier(required=True)
    product_id = Identifier(required=True)


@marketplace.event(part_of="User")
class CartCleared:
    """Every line was removed from the cart, normally after checkout."""

    __version__ = 1

    user_id = Identifier(required=True)
    line_count = Integer(required=True)
