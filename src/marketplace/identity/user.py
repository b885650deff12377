"""User aggregate. An account on the marketplace and the cart it carries.

The cart is embedded in the user (``cart_items``) so every cart mutation is a
single-aggregate write. Cart lines are keyed by ``product_id``: adding the same
product twice increments one line instead of creating two.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, String, ValueObject

from marketplace.cart.events import CartCleared, CartItemAdded, CartItemRemoved, CartQuantityUpdated
from marketplace.cart.line import CartLine
from marketplace.domain import marketplace
from marketplace.identity.events import UserRegistered

DEFAULT_PROFILE_PICTURE = "https://res.cloudinary.com/dsxyfatqg/image/upload/v1761456471/7984000_okwtmx.jpg"


class Role(Enum):
    FARMER = "farmer"
    CONSUMER = "consumer"
    ADMIN = "admin"


@marketplace.value_object(part_of="User")
class Location:
    """Where a user (usually a farmer) is based."""

    address = String(max_length=255)
    city = String(max_length=100)
    state = String(max_length=100)
    country = String(max_length=100)
    zip_code = String(max_length=20)


@marketplace.aggregate
class User:
    email = String(required=True, max_length=254, unique=True)
    password_hash = String(required=True, max_length=255)
    full_name = String(required=True, max_length=150)
    role = String(required=True, choices=Role)
    phone_number = String(max_length=20)
    profile_picture = String(max_length=1000, default=DEFAULT_PROFILE_PICTURE)
    location = ValueObject(Location)
    cart_items = HasMany(CartLine)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def farmers_must_have_a_location(self):
        if self.role == Role.FARMER.value and self.location is None:
            raise ValidationError({"location": ["Location is required for farmers"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def register(
        cls,
        email,
        password_hash,
        full_name,
        role,
        phone_number=None,
        profile_picture=None,
        location=None,
    ):
        now = datetime.now(UTC)
        user = cls(
            email=email.strip().lower(),
            password_hash=password_hash,
            full_name=full_name.strip(),
            role=role,
            phone_number=phone_number,
            profile_picture=profile_picture or DEFAULT_PROFILE_PICTURE,
            location=Location(**location) if location else None,
            created_at=now,
            updated_at=now,
        )
        user.raise_(
            UserRegistered(
                user_id=str(user.id),
                email=user.email,
                role=user.role,
                full_name=user.full_name,
                registered_at=now,
            )
        )
        return user

    @property
    def is_farmer(self):
        return self.role == Role.FARMER.value

    # -------------------------------------------------------------------
    # Cart
    # -------------------------------------------------------------------
    def cart_line(self, product_id):
        return next((line for line in self.cart_items if str(line.product_id) == str(product_id)), None)

    def add_to_cart(self, product_id, quantity=1, farmer_id=None, name=None, price=None, unit=None, image=None):
        """Add a product, or increase the quantity of the line already holding it.

        An existing line keeps its original price snapshot.
        """
        if quantity is None:
            quantity = 1
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        existing = self.cart_line(product_id)
        if existing:
            existing.quantity += quantity
            line_quantity = existing.quantity
        else:
            self.add_cart_items(
                CartLine(
                    product_id=product_id,
                    farmer_id=farmer_id,
                    name=name,
                    price=price,
                    unit=unit,
                    quantity=quantity,
                    image=image,
                )
            )
            line_quantity = quantity

        self.updated_at = datetime.now(UTC)
        self.raise_(
            CartItemAdded(
                user_id=str(self.id),
                product_id=str(product_id),
                farmer_id=str(farmer_id) if farmer_id else None,
                quantity=quantity,
                line_quantity=line_quantity,
            )
        )

    def update_cart_quantity(self, product_id, quantity):
        """Set a line's quantity; zero or less removes the line.

        Updating a product that is not in the cart inserts a bare line holding
        only the product id and quantity.
        """
        existing = self.cart_line(product_id)

        if quantity <= 0:
            if existing:
                self._drop_line(existing)
            return

        if existing:
            previous_quantity = existing.quantity
            existing.quantity = quantity
        else:
            previous_quantity = None
            self.add_cart_items(CartLine(product_id=product_id, quantity=quantity))

        self.updated_at = datetime.now(UTC)
        self.raise_(
            CartQuantityUpdated(
                user_id=str(self.id),
                product_id=str(product_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )

    def remove_from_cart(self, product_id):
        """Remove a line. Removing a product that is not in the cart does nothing."""
        existing = self.cart_line(product_id)
        if existing:
            self._drop_line(existing)

    def clear_cart(self):
        lines = list(self.cart_items)
        if not lines:
            return

        for line in lines:
            self.remove_cart_items(line)

        self.updated_at = datetime.now(UTC)
        self.raise_(CartCleared(user_id=str(self.id), line_count=len(lines)))

    def _drop_line(self, line):
        self.remove_cart_items(line)
        self.updated_at = datetime.now(UTC)
        self.raise_(CartItemRemoved(user_id=str(self.id), product_id=str(line.product_id)))
