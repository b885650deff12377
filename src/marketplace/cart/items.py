"""Cart item management — commands and handler."""

from protean import handle
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.identity.user import User


@marketplace.command(part_of="User")
class AddToCart:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    farmer_id = Identifier()
    name = String(max_length=255)
    price = Float(min_value=0.0)
    unit = String(max_length=50)
    quantity = Integer(default=1)
    image = String(max_length=1000)


@marketplace.command(part_of="User")
class UpdateCartQuantity:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)  # zero or less removes the line


@marketplace.command(part_of="User")
class RemoveFromCart:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)


@marketplace.command_handler(part_of=User)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)
        user.add_to_cart(
            product_id=command.product_id,
            quantity=command.quantity,
            farmer_id=command.farmer_id,
            name=command.name,
            price=command.price,
            unit=command.unit,
            image=command.image,
        )
        repo.add(user)

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command):
        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)
        user.update_cart_quantity(
            product_id=command.product_id,
            quantity=command.quantity,
        )
        repo.add(user)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)
        user.remove_from_cart(product_id=command.product_id)
        repo.add(user)
