"""Farmer-side order status updates."""

import pytest
from protean import current_domain
from protean.exceptions import ValidationError

from marketplace.errors import NotFoundError
from marketplace.order.lifecycle import UpdateOrderStatus
from marketplace.order.order import Order
from marketplace.order.placement import place_order


@pytest.fixture()
def order(consumer, farmer, add_line, shipping_address):
    add_line(consumer.id, "prod-tomato", farmer.id, price=50.0, quantity=2)
    return place_order(consumer.id, shipping_address)[0]


def _update(order_id, farmer_id, status):
    return current_domain.process(
        UpdateOrderStatus(order_id=order_id, farmer_id=str(farmer_id), status=status),
        asynchronous=False,
    )


def _reload(order):
    return current_domain.repository_for(Order).get(order.id)


class TestUpdateOrderStatus:
    def test_owner_can_confirm(self, order, farmer):
        _update(order.order_id, farmer.id, "confirmed")

        stored = _reload(order)
        assert stored.status == "confirmed"
        assert stored.payment_status == "pending"

    def test_delivery_marks_paid(self, order, farmer):
        for status in ["confirmed", "preparing", "out_for_delivery", "delivered"]:
            _update(order.order_id, farmer.id, status)

        stored = _reload(order)
        assert stored.status == "delivered"
        assert stored.payment_status == "paid"

    def test_returns_the_order_identity(self, order, farmer):
        assert _update(order.order_id, farmer.id, "confirmed") == str(order.id)

    def test_other_farmer_gets_not_found(self, order, other_farmer):
        with pytest.raises(NotFoundError):
            _update(order.order_id, other_farmer.id, "confirmed")

        assert _reload(order).status == "pending"

    def test_unknown_order_id(self, farmer):
        with pytest.raises(NotFoundError):
            _update("ORD-19990101-001", farmer.id, "confirmed")

    def test_illegal_transition_is_rejected(self, order, farmer):
        _update(order.order_id, farmer.id, "cancelled")

        with pytest.raises(ValidationError):
            _update(order.order_id, farmer.id, "delivered")

        stored = _reload(order)
        assert stored.status == "cancelled"
        assert stored.payment_status == "pending"
