"""Checkout: fan-out into per-farmer orders."""

import re
import threading
from datetime import UTC, datetime

import pytest
from protean import current_domain
from protean.exceptions import ValidationError

from marketplace.cart.items import UpdateCartQuantity
from marketplace.domain import marketplace
from marketplace.errors import ConflictError, EmptyCartError
from marketplace.identity.user import User
from marketplace.order import placement
from marketplace.order.order import Order
from marketplace.order.placement import group_by_farmer, place_order
from marketplace.order.sequence import OrderSequence

ORDER_ID = re.compile(r"^ORD-\d{8}-\d{3,}$")


def _stored_orders():
    return current_domain.repository_for(Order)._dao.query.all().items


def _cart(user_id):
    return current_domain.repository_for(User).get(user_id).cart_items


@pytest.fixture()
def two_farmer_cart(consumer, farmer, other_farmer, add_line):
    add_line(consumer.id, "prod-tomato", farmer.id, price=40.0, quantity=2)
    add_line(consumer.id, "prod-milk", other_farmer.id, price=30.0, quantity=1)
    add_line(consumer.id, "prod-okra", farmer.id, price=20.0, quantity=1)
    return consumer


class TestGroupByFarmer:
    def test_preserves_first_seen_order(self, two_farmer_cart, farmer, other_farmer):
        groups = group_by_farmer(_cart(two_farmer_cart.id))

        assert list(groups) == [str(farmer.id), str(other_farmer.id)]
        assert [line.product_id for line in groups[str(farmer.id)]] == ["prod-tomato", "prod-okra"]


class TestPlaceOrder:
    def test_one_order_per_farmer(self, two_farmer_cart, farmer, other_farmer, shipping_address):
        orders = place_order(two_farmer_cart.id, shipping_address, payment_method="cod")

        assert len(orders) == 2
        by_farmer = {order.farmer_id: order for order in orders}
        assert by_farmer[str(farmer.id)].total_amount == 100.0
        assert by_farmer[str(other_farmer.id)].total_amount == 30.0
        assert len(by_farmer[str(farmer.id)].items) == 2

    def test_cart_is_empty_afterwards(self, two_farmer_cart, shipping_address):
        place_order(two_farmer_cart.id, shipping_address)

        assert len(_cart(two_farmer_cart.id)) == 0

    def test_orders_start_pending(self, two_farmer_cart, shipping_address):
        orders = place_order(two_farmer_cart.id, shipping_address, payment_method="online", delivery_charge=20.0)

        for order in orders:
            assert order.status == "pending"
            assert order.payment_status == "pending"
            assert order.payment_method == "online"
            assert order.delivery_charge == 20.0
            assert order.consumer_id == str(two_farmer_cart.id)
            assert order.shipping_address.pin_code == shipping_address["pin_code"]

    def test_order_ids_follow_the_daily_format(self, two_farmer_cart, shipping_address):
        orders = place_order(two_farmer_cart.id, shipping_address)
        today = datetime.now(UTC).strftime("%Y%m%d")

        ids = sorted(order.order_id for order in orders)
        assert all(ORDER_ID.match(order_id) for order_id in ids)
        assert ids == [f"ORD-{today}-001", f"ORD-{today}-002"]

    def test_sequence_counter_is_persisted(self, two_farmer_cart, shipping_address):
        place_order(two_farmer_cart.id, shipping_address)

        sequence = current_domain.repository_for(OrderSequence).get(datetime.now(UTC).strftime("%Y%m%d"))
        assert sequence.last_value == 2

    def test_sequential_checkouts_get_distinct_ids(self, make_user, farmer, add_line, shipping_address):
        order_ids = []
        for index in range(3):
            buyer = make_user(f"buyer{index}@example.com")
            add_line(buyer.id, "prod-tomato", farmer.id, price=40.0)
            order_ids.extend(order.order_id for order in place_order(buyer.id, shipping_address))

        assert len(set(order_ids)) == 3


class TestPlaceOrderRejections:
    def test_empty_cart(self, consumer, shipping_address):
        with pytest.raises(EmptyCartError) as exc:
            place_order(consumer.id, shipping_address)
        assert exc.value.messages == {"cart": ["Cart is empty"]}

    def test_incomplete_line_places_nothing(self, consumer, farmer, add_line, shipping_address):
        add_line(consumer.id, "prod-tomato", farmer.id, price=40.0)
        current_domain.process(
            UpdateCartQuantity(user_id=str(consumer.id), product_id="prod-mystery", quantity=2),
            asynchronous=False,
        )

        with pytest.raises(ValidationError) as exc:
            place_order(consumer.id, shipping_address)

        assert "cart" in exc.value.messages
        assert _stored_orders() == []
        assert len(_cart(consumer.id)) == 2

    def test_unknown_payment_method(self, two_farmer_cart, shipping_address):
        with pytest.raises(ValidationError) as exc:
            place_order(two_farmer_cart.id, shipping_address, payment_method="barter")

        assert "payment_method" in exc.value.messages
        assert _stored_orders() == []

    def test_incomplete_address(self, two_farmer_cart, shipping_address):
        del shipping_address["city"]

        with pytest.raises(ValidationError):
            place_order(two_farmer_cart.id, shipping_address)

        assert _stored_orders() == []
        assert len(_cart(two_farmer_cart.id)) == 3

    def test_order_id_collision_is_retried_with_a_fresh_number(
        self, make_user, farmer, add_line, shipping_address, monkeypatch
    ):
        first = make_user("first@example.com")
        add_line(first.id, "prod-tomato", farmer.id, price=40.0)
        place_order(first.id, shipping_address)

        # The first read sees a counter from before the previous checkout
        calls = []
        fresh_sequence_for = placement.sequence_for

        def stale_once(day):
            calls.append(day)
            if len(calls) == 1:
                return OrderSequence(day=day, last_value=0)
            return fresh_sequence_for(day)

        monkeypatch.setattr(placement, "sequence_for", stale_once)

        second = make_user("second@example.com")
        add_line(second.id, "prod-tomato", farmer.id, price=40.0)

        [order] = place_order(second.id, shipping_address)

        today = datetime.now(UTC).strftime("%Y%m%d")
        assert len(calls) == 2
        assert order.order_id == f"ORD-{today}-002"
        assert len(_stored_orders()) == 2
        assert len(_cart(second.id)) == 0

    def test_failure_midway_rolls_back_every_order(self, two_farmer_cart, other_farmer, shipping_address, monkeypatch):
        place = Order.place

        def fails_for_second_farmer(**kwargs):
            if kwargs["farmer_id"] == str(other_farmer.id):
                raise RuntimeError("order store went away")
            return place(**kwargs)

        monkeypatch.setattr(Order, "place", staticmethod(fails_for_second_farmer))

        with pytest.raises(RuntimeError):
            place_order(two_farmer_cart.id, shipping_address)

        assert _stored_orders() == []
        assert len(_cart(two_farmer_cart.id)) == 3
        assert current_domain.repository_for(OrderSequence)._dao.query.all().items == []

    def test_persistent_order_id_collision_raises_conflict(
        self, make_user, farmer, add_line, shipping_address, monkeypatch
    ):
        first = make_user("first@example.com")
        add_line(first.id, "prod-tomato", farmer.id, price=40.0)
        place_order(first.id, shipping_address)

        # A counter that never advances reissues the number already taken
        monkeypatch.setattr(placement, "sequence_for", lambda day: OrderSequence(day=day, last_value=0))

        second = make_user("second@example.com")
        add_line(second.id, "prod-tomato", farmer.id, price=40.0)

        with pytest.raises(ConflictError):
            place_order(second.id, shipping_address)

        assert len(_stored_orders()) == 1
        assert len(_cart(second.id)) == 1


class TestConcurrentPlacement:
    def test_parallel_checkouts_get_unique_order_ids(self, make_user, farmer, add_line, shipping_address):
        buyers = []
        for index in range(8):
            buyer = make_user(f"rush{index}@example.com")
            add_line(buyer.id, "prod-tomato", farmer.id, price=40.0)
            buyers.append(str(buyer.id))

        placed, failures = [], []

        def checkout(buyer_id):
            with marketplace.domain_context():
                try:
                    placed.extend(order.order_id for order in place_order(buyer_id, shipping_address))
                except Exception as exc:  # noqa: BLE001
                    failures.append(exc)

        threads = [threading.Thread(target=checkout, args=(buyer_id,)) for buyer_id in buyers]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert failures == []
        assert len(placed) == 8
        assert len(set(placed)) == 8
