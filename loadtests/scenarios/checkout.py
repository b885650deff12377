"""Checkout load test scenarios.

ShopperUser fills a cart from several farmers and checks out; every placed
order number is recorded so duplicates show up as failures. FarmerUser works
through incoming orders, moving each one towards delivery.
CheckoutRushUser is the same journey with no think time, to hammer the order
number sequence.
"""

import random
import threading

from locust import HttpUser, SequentialTaskSet, between, constant, task

from loadtests.data_generators import cart_product_data, place_order_data, register_data
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import FarmerState, ShopperState

# Farmers registered by FarmerUser instances; shoppers buy from them
FARMER_IDS: list[str] = []

_seen_order_ids: set[str] = set()
_seen_lock = threading.Lock()

NEXT_STATUS = {
    "pending": "confirmed",
    "confirmed": "preparing",
    "preparing": "out_for_delivery",
    "out_for_delivery": "delivered",
}


def _register(client, role: str):
    """Register a user and return ``(user_id, token)``, or ``(None, None)`` on failure."""
    with client.post(
        "/api/auth/register",
        json=register_data(role),
        catch_response=True,
        name=f"POST /api/auth/register [{role}]",
    ) as resp:
        if resp.status_code == 201:
            body = resp.json()
            return body["user"]["id"], body["token"]
        resp.failure(f"Register {role} failed: {resp.status_code} — {extract_error_detail(resp)}")
        return None, None


class CheckoutJourney(SequentialTaskSet):
    """Register -> Add 2-4 products -> Place order -> List own orders."""

    def on_start(self):
        self.state = ShopperState()
        self.state.user_id, self.state.token = _register(self.client, "consumer")
        if not self.state.token:
            self.interrupt()
        # The session cookie is ignored; every call authenticates with the header
        self.client.cookies.clear()

    def _farmers(self):
        if FARMER_IDS:
            return FARMER_IDS
        farmer_id, _ = _register(self.client, "farmer")
        self.client.cookies.clear()
        if farmer_id:
            FARMER_IDS.append(farmer_id)
        return FARMER_IDS

    @task
    def fill_cart(self):
        farmers = self._farmers()
        if not farmers:
            self.interrupt()
        for _ in range(random.randint(2, 4)):
            with self.client.post(
                "/api/cart/add",
                json=cart_product_data(random.choice(farmers)),
                headers=self.state.headers,
                catch_response=True,
                name="POST /api/cart/add",
            ) as resp:
                if resp.status_code == 200:
                    self.state.cart_size = len(resp.json()["cartItems"])
                else:
                    resp.failure(f"Add to cart failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def place_order(self):
        with self.client.post(
            "/api/order/place-order",
            json=place_order_data(),
            headers=self.state.headers,
            catch_response=True,
            name="POST /api/order/place-order",
        ) as resp:
            if resp.status_code != 201:
                resp.failure(f"Place order failed: {resp.status_code} — {extract_error_detail(resp)}")
                return

            order_ids = [order["orderId"] for order in resp.json()["orders"]]
            with _seen_lock:
                duplicates = _seen_order_ids.intersection(order_ids)
                _seen_order_ids.update(order_ids)
            if duplicates or len(set(order_ids)) != len(order_ids):
                resp.failure(f"Duplicate order numbers issued: {sorted(duplicates) or order_ids}")
                return
            self.state.order_ids.extend(order_ids)
            self.state.cart_size = 0

    @task
    def list_orders(self):
        with self.client.get(
            "/api/order/user-orders",
            headers=self.state.headers,
            catch_response=True,
            name="GET /api/order/user-orders",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"List orders failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class FulfilmentJourney(SequentialTaskSet):
    """Poll incoming orders and advance one of them a step."""

    def on_start(self):
        self.state = FarmerState()
        self.state.user_id, self.state.token = _register(self.client, "farmer")
        self.client.cookies.clear()
        if not self.state.token:
            self.interrupt()
        FARMER_IDS.append(self.state.user_id)

    @task
    def advance_an_order(self):
        with self.client.get(
            "/api/order/farmer-orders",
            headers=self.state.headers,
            catch_response=True,
            name="GET /api/order/farmer-orders",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Farmer orders failed: {resp.status_code} — {extract_error_detail(resp)}")
                return
            open_orders = [order for order in resp.json()["orders"] if order["status"] in NEXT_STATUS]

        if not open_orders:
            return

        order = random.choice(open_orders)
        with self.client.patch(
            f"/api/order/{order['orderId']}/status",
            json={"status": NEXT_STATUS[order["status"]]},
            headers=self.state.headers,
            catch_response=True,
            name="PATCH /api/order/{orderId}/status",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Status update failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def dashboard(self):
        with self.client.get(
            "/api/analytics/farmer",
            headers=self.state.headers,
            catch_response=True,
            name="GET /api/analytics/farmer",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Dashboard failed: {resp.status_code} — {extract_error_detail(resp)}")


class ShopperUser(HttpUser):
    tasks = [CheckoutJourney]
    wait_time = between(1, 3)
    weight = 4


class FarmerUser(HttpUser):
    tasks = [FulfilmentJourney]
    wait_time = between(2, 5)
    weight = 1


class CheckoutRushUser(HttpUser):
    """Back-to-back checkouts with no think time."""

    tasks = [CheckoutJourney]
    wait_time = constant(0)
