"""Faker-based data generators for Locust load test scenarios.

Payloads use the camelCase field names the API's request schemas expect.
"""

import random
import uuid

from faker import Faker

fake = Faker("en_IN")

PRODUCE = [
    ("Tomatoes", "kg", 40.0),
    ("Okra", "kg", 60.0),
    ("Onions", "kg", 35.0),
    ("Spinach", "bunch", 20.0),
    ("Cow Milk", "l", 56.0),
    ("Paneer", "250g", 90.0),
]


def valid_email() -> str:
    local = fake.user_name()[:20]
    return f"{local}.{uuid.uuid4().hex[:6]}@{fake.free_email_domain()}"


def valid_phone() -> str:
    return f"9{random.randint(100_000_000, 999_999_999)}"


def register_data(role: str = "consumer") -> dict:
    """RegisterRequest payload; farmers get a location."""
    payload = {
        "email": valid_email(),
        "password": "loadtest-pass",
        "fullName": fake.name()[:150],
        "role": role,
        "phoneNumber": valid_phone(),
    }
    if role == "farmer":
        payload["location"] = {
            "address": fake.street_address()[:255],
            "city": fake.city()[:100],
            "state": fake.state()[:100],
            "country": "India",
            "zipCode": fake.postcode()[:20],
        }
    return payload


def cart_product_data(farmer_id: str) -> dict:
    """AddToCartRequest payload for a random product sold by ``farmer_id``."""
    name, unit, price = random.choice(PRODUCE)
    return {
        "product": {
            "productId": f"prod-{name.lower().replace(' ', '-')}-{farmer_id[:8]}",
            "farmerId": farmer_id,
            "name": name,
            "price": price,
            "unit": unit,
            "quantity": random.randint(1, 4),
        }
    }


def shipping_address_data() -> dict:
    return {
        "fullName": fake.name()[:150],
        "phone": valid_phone(),
        "address": fake.street_address()[:255],
        "area": fake.street_name()[:150],
        "city": fake.city()[:100],
        "pin_code": fake.postcode()[:20],
    }


def place_order_data() -> dict:
    return {
        "shippingAddress": shipping_address_data(),
        "paymentMethod": random.choice(["cod", "online"]),
        "deliveryCharge": random.choice([0.0, 20.0, 40.0]),
    }
