"""Shared BDD fixtures and step definitions for checkout and fulfilment."""

import pytest
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, when

from marketplace.order.placement import place_order


@pytest.fixture()
def context():
    """Scenario state shared between steps."""
    return {"users": {}, "orders": [], "error": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a consumer "{email}"'))
def a_consumer(context, make_user, email):
    context["users"][email] = make_user(email)
    context["consumer"] = email


@given(parsers.cfparse('farmers "{first}" and "{second}"'))
def two_farmers(context, make_user, first, second):
    for email in (first, second):
        context["users"][email] = make_user(email, role="farmer")


@given(parsers.cfparse('the cart holds {qty:d} x "{product_id}" at {price:d} from "{farmer_email}"'))
def cart_holds(context, add_line, qty, product_id, price, farmer_email):
    consumer = context["users"][context["consumer"]]
    add_line(consumer.id, product_id, context["users"][farmer_email].id, price=float(price), quantity=qty)


@given("the consumer places the order")
@when("the consumer places the order")
def consumer_places_order(context, shipping_address):
    consumer = context["users"][context["consumer"]]
    try:
        context["orders"] = place_order(consumer.id, shipping_address)
    except ValidationError as exc:
        context["error"] = exc
