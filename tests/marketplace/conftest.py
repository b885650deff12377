import json

import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def marketplace_bed():
    from marketplace.domain import marketplace

    bed = DomainFixture(marketplace)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(marketplace_bed):
    with marketplace_bed.domain_context():
        yield

        from protean import current_domain

        # Clear all databases
        for _, provider in current_domain.providers.items():
            provider._data_reset()

        # Drain event stores
        current_domain.event_store.store._data_reset()


# ---------------------------------------------------------------------------
# Builders shared by the application, integration and BDD layers
# ---------------------------------------------------------------------------
FARM_LOCATION = {"address": "Plot 7", "city": "Nashik", "state": "Maharashtra", "country": "India"}


@pytest.fixture()
def shipping_address():
    return {
        "full_name": "Asha Patel",
        "phone": "9876543210",
        "address": "12 Market Road",
        "area": "Old Town",
        "city": "Pune",
        "pin_code": "411001",
    }


def _register_user(email, role="consumer", full_name=None, location=None):
    """Register a user through the command handler and return the loaded aggregate."""
    from protean import current_domain

    from marketplace.identity.passwords import hash_password
    from marketplace.identity.registration import RegisterUser
    from marketplace.identity.user import User

    if role == "farmer" and location is None:
        location = FARM_LOCATION

    user_id = current_domain.process(
        RegisterUser(
            email=email,
            password_hash=hash_password("s3cret-pass"),
            full_name=full_name or email.split("@")[0].title(),
            role=role,
            location=json.dumps(location) if location else None,
        ),
        asynchronous=False,
    )
    return current_domain.repository_for(User).get(user_id)


def _add_line(user_id, product_id, farmer_id, price, quantity=1, name=None):
    from protean import current_domain

    from marketplace.cart.items import AddToCart

    current_domain.process(
        AddToCart(
            user_id=str(user_id),
            product_id=product_id,
            farmer_id=str(farmer_id),
            name=name or product_id.title(),
            price=price,
            unit="kg",
            quantity=quantity,
        ),
        asynchronous=False,
    )


@pytest.fixture()
def consumer():
    return _register_user("asha@example.com", role="consumer", full_name="Asha Patel")


@pytest.fixture()
def farmer():
    return _register_user("ravi@example.com", role="farmer", full_name="Ravi Kumar")


@pytest.fixture()
def other_farmer():
    return _register_user("meera@example.com", role="farmer", full_name="Meera Shah")


@pytest.fixture()
def make_user():
    return _register_user


@pytest.fixture()
def add_line():
    return _add_line
