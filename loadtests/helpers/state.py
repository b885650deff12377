"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state.
"""

from dataclasses import dataclass, field


@dataclass
class ShopperState:
    """A consumer filling carts and checking out."""

    user_id: str | None = None
    token: str | None = None
    cart_size: int = 0
    order_ids: list[str] = field(default_factory=list)

    @property
    def headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}


@dataclass
class FarmerState:
    """A farmer working through incoming orders."""

    user_id: str | None = None
    token: str | None = None
    open_orders: list[str] = field(default_factory=list)

    @property
    def headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}
