"""Custom queries over the Order aggregate."""

from marketplace.domain import marketplace
from marketplace.order.order import Order, OrderStatus, PaymentStatus

# Upper bound on rows a single listing query reads back
QUERY_LIMIT = 10_000


def _newest_first(orders):
    return sorted(orders, key=lambda order: order.created_at, reverse=True)


@marketplace.repository(part_of=Order)
class OrderRepository:
    def find_by_order_id(self, order_id: str) -> Order | None:
        return self._dao.query.filter(order_id=order_id).all().first

    def find_for_farmer(self, order_id: str, farmer_id: str) -> Order | None:
        """The order with this human-readable id, only if ``farmer_id`` owns it."""
        return self._dao.query.filter(order_id=order_id, farmer_id=str(farmer_id)).all().first

    def for_consumer(self, consumer_id: str) -> list[Order]:
        orders = self._dao.query.filter(consumer_id=str(consumer_id)).limit(QUERY_LIMIT).all().items
        return _newest_first(orders)

    def for_farmer(self, farmer_id: str) -> list[Order]:
        orders = self._dao.query.filter(farmer_id=str(farmer_id)).limit(QUERY_LIMIT).all().items
        return _newest_first(orders)

    def delivered_and_paid(self) -> list[Order]:
        return (
            self._dao.query.filter(
                status=OrderStatus.DELIVERED.value,
                payment_status=PaymentStatus.PAID.value,
            )
            .limit(QUERY_LIMIT)
            .all()
            .items
        )
