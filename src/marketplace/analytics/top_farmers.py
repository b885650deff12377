"""Best-selling farmers across the marketplace."""

from collections import defaultdict

from protean.utils.globals import current_domain

from marketplace.identity.user import User
from marketplace.order.order import Order

DEFAULT_LIMIT = 5


def top_farmers(limit=DEFAULT_LIMIT):
    """Rank farmers by revenue from delivered, paid orders.

    Returns up to ``limit`` dicts with the farmer's public profile plus
    ``total_sales`` and ``order_count``, highest sales first. Farmers whose
    account no longer exists are left out.
    """
    totals = defaultdict(lambda: {"total_sales": 0.0, "order_count": 0})
    for order in current_domain.repository_for(Order).delivered_and_paid():
        entry = totals[str(order.farmer_id)]
        entry["total_sales"] += order.total_amount
        entry["order_count"] += 1

    ranked = sorted(totals.items(), key=lambda item: item[1]["total_sales"], reverse=True)[:limit]
    farmers = current_domain.repository_for(User).find_many(farmer_id for farmer_id, _ in ranked)

    results = []
    for farmer_id, entry in ranked:
        farmer = farmers.get(farmer_id)
        if farmer is None:
            continue
        results.append(
            {
                "farmer_id": farmer_id,
                "full_name": farmer.full_name,
                "profile_picture": farmer.profile_picture,
                "location": farmer.location.to_dict() if farmer.location else None,
                "total_sales": entry["total_sales"],
                "order_count": entry["order_count"],
            }
        )
    return results
