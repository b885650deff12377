"""Sales dashboard figures for a single farmer.

Revenue figures only count delivered orders. Windows are calendar based and
computed in UTC:

    today        since 00:00 today
    this month   since the 1st of the current month
    last month   the whole previous calendar month
    recent       since the 1st of the month two months back (three months)
    daily        the last 30 days including today, one row per day with sales
    trend        the last six calendar months with sales
"""

from collections import Counter, defaultdict
from datetime import UTC, datetime, timedelta

from protean.utils.globals import current_domain

from marketplace.order.order import Order, OrderStatus, PaymentMethod

TOP_PRODUCT_LIMIT = 10
TREND_MONTHS = 6

PAYMENT_METHOD_LABELS = {
    PaymentMethod.COD.value: "Cash on Delivery",
    PaymentMethod.ONLINE.value: "Online Payment",
}


def _as_utc(moment):
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def _month_start(moment, months_back=0):
    year, month = moment.year, moment.month - months_back
    while month < 1:
        month += 12
        year -= 1
    return moment.replace(year=year, month=month, day=1, hour=0, minute=0, second=0, microsecond=0)


def _totals(orders):
    revenue = sum(order.total_amount for order in orders)
    count = len(orders)
    return revenue, count, round(revenue / count, 2) if count else 0.0


def _top_products(orders):
    products = {}
    for order in orders:
        for item in order.items:
            entry = products.setdefault(
                str(item.product_id),
                {
                    "product_id": str(item.product_id),
                    "name": item.name,
                    "image": item.image,
                    "unit": item.unit,
                    "total_qty": 0,
                    "total_sales": 0.0,
                },
            )
            entry["total_qty"] += item.quantity
            entry["total_sales"] += item.price * item.quantity
    ranked = sorted(products.values(), key=lambda entry: entry["total_qty"], reverse=True)
    return ranked[:TOP_PRODUCT_LIMIT]


def _daily_sales(orders, since):
    days = defaultdict(list)
    for order in orders:
        if _as_utc(order.created_at) >= since:
            days[_as_utc(order.created_at).strftime("%Y-%m-%d")].append(order)
    rows = []
    for day in sorted(days):
        revenue, count, average = _totals(days[day])
        rows.append({"date": day, "revenue": revenue, "orders": count, "avg_order_value": average})
    return rows


def _monthly_trend(orders):
    months = defaultdict(list)
    for order in orders:
        created = _as_utc(order.created_at)
        months[(created.year, created.month)].append(order)
    rows = []
    for year, month in sorted(months)[-TREND_MONTHS:]:
        revenue, count, _ = _totals(months[(year, month)])
        label = datetime(year, month, 1, tzinfo=UTC).strftime("%b %Y")
        rows.append({"month": label, "revenue": revenue, "orders": count})
    return rows


def _payment_breakdown(orders):
    counts = Counter(order.payment_method for order in orders)
    revenue = defaultdict(float)
    for order in orders:
        revenue[order.payment_method] += order.total_amount
    total = sum(counts.values())
    return [
        {
            "method": PAYMENT_METHOD_LABELS.get(method, method or "unknown"),
            "count": count,
            "revenue": revenue[method],
            "percentage": round(count / total * 100, 1) if total else 0.0,
        }
        for method, count in counts.items()
    ]


def farmer_sales_summary(farmer_id, now=None):
    """Dashboard figures for ``farmer_id`` as of ``now`` (defaults to the current time)."""
    now = _as_utc(now or datetime.now(UTC))
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    month_start = _month_start(now)
    last_month_start = _month_start(now, 1)
    recent_start = _month_start(now, 2)

    orders = current_domain.repository_for(Order).for_farmer(farmer_id)
    delivered = [order for order in orders if order.status == OrderStatus.DELIVERED.value]

    def created_between(start, end=None):
        return [
            order
            for order in delivered
            if _as_utc(order.created_at) >= start and (end is None or _as_utc(order.created_at) < end)
        ]

    today_revenue, today_orders, today_aov = _totals(created_between(today))
    month_revenue, month_orders, month_aov = _totals(created_between(month_start))
    last_month_revenue, last_month_orders, _ = _totals(created_between(last_month_start, month_start))
    recent = created_between(recent_start)
    total_revenue, total_orders, _ = _totals(delivered)

    growth = (
        round((month_revenue - last_month_revenue) / last_month_revenue * 100, 1) if last_month_revenue else 0.0
    )

    return {
        "summary": {
            "today_revenue": today_revenue,
            "today_orders": today_orders,
            "today_aov": today_aov,
            "monthly_revenue": month_revenue,
            "monthly_orders": month_orders,
            "monthly_aov": month_aov,
            "last_month_revenue": last_month_revenue,
            "last_month_orders": last_month_orders,
            "monthly_growth": growth,
            "last_90_days_revenue": sum(order.total_amount for order in recent),
            "total_revenue": total_revenue,
            "total_orders": total_orders,
            "unique_customers": len({str(order.consumer_id) for order in delivered}),
        },
        "charts": {
            "daily_sales_30_days": _daily_sales(delivered, today - timedelta(days=29)),
            "monthly_revenue_trend": _monthly_trend(delivered),
        },
        "top_products": _top_products(recent),
        "payment_breakdown": _payment_breakdown(delivered),
        "active_order_status": dict(
            Counter(order.status for order in orders if order.status != OrderStatus.DELIVERED.value)
        ),
        "generated_at": now.isoformat(),
    }
