"""Per-day order number counter.

Human-readable order numbers look like ``ORD-20251120-007``: the UTC date and
a 1-based sequence that restarts every day. The counter is an aggregate keyed
by the day so incrementing it is a single-aggregate write in the same unit of
work as the orders it numbers.
"""

from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError
from protean.fields import Integer, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace

ORDER_ID_PREFIX = "ORD"


def day_key(moment=None):
    return (moment or datetime.now(UTC)).strftime("%Y%m%d")


def format_order_id(day, value):
    return f"{ORDER_ID_PREFIX}-{day}-{value:03d}"


@marketplace.aggregate
class OrderSequence:
    day = String(identifier=True, required=True, max_length=8)  # YYYYMMDD
    last_value = Integer(default=0, min_value=0)

    def next_order_id(self):
        self.last_value = (self.last_value or 0) + 1
        return format_order_id(self.day, self.last_value)


def sequence_for(day):
    """Load the counter for ``day``, or a fresh one starting at zero."""
    repo = current_domain.repository_for(OrderSequence)
    try:
        return repo.get(day)
    except ObjectNotFoundError:
        return OrderSequence(day=day, last_value=0)
