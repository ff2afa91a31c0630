"""
Price calculation for resolved discounts.

All money is handled as Decimal and rounded half-up to cents. A
percentage is a plain number: 15 means 15%, not 0.15.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional

from django.utils import timezone

from .exceptions import DiscountLookupFailed
from .resolver import DiscountResolver
from .status import is_discount_active

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')
ZERO = Decimal('0.00')
HUNDRED = Decimal('100')


def to_decimal(value):
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_currency(amount):
    return to_decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_discounted_price(base_price, percentage):
    """
    Calculate the discounted price based on base price and percentage.
    Never returns a negative price.
    """
    base_price = to_decimal(base_price)
    discount = base_price * to_decimal(percentage) / HUNDRED
    return max(round_currency(base_price - discount), ZERO)


def calculate_savings(base_price, percentage):
    """Calculate the amount removed from the base price."""
    return round_currency(to_decimal(base_price) * to_decimal(percentage) / HUNDRED)


@dataclass(frozen=True)
class ResolvedPrice:
    final_price: Decimal
    original_price: Decimal
    applied_discount: Optional[Any]
    savings: Decimal

    @property
    def discount_percentage(self):
        if self.applied_discount is None:
            return None
        return self.applied_discount.percentage

    @property
    def has_discount(self):
        return self.applied_discount is not None

    def as_dict(self):
        discount = self.applied_discount
        return {
            'price': str(round_currency(self.final_price)),
            'original_price': str(round_currency(self.original_price)),
            'savings': str(round_currency(self.savings)),
            'discount': None if discount is None else {
                'id': discount.pk,
                'name': discount.name,
                'percentage': str(discount.percentage),
                'end_date': discount.end_date.isoformat(),
            },
        }


def apply_discount(base_price, discount, now=None):
    """
    Apply a discount to a price if the discount is usable at ``now``.

    The percentage is applied to the exact base price; only the final
    price and the savings are rounded.

    Returns:
        ResolvedPrice: the undiscounted price when there is no usable discount.
    """
    base_price = to_decimal(base_price)
    now = now or timezone.now()

    if discount is None or not is_discount_active(discount, now):
        return ResolvedPrice(
            final_price=round_currency(base_price),
            original_price=base_price,
            applied_discount=None,
            savings=ZERO,
        )

    return ResolvedPrice(
        final_price=calculate_discounted_price(base_price, discount.percentage),
        original_price=base_price,
        applied_discount=discount,
        savings=calculate_savings(base_price, discount.percentage),
    )


def price_for_checkout(base_price, context, resolver=None, now=None):
    """
    Resolve and apply the discount for a purchase.

    Lookup failures propagate: a checkout must not go through at a price
    that was never actually resolved.
    """
    now = now or timezone.now()
    resolver = resolver or DiscountResolver()
    discount = resolver.resolve(context, now=now)
    return apply_discount(base_price, discount, now=now)


def price_for_display(base_price, context, resolver=None, now=None):
    """
    Resolve and apply the discount for a catalog page.

    A failed lookup shows the full price instead of breaking the page.
    """
    try:
        return price_for_checkout(base_price, context, resolver=resolver, now=now)
    except DiscountLookupFailed as e:
        logger.warning(f"Discount lookup failed for {context}, showing full price: {e}")
        return apply_discount(base_price, None, now=now)


def freeze_price(base_price, context, resolver=None, now=None):
    """
    Snapshot of the price a line item is sold at.

    Stored on the order line so later discount changes never alter a
    historical order's price.
    """
    resolved = price_for_checkout(base_price, context, resolver=resolver, now=now)
    discount = resolved.applied_discount
    return {
        'price': resolved.final_price,
        'original_price': resolved.original_price,
        'discount_percentage': resolved.discount_percentage,
        'discount_id': discount.pk if discount is not None else None,
    }
