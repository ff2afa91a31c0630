"""
Discount resolution.

Picks the single discount that applies to a product/variant/company
lookup. The most specific scope wins regardless of percentage:
variant beats product, product beats company.
"""
import logging

from django.db import DatabaseError
from django.utils import timezone

from .exceptions import DiscountLookupFailed, InvalidPricingContext
from .pricing_context import PricingContext
from .query import DiscountQuery
from .repository import DjangoDiscountRepository
from .status import is_window_valid

logger = logging.getLogger(__name__)


def _precedence_key(discount):
    # Highest percentage, then newest, then lowest id
    created_at = discount.created_at.timestamp() if discount.created_at else 0
    return (-discount.percentage, -created_at, discount.pk or 0)


def _best(discounts):
    if not discounts:
        return None
    return min(discounts, key=_precedence_key)


class DiscountResolver:
    """
    Stateless resolver. Safe to share between threads and requests.
    """

    def __init__(self, repository=None):
        self.repository = repository or DjangoDiscountRepository()

    def resolve(self, context, now=None):
        """
        Return the applicable discount for ``context`` at ``now``, or None.

        Raises:
            InvalidPricingContext: the context is malformed or inconsistent.
            DiscountLookupFailed: the repository could not be queried.
        """
        now = now or timezone.now()
        context.validate()

        try:
            self._check_variant_ownership(context)
            candidates = self.repository.find_candidates(context, now)
        except DatabaseError as e:
            raise DiscountLookupFailed(f"Discount lookup failed for {context}") from e
        query = DiscountQuery.for_context(context, now)
        candidates = [d for d in candidates if self._is_usable(d, now)]
        if not candidates:
            return None

        for tier in (query.matches_variant, query.matches_product, query.matches_company):
            match = _best([d for d in candidates if tier(d)])
            if match is not None:
                return match

        # Repository returned broader matches than the three tiers
        return _best(candidates)

    def _check_variant_ownership(self, context):
        if context.variant_id is None or context.owner_known:
            return

        owner = self.repository.variant_owner(context.variant_id)
        if owner is None:
            raise InvalidPricingContext(f"Unknown variant {context.variant_id}")

        product_id, company_id = owner
        if product_id != context.product_id:
            raise InvalidPricingContext(
                f"Variant {context.variant_id} belongs to product {product_id}, "
                f"not {context.product_id}"
            )
        if context.company_id is not None and company_id is not None and company_id != context.company_id:
            raise InvalidPricingContext(
                f"Variant {context.variant_id} belongs to company {company_id}, "
                f"not {context.company_id}"
            )

    def _is_usable(self, discount, now):
        if not is_window_valid(discount):
            logger.warning(
                f"Discount {discount.pk} has a malformed window "
                f"({discount.start_date} - {discount.end_date}); ignoring it"
            )
            return False
        if getattr(discount, 'deleted_at', None) is not None:
            return False
        return discount.is_active and discount.start_date <= now <= discount.end_date


def get_active_discount(product_id, variant_id=None, company_id=None, now=None):
    """
    Get the applicable discount for a product or variant.
    Prioritizes: variant-level > product-level > company-level discounts.
    """
    context = PricingContext(product_id=product_id, variant_id=variant_id, company_id=company_id)
    return DiscountResolver().resolve(context, now=now)
