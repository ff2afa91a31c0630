"""
Storage-agnostic description of a candidate discount lookup.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class DiscountQuery:
    """
    Named scope predicates for one pricing lookup.

    A discount is a candidate when it matches any requested scope, is
    enabled and its window contains ``now``.
    """
    now: datetime
    by_variant: Optional[int] = None
    by_product: Optional[int] = None
    by_company: Optional[int] = None

    @classmethod
    def for_context(cls, context, now):
        return cls(
            now=now,
            by_variant=context.variant_id,
            by_product=context.product_id,
            by_company=context.company_id,
        )

    def matches_variant(self, discount):
        return self.by_variant is not None and discount.variant_id == self.by_variant

    def matches_product(self, discount):
        return (
            self.by_product is not None
            and discount.product_id == self.by_product
            and discount.company_id is None
            and discount.variant_id is None
        )

    def matches_company(self, discount):
        return (
            self.by_company is not None
            and discount.company_id == self.by_company
            and discount.product_id is None
            and discount.variant_id is None
        )

    def matches_scope(self, discount):
        return (
            self.matches_variant(discount)
            or self.matches_product(discount)
            or self.matches_company(discount)
        )

    def matches(self, discount):
        """In-memory evaluation of the whole query."""
        return (
            self.matches_scope(discount)
            and discount.is_active
            and getattr(discount, 'deleted_at', None) is None
            and discount.start_date <= self.now <= discount.end_date
        )
