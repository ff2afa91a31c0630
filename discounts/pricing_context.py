"""
The lookup key a discount is resolved for.
"""
from dataclasses import dataclass, field
from typing import Optional

from .exceptions import InvalidPricingContext


def _is_positive_id(value):
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


@dataclass(frozen=True)
class PricingContext:
    product_id: int
    variant_id: Optional[int] = None
    company_id: Optional[int] = None
    # Set when the ids were read off a loaded variant, so they already agree
    owner_known: bool = field(default=False, compare=False, repr=False)

    @classmethod
    def for_variant(cls, variant):
        """Build a context from a ProductVariant instance."""
        return cls(
            product_id=variant.product_id,
            variant_id=variant.pk,
            company_id=variant.product.company_id,
            owner_known=True,
        )

    def validate(self):
        if not _is_positive_id(self.product_id):
            raise InvalidPricingContext(f"Invalid product id: {self.product_id!r}")
        if self.variant_id is not None and not _is_positive_id(self.variant_id):
            raise InvalidPricingContext(f"Invalid variant id: {self.variant_id!r}")
        if self.company_id is not None and not _is_positive_id(self.company_id):
            raise InvalidPricingContext(f"Invalid company id: {self.company_id!r}")
        return self
