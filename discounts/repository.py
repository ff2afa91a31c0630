"""
Read access to persisted discounts.

The resolver only depends on ``DiscountRepository``; the ORM-backed
implementation below is the one the application wires in.
"""
from abc import ABC, abstractmethod

from django.db import DatabaseError
from django.db.models import Q
from django.utils import timezone

from products.models import ProductVariant
from .exceptions import DiscountLookupFailed
from .models import Discount
from .query import DiscountQuery


class DiscountRepository(ABC):
    """Read-only lookup interface consumed by the resolver."""

    @abstractmethod
    def find_candidates(self, context, now):
        """
        Return every enabled, in-window discount whose scope matches
        ``context`` (variant, product-wide or company-wide).
        """
        ...

    @abstractmethod
    def variant_owner(self, variant_id):
        """Return ``(product_id, company_id)`` for a variant, or None if unknown."""
        ...


class DjangoDiscountRepository(DiscountRepository):

    def _scope_q(self, query):
        conditions = Q(pk__in=[])
        if query.by_variant is not None:
            conditions |= Q(variant_id=query.by_variant)
        if query.by_product is not None:
            conditions |= Q(
                product_id=query.by_product,
                company__isnull=True,
                variant__isnull=True,
            )
        if query.by_company is not None:
            conditions |= Q(
                company_id=query.by_company,
                product__isnull=True,
                variant__isnull=True,
            )
        return conditions

    def find_candidates(self, context, now):
        query = DiscountQuery.for_context(context, now)
        queryset = (
            Discount.objects.alive()
            .active_at(query.now)
            .filter(self._scope_q(query))
            .order_by('-percentage', '-created_at', 'id')
        )
        try:
            return list(queryset)
        except DatabaseError as e:
            raise DiscountLookupFailed(f"Discount lookup failed for {context}") from e

    def variant_owner(self, variant_id):
        try:
            row = (
                ProductVariant.objects.filter(pk=variant_id)
                .values_list('product_id', 'product__company_id')
                .first()
            )
        except DatabaseError as e:
            raise DiscountLookupFailed(f"Variant lookup failed for variant {variant_id}") from e
        return tuple(row) if row else None

    def active_for_product(self, product_id, company_id=None, now=None):
        """
        Every discount in effect at ``now`` touching a product: its own,
        its variants' and (when given) its company's company-wide discounts.
        """
        now = now or timezone.now()
        conditions = Q(product_id=product_id) | Q(variant__product_id=product_id)
        if company_id:
            conditions |= Q(company_id=company_id, product__isnull=True, variant__isnull=True)

        queryset = Discount.objects.alive().active_at(now).filter(conditions)
        try:
            return list(queryset.select_related('variant').order_by('-percentage', '-created_at', 'id'))
        except DatabaseError as e:
            raise DiscountLookupFailed(f"Discount lookup failed for product {product_id}") from e
