from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal

from django.db import DatabaseError
from django.utils import timezone

from discounts.exceptions import DiscountLookupFailed
from discounts.models import Discount
from discounts.query import DiscountQuery
from discounts.repository import DiscountRepository
from products.models import Company, Product, ProductVariant

NOW = datetime(2025, 1, 15, 12, 0, tzinfo=dt_timezone.utc)


def build_discount(pk, percentage, company_id=None, product_id=None, variant_id=None,
                   start=None, end=None, is_active=True, created_at=None):
    """Unsaved Discount for tests that never touch the database."""
    return Discount(
        pk=pk,
        name=f"Discount {pk}",
        percentage=Decimal(str(percentage)),
        company_id=company_id,
        product_id=product_id,
        variant_id=variant_id,
        start_date=start or NOW - timedelta(days=10),
        end_date=end or NOW + timedelta(days=10),
        is_active=is_active,
        created_at=created_at,
    )


class InMemoryDiscountRepository(DiscountRepository):
    """
    Repository over a plain list.

    With ``filtered=False`` it hands back every discount it holds, which
    lets tests check the resolver copes with a repository that returns
    broader matches than asked for.
    """

    def __init__(self, discounts, variants=None, filtered=True):
        self.discounts = list(discounts)
        self.variants = variants or {}
        self.filtered = filtered
        self.calls = 0

    def find_candidates(self, context, now):
        self.calls += 1
        if not self.filtered:
            return list(self.discounts)
        query = DiscountQuery.for_context(context, now)
        return [discount for discount in self.discounts if query.matches(discount)]

    def variant_owner(self, variant_id):
        return self.variants.get(variant_id)


class FailingDiscountRepository(DiscountRepository):
    """Repository whose store is down."""

    def __init__(self, variants=None):
        self.variants = variants or {}

    def find_candidates(self, context, now):
        try:
            raise DatabaseError("connection refused")
        except DatabaseError as e:
            raise DiscountLookupFailed("Discount lookup failed") from e

    def variant_owner(self, variant_id):
        return self.variants.get(variant_id)


def create_catalog():
    """A company with one product and two variants."""
    company = Company.objects.create(name="Hilton Pharma")
    product = Product.objects.create(
        company=company,
        name="Oxytetracycline 20%",
        sku="OXY-20",
        category="Antibiotic",
    )
    small = ProductVariant.objects.create(
        product=product,
        sku="OXY-20-50",
        packing_volume="50ml",
        customer_price=Decimal("450.00"),
        company_price=Decimal("380.00"),
        stock=25,
    )
    large = ProductVariant.objects.create(
        product=product,
        sku="OXY-20-100",
        packing_volume="100ml",
        customer_price=Decimal("1000.00"),
        stock=10,
    )
    return company, product, small, large


def create_discount(percentage, days_before=1, days_after=1, **kwargs):
    """Saved discount whose window is centred on the current time."""
    now = timezone.now()
    kwargs.setdefault('name', f"{percentage}% off")
    return Discount.objects.create(
        percentage=Decimal(str(percentage)),
        start_date=now - timedelta(days=days_before),
        end_date=now + timedelta(days=days_after),
        **kwargs,
    )
