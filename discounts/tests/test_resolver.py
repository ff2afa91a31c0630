from datetime import timedelta
from decimal import Decimal
from unittest import mock

from django.db import DatabaseError
from django.test import SimpleTestCase, TestCase

from discounts.exceptions import DiscountLookupFailed, InvalidPricingContext
from discounts.pricing_context import PricingContext
from discounts.resolver import DiscountResolver, get_active_discount
from .helpers import (
    NOW,
    FailingDiscountRepository,
    InMemoryDiscountRepository,
    build_discount,
    create_catalog,
    create_discount,
)

# variant 42 belongs to product 5 of company 7
VARIANTS = {42: (5, 7), 43: (5, 7), 99: (6, 7)}
CONTEXT = PricingContext(product_id=5, variant_id=42, company_id=7)


class DiscountResolverTest(SimpleTestCase):
    """Precedence and filtering rules of the resolver, against an in-memory store."""

    def resolve(self, discounts, context=CONTEXT, filtered=True, now=NOW):
        repository = InMemoryDiscountRepository(discounts, VARIANTS, filtered=filtered)
        return DiscountResolver(repository).resolve(context, now=now)

    def test_variant_discount_beats_broader_scopes(self):
        """Test the variant discount wins even when broader ones are bigger."""
        variant = build_discount(1, 10, variant_id=42)
        product = build_discount(2, 30, product_id=5)
        company = build_discount(3, 50, company_id=7)

        result = self.resolve([company, product, variant])

        self.assertIs(result, variant)

    def test_product_discount_beats_company_discount(self):
        product = build_discount(2, 5, product_id=5)
        company = build_discount(3, 50, company_id=7)

        self.assertIs(self.resolve([company, product]), product)

    def test_company_discount_used_when_nothing_more_specific(self):
        company = build_discount(3, 50, company_id=7)
        other_variant = build_discount(4, 80, variant_id=43)

        self.assertIs(self.resolve([company, other_variant]), company)

    def test_company_discount_ignored_without_company_in_context(self):
        company = build_discount(3, 50, company_id=7)
        context = PricingContext(product_id=5, variant_id=42)

        self.assertIsNone(self.resolve([company], context=context))

    def test_product_only_context(self):
        """Test a context without a variant never picks a variant discount."""
        variant = build_discount(1, 60, variant_id=42)
        product = build_discount(2, 20, product_id=5)
        context = PricingContext(product_id=5, company_id=7)

        self.assertIs(self.resolve([variant, product], context=context), product)

    def test_returns_single_discount_not_list(self):
        discounts = [
            build_discount(1, 10, variant_id=42),
            build_discount(2, 15, variant_id=42),
            build_discount(3, 30, product_id=5),
        ]

        result = self.resolve(discounts)

        self.assertNotIsInstance(result, (list, tuple))
        self.assertIn(result, discounts)

    def test_highest_percentage_wins_within_scope(self):
        low = build_discount(1, 10, variant_id=42)
        high = build_discount(2, 25, variant_id=42)

        self.assertIs(self.resolve([low, high]), high)

    def test_tie_broken_by_most_recent_creation(self):
        older = build_discount(1, 10, product_id=5, created_at=NOW - timedelta(days=5))
        newer = build_discount(2, 10, product_id=5, created_at=NOW - timedelta(days=1))

        self.assertIs(self.resolve([older, newer]), newer)

    def test_tie_broken_by_lowest_id_without_creation_time(self):
        first = build_discount(8, 10, product_id=5)
        second = build_discount(3, 10, product_id=5)

        self.assertIs(self.resolve([first, second]), second)
        self.assertIs(self.resolve([second, first]), second)

    def test_fallback_to_highest_percentage_for_broader_matches(self):
        """Test candidates outside the three tiers fall back to the biggest discount."""
        mixed = build_discount(1, 40, product_id=5, variant_id=43)
        company_product = build_discount(2, 20, company_id=7, product_id=5)

        result = self.resolve([company_product, mixed], filtered=False)

        self.assertIs(result, mixed)

    def test_no_candidates(self):
        self.assertIsNone(self.resolve([]))

    def test_future_discount_never_returned(self):
        scheduled = build_discount(1, 10, variant_id=42, start=NOW + timedelta(days=1),
                                   end=NOW + timedelta(days=5))

        self.assertIsNone(self.resolve([scheduled]))
        self.assertIsNone(self.resolve([scheduled], filtered=False))

    def test_expired_discount_never_returned(self):
        expired = build_discount(1, 10, variant_id=42, start=NOW - timedelta(days=5),
                                 end=NOW - timedelta(seconds=1))

        self.assertIsNone(self.resolve([expired]))
        self.assertIsNone(self.resolve([expired], filtered=False))

    def test_disabled_discount_never_returned(self):
        disabled = build_discount(1, 10, variant_id=42, is_active=False)

        self.assertIsNone(self.resolve([disabled]))
        self.assertIsNone(self.resolve([disabled], filtered=False))

    def test_disabled_variant_discount_falls_through_to_product(self):
        disabled = build_discount(1, 10, variant_id=42, is_active=False)
        product = build_discount(2, 30, product_id=5)

        self.assertIs(self.resolve([disabled, product], filtered=False), product)

    def test_window_bounds_are_inclusive(self):
        starts_now = build_discount(1, 10, variant_id=42, start=NOW, end=NOW + timedelta(days=1))
        ends_now = build_discount(2, 10, product_id=5, start=NOW - timedelta(days=1), end=NOW)

        self.assertIs(self.resolve([starts_now]), starts_now)
        self.assertIs(self.resolve([ends_now]), ends_now)

    def test_malformed_window_ignored_and_logged(self):
        malformed = build_discount(1, 10, variant_id=42, start=NOW, end=NOW)
        product = build_discount(2, 30, product_id=5)

        with self.assertLogs('discounts.resolver', level='WARNING') as logs:
            result = self.resolve([malformed, product], filtered=False)

        self.assertIs(result, product)
        self.assertIn("malformed window", logs.output[0])

    def test_lookup_failure_propagates(self):
        resolver = DiscountResolver(FailingDiscountRepository(VARIANTS))

        with self.assertRaises(DiscountLookupFailed):
            resolver.resolve(CONTEXT, now=NOW)

    def test_raw_database_error_reported_as_lookup_failure(self):
        repository = InMemoryDiscountRepository([], VARIANTS)

        with mock.patch.object(repository, 'find_candidates', side_effect=DatabaseError("timeout")):
            with self.assertRaises(DiscountLookupFailed) as ctx:
                DiscountResolver(repository).resolve(CONTEXT, now=NOW)

        self.assertIsInstance(ctx.exception.__cause__, DatabaseError)

    def test_database_error_in_ownership_check_reported_as_lookup_failure(self):
        repository = InMemoryDiscountRepository([], VARIANTS)

        with mock.patch.object(repository, 'variant_owner', side_effect=DatabaseError("timeout")):
            with self.assertRaises(DiscountLookupFailed) as ctx:
                DiscountResolver(repository).resolve(CONTEXT, now=NOW)

        self.assertIsInstance(ctx.exception.__cause__, DatabaseError)

    def test_context_from_loaded_variant_skips_ownership_lookup(self):
        variant = mock.Mock(pk=42, product_id=5, product=mock.Mock(company_id=7))
        discount = build_discount(1, 10, variant_id=42)
        repository = InMemoryDiscountRepository([discount], VARIANTS)

        with mock.patch.object(repository, 'variant_owner') as variant_owner:
            result = DiscountResolver(repository).resolve(PricingContext.for_variant(variant), now=NOW)

        self.assertIs(result, discount)
        variant_owner.assert_not_called()

    def test_repeated_calls_are_idempotent(self):
        repository = InMemoryDiscountRepository(
            [build_discount(1, 10, variant_id=42), build_discount(2, 30, product_id=5)],
            VARIANTS,
        )
        resolver = DiscountResolver(repository)

        first = resolver.resolve(CONTEXT, now=NOW)
        second = resolver.resolve(CONTEXT, now=NOW)

        self.assertIs(first, second)
        self.assertEqual(repository.calls, 2)


class PricingContextValidationTest(SimpleTestCase):
    """Caller mistakes are reported as InvalidPricingContext."""

    def setUp(self):
        self.resolver = DiscountResolver(InMemoryDiscountRepository([], VARIANTS))

    def test_missing_product(self):
        with self.assertRaises(InvalidPricingContext):
            self.resolver.resolve(PricingContext(product_id=None), now=NOW)

    def test_non_positive_product(self):
        for product_id in (0, -3):
            with self.subTest(product_id=product_id):
                with self.assertRaises(InvalidPricingContext):
                    self.resolver.resolve(PricingContext(product_id=product_id), now=NOW)

    def test_variant_of_another_product(self):
        with self.assertRaises(InvalidPricingContext):
            self.resolver.resolve(PricingContext(product_id=5, variant_id=99), now=NOW)

    def test_variant_of_another_company(self):
        with self.assertRaises(InvalidPricingContext):
            self.resolver.resolve(
                PricingContext(product_id=5, variant_id=42, company_id=8), now=NOW
            )

    def test_unknown_variant(self):
        with self.assertRaises(InvalidPricingContext):
            self.resolver.resolve(PricingContext(product_id=5, variant_id=1000), now=NOW)

    def test_consistent_context_is_accepted(self):
        self.assertIsNone(self.resolver.resolve(CONTEXT, now=NOW))


class DatabaseResolverTest(TestCase):
    """Resolver wired to the ORM repository."""

    def setUp(self):
        self.company, self.product, self.small, self.large = create_catalog()

    def test_variant_discount_wins_over_larger_company_sale(self):
        variant_discount = create_discount(10, variant=self.large)
        create_discount(30, product=self.product)
        create_discount(50, company=self.company)

        result = get_active_discount(self.product.pk, self.large.pk, self.company.pk)

        self.assertEqual(result, variant_discount)
        self.assertEqual(result.percentage, Decimal('10.00'))

    def test_other_variant_gets_product_discount(self):
        create_discount(10, variant=self.large)
        product_discount = create_discount(30, product=self.product)

        result = get_active_discount(self.product.pk, self.small.pk, self.company.pk)

        self.assertEqual(result, product_discount)

    def test_soft_deleted_discount_not_returned(self):
        discount = create_discount(10, variant=self.large)
        discount.soft_delete()

        self.assertIsNone(get_active_discount(self.product.pk, self.large.pk, self.company.pk))

    def test_variant_from_other_product_rejected(self):
        with self.assertRaises(InvalidPricingContext):
            get_active_discount(self.product.pk + 1, self.large.pk)
