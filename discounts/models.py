from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone
from decimal import Decimal

from . import status as discount_statuses


class DiscountQuerySet(models.QuerySet):
    """Query helpers shared by the repository, the admin and the API."""

    def alive(self):
        """Exclude soft-deleted discounts."""
        return self.filter(deleted_at__isnull=True)

    def active_at(self, now):
        return self.filter(is_active=True, start_date__lte=now, end_date__gte=now)

    def with_status(self, status, now=None):
        """
        Database-side equivalent of ``discounts.status.discount_status``.
        """
        now = now or timezone.now()
        if status == discount_statuses.DISABLED:
            return self.filter(is_active=False)
        if status == discount_statuses.SCHEDULED:
            return self.filter(is_active=True, start_date__gt=now)
        if status == discount_statuses.EXPIRED:
            return self.filter(is_active=True, start_date__lte=now, end_date__lt=now)
        if status == discount_statuses.ACTIVE:
            return self.active_at(now)
        return self

    def for_company(self, company_id):
        """Company-wide discounts plus those on the company's products and variants."""
        return self.filter(
            Q(company_id=company_id)
            | Q(product__company_id=company_id)
            | Q(variant__product__company_id=company_id)
        )

    def for_product(self, product_id):
        """Product-wide discounts plus those on the product's variants."""
        return self.filter(Q(product_id=product_id) | Q(variant__product_id=product_id))


class Discount(models.Model):
    """
    A time-bounded percentage discount.

    Exactly one scope pointer is set: a company (all of its products),
    a single product (all of its variants) or a single variant.
    """
    SCOPE_COMPANY = 'company'
    SCOPE_PRODUCT = 'product'
    SCOPE_VARIANT = 'variant'

    # Basic Information
    name = models.CharField(
        max_length=255,
        help_text="Name shown on discount badges."
    )
    description = models.TextField(
        null=True,
        blank=True,
        help_text="Public description shown to customers."
    )

    # Discount Configuration
    percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01')), MaxValueValidator(Decimal('100'))],
        help_text="Percentage removed from the base price (15 means 15%)."
    )

    # Scope
    company = models.ForeignKey(
        'products.Company',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='discounts',
        help_text="Company-wide discount: applies to every product of this company."
    )
    product = models.ForeignKey(
        'products.Product',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='discounts',
        help_text="Product-wide discount: applies to every variant of this product."
    )
    variant = models.ForeignKey(
        'products.ProductVariant',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='discounts',
        help_text="Variant-specific discount."
    )

    # Validity Period
    start_date = models.DateTimeField(
        help_text="Date and time when the discount becomes valid."
    )
    end_date = models.DateTimeField(
        help_text="Date and time when the discount expires."
    )
    is_active = models.BooleanField(
        default=True,
        help_text="Inactive discounts are never applied, whatever their dates."
    )

    # Metadata
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    deleted_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Set when the discount is retired. Retired discounts are kept for order history."
    )

    objects = DiscountQuerySet.as_manager()

    class Meta:
        db_table = "discounts"
        ordering = ['-created_at']
        verbose_name = "Discount"
        verbose_name_plural = "Discounts"
        indexes = [
            models.Index(fields=['is_active', 'start_date', 'end_date']),
        ]

    def __str__(self):
        return f"{self.name} ({self.percentage}%)"

    @property
    def scope(self):
        """The scope this discount applies at, or None for a mixed/empty scope."""
        if self.variant_id and not self.product_id and not self.company_id:
            return self.SCOPE_VARIANT
        if self.product_id and not self.company_id and not self.variant_id:
            return self.SCOPE_PRODUCT
        if self.company_id and not self.product_id and not self.variant_id:
            return self.SCOPE_COMPANY
        return None

    @property
    def is_deleted(self):
        return self.deleted_at is not None

    def clean(self):
        super().clean()
        errors = {}

        if self.start_date and self.end_date and self.end_date <= self.start_date:
            errors['end_date'] = "End date must be after start date."

        pointers = [self.company_id, self.product_id, self.variant_id]
        set_count = sum(1 for pointer in pointers if pointer)
        if set_count == 0:
            errors['__all__'] = "Please select a company, product, or variant for the discount."
        elif set_count > 1:
            errors['__all__'] = "A discount applies to exactly one company, product, or variant."

        if errors:
            raise ValidationError(errors)

    def status(self, now=None):
        return discount_statuses.discount_status(self, now)

    def is_valid(self, now=None):
        """Check if discount is currently applicable (active and within date range)."""
        return discount_statuses.is_discount_active(self, now)

    def soft_delete(self):
        """
        Retire the discount without removing the row, so prices frozen on
        historical orders stay traceable.
        """
        self.is_active = False
        self.deleted_at = timezone.now()
        self.save(update_fields=['is_active', 'deleted_at', 'updated_at'])
