from django.db import models
from django.utils.text import slugify


class Company(models.Model):
    """
    A manufacturer or distributor selling animal-health products.
    Company-wide discounts hang off this model.
    """

    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=200, unique=True, blank=True)
    email = models.EmailField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "Companies"
        ordering = ["name"]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(self.name)
        super().save(*args, **kwargs)


class Product(models.Model):
    """
    Product model, a parent for variants.
    Prices and stock live on ProductVariant.
    """

    company = models.ForeignKey(
        Company,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products",
    )
    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=200, unique=True, blank=True)
    sku = models.CharField(
        max_length=100, unique=True, help_text="Base SKU for the product group."
    )
    description = models.TextField(blank=True)
    category = models.CharField(
        max_length=100, blank=True, help_text="e.g. Antibiotic, Vaccine, Feed Supplement"
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(self.name)
        super().save(*args, **kwargs)

    @property
    def is_available(self):
        """Checks if the product has any active variants with stock."""
        return (
            self.is_active
            and self.variants.filter(is_active=True, stock__gt=0).exists()
        )

    def get_lowest_priced_variant(self):
        """Get the variant with the lowest list price"""
        return self.variants.filter(is_active=True).order_by("customer_price").first()

    def get_price_range(self):
        """Get min and max list price from variants"""
        prices = list(
            self.variants.filter(is_active=True).values_list("customer_price", flat=True)
        )
        if not prices:
            return None, None
        return min(prices), max(prices)


class ProductVariant(models.Model):
    """
    A sellable packing of a product (e.g. '100ml bottle').
    Holds both the retail (customer) price and the wholesale price
    offered to partner companies.
    """

    product = models.ForeignKey(
        Product, on_delete=models.CASCADE, related_name="variants"
    )
    sku = models.CharField(max_length=100, unique=True)
    packing_volume = models.CharField(
        max_length=100, blank=True, help_text="Packing size (e.g., 100ml, 1kg)"
    )

    customer_price = models.DecimalField(max_digits=10, decimal_places=2)
    company_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Wholesale price for partners. Falls back to the customer price when blank.",
    )
    stock = models.PositiveIntegerField(default=0)

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["customer_price"]

    def __str__(self):
        volume = f" ({self.packing_volume})" if self.packing_volume else ""
        return f"{self.product.name}{volume} - {self.sku}"
