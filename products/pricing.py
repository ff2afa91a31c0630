"""
Variant pricing utility module.

Works out the price a variant is shown or sold at: the retail price for
customers, the company (wholesale) price for partners, less whichever
discount the discount engine resolves for the variant.
"""
from discounts.pricing import price_for_display, round_currency
from discounts.pricing_context import PricingContext


def variant_base_price(variant, wholesale=False):
    """
    Get the undiscounted price for a variant.

    Args:
        variant: ProductVariant instance
        wholesale: use the company price (partners) instead of the customer price

    Returns:
        Decimal: base price rounded to cents
    """
    if wholesale and variant.company_price is not None:
        return round_currency(variant.company_price)
    return round_currency(variant.customer_price)


def get_effective_price(variant, wholesale=False, resolver=None, now=None):
    """
    Get the display price for a variant, discount applied.

    Args:
        variant: ProductVariant instance

    Returns:
        ResolvedPrice: final price, original price, applied discount and savings
    """
    return price_for_display(
        variant_base_price(variant, wholesale=wholesale),
        PricingContext.for_variant(variant),
        resolver=resolver,
        now=now,
    )


def get_effective_prices_for_variants(variants, wholesale=False, resolver=None, now=None):
    """
    Batch calculate display prices for a queryset of variants.

    Args:
        variants: QuerySet or list of ProductVariant instances

    Returns:
        dict: Dictionary mapping variant IDs to ResolvedPrice objects
    """
    result = {}
    for variant in variants:
        result[variant.id] = get_effective_price(
            variant, wholesale=wholesale, resolver=resolver, now=now
        )
    return result
