"""
Errors raised by the discount resolution and pricing engine.
"""


class PricingError(Exception):
    """Base class for pricing engine errors."""
    pass


class DiscountLookupFailed(PricingError):
    """
    The discount store could not be queried.

    Callers decide how to degrade: display paths fall back to the full
    price, checkout paths must fail the request.
    """
    pass


class InvalidPricingContext(PricingError):
    """The caller supplied a product/variant/company combination that cannot be priced."""
    pass
