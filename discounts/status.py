"""
Discount status classification.

Status is never stored: it is recomputed from ``is_active`` and the
validity window every time it is asked for.
"""
from datetime import timedelta

from django.conf import settings
from django.utils import timezone

ACTIVE = 'active'
SCHEDULED = 'scheduled'
EXPIRED = 'expired'
DISABLED = 'disabled'

STATUS_CHOICES = [
    (ACTIVE, 'Active'),
    (SCHEDULED, 'Scheduled'),
    (EXPIRED, 'Expired'),
    (DISABLED, 'Disabled'),
]


def discount_status(discount, now=None):
    """
    Classify a discount as active, scheduled, expired or disabled.

    The checks run in that order of precedence: the kill switch first,
    then the window. Every discount maps to exactly one status.
    """
    if not discount.is_active:
        return DISABLED

    now = now or timezone.now()
    if now < discount.start_date:
        return SCHEDULED
    if now > discount.end_date:
        return EXPIRED
    return ACTIVE


def is_window_valid(discount):
    """A window is well formed only when it ends strictly after it starts."""
    return discount.end_date > discount.start_date


def is_discount_active(discount, now=None):
    """True when the discount may be applied at ``now``."""
    return is_window_valid(discount) and discount_status(discount, now) == ACTIVE


def is_ending_soon(discount, hours=None, now=None):
    """
    Check if an active discount ends within ``hours`` (defaults to the
    DISCOUNT_ENDING_SOON_HOURS setting).
    """
    now = now or timezone.now()
    if not is_discount_active(discount, now):
        return False

    if hours is None:
        hours = getattr(settings, 'DISCOUNT_ENDING_SOON_HOURS', 24)

    remaining = discount.end_date - now
    return timedelta(0) < remaining <= timedelta(hours=hours)


def format_time_remaining(end_date, now=None):
    """
    Human readable time left until ``end_date``.

    Examples: "2d 3h remaining", "5h 10m remaining", "12m remaining", "Expired".
    """
    now = now or timezone.now()
    seconds = int((end_date - now).total_seconds())
    if seconds <= 0:
        return 'Expired'

    days, seconds = divmod(seconds, 86400)
    hours, seconds = divmod(seconds, 3600)
    minutes = seconds // 60

    if days > 0:
        return f"{days}d {hours}h remaining"
    if hours > 0:
        return f"{hours}h {minutes}m remaining"
    return f"{minutes}m remaining"
