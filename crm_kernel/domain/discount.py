"""
Discount -- the shared discount primitive for quote lines and quote totals.

Both discount layers on a quote (per line, then global) go through
``apply_discount`` so the arithmetic cannot drift between them.

Invariants enforced:
    - percentage: discount = base * amount / 100
    - fixed:      discount = amount (in the base's currency)
    - result = base - discount, with NO clamping to zero and NO rounding.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum

from crm_kernel.domain.values import Money


class DiscountKind(str, Enum):
    """How a discount figure is interpreted."""

    PERCENTAGE = "percentage"
    FIXED = "fixed"


_HUNDRED = Decimal("100")


def discount_amount(base: Money, amount: Decimal, kind: DiscountKind) -> Money:
    """Monetary value of a discount against ``base``."""
    if kind == DiscountKind.PERCENTAGE:
        return base * amount / _HUNDRED
    return Money(amount=Decimal(amount), currency=base.currency)


def apply_discount(base: Money, amount: Decimal, kind: DiscountKind) -> Money:
    """
    Apply a percentage or fixed discount to ``base``.

    A discount larger than the base yields a negative result; deciding
    whether that is acceptable is left to the caller.

    Args:
        base: Amount the discount applies to.
        amount: Percentage points (``PERCENTAGE``) or a currency amount
            (``FIXED``).
        kind: Interpretation of ``amount``.

    Returns:
        ``base - discount``.
    """
    return base - discount_amount(base, amount, DiscountKind(kind))
