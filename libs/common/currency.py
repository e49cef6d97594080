"""Money helpers for storefront amounts.

Amounts travel through the API as floats in the store currency (dollars).
Rounding uses Decimal half-up so two-decimal results match what customers
see on receipts, not binary float rounding.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

CENTS = Decimal("0.01")


def round_money(amount: float) -> float:
    """Round an amount to cents, half-up. 2.675 -> 2.68."""
    return float(Decimal(str(amount)).quantize(CENTS, rounding=ROUND_HALF_UP))


def format_usd(amount: float) -> str:
    """Format an amount as a dollar string with two decimals. 50 -> "$50.00"."""
    return f"${Decimal(str(amount)).quantize(CENTS, rounding=ROUND_HALF_UP)}"
