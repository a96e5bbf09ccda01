"""Display formatting shared by invoice views and printed invoices.

Amounts use two decimals and area three, rounding ties away from zero on the
exact binary value of the float (the browser's ``Number.toFixed``).
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

DEFAULT_CURRENCY_LABEL = "ج.م"
TAX_DISPLAY = "0.00"


def _fixed(value: Optional[float], places: int) -> str:
    exponent = Decimal(1).scaleb(-places)
    return str(Decimal(float(value or 0)).quantize(exponent, rounding=ROUND_HALF_UP))


def format_money(amount: Optional[float]) -> str:
    return _fixed(amount, 2)


def format_currency(amount: Optional[float], label: str = DEFAULT_CURRENCY_LABEL) -> str:
    return f"{format_money(amount)} {label}"


def format_area(area_m2: Optional[float]) -> str:
    return _fixed(area_m2, 3)


def format_dimension(value: Optional[float]) -> str:
    """Whole numbers print bare, anything else with two decimals."""
    number = float(value or 0)
    if number == int(number):
        return str(int(number))
    return _fixed(number, 2)
