"""Payment rules for invoices.

The pricing engine itself never clamps a remaining balance. Recording a
payment is stricter: it refuses amounts that would overpay the invoice
beyond the paid tolerance.
"""

from __future__ import annotations

import logging

from glass_pricing.schemas.pricing import PaymentResponse
from glass_pricing.services.exceptions import InvalidPaymentError
from glass_pricing.services.pricing import (
    PAID_TOLERANCE,
    compute_remaining_balance,
    derive_payment_status,
)

logger = logging.getLogger(__name__)


def apply_payment(
    total_price: float,
    amount_paid: float,
    amount: float,
    *,
    status: str = "PENDING",
    tolerance: float = PAID_TOLERANCE,
) -> PaymentResponse:
    if amount <= 0:
        raise InvalidPaymentError("Payment amount must be greater than zero")
    if status == "CANCELLED":
        raise InvalidPaymentError("Cannot record a payment on a cancelled invoice")

    remaining = compute_remaining_balance(total_price, amount_paid)
    if remaining <= tolerance:
        raise InvalidPaymentError("Invoice is already fully paid")
    if amount > remaining + tolerance:
        raise InvalidPaymentError(
            f"Payment {amount:.2f} exceeds the remaining balance {remaining:.2f}"
        )

    new_paid = amount_paid + amount
    new_remaining = compute_remaining_balance(total_price, new_paid)
    new_status = derive_payment_status(total_price, new_paid, tolerance=tolerance)
    logger.info(
        "Applied payment %.2f: paid %.2f of %.2f (%s)", amount, new_paid, total_price, new_status
    )
    return PaymentResponse(
        total_price=total_price,
        amount_paid=new_paid,
        remaining_balance=max(0.0, new_remaining),
        status=new_status,
    )


def reverse_payment(
    total_price: float,
    amount_paid: float,
    amount: float,
    *,
    status: str = "PENDING",
    tolerance: float = PAID_TOLERANCE,
) -> PaymentResponse:
    """Undo a previously recorded payment."""
    if amount <= 0:
        raise InvalidPaymentError("Reversal amount must be greater than zero")
    if amount > amount_paid + tolerance:
        raise InvalidPaymentError(
            f"Cannot reverse {amount:.2f}; only {amount_paid:.2f} has been paid"
        )
    new_paid = max(0.0, amount_paid - amount)
    new_status = status
    if status != "CANCELLED":
        new_status = derive_payment_status(total_price, new_paid, tolerance=tolerance)
    return PaymentResponse(
        total_price=total_price,
        amount_paid=new_paid,
        remaining_balance=compute_remaining_balance(total_price, new_paid),
        status=new_status,
    )
