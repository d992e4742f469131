"""
Payment gateway integration (Razorpay) and reconciliation of checkout
confirmations against pending bookings.
"""

from .gateway import PaymentGateway, get_payment_gateway, compute_signature, to_minor_units
from .reconciliation_service import PaymentReconciliationService

__all__ = [
    "PaymentGateway",
    "get_payment_gateway",
    "compute_signature",
    "to_minor_units",
    "PaymentReconciliationService"
]
