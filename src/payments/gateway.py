"""
Razorpay adapter.

Wraps the two things the booking core needs from the gateway: creating an
order for an amount, and checking that a checkout confirmation was signed
with our key secret.
"""

import hashlib
import hmac
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional

import razorpay
import requests
from razorpay.errors import BadRequestError, GatewayError, ServerError

from src.config import settings
from src.bookings.schemas import GatewayOrder
from src.exceptions import GatewayUnavailable, GatewayRejected

logger = logging.getLogger(__name__)

def to_minor_units(amount: Decimal) -> int:
    """Rupees to paise, rounded half-up to a whole number"""
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

def compute_signature(secret: str, order_id: str, payment_id: str) -> str:
    """Hex HMAC-SHA256 of ``"{order_id}|{payment_id}"`` as Razorpay signs it"""
    message = f"{order_id}|{payment_id}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()

class PaymentGateway:
    """Payment provider operations used by booking and reconciliation"""

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        currency: str = "INR",
        timeout: float = 10.0,
        client: Optional[Any] = None
    ):
        self.key_id = key_id
        self.key_secret = key_secret
        self.currency = currency
        self.timeout = timeout
        self.client = client or razorpay.Client(auth=(key_id, key_secret))

    def create_order(
        self,
        amount_minor: int,
        receipt: str,
        notes: Optional[Dict[str, Any]] = None,
        currency: Optional[str] = None
    ) -> GatewayOrder:
        """Create a gateway order; bounded by the configured timeout"""

        payload = {
            "amount": amount_minor,
            "currency": currency or self.currency,
            "receipt": receipt[:40],
            "notes": {k: str(v) for k, v in (notes or {}).items()},
        }

        try:
            order = self.client.order.create(data=payload, timeout=self.timeout)
        except BadRequestError as exc:
            logger.warning(f"Gateway rejected order for receipt {receipt}: {exc}")
            raise GatewayRejected(str(exc) or None) from exc
        except (ServerError, GatewayError) as exc:
            logger.error(f"Gateway error creating order for receipt {receipt}: {exc}")
            raise GatewayUnavailable() from exc
        except requests.exceptions.RequestException as exc:
            logger.error(f"Gateway unreachable creating order for receipt {receipt}: {exc}")
            raise GatewayUnavailable() from exc

        return GatewayOrder(
            id=order["id"],
            amount=int(order.get("amount", amount_minor)),
            currency=order.get("currency", payload["currency"]),
            receipt=order.get("receipt"),
            status=order.get("status"),
            key_id=self.key_id or None
        )

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        """Constant-time check of a checkout signature"""
        expected = compute_signature(self.key_secret, order_id, payment_id)
        return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))

def get_payment_gateway() -> PaymentGateway:
    """FastAPI dependency building the gateway from settings"""
    if not settings.RAZORPAY_KEY_ID or not settings.RAZORPAY_KEY_SECRET:
        logger.error("Razorpay keys not configured. Set RAZORPAY_KEY_ID and RAZORPAY_KEY_SECRET.")
        raise GatewayUnavailable("Payment gateway is not configured")

    return PaymentGateway(
        key_id=settings.RAZORPAY_KEY_ID,
        key_secret=settings.RAZORPAY_KEY_SECRET,
        currency=settings.PAYMENT_CURRENCY,
        timeout=settings.GATEWAY_TIMEOUT_SECONDS
    )
