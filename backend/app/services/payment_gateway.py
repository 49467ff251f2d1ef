"""
Razorpay Gateway — Order creation and checkout signature verification.
"""
import hashlib
import hmac
import logging
from functools import lru_cache
from typing import Dict, Optional

import razorpay
from razorpay.errors import BadRequestError

from app.config import get_settings

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """The payment provider rejected or failed a request."""

    def __init__(self, message: str, auth_failed: bool = False):
        super().__init__(message)
        self.message = message
        self.auth_failed = auth_failed


@lru_cache()
def get_razorpay_client() -> razorpay.Client:
    """Build the Razorpay client once credentials are known."""
    settings = get_settings()
    if not settings.RAZORPAY_KEY_ID or not settings.RAZORPAY_KEY_SECRET:
        raise GatewayError("Razorpay key_id or key_secret is missing", auth_failed=True)

    client = razorpay.Client(auth=(settings.RAZORPAY_KEY_ID, settings.RAZORPAY_KEY_SECRET))
    client.set_app_details({"title": settings.APP_NAME, "version": settings.APP_VERSION})
    return client


class RazorpayGateway:

    @staticmethod
    def create_order(amount_paise: int, receipt: str, notes: Optional[Dict] = None) -> Dict:
        """Create a Razorpay order for the given amount in paise."""
        settings = get_settings()
        order_data = {
            "amount": amount_paise,
            "currency": settings.CURRENCY,
            "receipt": receipt,
            "payment_capture": 1,
            "notes": notes or {},
        }

        try:
            order = get_razorpay_client().order.create(order_data)
        except GatewayError:
            raise
        except BadRequestError as e:
            logger.error("Razorpay rejected order %s: %s", receipt, e)
            raise GatewayError(str(e), auth_failed="authentication" in str(e).lower())
        except Exception as e:
            logger.exception("Razorpay order creation failed for %s", receipt)
            raise GatewayError(str(e))

        if not order or not order.get("id"):
            raise GatewayError("Invalid order response from Razorpay")

        logger.info("Razorpay order created: %s (%s paise)", order["id"], amount_paise)
        return order

    @staticmethod
    def expected_signature(order_id: str, payment_id: str) -> str:
        """HMAC-SHA256 of "<order_id>|<payment_id>" keyed with the account secret."""
        secret = get_settings().RAZORPAY_KEY_SECRET
        body = f"{order_id}|{payment_id}"
        return hmac.new(secret.encode(), body.encode(), hashlib.sha256).hexdigest()

    @staticmethod
    def verify_signature(order_id: str, payment_id: str, signature: str) -> bool:
        """Check the checkout signature the client relayed from Razorpay."""
        if not get_settings().RAZORPAY_KEY_SECRET:
            raise GatewayError("Razorpay secret not configured", auth_failed=True)
        expected = RazorpayGateway.expected_signature(order_id, payment_id)
        return hmac.compare_digest(expected.encode(), signature.encode("utf-8"))
