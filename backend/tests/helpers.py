import hashlib
import hmac

from app.utils.security import create_access_token

RAZORPAY_SECRET = "rzp_test_secret"
PASSWORD = "secret123"


def auth(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


def sign(order_id: str, payment_id: str, secret: str = RAZORPAY_SECRET) -> str:
    """Signature Razorpay checkout hands back to the browser."""
    return hmac.new(secret.encode(), f"{order_id}|{payment_id}".encode(), hashlib.sha256).hexdigest()
