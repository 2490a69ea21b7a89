"""Razorpay checkout signature verification (HMAC-SHA256)."""

import hashlib
import hmac

from marketplace.payment.port import PaymentSignatureVerifier


class RazorpaySignatureVerifier(PaymentSignatureVerifier):
    def __init__(self, key_secret: str):
        self._key_secret = key_secret

    def expected_signature(self, gateway_order_id: str, payment_id: str) -> str:
        body = f"{gateway_order_id}|{payment_id}"
        return hmac.new(self._key_secret.encode(), body.encode(), hashlib.sha256).hexdigest()

    def verify(self, gateway_order_id: str, payment_id: str, signature: str) -> bool:
        if not self._key_secret or not signature:
            return False
        return hmac.compare_digest(self.expected_signature(gateway_order_id, payment_id), signature)
