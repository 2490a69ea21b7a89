"""Payment signature verifier factory.

get_verifier() builds a Razorpay verifier from RAZORPAY_KEY_SECRET unless a
verifier was installed with set_verifier().
"""

from marketplace import settings
from marketplace.payment.port import PaymentSignatureVerifier
from marketplace.payment.razorpay import RazorpaySignatureVerifier

_current_verifier: PaymentSignatureVerifier | None = None


def get_verifier() -> PaymentSignatureVerifier:
    if _current_verifier is not None:
        return _current_verifier
    return RazorpaySignatureVerifier(settings.razorpay_key_secret())


def set_verifier(verifier: PaymentSignatureVerifier) -> None:
    """Override the active verifier (useful for tests)."""
    global _current_verifier
    _current_verifier = verifier


def reset_verifier() -> None:
    global _current_verifier
    _current_verifier = None
