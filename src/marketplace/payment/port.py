"""Payment signature verifier port.

The gateway signs every captured payment; the order is only marked paid when
the signature checks out against the shared secret.
"""

from abc import ABC, abstractmethod


class PaymentSignatureVerifier(ABC):
    @abstractmethod
    def verify(self, gateway_order_id: str, payment_id: str, signature: str) -> bool:
        """Return True when ``signature`` authenticates the order/payment pair."""
        ...
