"""Payment gateway port.

The contract checkout depends on. Adapters: ``RazorpayGateway`` for real
payments, ``FakePaymentGateway`` for development and tests.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class PaymentIntent:
    """Gateway-side pending payment, correlated to an order by ``intent_id``."""

    intent_id: str
    amount_minor_units: int
    currency: str
    receipt_id: str
    raw: Dict[str, Any] = field(default_factory=dict, compare=False)


class PaymentGateway(ABC):
    key_id: Optional[str] = None

    @abstractmethod
    def create_intent(
        self,
        amount_minor_units: int,
        currency: str,
        receipt_id: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> PaymentIntent:
        """Create a pending payment on the gateway side."""
        ...

    @abstractmethod
    def verify_signature(self, intent_id: str, payment_id: str, signature: str) -> bool:
        """Check the callback signature against the shared secret."""
        ...
