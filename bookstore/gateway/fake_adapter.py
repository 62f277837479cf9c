"""Offline payment gateway for development and tests.

Signs callbacks the way Razorpay does (HMAC-SHA256 over
``"{order_id}|{payment_id}"`` with the key secret), so a signature produced by
``sign`` passes ``verify_signature`` and anything else fails.
"""

import hashlib
import hmac
from uuid import uuid4

from bookstore.errors import PaymentGatewayError
from bookstore.gateway.port import PaymentGateway, PaymentIntent


class FakePaymentGateway(PaymentGateway):
    def __init__(self, key_secret: str = "test_secret", key_id: str = "rzp_test_fake"):
        self.key_id = key_id
        self.key_secret = key_secret
        self.should_succeed = True
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool) -> None:
        self.should_succeed = should_succeed

    def sign(self, intent_id: str, payment_id: str) -> str:
        message = f"{intent_id}|{payment_id}".encode()
        return hmac.new(self.key_secret.encode(), message, hashlib.sha256).hexdigest()

    def create_intent(self, amount_minor_units, currency, receipt_id, metadata=None) -> PaymentIntent:
        self.calls.append({
            "method": "create_intent",
            "amount_minor_units": amount_minor_units,
            "currency": currency,
            "receipt_id": receipt_id,
            "metadata": metadata,
        })
        if not self.should_succeed:
            raise PaymentGatewayError("Failed to create payment order")

        return PaymentIntent(
            intent_id=f"order_fake_{uuid4().hex[:14]}",
            amount_minor_units=amount_minor_units,
            currency=currency,
            receipt_id=receipt_id,
        )

    def verify_signature(self, intent_id, payment_id, signature) -> bool:
        self.calls.append({"method": "verify_signature", "intent_id": intent_id, "payment_id": payment_id})
        return hmac.compare_digest(self.sign(intent_id, payment_id), signature or "")
