"""
Razorpay adapter.

Wraps an explicitly constructed ``razorpay.Client``; build one per process
and pass it into ``CheckoutService`` rather than importing a shared client.
"""

import logging
from typing import Optional

import razorpay
import requests

from bookstore.config import Settings
from bookstore.errors import PaymentGatewayError
from bookstore.gateway.port import PaymentGateway, PaymentIntent

logger = logging.getLogger(__name__)


class RazorpayGateway(PaymentGateway):
    def __init__(self, key_id: str, key_secret: str, client: Optional[razorpay.Client] = None):
        self.key_id = key_id
        self.client = client or razorpay.Client(auth=(key_id, key_secret))

    @classmethod
    def from_settings(cls, settings: Settings) -> "RazorpayGateway":
        return cls(settings.razorpay_key_id, settings.razorpay_key_secret)

    def create_intent(self, amount_minor_units, currency, receipt_id, metadata=None) -> PaymentIntent:
        try:
            razorpay_order = self.client.order.create(
                {
                    "amount": amount_minor_units,  # paise
                    "currency": currency,
                    "receipt": receipt_id,
                    "notes": {k: str(v) for k, v in (metadata or {}).items()},
                }
            )
        except (
            razorpay.errors.BadRequestError,
            razorpay.errors.GatewayError,
            razorpay.errors.ServerError,
            requests.RequestException,
        ) as exc:
            logger.error(f"Razorpay order creation failed for {receipt_id}: {exc}")
            raise PaymentGatewayError("Failed to create payment order") from exc

        return PaymentIntent(
            intent_id=razorpay_order["id"],
            amount_minor_units=amount_minor_units,
            currency=currency,
            receipt_id=receipt_id,
            raw=razorpay_order,
        )

    def verify_signature(self, intent_id, payment_id, signature) -> bool:
        try:
            self.client.utility.verify_payment_signature({
                "razorpay_order_id": intent_id,
                "razorpay_payment_id": payment_id,
                "razorpay_signature": signature,
            })
        except razorpay.errors.SignatureVerificationError:
            return False
        return True
