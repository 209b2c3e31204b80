"""
Stripe payment intents.

The shop never captures money itself: checkout asks Stripe for a payment
intent and hands its client secret to the storefront.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

import stripe

logger = logging.getLogger(__name__)


class PaymentNotConfigured(Exception):
    pass


def to_minor_units(amount: float) -> int:
    # half-up on the decimal value, so 0.125 becomes 13 and not 12
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class PaymentGateway:
    def __init__(self, secret_key: Optional[str], currency: str = "inr"):
        self.secret_key = secret_key
        self.currency = currency

    @property
    def configured(self) -> bool:
        return bool(self.secret_key)

    def create_intent(self, amount: float) -> str:
        """
        Create a payment intent for `amount` major units (rupees) and return
        its client secret. Stripe errors propagate to the caller.
        """
        if not self.configured:
            raise PaymentNotConfigured("Stripe not configured. Set STRIPE_SECRET_KEY.")

        intent = stripe.PaymentIntent.create(
            api_key=self.secret_key,
            amount=to_minor_units(amount),
            currency=self.currency,
            automatic_payment_methods={"enabled": True},
        )
        logger.info("Created payment intent %s for %s %s", intent.id, amount, self.currency)
        return intent.client_secret
