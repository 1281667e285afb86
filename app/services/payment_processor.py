"""Thin wrapper over the Stripe PaymentIntent API."""

import logging
from typing import Optional

import stripe

from app.core.config import settings
from app.core.exceptions import UpstreamFailure, ValidationError

logger = logging.getLogger(__name__)


class StripePaymentProcessor:
    """Creates, inspects and refunds payment intents.

    Network failures surface as ``UpstreamFailure`` so callers can retry.
    Card and request errors from Stripe surface as ``ValidationError``.
    """

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key if api_key is not None else settings.STRIPE_API_KEY
        if not self.api_key:
            logger.warning("STRIPE_API_KEY not configured. Payment calls will fail.")

    def _call(self, operation: str, fn, *args, **kwargs):
        try:
            return fn(*args, api_key=self.api_key, **kwargs)
        except (stripe.APIConnectionError, stripe.RateLimitError) as e:
            logger.warning("Stripe %s failed transiently: %s", operation, e)
            raise UpstreamFailure("Payment processor", str(e)) from e
        except stripe.StripeError as e:
            logger.error("Stripe error during %s: %s", operation, e)
            raise ValidationError(f"Payment processor rejected the request: {e.user_message or e}") from e

    def create_intent(self, amount_minor_units: int, currency: str, metadata: dict) -> dict:
        intent = self._call(
            "create_intent",
            stripe.PaymentIntent.create,
            amount=amount_minor_units,
            currency=currency,
            metadata=metadata,
            automatic_payment_methods={"enabled": True},
        )
        logger.info("Created payment intent %s for %s %s", intent.id, amount_minor_units, currency)
        return {"intent_id": intent.id, "client_secret": intent.client_secret}

    def retrieve_intent(self, intent_id: str) -> dict:
        intent = self._call("retrieve_intent", stripe.PaymentIntent.retrieve, intent_id, expand=["latest_charge"])
        return {"status": intent.status, "charge_details": charge_details(intent)}

    def refund(self, intent_id: str, amount_minor_units: Optional[int] = None, reason: Optional[str] = None) -> dict:
        params = {"payment_intent": intent_id}
        if amount_minor_units is not None:
            params["amount"] = amount_minor_units
        if reason:
            params["metadata"] = {"reason": reason}
        refund = self._call("refund", stripe.Refund.create, **params)
        logger.info("Created refund %s for intent %s", refund.id, intent_id)
        return {"refund_id": refund.id, "status": refund.status}


def charge_details(intent) -> dict:
    """Pull the charge id and card summary out of an intent, when present."""
    charge = intent.get("latest_charge") if hasattr(intent, "get") else None
    if not charge or isinstance(charge, str):
        return {"charge_id": charge, "last4": None, "brand": None}
    card = (charge.get("payment_method_details") or {}).get("card") or {}
    return {"charge_id": charge.get("id"), "last4": card.get("last4"), "brand": card.get("brand")}


payment_processor = StripePaymentProcessor()


def get_payment_processor() -> StripePaymentProcessor:
    """FastAPI dependency returning the process payment processor."""
    return payment_processor
