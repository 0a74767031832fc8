"""
Payment provider webhook processing.

Verifies Stripe-Signature headers and turns payment_intent events into
order payment transitions. Event payloads are never trusted for the
payment outcome: every transition re-reads the intent from the provider.
"""

import hashlib
import hmac
import json
import logging
import time

import config
from db import Database
from exceptions.order import OrderNotFoundException
from exceptions.payment import PaymentValidationException, WebhookSignatureException
from repositories.order import OrderRepository
from services.payment import PaymentService
from services.payment_gateway import PaymentGateway

logger = logging.getLogger(__name__)

EVENT_PAYMENT_SUCCEEDED = "payment_intent.succeeded"
EVENT_PAYMENT_FAILED = "payment_intent.payment_failed"


class StripeWebhookProcessor:

    @staticmethod
    def compute_signature(payload: bytes, timestamp: int, secret: str) -> str:
        signed_payload = f"{timestamp}.".encode("utf-8") + payload
        return hmac.new(secret.encode("utf-8"), signed_payload, hashlib.sha256).hexdigest()

    @staticmethod
    def verify_signature(payload: bytes,
                         signature_header: str | None,
                         secret: str | None = None,
                         tolerance_seconds: int | None = None,
                         now: float | None = None) -> None:
        """
        Verify a Stripe-Signature header ("t=<unix ts>,v1=<hex hmac>[,v1=...]").

        The HMAC-SHA256 is computed over "<t>.<raw payload>" with the
        webhook secret and compared in constant time against every v1
        signature. Timestamps outside the tolerance are rejected to stop
        replays.

        Raises:
            WebhookSignatureException: If the header is missing, malformed, stale or does not match
        """
        secret = secret if secret is not None else config.STRIPE_WEBHOOK_SECRET
        tolerance_seconds = tolerance_seconds if tolerance_seconds is not None else config.STRIPE_WEBHOOK_TOLERANCE_SECONDS
        now = now if now is not None else time.time()

        if not secret:
            raise WebhookSignatureException("webhook secret not configured")
        if not signature_header:
            raise WebhookSignatureException("missing signature header")

        timestamp = None
        signatures = []
        for part in signature_header.split(","):
            key, _, value = part.strip().partition("=")
            if key == "t":
                try:
                    timestamp = int(value)
                except ValueError:
                    raise WebhookSignatureException("invalid timestamp")
            elif key == "v1" and value:
                signatures.append(value)

        if timestamp is None or not signatures:
            raise WebhookSignatureException("malformed signature header")

        if abs(now - timestamp) > tolerance_seconds:
            raise WebhookSignatureException(f"timestamp outside tolerance of {tolerance_seconds}s")

        expected = StripeWebhookProcessor.compute_signature(payload, timestamp, secret)
        if not any(hmac.compare_digest(expected, signature) for signature in signatures):
            logger.warning(f"Webhook signature mismatch | Expected: {expected[:16]}...")
            raise WebhookSignatureException("signature mismatch")

    @staticmethod
    def parse_event(payload: bytes) -> dict:
        try:
            event = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError):
            raise PaymentValidationException("Webhook payload is not valid JSON")
        if not isinstance(event, dict) or "type" not in event:
            raise PaymentValidationException("Webhook payload is not an event")
        return event

    @staticmethod
    async def process_event(event: dict, db: Database, gateway: PaymentGateway) -> bool:
        """
        Dispatch a verified event.

        Returns:
            True if the event changed an order, False if it was acknowledged and ignored
        """
        event_type = event.get("type")
        intent = (event.get("data") or {}).get("object") or {}
        payment_intent_id = intent.get("id")

        if event_type not in (EVENT_PAYMENT_SUCCEEDED, EVENT_PAYMENT_FAILED) or not payment_intent_id:
            logger.info(f"Ignoring webhook event {event_type}")
            return False

        if event_type == EVENT_PAYMENT_FAILED:
            order = await PaymentService.mark_payment_failed(payment_intent_id, db, gateway)
            return order is not None

        order_id = (intent.get("metadata") or {}).get("order_id")
        if not order_id:
            async with db.session() as session:
                order = await OrderRepository.get_by_payment_intent_id(payment_intent_id, session)
            order_id = order.id if order else None
        if not order_id:
            logger.warning(f"No order for succeeded payment {payment_intent_id}")
            return False

        try:
            await PaymentService.capture_payment(order_id, payment_intent_id, db, gateway)
        except OrderNotFoundException:
            logger.warning(f"Succeeded payment {payment_intent_id} references unknown order {order_id}")
            return False
        return True
