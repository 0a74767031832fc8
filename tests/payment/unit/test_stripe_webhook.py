"""
StripeWebhookProcessor Unit Tests

Signature verification (HMAC-SHA256 over "<t>.<payload>", constant-time
compare, replay window) and event dispatch.
"""

import time

import pytest

from enums.payment_status import PaymentStatus
from exceptions.payment import WebhookSignatureException, PaymentValidationException, PaymentNotCompletedException
from processing.stripe_webhook import StripeWebhookProcessor
from repositories.order import OrderRepository
from services.order import OrderService
from services.payment import PaymentService

SECRET = "whsec_unit_test_secret"
PAYLOAD = b'{"type": "payment_intent.succeeded"}'


def header_for(payload: bytes, timestamp: int, secret: str = SECRET) -> str:
    return f"t={timestamp},v1={StripeWebhookProcessor.compute_signature(payload, timestamp, secret)}"


class TestVerifySignature:

    def test_valid_signature(self):
        now = int(time.time())
        StripeWebhookProcessor.verify_signature(PAYLOAD, header_for(PAYLOAD, now), secret=SECRET, now=now)

    def test_any_matching_v1_is_accepted(self):
        now = int(time.time())
        valid = StripeWebhookProcessor.compute_signature(PAYLOAD, now, SECRET)
        header = f"t={now},v1={'0' * 64},v1={valid}"
        StripeWebhookProcessor.verify_signature(PAYLOAD, header, secret=SECRET, now=now)

    def test_tampered_payload(self):
        now = int(time.time())
        with pytest.raises(WebhookSignatureException) as exc_info:
            StripeWebhookProcessor.verify_signature(
                b'{"type": "payment_intent.canceled"}', header_for(PAYLOAD, now), secret=SECRET, now=now
            )
        assert exc_info.value.reason == "signature mismatch"

    def test_wrong_secret(self):
        now = int(time.time())
        with pytest.raises(WebhookSignatureException):
            StripeWebhookProcessor.verify_signature(
                PAYLOAD, header_for(PAYLOAD, now, secret="whsec_other"), secret=SECRET, now=now
            )

    def test_stale_timestamp_rejected(self):
        signed_at = int(time.time()) - 3600
        with pytest.raises(WebhookSignatureException) as exc_info:
            StripeWebhookProcessor.verify_signature(
                PAYLOAD, header_for(PAYLOAD, signed_at), secret=SECRET, tolerance_seconds=300
            )
        assert "tolerance" in exc_info.value.reason

    @pytest.mark.parametrize("header", [None, "", "garbage", "t=abc,v1=deadbeef", "t=1700000000", "v1=deadbeef"])
    def test_malformed_headers(self, header):
        with pytest.raises(WebhookSignatureException):
            StripeWebhookProcessor.verify_signature(PAYLOAD, header, secret=SECRET, now=1700000000)

    def test_unconfigured_secret_rejects_everything(self):
        now = int(time.time())
        with pytest.raises(WebhookSignatureException):
            StripeWebhookProcessor.verify_signature(PAYLOAD, header_for(PAYLOAD, now), secret="", now=now)


class TestParseEvent:

    def test_valid_event(self):
        assert StripeWebhookProcessor.parse_event(PAYLOAD)["type"] == "payment_intent.succeeded"

    @pytest.mark.parametrize("payload", [b"not json", b"[1, 2]", b'{"id": "evt_1"}', b"\xff\xfe"])
    def test_invalid_payload(self, payload):
        with pytest.raises(PaymentValidationException):
            StripeWebhookProcessor.parse_event(payload)


class TestProcessEvent:

    @pytest.fixture
    def order_with_intent(self, db, catalog, make_order_payload, payment_gateway):
        async def _create():
            order = await OrderService.create_order(make_order_payload(catalog["variant"].id), db)
            intent = await PaymentService.create_payment_intent(order, payment_gateway)
            await OrderService.attach_payment_intent(order.id, intent.id, db)
            return order, intent
        return _create

    @staticmethod
    def event(event_type: str, intent_id: str, metadata: dict | None = None) -> dict:
        return {
            "id": "evt_1",
            "type": event_type,
            "data": {"object": {"id": intent_id, "object": "payment_intent", "metadata": metadata or {}}},
        }

    @pytest.mark.asyncio
    async def test_succeeded_event_captures_payment(self, db, payment_gateway, order_with_intent):
        order, intent = await order_with_intent()
        payment_gateway.set_status(intent.id, "succeeded")

        handled = await StripeWebhookProcessor.process_event(
            self.event("payment_intent.succeeded", intent.id, {"order_id": order.id}), db, payment_gateway
        )

        assert handled is True
        async with db.session() as session:
            stored = await OrderRepository.get_by_id(order.id, session)
        assert stored.payment_status == PaymentStatus.PAID

    @pytest.mark.asyncio
    async def test_event_payload_is_not_trusted(self, db, payment_gateway, order_with_intent):
        """A forged "succeeded" event is checked against the provider before anything changes."""
        order, intent = await order_with_intent()

        with pytest.raises(PaymentNotCompletedException):
            await StripeWebhookProcessor.process_event(
                self.event("payment_intent.succeeded", intent.id, {"order_id": order.id}), db, payment_gateway
            )

        async with db.session() as session:
            stored = await OrderRepository.get_by_id(order.id, session)
        assert stored.payment_status == PaymentStatus.PENDING

    @pytest.mark.asyncio
    async def test_succeeded_event_without_metadata_uses_intent_id(self, db, payment_gateway, order_with_intent):
        order, intent = await order_with_intent()
        payment_gateway.set_status(intent.id, "succeeded")

        handled = await StripeWebhookProcessor.process_event(
            self.event("payment_intent.succeeded", intent.id), db, payment_gateway
        )

        assert handled is True

    @pytest.mark.asyncio
    async def test_succeeded_event_for_unknown_order(self, db, payment_gateway):
        handled = await StripeWebhookProcessor.process_event(
            self.event("payment_intent.succeeded", "pi_unknown", {"order_id": "gone"}), db, payment_gateway
        )
        assert handled is False

    @pytest.mark.asyncio
    async def test_failed_event_marks_order_failed(self, db, payment_gateway, order_with_intent):
        order, intent = await order_with_intent()

        handled = await StripeWebhookProcessor.process_event(
            self.event("payment_intent.payment_failed", intent.id, {"order_id": order.id}), db, payment_gateway
        )

        assert handled is True
        async with db.session() as session:
            stored = await OrderRepository.get_by_id(order.id, session)
        assert stored.payment_status == PaymentStatus.FAILED

    @pytest.mark.asyncio
    async def test_other_events_are_ignored(self, db, payment_gateway):
        handled = await StripeWebhookProcessor.process_event(
            self.event("charge.refunded", "pi_whatever"), db, payment_gateway
        )
        assert handled is False
