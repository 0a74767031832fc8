import logging

from fastapi import APIRouter, Depends, Request

from db import Database
from processing.stripe_webhook import StripeWebhookProcessor
from services.payment_gateway import PaymentGateway
from web.dependencies import get_db, get_payment_gateway
from web.responses import success_response

logger = logging.getLogger(__name__)

webhook_router = APIRouter(prefix="/api/webhooks", tags=["webhooks"])


@webhook_router.post("/stripe")
async def stripe_webhook(request: Request,
                         db: Database = Depends(get_db),
                         gateway: PaymentGateway = Depends(get_payment_gateway)):
    """
    Payment provider events.

    Request Headers:
        Stripe-Signature: t=<unix ts>,v1=<hex hmac-sha256>

    Returns:
        200: {"received": true, "handled": bool}
        400: Invalid signature or payload
    """
    payload = await request.body()
    StripeWebhookProcessor.verify_signature(payload, request.headers.get("Stripe-Signature"))
    event = StripeWebhookProcessor.parse_event(payload)

    handled = await StripeWebhookProcessor.process_event(event, db, gateway)
    logger.info(f"✅ Webhook {event.get('type')} processed (handled={handled})")
    return success_response({"received": True, "handled": handled})
