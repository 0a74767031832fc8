"""
Public order endpoints: create, capture payment, look up, history.
"""

import logging

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from db import Database
from models.order import OrderCreateDTO
from services.order import OrderService
from services.payment import PaymentService
from services.payment_gateway import PaymentGateway
from web.dependencies import get_db, get_payment_gateway, get_session
from web.responses import success_response

logger = logging.getLogger(__name__)

order_router = APIRouter(prefix="/api/orders", tags=["orders"])


class CapturePaymentRequest(BaseModel):
    payment_intent_id: str | None = None


@order_router.post("/create", status_code=status.HTTP_201_CREATED)
async def create_order(payload: OrderCreateDTO,
                       db: Database = Depends(get_db),
                       gateway: PaymentGateway = Depends(get_payment_gateway)):
    """
    Create an order and a payment intent over its total.

    Returns:
        201: {"order": {...}, "client_secret": "pi_..._secret_..."}
        400: Missing customer/items/shipping_address, malformed items, price mismatch
        404: Unknown variant
    """
    order = await OrderService.create_order(payload, db)
    intent = await PaymentService.create_payment_intent(order, gateway)
    order = await OrderService.attach_payment_intent(order.id, intent.id, db)
    logger.info(f"Order {order.order_number} awaiting payment {intent.id}")
    return success_response({"order": order, "client_secret": intent.client_secret},
                            status_code=status.HTTP_201_CREATED)


@order_router.post("/{order_id}/capture-payment")
async def capture_payment(order_id: str,
                          payload: CapturePaymentRequest,
                          db: Database = Depends(get_db),
                          gateway: PaymentGateway = Depends(get_payment_gateway)):
    """
    Mark the order paid once the payment provider confirms the intent succeeded.

    Returns:
        200: {"order": {...}}
        400: payment_intent_id missing, or payment not completed
        404: Order not found
    """
    order = await PaymentService.capture_payment(order_id, payload.payment_intent_id, db, gateway)
    return success_response({"order": order})


@order_router.get("/{identifier}")
async def get_order(identifier: str, session: AsyncSession = Depends(get_session)):
    """Look up by internal id, then by order number (e.g. RB-1718000000000-K3X9Q)."""
    order, items = await OrderService.get_order(identifier, session)
    return success_response({"order": order, "items": items})


@order_router.get("/{identifier}/history")
async def get_order_history(identifier: str, session: AsyncSession = Depends(get_session)):
    history = await OrderService.get_status_history(identifier, session)
    return success_response({"history": history})
