"""
Admin endpoints (bearer token, see utils/permission_utils.py).

Payment status is deliberately not writable here: it only changes through
provider-verified capture or webhook.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from db import Database
from enums.payment_status import PaymentStatus
from enums.production_status import ProductionStatus
from services.order import OrderService
from services.order_status import OrderStatusService
from utils.permission_utils import require_admin
from web.dependencies import get_db, get_session
from web.responses import success_response

admin_router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])


class UpdateOrderStatusRequest(BaseModel):
    status: ProductionStatus
    tracking_number: str | None = None
    notes: str | None = None


class UpdateItemStatusRequest(BaseModel):
    status: ProductionStatus
    notes: str | None = None


@admin_router.get("/orders")
async def get_all_orders(payment_status: PaymentStatus | None = None,
                         production_status: ProductionStatus | None = None,
                         limit: int | None = None,
                         offset: int = 0,
                         session: AsyncSession = Depends(get_session)):
    orders = await OrderService.list_orders(
        session,
        payment_status=payment_status,
        production_status=production_status,
        limit=limit,
        offset=offset
    )
    return success_response({"orders": orders})


@admin_router.put("/orders/{order_id}/status")
async def update_order_status(order_id: str,
                              payload: UpdateOrderStatusRequest,
                              db: Database = Depends(get_db)):
    """
    Advance production status; "shipped" stamps shipped_at, tracking_number is kept once set.

    Request Body:
        {"status": "shipped", "tracking_number": "1Z999AA10123456784"}
    """
    order = await OrderStatusService.update_order_production_status(
        order_id, payload.status, db, tracking_number=payload.tracking_number, notes=payload.notes
    )
    return success_response({"order": order})


@admin_router.put("/order-items/{item_id}/status")
async def update_order_item_status(item_id: str,
                                   payload: UpdateItemStatusRequest,
                                   db: Database = Depends(get_db)):
    item = await OrderStatusService.update_item_production_status(item_id, payload.status, db, notes=payload.notes)
    return success_response({"item": item})
