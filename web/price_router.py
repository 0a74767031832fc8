from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from models.price_quote import PlacementDTO
from services.pricing import PricingService
from web.dependencies import get_session
from web.responses import success_response

price_router = APIRouter(prefix="/api/price", tags=["pricing"])


class PriceQuoteRequest(BaseModel):
    variant_id: str = Field(..., min_length=1)
    method: str = Field(..., min_length=1)
    placements: list[PlacementDTO]
    quantity: int = Field(..., gt=0)


@price_router.post("/quote")
async def calculate_quote(payload: PriceQuoteRequest, session: AsyncSession = Depends(get_session)):
    """
    Quote one decorated order line.

    Request Body:
        {
            "variant_id": "...",
            "method": "screen_print",
            "placements": [{"location": "front_chest", "width": 10, "height": 12, "colors": ["#000000"]}],
            "quantity": 6
        }
    """
    quote = await PricingService.calculate_price(
        payload.variant_id, payload.method, payload.placements, payload.quantity, session
    )
    return success_response(quote)
