"""
FastAPI dependencies exposing the process-wide resources created in app.py.
"""

from typing import AsyncIterator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from db import Database
from services.payment_gateway import PaymentGateway


def get_db(request: Request) -> Database:
    return request.app.state.db


def get_payment_gateway(request: Request) -> PaymentGateway:
    return request.app.state.payment_gateway


async def get_session(request: Request) -> AsyncIterator[AsyncSession]:
    """Read-only session for one request. Writes go through services that own their transaction."""
    async with request.app.state.db.session() as session:
        yield session
