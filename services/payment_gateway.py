"""
Payment Gateway Adapter.

Narrow interface to the payment provider: create a charge intent and read
back its current status. Everything else in the codebase talks to
PaymentGateway, never to the provider directly, so tests can substitute an
in-memory gateway.
"""

import asyncio
import logging
from abc import ABC, abstractmethod

import aiohttp
from pydantic import BaseModel, Field, ValidationError

import config
from exceptions.payment import PaymentGatewayException

logger = logging.getLogger(__name__)


class PaymentIntentDTO(BaseModel):
    """Provider-side charge intent. amount is in minor units (cents)."""
    id: str
    status: str
    amount: int | None = None
    currency: str | None = None
    client_secret: str | None = None
    metadata: dict[str, str] = Field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status == "succeeded"


class PaymentGateway(ABC):

    @abstractmethod
    async def create_intent(self, amount: int, currency: str, metadata: dict[str, str]) -> PaymentIntentDTO:
        """
        Create a charge intent.

        Raises:
            PaymentGatewayException: If the provider could not be reached or refused the request
        """

    @abstractmethod
    async def retrieve_intent(self, payment_intent_id: str) -> PaymentIntentDTO:
        """
        Read the current state of an intent from the provider.

        Raises:
            PaymentGatewayException: If the provider could not be reached or refused the request
        """

    async def close(self) -> None:
        pass


class StripePaymentGateway(PaymentGateway):
    """
    Stripe REST API over aiohttp.

    Requests are form-encoded (nested keys as metadata[order_id]) and
    authenticated with the secret key as bearer token.
    """

    def __init__(self,
                 secret_key: str | None = None,
                 api_url: str | None = None,
                 timeout_seconds: int | None = None):
        self.secret_key = secret_key if secret_key is not None else config.STRIPE_SECRET_KEY
        self.api_url = (api_url or config.STRIPE_API_URL).rstrip("/")
        self.timeout_seconds = timeout_seconds or config.PAYMENT_GATEWAY_TIMEOUT_SECONDS
        self._session: aiohttp.ClientSession | None = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
                headers={"Authorization": f"Bearer {self.secret_key}"}
            )
        return self._session

    async def _request(self, method: str, path: str, operation: str, data: dict | None = None) -> dict:
        session = self._get_session()
        try:
            async with session.request(method, f"{self.api_url}{path}", data=data) as response:
                body = await response.json(content_type=None)
                if response.status >= 400:
                    error = body.get("error", {}) if isinstance(body, dict) else {}
                    reason = error.get("message") or f"HTTP {response.status}"
                    logger.error(f"Stripe {operation} failed with HTTP {response.status}: {reason}")
                    raise PaymentGatewayException(operation, reason)
                return body
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error(f"Stripe {operation} request error: {type(e).__name__}: {e}")
            raise PaymentGatewayException(operation, str(e) or type(e).__name__)

    @staticmethod
    def _parse_intent(body: dict, operation: str) -> PaymentIntentDTO:
        try:
            return PaymentIntentDTO.model_validate(body)
        except ValidationError as e:
            raise PaymentGatewayException(operation, f"malformed intent: {e.errors()[0]['msg']}")

    async def create_intent(self, amount: int, currency: str, metadata: dict[str, str]) -> PaymentIntentDTO:
        data = {
            "amount": str(amount),
            "currency": currency,
            "automatic_payment_methods[enabled]": "true",
        }
        for key, value in metadata.items():
            data[f"metadata[{key}]"] = str(value)

        body = await self._request("POST", "/payment_intents", "create_intent", data=data)
        intent = self._parse_intent(body, "create_intent")
        logger.info(f"Payment intent {intent.id} created for {amount} {currency}")
        return intent

    async def retrieve_intent(self, payment_intent_id: str) -> PaymentIntentDTO:
        if not payment_intent_id or "/" in payment_intent_id:
            raise PaymentGatewayException("retrieve_intent", "malformed payment intent id")
        body = await self._request("GET", f"/payment_intents/{payment_intent_id}", "retrieve_intent")
        return self._parse_intent(body, "retrieve_intent")

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
