"""
Asynchronous M-Pesa (Daraja) API client.
"""

import asyncio
import logging
import time
from typing import Any, Optional, Type

from .auth import acquire_token_async
from .base import (
    ACCOUNT_BALANCE_PATH,
    B2B_PATH,
    B2C_PATH,
    C2B_REGISTER_PATH,
    C2B_SIMULATE_PATH,
    BaseMpesaClient,
    ResponseT,
)
from .config import Config
from .exceptions import TransportError
from .http.aiohttp_adapter import AiohttpAdapter
from .logging_setup import sanitize_for_logging
from .metrics import metrics_request, metrics_transport_failure
from .models import (
    AccountBalanceResponse,
    B2BResponse,
    B2CResponse,
    BearerToken,
    C2BRegisterResponse,
    C2BSimulateResponse,
    CommandId,
    IdentifierType,
    RequestPayload,
    ResponseType,
)

logger = logging.getLogger("mpesa_sdk.async")


class MpesaAsyncClient(BaseMpesaClient):
    """
    Asynchronous Daraja client.

    Same operations as ``MpesaClient``, exposed as coroutines. Concurrent
    calls are independent and complete in no particular order.

    Examples:
        >>> import asyncio
        >>> from mpesa_sdk import Config, MpesaAsyncClient
        >>>
        >>> async def main():
        ...     async with MpesaAsyncClient(Config.from_env()) as client:
        ...         response = await client.c2b_simulate(
        ...             amount=1, msisdn="254708374149", short_code="600496"
        ...         )
        ...         print(response.response_description)
        >>>
        >>> asyncio.run(main())
    """

    def __init__(self, config: Config, http_adapter: Optional[Any] = None):
        """
        Initialize async M-Pesa client.

        Args:
            config: SDK configuration
            http_adapter: Optional adapter with a coroutine ``send``; its
                lifecycle stays with the caller
        """
        super().__init__(config)
        self._owns_http = http_adapter is None
        self.http = http_adapter or AiohttpAdapter()

    async def __aenter__(self) -> "MpesaAsyncClient":
        """Context manager entry."""
        if self._owns_http:
            await self.http.__aenter__()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit."""
        await self.close()

    async def close(self) -> None:
        if self._owns_http:
            await self.http.close()

    async def token(self) -> BearerToken:
        """Acquire a bearer token, from the cache when enabled and still valid."""
        cached = self._cached_token()
        if cached is not None:
            return cached

        token = await acquire_token_async(self.identity, self.http, self.config.timeout)
        self._remember_token(token)
        return token

    async def _security_credential(self) -> str:
        """Client credential, derived off the event loop."""
        return await asyncio.to_thread(self.security_credential)

    async def _post(
        self, endpoint: str, path: str, payload: RequestPayload, model: Type[ResponseT]
    ) -> ResponseT:
        token = await self.token()
        url = self._url(path)
        body = payload.to_wire()

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Async POST %s: %s", url, sanitize_for_logging(body))

        start = time.monotonic()
        try:
            status, text, headers = await self.http.send(
                "POST", url, self._headers(token), body, self.config.timeout
            )
        except TransportError as e:
            metrics_transport_failure(endpoint, e, time.monotonic() - start)
            logger.error("%s request failed: %s", endpoint, e)
            raise

        metrics_request(endpoint, status, time.monotonic() - start)
        logger.debug("Async Response %d %s", status, text[:1000] if text else "")

        return self._handle_response(endpoint, status, text, headers, model)

    async def b2c(
        self,
        initiator_name: str,
        command_id: CommandId,
        amount: int,
        party_a: str,
        party_b: str,
        remarks: str,
        queue_timeout_url: str,
        result_url: str,
        occasion: str = "",
    ) -> B2CResponse:
        """Send a Business to Customer payment. See ``MpesaClient.b2c``."""
        payload = self._b2c_payload(
            await self._security_credential(),
            initiator_name,
            command_id,
            amount,
            party_a,
            party_b,
            remarks,
            queue_timeout_url,
            result_url,
            occasion,
        )
        return await self._post("b2c", B2C_PATH, payload, B2CResponse)

    async def b2b(
        self,
        initiator_name: str,
        command_id: CommandId,
        amount: int,
        party_a: str,
        party_b: str,
        remarks: str,
        queue_timeout_url: str,
        result_url: str,
        account_reference: str,
        sender_identifier_type: IdentifierType = IdentifierType.SHORTCODE,
        receiver_identifier_type: IdentifierType = IdentifierType.SHORTCODE,
    ) -> B2BResponse:
        """Send a Business to Business transfer. See ``MpesaClient.b2b``."""
        payload = self._b2b_payload(
            await self._security_credential(),
            initiator_name,
            command_id,
            amount,
            party_a,
            sender_identifier_type,
            party_b,
            receiver_identifier_type,
            remarks,
            queue_timeout_url,
            result_url,
            account_reference,
        )
        return await self._post("b2b", B2B_PATH, payload, B2BResponse)

    async def c2b_register(
        self,
        validation_url: str,
        confirmation_url: str,
        short_code: str,
        response_type: ResponseType = ResponseType.COMPLETED,
    ) -> C2BRegisterResponse:
        payload = self._c2b_register_payload(
            validation_url, confirmation_url, response_type, short_code
        )
        return await self._post(
            "c2b_register", C2B_REGISTER_PATH, payload, C2BRegisterResponse
        )

    async def c2b_simulate(
        self,
        amount: int,
        msisdn: str,
        short_code: str,
        bill_ref_number: str = "",
        command_id: CommandId = CommandId.CUSTOMER_PAY_BILL_ONLINE,
    ) -> C2BSimulateResponse:
        payload = self._c2b_simulate_payload(
            command_id, amount, msisdn, bill_ref_number, short_code
        )
        return await self._post(
            "c2b_simulate", C2B_SIMULATE_PATH, payload, C2BSimulateResponse
        )

    async def account_balance(
        self,
        party_a: str,
        remarks: str,
        initiator_name: str,
        queue_timeout_url: str,
        result_url: str,
    ) -> AccountBalanceResponse:
        payload = self._account_balance_payload(
            await self._security_credential(),
            party_a,
            remarks,
            initiator_name,
            queue_timeout_url,
            result_url,
        )
        return await self._post(
            "account_balance", ACCOUNT_BALANCE_PATH, payload, AccountBalanceResponse
        )
