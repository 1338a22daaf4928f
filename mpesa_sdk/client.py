"""
Synchronous M-Pesa (Daraja) API client.
"""

import logging
import time
from typing import Optional, Type

from .auth import acquire_token
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
from .http.adapter import HTTPAdapter
from .http.requests_adapter import RequestsAdapter
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
    ResponseType,
    RequestPayload,
)

logger = logging.getLogger("mpesa_sdk.client")


class MpesaClient(BaseMpesaClient):
    """
    Synchronous Daraja client.

    Every operation is one independent request/response: derive the
    security credential when the operation needs it, acquire a bearer
    token, POST the payload and parse the acknowledgement. A rejected
    ``ResponseCode`` is returned to the caller, never raised.

    The client is safe to share between threads.

    Examples:
        >>> config = Config.from_env()
        >>> client = MpesaClient(config)
        >>> response = client.b2c(
        ...     initiator_name="testapi",
        ...     command_id=CommandId.BUSINESS_PAYMENT,
        ...     amount=1000,
        ...     party_a="600496",
        ...     party_b="254708374149",
        ...     remarks="Salary",
        ...     queue_timeout_url="https://example.com/timeout",
        ...     result_url="https://example.com/result",
        ... )
        >>> response.is_accepted
        True
    """

    def __init__(self, config: Config, http_adapter: Optional[HTTPAdapter] = None):
        """
        Initialize M-Pesa client.

        Args:
            config: SDK configuration
            http_adapter: Optional custom HTTP adapter
        """
        super().__init__(config)
        self.http = http_adapter or RequestsAdapter()

    def __enter__(self) -> "MpesaClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        self.http.close()

    def token(self) -> BearerToken:
        """
        Acquire a bearer token.

        Served from the token cache when ``Config.cache_token`` is set and
        the cached token is still valid.

        Raises:
            AuthError: If the token endpoint call fails
        """
        cached = self._cached_token()
        if cached is not None:
            return cached

        token = acquire_token(self.identity, self.http, self.config.timeout)
        self._remember_token(token)
        return token

    def _post(
        self, endpoint: str, path: str, payload: RequestPayload, model: Type[ResponseT]
    ) -> ResponseT:
        token = self.token()
        url = self._url(path)
        body = payload.to_wire()

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("POST %s: %s", url, sanitize_for_logging(body))

        start = time.monotonic()
        try:
            status, text, headers = self.http.send(
                "POST", url, self._headers(token), body, self.config.timeout
            )
        except TransportError as e:
            metrics_transport_failure(endpoint, e, time.monotonic() - start)
            logger.error("%s request failed: %s", endpoint, e)
            raise

        metrics_request(endpoint, status, time.monotonic() - start)
        logger.debug("Response %d %s", status, text[:1000] if text else "")

        return self._handle_response(endpoint, status, text, headers, model)

    # ===================================================================
    # B2C / B2B
    # ===================================================================

    def b2c(
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
        """
        Send a Business to Customer payment.

        Args:
            initiator_name: API operator username
            command_id: SalaryPayment, BusinessPayment or PromotionPayment
            amount: Amount in whole shillings
            party_a: Sending shortcode
            party_b: Receiving MSISDN
            remarks: Free-text comment
            queue_timeout_url: Callback for timed-out requests
            result_url: Callback receiving the final result
            occasion: Optional free-text comment

        Returns:
            B2C acknowledgement

        Raises:
            CryptoError: If the security credential cannot be derived
            AuthError: If no token can be acquired
            TransportError: On network failure
            HttpStatusError: On non-2xx responses
            DeserializationError: On malformed responses
        """
        payload = self._b2c_payload(
            self.security_credential(),
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
        return self._post("b2c", B2C_PATH, payload, B2CResponse)

    def b2b(
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
        """
        Send a Business to Business transfer.

        Args:
            initiator_name: API operator username
            command_id: e.g. BusinessPayBill, BusinessToBusinessTransfer
            amount: Amount in whole shillings
            party_a: Sending shortcode
            party_b: Receiving shortcode
            remarks: Free-text comment
            queue_timeout_url: Callback for timed-out requests
            result_url: Callback receiving the final result
            account_reference: Account number for paybill transfers
            sender_identifier_type: Identifier scheme of party_a
            receiver_identifier_type: Identifier scheme of party_b

        Returns:
            B2B acknowledgement
        """
        payload = self._b2b_payload(
            self.security_credential(),
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
        return self._post("b2b", B2B_PATH, payload, B2BResponse)

    # ===================================================================
    # C2B
    # ===================================================================

    def c2b_register(
        self,
        validation_url: str,
        confirmation_url: str,
        short_code: str,
        response_type: ResponseType = ResponseType.COMPLETED,
    ) -> C2BRegisterResponse:
        """
        Register confirmation and validation URLs for a shortcode.

        ``response_type`` decides what M-Pesa does when the validation URL
        cannot be reached.
        """
        payload = self._c2b_register_payload(
            validation_url, confirmation_url, response_type, short_code
        )
        return self._post("c2b_register", C2B_REGISTER_PATH, payload, C2BRegisterResponse)

    def c2b_simulate(
        self,
        amount: int,
        msisdn: str,
        short_code: str,
        bill_ref_number: str = "",
        command_id: CommandId = CommandId.CUSTOMER_PAY_BILL_ONLINE,
    ) -> C2BSimulateResponse:
        """Simulate a customer payment to a shortcode (sandbox only)."""
        payload = self._c2b_simulate_payload(
            command_id, amount, msisdn, bill_ref_number, short_code
        )
        return self._post("c2b_simulate", C2B_SIMULATE_PATH, payload, C2BSimulateResponse)

    # ===================================================================
    # Account balance
    # ===================================================================

    def account_balance(
        self,
        party_a: str,
        remarks: str,
        initiator_name: str,
        queue_timeout_url: str,
        result_url: str,
    ) -> AccountBalanceResponse:
        """
        Query the balance of a shortcode.

        The balance is delivered asynchronously to ``result_url``; the
        returned value only acknowledges the query.
        """
        payload = self._account_balance_payload(
            self.security_credential(),
            party_a,
            remarks,
            initiator_name,
            queue_timeout_url,
            result_url,
        )
        return self._post(
            "account_balance", ACCOUNT_BALANCE_PATH, payload, AccountBalanceResponse
        )
