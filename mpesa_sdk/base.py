"""
Request building shared by the sync and async clients.
"""

import json
import logging
import threading
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

from pydantic import ValidationError

from .__version__ import __version__
from .auth import TokenCache
from .config import Config
from .exceptions import DeserializationError, HttpStatusError
from .logging_setup import setup_logging
from .metrics import metrics_rejection
from .models import (
    AccountBalancePayload,
    B2BPayload,
    B2CPayload,
    BearerToken,
    C2BRegisterPayload,
    C2BSimulatePayload,
    CommandId,
    DarajaResponse,
    IdentifierType,
    ResponseType,
)
from .security import derive_security_credential

logger = logging.getLogger("mpesa_sdk.client")

B2C_PATH = "/mpesa/b2c/v1/paymentrequest"
B2B_PATH = "/mpesa/b2b/v1/paymentrequest"
C2B_REGISTER_PATH = "/mpesa/c2b/v1/registerurl"
C2B_SIMULATE_PATH = "/mpesa/c2b/v1/simulate"
ACCOUNT_BALANCE_PATH = "/mpesa/accountbalance/v1/query"

ResponseT = TypeVar("ResponseT", bound=DarajaResponse)


class BaseMpesaClient:
    """
    Holds the client identity and builds Daraja requests.

    Subclasses only add the I/O: token acquisition and POSTing the payloads
    built here.
    """

    def __init__(self, config: Config):
        self.config = config
        self.identity = config.identity
        self.base_url = self.identity.environment.base_url
        self._token_cache = TokenCache() if config.cache_token else None
        self._credential: Optional[str] = None
        self._credential_lock = threading.Lock()

        if config.debug:
            setup_logging(debug=True)

        logger.debug(
            "M-Pesa SDK %s initialized for %s", __version__, self.identity.environment.value
        )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(environment={self.identity.environment.value!r}, "
            f"consumer_key={self.identity.consumer_key!r})"
        )

    # ===================================================================
    # Credentials
    # ===================================================================

    def security_credential(self) -> str:
        """
        Encrypted initiator password for privileged operations.

        Derived on first use and reused for the lifetime of the client.

        Raises:
            CryptoError: If the credential cannot be derived
        """
        with self._credential_lock:
            if self._credential is None:
                self._credential = derive_security_credential(
                    self.identity.initiator_password.get_secret_value(),
                    self.identity.environment,
                    self.config.certificate_path,
                )
            return self._credential

    def _cached_token(self) -> Optional[BearerToken]:
        if self._token_cache is None:
            return None
        return self._token_cache.get(self.identity)

    def _remember_token(self, token: BearerToken) -> None:
        if self._token_cache is not None:
            self._token_cache.put(self.identity, token)

    # ===================================================================
    # Wire helpers
    # ===================================================================

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    @staticmethod
    def _headers(token: BearerToken) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {token.access_token}",
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": f"mpesa-python-sdk/{__version__}",
        }

    @staticmethod
    def _request_id(headers: Mapping[str, str]) -> Optional[str]:
        for name, value in headers.items():
            if name.lower() == "x-request-id":
                return value
        return None

    def _handle_response(
        self,
        endpoint: str,
        status: int,
        text: str,
        headers: Mapping[str, str],
        model: Type[ResponseT],
    ) -> ResponseT:
        """Parse a reply and log a rejected acknowledgement."""
        response = self._parse_response(status, text, headers, model)
        if not response.is_accepted:
            metrics_rejection(endpoint, response.response_code)
            logger.info(
                "%s rejected: %s %s",
                endpoint,
                response.response_code,
                response.response_description,
            )
        return response

    @classmethod
    def _parse_response(
        cls,
        status: int,
        text: str,
        headers: Mapping[str, str],
        model: Type[ResponseT],
    ) -> ResponseT:
        """
        Decode a Daraja reply.

        Raises:
            HttpStatusError: If the status is not 2xx
            DeserializationError: If the body is not a JSON object of the expected shape
        """
        try:
            body: Any = json.loads(text) if text else None
        except ValueError as e:
            if not (200 <= status < 300):
                raise HttpStatusError(
                    status_code=status,
                    message=f"Daraja returned {status}",
                    payload={"raw": text},
                    request_id=cls._request_id(headers),
                ) from e
            raise DeserializationError(f"Response is not valid JSON: {e}", body=text) from e

        if not (200 <= status < 300):
            payload = body if isinstance(body, dict) else {"raw": text}
            message = (
                payload.get("errorMessage")
                or payload.get("ResponseDescription")
                or f"Daraja returned {status}"
            )
            raise HttpStatusError(
                status_code=status,
                message=message,
                payload=payload,
                request_id=payload.get("requestId") or cls._request_id(headers),
            )

        if not isinstance(body, dict):
            raise DeserializationError("Response is not a JSON object", body=text)

        try:
            return model.model_validate(body)
        except ValidationError as e:
            raise DeserializationError(
                f"Response does not match {model.__name__}: {e}", body=text
            ) from e

    # ===================================================================
    # Payload builders
    # ===================================================================

    @staticmethod
    def _b2c_payload(
        security_credential: str,
        initiator_name: str,
        command_id: CommandId,
        amount: int,
        party_a: str,
        party_b: str,
        remarks: str,
        queue_timeout_url: str,
        result_url: str,
        occasion: str,
    ) -> B2CPayload:
        return B2CPayload(
            initiator_name=initiator_name,
            security_credential=security_credential,
            command_id=command_id,
            amount=amount,
            party_a=party_a,
            party_b=party_b,
            remarks=remarks,
            queue_timeout_url=queue_timeout_url,
            result_url=result_url,
            occasion=occasion,
        )

    @staticmethod
    def _b2b_payload(
        security_credential: str,
        initiator_name: str,
        command_id: CommandId,
        amount: int,
        party_a: str,
        sender_identifier_type: IdentifierType,
        party_b: str,
        receiver_identifier_type: IdentifierType,
        remarks: str,
        queue_timeout_url: str,
        result_url: str,
        account_reference: str,
    ) -> B2BPayload:
        return B2BPayload(
            initiator=initiator_name,
            security_credential=security_credential,
            command_id=command_id,
            sender_identifier_type=sender_identifier_type,
            receiver_identifier_type=receiver_identifier_type,
            amount=amount,
            party_a=party_a,
            party_b=party_b,
            account_reference=account_reference,
            remarks=remarks,
            queue_timeout_url=queue_timeout_url,
            result_url=result_url,
        )

    @staticmethod
    def _c2b_register_payload(
        validation_url: str,
        confirmation_url: str,
        response_type: ResponseType,
        short_code: str,
    ) -> C2BRegisterPayload:
        return C2BRegisterPayload(
            validation_url=validation_url,
            confirmation_url=confirmation_url,
            response_type=response_type,
            short_code=short_code,
        )

    @staticmethod
    def _c2b_simulate_payload(
        command_id: CommandId,
        amount: int,
        msisdn: str,
        bill_ref_number: str,
        short_code: str,
    ) -> C2BSimulatePayload:
        return C2BSimulatePayload(
            command_id=command_id,
            amount=amount,
            msisdn=msisdn,
            bill_ref_number=bill_ref_number,
            short_code=short_code,
        )

    @staticmethod
    def _account_balance_payload(
        security_credential: str,
        party_a: str,
        remarks: str,
        initiator_name: str,
        queue_timeout_url: str,
        result_url: str,
    ) -> AccountBalancePayload:
        return AccountBalancePayload(
            party_a=party_a,
            remarks=remarks,
            initiator=initiator_name,
            security_credential=security_credential,
            queue_timeout_url=queue_timeout_url,
            result_url=result_url,
        )
