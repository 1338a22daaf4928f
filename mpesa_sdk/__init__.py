"""
M-Pesa Python SDK

Typed client for the Safaricom M-Pesa (Daraja) API: B2C, B2B, C2B URL
registration and simulation, and account balance queries.
"""

from mpesa_sdk.__version__ import __version__
from mpesa_sdk.config import Config
from mpesa_sdk.environment import Environment
from mpesa_sdk.client import MpesaClient
from mpesa_sdk.async_client import MpesaAsyncClient
from mpesa_sdk.auth import acquire_token, TokenCache
from mpesa_sdk.security import derive_security_credential
from mpesa_sdk.models import (
    ClientIdentity,
    BearerToken,
    CommandId,
    IdentifierType,
    ResponseType,
    B2CPayload,
    B2BPayload,
    C2BRegisterPayload,
    C2BSimulatePayload,
    AccountBalancePayload,
    B2CResponse,
    B2BResponse,
    C2BRegisterResponse,
    C2BSimulateResponse,
    AccountBalanceResponse,
)
from mpesa_sdk.exceptions import (
    MpesaError,
    ConfigurationError,
    TransportError,
    TimeoutError,
    HttpStatusError,
    DeserializationError,
    AuthError,
    CryptoError,
)

__all__ = [
    "Config",
    "Environment",
    "MpesaClient",
    "MpesaAsyncClient",
    "acquire_token",
    "TokenCache",
    "derive_security_credential",
    "ClientIdentity",
    "BearerToken",
    "CommandId",
    "IdentifierType",
    "ResponseType",
    "B2CPayload",
    "B2BPayload",
    "C2BRegisterPayload",
    "C2BSimulatePayload",
    "AccountBalancePayload",
    "B2CResponse",
    "B2BResponse",
    "C2BRegisterResponse",
    "C2BSimulateResponse",
    "AccountBalanceResponse",
    "MpesaError",
    "ConfigurationError",
    "TransportError",
    "TimeoutError",
    "HttpStatusError",
    "DeserializationError",
    "AuthError",
    "CryptoError",
    "__version__",
]
