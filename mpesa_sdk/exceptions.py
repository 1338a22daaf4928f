"""
M-Pesa SDK Exceptions
"""

from typing import Optional, Dict, Any


class MpesaError(Exception):
    """Base exception for M-Pesa SDK"""

    pass


class ConfigurationError(MpesaError):
    """SDK configuration error"""

    pass


class TransportError(MpesaError):
    """Network/connectivity error (connection refused, DNS, TLS)"""

    pass


class TimeoutError(TransportError):
    """Request timeout error"""

    pass


class HttpStatusError(MpesaError):
    """
    Non-2xx HTTP response.

    Raised when Daraja answers with an error status. The decoded body, when
    there is one, is kept on ``payload``.
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        payload: Optional[Dict[str, Any]] = None,
        request_id: Optional[str] = None,
    ):
        self.status_code = status_code
        self.message = message
        self.payload = payload or {}
        self.request_id = request_id
        super().__init__(f"HttpStatusError {status_code}: {message}")

    def __str__(self) -> str:
        parts = [f"[{self.status_code}] {self.message}"]
        if self.request_id:
            parts.append(f"(request_id: {self.request_id})")
        return " ".join(parts)


class DeserializationError(MpesaError):
    """Response body is not JSON or does not match the expected shape"""

    def __init__(self, message: str, body: Optional[str] = None):
        super().__init__(message)
        self.body = body


class AuthError(MpesaError):
    """
    OAuth token acquisition failure.

    Wraps transport, status and decoding failures of the token endpoint;
    the underlying exception is chained as ``__cause__``.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class CryptoError(MpesaError):
    """Security credential derivation failure"""

    pass
