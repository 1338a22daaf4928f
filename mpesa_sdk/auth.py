"""
OAuth token acquisition.

Daraja issues short-lived bearer tokens in exchange for the app's consumer
key and secret, sent as HTTP Basic credentials.
"""

import base64
import json
import logging
import threading
import time
from typing import Dict, Optional, Tuple

from pydantic import ValidationError

from .environment import Environment
from .exceptions import AuthError, TransportError
from .http.adapter import HTTPAdapter
from .metrics import metrics_request, metrics_transport_failure
from .models import BearerToken, ClientIdentity

logger = logging.getLogger("mpesa_sdk.auth")

TOKEN_PATH = "/oauth/v1/generate?grant_type=client_credentials"


def token_url(environment: Environment) -> str:
    return environment.base_url + TOKEN_PATH


def basic_auth_headers(identity: ClientIdentity) -> Dict[str, str]:
    raw = f"{identity.consumer_key}:{identity.consumer_secret.get_secret_value()}"
    encoded = base64.b64encode(raw.encode("utf-8")).decode("ascii")
    return {
        "Authorization": f"Basic {encoded}",
        "Accept": "application/json",
    }


def parse_token_response(status: int, text: str) -> BearerToken:
    """
    Turn a token endpoint reply into a BearerToken.

    Args:
        status: HTTP status code
        text: Raw response body

    Returns:
        BearerToken

    Raises:
        AuthError: On non-2xx status, malformed JSON or missing token
    """
    if not (200 <= status < 300):
        raise AuthError(f"Token endpoint returned {status}", status_code=status)

    try:
        body = json.loads(text) if text else None
    except ValueError as e:
        raise AuthError(f"Token response is not JSON: {e}", status_code=status) from e

    if not isinstance(body, dict):
        raise AuthError("Token response is not a JSON object", status_code=status)

    try:
        return BearerToken(
            access_token=body.get("access_token") or "",
            expires_in=body.get("expires_in") or 3600,
        )
    except ValidationError as e:
        raise AuthError("Token response has no usable access_token", status_code=status) from e


def acquire_token(
    identity: ClientIdentity, http: HTTPAdapter, timeout: float = 30
) -> BearerToken:
    """
    Exchange consumer key/secret for a bearer token.

    Exactly one GET is sent per call; nothing is cached or retried here.

    Raises:
        AuthError: On any failure, chained to the underlying cause
    """
    url = token_url(identity.environment)
    logger.debug("GET %s", url)
    start = time.monotonic()

    try:
        status, text, _ = http.send("GET", url, basic_auth_headers(identity), None, timeout)
    except TransportError as e:
        metrics_transport_failure("oauth", e, time.monotonic() - start)
        raise AuthError(f"Token request failed: {e}") from e

    metrics_request("oauth", status, time.monotonic() - start)
    return parse_token_response(status, text)


async def acquire_token_async(identity: ClientIdentity, http, timeout: float = 30) -> BearerToken:
    """Coroutine variant of ``acquire_token`` for async adapters."""
    url = token_url(identity.environment)
    logger.debug("Async GET %s", url)
    start = time.monotonic()

    try:
        status, text, _ = await http.send(
            "GET", url, basic_auth_headers(identity), None, timeout
        )
    except TransportError as e:
        metrics_transport_failure("oauth", e, time.monotonic() - start)
        raise AuthError(f"Token request failed: {e}") from e

    metrics_request("oauth", status, time.monotonic() - start)
    return parse_token_response(status, text)


class TokenCache:
    """
    Bearer tokens keyed by consumer key and environment.

    A token is served only while it is more than ``skew`` seconds away
    from its reported expiry.
    """

    def __init__(self, skew: float = 60.0):
        self.skew = skew
        self._tokens: Dict[Tuple[str, Environment], BearerToken] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(identity: ClientIdentity) -> Tuple[str, Environment]:
        return identity.consumer_key, identity.environment

    def get(self, identity: ClientIdentity) -> Optional[BearerToken]:
        with self._lock:
            token = self._tokens.get(self._key(identity))
            if token is None:
                return None
            if token.is_expired(self.skew):
                del self._tokens[self._key(identity)]
                return None
            return token

    def put(self, identity: ClientIdentity, token: BearerToken) -> None:
        with self._lock:
            self._tokens[self._key(identity)] = token

    def clear(self) -> None:
        with self._lock:
            self._tokens.clear()
