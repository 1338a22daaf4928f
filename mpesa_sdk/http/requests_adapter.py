"""
Requests-based HTTP adapter (synchronous).
"""

import requests
from typing import Any, Dict, Mapping, Optional, Tuple
from .adapter import HTTPAdapter
from ..exceptions import TransportError, TimeoutError as MpesaTimeoutError


class RequestsAdapter(HTTPAdapter):
    """
    Synchronous HTTP adapter using requests library.

    Each call is a single attempt; failures are reported, never retried.
    """

    def __init__(self, session: Optional[requests.Session] = None):
        """
        Initialize requests adapter.

        Args:
            session: Optional requests.Session instance
        """
        self._external_session = session is not None
        self.session = session or requests.Session()

    def send(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        json: Optional[Any] = None,
        timeout: float = 30,
    ) -> Tuple[int, str, Mapping[str, str]]:
        """
        Send HTTP request using requests library.

        Args:
            method: HTTP method
            url: Request URL
            headers: Request headers
            json: JSON request body
            timeout: Request timeout in seconds

        Returns:
            Tuple of (status_code, response_text, response_headers). Header
            lookups on the returned mapping are case-insensitive.

        Raises:
            TransportError: On network connectivity issues
            TimeoutError: On request timeout
        """
        try:
            response = self.session.request(
                method=method,
                url=url,
                headers=headers,
                json=json,
                timeout=timeout,
            )

            return (
                response.status_code,
                response.text,
                response.headers,
            )

        except requests.exceptions.Timeout as e:
            raise MpesaTimeoutError(f"Request timed out: {e}") from e

        except requests.exceptions.RequestException as e:
            raise TransportError(f"Network request failed: {e}") from e

    def close(self) -> None:
        if not self._external_session:
            self.session.close()
