"""
Base HTTP adapter interface.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional, Tuple


class HTTPAdapter(ABC):
    """
    Abstract base class for synchronous HTTP adapters.

    Allows pluggable HTTP clients (and test doubles) behind the client.
    """

    @abstractmethod
    def send(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        json: Optional[Any] = None,
        timeout: float = 30,
    ) -> Tuple[int, str, Mapping[str, str]]:
        """
        Send HTTP request.

        Args:
            method: HTTP method (GET, POST)
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
        raise NotImplementedError

    def close(self) -> None:
        """Release underlying resources."""
