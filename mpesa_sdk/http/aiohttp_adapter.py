"""
Aiohttp-based HTTP adapter (asynchronous).
"""

import aiohttp
import asyncio
from typing import Any, Dict, Mapping, Optional, Tuple
from ..exceptions import TransportError, TimeoutError as MpesaTimeoutError


def decode_body(body: bytes, charset: Optional[str]) -> str:
    """Decode a response body, replacing undecodable bytes."""
    try:
        return body.decode(charset or "utf-8", errors="replace")
    except LookupError:
        return body.decode("utf-8", errors="replace")


class AiohttpAdapter:
    """
    Asynchronous HTTP adapter using aiohttp library.

    Mirrors ``HTTPAdapter.send`` as a coroutine. One attempt per call.
    """

    def __init__(self, session: Optional[aiohttp.ClientSession] = None):
        """
        Initialize aiohttp adapter.

        Args:
            session: Optional aiohttp.ClientSession instance
        """
        self._external_session = session is not None
        self.session = session

    async def __aenter__(self) -> "AiohttpAdapter":
        """Context manager entry."""
        if self.session is None:
            self.session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit."""
        await self.close()

    async def send(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        json: Optional[Any] = None,
        timeout: float = 30,
    ) -> Tuple[int, str, Mapping[str, str]]:
        """
        Send HTTP request using aiohttp library.

        Args:
            method: HTTP method
            url: Request URL
            headers: Request headers
            json: JSON request body
            timeout: Request timeout in seconds

        Returns:
            Tuple of (status_code, response_text, response_headers). Headers
            keep aiohttp's case-insensitive mapping.

        Raises:
            TransportError: On network connectivity issues
            TimeoutError: On request timeout
        """
        if self.session is None:
            raise RuntimeError("Session not initialized. Use 'async with' context.")

        timeout_obj = aiohttp.ClientTimeout(total=timeout)

        try:
            async with self.session.request(
                method=method,
                url=url,
                headers=headers,
                json=json,
                timeout=timeout_obj,
            ) as response:
                body = await response.read()
                return (
                    response.status,
                    decode_body(body, response.charset),
                    response.headers,
                )

        except asyncio.TimeoutError as e:
            raise MpesaTimeoutError(f"Request timed out: {e}") from e

        except aiohttp.ClientError as e:
            raise TransportError(f"Network request failed: {e}") from e

    async def close(self) -> None:
        """Close the session."""
        if not self._external_session and self.session:
            await self.session.close()
            self.session = None
