"""
Daraja deployment targets.
"""

from enum import Enum
from typing import Union

from .exceptions import ConfigurationError


class Environment(str, Enum):
    """
    Deployment target.

    Each member pins the API base URL and the public certificate used to
    encrypt the initiator password. No other targets exist.
    """

    SANDBOX = "sandbox"
    PRODUCTION = "production"

    @property
    def base_url(self) -> str:
        if self is Environment.PRODUCTION:
            return "https://api.safaricom.co.ke"
        return "https://sandbox.safaricom.co.ke"

    @property
    def certificate_file(self) -> str:
        """Name of the bundled certificate under ``mpesa_sdk/certificates``."""
        if self is Environment.PRODUCTION:
            return "production.cer"
        return "sandbox.cer"

    @classmethod
    def parse(cls, value: Union["Environment", str]) -> "Environment":
        """
        Resolve an environment from a member or its name.

        Args:
            value: Environment member, or "sandbox"/"production" (any case)

        Returns:
            Environment member

        Raises:
            ConfigurationError: If the value names no environment
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise ConfigurationError(
            f"Unknown environment {value!r}; expected one of "
            f"{', '.join(e.value for e in cls)}"
        )
