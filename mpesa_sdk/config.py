"""
Configuration module for M-Pesa SDK.
"""

from typing import Any, Dict, Optional
import os

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator, model_validator

from .environment import Environment
from .exceptions import ConfigurationError
from .models import ClientIdentity


class Config(BaseModel):
    """
    SDK Configuration.

    Supports environment variables for easy configuration (see ``from_env``):
    - MPESA_CONSUMER_KEY: Daraja app consumer key (required)
    - MPESA_CONSUMER_SECRET: Daraja app consumer secret (required)
    - MPESA_INITIATOR_PASSWORD: Initiator password for B2C/B2B/balance calls
    - MPESA_ENVIRONMENT: "sandbox" (default) or "production"
    - MPESA_TIMEOUT: Request timeout in seconds (default: 30)
    - MPESA_SANDBOX_CERTIFICATE_PATH: Sandbox certificate override
    - MPESA_PRODUCTION_CERTIFICATE_PATH: Production certificate override

    Certificate overrides are keyed by environment: an override is only ever
    used for the environment it names, and every other environment keeps its
    bundled certificate.
    """

    model_config = ConfigDict(frozen=True)

    consumer_key: str = Field("", description="Daraja consumer key")
    consumer_secret: SecretStr = Field(SecretStr(""), description="Daraja consumer secret")
    initiator_password: SecretStr = Field(SecretStr(""), description="Initiator password")
    environment: Environment = Field(Environment.SANDBOX, description="Deployment target")
    timeout: float = Field(30.0, gt=0, description="Request timeout in seconds")
    cache_token: bool = Field(False, description="Reuse bearer tokens until they expire")
    certificate_paths: Dict[Environment, str] = Field(
        default_factory=dict,
        description="PEM/DER certificates used instead of the bundled ones, per environment",
    )
    debug: bool = Field(False, description="Enable debug logging")

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v):
        return Environment.parse(v)

    @field_validator("certificate_paths", mode="before")
    @classmethod
    def validate_certificate_paths(cls, v):
        if v is None:
            return {}
        if not isinstance(v, dict):
            raise ConfigurationError("certificate_paths must map environments to files")
        return {Environment.parse(env): path for env, path in v.items() if path}

    @model_validator(mode="after")
    def validate_credentials(self) -> "Config":
        if not self.consumer_key:
            raise ConfigurationError("MPESA_CONSUMER_KEY is required")
        if not self.consumer_secret.get_secret_value():
            raise ConfigurationError("MPESA_CONSUMER_SECRET is required")
        for env, path in self.certificate_paths.items():
            if not os.path.exists(path):
                raise ConfigurationError(f"Certificate file not found for {env.value}: {path}")
        return self

    @classmethod
    def from_env(cls, **overrides: Any) -> "Config":
        """
        Build configuration from ``MPESA_*`` environment variables.

        Args:
            **overrides: Explicit values taking precedence over the environment

        Returns:
            Config instance

        Raises:
            ConfigurationError: If required values are missing or invalid
        """
        values = {
            "consumer_key": os.getenv("MPESA_CONSUMER_KEY", ""),
            "consumer_secret": os.getenv("MPESA_CONSUMER_SECRET", ""),
            "initiator_password": os.getenv("MPESA_INITIATOR_PASSWORD", ""),
            "environment": os.getenv("MPESA_ENVIRONMENT", Environment.SANDBOX.value),
            "certificate_paths": {
                env: os.getenv(f"MPESA_{env.name}_CERTIFICATE_PATH") for env in Environment
            },
        }
        timeout = os.getenv("MPESA_TIMEOUT")
        if timeout:
            try:
                values["timeout"] = float(timeout)
            except ValueError as e:
                raise ConfigurationError(f"Invalid MPESA_TIMEOUT: {timeout!r}") from e
        values.update(overrides)
        return cls(**values)

    @property
    def certificate_path(self) -> Optional[str]:
        """Certificate override for the configured environment, if any."""
        return self.certificate_paths.get(self.environment)

    @property
    def identity(self) -> ClientIdentity:
        return ClientIdentity(
            consumer_key=self.consumer_key,
            consumer_secret=self.consumer_secret,
            environment=self.environment,
            initiator_password=self.initiator_password,
        )
