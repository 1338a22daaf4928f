"""
Security credential derivation.

Daraja requires the initiator password of B2C, B2B and account balance
requests to be RSA-encrypted (PKCS#1 v1.5) with the public key of the
environment's certificate and base64-encoded.
"""

import base64
import logging
from importlib import resources
from typing import Optional

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from .environment import Environment
from .exceptions import CryptoError

logger = logging.getLogger("mpesa_sdk.security")


def bundled_certificates():
    """Directory of the certificates shipped with the package."""
    return resources.files("mpesa_sdk").joinpath("certificates")


def _read_certificate_bytes(environment: Environment, path: Optional[str]) -> bytes:
    if path:
        with open(path, "rb") as fh:
            return fh.read()
    return bundled_certificates().joinpath(environment.certificate_file).read_bytes()


def load_certificate(environment: Environment, path: Optional[str] = None) -> x509.Certificate:
    """
    Load the public certificate for an environment.

    Args:
        environment: Target environment (selects the bundled certificate)
        path: Optional PEM or DER file overriding the bundled certificate

    Returns:
        Parsed X.509 certificate

    Raises:
        CryptoError: If the certificate cannot be read or parsed
    """
    try:
        data = _read_certificate_bytes(environment, path)
    except OSError as e:
        if path:
            raise CryptoError(f"Unable to read certificate {path}: {e}") from e
        bundled = f"mpesa_sdk/certificates/{environment.certificate_file}"
        raise CryptoError(
            f"Unable to read certificate {bundled}: {e}. "
            f"Install Safaricom's {environment.value} certificate there or set "
            f"MPESA_{environment.name}_CERTIFICATE_PATH"
        ) from e

    try:
        if b"-----BEGIN" in data:
            return x509.load_pem_x509_certificate(data)
        return x509.load_der_x509_certificate(data)
    except ValueError as e:
        raise CryptoError(f"Invalid certificate for {environment.value}: {e}") from e


def derive_security_credential(
    password: str,
    environment: Environment,
    certificate_path: Optional[str] = None,
) -> str:
    """
    Encrypt the initiator password into a Daraja ``SecurityCredential``.

    Args:
        password: Plaintext initiator password
        environment: Target environment
        certificate_path: Optional certificate override

    Returns:
        Base64-encoded ciphertext

    Raises:
        CryptoError: If the certificate cannot be loaded or encryption fails

    Example:
        >>> credential = derive_security_credential("Safaricom999!*!", Environment.SANDBOX)
    """
    if not password:
        raise CryptoError("Initiator password is required to derive a security credential")

    certificate = load_certificate(environment, certificate_path)
    public_key = certificate.public_key()
    if not isinstance(public_key, rsa.RSAPublicKey):
        raise CryptoError(f"Certificate for {environment.value} does not hold an RSA key")

    try:
        ciphertext = public_key.encrypt(password.encode("utf-8"), padding.PKCS1v15())
    except ValueError as e:
        raise CryptoError(f"Encryption failed: {e}") from e

    logger.debug("Derived security credential for %s", environment.value)
    return base64.b64encode(ciphertext).decode("ascii")
