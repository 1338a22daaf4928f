"""
Pytest configuration and fixtures
"""

import base64
import datetime
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.x509.oid import NameOID

from mpesa_sdk import Config, MpesaClient
from mpesa_sdk.http.adapter import HTTPAdapter

INITIATOR_PASSWORD = "Safaricom999!*!"
SANDBOX = "https://sandbox.safaricom.co.ke"
PRODUCTION = "https://api.safaricom.co.ke"


@pytest.fixture(scope="session")
def rsa_key():
    """Private key standing in for Safaricom's"""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


def self_signed(key, common_name: str) -> x509.Certificate:
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.datetime.now(datetime.timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=365))
        .sign(key, hashes.SHA256())
    )


@pytest.fixture(scope="session")
def certificate(rsa_key):
    return self_signed(rsa_key, "apicrypt.safaricom.test")


@pytest.fixture(scope="session")
def production_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def production_certificate_path(production_key, tmp_path_factory):
    path = tmp_path_factory.mktemp("certs-production") / "production.cer"
    path.write_bytes(
        self_signed(production_key, "apicrypt.safaricom.test").public_bytes(
            serialization.Encoding.PEM
        )
    )
    return str(path)


@pytest.fixture(scope="session")
def certificate_path(certificate, tmp_path_factory):
    path = tmp_path_factory.mktemp("certs") / "sandbox.cer"
    path.write_bytes(certificate.public_bytes(serialization.Encoding.PEM))
    return str(path)


@pytest.fixture(scope="session")
def der_certificate_path(certificate, tmp_path_factory):
    path = tmp_path_factory.mktemp("certs-der") / "sandbox.der"
    path.write_bytes(certificate.public_bytes(serialization.Encoding.DER))
    return str(path)


@pytest.fixture
def packaged_certificates(certificate_path, production_certificate_path, tmp_path, monkeypatch):
    """Package certificate directory holding one key per environment"""
    directory = tmp_path / "certificates"
    directory.mkdir()
    (directory / "sandbox.cer").write_bytes(Path(certificate_path).read_bytes())
    (directory / "production.cer").write_bytes(Path(production_certificate_path).read_bytes())
    monkeypatch.setattr("mpesa_sdk.security.bundled_certificates", lambda: directory)
    return directory


@pytest.fixture
def decrypt(rsa_key):
    """Recover the initiator password from a SecurityCredential"""

    def _decrypt(credential: str) -> str:
        return rsa_key.decrypt(base64.b64decode(credential), padding.PKCS1v15()).decode("utf-8")

    return _decrypt


@pytest.fixture
def config(certificate_path, production_certificate_path):
    return Config(
        consumer_key="key_test_123",
        consumer_secret="secret_test_123",
        initiator_password=INITIATOR_PASSWORD,
        environment="sandbox",
        certificate_paths={
            "sandbox": certificate_path,
            "production": production_certificate_path,
        },
        timeout=5,
    )


@pytest.fixture
def client(config):
    return MpesaClient(config)


class DummyAdapter(HTTPAdapter):
    """Mock HTTP adapter recording every request."""

    def __init__(self):
        self.requests: List[Dict[str, Any]] = []
        self.token_response: Tuple[int, str, Dict[str, str]] = (
            200,
            '{"access_token":"tok_test_1","expires_in":"3599"}',
            {},
        )
        self.response_status = 200
        self.response_data = json.dumps(
            {
                "ConversationID": "AG_20240101_0000",
                "OriginatorConversationID": "1234-5678-1",
                "ResponseCode": "0",
                "ResponseDescription": "Accept the service request successfully.",
            }
        )
        self.response_headers: Dict[str, str] = {}
        self.error: Optional[Exception] = None

    @property
    def last_request(self) -> Dict[str, Any]:
        return self.requests[-1]

    def posts(self) -> List[Dict[str, Any]]:
        return [r for r in self.requests if r["method"] == "POST"]

    def send(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        json: Optional[Any] = None,
        timeout: float = 30,
    ) -> Tuple[int, str, Dict[str, str]]:
        """Mock send method."""
        self.requests.append(
            {"method": method, "url": url, "headers": headers, "json": json, "timeout": timeout}
        )
        if "/oauth/v1/generate" in url:
            return self.token_response
        if self.error is not None:
            raise self.error
        return self.response_status, self.response_data, self.response_headers


@pytest.fixture
def adapter():
    return DummyAdapter()
