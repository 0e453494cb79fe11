import datetime
from typing import Callable, Dict, List

import pytest
import requests
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID


@pytest.fixture(autouse=True)
def clear_amazon_pay_environment(monkeypatch):
    """
    Makes sure that settings of the machine running the tests do not leak into the unit tests.
    """
    for variable in ("HTTP_PROXY", "HTTPS_PROXY", "http_proxy", "https_proxy"):
        monkeypatch.delenv(variable, raising=False)


@pytest.fixture
def make_response() -> Callable[..., requests.Response]:
    """Returns a factory for ``requests.Response`` objects as they come back from the network."""

    def _make_response(
        status_code: int = 200, content: bytes = b"", headers: Dict[str, str] = None
    ) -> requests.Response:
        response = requests.Response()
        response.status_code = status_code
        response._content = content
        response.encoding = "utf-8"
        response.headers.update(headers or {})
        response.url = "https://mws.amazonservices.com/OffAmazonPayments/2013-01-01"
        return response

    return _make_response


@pytest.fixture(scope="session")
def rsa_private_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def create_certificate(rsa_private_key) -> Callable[..., bytes]:
    """
    Returns a factory for self-signed PEM certificates of ``rsa_private_key``. The subject is built from the given
    (oid, value) attributes, in order.
    """

    def _create_certificate(attributes: List = None) -> bytes:
        if attributes is None:
            attributes = [
                (NameOID.COUNTRY_NAME, "US"),
                (NameOID.ORGANIZATION_NAME, "Amazon.com, Inc."),
                (NameOID.COMMON_NAME, "sns.amazonaws.com"),
            ]
        name = x509.Name([x509.NameAttribute(oid, value) for oid, value in attributes])
        now = datetime.datetime.now(datetime.timezone.utc)
        certificate = (
            x509.CertificateBuilder()
            .subject_name(name)
            .issuer_name(name)
            .public_key(rsa_private_key.public_key())
            .serial_number(x509.random_serial_number())
            .not_valid_before(now - datetime.timedelta(days=1))
            .not_valid_after(now + datetime.timedelta(days=1))
            .sign(rsa_private_key, hashes.SHA256())
        )
        return certificate.public_bytes(serialization.Encoding.PEM)

    return _create_certificate
