"""
Signatures used by Amazon Pay:

- MWS requests are signed with HMAC-SHA256 over the signable string, keyed with the secret key
- IPN notifications are signed by SNS with RSA (PKCS#1 v1.5), verified with the key of the SNS signing certificate
- payloads of the checkout (v2) API are signed with RSASSA-PSS/SHA256 using the merchant's private key
"""
import base64
import hashlib
import hmac
import json
import os
from typing import Any, Mapping, Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey

from amazon_pay.constants import PAYLOAD_SIGNING_ALGORITHM, PSS_SALT_LENGTH
from amazon_pay.utils.encoding import custom_escape
from amazon_pay.utils.strings import to_bytes, to_str

# hash algorithm per SNS SignatureVersion, anything else is treated as version 1
_SNS_SIGNATURE_HASHES = {
    "1": hashes.SHA1,
    "2": hashes.SHA256,
}


def signable_string(method: str, host: str, path: str, encoded_parameters: str) -> str:
    """Joins the parts of an MWS request that are covered by its signature."""
    return "\n".join([method, host, path, encoded_parameters])


def sign(body: Union[str, bytes], secret_key: Union[str, bytes]) -> str:
    """
    Computes the ``Signature`` parameter of an MWS request: the HMAC-SHA256 digest of ``body`` keyed with
    ``secret_key``, base64-encoded and percent-encoded.
    """
    digest = hmac.new(to_bytes(secret_key), to_bytes(body), hashlib.sha256).digest()
    return custom_escape(to_str(base64.b64encode(digest)))


def hash_algorithm_for(signature_version: str = None) -> hashes.HashAlgorithm:
    return _SNS_SIGNATURE_HASHES.get(str(signature_version or "1"), hashes.SHA1)()


def verify_signature(
    public_key: Any,
    signature: bytes,
    signed_string: Union[str, bytes],
    algorithm: hashes.HashAlgorithm = None,
) -> bool:
    """
    Verifies an RSA (PKCS#1 v1.5) signature.

    :param public_key: the public key of the signer, anything but an RSA key fails verification
    :param signature: the raw (base64-decoded) signature
    :param signed_string: the data the signature was computed over
    :param algorithm: the digest algorithm (default: SHA1, as used by SNS signature version 1)
    :return: whether the signature is valid, never raises for an invalid signature
    """
    if not isinstance(public_key, RSAPublicKey):
        return False
    try:
        public_key.verify(
            signature, to_bytes(signed_string), padding.PKCS1v15(), algorithm or hashes.SHA1()
        )
        return True
    except InvalidSignature:
        return False


def hash_and_hex(payload: Union[str, bytes]) -> str:
    """Returns the hex-encoded SHA256 digest of the payload (the hashed request of the checkout API)."""
    return hashlib.sha256(to_bytes(payload)).hexdigest()


def sign_payload(private_key: RSAPrivateKey, payload: Union[str, Mapping[str, Any]]) -> str:
    """
    Signs a checkout API payload with RSASSA-PSS (SHA256, MGF1 with SHA256, salt length 20). The signed data is the
    algorithm name and the payload, separated by a newline; mappings are serialized to JSON first.

    :return: the base64-encoded signature
    """
    if isinstance(payload, Mapping):
        payload = json.dumps(payload)
    payload_with_algorithm = f"{PAYLOAD_SIGNING_ALGORITHM}\n{to_str(payload)}"
    signature = private_key.sign(
        to_bytes(payload_with_algorithm),
        padding.PSS(mgf=padding.MGF1(hashes.SHA256()), salt_length=PSS_SALT_LENGTH),
        hashes.SHA256(),
    )
    return to_str(base64.b64encode(signature))


def load_private_key(key: Union[str, bytes], password: Union[str, bytes] = None) -> RSAPrivateKey:
    """
    Loads a PEM encoded private key, given either as the PEM text itself or as the path of a PEM file.
    """
    if isinstance(key, str) and "-----BEGIN" not in key and os.path.isfile(key):
        with open(key, "rb") as key_file:
            key = key_file.read()
    return serialization.load_pem_private_key(
        to_bytes(key), password=to_bytes(password) if password else None
    )
