import binascii
import json
import logging
from base64 import b64decode
from dataclasses import dataclass
from functools import cached_property
from typing import Any, Dict, Mapping, Optional, Union

from cryptography import x509
from requests.structures import CaseInsensitiveDict

from amazon_pay.constants import (
    HEADER_SNS_MESSAGE_TYPE,
    SNS_MESSAGE_TYPE_NOTIFICATION,
    SNS_SIGNABLE_KEYS,
)
from amazon_pay.exceptions import IpnWasNotAuthenticError
from amazon_pay.ipn.certificate import fetch_and_validate_certificate
from amazon_pay.logging.setup import setup_logging
from amazon_pay.signing import hash_algorithm_for, verify_signature
from amazon_pay.utils.http import ProxyConfig
from amazon_pay.utils.strings import to_str

LOG = logging.getLogger(__name__)

MSG_HEADER = "Error - Header does not contain x-amz-sns-message-type header"
MSG_KEY = "Error - Unable to verify public key with signature and signed string"


@dataclass
class NotificationEnvelope:
    """The SNS message an IPN is delivered in."""

    type: Optional[str] = None
    message_id: Optional[str] = None
    topic_arn: Optional[str] = None
    message: Optional[str] = None
    timestamp: Optional[str] = None
    signature: Optional[str] = None
    signature_version: Optional[str] = None
    signing_cert_url: Optional[str] = None
    unsubscribe_url: Optional[str] = None

    @staticmethod
    def from_dict(raw: Mapping[str, Any]) -> "NotificationEnvelope":
        return NotificationEnvelope(
            type=raw.get("Type"),
            message_id=raw.get("MessageId"),
            topic_arn=raw.get("TopicArn"),
            message=raw.get("Message"),
            timestamp=raw.get("Timestamp"),
            signature=raw.get("Signature"),
            signature_version=raw.get("SignatureVersion"),
            signing_cert_url=raw.get("SigningCertURL"),
            unsubscribe_url=raw.get("UnsubscribeURL"),
        )


@dataclass
class NotificationMessage:
    """The Amazon Pay notification carried, JSON encoded, in the ``Message`` of the envelope."""

    notification_type: Optional[str] = None
    seller_id: Optional[str] = None
    release_environment: Optional[str] = None
    version: Optional[str] = None
    notification_data: Optional[str] = None
    timestamp: Optional[str] = None

    @staticmethod
    def from_dict(raw: Mapping[str, Any]) -> "NotificationMessage":
        return NotificationMessage(
            notification_type=raw.get("NotificationType"),
            seller_id=raw.get("SellerId"),
            release_environment=raw.get("ReleaseEnvironment"),
            version=raw.get("Version"),
            notification_data=raw.get("NotificationData"),
            timestamp=raw.get("Timestamp"),
        )


def compute_canonical_string(raw: Mapping[str, Any]) -> str:
    """
    Builds the string SNS signs for a notification: ``key\\nvalue\\n`` for each of ``Message``, ``MessageId``,
    ``Timestamp``, ``TopicArn`` and ``Type``, in that order. Keys which are missing or empty are left out.
    """
    text = ""
    for key in SNS_SIGNABLE_KEYS:
        value = raw.get(key)
        if not value:
            continue
        text += f"{key}\n{value}\n"
    return text


class IpnHandler:
    """
    Authenticates an IPN notification sent by Amazon Pay and gives access to its content.

    ``authentic()`` checks, in this order, the SNS message type header, the location and subject of the signing
    certificate, and the signature of the message. The accessors do not authenticate anything, call
    ``authentic()`` before trusting their values.

    :param headers: the headers of the HTTP request the notification was posted with
    :param body: the raw body of that request
    """

    def __init__(
        self,
        headers: Mapping[str, str],
        body: Union[str, bytes],
        proxy: Optional[ProxyConfig] = None,
        timeout: Optional[float] = None,
        log_enabled: bool = False,
        log_file_name: str = None,
        log_level: Union[str, int] = "DEBUG",
    ):
        self.headers = CaseInsensitiveDict(headers or {})
        self.body = to_str(body)
        self._raw: Dict[str, Any] = json.loads(self.body)
        self.proxy = proxy
        self.timeout = timeout
        self.log_enabled = log_enabled

        if self.log_enabled:
            setup_logging(log_level, log_file_name)

    def authentic(self) -> bool:
        """
        Authenticates the notification.

        :return: True
        :raises IpnWasNotAuthenticError: with a message naming the check that failed
        """
        self.validate_header()
        certificate = self.certificate()
        public_key = certificate.public_key()
        self.verify_public_key(public_key, self._decoded_signature(), self.canonical_string())
        LOG.debug("IPN notification %s is authentic", self.message_id)
        return True

    def validate_header(self) -> None:
        if self.headers.get(HEADER_SNS_MESSAGE_TYPE) != SNS_MESSAGE_TYPE_NOTIFICATION:
            raise IpnWasNotAuthenticError(MSG_HEADER)

    def certificate(self) -> x509.Certificate:
        return fetch_and_validate_certificate(
            self.signing_cert_url,
            proxy=self.proxy,
            timeout=self.timeout,
            log_enabled=self.log_enabled,
        )

    def verify_public_key(self, public_key: Any, signature: bytes, signed_string: str) -> None:
        algorithm = hash_algorithm_for(self.signature_version)
        if not verify_signature(public_key, signature, signed_string, algorithm):
            raise IpnWasNotAuthenticError(MSG_KEY)

    def canonical_string(self) -> str:
        return compute_canonical_string(self._raw)

    def _decoded_signature(self) -> bytes:
        try:
            return b64decode(self.signature or "")
        except (binascii.Error, ValueError) as e:
            raise IpnWasNotAuthenticError(MSG_KEY) from e

    @cached_property
    def envelope(self) -> NotificationEnvelope:
        return NotificationEnvelope.from_dict(self._raw)

    @cached_property
    def notification(self) -> NotificationMessage:
        return NotificationMessage.from_dict(json.loads(self.message))

    @property
    def type(self) -> Optional[str]:
        return self.envelope.type

    @property
    def message_id(self) -> Optional[str]:
        return self.envelope.message_id

    @property
    def topic_arn(self) -> Optional[str]:
        return self.envelope.topic_arn

    @property
    def message(self) -> Optional[str]:
        return self.envelope.message

    @property
    def timestamp(self) -> Optional[str]:
        return self.envelope.timestamp

    @property
    def signature(self) -> Optional[str]:
        return self.envelope.signature

    @property
    def signature_version(self) -> Optional[str]:
        return self.envelope.signature_version

    @property
    def signing_cert_url(self) -> Optional[str]:
        return self.envelope.signing_cert_url

    @property
    def unsubscribe_url(self) -> Optional[str]:
        return self.envelope.unsubscribe_url

    @property
    def notification_type(self) -> Optional[str]:
        return self.notification.notification_type

    @property
    def seller_id(self) -> Optional[str]:
        return self.notification.seller_id

    @property
    def environment(self) -> Optional[str]:
        return self.notification.release_environment

    @property
    def version(self) -> Optional[str]:
        return self.notification.version

    @property
    def notification_data(self) -> Optional[str]:
        return self.notification.notification_data

    @property
    def message_timestamp(self) -> Optional[str]:
        return self.notification.timestamp
