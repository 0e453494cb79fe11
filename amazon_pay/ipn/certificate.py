"""
Download and validation of the certificate SNS signs IPN notifications with.

The certificate is trusted based on where it is hosted (an https URL on an SNS host of AWS, ending in ``.pem``) and
on its subject (CN ``sns.amazonaws.com``). The certificate chain is not validated against a trusted root.
"""
import logging
import posixpath
import re
from typing import Optional
from urllib.parse import urlparse

import requests
from cryptography import x509
from cryptography.x509.oid import NameOID

from amazon_pay.constants import CERT_DOWNLOAD_ATTEMPTS, SNS_CERT_COMMON_NAME, SNS_CERT_HOST_PATTERN
from amazon_pay.exceptions import IpnWasNotAuthenticError
from amazon_pay.utils.http import ProxyConfig, http_request
from amazon_pay.utils.sanitize import sanitize_response_data

LOG = logging.getLogger(__name__)

MSG_CERTIFICATE_URL = "Error - certificate is not hosted at AWS URL (https): {url}"
MSG_CERTIFICATE = "Error - Unable to verify certificate subject issued by Amazon"
MSG_CERTIFICATE_LOAD = "Error - Unable to load certificate from {url}"

_SNS_HOST = re.compile(SNS_CERT_HOST_PATTERN)


def validate_certificate_url(url: str) -> None:
    """
    Checks that a ``SigningCertURL`` points to a certificate hosted by SNS: the scheme is https, the host is an
    SNS host (``sns.<region>.amazonaws.com``, optionally with a ``.cn`` suffix) and the path ends in ``.pem``.

    :raises IpnWasNotAuthenticError: if any of the checks fails
    """
    parsed = urlparse(url or "")
    # host as written in the URL, matched case-sensitively
    host = parsed.netloc.rpartition("@")[2].partition(":")[0]
    if not (
        parsed.scheme == "https"
        and _SNS_HOST.match(host)
        and posixpath.splitext(parsed.path)[1] == ".pem"
    ):
        raise IpnWasNotAuthenticError(MSG_CERTIFICATE_URL.format(url=url))


def download_certificate(
    url: str,
    proxy: Optional[ProxyConfig] = None,
    timeout: Optional[float] = None,
    log_enabled: bool = False,
) -> bytes:
    """
    Downloads the certificate after checking its URL. Failed downloads are retried without delay, the error of the
    last attempt is raised once all attempts failed.
    """
    validate_certificate_url(url)

    attempt = 0
    while True:
        attempt += 1
        try:
            response = http_request("GET", url, proxy=proxy, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            if attempt >= CERT_DOWNLOAD_ATTEMPTS:
                raise
            LOG.debug("Download of certificate %s failed (attempt %d): %s", url, attempt, e)
            continue

        if log_enabled:
            LOG.debug(sanitize_response_data(response.content))
        return response.content


def load_certificate(pem: bytes, url: str = None) -> x509.Certificate:
    try:
        return x509.load_pem_x509_certificate(pem)
    except ValueError as e:
        raise IpnWasNotAuthenticError(MSG_CERTIFICATE_LOAD.format(url=url)) from e


def validate_subject(subject: x509.Name) -> None:
    """
    Checks that the certificate subject contains the common name of SNS. All attributes of the subject are looked
    at, so the position of the CN within the subject does not matter.

    :raises IpnWasNotAuthenticError: if there is no such CN
    """
    for attribute in subject:
        if attribute.oid == NameOID.COMMON_NAME and attribute.value == SNS_CERT_COMMON_NAME:
            return
    raise IpnWasNotAuthenticError(MSG_CERTIFICATE)


def fetch_and_validate_certificate(
    url: str,
    proxy: Optional[ProxyConfig] = None,
    timeout: Optional[float] = None,
    log_enabled: bool = False,
) -> x509.Certificate:
    pem = download_certificate(url, proxy=proxy, timeout=timeout, log_enabled=log_enabled)
    certificate = load_certificate(pem, url)
    validate_subject(certificate.subject)
    return certificate
