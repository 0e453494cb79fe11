"""Removes PII and other sensitive data from request and response payloads before they are logged."""
import re
from typing import Optional, Union

from amazon_pay.constants import REMOVED_PLACEHOLDER, SENSITIVE_FIELDS
from amazon_pay.utils.strings import to_str

# `Key=value` at the start of the string, after ? or &, or as the last segment of a dotted key
# (e.g. `OrderReferenceAttributes.SellerNote=...`), up to the next &
REQUEST_PATTERNS = [
    re.compile(rf"((?:^|[?&.]){field}=)[^&]+", re.DOTALL) for field in SENSITIVE_FIELDS
]

# the text content of <Field>...</Field>, across newlines
RESPONSE_PATTERNS = [
    re.compile(rf"(?<=<{field}>).*?(?=</{field}>)", re.DOTALL) for field in SENSITIVE_FIELDS
]


def sanitize_request_data(data: Optional[Union[str, bytes]]) -> str:
    """
    Replaces the values of sensitive parameters in an encoded request string with ``*REMOVED*``.

    :param data: the request string, e.g. ``Action=Authorize&SellerAuthorizationNote=...``
    :return: a sanitized copy
    """
    result = to_str(data) if data else ""
    for pattern in REQUEST_PATTERNS:
        result = pattern.sub(rf"\g<1>{REMOVED_PLACEHOLDER}", result)
    return result


def sanitize_response_data(data: Optional[Union[str, bytes]]) -> str:
    """
    Replaces the content of sensitive XML elements with ``*REMOVED*``.

    :param data: an XML document, e.g. a GetOrderReferenceDetails response
    :return: a sanitized copy
    """
    result = to_str(data, errors="replace") if data else ""
    for pattern in RESPONSE_PATTERNS:
        result = pattern.sub(REMOVED_PLACEHOLDER, result)
    return result
