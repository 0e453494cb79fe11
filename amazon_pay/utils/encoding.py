"""
Canonical encoding of MWS request parameters.

The encoded parameter string is part of the signed string, so its shape has to match what MWS computes on its side
byte by byte: parameters are sorted by name, and every value is percent-encoded with the RFC 3986 unreserved
characters (``A-Z a-z 0-9 - . _ ~``) as the only characters passed through.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple
from urllib.parse import quote

from amazon_pay.constants import API_VERSION, SIGNATURE_METHOD, SIGNATURE_VERSION
from amazon_pay.utils.strings import render_value
from amazon_pay.utils.time import timestamp

# parameters identifying the caller, explicit request parameters never replace them
IDENTITY_PARAMETERS = ("AWSAccessKeyId",)


@dataclass(frozen=True)
class DefaultParameters:
    """The parameters sent with every MWS request."""

    access_key: str
    platform_id: Optional[str] = None
    api_version: str = API_VERSION
    signature_method: str = SIGNATURE_METHOD
    signature_version: str = SIGNATURE_VERSION

    def to_dict(self) -> Dict[str, str]:
        defaults = {
            "AWSAccessKeyId": self.access_key,
            "SignatureMethod": self.signature_method,
            "SignatureVersion": self.signature_version,
            "Version": self.api_version,
        }
        if self.platform_id:
            defaults["PlatformId"] = self.platform_id
        return defaults


def custom_escape(value: Any) -> str:
    """
    Percent-encodes a parameter value. Non-string values are rendered first (booleans as ``true``/``false``), the
    result is UTF-8 encoded and every byte outside of ``[A-Za-z0-9._~-]`` becomes ``%XX`` (uppercase hex). Spaces
    become ``%20``, never ``+``.

    :param value: the value to encode
    :return: the encoded value
    """
    return quote(render_value(value), safe="")


def build_parameters(
    defaults: Mapping[str, Any],
    parameters: Mapping[str, Any],
    optional: Mapping[str, Any] = None,
    time: datetime = None,
) -> Dict[str, Any]:
    """
    Merges the default parameters, the required parameters of an action and its optional parameters into the
    parameter map of a single request. The given maps are not modified.

    - optional parameters with a ``None`` value are left out
    - a ``Timestamp`` is added unless the action sets one
    - explicit parameters take precedence over defaults, except for ``IDENTITY_PARAMETERS``

    :param defaults: the parameters every request carries (see ``DefaultParameters``)
    :param parameters: the required parameters of the action
    :param optional: the optional parameters of the action
    :param time: the time used for the ``Timestamp`` parameter (default: now)
    :return: a new parameter map
    """
    request_parameters = dict(parameters)
    for key, value in (optional or {}).items():
        if value is not None:
            request_parameters[key] = value

    if "Timestamp" not in request_parameters:
        request_parameters["Timestamp"] = timestamp(time)

    result = dict(defaults)
    result.update(request_parameters)
    for key in IDENTITY_PARAMETERS:
        if key in defaults:
            result[key] = defaults[key]
    return result


def encode_parameters(parameters: Mapping[str, Any]) -> str:
    """
    Serializes a parameter map to ``key=value&key=value`` with keys in lexicographic order and custom-escaped
    values. Entries with a ``None`` value are skipped.
    """
    items = sorted((key, value) for key, value in parameters.items() if value is not None)
    return "&".join(f"{key}={custom_escape(value)}" for key, value in items)


def _field(entry: Any, name: str) -> Any:
    if isinstance(entry, Mapping):
        return entry.get(name)
    return getattr(entry, name)


def serialize_member_list(
    prefix: str, entries: Iterable[Any], fields: Sequence[Tuple[str, str]]
) -> Dict[str, Any]:
    """
    Flattens a list of structured entries into MWS member-list parameters, e.g. for
    ``prefix="ProviderCreditList"`` and ``fields=[("provider_id", "ProviderId")]`` the entries become
    ``ProviderCreditList.member.1.ProviderId``, ``ProviderCreditList.member.2.ProviderId``, ...

    :param prefix: name of the list parameter
    :param entries: the entries in the order they should be numbered, mappings or objects with attributes
    :param fields: pairs of (entry field name, parameter name suffix)
    :return: the flat parameter map, in entry order
    """
    members = {}
    for index, entry in enumerate(entries, start=1):
        for field_name, suffix in fields:
            members[f"{prefix}.member.{index}.{suffix}"] = _field(entry, field_name)
    return members


def serialize_indexed_list(prefix: str, values: Iterable[Any]) -> Dict[str, Any]:
    """Flattens a list of plain values into ``{prefix}.1``, ``{prefix}.2``, ... parameters."""
    return {f"{prefix}.{index}": value for index, value in enumerate(values, start=1)}
