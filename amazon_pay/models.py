from dataclasses import dataclass
from typing import NamedTuple, Optional, Union

from amazon_pay.exceptions import InvalidReferenceIdError

# first letter of an Amazon reference id, per kind of reference
ORDER_REFERENCE_PREFIXES = ("S", "P")
BILLING_AGREEMENT_PREFIXES = ("C", "B")


@dataclass(frozen=True)
class OrderReference:
    id: str


@dataclass(frozen=True)
class BillingAgreement:
    id: str


ReferenceId = Union[OrderReference, BillingAgreement]


def parse_reference_id(reference_id: str) -> ReferenceId:
    """
    Tells an order reference id (``S01-...``, ``P01-...``) from a billing agreement id (``C01-...``, ``B01-...``).

    :raises InvalidReferenceIdError: for ids of any other kind
    """
    if reference_id and reference_id.startswith(ORDER_REFERENCE_PREFIXES):
        return OrderReference(reference_id)
    if reference_id and reference_id.startswith(BILLING_AGREEMENT_PREFIXES):
        return BillingAgreement(reference_id)
    raise InvalidReferenceIdError(f"Not an order reference or billing agreement id: {reference_id!r}")


class ProviderCredit(NamedTuple):
    """A credit for a solution provider, as passed to ``authorize``/``capture`` (or reversed by ``refund``)."""

    provider_id: str
    amount: Union[str, int, float]
    currency_code: Optional[str] = None
