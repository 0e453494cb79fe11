class AmazonPayError(Exception):
    """Base class of all errors raised by the amazon_pay library."""


class ConfigurationError(AmazonPayError):
    """Raised when a client is constructed with invalid settings, e.g. an unknown region code."""


class RetryableRequestError(AmazonPayError):
    """
    Signals a transient failure of a single MWS call (HTTP 500 or 503 with the throttle policy enabled).
    The transport retries the call; callers only ever see it wrapped in a ``RequestFailedError``.
    """


class RequestFailedError(AmazonPayError):
    """Raised when an MWS call failed for good, i.e. after the retry budget was exhausted."""


class IpnWasNotAuthenticError(AmazonPayError):
    """Raised when an IPN notification could not be authenticated. The message names the failed check."""


class InvalidAccessTokenError(AmazonPayError):
    """Raised by the login profile lookup when an access token was issued for a different client."""


class InvalidReferenceIdError(AmazonPayError, ValueError):
    """Raised when an id is neither an order reference id nor a billing agreement id."""
