import logging
import time
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

import requests

from amazon_pay.constants import API_VERSION, DEFAULT_HTTP_TIMEOUT
from amazon_pay.exceptions import RequestFailedError, RetryableRequestError
from amazon_pay.response import Response
from amazon_pay.signing import sign, signable_string
from amazon_pay.utils.backoff import RetrySchedule
from amazon_pay.utils.encoding import build_parameters, encode_parameters
from amazon_pay.utils.http import ProxyConfig, http_request, user_agent
from amazon_pay.utils.sanitize import sanitize_request_data, sanitize_response_data

LOG = logging.getLogger(__name__)

MSG_INTERNAL_SERVER_ERROR = "InternalServerError"
MSG_SERVICE_UNAVAILABLE = "ServiceUnavailable or RequestThrottled"

# requests errors caused by the request itself rather than the network, retrying does not help
NON_RETRYABLE_ERRORS = (
    requests.exceptions.URLRequired,
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidSchema,
    requests.exceptions.InvalidURL,
    requests.exceptions.InvalidHeader,
)


@dataclass
class Success:
    response: Response


@dataclass
class Retryable:
    error: Exception


@dataclass
class Fatal:
    error: Exception


Outcome = Union[Success, Retryable, Fatal]


class Request:
    """
    A single signed MWS call. ``send_post`` merges the parameters with the defaults, signs them and posts them to
    ``https://{mws_endpoint}/{sandbox_path}/{API_VERSION}``, retrying transient failures according to the
    ``RetrySchedule``.
    """

    def __init__(
        self,
        parameters: Mapping[str, Any],
        optional: Mapping[str, Any],
        default_parameters: Mapping[str, Any],
        mws_endpoint: str,
        sandbox_path: str,
        secret_key: str,
        proxy: Optional[ProxyConfig] = None,
        throttle: bool = True,
        application_name: str = None,
        application_version: str = None,
        log_enabled: bool = False,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        retry_schedule: RetrySchedule = None,
    ):
        self.parameters = parameters
        self.optional = optional
        self.default_parameters = default_parameters
        self.mws_endpoint = mws_endpoint
        self.sandbox_path = sandbox_path
        self.secret_key = secret_key
        self.proxy = proxy
        self.throttle = throttle
        self.application_name = application_name
        self.application_version = application_version
        self.log_enabled = log_enabled
        self.timeout = timeout
        self.retry_schedule = retry_schedule or RetrySchedule()

    @property
    def path(self) -> str:
        return f"/{self.sandbox_path}/{API_VERSION}"

    @property
    def url(self) -> str:
        return f"https://{self.mws_endpoint}{self.path}"

    def send_post(self) -> Response:
        return self.post(self.build_post_body())

    def build_post_body(self) -> str:
        """
        Builds the form body of the request: the sorted, escaped parameters followed by their ``Signature``.
        """
        parameters = build_parameters(self.default_parameters, self.parameters, self.optional)
        body = encode_parameters(parameters)
        string_to_sign = signable_string("POST", self.mws_endpoint, self.path, body)
        body += "&Signature=" + sign(string_to_sign, self.secret_key)

        if self.log_enabled:
            LOG.debug("request/Post: %s", sanitize_request_data(body))

        return body

    def post(self, body: str) -> Response:
        """
        Posts an already signed body. Transient failures are retried, a call that still fails after the last retry
        raises a ``RequestFailedError`` carrying the message of the last failure.
        """
        tries = 0
        while True:
            outcome = self._attempt(body)

            if isinstance(outcome, Success):
                return outcome.response
            if isinstance(outcome, Fatal):
                raise RequestFailedError(str(outcome.error)) from outcome.error

            tries += 1
            if self.retry_schedule.is_exhausted(tries):
                raise RequestFailedError(str(outcome.error)) from outcome.error

            seconds = self.retry_schedule.seconds_for_try(tries)
            LOG.debug(
                "MWS call to %s failed (%s), retry %d in %ss", self.url, outcome.error, tries, seconds
            )
            time.sleep(seconds)

    def get_seconds_for_try_count(self, try_count: int) -> float:
        return self.retry_schedule.seconds_for_try(try_count)

    def _attempt(self, body: str) -> Outcome:
        headers = {
            "User-Agent": user_agent(self.application_name, self.application_version),
            "Content-Type": "application/x-www-form-urlencoded; charset=utf-8",
        }
        try:
            raw = http_request(
                "POST", self.url, data=body, headers=headers, proxy=self.proxy, timeout=self.timeout
            )
        except NON_RETRYABLE_ERRORS as e:
            return Fatal(e)
        except requests.RequestException as e:
            return Retryable(e)

        if self.log_enabled:
            LOG.debug("response: %s", sanitize_response_data(raw.content))

        try:
            self._check_throttling(raw)
        except RetryableRequestError as e:
            return Retryable(e)

        return Success(Response(raw))

    def _check_throttling(self, raw: requests.Response):
        if not self.throttle:
            return
        if raw.status_code == 500:
            raise RetryableRequestError(MSG_INTERNAL_SERVER_ERROR)
        if raw.status_code == 503:
            raise RetryableRequestError(MSG_SERVICE_UNAVAILABLE)
