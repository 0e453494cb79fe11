import logging
from typing import Any, Dict, Optional
from urllib.parse import unquote_plus

from amazon_pay.constants import DEFAULT_HTTP_TIMEOUT, LOGIN_DOMAINS
from amazon_pay.exceptions import ConfigurationError, InvalidAccessTokenError
from amazon_pay.utils.http import ProxyConfig, http_request

LOG = logging.getLogger(__name__)

MSG_INVALID_ACCESS_TOKEN = "Invalid Access Token"


class Login:
    """Looks up the profile of a buyer signed in with Login with Amazon."""

    def __init__(
        self,
        client_id: str,
        region: str = "na",
        sandbox: bool = False,
        proxy: Optional[ProxyConfig] = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
    ):
        self.client_id = client_id
        self.region = str(region).lower()
        self.domain = LOGIN_DOMAINS.get(self.region)
        if not self.domain:
            raise ConfigurationError(f"Invalid Region Code. ({region})")
        self.sandbox = sandbox
        self.proxy = proxy
        self.timeout = timeout

    @property
    def endpoint(self) -> str:
        host = "api.sandbox" if self.sandbox else "api"
        return f"https://{host}.{self.domain}"

    def get_login_profile(self, access_token: str) -> Dict[str, Any]:
        """
        Returns the profile of the buyer the access token was issued to, after checking that the token was issued
        to this client.

        :param access_token: the access token, URL-encoded as received from the browser or not
        :raises InvalidAccessTokenError: if the token was issued to another client
        """
        headers = {"x-amz-access-token": unquote_plus(access_token)}

        token_info = self._get("/auth/o2/tokeninfo", headers)
        if token_info.get("aud") != self.client_id:
            LOG.debug("Access token was issued to %s, not to %s", token_info.get("aud"), self.client_id)
            raise InvalidAccessTokenError(MSG_INVALID_ACCESS_TOKEN)

        return self._get("/user/profile", headers)

    def _get(self, path: str, headers: Dict[str, str]) -> Dict[str, Any]:
        response = http_request(
            "GET", self.endpoint + path, headers=headers, proxy=self.proxy, timeout=self.timeout
        )
        return response.json()
