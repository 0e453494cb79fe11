import logging
import platform
from dataclasses import dataclass
from typing import Dict, Optional, Union
from urllib.parse import quote

import requests

from amazon_pay import config
from amazon_pay.constants import SDK_NAME, VERSION

LOG = logging.getLogger(__name__)


class NetrcBypassAuth(requests.auth.AuthBase):
    """Prevents requests from adding credentials from ~/.netrc, signed requests must go out exactly as signed."""

    def __call__(self, r):
        return r


@dataclass(frozen=True)
class ProxyConfig:
    """
    Proxy settings passed through to every HTTP call. If a client has no proxy configured, requests falls back to
    the ``HTTP_PROXY``/``HTTPS_PROXY`` environment variables.
    """

    addr: Optional[str] = None
    port: Optional[Union[int, str]] = None
    user: Optional[str] = None
    password: Optional[str] = None

    @staticmethod
    def from_config() -> Optional["ProxyConfig"]:
        if not config.PROXY_ADDR:
            return None
        return ProxyConfig(
            addr=config.PROXY_ADDR,
            port=config.PROXY_PORT,
            user=config.PROXY_USER,
            password=config.PROXY_PASS,
        )

    def to_requests_proxies(self) -> Optional[Dict[str, str]]:
        if not self.addr:
            return None

        scheme, _, host = self.addr.rpartition("://")
        scheme = scheme or "http"

        credentials = ""
        if self.user:
            credentials = quote(self.user, safe="")
            if self.password:
                credentials += ":" + quote(self.password, safe="")
            credentials += "@"

        port = f":{self.port}" if self.port else ""
        url = f"{scheme}://{credentials}{host}{port}"
        return {"http": url, "https": url}


def user_agent(application_name: str = None, application_version: str = None) -> str:
    """
    Builds the User-Agent header of MWS requests, e.g.
    ``amazon-pay-sdk-python/1.0.0; (my-shop/2.1; 3.12.1; Linux-6.5.0-x86_64)``.
    """
    application = ""
    if application_name:
        application += f"{application_name}/"
    if application_version:
        application += f"{application_version};"
    return f"{SDK_NAME}/{VERSION}; ({application} {platform.python_version()}; {platform.platform()})"


def http_request(
    method: str,
    url: str,
    data: Union[bytes, str] = None,
    headers: Dict[str, str] = None,
    proxy: Optional[ProxyConfig] = None,
    timeout: Optional[float] = None,
) -> requests.Response:
    """
    Performs a single HTTPS exchange on a dedicated session, which is closed again before returning (also if the
    call raises). TLS peer verification is always enabled.
    """
    proxies = proxy.to_requests_proxies() if proxy else None
    with requests.Session() as session:
        return session.request(
            method,
            url,
            data=data,
            headers=headers,
            proxies=proxies,
            timeout=timeout,
            verify=True,
            auth=NetrcBypassAuth(),
        )
