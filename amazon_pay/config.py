import logging
import os
from typing import List, Optional, Union

from amazon_pay.constants import (
    CONFIG_DIR_NAME,
    DEFAULT_HTTP_TIMEOUT,
    FALSE_STRINGS,
    LOG_LEVELS,
    TRUE_STRINGS,
)

LOG = logging.getLogger(__name__)

# folder holding the `<profile>.env` configuration profiles
CONFIG_DIR = os.environ.get("AMAZON_PAY_CONFIG_DIR") or os.path.join(
    os.path.expanduser("~"), CONFIG_DIR_NAME
)


def eval_log_type(env_var_name: str) -> Union[str, bool]:
    """Get the log type from environment variable"""
    log_type = os.environ.get(env_var_name, "").lower().strip()
    return log_type if log_type in LOG_LEVELS else False


def parse_boolean_env(env_var_name: str) -> Optional[bool]:
    """Parse the value of the given env variable and return True/False, or None if it is not a boolean value."""
    value = os.environ.get(env_var_name, "").lower().strip()
    if value in TRUE_STRINGS:
        return True
    if value in FALSE_STRINGS:
        return False
    return None


def is_env_true(env_var_name: str) -> bool:
    """Whether the given environment variable has a truthy value."""
    return os.environ.get(env_var_name, "").lower().strip() in TRUE_STRINGS


def load_environment(profiles: str = None, env=os.environ) -> List[str]:
    """Loads the environment variables from ~/.amazon_pay/{profile}.env, for each profile listed in the profiles.
    :param env: environment to load profile to. Defaults to `os.environ`
    :param profiles: a comma separated list of profiles to load (defaults to "default")
    :returns str: the list of the actually loaded profiles (might be the fallback)
    """
    if not profiles:
        profiles = "default"

    profiles = [profile.strip() for profile in profiles.split(",")]
    environment = {}
    import dotenv

    for profile in profiles:
        path = os.path.join(CONFIG_DIR, f"{profile}.env")
        if not os.path.exists(path):
            continue
        environment.update(dotenv.dotenv_values(path))

    for k, v in environment.items():
        # we do not want to override the environment
        if k not in env and v is not None:
            env[k] = v

    return profiles


def _env_int(env_var_name: str, default: int) -> int:
    raw = os.environ.get(env_var_name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        LOG.warning("Ignoring non-numeric value %r of %s", raw, env_var_name)
        return default


load_environment(os.environ.get("CONFIG_PROFILE"))

# whether debug mode is enabled
DEBUG = is_env_true("DEBUG")

# log level of the library loggers (debug, info, warn, error)
AMAZON_PAY_LOG = eval_log_type("AMAZON_PAY_LOG")

# optional file the library logs to (stderr if not set)
LOG_FILE = os.environ.get("AMAZON_PAY_LOG_FILE", "").strip() or None

# whether 500/503 responses are retried (default: enabled)
THROTTLE = parse_boolean_env("AMAZON_PAY_THROTTLE") is not False

# whether requests go to the sandbox environment
SANDBOX = parse_boolean_env("AMAZON_PAY_SANDBOX") or False

# region code of the MWS endpoint (jp, uk, de, eu, us, na)
REGION = os.environ.get("AMAZON_PAY_REGION", "").strip().lower() or "na"

# default currency of amounts
CURRENCY_CODE = os.environ.get("AMAZON_PAY_CURRENCY_CODE", "").strip() or "usd"

# timeout (in seconds) for every HTTP call
HTTP_TIMEOUT = _env_int("AMAZON_PAY_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT)

# credentials
MERCHANT_ID = os.environ.get("AMAZON_PAY_MERCHANT_ID", "").strip()
ACCESS_KEY = os.environ.get("AMAZON_PAY_ACCESS_KEY", "").strip()
SECRET_KEY = os.environ.get("AMAZON_PAY_SECRET_KEY", "").strip()
PLATFORM_ID = os.environ.get("AMAZON_PAY_PLATFORM_ID", "").strip() or None
PRIVATE_KEY = os.environ.get("AMAZON_PAY_PRIVATE_KEY", "").strip() or None

# reported in the User-Agent header
APPLICATION_NAME = os.environ.get("AMAZON_PAY_APPLICATION_NAME", "").strip() or None
APPLICATION_VERSION = os.environ.get("AMAZON_PAY_APPLICATION_VERSION", "").strip() or None

# proxy used for all HTTP calls (if not set, requests falls back to HTTP(S)_PROXY)
PROXY_ADDR = os.environ.get("AMAZON_PAY_PROXY_ADDR", "").strip() or None
PROXY_PORT = os.environ.get("AMAZON_PAY_PROXY_PORT", "").strip() or None
PROXY_USER = os.environ.get("AMAZON_PAY_PROXY_USER", "").strip() or None
PROXY_PASS = os.environ.get("AMAZON_PAY_PROXY_PASS", "").strip() or None
