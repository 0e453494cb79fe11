import os
import sys
from typing import List, Optional

# important: this needs to be free of amazon_pay imports, amazon_pay.config reads CONFIG_PROFILE on import


def set_profile_from_sys_argv():
    """
    Reads the --profile flag from sys.argv and sets the 'CONFIG_PROFILE' os variable accordingly, which is later
    picked up by ``amazon_pay.config``.
    """
    profile = parse_profile_argument(sys.argv)
    if profile:
        os.environ["CONFIG_PROFILE"] = profile.strip()


def parse_profile_argument(args: List[str]) -> Optional[str]:
    """
    Finds ``--profile <name>`` or ``--profile=<name>`` in the given arguments.

    :param args: list of CLI arguments
    :returns: the value of ``--profile``, or None
    """
    for i, current_arg in enumerate(args):
        if current_arg.startswith("--profile="):
            return current_arg[len("--profile=") :]
        if current_arg == "--profile":
            if i + 1 < len(args):
                return args[i + 1]
            return None

    return None
