"""Root privilege checks."""

import os
from typing import Optional

from ..errors import PrivilegeError


def is_root() -> bool:
    """Check if running with an effective UID of 0."""
    try:
        return os.geteuid() == 0
    except AttributeError:
        # No geteuid on Windows, and pf does not exist there either
        return False


def require_root(operation: Optional[str] = None) -> None:
    """Raise PrivilegeError unless running as root."""
    if not is_root():
        raise PrivilegeError(operation)
