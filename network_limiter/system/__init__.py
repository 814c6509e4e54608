"""Operating system access layer."""

from .runner import CommandRunner, CommandResult
from .privileges import is_root, require_root
from .interface_manager import InterfaceManager, InterfaceInfo

__all__ = [
    "CommandRunner",
    "CommandResult",
    "is_root",
    "require_root",
    "InterfaceManager",
    "InterfaceInfo",
]
