"""pf packet filter layer."""

from .rules import monitor_rules, limit_rules, references_ip, validate_ip
from .persistence import AnchorInstaller
from .controller import PacketFilter

__all__ = [
    "monitor_rules",
    "limit_rules",
    "references_ip",
    "validate_ip",
    "AnchorInstaller",
    "PacketFilter",
]
