"""Network interface lookup."""

import ipaddress
import socket
from dataclasses import dataclass
from typing import Optional, Dict
import psutil


@dataclass
class InterfaceInfo:
    """Information about a network interface."""
    name: str
    mac_address: Optional[str]
    ipv4_address: Optional[str]
    ipv4_netmask: Optional[str]
    is_up: bool

    @property
    def subnet(self) -> Optional[str]:
        """IPv4 network of the interface in CIDR form."""
        if not self.ipv4_address or not self.ipv4_netmask:
            return None
        try:
            network = ipaddress.IPv4Network(
                f"{self.ipv4_address}/{self.ipv4_netmask}", strict=False
            )
        except ValueError:
            return None
        return str(network)


class InterfaceManager:
    """Enumerates local interfaces with psutil."""

    def __init__(self):
        self._interfaces: Dict[str, InterfaceInfo] = {}
        self.refresh()

    def refresh(self) -> None:
        """Refresh the list of network interfaces."""
        self._interfaces.clear()

        stats = psutil.net_if_stats()
        addrs = psutil.net_if_addrs()

        for name, stat in stats.items():
            ipv4_addr = None
            ipv4_mask = None
            mac_addr = None

            for addr in addrs.get(name, []):
                if addr.family == socket.AF_INET and ipv4_addr is None:
                    ipv4_addr = addr.address
                    ipv4_mask = addr.netmask
                elif addr.family == psutil.AF_LINK:
                    mac_addr = addr.address

            self._interfaces[name] = InterfaceInfo(
                name=name,
                mac_address=mac_addr,
                ipv4_address=ipv4_addr,
                ipv4_netmask=ipv4_mask,
                is_up=stat.isup,
            )

    def get_by_name(self, name: str) -> Optional[InterfaceInfo]:
        """Get interface by name."""
        return self._interfaces.get(name)
