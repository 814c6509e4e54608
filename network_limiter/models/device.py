"""Discovered device models."""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class Device:
    """A host seen on the local network."""
    ip: str
    mac: Optional[str] = None
    hostname: Optional[str] = None
    interface: Optional[str] = None
    vendor: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.hostname or "?"

    def merge(self, other: "Device") -> None:
        """Fill missing fields from another sighting of the same IP."""
        self.mac = self.mac or other.mac
        self.hostname = self.hostname or other.hostname
        self.interface = self.interface or other.interface
        self.vendor = self.vendor or other.vendor


@dataclass
class ScanResult:
    """Outcome of a network scan on one interface."""
    interface: str
    network_name: Optional[str] = None
    local_address: Optional[str] = None
    subnet: Optional[str] = None
    devices: List[Device] = field(default_factory=list)
    nmap_used: bool = False

    @property
    def device_count(self) -> int:
        return len(self.devices)
