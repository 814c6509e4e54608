"""Local network device discovery."""

import ipaddress
import logging
import re
from typing import Callable, Dict, List, Optional

from ..config import ScanConfig, CommandConfig
from ..errors import CommandError, InterfaceNotFoundError
from ..models.device import Device, ScanResult
from ..system.interface_manager import InterfaceManager
from ..system.runner import CommandRunner


logger = logging.getLogger(__name__)


# macOS: "? (192.168.1.1) at 0:1b:2c:3d:4e:5f on en0 ifscope [ethernet]"
# Linux: "router (192.168.1.1) at 00:1b:2c:3d:4e:5f [ether] on eth0"
ARP_LINE = re.compile(
    r"^(?P<host>\S+)\s+\((?P<ip>[0-9.]+)\)\s+at\s+(?P<mac>\S+)"
    r"(?:\s+\[\w+\])?\s+on\s+(?P<iface>\S+)"
)
NMAP_REPORT = re.compile(r"^Nmap scan report for (?:(?P<host>\S+) \((?P<ip>[0-9.]+)\)|(?P<bare>[0-9.]+))")
NMAP_MAC = re.compile(r"^MAC Address:\s+(?P<mac>[0-9A-Fa-f:]+)(?:\s+\((?P<vendor>[^)]*)\))?")
NETWORK_NAME = re.compile(r"Current (?:Wi-Fi|AirPort) Network:\s*(?P<name>.+)")

BROADCAST_MAC = "ff:ff:ff:ff:ff:ff"


def normalize_mac(mac: str) -> Optional[str]:
    """Lowercase a MAC and zero-pad octets (macOS arp drops leading zeros)."""
    parts = mac.strip().lower().split(":")
    if len(parts) != 6 or not all(re.fullmatch(r"[0-9a-f]{1,2}", p) for p in parts):
        return None
    return ":".join(p.zfill(2) for p in parts)


def parse_network_name(output: str) -> Optional[str]:
    """Parse `networksetup -getairportnetwork` output."""
    match = NETWORK_NAME.search(output)
    if match:
        return match.group("name").strip()
    return None


def parse_arp_table(output: str, interface: Optional[str] = None) -> List[Device]:
    """
    Parse `arp -a` output into devices.

    Incomplete and broadcast entries are skipped. When an interface is
    given, only entries on that interface are returned.
    """
    devices = []
    for line in output.splitlines():
        match = ARP_LINE.match(line.strip())
        if not match:
            continue

        if interface and match.group("iface") != interface:
            continue

        mac = normalize_mac(match.group("mac"))
        if mac is None or mac == BROADCAST_MAC:
            continue

        host = match.group("host")
        devices.append(Device(
            ip=match.group("ip"),
            mac=mac,
            hostname=None if host == "?" else host,
            interface=match.group("iface"),
        ))
    return devices


def parse_nmap_output(output: str) -> List[Device]:
    """Parse `nmap -sn` host discovery output."""
    devices = []
    current = None

    for line in output.splitlines():
        line = line.strip()

        report = NMAP_REPORT.match(line)
        if report:
            if report.group("bare"):
                current = Device(ip=report.group("bare"))
            else:
                current = Device(ip=report.group("ip"), hostname=report.group("host"))
            devices.append(current)
            continue

        mac_line = NMAP_MAC.match(line)
        if mac_line and current is not None:
            current.mac = normalize_mac(mac_line.group("mac"))
            vendor = mac_line.group("vendor")
            if vendor and vendor.lower() != "unknown":
                current.vendor = vendor

    return devices


def merge_devices(*sightings: List[Device]) -> List[Device]:
    """Merge device lists by IP, sorted by address."""
    by_ip: Dict[str, Device] = {}
    for devices in sightings:
        for device in devices:
            if device.ip in by_ip:
                by_ip[device.ip].merge(device)
            else:
                by_ip[device.ip] = Device(**vars(device))

    return sorted(by_ip.values(), key=lambda d: ipaddress.IPv4Address(d.ip))


class NetworkScanner:
    """Discovers devices reachable on one interface."""

    def __init__(
        self,
        runner: CommandRunner,
        scan_config: Optional[ScanConfig] = None,
        command_config: Optional[CommandConfig] = None,
        interface_manager_factory: Callable[[], InterfaceManager] = InterfaceManager,
    ):
        self.runner = runner
        self.scan_config = scan_config or ScanConfig()
        self.command_config = command_config or CommandConfig()
        self._interface_manager_factory = interface_manager_factory

    def check_interface(self, interface: str) -> None:
        """Raise InterfaceNotFoundError unless ifconfig knows the interface."""
        try:
            self.runner.run(["ifconfig", interface])
        except CommandError as e:
            if e.returncode == 127:
                raise
            raise InterfaceNotFoundError(interface) from e

    def scan(self, interface: str) -> ScanResult:
        """Run the full discovery pipeline for an interface."""
        self.check_interface(interface)
        result = ScanResult(interface=interface)

        output = self.runner.run(["networksetup", "-getairportnetwork", interface])
        result.network_name = parse_network_name(output.stdout)
        logger.info("Current network: %s", result.network_name or output.stdout.strip())

        info = self._interface_manager_factory().get_by_name(interface)
        if info is not None:
            result.local_address = info.ipv4_address
            result.subnet = info.subnet

        nmap_devices = []
        if self._should_run_nmap(result.subnet):
            nmap_devices = self._nmap_sweep(result.subnet)
            result.nmap_used = True

        arp_output = self.runner.run(["arp", "-a"])
        arp_devices = parse_arp_table(arp_output.stdout, interface)
        for device in nmap_devices:
            device.interface = interface

        result.devices = merge_devices(arp_devices, nmap_devices)
        logger.info("Discovered %d devices on %s", result.device_count, interface)
        return result

    def _should_run_nmap(self, subnet: Optional[str]) -> bool:
        if not self.scan_config.use_nmap:
            return False
        if subnet is None:
            logger.warning("No IPv4 subnet on interface; skipping nmap sweep")
            return False
        if self.runner.which("nmap") is None:
            logger.warning("nmap not found; using the existing ARP cache only")
            return False
        return True

    def _nmap_sweep(self, subnet: str) -> List[Device]:
        logger.info("Sweeping %s with nmap", subnet)
        result = self.runner.run(
            ["nmap", *self.scan_config.nmap_args, subnet],
            timeout=self.command_config.scan_timeout,
        )
        return parse_nmap_output(result.stdout)
