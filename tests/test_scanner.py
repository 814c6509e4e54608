import socket
from collections import namedtuple

import psutil
import pytest

from network_limiter.config import ScanConfig
from network_limiter.discovery.scanner import (
    NetworkScanner,
    normalize_mac,
    parse_arp_table,
    parse_network_name,
    parse_nmap_output,
)
from network_limiter.errors import CommandError, InterfaceNotFoundError
from network_limiter.system import interface_manager
from network_limiter.system.interface_manager import InterfaceInfo


MACOS_ARP = """\
? (192.168.1.1) at 0:1b:2c:3d:4e:5f on en0 ifscope [ethernet]
printer.lan (192.168.1.20) at a4:5e:60:e8:1:2 on en0 ifscope [ethernet]
? (192.168.1.30) at (incomplete) on en0 ifscope [ethernet]
? (192.168.1.255) at ff:ff:ff:ff:ff:ff on en0 ifscope [ethernet]
? (10.8.0.1) at 12:34:56:78:9a:bc on utun3 ifscope [ethernet]
"""

LINUX_ARP = """\
router (192.168.1.1) at 00:1b:2c:3d:4e:5f [ether] on wlan0
? (192.168.1.40) at <incomplete> on wlan0
"""

NMAP_SN = """\
Starting Nmap 7.94 ( https://nmap.org ) at 2026-10-17 10:00 PDT
Nmap scan report for router.lan (192.168.1.1)
Host is up (0.0031s latency).
MAC Address: 00:1B:2C:3D:4E:5F (Netgear)
Nmap scan report for 192.168.1.77
Host is up (0.012s latency).
MAC Address: 3C:22:FB:00:11:22 (Unknown)
Nmap scan report for laptop.lan (192.168.1.10)
Host is up.
Nmap done: 256 IP addresses (3 hosts up) scanned in 2.51 seconds
"""


class StubInterfaces:
    def __init__(self, info=None):
        self.info = info

    def get_by_name(self, name):
        return self.info


def make_scanner(runner, info=None, use_nmap=True):
    return NetworkScanner(
        runner,
        scan_config=ScanConfig(use_nmap=use_nmap),
        interface_manager_factory=lambda: StubInterfaces(info),
    )


EN0 = InterfaceInfo(
    name="en0",
    mac_address="a8:20:66:00:00:01",
    ipv4_address="192.168.1.10",
    ipv4_netmask="255.255.255.0",
    is_up=True,
)


def test_normalize_mac_pads_octets():
    assert normalize_mac("0:1B:2c:3:4e:5f") == "00:1b:2c:03:4e:5f"
    assert normalize_mac("(incomplete)") is None


def test_parse_network_name():
    assert parse_network_name("Current Wi-Fi Network: Home 5G\n") == "Home 5G"
    assert parse_network_name("Current AirPort Network: Cafe\n") == "Cafe"
    assert parse_network_name("You are not associated with an AirPort network.\n") is None


def test_parse_arp_table_macos():
    devices = parse_arp_table(MACOS_ARP, "en0")

    assert [d.ip for d in devices] == ["192.168.1.1", "192.168.1.20"]
    assert devices[0].mac == "00:1b:2c:3d:4e:5f"
    assert devices[0].hostname is None
    assert devices[1].hostname == "printer.lan"
    assert devices[1].mac == "a4:5e:60:e8:01:02"


def test_parse_arp_table_all_interfaces():
    assert len(parse_arp_table(MACOS_ARP)) == 3


def test_parse_arp_table_linux():
    devices = parse_arp_table(LINUX_ARP, "wlan0")
    assert len(devices) == 1
    assert devices[0].hostname == "router"
    assert devices[0].interface == "wlan0"


def test_parse_nmap_output():
    devices = parse_nmap_output(NMAP_SN)

    assert [d.ip for d in devices] == ["192.168.1.1", "192.168.1.77", "192.168.1.10"]
    assert devices[0].hostname == "router.lan"
    assert devices[0].vendor == "Netgear"
    assert devices[1].mac == "3c:22:fb:00:11:22"
    assert devices[1].vendor is None
    assert devices[2].mac is None


def test_interface_subnet():
    assert EN0.subnet == "192.168.1.0/24"


def test_missing_interface(runner):
    runner.respond(["ifconfig"], returncode=1, stderr="ifconfig: interface en9 does not exist")

    with pytest.raises(InterfaceNotFoundError) as excinfo:
        make_scanner(runner).scan("en9")

    assert excinfo.value.interface == "en9"
    assert runner.commands() == ["ifconfig en9"]


def test_missing_ifconfig_binary_is_not_a_missing_interface(runner):
    runner.respond(["ifconfig"], returncode=127, stderr="ifconfig: command not found")

    with pytest.raises(CommandError):
        make_scanner(runner).scan("en0")


def test_scan_merges_nmap_and_arp(runner):
    runner.respond(["networksetup"], stdout="Current Wi-Fi Network: Home\n")
    runner.respond(["nmap"], stdout=NMAP_SN)
    runner.respond(["arp", "-a"], stdout=MACOS_ARP)

    result = make_scanner(runner, EN0).scan("en0")

    assert runner.commands() == [
        "ifconfig en0",
        "networksetup -getairportnetwork en0",
        "nmap -sn 192.168.1.0/24",
        "arp -a",
    ]
    assert result.network_name == "Home"
    assert result.local_address == "192.168.1.10"
    assert result.nmap_used
    assert [d.ip for d in result.devices] == [
        "192.168.1.1", "192.168.1.10", "192.168.1.20", "192.168.1.77",
    ]
    router = result.devices[0]
    assert router.mac == "00:1b:2c:3d:4e:5f"
    assert router.hostname == "router.lan"
    assert router.vendor == "Netgear"
    assert all(d.interface == "en0" for d in result.devices)


def test_scan_without_nmap_uses_arp_cache(runner):
    runner.binaries.clear()
    runner.respond(["arp", "-a"], stdout=MACOS_ARP)

    result = make_scanner(runner, EN0).scan("en0")

    assert not result.nmap_used
    assert not any(cmd.startswith("nmap") for cmd in runner.commands())
    assert result.device_count == 2


def test_scan_nmap_disabled_in_config(runner):
    result = make_scanner(runner, EN0, use_nmap=False).scan("en0")
    assert not result.nmap_used
    assert "nmap -sn 192.168.1.0/24" not in runner.commands()


def test_scan_aborts_on_arp_failure(runner):
    runner.respond(["arp"], returncode=1, stderr="arp: permission denied")

    with pytest.raises(CommandError) as excinfo:
        make_scanner(runner, use_nmap=False).scan("en0")
    assert excinfo.value.name == "arp"


def test_interface_manager_reads_psutil(monkeypatch):
    Stat = namedtuple("Stat", "isup")
    Addr = namedtuple("Addr", "family address netmask")
    monkeypatch.setattr(interface_manager.psutil, "net_if_stats", lambda: {
        "en0": Stat(True),
        "lo0": Stat(True),
    })
    monkeypatch.setattr(interface_manager.psutil, "net_if_addrs", lambda: {
        "en0": [
            Addr(psutil.AF_LINK, "a8:20:66:00:00:01", None),
            Addr(socket.AF_INET, "192.168.1.10", "255.255.255.0"),
            Addr(socket.AF_INET, "192.168.1.11", "255.255.255.0"),
        ],
    })

    manager = interface_manager.InterfaceManager()
    en0 = manager.get_by_name("en0")

    assert en0.ipv4_address == "192.168.1.10"
    assert en0.mac_address == "a8:20:66:00:00:01"
    assert en0.subnet == "192.168.1.0/24"
    assert manager.get_by_name("lo0").subnet is None
    assert manager.get_by_name("en9") is None
