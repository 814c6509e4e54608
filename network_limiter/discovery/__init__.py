"""Device discovery layer."""

from .scanner import NetworkScanner, parse_arp_table, parse_nmap_output, parse_network_name

__all__ = [
    "NetworkScanner",
    "parse_arp_table",
    "parse_nmap_output",
    "parse_network_name",
]
