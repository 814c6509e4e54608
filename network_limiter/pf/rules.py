"""pf rule-file templates."""

import ipaddress
import re
from typing import Optional

from ..errors import ValidationError


MONITOR_HEADER = "# Monitoring rules"
LIMIT_HEADER = "# Bandwidth limiting rules"


def validate_ip(ip: str) -> str:
    """Return the canonical form of an IPv4 address or raise ValidationError."""
    try:
        return str(ipaddress.IPv4Address(ip.strip()))
    except ValueError:
        raise ValidationError(f"Invalid IPv4 address: {ip!r}")


def validate_rate(name: str, value: Optional[int]) -> Optional[int]:
    if value is None:
        return None
    if value <= 0:
        raise ValidationError(f"{name} limit must be a positive number of KB/s, got {value}")
    return value


def monitor_rules(ip: str) -> str:
    """Rules that drop all tcp/udp/icmp traffic to and from the target."""
    ip = validate_ip(ip)
    return (
        f"{MONITOR_HEADER}\n"
        f"block drop in proto {{tcp udp icmp}} from {ip} to any\n"
        f"block drop out proto {{tcp udp icmp}} from any to {ip}\n"
    )


def limit_rules(ip: str, upload: Optional[int] = None, download: Optional[int] = None) -> str:
    """
    Rules that throttle new TCP connections for the target.

    Each rate caps both the number of source states and the connection
    rate per 5 seconds. At least one of upload/download is required.
    """
    ip = validate_ip(ip)
    upload = validate_rate("Upload", upload)
    download = validate_rate("Download", download)

    if upload is None and download is None:
        raise ValidationError("Specify at least one of --upload or --download")

    lines = [LIMIT_HEADER]

    if upload is not None:
        lines.append(
            f"pass out proto tcp from {ip} to any flags S/SA keep state "
            f"(max-src-states {upload}, max-src-conn-rate {upload}/5)"
        )

    if download is not None:
        lines.append(
            f"pass in proto tcp from any to {ip} flags S/SA keep state "
            f"(max-src-states {download}, max-src-conn-rate {download}/5)"
        )

    return "\n".join(lines) + "\n"


def references_ip(rules: str, ip: str) -> bool:
    """Check whether rule text has a from/to clause naming the IP."""
    pattern = rf"\b(?:from|to)\s+{re.escape(ip)}(?![\d.])"
    return re.search(pattern, rules) is not None
