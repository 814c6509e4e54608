"""Data models for network limiter."""

from .device import Device, ScanResult
from .status import StatusReport

__all__ = [
    "Device",
    "ScanResult",
    "StatusReport",
]
