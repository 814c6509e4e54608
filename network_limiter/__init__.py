"""
Network Limiter - LAN Device Discovery and Packet Filter Control

A command-line tool for discovering devices on the local network and
driving the pf packet filter to monitor or throttle traffic for a
single IP address.
"""

__version__ = "0.3.0"
__author__ = "Network Team"
