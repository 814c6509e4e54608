"""Exceptions raised by network limiter operations."""

from typing import List, Optional


class LimiterError(Exception):
    """Base class for all errors surfaced to the user."""

    exit_code = 1


class CommandError(LimiterError):
    """An external command failed, timed out, or could not be started."""

    def __init__(self, command: List[str], returncode: int, stderr: str = ""):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr.strip()

        message = f"Command failed ({returncode}): {' '.join(self.command)}"
        if self.stderr:
            message += f"\n{self.stderr}"
        super().__init__(message)

    @property
    def name(self) -> str:
        return self.command[0] if self.command else ""

    @property
    def exit_code(self) -> int:
        return self.returncode if self.returncode > 0 else 1


class PrivilegeError(LimiterError):
    """Operation requires root privileges."""

    def __init__(self, operation: Optional[str] = None):
        self.operation = operation
        what = f"'{operation}'" if operation else "This command"
        super().__init__(f"{what} requires root privileges. Please run with sudo.")


class InterfaceNotFoundError(LimiterError):
    """Network interface does not exist."""

    def __init__(self, interface: str):
        self.interface = interface
        super().__init__(f"Interface {interface} not found")


class NoRulesError(LimiterError):
    """No installed rules reference the given IP."""

    def __init__(self, ip: str):
        self.ip = ip
        super().__init__(f"No rules found for {ip}")


class ValidationError(LimiterError):
    """Invalid user input."""


class ConfigError(LimiterError):
    """Configuration file is missing or malformed."""
