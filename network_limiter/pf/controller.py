"""Thin wrapper over pfctl."""

import logging
from typing import List, Tuple

from ..system.runner import CommandRunner, CommandResult


logger = logging.getLogger(__name__)


def parse_info_status(output: str) -> Tuple[bool, str]:
    """Extract the enabled flag and the Status line from `pfctl -s info`."""
    for line in output.splitlines():
        stripped = line.strip()
        if stripped.lower().startswith("status:"):
            state = stripped.split(":", 1)[1].strip().lower()
            return state.startswith("enabled"), stripped
    return False, ""


def parse_rules(output: str) -> List[str]:
    """Split `pfctl -s rules` output into rule lines."""
    return [line.strip() for line in output.splitlines() if line.strip()]


class PacketFilter:
    """Issues pfctl commands through a CommandRunner."""

    def __init__(self, runner: CommandRunner, pfctl: str = "pfctl"):
        self.runner = runner
        self.pfctl = pfctl

    def enable(self) -> CommandResult:
        """Enable pf. pfctl exits non-zero when pf is already enabled, so the status is ignored."""
        result = self.runner.run([self.pfctl, "-e"], check=False)
        if result.ok:
            logger.info("Packet filter enabled")
        else:
            logger.debug("pfctl -e: %s", result.stderr.strip())
        return result

    def load(self, path: str) -> CommandResult:
        """Load a ruleset file into pf, replacing the main ruleset."""
        result = self.runner.run([self.pfctl, "-f", path])
        logger.info("Loaded rules from %s", path)
        return result

    def info(self) -> Tuple[bool, str]:
        result = self.runner.run([self.pfctl, "-s", "info"])
        return parse_info_status(result.stdout)

    def rules(self) -> List[str]:
        result = self.runner.run([self.pfctl, "-s", "rules"])
        return parse_rules(result.stdout)
