"""Command dispatcher: the scan, monitor, limit, remove and status operations."""

import logging
from pathlib import Path
from typing import Callable, Optional

from .config import LimiterConfig
from .discovery.scanner import NetworkScanner
from .errors import NoRulesError
from .models.device import ScanResult
from .models.status import StatusReport
from .pf.controller import PacketFilter
from .pf.persistence import AnchorInstaller
from .pf.rules import limit_rules, monitor_rules, references_ip, validate_ip
from .system.privileges import require_root
from .system.runner import CommandRunner


logger = logging.getLogger(__name__)


class CommandDispatcher:
    """
    Runs each operation as a linear sequence of OS commands.

    Privileged operations check for root before touching the filesystem
    or spawning anything. The first failing command aborts the operation;
    rules already applied are left in place.
    """

    def __init__(
        self,
        config: Optional[LimiterConfig] = None,
        runner: Optional[CommandRunner] = None,
        privilege_check: Callable[[str], None] = require_root,
        scanner: Optional[NetworkScanner] = None,
    ):
        self.config = config or LimiterConfig()
        self.runner = runner or CommandRunner(timeout=self.config.commands.timeout)
        self._require_root = privilege_check

        self.pf = PacketFilter(self.runner)
        self.anchor = AnchorInstaller(self.config.paths, self.runner)
        self.scanner = scanner or NetworkScanner(
            self.runner,
            scan_config=self.config.scan,
            command_config=self.config.commands,
        )

    @property
    def rules_file(self) -> Path:
        return Path(self.config.paths.rules_file)

    def scan(self, interface: Optional[str] = None) -> ScanResult:
        """Discover devices on an interface. Does not need root."""
        return self.scanner.scan(interface or self.config.scan.interface)

    def monitor(self, ip: str, persistent: bool = False) -> str:
        """Apply monitoring rules for an IP. Returns the rule text."""
        self._require_root("monitor")
        ip = validate_ip(ip)
        rules = monitor_rules(ip)
        self._apply(rules, persistent)
        logger.info("Started monitoring %s", ip)
        return rules

    def limit(
        self,
        ip: str,
        upload: Optional[int] = None,
        download: Optional[int] = None,
        persistent: bool = False,
    ) -> str:
        """Apply bandwidth limiting rules for an IP. Returns the rule text."""
        self._require_root("limit")
        ip = validate_ip(ip)
        rules = limit_rules(ip, upload=upload, download=download)
        self._apply(rules, persistent)
        logger.info("Bandwidth limits applied for %s", ip)
        return rules

    def remove(self, ip: str) -> None:
        """Remove rules referencing an IP and reload the base pf.conf."""
        self._require_root("remove")
        ip = validate_ip(ip)
        found = False

        if self.rules_file.exists() and references_ip(self.rules_file.read_text(), ip):
            self.runner.run(["rm", "-f", str(self.rules_file)])
            logger.info("Removed rule file %s", self.rules_file)
            found = True

        if self.anchor.anchor_installed() and references_ip(self.anchor.read_anchor(), ip):
            self.anchor.uninstall()
            found = True

        if not found:
            raise NoRulesError(ip)

        self.pf.load(self.config.paths.pf_conf)
        logger.info("Removed rules for %s", ip)

    def status(self) -> StatusReport:
        """Report pf state and which managed files are installed."""
        self._require_root("status")

        enabled, header = self.pf.info()
        loaded = self.pf.rules()
        contents = self.rules_file.read_text() if self.rules_file.exists() else None

        return StatusReport(
            enabled=enabled,
            info_header=header,
            loaded_rules=loaded,
            rules_file=str(self.rules_file),
            rules_file_contents=contents,
            anchor_file=self.config.paths.anchor_file,
            anchor_installed=self.anchor.anchor_installed(),
            pf_conf=self.config.paths.pf_conf,
            pf_conf_marker=self.anchor.marker_present(),
        )

    def _apply(self, rules: str, persistent: bool) -> None:
        self.rules_file.write_text(rules)
        logger.debug("Wrote %d bytes to %s", len(rules), self.rules_file)

        self.pf.enable()
        self.pf.load(str(self.rules_file))

        if persistent:
            self.anchor.install(str(self.rules_file))
