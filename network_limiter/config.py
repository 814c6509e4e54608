"""Configuration management for network limiter."""

from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any
from pathlib import Path
import os

import yaml

from .errors import ConfigError


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    """Return a config section, which must be a mapping when present."""
    section = data[name] or {}
    if not isinstance(section, dict):
        raise ConfigError(f"Config section '{name}' must be a mapping, got {type(section).__name__}")
    return section


@dataclass
class PathsConfig:
    """Filesystem locations touched by pf operations."""
    rules_file: str = "/tmp/pf.rules"
    anchor_name: str = "network-limiter"
    anchor_dir: str = "/etc/pf.anchors"
    pf_conf: str = "/etc/pf.conf"

    @property
    def anchor_file(self) -> str:
        return os.path.join(self.anchor_dir, self.anchor_name)

    @property
    def pf_conf_backup(self) -> str:
        return f"{self.pf_conf}.{self.anchor_name}.bak"


@dataclass
class ScanConfig:
    """Device discovery configuration."""
    interface: str = "en0"
    use_nmap: bool = True
    nmap_args: List[str] = field(default_factory=lambda: ["-sn"])


@dataclass
class CommandConfig:
    """Subprocess execution configuration."""
    timeout: float = 30.0  # seconds
    scan_timeout: float = 300.0  # nmap sweeps take longer


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "WARNING"


@dataclass
class LimiterConfig:
    """Main configuration container."""
    paths: PathsConfig = field(default_factory=PathsConfig)
    scan: ScanConfig = field(default_factory=ScanConfig)
    commands: CommandConfig = field(default_factory=CommandConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LimiterConfig":
        """Create config from dictionary."""
        if not isinstance(data, dict):
            raise ConfigError("Configuration root must be a mapping")

        config = cls()

        if "paths" in data:
            paths = _section(data, "paths")
            config.paths = PathsConfig(
                rules_file=paths.get("rules_file", "/tmp/pf.rules"),
                anchor_name=paths.get("anchor_name", "network-limiter"),
                anchor_dir=paths.get("anchor_dir", "/etc/pf.anchors"),
                pf_conf=paths.get("pf_conf", "/etc/pf.conf"),
            )

        if "scan" in data:
            scan = _section(data, "scan")
            nmap_args = scan.get("nmap_args", ["-sn"])
            if not isinstance(nmap_args, list):
                raise ConfigError(f"scan.nmap_args must be a list, got {nmap_args!r}")
            config.scan = ScanConfig(
                interface=scan.get("interface", "en0"),
                use_nmap=scan.get("use_nmap", True),
                nmap_args=[str(arg) for arg in nmap_args],
            )

        if "commands" in data:
            cmds = _section(data, "commands")
            try:
                config.commands = CommandConfig(
                    timeout=float(cmds.get("timeout", 30.0)),
                    scan_timeout=float(cmds.get("scan_timeout", 300.0)),
                )
            except (TypeError, ValueError) as e:
                raise ConfigError(f"Invalid command timeout: {e}") from e

        if "logging" in data:
            log = _section(data, "logging")
            config.logging = LoggingConfig(
                level=str(log.get("level", "WARNING")).upper(),
            )

        return config

    @classmethod
    def from_yaml(cls, path: str) -> "LimiterConfig":
        """Load config from YAML file."""
        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e
        return cls.from_dict(data or {})

    @classmethod
    def load(cls, path: Optional[str] = None) -> "LimiterConfig":
        """Load config from file or use defaults."""
        if path and not os.path.exists(path):
            raise ConfigError(f"Config file not found: {path}")

        # Search paths
        search_paths = [
            path,
            "config.yaml",
            "config.yml",
            os.path.expanduser("~/.config/network-limiter/config.yaml"),
            "/etc/network-limiter/config.yaml",
        ]

        for config_path in search_paths:
            if config_path and os.path.exists(config_path):
                return cls.from_yaml(config_path)

        # Return defaults
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "paths": {
                "rules_file": self.paths.rules_file,
                "anchor_name": self.paths.anchor_name,
                "anchor_dir": self.paths.anchor_dir,
                "pf_conf": self.paths.pf_conf,
            },
            "scan": {
                "interface": self.scan.interface,
                "use_nmap": self.scan.use_nmap,
                "nmap_args": list(self.scan.nmap_args),
            },
            "commands": {
                "timeout": self.commands.timeout,
                "scan_timeout": self.commands.scan_timeout,
            },
            "logging": {
                "level": self.logging.level,
            },
        }

    def save_yaml(self, path: str) -> None:
        """Save config to YAML file."""
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False)
