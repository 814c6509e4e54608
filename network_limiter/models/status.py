"""Packet filter status model."""

from dataclasses import dataclass
from typing import List, Optional


@dataclass
class StatusReport:
    """Snapshot of pf state and the files this tool manages."""
    enabled: bool
    info_header: str
    loaded_rules: List[str]
    rules_file: str
    rules_file_contents: Optional[str]
    anchor_file: str
    anchor_installed: bool
    pf_conf: str
    pf_conf_marker: bool

    @property
    def rules_file_present(self) -> bool:
        return self.rules_file_contents is not None

    @property
    def persistent(self) -> bool:
        return self.anchor_installed and self.pf_conf_marker
