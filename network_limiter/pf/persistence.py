"""Installing rules so pf loads them at boot."""

import logging
import os
from pathlib import Path

from ..config import PathsConfig
from ..system.runner import CommandRunner


logger = logging.getLogger(__name__)


def marker_begin(anchor_name: str) -> str:
    return f"# BEGIN {anchor_name}"


def marker_end(anchor_name: str) -> str:
    return f"# END {anchor_name}"


def has_marker(text: str, anchor_name: str) -> bool:
    """Check for the begin marker as a whole line."""
    begin = marker_begin(anchor_name)
    return any(line.strip() == begin for line in text.splitlines())


def anchor_block(paths: PathsConfig) -> str:
    """Text inserted into pf.conf to load the anchor file."""
    return (
        f"{marker_begin(paths.anchor_name)}\n"
        f'anchor "{paths.anchor_name}"\n'
        f'load anchor "{paths.anchor_name}" from "{paths.anchor_file}"\n'
        f"{marker_end(paths.anchor_name)}\n"
    )


def insert_anchor_block(text: str, paths: PathsConfig) -> str:
    """Append the anchor block unless the marker is already present."""
    if has_marker(text, paths.anchor_name):
        return text
    if text and not text.endswith("\n"):
        text += "\n"
    return text + anchor_block(paths)


def strip_anchor_block(text: str, paths: PathsConfig) -> str:
    """Remove the marker-delimited block, leaving everything else intact."""
    begin = marker_begin(paths.anchor_name)
    end = marker_end(paths.anchor_name)

    kept = []
    inside = False
    for line in text.splitlines(keepends=True):
        stripped = line.strip()
        if stripped == begin:
            inside = True
            continue
        if inside:
            if stripped == end:
                inside = False
            continue
        kept.append(line)

    return "".join(kept)


class AnchorInstaller:
    """Manages the anchor file and its marker block in pf.conf."""

    def __init__(self, paths: PathsConfig, runner: CommandRunner):
        self.paths = paths
        self.runner = runner

    def anchor_installed(self) -> bool:
        return os.path.exists(self.paths.anchor_file)

    def marker_present(self) -> bool:
        pf_conf = Path(self.paths.pf_conf)
        if not pf_conf.exists():
            return False
        return has_marker(pf_conf.read_text(), self.paths.anchor_name)

    def read_anchor(self) -> str:
        anchor = Path(self.paths.anchor_file)
        return anchor.read_text() if anchor.exists() else ""

    def install(self, rules_file: str) -> bool:
        """
        Copy the rule file into the anchor directory and register it.

        Returns True if pf.conf was modified, False if the marker was
        already present.
        """
        Path(self.paths.anchor_dir).mkdir(parents=True, exist_ok=True)
        self.runner.run(["cp", rules_file, self.paths.anchor_file])
        logger.info("Installed anchor file %s", self.paths.anchor_file)

        pf_conf = Path(self.paths.pf_conf)
        original = pf_conf.read_text() if pf_conf.exists() else ""
        updated = insert_anchor_block(original, self.paths)

        if updated == original:
            logger.info("%s already loads anchor %s", self.paths.pf_conf, self.paths.anchor_name)
            return False

        if pf_conf.exists() and not os.path.exists(self.paths.pf_conf_backup):
            self.runner.run(["cp", self.paths.pf_conf, self.paths.pf_conf_backup])
            logger.info("Backed up %s to %s", self.paths.pf_conf, self.paths.pf_conf_backup)

        pf_conf.write_text(updated)
        logger.info("Registered anchor %s in %s", self.paths.anchor_name, self.paths.pf_conf)
        return True

    def uninstall(self) -> None:
        """Delete the anchor file and remove its block from pf.conf."""
        if self.anchor_installed():
            self.runner.run(["rm", "-f", self.paths.anchor_file])
            logger.info("Removed anchor file %s", self.paths.anchor_file)

        pf_conf = Path(self.paths.pf_conf)
        if pf_conf.exists():
            original = pf_conf.read_text()
            updated = strip_anchor_block(original, self.paths)
            if updated != original:
                pf_conf.write_text(updated)
                logger.info("Unregistered anchor %s from %s", self.paths.anchor_name, self.paths.pf_conf)
