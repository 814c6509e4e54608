"""Shared fixtures: a recording command runner and tmp_path-backed config."""

import os
import shutil
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from network_limiter.config import LimiterConfig, PathsConfig
from network_limiter.dispatcher import CommandDispatcher
from network_limiter.errors import CommandError
from network_limiter.system.runner import CommandResult, CommandRunner


class FakeRunner(CommandRunner):
    """
    Records commands instead of running them.

    Responses are matched on the longest registered command prefix.
    `cp` and `rm -f` act on the real (temporary) filesystem so file
    side effects can be asserted.
    """

    def __init__(self):
        super().__init__(timeout=5)
        self.calls: List[List[str]] = []
        self.responses: Dict[Tuple[str, ...], Tuple[int, str, str]] = {}
        self.binaries = {"nmap": "/usr/local/bin/nmap"}

    def respond(self, prefix: Sequence[str], returncode: int = 0, stdout: str = "", stderr: str = "") -> None:
        self.responses[tuple(prefix)] = (returncode, stdout, stderr)

    def commands(self) -> List[str]:
        return [" ".join(call) for call in self.calls]

    def run(self, command, check=True, timeout=None) -> CommandResult:
        cmd = [str(part) for part in command]
        self.calls.append(cmd)

        returncode, stdout, stderr = self._lookup(cmd)
        if returncode == 0:
            self._apply_side_effects(cmd)

        result = CommandResult(command=cmd, returncode=returncode, stdout=stdout, stderr=stderr)
        if returncode != 0 and check:
            raise CommandError(cmd, returncode, stderr)
        return result

    def which(self, name: str) -> Optional[str]:
        return self.binaries.get(name)

    def _lookup(self, cmd: List[str]) -> Tuple[int, str, str]:
        for length in range(len(cmd), 0, -1):
            response = self.responses.get(tuple(cmd[:length]))
            if response is not None:
                return response
        return 0, "", ""

    def _apply_side_effects(self, cmd: List[str]) -> None:
        if cmd[0] == "cp":
            shutil.copyfile(cmd[1], cmd[2])
        elif cmd[:2] == ["rm", "-f"]:
            for path in cmd[2:]:
                if os.path.exists(path):
                    os.remove(path)


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def config(tmp_path):
    cfg = LimiterConfig()
    cfg.paths = PathsConfig(
        rules_file=str(tmp_path / "pf.rules"),
        anchor_name="network-limiter",
        anchor_dir=str(tmp_path / "pf.anchors"),
        pf_conf=str(tmp_path / "pf.conf"),
    )
    (tmp_path / "pf.conf").write_text(
        'scrub-anchor "com.apple/*"\n'
        'anchor "com.apple/*"\n'
        'load anchor "com.apple" from "/etc/pf.anchors/com.apple"\n'
    )
    return cfg


@pytest.fixture
def dispatcher(config, runner):
    """Dispatcher that believes it runs as root."""
    return CommandDispatcher(config=config, runner=runner, privilege_check=lambda operation=None: None)
