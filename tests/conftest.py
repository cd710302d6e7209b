"""Pytest configuration and fixtures."""

import logging
import os
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pytest
import structlog

from dynamic_motd.config import InstallerConfig, PathsConfig
from dynamic_motd.installer import MotdInstaller
from dynamic_motd.system_info import SystemInfo
from dynamic_motd.types import CommandResult
from dynamic_motd.utils.command import CommandExecutor

ORIGINAL_PAM = """#%PAM-1.0
auth       required     pam_env.so
session    optional     pam_motd.so motd=/run/motd.dynamic
session    optional     pam_motd.so noupdate
session    required     pam_limits.so
"""

ORIGINAL_MOTD = "Welcome to a freshly installed host.\n"


class FakeExecutor(CommandExecutor):
    """Record commands instead of running them."""

    def __init__(
        self,
        available: Iterable[str] = ("toilet", "bc", "dnf", "systemctl"),
        failing: Iterable[str] = (),
    ) -> None:
        self.available = set(available)
        self.failing = list(failing)
        self.commands: List[str] = []
        self.envs: List[Optional[Dict[str, str]]] = []

    def execute(
        self,
        cmd: str,
        check: bool = True,
        timeout: int = 30,
        env: Optional[Dict[str, str]] = None,
    ) -> CommandResult:
        self.commands.append(cmd)
        self.envs.append(env)
        if cmd.startswith("command -v "):
            ok = cmd.split()[-1] in self.available
        else:
            ok = not any(pattern in cmd for pattern in self.failing)
        if ok:
            return CommandResult(True, "banner output\n", "", 0)
        return CommandResult(False, "", "failed", 1)


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    structlog.reset_defaults()
    package_logger = logging.getLogger("dynamic_motd")
    for handler in package_logger.handlers[:]:
        handler.close()
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)


def rebase(root: Path, path: Path) -> Path:
    return root / str(path).lstrip("/")


@pytest.fixture
def host_root(tmp_path: Path) -> Path:
    """Directory standing in for the filesystem root."""
    root = tmp_path / "root"
    root.mkdir()
    return root


@pytest.fixture
def paths(host_root: Path) -> PathsConfig:
    """Every configured path moved under host_root."""
    values = {}
    for name, field in PathsConfig.model_fields.items():
        default = field.get_default(call_default_factory=True)
        if isinstance(default, list):
            values[name] = [rebase(host_root, p) for p in default]
        else:
            values[name] = rebase(host_root, default)
    return PathsConfig(**values)


@pytest.fixture
def test_config(paths: PathsConfig) -> InstallerConfig:
    """Create test configuration."""
    config = InstallerConfig.from_env()
    config.paths = paths
    return config


@pytest.fixture
def as_root(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(os, "geteuid", lambda: 0)


@pytest.fixture
def as_user(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(os, "geteuid", lambda: 1000)


@pytest.fixture
def make_installer(test_config: InstallerConfig):
    """Build an installer around a fake executor."""

    def _make(executor: Optional[FakeExecutor] = None) -> MotdInstaller:
        executor = executor or FakeExecutor()
        system = SystemInfo(test_config.paths, executor)
        return MotdInstaller(test_config, executor=executor, system=system)

    return _make


def write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)


@pytest.fixture
def debian_host(paths: PathsConfig) -> PathsConfig:
    """A Debian host with update-motd.d, an SSH PAM stack and a static MOTD."""
    write(paths.os_release, 'PRETTY_NAME="Debian GNU/Linux 12 (bookworm)"\nID=debian\n')
    paths.hook_dir.mkdir(parents=True)
    write(paths.pam_config, ORIGINAL_PAM)
    write(paths.static_banner, ORIGINAL_MOTD)
    return paths


@pytest.fixture
def fedora_host(paths: PathsConfig) -> PathsConfig:
    """A Fedora host with a static MOTD."""
    write(paths.os_release, 'NAME="Fedora Linux"\nID=fedora\nVERSION_ID=40\n')
    write(paths.pam_config, ORIGINAL_PAM)
    write(paths.static_banner, ORIGINAL_MOTD)
    return paths


def snapshot(root: Path) -> Dict[str, bytes]:
    """Map every file under root to its content."""
    return {
        str(p.relative_to(root)): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }
