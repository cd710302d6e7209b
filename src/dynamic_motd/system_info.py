"""System information detection for Dynamic MOTD."""

import os
from typing import Dict, List, Optional, Tuple

from dynamic_motd.config import PathsConfig
from dynamic_motd.exceptions import UnsupportedPlatformError
from dynamic_motd.types import OSFamily, PackageManager, PlatformInfo
from dynamic_motd.utils.command import CommandExecutor

DEBIAN_IDS = ("debian", "ubuntu", "raspbian")
FEDORA_IDS = ("fedora", "centos", "rhel", "rocky", "alma", "almalinux")


def parse_os_release(content: str) -> Dict[str, str]:
    """Parse os-release KEY=value lines into a dict."""
    fields: Dict[str, str] = {}
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        fields[key.strip()] = value.strip().strip('"').strip("'")
    return fields


def classify(os_id: str) -> Optional[OSFamily]:
    """Map an os-release ID onto a supported family."""
    os_id = os_id.lower()
    if os_id in DEBIAN_IDS:
        return OSFamily.DEBIAN
    if os_id in FEDORA_IDS:
        return OSFamily.FEDORA
    return None


class SystemInfo:
    """Detect host platform and privileges."""

    def __init__(self, paths: PathsConfig, executor: CommandExecutor) -> None:
        """Initialize system information detection.

        Args:
            paths: Locations of the release descriptor and marker files
            executor: Used to check for available commands
        """
        self.paths = paths
        self.executor = executor
        self.is_root = os.geteuid() == 0

    def detect_platform(self) -> PlatformInfo:
        """Identify the OS family and its package manager.

        Raises:
            UnsupportedPlatformError: No release signature, or an unhandled family
        """
        os_id, candidates = self._release_candidates()
        if os_id is None:
            raise UnsupportedPlatformError("Unsupported operating system")

        family = None
        for candidate in candidates:
            family = classify(candidate)
            if family is not None:
                break

        if family is None:
            raise UnsupportedPlatformError(f"Unsupported OS: {os_id}")

        return PlatformInfo(
            os_id=os_id,
            family=family,
            package_manager=self._select_package_manager(family),
        )

    def _release_candidates(self) -> Tuple[Optional[str], List[str]]:
        """Return the primary OS id and every id worth classifying, in order."""
        if self.paths.os_release.exists():
            with open(self.paths.os_release) as f:
                fields = parse_os_release(f.read())
            os_id = fields.get("ID", "").lower()
            if not os_id:
                return None, []
            like = fields.get("ID_LIKE", "").lower().split()
            return os_id, [os_id, *like]

        if self.paths.debian_marker.exists():
            return "debian", ["debian"]
        if self.paths.fedora_marker.exists():
            return "fedora", ["fedora"]
        return None, []

    def _select_package_manager(self, family: OSFamily) -> PackageManager:
        """Pick the package manager for a family."""
        if family == OSFamily.DEBIAN:
            return PackageManager.APT
        if self.executor.check_command_available("dnf"):
            return PackageManager.DNF
        return PackageManager.YUM

    def get_package_install_commands(
        self, package_manager: PackageManager, packages: List[str]
    ) -> List[str]:
        """Get the commands that install packages on this system."""
        names = " ".join(packages)
        commands = {
            PackageManager.APT: ["apt-get update -qq", f"apt-get install -y {names}"],
            PackageManager.DNF: [f"dnf install -y {names}"],
            PackageManager.YUM: [f"yum install -y {names}"],
        }
        return commands[package_manager]
