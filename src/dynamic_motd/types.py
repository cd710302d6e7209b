"""Type definitions for Dynamic MOTD."""

from enum import Enum
from pathlib import Path
from typing import NamedTuple


class OSFamily(str, Enum):
    """Supported OS families."""

    DEBIAN = "debian"
    FEDORA = "fedora"


class PackageManager(str, Enum):
    """Supported package managers."""

    APT = "apt"
    DNF = "dnf"
    YUM = "yum"


class IntegrationMethod(str, Enum):
    """Ways of hooking the banner into login."""

    HOOK_DIRECTORY = "update-motd.d"
    LOGIN_PROFILE = "profile.d"


class RenderMode(str, Enum):
    """Hostname rendering mode of the generated banner."""

    ENHANCED = "enhanced"
    FALLBACK = "fallback"


class CommandResult(NamedTuple):
    """Result of command execution."""

    success: bool
    stdout: str
    stderr: str
    return_code: int = 0


class PlatformInfo(NamedTuple):
    """Detected operating system."""

    os_id: str
    family: OSFamily
    package_manager: PackageManager


class Capabilities(NamedTuple):
    """Display tools available after dependency installation."""

    has_enhanced_renderer: bool
    has_calculator: bool

    @property
    def render_mode(self) -> RenderMode:
        if self.has_enhanced_renderer:
            return RenderMode.ENHANCED
        return RenderMode.FALLBACK


class InstallResult(NamedTuple):
    """Outcome of an install run."""

    success: bool
    method: IntegrationMethod
    render_mode: RenderMode
    artifact_path: Path
    fell_back: bool = False
