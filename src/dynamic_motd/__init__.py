"""Dynamic MOTD - system status login banner installer for Debian and Fedora."""

__version__ = "4.1.0"
__author__ = "DevOps Team"
__license__ = "MIT"

from dynamic_motd.exceptions import (
    ConfigurationError,
    DependencyDegraded,
    InsufficientPrivilegeError,
    MethodVerificationFailed,
    MotdError,
    UnsupportedPlatformError,
)
from dynamic_motd.installer import MotdInstaller
from dynamic_motd.system_info import SystemInfo

__all__ = [
    "MotdInstaller",
    "SystemInfo",
    "MotdError",
    "ConfigurationError",
    "DependencyDegraded",
    "InsufficientPrivilegeError",
    "MethodVerificationFailed",
    "UnsupportedPlatformError",
]
