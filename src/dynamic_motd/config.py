"""Configuration management for Dynamic MOTD."""

import json
from pathlib import Path
from typing import Annotated, List, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    NoDecode,
    SettingsConfigDict,
    SettingsError,
)

from dynamic_motd.exceptions import ConfigurationError


def parse_name_list(v: object) -> List[str]:
    """Parse names from a comma-separated string, a JSON array or a list."""
    if isinstance(v, str):
        if v.strip().startswith("["):
            v = json.loads(v)
        else:
            return [n.strip() for n in v.split(",") if n.strip()]
    if isinstance(v, list):
        return [str(n).strip() for n in v if str(n).strip()]
    return []


class PathsConfig(BaseSettings):
    """Canonical filesystem locations touched by the installer."""

    os_release: Path = Field(default=Path("/etc/os-release"))
    debian_marker: Path = Field(default=Path("/etc/debian_version"))
    fedora_marker: Path = Field(default=Path("/etc/fedora-release"))

    hook_dir: Path = Field(default=Path("/etc/update-motd.d"))
    hook_script: Path = Field(default=Path("/etc/update-motd.d/00-dynamic-motd"))
    profile_script: Path = Field(default=Path("/etc/profile.d/00-dynamic-motd.sh"))
    trigger_command: Path = Field(default=Path("/usr/bin/update-motd"))
    banner_cache: Path = Field(default=Path("/run/motd.dynamic"))

    pam_config: Path = Field(default=Path("/etc/pam.d/sshd"))
    pam_backup: Path = Field(default=Path("/etc/pam.d/sshd.backup"))
    static_banner: Path = Field(default=Path("/etc/motd"))
    static_banner_backup: Path = Field(default=Path("/etc/motd.backup"))

    # Scripts written by earlier releases of the installer
    legacy_artifacts: List[Path] = Field(
        default_factory=lambda: [
            Path("/etc/profile.d/motd.sh"),
            Path("/etc/profile.d/00-motd.sh"),
            Path("/etc/update-motd.d/10-dynamic-motd"),
        ]
    )

    model_config = SettingsConfigDict(
        env_prefix="MOTD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def artifact_paths(self) -> List[Path]:
        """Every generated file any installer version may have left behind."""
        paths: List[Path] = []
        for path in [
            self.hook_script,
            self.profile_script,
            *self.legacy_artifacts,
            self.banner_cache,
        ]:
            if path not in paths:
                paths.append(path)
        return paths

    def removal_paths(self) -> List[Path]:
        """Paths deleted on uninstall: all artifacts plus the trigger."""
        paths = self.artifact_paths()
        if self.trigger_command not in paths:
            paths.append(self.trigger_command)
        return paths


class BannerConfig(BaseSettings):
    """Generated banner behaviour."""

    ssh_only: bool = Field(
        default=False,
        description="Only show the profile.d banner in SSH sessions",
    )

    model_config = SettingsConfigDict(
        env_prefix="BANNER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class DependencyConfig(BaseSettings):
    """Optional display dependencies."""

    packages: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: ["bc", "toilet", "figlet"]
    )
    renderer: str = Field(default="toilet")
    calculator: str = Field(default="bc")
    install_timeout: int = Field(default=300, ge=1)
    verify_timeout: int = Field(default=30, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="DEPS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("packages", mode="before")
    @classmethod
    def parse_packages(cls, v: object) -> List[str]:
        """Parse packages from comma-separated string or list."""
        return parse_name_list(v)


class ServiceConfig(BaseSettings):
    """SSH daemon restart settings."""

    restart_ssh: bool = Field(default=True)
    ssh_units: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: ["sshd", "ssh"]
    )

    model_config = SettingsConfigDict(
        env_prefix="SERVICE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("ssh_units", mode="before")
    @classmethod
    def parse_units(cls, v: object) -> List[str]:
        """Parse unit names from comma-separated string or list."""
        return parse_name_list(v)


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    level: str = Field(default="INFO")
    file: Optional[Path] = Field(default=None)

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class InstallerConfig(BaseSettings):
    """Main configuration container."""

    paths: PathsConfig = Field(default_factory=PathsConfig)
    banner: BannerConfig = Field(default_factory=BannerConfig)
    deps: DependencyConfig = Field(default_factory=DependencyConfig)
    service: ServiceConfig = Field(default_factory=ServiceConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def from_env(cls) -> "InstallerConfig":
        """Create configuration from environment variables.

        Raises:
            ConfigurationError: A variable could not be parsed
        """
        try:
            return cls(
                paths=PathsConfig(),
                banner=BannerConfig(),
                deps=DependencyConfig(),
                service=ServiceConfig(),
                logging=LoggingConfig(),
            )
        except (SettingsError, ValidationError) as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    def validate_config(self) -> List[str]:
        """Validate configuration and return list of issues."""
        issues: List[str] = []
        paths = self.paths

        if paths.hook_script.parent != paths.hook_dir:
            issues.append(
                f"Hook script {paths.hook_script} is not inside {paths.hook_dir}"
            )

        if paths.pam_backup == paths.pam_config:
            issues.append("PAM backup path must differ from the PAM config path")

        if paths.static_banner_backup == paths.static_banner:
            issues.append("MOTD backup path must differ from the MOTD path")

        if paths.hook_script == paths.profile_script:
            issues.append("Hook and profile scripts must be different files")

        if not self.deps.packages:
            issues.append("No dependency packages configured")

        if not self.deps.renderer:
            issues.append("No renderer command configured")

        return issues
