"""Install and uninstall the dynamic MOTD."""

import shlex
from pathlib import Path
from typing import List, Optional

import structlog

from dynamic_motd.config import InstallerConfig
from dynamic_motd.exceptions import (
    DependencyDegraded,
    InsufficientPrivilegeError,
    MethodVerificationFailed,
)
from dynamic_motd.system_info import SystemInfo
from dynamic_motd.templates import render_banner_script, render_trigger_script
from dynamic_motd.types import (
    Capabilities,
    CommandResult,
    InstallResult,
    IntegrationMethod,
    OSFamily,
    PlatformInfo,
)
from dynamic_motd.utils.command import CommandExecutor
from dynamic_motd.utils.file import FileManager

logger = structlog.get_logger()


class MotdInstaller:
    """Reconcile the dynamic MOTD integration on this host."""

    def __init__(
        self,
        config: InstallerConfig,
        executor: Optional[CommandExecutor] = None,
        system: Optional[SystemInfo] = None,
    ) -> None:
        """Initialize the installer.

        Args:
            config: Configuration object
            executor: Command runner, defaults to a real subprocess executor
            system: Platform detection, defaults to probing this host
        """
        self.config = config
        self.paths = config.paths
        self.executor = executor or CommandExecutor()
        self.system = system or SystemInfo(self.paths, self.executor)
        self.file_manager = FileManager()

        # Set during HookDirectory wiring so a fallback can undo it
        self._created_trigger = False

    def apply(self) -> InstallResult:
        """Install the banner, falling back to profile.d once if needed.

        Raises:
            InsufficientPrivilegeError: Not running as root
            UnsupportedPlatformError: OS not recognized
        """
        if not self.system.is_root:
            raise InsufficientPrivilegeError(
                "This command must be run as root (use sudo)"
            )

        platform = self.system.detect_platform()
        logger.info(
            "Detected platform",
            stage="detect",
            os=platform.os_id,
            package_manager=platform.package_manager.value,
        )

        self.cleanup()

        capabilities = self.install_dependencies(platform)

        method = self.select_method(platform)
        logger.info("Method chosen", stage="method_chosen", method=method.value)

        fell_back = False
        try:
            self._install_with(method, capabilities)
            success = True
        except MethodVerificationFailed as e:
            success = False
            if method == IntegrationMethod.HOOK_DIRECTORY:
                logger.warning("update-motd.d failed, trying profile.d", error=str(e))
                self._unwire_hook_directory()
                method = IntegrationMethod.LOGIN_PROFILE
                fell_back = True
                logger.info("Method chosen", stage="method_chosen", method=method.value)
                try:
                    self._install_with(method, capabilities)
                    success = True
                except MethodVerificationFailed as retry_error:
                    logger.error("profile.d method failed", error=str(retry_error))
            else:
                logger.error("profile.d method failed", error=str(e))

        self._restart_ssh_service()

        result = InstallResult(
            success=success,
            method=method,
            render_mode=capabilities.render_mode,
            artifact_path=self.artifact_path(method),
            fell_back=fell_back,
        )
        logger.info(
            "Install finished",
            stage="done",
            success=result.success,
            method=result.method.value,
            render_mode=result.render_mode.value,
            path=str(result.artifact_path),
        )
        return result

    def revert(self) -> List[str]:
        """Remove every trace of any installer version.

        Safe on a host that was never installed: missing files are skipped.

        Returns:
            Descriptions of the actions taken
        """
        actions: List[str] = []

        for path in self.paths.removal_paths():
            try:
                if self.file_manager.remove_quietly(path):
                    actions.append(f"removed {path}")
            except OSError as e:
                logger.warning("Could not remove file", path=str(path), error=str(e))

        restores = [
            (self.paths.static_banner_backup, self.paths.static_banner, "original MOTD"),
            (self.paths.pam_backup, self.paths.pam_config, "original PAM configuration"),
        ]
        for backup, original, label in restores:
            try:
                if self.file_manager.restore_backup(backup, original):
                    actions.append(f"restored {label}")
                    logger.info("Restored backup", path=str(original))
            except OSError as e:
                logger.warning(
                    "Could not restore backup", path=str(original), error=str(e)
                )

        logger.info("Uninstall finished", actions=len(actions))
        return actions

    def preview(self, method: IntegrationMethod) -> str:
        """Run the installed banner as a login shell would and return its output."""
        result = self._run_artifact(method)
        return result.stdout if result.success else ""

    def cleanup(self) -> None:
        """Delete artifacts of previous installs, whatever the method."""
        logger.info("Cleaning up previous installations", stage="cleanup")
        for path in self.paths.artifact_paths():
            self.file_manager.remove_quietly(path)

    def install_dependencies(self, platform: PlatformInfo) -> Capabilities:
        """Install display dependencies; a failure only degrades rendering."""
        deps = self.config.deps
        logger.info("Installing dependencies", packages=deps.packages)

        commands = self.system.get_package_install_commands(
            platform.package_manager, deps.packages
        )
        for cmd in commands:
            result = self.executor.execute(cmd, check=False, timeout=deps.install_timeout)
            if not result.success:
                logger.debug(
                    "Package command failed", command=cmd, error=result.stderr.strip()
                )

        try:
            self._require_renderer()
            has_renderer = True
        except DependencyDegraded as e:
            logger.warning("Falling back to plain-text hostname", error=str(e))
            has_renderer = False

        capabilities = Capabilities(
            has_enhanced_renderer=has_renderer,
            has_calculator=self.executor.check_command_available(deps.calculator),
        )

        if not capabilities.has_calculator:
            logger.warning(
                f"{deps.calculator} is not available, load is computed with awk"
            )

        logger.info(
            "Dependencies installed",
            stage="deps_installed",
            renderer=capabilities.has_enhanced_renderer,
            calculator=capabilities.has_calculator,
        )
        return capabilities

    def _require_renderer(self) -> None:
        """Raise DependencyDegraded unless the hostname renderer is installed."""
        renderer = self.config.deps.renderer
        if not self.executor.check_command_available(renderer):
            raise DependencyDegraded(f"{renderer} is not available")

    def select_method(self, platform: PlatformInfo) -> IntegrationMethod:
        """Use update-motd.d on Debian when it exists, profile.d otherwise."""
        if platform.family == OSFamily.DEBIAN and self.paths.hook_dir.is_dir():
            return IntegrationMethod.HOOK_DIRECTORY
        return IntegrationMethod.LOGIN_PROFILE

    def artifact_path(self, method: IntegrationMethod) -> Path:
        """Canonical script location for a method."""
        if method == IntegrationMethod.HOOK_DIRECTORY:
            return self.paths.hook_script
        return self.paths.profile_script

    def _install_with(
        self, method: IntegrationMethod, capabilities: Capabilities
    ) -> None:
        """Write, wire and verify the banner for one method.

        Raises:
            MethodVerificationFailed: The installed script exited non-zero
        """
        path = self.artifact_path(method)
        script = render_banner_script(
            method,
            capabilities.has_enhanced_renderer,
            ssh_only=self.config.banner.ssh_only,
        )
        self.file_manager.write_executable(path, script)
        logger.info("Banner script written", stage="artifact_written", path=str(path))

        if method == IntegrationMethod.HOOK_DIRECTORY:
            self._wire_hook_directory()
            logger.info("Login wiring done", stage="wiring_done")

        self._suppress_static_banner()

        self._verify(method)
        logger.info("Banner verified", stage="verified", method=method.value)

    def _wire_hook_directory(self) -> None:
        """Create the regeneration trigger and hook it into SSH PAM."""
        trigger = self.paths.trigger_command
        if not trigger.exists():
            script = render_trigger_script(self.paths.hook_dir, self.paths.banner_cache)
            self.file_manager.write_executable(trigger, script)
            self._created_trigger = True
            logger.info("Created regeneration trigger", path=str(trigger))

        pam = self.paths.pam_config
        if not pam.exists():
            logger.warning("PAM config not found, skipping", path=str(pam))
            return

        self.file_manager.backup_once(pam, self.paths.pam_backup)
        self.file_manager.drop_lines(pam, self._is_motd_directive)
        self.file_manager.append_lines(pam, self.pam_directives())
        logger.info("Configured PAM", path=str(pam))

    def _unwire_hook_directory(self) -> None:
        """Undo update-motd.d wiring before falling back to profile.d."""
        self.file_manager.remove_quietly(self.paths.hook_script)

        if self._created_trigger:
            self.file_manager.remove_quietly(self.paths.trigger_command)
            self._created_trigger = False

        if self.file_manager.restore_backup(self.paths.pam_backup, self.paths.pam_config):
            logger.info("Restored PAM configuration", path=str(self.paths.pam_config))

    def pam_directives(self) -> List[str]:
        """Session lines that regenerate and display the banner at SSH login."""
        return [
            f"session optional pam_exec.so {self.paths.trigger_command}",
            f"session optional pam_motd.so motd={self.paths.banner_cache} noupdate",
        ]

    def _is_motd_directive(self, line: str) -> bool:
        return "pam_motd" in line or str(self.paths.trigger_command) in line

    def _suppress_static_banner(self) -> None:
        """Move the static /etc/motd aside so only the dynamic one shows."""
        if self.file_manager.move_aside(
            self.paths.static_banner, self.paths.static_banner_backup
        ):
            logger.info(
                "Disabled default MOTD",
                stage="banner_suppressed",
                backup=str(self.paths.static_banner_backup),
            )

    def _verify(self, method: IntegrationMethod) -> None:
        """Run the installed script once and check it exits cleanly.

        Raises:
            MethodVerificationFailed: Non-zero exit or timeout
        """
        result = self._run_artifact(method)
        if not result.success:
            raise MethodVerificationFailed(
                method.value, str(self.artifact_path(method)), result.stderr.strip()
            )

    def _run_artifact(self, method: IntegrationMethod) -> CommandResult:
        """Run the installed script; profile.d scripts need an interactive bash."""
        path = shlex.quote(str(self.artifact_path(method)))
        timeout = self.config.deps.verify_timeout
        if method == IntegrationMethod.HOOK_DIRECTORY:
            return self.executor.execute(path, check=False, timeout=timeout)
        return self.executor.execute(
            f"bash -i {path}",
            check=False,
            timeout=timeout,
            env={"SSH_CONNECTION": "test"},
        )

    def _restart_ssh_service(self) -> None:
        """Restart sshd so PAM changes apply; failures are ignored."""
        if not self.config.service.restart_ssh:
            return
        if not self.executor.check_command_available("systemctl"):
            return

        for unit in self.config.service.ssh_units:
            result = self.executor.execute(f"systemctl restart {unit}", check=False)
            if result.success:
                logger.info("Restarted SSH service", unit=unit)
                return
        logger.debug("SSH service restart failed", units=self.config.service.ssh_units)
