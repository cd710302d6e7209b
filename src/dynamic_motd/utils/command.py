"""Command execution utilities."""

import os
import subprocess
from typing import Dict, Optional

from dynamic_motd.exceptions import CommandExecutionError
from dynamic_motd.types import CommandResult


class CommandExecutor:
    """Execute system commands with proper error handling."""

    def execute(
        self,
        cmd: str,
        check: bool = True,
        timeout: int = 30,
        env: Optional[Dict[str, str]] = None,
    ) -> CommandResult:
        """Execute a shell command.

        Args:
            cmd: Command to execute
            check: Whether to raise exception on failure
            timeout: Command timeout in seconds
            env: Extra environment variables layered over the current ones

        Returns:
            CommandResult with execution details

        Raises:
            CommandExecutionError: If command fails and check=True
        """
        run_env = None
        if env:
            run_env = {**os.environ, **env}

        try:
            result = subprocess.run(
                cmd,
                shell=True,
                capture_output=True,
                text=True,
                timeout=timeout,
                env=run_env,
                check=False,
            )

            cmd_result = CommandResult(
                success=result.returncode == 0,
                stdout=result.stdout,
                stderr=result.stderr,
                return_code=result.returncode,
            )

            if check and not cmd_result.success:
                raise CommandExecutionError(
                    f"Command failed: {cmd}\nError: {result.stderr}"
                )

            return cmd_result

        except subprocess.TimeoutExpired as e:
            error_msg = f"Command timed out after {timeout}s: {cmd}"
            if check:
                raise CommandExecutionError(error_msg) from e
            return CommandResult(False, "", error_msg, -1)

        except OSError as e:
            error_msg = f"Command execution failed: {cmd}\nError: {str(e)}"
            if check:
                raise CommandExecutionError(error_msg) from e
            return CommandResult(False, "", error_msg, -1)

    def check_command_available(self, command: str) -> bool:
        """Check if command is available on system."""
        result = self.execute(f"command -v {command}", check=False)
        return result.success
