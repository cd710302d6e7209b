"""Custom exceptions for Dynamic MOTD."""


class MotdError(Exception):
    """Base exception for all installer errors."""

    pass


class ConfigurationError(MotdError):
    """Raised when configuration is invalid."""

    pass


class InsufficientPrivilegeError(MotdError, PermissionError):
    """Raised when the installer is not running as root."""

    pass


class UnsupportedPlatformError(MotdError):
    """Raised when the host OS is not recognized or not handled."""

    pass


class DependencyDegraded(MotdError):
    """Raised when the enhanced renderer could not be made available.

    Never fatal: the installer recovers by rendering the plain-text banner.
    """

    pass


class MethodVerificationFailed(MotdError):
    """Raised when a freshly written banner script exits non-zero."""

    def __init__(self, method: str, path: str, detail: str = "") -> None:
        self.method = method
        self.path = path
        self.detail = detail
        message = f"{method} verification failed for {path}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class CommandExecutionError(MotdError):
    """Raised when command execution fails."""

    pass
